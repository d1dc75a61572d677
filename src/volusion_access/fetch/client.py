"""Async HTTP transport for the Volusion web service."""

import time
from datetime import UTC, datetime
from email.utils import parsedate_to_datetime
from io import BytesIO

import httpx
import structlog

from volusion_access.errors import TransportError
from volusion_access.fetch.constants import (
    DEFAULT_CHUNK_SIZE,
    DEFAULT_MAX_RESPONSE_SIZE_BYTES,
    DEFAULT_TIMEOUT_SECONDS,
    HTTP_STATUS_BAD_REQUEST,
    HTTP_STATUS_FORBIDDEN,
    HTTP_STATUS_OK_MAX,
    HTTP_STATUS_OK_MIN,
    HTTP_STATUS_SERVER_ERROR_MAX,
    HTTP_STATUS_SERVER_ERROR_MIN,
    HTTP_STATUS_TOO_MANY_REQUESTS,
    HTTP_STATUS_UNAUTHORIZED,
    XML_CONTENT_TYPE,
)
from volusion_access.fetch.metrics import ApiMetrics
from volusion_access.fetch.models import FetchError, FetchErrorClass
from volusion_access.fetch.redact import redact_headers, redact_url_credentials


logger = structlog.get_logger()


class HttpTransport:
    """Single-attempt HTTP client for store requests.

    Performs exactly one GET or POST per call and raises TransportError
    with a classified FetchError on any failure. Retrying is left to the
    caller's retry policy.

    A fresh httpx.AsyncClient is opened per request, so the transport can
    be shared by coroutines running on different event loops.
    """

    def __init__(
        self,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        max_response_size_bytes: int = DEFAULT_MAX_RESPONSE_SIZE_BYTES,
        user_agent: str = "volusion-access/1.0",
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the transport.

        Args:
            timeout_seconds: Per-request timeout.
            max_response_size_bytes: Largest body accepted before aborting.
            user_agent: User-Agent header value.
            transport: Optional httpx transport, used to stub the network.
        """
        self._timeout = timeout_seconds
        self._max_size = max_response_size_bytes
        self._user_agent = user_agent
        self._transport = transport
        self._metrics = ApiMetrics.get_instance()
        self._log = logger.bind(component="transport")

    async def get(self, url: str) -> bytes:
        """Issue a GET request and return the response body.

        Args:
            url: Fully-qualified endpoint URL.

        Returns:
            Raw response body.

        Raises:
            TransportError: If the request fails or returns a non-2xx status.
        """
        return await self._send("GET", url, headers={"Accept": "application/xml"})

    async def post(self, url: str, body: bytes) -> bytes:
        """Issue a POST request with an XML body.

        Args:
            url: Fully-qualified endpoint URL.
            body: Serialized XML document.

        Returns:
            Raw response body.

        Raises:
            TransportError: If the request fails or returns a non-2xx status.
        """
        return await self._send(
            "POST",
            url,
            headers={"Content-Type": XML_CONTENT_TYPE},
            content=body,
        )

    async def _send(
        self,
        method: str,
        url: str,
        headers: dict[str, str],
        content: bytes | None = None,
    ) -> bytes:
        start_time_ns = time.perf_counter_ns()
        headers = {"User-Agent": self._user_agent, **headers}
        log = self._log.bind(
            method=method,
            url=redact_url_credentials(url),
            headers=redact_headers(headers),
        )

        try:
            async with httpx.AsyncClient(
                timeout=self._timeout,
                follow_redirects=True,
                transport=self._transport,
            ) as client:
                async with client.stream(
                    method, url, headers=headers, content=content
                ) as response:
                    body = await self._read_body_with_limit(response)
        except httpx.TimeoutException as e:
            raise self._failure(
                log, FetchErrorClass.NETWORK_TIMEOUT, f"Request timed out: {e}"
            ) from e
        except httpx.ConnectError as e:
            if "CERTIFICATE_VERIFY_FAILED" in str(e) or "SSL" in str(e):
                raise self._failure(
                    log, FetchErrorClass.SSL_ERROR, f"SSL error: {e}"
                ) from e
            raise self._failure(
                log, FetchErrorClass.CONNECTION_ERROR, f"Connection failed: {e}"
            ) from e
        except httpx.TransportError as e:
            raise self._failure(
                log, FetchErrorClass.CONNECTION_ERROR, f"Transport failure: {e}"
            ) from e
        except httpx.HTTPError as e:
            raise self._failure(
                log, FetchErrorClass.UNKNOWN, f"HTTP error: {e}"
            ) from e

        duration_ms = (time.perf_counter_ns() - start_time_ns) / 1_000_000
        self._metrics.record_request(response.status_code, len(body))
        self._metrics.record_duration(duration_ms)

        http_error = self._classify_http_error(response.status_code, response.headers)
        log.info(
            "request_complete",
            status_code=response.status_code,
            bytes=len(body),
            duration_ms=round(duration_ms, 2),
            error_class=http_error.error_class.value if http_error else None,
        )
        if http_error is not None:
            raise TransportError(http_error)

        return body

    def _failure(
        self,
        log: structlog.stdlib.BoundLogger,
        error_class: FetchErrorClass,
        message: str,
    ) -> TransportError:
        log.warning("request_failed", error_class=error_class.value, message=message)
        return TransportError(FetchError(error_class=error_class, message=message))

    async def _read_body_with_limit(self, response: httpx.Response) -> bytes:
        """Read response body with size limit.

        Args:
            response: Streaming HTTP response.

        Returns:
            Response body bytes.

        Raises:
            TransportError: If the size limit is exceeded.
        """
        content_length = _declared_length(response.headers)
        if content_length is not None and content_length > self._max_size:
            raise TransportError(
                FetchError(
                    error_class=FetchErrorClass.RESPONSE_SIZE_EXCEEDED,
                    message=(
                        f"Response size {content_length} exceeds limit "
                        f"{self._max_size}"
                    ),
                    status_code=response.status_code,
                )
            )

        buffer = BytesIO()
        total_read = 0
        async for chunk in response.aiter_bytes(chunk_size=DEFAULT_CHUNK_SIZE):
            total_read += len(chunk)
            if total_read > self._max_size:
                raise TransportError(
                    FetchError(
                        error_class=FetchErrorClass.RESPONSE_SIZE_EXCEEDED,
                        message=(
                            f"Response size exceeded limit of {self._max_size} "
                            f"bytes (read {total_read} bytes)"
                        ),
                        status_code=response.status_code,
                    )
                )
            buffer.write(chunk)

        return buffer.getvalue()

    def _classify_http_error(
        self,
        status_code: int,
        headers: httpx.Headers,
    ) -> FetchError | None:
        """Classify HTTP status code as error.

        Args:
            status_code: HTTP status code.
            headers: Response headers.

        Returns:
            FetchError if status indicates error, None otherwise.
        """
        if HTTP_STATUS_OK_MIN <= status_code < HTTP_STATUS_OK_MAX:
            return None

        if status_code == HTTP_STATUS_TOO_MANY_REQUESTS:
            return FetchError(
                error_class=FetchErrorClass.RATE_LIMITED,
                message="Rate limited (429 Too Many Requests)",
                status_code=status_code,
                retry_after=parse_retry_after(headers.get("retry-after")),
            )

        if status_code in (HTTP_STATUS_UNAUTHORIZED, HTTP_STATUS_FORBIDDEN):
            return FetchError(
                error_class=FetchErrorClass.AUTH_FAILED,
                message=f"Store rejected credentials ({status_code})",
                status_code=status_code,
            )

        if HTTP_STATUS_BAD_REQUEST <= status_code < HTTP_STATUS_SERVER_ERROR_MIN:
            return FetchError(
                error_class=FetchErrorClass.HTTP_4XX,
                message=f"Client error ({status_code})",
                status_code=status_code,
            )

        if HTTP_STATUS_SERVER_ERROR_MIN <= status_code < HTTP_STATUS_SERVER_ERROR_MAX:
            return FetchError(
                error_class=FetchErrorClass.HTTP_5XX,
                message=f"Server error ({status_code})",
                status_code=status_code,
            )

        return FetchError(
            error_class=FetchErrorClass.UNKNOWN,
            message=f"Unexpected status ({status_code})",
            status_code=status_code,
        )


def _declared_length(headers: httpx.Headers) -> int | None:
    try:
        return int(headers["content-length"])
    except (KeyError, ValueError):
        return None


def parse_retry_after(value: str | None) -> int | None:
    """Parse Retry-After header value.

    Args:
        value: Header value (seconds or HTTP date).

    Returns:
        Seconds to wait, or None if not parseable.
    """
    if not value:
        return None

    try:
        return int(value)
    except ValueError:
        pass

    try:
        dt = parsedate_to_datetime(value)
        delta = dt - datetime.now(UTC)
        return max(0, int(delta.total_seconds()))
    except (ValueError, TypeError):
        pass

    return None
