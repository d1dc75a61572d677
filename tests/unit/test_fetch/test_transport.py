"""Unit tests for the async HTTP transport."""

import httpx
import pytest
from structlog.testing import capture_logs

from volusion_access.errors import TransportError
from volusion_access.fetch.client import HttpTransport, parse_retry_after
from volusion_access.fetch.metrics import ApiMetrics
from volusion_access.fetch.models import FetchErrorClass


URL = "https://shop.example.com/net/WebService.aspx?Login=a&EncryptedPassword=b"
SECRET_URL = (
    "https://shop.example.com/net/WebService.aspx"
    "?Login=owner%40shop.test&EncryptedPassword=s3cr3t-pass"
)


def make_transport(handler, **kwargs) -> HttpTransport:  # type: ignore[no-untyped-def]
    """Create a transport whose requests are answered by handler."""
    return HttpTransport(transport=httpx.MockTransport(handler), **kwargs)


@pytest.fixture(autouse=True)
def reset_metrics() -> None:
    """Start every test with fresh counters."""
    ApiMetrics.reset()


class TestGet:
    """Tests for HttpTransport.get."""

    @pytest.mark.asyncio
    async def test_returns_body(self) -> None:
        """Test that a 200 response body is returned."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, content=b"<xmldata />")

        body = await make_transport(handler, user_agent="test-agent/1.0").get(URL)

        assert body == b"<xmldata />"
        assert seen[0].method == "GET"
        assert seen[0].headers["User-Agent"] == "test-agent/1.0"
        assert seen[0].headers["Accept"] == "application/xml"
        assert ApiMetrics.get_instance().http_requests_total == {200: 1}

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("status_code", "error_class"),
        [
            (400, FetchErrorClass.HTTP_4XX),
            (401, FetchErrorClass.AUTH_FAILED),
            (403, FetchErrorClass.AUTH_FAILED),
            (404, FetchErrorClass.HTTP_4XX),
            (429, FetchErrorClass.RATE_LIMITED),
            (500, FetchErrorClass.HTTP_5XX),
            (503, FetchErrorClass.HTTP_5XX),
        ],
    )
    async def test_classifies_error_status(
        self, status_code: int, error_class: FetchErrorClass
    ) -> None:
        """Test that error statuses raise classified TransportErrors."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(status_code, content=b"nope")

        with pytest.raises(TransportError) as exc_info:
            await make_transport(handler).get(URL)

        assert exc_info.value.error_class == error_class
        assert exc_info.value.error.status_code == status_code

    @pytest.mark.asyncio
    async def test_rate_limit_carries_retry_after(self) -> None:
        """Test that Retry-After is parsed from a 429 response."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(429, headers={"Retry-After": "7"})

        with pytest.raises(TransportError) as exc_info:
            await make_transport(handler).get(URL)

        assert exc_info.value.error.retry_after == 7
        assert exc_info.value.is_transient is True

    @pytest.mark.asyncio
    async def test_timeout_is_transient(self) -> None:
        """Test that timeouts map to NETWORK_TIMEOUT."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(TransportError) as exc_info:
            await make_transport(handler).get(URL)

        assert exc_info.value.error_class == FetchErrorClass.NETWORK_TIMEOUT
        assert exc_info.value.is_transient is True

    @pytest.mark.asyncio
    async def test_connection_failure_is_transient(self) -> None:
        """Test that refused connections map to CONNECTION_ERROR."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("Connection refused", request=request)

        with pytest.raises(TransportError) as exc_info:
            await make_transport(handler).get(URL)

        assert exc_info.value.error_class == FetchErrorClass.CONNECTION_ERROR

    @pytest.mark.asyncio
    async def test_oversized_response_rejected(self) -> None:
        """Test that bodies over the limit are refused and not retried."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=b"x" * 4096)

        transport = make_transport(handler, max_response_size_bytes=1024)

        with pytest.raises(TransportError) as exc_info:
            await transport.get(URL)

        assert exc_info.value.error_class == FetchErrorClass.RESPONSE_SIZE_EXCEEDED
        assert exc_info.value.is_transient is False

    @pytest.mark.asyncio
    async def test_undecodable_body_is_unknown(self) -> None:
        """Test that a body that fails content decoding is wrapped."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200, headers={"Content-Encoding": "gzip"}, content=b"not gzip"
            )

        with pytest.raises(TransportError) as exc_info:
            await make_transport(handler).get(URL)

        assert exc_info.value.error_class == FetchErrorClass.UNKNOWN
        assert exc_info.value.is_transient is False
        assert isinstance(exc_info.value.__cause__, httpx.DecodingError)

    @pytest.mark.asyncio
    async def test_redirect_loop_is_unknown(self) -> None:
        """Test that an endless redirect chain is wrapped."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(302, headers={"Location": URL})

        with pytest.raises(TransportError) as exc_info:
            await make_transport(handler).get(URL)

        assert exc_info.value.error_class == FetchErrorClass.UNKNOWN
        assert isinstance(exc_info.value.__cause__, httpx.TooManyRedirects)

    @pytest.mark.asyncio
    async def test_malformed_content_length_ignored(self) -> None:
        """Test that a garbage Content-Length falls back to the streamed size."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200, headers={"Content-Length": "abc"}, content=b"<xmldata />"
            )

        body = await make_transport(handler).get(URL)

        assert body == b"<xmldata />"


class TestRequestLogging:
    """Tests for credential redaction in request log events."""

    @pytest.mark.asyncio
    async def test_request_complete_redacts_credentials(self) -> None:
        """Test that the logged URL hides Login and EncryptedPassword."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=b"<xmldata />")

        with capture_logs() as logs:
            await make_transport(handler).get(SECRET_URL)

        (event,) = [e for e in logs if e["event"] == "request_complete"]
        assert "Login=[REDACTED]" in event["url"]
        assert "EncryptedPassword=[REDACTED]" in event["url"]
        assert "s3cr3t-pass" not in repr(logs)
        assert "owner@shop.test" not in repr(logs)

    @pytest.mark.asyncio
    async def test_request_failed_redacts_credentials(self) -> None:
        """Test that failed requests log the redacted URL too."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("Connection refused", request=request)

        with capture_logs() as logs, pytest.raises(TransportError):
            await make_transport(handler).get(SECRET_URL)

        (event,) = [e for e in logs if e["event"] == "request_failed"]
        assert "EncryptedPassword=[REDACTED]" in event["url"]
        assert "s3cr3t-pass" not in repr(logs)


class TestPost:
    """Tests for HttpTransport.post."""

    @pytest.mark.asyncio
    async def test_sends_xml_body(self) -> None:
        """Test that the document is posted with an XML content type."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, content=b"<ReturnResult />")

        body = await make_transport(handler).post(URL, b"<xmldata />")

        assert body == b"<ReturnResult />"
        assert seen[0].method == "POST"
        assert seen[0].content == b"<xmldata />"
        assert seen[0].headers["Content-Type"].startswith("application/xml")


class TestParseRetryAfter:
    """Tests for Retry-After parsing."""

    def test_seconds(self) -> None:
        """Test integer seconds."""
        assert parse_retry_after("120") == 120

    def test_missing(self) -> None:
        """Test absent header."""
        assert parse_retry_after(None) is None
        assert parse_retry_after("") is None

    def test_past_http_date(self) -> None:
        """Test that a date in the past means no wait."""
        assert parse_retry_after("Mon, 01 Jan 2001 00:00:00 GMT") == 0

    def test_garbage(self) -> None:
        """Test unparseable values."""
        assert parse_retry_after("soon") is None
