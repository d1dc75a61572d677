"""Read and update products in a Volusion store."""

import asyncio
from collections import Counter
from collections.abc import Callable, Coroutine, Iterable
from typing import Any, Protocol, TypeVar

import structlog

from volusion_access.config import VolusionConfig
from volusion_access.errors import PaginationLimitError
from volusion_access.fetch.client import HttpTransport
from volusion_access.fetch.metrics import ApiMetrics
from volusion_access.fetch.retry import RetryExecutor
from volusion_access.observability.logging import store_context
from volusion_access.products.delay import ApiDelay
from volusion_access.products.endpoints import EndpointBuilder
from volusion_access.products.models import Page, ProductRecord
from volusion_access.products.serializer import decode_products, encode_products


logger = structlog.get_logger()

T = TypeVar("T")


class TransportProtocol(Protocol):
    """Protocol for the HTTP transport.

    Allows dependency injection of a fake transport for testing.
    """

    async def get(self, url: str) -> bytes:
        """Fetch a URL and return the body."""
        ...

    async def post(self, url: str, body: bytes) -> bytes:
        """Post a body to a URL and return the response body."""
        ...


class VolusionProductsService:
    """Product operations against one store.

    Every remote call runs under a retry policy (Get for reads, Submit for
    writes) and is followed by the store's mandatory post-call delay. Calls
    are issued one at a time; a service holds no state between operations
    apart from its configuration.

    Each operation has a coroutine form (``*_async``) and a blocking form
    that drives the coroutine with ``asyncio.run``. The blocking forms
    cannot be used from inside a running event loop.
    """

    def __init__(
        self,
        config: VolusionConfig,
        transport: TransportProtocol | None = None,
        get_executor: RetryExecutor | None = None,
        submit_executor: RetryExecutor | None = None,
        delay: ApiDelay | None = None,
    ) -> None:
        """Initialize the service.

        Args:
            config: Store connection settings.
            transport: HTTP transport. Defaults to HttpTransport built from config.
            get_executor: Retry executor for reads. Defaults to config.get_policy.
            submit_executor: Retry executor for writes. Defaults to
                config.submit_policy.
            delay: Post-call delay. Defaults to config.api_delay_seconds.
        """
        self._config = config
        self._endpoints = EndpointBuilder(config)
        self._transport = transport or HttpTransport(
            timeout_seconds=config.timeout_seconds,
            max_response_size_bytes=config.max_response_size_bytes,
            user_agent=config.user_agent,
        )
        self._get_executor = get_executor or RetryExecutor(config.get_policy)
        self._submit_executor = submit_executor or RetryExecutor(config.submit_policy)
        self._delay = delay or ApiDelay(config.api_delay_seconds)
        self._metrics = ApiMetrics.get_instance()
        self._log = logger.bind(component="products")

    # Reads

    def get_public_products(self) -> list[ProductRecord]:
        """Blocking form of get_public_products_async."""
        return _run_blocking(self.get_public_products_async)

    async def get_public_products_async(self) -> list[ProductRecord]:
        """Fetch the storefront product snapshot with a single call.

        Returns:
            Products in the order the store returned them, possibly empty.
        """
        with store_context(self._config.shop_url):
            return await self._get_public_products()

    async def _get_public_products(self) -> list[ProductRecord]:
        url = self._endpoints.public_products_url()
        page = await self._get_executor.execute(lambda: self._fetch_page(url))
        await self._delay.wait()

        products = list(page or [])
        self._metrics.record_page(len(products))
        self._log.info(
            "fetch_complete", operation="public_products", count=len(products)
        )
        return products

    def get_products(self) -> list[ProductRecord]:
        """Blocking form of get_products_async."""
        return _run_blocking(self.get_products_async)

    async def get_products_async(self) -> list[ProductRecord]:
        """Fetch the full catalog page by page.

        Requests the paged endpoint until it returns an empty or absent
        page. Records are accumulated in the order received, duplicates
        included.

        Returns:
            All products across every page.

        Raises:
            PaginationLimitError: If config.max_pages is set and the store
                returns more non-empty pages than that.
        """
        with store_context(self._config.shop_url):
            return await self._get_products()

    async def _get_products(self) -> list[ProductRecord]:
        url = self._endpoints.products_url()
        max_pages = self._config.max_pages
        log = self._log.bind(operation="products")

        products: list[ProductRecord] = []
        pages = 0
        while True:
            page = await self._get_executor.execute(lambda: self._fetch_page(url))
            await self._delay.wait()

            if not page:
                break

            pages += 1
            if max_pages is not None and pages > max_pages:
                log.warning("pagination_limit_reached", max_pages=max_pages)
                raise PaginationLimitError(max_pages)

            products.extend(page)
            self._metrics.record_page(len(page))
            log.debug("page_fetched", page=pages, count=len(page), total=len(products))

        log.info("fetch_complete", pages=pages, count=len(products))
        return products

    async def _fetch_page(self, url: str) -> Page | None:
        body = await self._transport.get(url)
        return decode_products(body)

    # Updates

    def update_products(self, products: Iterable[ProductRecord]) -> None:
        """Blocking form of update_products_async."""
        _run_blocking(lambda: self.update_products_async(products))

    async def update_products_async(self, products: Iterable[ProductRecord]) -> None:
        """Submit a batch of product changes in one call.

        The store applies updates keyed by SKU. Records are sent as given;
        an empty batch is still submitted.

        Args:
            products: Records to write, each identified by its SKU.
        """
        with store_context(self._config.shop_url):
            await self._update_products(list(products))

    async def _update_products(self, records: list[ProductRecord]) -> None:
        duplicates = sorted(
            sku for sku, n in Counter(r.sku for r in records).items() if n > 1
        )
        if duplicates:
            self._log.warning("duplicate_sku_in_batch", skus=duplicates)

        url = self._endpoints.update_products_url()
        body = encode_products(records)

        await self._submit_executor.execute(lambda: self._transport.post(url, body))
        await self._delay.wait()

        self._metrics.record_submission(len(records))
        self._log.info("products_updated", count=len(records))


def _run_blocking(operation: Callable[[], Coroutine[Any, Any, T]]) -> T:
    """Run a coroutine to completion on a fresh event loop.

    The coroutine is only created once it is known no loop is running, so a
    refused call leaves nothing unawaited.

    Raises:
        RuntimeError: If called from inside a running event loop.
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(operation())

    msg = "Blocking call made inside a running event loop; use the *_async form"
    raise RuntimeError(msg)
