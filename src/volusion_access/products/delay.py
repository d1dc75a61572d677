"""Fixed pause required by the store after every API call."""

import asyncio
from collections.abc import Awaitable, Callable

import structlog

from volusion_access.fetch.metrics import ApiMetrics


logger = structlog.get_logger()


class ApiDelay:
    """Post-call delay to stay within the store's call-frequency limit.

    Unlike a token bucket, the pause is unconditional: it follows every
    successful call whether or not the next call comes soon.
    """

    def __init__(
        self,
        delay_seconds: float,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """Initialize the delay.

        Args:
            delay_seconds: Length of each pause.
            sleep: Coroutine used to wait.
        """
        self._delay_seconds = delay_seconds
        self._sleep = sleep
        self._metrics = ApiMetrics.get_instance()

    @property
    def delay_seconds(self) -> float:
        """Length of each pause in seconds."""
        return self._delay_seconds

    async def wait(self) -> None:
        """Pause for the configured duration."""
        self._metrics.record_delay()
        logger.debug("api_delay", component="delay", seconds=self._delay_seconds)
        await self._sleep(self._delay_seconds)
