"""Retry execution for failable store calls."""

import asyncio
from collections.abc import Awaitable, Callable
from typing import TypeVar

import structlog

from volusion_access.errors import RetryExhaustedError, TransportError
from volusion_access.fetch.constants import MAX_RETRY_AFTER_SECONDS
from volusion_access.fetch.metrics import ApiMetrics
from volusion_access.fetch.models import FetchErrorClass, RetryPolicy


logger = structlog.get_logger()

T = TypeVar("T")

Sleeper = Callable[[float], Awaitable[None]]


class RetryExecutor:
    """Runs an operation under a RetryPolicy.

    Transient TransportErrors are retried with exponential backoff until
    the policy's budget is spent, after which RetryExhaustedError is raised.
    Any other exception propagates on the first occurrence.
    """

    def __init__(self, policy: RetryPolicy, sleep: Sleeper = asyncio.sleep) -> None:
        """Initialize the executor.

        Args:
            policy: Retry budget and backoff shape.
            sleep: Coroutine used to wait between attempts.
        """
        self._policy = policy
        self._sleep = sleep
        self._metrics = ApiMetrics.get_instance()

    @property
    def policy(self) -> RetryPolicy:
        """The policy this executor applies."""
        return self._policy

    async def execute(self, operation: Callable[[], Awaitable[T]]) -> T:
        """Run an operation, retrying transient failures.

        Args:
            operation: Zero-argument callable returning a fresh awaitable
                on each invocation.

        Returns:
            The operation's result from the first successful attempt.

        Raises:
            RetryExhaustedError: If every allowed attempt failed transiently.
            TransportError: On the first non-transient transport failure.
        """
        policy = self._policy
        log = logger.bind(component="retry", policy=policy.name)

        for attempt in range(policy.max_attempts):
            if attempt > 0:
                self._metrics.record_retry()

            try:
                return await operation()
            except TransportError as e:
                if not policy.should_retry(e.error, attempt):
                    if e.is_transient:
                        self._metrics.record_failure(e.error_class)
                        log.warning(
                            "retry_exhausted",
                            attempts=attempt + 1,
                            error_class=e.error_class.value,
                        )
                        raise RetryExhaustedError(policy.name, attempt + 1, e) from e
                    self._metrics.record_failure(e.error_class)
                    raise

                delay_seconds = self._delay_seconds(e, attempt)
                log.debug(
                    "retry_attempt",
                    attempt=attempt + 1,
                    delay_seconds=delay_seconds,
                    max_retries=policy.max_retries,
                    error_class=e.error_class.value,
                )
                await self._sleep(delay_seconds)

        # max_attempts is always >= 1, so the loop returns or raises
        msg = "retry loop exited without a result"
        raise AssertionError(msg)

    def _delay_seconds(self, error: TransportError, attempt: int) -> float:
        """Backoff before the next attempt, honouring Retry-After on 429."""
        delay = self._policy.get_delay_ms(attempt) / 1000.0
        if error.error_class == FetchErrorClass.RATE_LIMITED:
            retry_after = error.error.retry_after
            if retry_after and retry_after > 0:
                delay = max(delay, float(min(retry_after, MAX_RETRY_AFTER_SECONDS)))
        return delay
