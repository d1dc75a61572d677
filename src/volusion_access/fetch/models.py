"""Data models for the Volusion transport and retry layer."""

import random
from enum import Enum
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field


class FetchErrorClass(str, Enum):
    """Classification of transport errors for metrics and retry decisions.

    - NETWORK_TIMEOUT: Request timed out
    - CONNECTION_ERROR: Could not establish connection
    - RESPONSE_SIZE_EXCEEDED: Response exceeded max size limit
    - AUTH_FAILED: 401/403, credentials rejected by the store
    - HTTP_4XX: Non-retryable 4xx client error (except 429)
    - HTTP_5XX: Retryable 5xx server error
    - RATE_LIMITED: 429 Too Many Requests
    - SSL_ERROR: SSL/TLS certificate or handshake error
    - UNKNOWN: Unclassified error
    """

    NETWORK_TIMEOUT = "NETWORK_TIMEOUT"
    CONNECTION_ERROR = "CONNECTION_ERROR"
    RESPONSE_SIZE_EXCEEDED = "RESPONSE_SIZE_EXCEEDED"
    AUTH_FAILED = "AUTH_FAILED"
    HTTP_4XX = "HTTP_4XX"
    HTTP_5XX = "HTTP_5XX"
    RATE_LIMITED = "RATE_LIMITED"
    SSL_ERROR = "SSL_ERROR"
    UNKNOWN = "UNKNOWN"


TRANSIENT_ERROR_CLASSES = frozenset(
    {
        FetchErrorClass.NETWORK_TIMEOUT,
        FetchErrorClass.CONNECTION_ERROR,
        FetchErrorClass.HTTP_5XX,
        FetchErrorClass.RATE_LIMITED,
    }
)


class FetchError(BaseModel):
    """Typed error from a single remote call.

    Provides structured information about what went wrong during a call,
    enabling proper retry decisions and error reporting.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    error_class: FetchErrorClass = Field(description="Classification of the error")
    message: Annotated[str, Field(min_length=1, description="Human-readable message")]
    status_code: int | None = Field(
        default=None, description="HTTP status code if available"
    )
    retry_after: int | None = Field(
        default=None, description="Retry-After seconds (for 429)"
    )

    @property
    def is_transient(self) -> bool:
        """Check if the error is worth retrying."""
        return self.error_class in TRANSIENT_ERROR_CLASSES


class RetryPolicy(BaseModel):
    """Configuration for retry behavior.

    Controls how many times to retry and the backoff strategy.
    Uses exponential backoff: delay = base_delay_ms * (exponential_base ^ attempt)
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: Annotated[str, Field(min_length=1)] = "default"
    max_retries: Annotated[int, Field(ge=0, le=50)] = 3
    base_delay_ms: Annotated[int, Field(ge=0, le=60000)] = 1000
    max_delay_ms: Annotated[int, Field(ge=0, le=300000)] = 30000
    exponential_base: Annotated[float, Field(ge=1.0, le=5.0)] = 2.0
    jitter_factor: Annotated[float, Field(ge=0.0, le=1.0)] = 0.1

    @property
    def max_attempts(self) -> int:
        """Total number of attempts, the first call included."""
        return self.max_retries + 1

    def should_retry(self, error: FetchError, attempt: int) -> bool:
        """Determine if a call should be retried.

        Args:
            error: The error that occurred.
            attempt: Current attempt number (0-indexed).

        Returns:
            True if the call should be retried.
        """
        if attempt >= self.max_retries:
            return False
        return error.is_transient

    def get_delay_ms(self, attempt: int) -> int:
        """Calculate delay before the next retry attempt.

        Args:
            attempt: Current attempt number (0-indexed).

        Returns:
            Delay in milliseconds.
        """
        delay = self.base_delay_ms * (self.exponential_base**attempt)
        delay = min(delay, self.max_delay_ms)

        # Add jitter to prevent thundering herd
        jitter = delay * self.jitter_factor * random.random()  # noqa: S311
        return int(delay + jitter)


# Reads are cheap to repeat.
GET_POLICY = RetryPolicy(name="get", max_retries=5, base_delay_ms=500)

# Updates are keyed by SKU and safe to resend, but each one rewrites the catalog.
SUBMIT_POLICY = RetryPolicy(name="submit", max_retries=3, base_delay_ms=1000)
