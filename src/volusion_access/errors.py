"""Exception types raised by the Volusion client."""

from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from volusion_access.fetch.models import FetchError, FetchErrorClass


class VolusionError(Exception):
    """Base exception for all client errors."""


class TransportError(VolusionError):
    """A single remote call failed.

    Attributes:
        error: Classified details of the failure.
    """

    def __init__(self, error: "FetchError") -> None:
        super().__init__(error.message)
        self.error = error

    @property
    def is_transient(self) -> bool:
        """Check if the failure may succeed on a later attempt."""
        return self.error.is_transient

    @property
    def error_class(self) -> "FetchErrorClass":
        """Shortcut to the error classification."""
        return self.error.error_class


class DeserializationError(VolusionError):
    """Response body could not be parsed into product records.

    Attributes:
        line: Line number where parsing failed, when known.
        column: Column number where parsing failed, when known.
    """

    def __init__(
        self,
        message: str,
        line: int | None = None,
        column: int | None = None,
    ) -> None:
        super().__init__(message)
        self.line = line
        self.column = column


class RetryExhaustedError(VolusionError):
    """All attempts allowed by a retry policy failed.

    Attributes:
        policy_name: Name of the policy that gave up.
        attempts: Number of attempts made.
        last_error: The final transport failure.
    """

    def __init__(
        self, policy_name: str, attempts: int, last_error: TransportError
    ) -> None:
        super().__init__(
            f"{policy_name} policy gave up after {attempts} attempts: {last_error}"
        )
        self.policy_name = policy_name
        self.attempts = attempts
        self.last_error = last_error


class PaginationLimitError(VolusionError):
    """Paged endpoint kept returning records past the configured page bound."""

    def __init__(self, max_pages: int) -> None:
        super().__init__(
            f"Paged endpoint returned more than {max_pages} non-empty pages"
        )
        self.max_pages = max_pages
