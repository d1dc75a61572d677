"""Metrics collection for Volusion API calls."""

from dataclasses import dataclass, field
from typing import ClassVar

from volusion_access.fetch.models import FetchErrorClass


@dataclass
class ApiMetrics:
    """Metrics for Volusion API operations.

    Singleton class that tracks request counts, retries, failures,
    post-call delays, and pages read.
    """

    http_requests_total: dict[int, int] = field(default_factory=dict)
    http_retry_total: int = 0
    http_failures_total: dict[str, int] = field(default_factory=dict)
    http_bytes_total: int = 0
    http_duration_ms_total: float = 0.0
    http_request_count: int = 0
    api_delays_total: int = 0
    pages_fetched_total: int = 0
    products_fetched_total: int = 0
    products_submitted_total: int = 0

    _instance: ClassVar["ApiMetrics | None"] = None

    @classmethod
    def get_instance(cls) -> "ApiMetrics":
        """Get singleton metrics instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset metrics (primarily for testing)."""
        cls._instance = None

    def record_request(self, status_code: int, bytes_received: int) -> None:
        """Record a completed HTTP request.

        Args:
            status_code: HTTP status code.
            bytes_received: Number of bytes received.
        """
        self.http_requests_total[status_code] = (
            self.http_requests_total.get(status_code, 0) + 1
        )
        self.http_bytes_total += bytes_received
        self.http_request_count += 1

    def record_retry(self) -> None:
        """Record a retry attempt."""
        self.http_retry_total += 1

    def record_failure(self, error_class: FetchErrorClass) -> None:
        """Record a terminal call failure.

        Args:
            error_class: Classification of the failure.
        """
        key = error_class.value
        self.http_failures_total[key] = self.http_failures_total.get(key, 0) + 1

    def record_duration(self, duration_ms: float) -> None:
        """Record request duration."""
        self.http_duration_ms_total += duration_ms

    def record_delay(self) -> None:
        """Record an applied post-call delay."""
        self.api_delays_total += 1

    def record_page(self, product_count: int) -> None:
        """Record a page of products read from the store."""
        self.pages_fetched_total += 1
        self.products_fetched_total += product_count

    def record_submission(self, product_count: int) -> None:
        """Record a batch of products written to the store."""
        self.products_submitted_total += product_count

    def to_dict(self) -> dict[str, int | float | dict[str, int] | dict[int, int]]:
        """Convert metrics to dictionary.

        Returns:
            Dictionary of metric name to value.
        """
        return {
            "http_requests_total": dict(self.http_requests_total),
            "http_retry_total": self.http_retry_total,
            "http_failures_total": dict(self.http_failures_total),
            "http_bytes_total": self.http_bytes_total,
            "http_duration_ms_total": self.http_duration_ms_total,
            "http_request_count": self.http_request_count,
            "api_delays_total": self.api_delays_total,
            "pages_fetched_total": self.pages_fetched_total,
            "products_fetched_total": self.products_fetched_total,
            "products_submitted_total": self.products_submitted_total,
        }

    @property
    def avg_duration_ms(self) -> float:
        """Calculate average request duration.

        Returns:
            Average duration in milliseconds.
        """
        if self.http_request_count == 0:
            return 0.0
        return self.http_duration_ms_total / self.http_request_count
