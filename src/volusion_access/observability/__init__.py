"""Observability module for logging."""

from volusion_access.observability.logging import (
    configure_logging,
    redact_urls,
    store_context,
)


__all__ = [
    "configure_logging",
    "redact_urls",
    "store_context",
]
