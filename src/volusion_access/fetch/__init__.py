"""HTTP transport layer with retries and failure classification.

This module provides the store-facing plumbing:
- Single-attempt async transport with typed failures
- Configurable retry policies with exponential backoff
- Maximum response size enforcement
- Credential redaction for logging
- Metrics collection for observability
"""

from volusion_access.fetch.client import HttpTransport, parse_retry_after
from volusion_access.fetch.constants import (
    DEFAULT_CHUNK_SIZE,
    DEFAULT_MAX_RESPONSE_SIZE_BYTES,
    DEFAULT_TIMEOUT_SECONDS,
    HTTP_STATUS_OK_MAX,
    HTTP_STATUS_OK_MIN,
    HTTP_STATUS_TOO_MANY_REQUESTS,
    MAX_RETRY_AFTER_SECONDS,
)
from volusion_access.fetch.metrics import ApiMetrics
from volusion_access.fetch.models import (
    GET_POLICY,
    SUBMIT_POLICY,
    FetchError,
    FetchErrorClass,
    RetryPolicy,
)
from volusion_access.fetch.redact import redact_headers, redact_url_credentials
from volusion_access.fetch.retry import RetryExecutor


__all__ = [
    # Transport
    "HttpTransport",
    "parse_retry_after",
    # Retry
    "RetryExecutor",
    "RetryPolicy",
    "GET_POLICY",
    "SUBMIT_POLICY",
    # Models
    "FetchError",
    "FetchErrorClass",
    # Constants
    "HTTP_STATUS_OK_MIN",
    "HTTP_STATUS_OK_MAX",
    "HTTP_STATUS_TOO_MANY_REQUESTS",
    "DEFAULT_MAX_RESPONSE_SIZE_BYTES",
    "DEFAULT_CHUNK_SIZE",
    "DEFAULT_TIMEOUT_SECONDS",
    "MAX_RETRY_AFTER_SECONDS",
    # Metrics
    "ApiMetrics",
    # Redaction
    "redact_headers",
    "redact_url_credentials",
]
