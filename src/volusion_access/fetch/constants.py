"""HTTP constants for the Volusion transport layer.

Centralizes all HTTP-related constants to avoid duplication across modules.
"""

# HTTP Status Code Ranges
HTTP_STATUS_OK_MIN = 200
HTTP_STATUS_OK_MAX = 300
HTTP_STATUS_BAD_REQUEST = 400
HTTP_STATUS_UNAUTHORIZED = 401
HTTP_STATUS_FORBIDDEN = 403
HTTP_STATUS_TOO_MANY_REQUESTS = 429
HTTP_STATUS_SERVER_ERROR_MIN = 500
HTTP_STATUS_SERVER_ERROR_MAX = 600

# Response Size Limits
DEFAULT_MAX_RESPONSE_SIZE_BYTES = 20 * 1024 * 1024  # 20 MB

# Chunk size for streaming reads
DEFAULT_CHUNK_SIZE = 8192

# Maximum retry delay cap for rate limiting (seconds)
MAX_RETRY_AFTER_SECONDS = 60

# Default request timeout (seconds)
DEFAULT_TIMEOUT_SECONDS = 60.0

XML_CONTENT_TYPE = "application/xml; charset=utf-8"
