"""Configuration model for a Volusion store connection."""

from typing import Annotated
from urllib.parse import urlsplit

from pydantic import BaseModel, ConfigDict, Field, field_validator

from volusion_access.fetch.constants import (
    DEFAULT_MAX_RESPONSE_SIZE_BYTES,
    DEFAULT_TIMEOUT_SECONDS,
)
from volusion_access.fetch.models import GET_POLICY, SUBMIT_POLICY, RetryPolicy


class VolusionConfig(BaseModel):
    """Connection settings for one Volusion store.

    Read-only after construction; shared by every call a service makes.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    shop_url: Annotated[
        str,
        Field(min_length=1, description="Store base URL"),
    ]
    login: Annotated[str, Field(min_length=1, description="API user e-mail")]
    encrypted_password: Annotated[
        str, Field(min_length=1, description="Encrypted password from the API page")
    ]
    api_delay_seconds: Annotated[float, Field(ge=0.0, le=60.0)] = 1.0
    timeout_seconds: Annotated[float, Field(ge=1.0, le=600.0)] = DEFAULT_TIMEOUT_SECONDS
    max_response_size_bytes: Annotated[int, Field(ge=1024, le=500 * 1024 * 1024)] = (
        DEFAULT_MAX_RESPONSE_SIZE_BYTES
    )
    user_agent: Annotated[str, Field(min_length=1, max_length=500)] = (
        "volusion-access/1.0"
    )
    max_pages: Annotated[int, Field(ge=1)] | None = Field(
        default=None,
        description="Abort paged reads past this many non-empty pages",
    )
    get_policy: RetryPolicy = GET_POLICY
    submit_policy: RetryPolicy = SUBMIT_POLICY

    @field_validator("shop_url")
    @classmethod
    def validate_shop_url(cls, v: str) -> str:
        """Require an absolute http(s) URL and drop any trailing slash."""
        parts = urlsplit(v)
        if parts.scheme not in {"http", "https"} or not parts.netloc:
            msg = f"shop_url must be an absolute http(s) URL, got {v!r}"
            raise ValueError(msg)
        return v.rstrip("/")
