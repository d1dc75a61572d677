"""Store credentials powered by Pydantic BaseSettings."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from volusion_access.config import VolusionConfig


class VolusionSettings(BaseSettings):
    """Environment configuration for a single store."""

    model_config = SettingsConfigDict(
        env_prefix="VOLUSION_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    shop_url: str = Field(min_length=1)
    login: str = Field(min_length=1)
    encrypted_password: str = Field(min_length=1)
    api_delay_seconds: float = 1.0
    timeout_seconds: float | None = None
    max_pages: int | None = None

    def to_config(self) -> VolusionConfig:
        """Build the connection config for these settings."""
        overrides: dict[str, float] = {}
        if self.timeout_seconds is not None:
            overrides["timeout_seconds"] = self.timeout_seconds
        return VolusionConfig(
            shop_url=self.shop_url,
            login=self.login,
            encrypted_password=self.encrypted_password,
            api_delay_seconds=self.api_delay_seconds,
            max_pages=self.max_pages,
            **overrides,
        )


def get_settings() -> VolusionSettings:
    """Get a settings instance."""
    return VolusionSettings()  # type: ignore[call-arg]
