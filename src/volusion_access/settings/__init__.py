"""Environment settings loading."""

from .app import VolusionSettings, get_settings


__all__ = ["VolusionSettings", "get_settings"]
