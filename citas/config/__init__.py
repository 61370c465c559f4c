"""Config package - Application settings and configuration."""

from citas.config.booking import BookingConfig
from citas.config.settings import Settings, get_settings

__all__ = [
    "Settings",
    "get_settings",
    "BookingConfig",
]
