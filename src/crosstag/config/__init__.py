"""
crosstag configuration.

Pydantic-based settings read from CROSSTAG_* environment variables and .env.
"""

from crosstag.config.settings import Settings, get_settings

__all__ = [
    "Settings",
    "get_settings",
]
