"""Configuration loading."""

from __future__ import annotations

from wellness.config.settings import (
    ConfigValidationError,
    Settings,
    get_settings,
    reload_settings,
)

__all__ = ["ConfigValidationError", "Settings", "get_settings", "reload_settings"]
