"""Configuration package."""

from expense_tracker.config.settings import (
    DEFAULT_CATEGORIES,
    FALLBACK_CATEGORY,
    AppSettings,
    Settings,
    StorageSettings,
    WebSettings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "DEFAULT_CATEGORIES",
    "FALLBACK_CATEGORY",
    "AppSettings",
    "Settings",
    "StorageSettings",
    "WebSettings",
    "get_settings",
    "validate_all_settings",
]
