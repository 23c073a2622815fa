"""
Configuration Management for Expense Tracker

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
File locations and the default category seed used to live as module-level
constants in each front end. They are now explicit settings objects handed
to the storage layer at construction time.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_CATEGORIES = [
    "Alimentation",
    "Transport",
    "Logement",
    "Santé",
    "Loisirs",
    "Vêtements",
    "Éducation",
    "Autres",
]

FALLBACK_CATEGORY = "Autres"


class StorageSettings(BaseSettings):
    """JSON file storage configuration."""

    model_config = SettingsConfigDict(
        env_prefix="STORAGE_",
        extra="ignore"
    )

    data_dir: Path = Field(
        default=Path("."),
        description="Directory holding the JSON documents"
    )
    expenses_filename: str = Field(
        default="expenses.json",
        description="File name of the expense ledger"
    )
    categories_filename: str = Field(
        default="categories.json",
        description="File name of the category registry"
    )

    # Seed written on first run when no registry file exists
    default_categories: list[str] = Field(
        default_factory=lambda: list(DEFAULT_CATEGORIES),
        description="Categories written on first run"
    )
    fallback_category: str = Field(
        default=FALLBACK_CATEGORY,
        min_length=1,
        description="Category receiving expenses of a deleted category"
    )

    @field_validator('default_categories')
    @classmethod
    def validate_default_categories(cls, v: list[str]) -> list[str]:
        """Strip names and drop blanks and repeats, keeping order."""
        seen = []
        for name in v:
            name = name.strip()
            if name and name not in seen:
                seen.append(name)
        return seen

    @property
    def expenses_path(self) -> Path:
        return self.data_dir / self.expenses_filename

    @property
    def categories_path(self) -> Path:
        return self.data_dir / self.categories_filename


class WebSettings(BaseSettings):
    """Flask web front end configuration."""

    model_config = SettingsConfigDict(
        env_prefix="WEB_",
        extra="ignore"
    )

    host: str = Field(
        default="0.0.0.0",
        description="Interface to bind"
    )
    port: int = Field(
        default=4567,
        ge=1,
        le=65535,
        description="Port to listen on"
    )
    secret_key: str = Field(
        default="change-me",
        description="Session signing key (used for flash messages)"
    )
    debug: bool = Field(
        default=False,
        description="Run Flask in debug mode"
    )


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Environment
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    log_level: str = Field(
        default="INFO",
        description="Root log level for structured logging"
    )

    # Dashboard
    recent_expenses_limit: int = Field(
        default=5,
        ge=1,
        le=100,
        description="How many expenses the dashboard shows"
    )

    # Validation thresholds
    max_expense_amount: float = Field(
        default=100000.0,
        gt=0,
        description="Amount above which a warning is raised (sanity check)"
    )
    future_date_tolerance_days: int = Field(
        default=1,
        ge=0,
        description="How many days in the future an expense date can be without a warning"
    )

    @field_validator('log_level')
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        return v.strip().upper()


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()

    @property
    def web(self) -> WebSettings:
        return WebSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}.
    Useful for startup checks.
    """
    results = {}

    settings = get_settings()

    for name in ("storage", "web", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
