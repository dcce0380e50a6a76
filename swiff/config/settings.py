"""
Configuration Management for Swiff

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
The engines only need a handful of tolerances, but they are named and
validated in one place instead of being sprinkled as literals.
"""

from decimal import Decimal
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class SplitSettings(BaseSettings):
    """Tolerances used when validating user-entered allocations."""

    model_config = SettingsConfigDict(
        env_prefix="SWIFF_SPLIT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    custom_tolerance: Decimal = Field(
        default=Decimal("0.01"),
        ge=0,
        description="Allowed gap between custom amounts and the bill total"
    )
    percentage_tolerance: Decimal = Field(
        default=Decimal("0.1"),
        ge=0,
        description="Allowed gap between the percentage sum and 100"
    )


class BalanceSettings(BaseSettings):
    """Thresholds used by the balance netting engine."""

    model_config = SettingsConfigDict(
        env_prefix="SWIFF_BALANCE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    settle_threshold: Decimal = Field(
        default=Decimal("0.01"),
        ge=0,
        description="Net amounts at or below this are treated as settled"
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

    default_currency: str = Field(
        default="USD",
        min_length=3,
        max_length=3,
        description="Currency used when a bill or settlement omits one"
    )

    @field_validator('default_currency')
    @classmethod
    def normalize_currency(cls, v: str) -> str:
        """Currency codes are stored upper-case."""
        return v.upper()


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

    # Sub-settings are loaded lazily so that a broken section only fails
    # the code that actually needs it.

    @property
    def splits(self) -> SplitSettings:
        return SplitSettings()

    @property
    def balances(self) -> BalanceSettings:
        return BalanceSettings()

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


@lru_cache()
def get_split_settings() -> SplitSettings:
    """Cached split tolerances (validators run on every keystroke)."""
    return get_settings().splits


@lru_cache()
def get_balance_settings() -> BalanceSettings:
    """Cached balance thresholds."""
    return get_settings().balances


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}.
    Useful for startup checks.
    """
    results = {}

    settings = get_settings()

    for name in ("splits", "balances", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
