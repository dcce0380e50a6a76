"""Configuration package."""

from swiff.config.settings import (
    AppSettings,
    BalanceSettings,
    Settings,
    SplitSettings,
    get_balance_settings,
    get_settings,
    get_split_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "BalanceSettings",
    "Settings",
    "SplitSettings",
    "get_balance_settings",
    "get_settings",
    "get_split_settings",
    "validate_all_settings",
]
