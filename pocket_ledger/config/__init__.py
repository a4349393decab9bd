"""Configuration package."""

from pocket_ledger.config.settings import (
    AppSettings,
    FirebaseSettings,
    Settings,
    SweepSettings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "FirebaseSettings",
    "Settings",
    "SweepSettings",
    "get_settings",
    "validate_all_settings",
]
