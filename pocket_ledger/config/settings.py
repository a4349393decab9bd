"""
Configuration Management for Pocket Ledger

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
This makes it easy to see what external dependencies exist and
ensures all required configuration is validated at startup.
"""

from datetime import timedelta
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class FirebaseSettings(BaseSettings):
    """Firebase (Firestore + Authentication) configuration."""

    model_config = SettingsConfigDict(
        env_prefix="FIREBASE_",
        extra="ignore"
    )

    project_id: Optional[str] = Field(
        default=None,
        description="Firebase project ID (inferred from credentials when unset)"
    )
    credentials_path: Optional[str] = Field(
        default=None,
        description="Path to a service account JSON; application default credentials are used when unset"
    )

    # Document layout
    settings_collection: str = Field(
        default="userSettings",
        min_length=1,
        description="Top-level collection holding one settings document per user"
    )
    transactions_collection: str = Field(
        default="transactions",
        min_length=1,
        description="Subcollection under each settings document holding transactions"
    )
    last_active_field: str = Field(
        default="lastActive",
        min_length=1,
        description="Settings field carrying the last-activity timestamp"
    )
    deletion_marker_field: str = Field(
        default="deletionPending",
        min_length=1,
        description="Settings field marking an account whose sweep deletion is unfinished"
    )

    @field_validator('credentials_path')
    @classmethod
    def validate_credentials_path(cls, v: Optional[str]) -> Optional[str]:
        """Warn if credentials file doesn't exist (but don't fail - might be mounted later)."""
        if v and not Path(v).exists():
            import warnings
            warnings.warn(
                f"Firebase credentials file not found at {v}. "
                "Make sure it exists before running the functions."
            )
        return v


class SweepSettings(BaseSettings):
    """Inactivity sweep configuration."""

    model_config = SettingsConfigDict(
        env_prefix="SWEEP_",
        extra="ignore"
    )

    inactivity_hours: int = Field(
        default=24,
        ge=1,
        le=720,
        description="Accounts idle longer than this are evaluated by the sweep"
    )
    schedule: str = Field(
        default="every 24 hours",
        description="Cloud Scheduler expression for the sweep trigger"
    )

    @property
    def inactivity_window(self) -> timedelta:
        """Get the inactivity threshold as a timedelta."""
        return timedelta(hours=self.inactivity_hours)


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
        description="Minimum level for structured logs"
    )

    @field_validator('log_level')
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level


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

    # Note: These are loaded lazily to allow partial configuration

    @property
    def firebase(self) -> FirebaseSettings:
        return FirebaseSettings()

    @property
    def sweep(self) -> SweepSettings:
        return SweepSettings()

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

    for name in ("firebase", "sweep", "app"):
        try:
            _ = getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
