"""
Tests for configuration.
"""

from datetime import timedelta

import pytest

from pocket_ledger.config import (
    AppSettings,
    FirebaseSettings,
    SweepSettings,
    get_settings,
    validate_all_settings,
)


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Reload settings around each test so env changes are picked up."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestSettings:
    """Tests for the settings classes."""

    def test_firebase_defaults(self, monkeypatch):
        monkeypatch.delenv("FIREBASE_CREDENTIALS_PATH", raising=False)
        settings = FirebaseSettings()
        assert settings.settings_collection == "userSettings"
        assert settings.transactions_collection == "transactions"
        assert settings.last_active_field == "lastActive"
        assert settings.credentials_path is None

    def test_firebase_env_override(self, monkeypatch):
        monkeypatch.setenv("FIREBASE_SETTINGS_COLLECTION", "users")
        monkeypatch.setenv("FIREBASE_PROJECT_ID", "pocket-ledger-dev")
        settings = FirebaseSettings()
        assert settings.settings_collection == "users"
        assert settings.project_id == "pocket-ledger-dev"

    def test_missing_credentials_file_warns(self, tmp_path):
        with pytest.warns(UserWarning, match="credentials file not found"):
            FirebaseSettings(credentials_path=str(tmp_path / "missing.json"))

    def test_sweep_defaults(self):
        settings = SweepSettings()
        assert settings.inactivity_window == timedelta(hours=24)
        assert settings.schedule == "every 24 hours"

    def test_sweep_rejects_zero_window(self, monkeypatch):
        monkeypatch.setenv("SWEEP_INACTIVITY_HOURS", "0")
        with pytest.raises(ValueError):
            SweepSettings()

    def test_log_level_normalized(self):
        assert AppSettings(log_level=" debug ").log_level == "DEBUG"

    def test_unknown_log_level_rejected(self):
        with pytest.raises(ValueError):
            AppSettings(log_level="chatty")

    def test_validate_all_settings(self, monkeypatch):
        monkeypatch.setenv("SWEEP_INACTIVITY_HOURS", "not-a-number")
        results = validate_all_settings()
        assert results["firebase"] is True
        assert results["app"] is True
        assert results["sweep"] is False
        assert "sweep_error" in results

    def test_get_settings_is_cached(self):
        assert get_settings() is get_settings()
