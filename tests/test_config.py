"""
Unit tests for environment-driven settings.
"""

import pytest

from textgrab.config import Settings


ENV_VARS = [
    "TEXTGRAB_STORE_PATH",
    "TEXTGRAB_LOCATOR_TTL",
    "TEXTGRAB_MAX_LENGTH",
    "TEXTGRAB_CLEAN_FORMATTING",
    "TEXTGRAB_INCLUDE_HEADER",
    "TEXTGRAB_SHOW_NOTIFICATIONS",
    "TEXTGRAB_USAGE_RETENTION_DAYS",
    "TEXTGRAB_DEBUG",
]


@pytest.fixture
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestSettings:
    """Test Settings.from_env."""

    def test_defaults(self, clean_env):
        settings = Settings.from_env()

        assert settings.store_path == "data/textgrab.db"
        assert settings.locator_ttl_seconds == 604800
        assert settings.max_length == 50000
        assert settings.clean_formatting is True
        assert settings.include_header is True
        assert settings.show_notifications is True
        assert settings.usage_retention_days == 30
        assert settings.debug is False

    def test_overrides(self, clean_env):
        clean_env.setenv("TEXTGRAB_STORE_PATH", "/tmp/grab.db")
        clean_env.setenv("TEXTGRAB_LOCATOR_TTL", "3600")
        clean_env.setenv("TEXTGRAB_MAX_LENGTH", "12000")
        clean_env.setenv("TEXTGRAB_CLEAN_FORMATTING", "false")
        clean_env.setenv("TEXTGRAB_INCLUDE_HEADER", "0")
        clean_env.setenv("TEXTGRAB_DEBUG", "yes")

        settings = Settings.from_env()

        assert settings.store_path == "/tmp/grab.db"
        assert settings.locator_ttl_seconds == 3600
        assert settings.max_length == 12000
        assert settings.clean_formatting is False
        assert settings.include_header is False
        assert settings.debug is True

    def test_blank_numbers_use_defaults(self, clean_env):
        clean_env.setenv("TEXTGRAB_MAX_LENGTH", "  ")
        assert Settings.from_env().max_length == 50000

    def test_invalid_number(self, clean_env):
        clean_env.setenv("TEXTGRAB_MAX_LENGTH", "lots")
        with pytest.raises(ValueError):
            Settings.from_env()

    def test_public_dict(self):
        settings = Settings(max_length=2000, include_header=False)

        assert settings.to_public_dict() == {
            "maxLength": 2000,
            "cleanFormatting": True,
            "includeHeader": False,
            "showNotifications": True,
        }
