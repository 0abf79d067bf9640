"""
Tests for configuration validation
"""
import pytest
from pydantic import ValidationError
from approval_engine.core.config import Settings


def _settings(**overrides) -> Settings:
    values = {
        "DATABASE_URL": "postgresql://test",
        "JWT_SECRET_KEY": "a" * 32,
    }
    values.update(overrides)
    return Settings(**values)


def test_prod_settings_rejects_wildcard_origins():
    settings = _settings(APP_ENV="prod", ALLOWED_ORIGINS="*")

    with pytest.raises(ValueError, match="ALLOWED_ORIGINS"):
        settings.validate_production()


def test_prod_settings_rejects_short_jwt_secret():
    settings = _settings(APP_ENV="prod", JWT_SECRET_KEY="short", ALLOWED_ORIGINS="https://intranet.example.org")

    with pytest.raises(ValueError, match="JWT_SECRET_KEY"):
        settings.validate_production()


def test_local_settings_allows_wildcard_origins():
    settings = _settings(APP_ENV="local", ALLOWED_ORIGINS="*")

    settings.validate_production()
    assert settings.get_allowed_origins_list() == ["*"]


def test_allowed_origins_are_split_and_trimmed():
    settings = _settings(ALLOWED_ORIGINS="https://a.example.org, https://b.example.org ,")

    assert settings.get_allowed_origins_list() == ["https://a.example.org", "https://b.example.org"]


def test_leave_defaults():
    settings = _settings()

    assert settings.ANNUAL_LEAVE_DAYS == 21
    assert settings.MAX_CARRYOVER_DAYS is None
    assert settings.MAINTENANCE_MODE is False
    assert settings.TZ == "Europe/Bucharest"


def test_invalid_app_env_rejected():
    with pytest.raises(ValidationError):
        _settings(APP_ENV="production")


def test_negative_carryover_cap_rejected():
    with pytest.raises(ValidationError):
        _settings(MAX_CARRYOVER_DAYS=-1)


def test_log_level_is_normalised():
    assert _settings(LOG_LEVEL="debug").LOG_LEVEL == "DEBUG"
