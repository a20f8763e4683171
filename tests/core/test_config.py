"""Tests for settings loading in core.config."""

import pytest
from pydantic import ValidationError

from urovital.core import config
from urovital.core.config import Settings, get_settings


def test_import_builds_no_settings():
    assert not hasattr(config, "settings")


def test_get_settings_is_cached():
    assert get_settings() is get_settings()


def test_production_rejects_placeholder_secret(monkeypatch):
    monkeypatch.setenv("APP_ENV", "production")
    monkeypatch.setenv("DEBUG", "false")
    monkeypatch.setenv("SECRET_KEY", "change-me-before-deploying-this-service")
    monkeypatch.setenv("DATABASE_URL", "postgresql+asyncpg://app@db.internal:5432/urovital")

    with pytest.raises(ValidationError, match="SECRET_KEY"):
        Settings()


def test_production_accepts_complete_settings(monkeypatch):
    monkeypatch.setenv("APP_ENV", "production")
    monkeypatch.setenv("DEBUG", "false")
    monkeypatch.setenv("SECRET_KEY", "a" * 48)
    monkeypatch.setenv("DATABASE_URL", "postgresql+asyncpg://app@db.internal:5432/urovital")

    assert Settings().is_production
