"""Tests for environment-driven settings."""

from pathlib import Path

from bizledger.settings import Settings


def test_defaults():
    settings = Settings(_env_file=None)

    assert settings.database_path == Path("data/bizledger.db")
    assert settings.mistral_model == "mistral-small-latest"
    assert settings.currency_symbol == "₽"
    assert settings.provider_timeout_seconds == 30.0


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("MISTRAL_API_KEY", "secret")
    monkeypatch.setenv("ENVIRONMENT", "production")
    monkeypatch.setenv("DATABASE_PATH", "/tmp/other.db")

    settings = Settings(_env_file=None)

    assert settings.provider_configured is True
    assert settings.is_production is True
    assert settings.database_path == Path("/tmp/other.db")


def test_provider_timeout_is_clamped():
    assert Settings(_env_file=None, provider_timeout_seconds=120).provider_timeout_seconds == 30.0
    assert Settings(_env_file=None, provider_timeout_seconds=1).provider_timeout_seconds == 5.0
