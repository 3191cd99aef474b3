"""Tests for environment-driven settings."""

import pytest

from salesledger import ConfigurationError, Settings

ENV_VARS = [
    "SALESLEDGER_DATABASE_URL",
    "SALESLEDGER_DATABASE_ECHO",
    "SALESLEDGER_SQLITE_BUSY_TIMEOUT",
    "SALESLEDGER_ORDER_STATUS",
]


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    for name in ENV_VARS:
        # setenv first so teardown also removes values loaded from .env files
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    dotenv = tmp_path / ".env"
    dotenv.write_text("")
    return dotenv


def test_defaults(clean_env):
    settings = Settings.from_env(str(clean_env))

    assert settings == Settings()
    assert settings.database_url == "sqlite:///salesledger.db"
    assert settings.order_status is None


def test_values_from_environment(clean_env, monkeypatch):
    monkeypatch.setenv("SALESLEDGER_DATABASE_URL", "postgresql://u:p@db/store")
    monkeypatch.setenv("SALESLEDGER_DATABASE_ECHO", "True")
    monkeypatch.setenv("SALESLEDGER_SQLITE_BUSY_TIMEOUT", "2.5")
    monkeypatch.setenv("SALESLEDGER_ORDER_STATUS", "Inprogress")

    settings = Settings.from_env(str(clean_env))

    assert settings.database_url == "postgresql://u:p@db/store"
    assert settings.database_echo is True
    assert settings.sqlite_busy_timeout == 2.5
    assert settings.order_status == "Inprogress"


def test_values_from_dotenv_file(clean_env):
    clean_env.write_text("SALESLEDGER_ORDER_STATUS=Completed\n")

    settings = Settings.from_env(str(clean_env))

    assert settings.order_status == "Completed"


def test_bad_boolean(clean_env, monkeypatch):
    monkeypatch.setenv("SALESLEDGER_DATABASE_ECHO", "maybe")

    with pytest.raises(ConfigurationError) as exc_info:
        Settings.from_env(str(clean_env))

    assert exc_info.value.error_code == "BAD_CONFIG"


@pytest.mark.parametrize("raw", ["soon", "-1"])
def test_bad_timeout(clean_env, monkeypatch, raw):
    monkeypatch.setenv("SALESLEDGER_SQLITE_BUSY_TIMEOUT", raw)

    with pytest.raises(ConfigurationError):
        Settings.from_env(str(clean_env))


def test_empty_database_url(clean_env, monkeypatch):
    monkeypatch.setenv("SALESLEDGER_DATABASE_URL", "  ")

    with pytest.raises(ConfigurationError):
        Settings.from_env(str(clean_env))
