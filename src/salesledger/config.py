"""
Environment-driven settings for salesledger.

Values are read from the process environment, after loading a ``.env`` file
from the working directory if one exists.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import find_dotenv, load_dotenv

from salesledger.exceptions import ConfigurationError

DEFAULT_DATABASE_URL = "sqlite:///salesledger.db"
DEFAULT_SQLITE_BUSY_TIMEOUT = 30.0


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in ("1", "true", "yes", "on"):
        return True
    if value in ("0", "false", "no", "off", ""):
        return False
    raise ConfigurationError(
        f"{name} must be a boolean, got {raw!r}",
        error_code="BAD_CONFIG",
        suggested_fix=f"Set {name} to 'true' or 'false'",
    )


def _parse_float(name: str, raw: str) -> float:
    try:
        value = float(raw)
    except ValueError as e:
        raise ConfigurationError(
            f"{name} must be a number, got {raw!r}",
            error_code="BAD_CONFIG",
        ) from e
    if value < 0:
        raise ConfigurationError(f"{name} must not be negative", error_code="BAD_CONFIG")
    return value


@dataclass(frozen=True)
class Settings:
    """
    Runtime settings.

    Attributes:
        database_url: SQLAlchemy URL of the store
        database_echo: Echo emitted SQL through SQLAlchemy's logger
        sqlite_busy_timeout: Seconds a SQLite connection waits for the write lock
        order_status: Status written on orders created by a sale (None leaves it empty)
    """

    database_url: str = DEFAULT_DATABASE_URL
    database_echo: bool = False
    sqlite_busy_timeout: float = DEFAULT_SQLITE_BUSY_TIMEOUT
    order_status: str | None = None

    @classmethod
    def from_env(cls, dotenv_path: str | None = None) -> Settings:
        """
        Build settings from ``SALESLEDGER_*`` environment variables.

        Args:
            dotenv_path: Optional explicit path of a .env file to load first

        Raises:
            ConfigurationError: If a variable cannot be parsed
        """
        load_dotenv(dotenv_path or find_dotenv(usecwd=True))

        database_url = os.getenv("SALESLEDGER_DATABASE_URL", DEFAULT_DATABASE_URL).strip()
        if not database_url:
            raise ConfigurationError(
                "SALESLEDGER_DATABASE_URL is empty",
                error_code="BAD_CONFIG",
                suggested_fix="Set it to a SQLAlchemy URL such as sqlite:///salesledger.db",
            )

        order_status = os.getenv("SALESLEDGER_ORDER_STATUS", "").strip() or None

        return cls(
            database_url=database_url,
            database_echo=_parse_bool(
                "SALESLEDGER_DATABASE_ECHO", os.getenv("SALESLEDGER_DATABASE_ECHO", "false")
            ),
            sqlite_busy_timeout=_parse_float(
                "SALESLEDGER_SQLITE_BUSY_TIMEOUT",
                os.getenv("SALESLEDGER_SQLITE_BUSY_TIMEOUT", str(DEFAULT_SQLITE_BUSY_TIMEOUT)),
            ),
            order_status=order_status,
        )


@lru_cache(maxsize=None)
def get_settings() -> Settings:
    """
    Settings from the environment, loaded once per process.

    Call ``get_settings.cache_clear()`` after changing the environment.
    """
    return Settings.from_env()
