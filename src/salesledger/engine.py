"""
Engine construction for the store.

SQLite connections get foreign key enforcement and start every transaction
with ``BEGIN IMMEDIATE``, so a sale holds the database write lock from its
first read until commit. Other dialects rely on row locks taken by the sale
recorder.
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import Engine, create_engine, event
from sqlalchemy.engine import make_url

from salesledger.config import Settings, get_settings

logger = logging.getLogger(__name__)


def create_store_engine(
    url: str | None = None,
    settings: Settings | None = None,
    **engine_kwargs: Any,
) -> Engine:
    """
    Create a SQLAlchemy engine for the store.

    Args:
        url: Database URL; defaults to ``settings.database_url``
        settings: Settings to read defaults from; the cached environment settings if omitted
        **engine_kwargs: Passed through to ``sqlalchemy.create_engine``

    Returns:
        Configured engine
    """
    if settings is None:
        settings = get_settings()
    url = url or settings.database_url
    engine_kwargs.setdefault("echo", settings.database_echo)

    if make_url(url).get_backend_name() == "sqlite":
        connect_args = dict(engine_kwargs.pop("connect_args", {}))
        connect_args.setdefault("timeout", settings.sqlite_busy_timeout)
        connect_args.setdefault("check_same_thread", False)
        engine = create_engine(url, connect_args=connect_args, **engine_kwargs)
        _configure_sqlite(engine)
    else:
        engine = create_engine(url, **engine_kwargs)

    logger.debug(f"Created store engine for {engine.url!r}")
    return engine


def _configure_sqlite(engine: Engine) -> None:
    """Install connection hooks that make SQLite transactions serialisable writers."""

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        # take over transaction control from pysqlite
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        try:
            cursor.execute("PRAGMA foreign_keys=ON")
        finally:
            cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")
