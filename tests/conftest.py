"""Pytest configuration and shared fixtures."""

import contextlib
import os
import tempfile
from datetime import date
from decimal import Decimal

import pandas as pd
import pytest
from sqlalchemy import select, update

from salesledger import Settings, create_schema, create_store_engine, drop_schema, load_dataset
from salesledger.schema import inventory


# Database type parameterization
# Dynamically determine available databases
def _get_available_databases():
    """Get list of available database types for testing."""
    available = ["sqlite"]  # SQLite is always available

    try:
        from testing.postgresql import Postgresql

        try:
            test_pg = Postgresql()
            test_pg.stop()
            available.append("postgres")
        except Exception:
            pass  # PostgreSQL not available, skip it
    except ImportError:
        pass  # testing.postgresql not installed

    return available


DATABASE_TYPES = _get_available_databases()

_postgres_instances = {}


def _get_postgres_instance():
    """Lazy initialization of PostgreSQL instance, one per pytest-xdist worker."""
    worker_id = os.environ.get("PYTEST_XDIST_WORKER", "gw0")

    if worker_id not in _postgres_instances:
        from testing.postgresql import Postgresql

        _postgres_instances[worker_id] = Postgresql()
    return _postgres_instances[worker_id]


@pytest.fixture
def settings():
    """Settings independent of the developer's environment."""
    return Settings(sqlite_busy_timeout=30.0)


@pytest.fixture(params=DATABASE_TYPES)
def db_engine(request, settings):
    """Parametrized fixture for database engines.

    SQLite gets a temporary file per test; PostgreSQL shares a session instance.
    """
    db_type = request.param

    if db_type == "sqlite":
        fd, path = tempfile.mkstemp(suffix=".db")
        os.close(fd)
        engine = create_store_engine(f"sqlite:///{path}", settings=settings)

        yield engine

        engine.dispose()
        with contextlib.suppress(OSError, PermissionError):
            os.remove(path)

    elif db_type == "postgres":
        postgres = _get_postgres_instance()
        engine = create_store_engine(postgres.url(), settings=settings)
        drop_schema(engine)
        yield engine
        drop_schema(engine)
        engine.dispose()


@pytest.fixture
def sqlite_engine(tmp_path, settings):
    """SQLite-specific engine fixture."""
    engine = create_store_engine(f"sqlite:///{tmp_path / 'test.db'}", settings=settings)
    yield engine
    engine.dispose()


def seed_frames():
    """A small store: product 1 with 20 units in warehouse 1, product 2 split over two warehouses."""
    return {
        "category": pd.DataFrame({"category_id": [1, 2], "category_name": ["Electronics", "Books"]}),
        "customers": pd.DataFrame(
            {
                "customer_id": [1, 2, 3],
                "first_name": ["Ana", "Ben", "Chen"],
                "last_name": ["Silva", "Okafor", "Wei"],
                "state": ["Texas", "Ohio", "Utah"],
                "address": ["1 Main St", "2 Oak Ave", "3 Pine Rd"],
            }
        ),
        "sellers": pd.DataFrame(
            {
                "seller_id": [1, 2, 3, 4, 5],
                "seller_name": ["Alpha", "Beta", "Gamma", "Delta", "Epsilon"],
                "origin": ["USA", "USA", "India", "China", "Germany"],
            }
        ),
        "products": pd.DataFrame(
            {
                "product_id": [1, 2, 3],
                "product_name": ["Apple AirPods 3rd Gen", "Kindle Paperwhite", "USB-C Cable"],
                "price": [Decimal("50.00"), Decimal("139.99"), Decimal("9.99")],
                "cogs": [Decimal("30.00"), Decimal("90.00"), Decimal("2.50")],
                "category_id": [1, 2, 1],
            }
        ),
        "inventory": pd.DataFrame(
            {
                "inventory_id": [1, 2, 3],
                "product_id": [1, 2, 2],
                "stock": [20, 3, 40],
                "warehouse_id": [1, 1, 2],
                "last_stock_date": [date(2024, 1, 15), date(2024, 2, 1), date(2024, 2, 3)],
            }
        ),
    }


@pytest.fixture
def store(db_engine):
    """Engine with the schema created and the seed data loaded."""
    create_schema(db_engine)
    load_dataset(db_engine, seed_frames())
    return db_engine


@pytest.fixture
def set_stock(store):
    """Overwrite the stock of an inventory record."""

    def _set_stock(inventory_id, stock):
        with store.begin() as conn:
            conn.execute(
                update(inventory).where(inventory.c.inventory_id == inventory_id).values(stock=stock)
            )

    return _set_stock


@pytest.fixture
def stock_of(store):
    """Read the stock of an inventory record."""

    def _stock_of(inventory_id):
        with store.connect() as conn:
            return conn.execute(
                select(inventory.c.stock).where(inventory.c.inventory_id == inventory_id)
            ).scalar_one()

    return _stock_of
