"""
Bulk loading and reading of store tables with pandas.

Reference data (catalog, customers, sellers, historical orders, inventory)
is owned by bulk loads rather than by the sale recorder. Loads run in a
single transaction: a failure in any table rolls back every table.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

import pandas as pd
from sqlalchemy import Connection, Engine, insert, select
from sqlalchemy.exc import SQLAlchemyError

from salesledger.exceptions import SchemaError, TransactionError
from salesledger.schema import TABLES_IN_LOAD_ORDER, get_table, primary_key_columns
from salesledger.utils import chunk_list, frame_to_records, nulls_to_none

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE_INSERT = 1000


def _calculate_batch_size(record_count: int) -> int:
    """
    Calculate insert batch size from the record count.

    Very large loads use smaller batches to avoid statement timeouts, small
    loads use larger batches to reduce round trips.
    """
    if record_count > 100000:
        return DEFAULT_BATCH_SIZE_INSERT // 2
    elif record_count < 1000:
        return DEFAULT_BATCH_SIZE_INSERT * 2
    return DEFAULT_BATCH_SIZE_INSERT


def _insert_frame(connection: Connection, table_name: str, frame: pd.DataFrame) -> int:
    """
    Insert a DataFrame's rows into a table on an open transaction.

    Returns:
        Number of rows inserted
    """
    table = get_table(table_name)
    records = frame_to_records(frame)
    if not records:
        return 0

    unknown = sorted(set(records[0]) - set(table.columns.keys()))
    if unknown:
        raise SchemaError(
            f"Columns {unknown} are not part of table '{table_name}'",
            table_name=table_name,
            operation="load",
            error_code="UNKNOWN_COLUMN",
            details={"table_columns": list(table.columns.keys())},
        )

    batch_size = _calculate_batch_size(len(records))
    for chunk in chunk_list(records, batch_size):
        connection.execute(insert(table), chunk)
    return len(records)


def load_frame(engine: Engine, table_name: str, frame: pd.DataFrame) -> int:
    """
    Append a DataFrame to one store table.

    Args:
        engine: SQLAlchemy engine
        table_name: Name of the target table
        frame: Rows to insert; column names must match table columns

    Returns:
        Number of rows inserted

    Raises:
        SchemaError: If the table or a column is unknown
        TransactionError: If the database rejects the rows (nothing is written)
    """
    return load_dataset(engine, {table_name: frame})[table_name]


def load_dataset(engine: Engine, frames: Mapping[str, pd.DataFrame]) -> dict[str, int]:
    """
    Load several tables in one transaction, parents before children.

    Args:
        engine: SQLAlchemy engine
        frames: Mapping of table name to the rows to insert

    Returns:
        Mapping of table name to number of rows inserted

    Raises:
        SchemaError: If a table or a column is unknown
        TransactionError: If the database rejects any row (nothing is written)
    """
    for name in frames:
        get_table(name)

    ordered = [table.name for table in TABLES_IN_LOAD_ORDER if table.name in frames]
    counts: dict[str, int] = {}

    try:
        with engine.begin() as connection:
            for name in ordered:
                counts[name] = _insert_frame(connection, name, frames[name])
                logger.debug(f"Inserted {counts[name]} rows into {name}")
    except SQLAlchemyError as e:
        raise TransactionError(
            f"Failed to load dataset: {e.__class__.__name__}: {e}",
            operation="load",
            error_code="TRANSACTION_FAILED",
            details={"tables": ordered},
        ) from e

    logger.info(f"Loaded {sum(counts.values())} rows into {len(counts)} table(s)")
    return counts


def read_table(engine: Engine, table_name: str, set_index: bool = True) -> pd.DataFrame:
    """
    Pull a store table into a DataFrame.

    Args:
        engine: SQLAlchemy engine
        table_name: Name of the table to pull
        set_index: Whether to set the primary key as index (default True)

    Returns:
        DataFrame ordered by primary key; NULL text values are None
    """
    table = get_table(table_name)
    pk_cols = primary_key_columns(table_name)
    stmt = select(table).order_by(*(table.c[col] for col in pk_cols))

    with engine.connect() as connection:
        result = connection.execute(stmt)
        rows: list[tuple[Any, ...]] = [tuple(row) for row in result]
        frame = nulls_to_none(pd.DataFrame.from_records(rows, columns=list(result.keys())))

    if set_index:
        frame = frame.set_index(pk_cols[0] if len(pk_cols) == 1 else pk_cols)
    return frame
