"""
Utility functions for salesledger.

Helpers that turn pandas/numpy values into plain Python values the database
drivers accept.
"""

from __future__ import annotations

from typing import Any

import numpy as np
import pandas as pd


def convert_numpy_types(value: Any) -> Any:
    """
    Convert numpy and pandas scalars to Python native types.

    Missing values (NaN, NaT, pd.NA) become None and timestamps become
    ``datetime.date`` when they carry no time of day.

    Examples:
        >>> convert_numpy_types(np.int64(5))
        5
        >>> convert_numpy_types(np.nan) is None
        True
        >>> convert_numpy_types("hello")
        'hello'
    """
    if value is None:
        return None
    if isinstance(value, pd.Timestamp):
        if pd.isna(value):
            return None
        if value == value.normalize():
            return value.date()
        return value.to_pydatetime()
    if isinstance(value, (float, np.floating)) and np.isnan(value):
        return None
    if value is pd.NA or value is pd.NaT:
        return None
    if isinstance(value, np.generic):
        # numpy scalar types have an item() method
        return value.item()
    return value


def convert_record_types(record: dict[str, Any]) -> dict[str, Any]:
    """
    Convert all numpy types in a dictionary to Python native types.

    Examples:
        >>> convert_record_types({'id': np.int64(1), 'stock': np.float64(np.nan)})
        {'id': 1, 'stock': None}
    """
    return {k: convert_numpy_types(v) for k, v in record.items()}


def convert_records_list(records: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Convert every record of a list with ``convert_record_types``."""
    return [convert_record_types(record) for record in records]


def frame_to_records(frame: pd.DataFrame) -> list[dict[str, Any]]:
    """
    Turn a DataFrame into a list of driver-ready dictionaries.

    A named (non-range) index is treated as a column, so frames returned by
    ``read_table`` can be loaded back unchanged.
    """
    if frame.index.name is not None or isinstance(frame.index, pd.MultiIndex):
        frame = frame.reset_index()
    return convert_records_list(frame.to_dict("records"))


def nulls_to_none(frame: pd.DataFrame) -> pd.DataFrame:
    """
    Represent missing values in text and object columns as None.

    pandas 3 reads text into a string dtype whose missing value is NaN; this
    turns such columns back into object columns holding None, as SQL NULL
    reads on earlier pandas versions. Numeric columns keep NaN.
    """
    frame = frame.copy()
    for col in frame.columns:
        series = frame[col]
        if pd.api.types.is_object_dtype(series) or pd.api.types.is_string_dtype(series):
            frame[col] = series.astype(object).where(series.notna(), None)
    return frame


def chunk_list(items: list[Any], chunk_size: int) -> list[list[Any]]:
    """
    Split a list into chunks of specified size.

    Examples:
        >>> chunk_list([1, 2, 3], 2)
        [[1, 2], [3]]
    """
    return [items[i : i + chunk_size] for i in range(0, len(items), chunk_size)]
