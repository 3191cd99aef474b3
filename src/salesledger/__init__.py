"""
Salesledger: transactional sale recording for an e-commerce store

Defines the store schema with SQLAlchemy, records sales that append an order
and its order line while decrementing inventory in one transaction, and bulk
loads reference data from pandas DataFrames.
"""

from salesledger._version import version
from salesledger.config import Settings, get_settings
from salesledger.engine import create_store_engine
from salesledger.exceptions import (
    ConfigurationError,
    DataValidationError,
    DuplicateIdentifierError,
    InvalidQuantityError,
    SalesLedgerError,
    SchemaError,
    TransactionError,
    UnknownInventoryRecordError,
    UnknownProductError,
)
from salesledger.loading import load_dataset, load_frame, read_table
from salesledger.sale_recorder import (
    InsufficientStock,
    SaleConfirmation,
    SaleRecorder,
    SaleResult,
    record_sale,
)
from salesledger.schema import create_schema, drop_schema, metadata

__version__ = version

__all__ = [
    # Sale recording
    "SaleRecorder",
    "SaleConfirmation",
    "InsufficientStock",
    "SaleResult",
    "record_sale",
    # Store setup
    "Settings",
    "get_settings",
    "create_store_engine",
    "create_schema",
    "drop_schema",
    "metadata",
    # Loading
    "load_dataset",
    "load_frame",
    "read_table",
    # Exceptions
    "SalesLedgerError",
    "ConfigurationError",
    "SchemaError",
    "TransactionError",
    "DataValidationError",
    "InvalidQuantityError",
    "UnknownProductError",
    "UnknownInventoryRecordError",
    "DuplicateIdentifierError",
    # Version
    "__version__",
]
