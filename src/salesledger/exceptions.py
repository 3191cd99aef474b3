"""
Custom exceptions for salesledger.

Every error carries the sale context it was raised in (operation, table,
product and order ids) and renders it on one line after the message, e.g.::

    UnknownProductError: Product 999 does not exist [operation=record_sale, table=products, product=999, code=UNKNOWN_PRODUCT]
"""

from __future__ import annotations

from typing import Any


class SalesLedgerError(Exception):
    """
    Base exception for all salesledger errors.

    Attributes:
        message: Human-readable description
        table_name: Store table involved, if any
        operation: Library operation that failed ('record_sale', 'load', ...)
        product_id: Product of the failed sale
        order_id: Order of the failed sale
        error_code: Stable code callers can branch on (e.g. 'DUPLICATE_ID')
        suggested_fix: What the caller can do about it
        details: Extra key/value context
    """

    def __init__(
        self,
        message: str,
        *,
        table_name: str | None = None,
        operation: str | None = None,
        product_id: Any | None = None,
        order_id: Any | None = None,
        error_code: str | None = None,
        suggested_fix: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.table_name = table_name
        self.operation = operation
        self.product_id = product_id
        self.order_id = order_id
        self.error_code = error_code
        self.suggested_fix = suggested_fix
        self.details = details or {}

    def context(self) -> dict[str, Any]:
        """Return the context fields that are set, in display order."""
        fields = {
            "operation": self.operation,
            "table": self.table_name,
            "product": self.product_id,
            "order": self.order_id,
        }
        fields.update(self.details)
        fields["code"] = self.error_code
        return {key: value for key, value in fields.items() if value is not None}

    def format_error(self) -> str:
        """Render the message, its context and the suggested fix."""
        text = f"{self.__class__.__name__}: {self.message}"
        context = self.context()
        if context:
            text += " [" + ", ".join(f"{key}={value}" for key, value in context.items()) + "]"
        if self.suggested_fix:
            text += f"\n  Fix: {self.suggested_fix}"
        return text

    def __str__(self) -> str:
        return self.format_error()


class ConfigurationError(SalesLedgerError):
    """
    Exception raised for invalid settings.

    Examples:
        - Non-numeric busy timeout
        - Empty database URL
    """

    pass


class SchemaError(SalesLedgerError):
    """
    Exception raised for schema-related errors.

    Examples:
        - Table is not part of the store schema
        - Frame columns missing from the target table
    """

    pass


class TransactionError(SalesLedgerError):
    """
    Exception raised when the store rejects a write.

    The transaction has already been rolled back when this is raised.
    """

    pass


class DataValidationError(SalesLedgerError):
    """
    Exception raised for caller input that fails validation before any write.
    """

    pass


class InvalidQuantityError(DataValidationError):
    """Raised when a sale quantity is not a positive integer."""

    def __init__(self, quantity: Any, **kwargs):
        super().__init__(
            f"Sale quantity must be a positive integer, got {quantity!r}",
            error_code="INVALID_QUANTITY",
            **kwargs,
        )
        self.quantity = quantity


class UnknownProductError(SalesLedgerError):
    """Raised when a product id has no catalog entry."""

    def __init__(self, product_id: Any, **kwargs):
        super().__init__(
            f"Product {product_id} does not exist",
            table_name="products",
            product_id=product_id,
            error_code="UNKNOWN_PRODUCT",
            **kwargs,
        )


class UnknownInventoryRecordError(SalesLedgerError):
    """Raised when a product has no inventory row (in the requested warehouse)."""

    def __init__(self, product_id: Any, warehouse_id: Any | None = None, **kwargs):
        if warehouse_id is None:
            message = f"No inventory record for product {product_id}"
        else:
            message = f"No inventory record for product {product_id} in warehouse {warehouse_id}"
        super().__init__(
            message,
            table_name="inventory",
            product_id=product_id,
            error_code="UNKNOWN_INVENTORY",
            details={"warehouse": warehouse_id} if warehouse_id is not None else None,
            **kwargs,
        )
        self.warehouse_id = warehouse_id


class DuplicateIdentifierError(SalesLedgerError):
    """
    Raised when a caller-supplied order or order-item id already exists.

    Nothing from the failed sale is written; choose new identifiers and retry.
    """

    def __init__(self, message: str, table_name: str, identifier: Any, **kwargs):
        if table_name == "orders":
            kwargs.setdefault("order_id", identifier)
        else:
            kwargs.setdefault("details", {"order_item": identifier})
        super().__init__(
            message,
            table_name=table_name,
            error_code="DUPLICATE_ID",
            suggested_fix="Supply an unused identifier and call record_sale again",
            **kwargs,
        )
        self.identifier = identifier
