"""
Recording a sale against the store.

A sale reads the product's price and the inventory record's stock, and when
the stock covers the requested quantity appends an order, an order line and
decrements the stock in one transaction. When it does not, nothing is
written and an ``InsufficientStock`` result is returned.

The inventory row is read with ``SELECT ... FOR UPDATE`` and the decrement is
conditional on ``stock >= quantity``, so concurrent sales of the same product
can never drive stock below zero.
"""

from __future__ import annotations

import logging
import numbers
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, ClassVar, Union

from sqlalchemy import Connection, Engine, insert, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from salesledger.config import Settings, get_settings
from salesledger.exceptions import (
    DuplicateIdentifierError,
    InvalidQuantityError,
    TransactionError,
    UnknownInventoryRecordError,
    UnknownProductError,
)
from salesledger.schema import inventory, order_items, orders, products

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")


@dataclass(frozen=True)
class SaleConfirmation:
    """A committed sale."""

    ok: ClassVar[bool] = True

    order_id: int
    order_item_id: int
    product_id: int
    product_name: str
    quantity: int
    unit_price: Decimal
    total_value: Decimal
    order_date: date
    stock_after: int

    @property
    def message(self) -> str:
        return (
            f"Sale of {self.quantity} x {self.product_name} recorded as order "
            f"{self.order_id}; inventory stock updated to {self.stock_after}"
        )

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True)
class InsufficientStock:
    """A sale that was refused because the stock does not cover it. Nothing was written."""

    ok: ClassVar[bool] = False

    product_id: int
    product_name: str
    requested: int
    available: int

    @property
    def message(self) -> str:
        return (
            f"Product {self.product_name} is not available in the requested quantity: "
            f"requested {self.requested}, in stock {self.available}"
        )

    def __str__(self) -> str:
        return self.message


SaleResult = Union[SaleConfirmation, InsufficientStock]


class _StockChanged(Exception):
    """Conditional decrement matched no row; rolls the sale back."""

    def __init__(self, available: int):
        super().__init__(available)
        self.available = available


def _validate_quantity(quantity: Any) -> int:
    if isinstance(quantity, bool) or not isinstance(quantity, numbers.Integral):
        raise InvalidQuantityError(quantity, operation="record_sale")
    if quantity <= 0:
        raise InvalidQuantityError(quantity, operation="record_sale")
    return int(quantity)


class SaleRecorder:
    """
    Records sales against a store.

    Attributes:
        engine: SQLAlchemy engine of the store
        settings: Settings supplying the status written on new orders

    Example:
        >>> recorder = SaleRecorder(engine)
        >>> result = recorder.record_sale(25005, 2, 5, 25004, product_id=1, quantity=14)
        >>> result.ok
        True
    """

    def __init__(self, engine: Engine, settings: Settings | None = None):
        self.engine = engine
        self.settings = settings if settings is not None else get_settings()

    def record_sale(
        self,
        order_id: int,
        customer_id: int,
        seller_id: int,
        order_item_id: int,
        product_id: int,
        quantity: int,
        *,
        warehouse_id: int | None = None,
        order_date: date | None = None,
    ) -> SaleResult:
        """
        Record one sale of ``quantity`` units of a product.

        Args:
            order_id: Id of the new order (caller-supplied, must be unused)
            customer_id: Customer placing the order
            seller_id: Seller fulfilling the order
            order_item_id: Id of the new order line (caller-supplied, must be unused)
            product_id: Product sold
            quantity: Units sold, a positive integer
            warehouse_id: Inventory warehouse to draw from; when omitted the
                product's inventory record with the lowest id is used
            order_date: Date written on the order; defaults to today

        Returns:
            SaleConfirmation when the sale was committed, InsufficientStock
            when the stock does not cover ``quantity`` (no rows written)

        Raises:
            InvalidQuantityError: If quantity is not a positive integer
            UnknownProductError: If the product does not exist
            UnknownInventoryRecordError: If the product has no inventory record
            DuplicateIdentifierError: If order_id or order_item_id is already used
            TransactionError: If the store rejects the write for any other reason
        """
        quantity = _validate_quantity(quantity)
        order_date = order_date or date.today()

        product_name = str(product_id)
        try:
            with self.engine.begin() as connection:
                product = self._fetch_product(connection, product_id)
                product_name = product.product_name
                record = self._lock_inventory(connection, product_id, warehouse_id)
                self._check_identifiers_unused(connection, order_id, order_item_id, product_id)

                if record.stock < quantity:
                    logger.warning(
                        f"Refused sale of {quantity} x product {product_id}: only {record.stock} in stock"
                    )
                    return InsufficientStock(product_id, product_name, quantity, record.stock)

                unit_price = Decimal(product.price)
                total_value = (unit_price * quantity).quantize(CENTS)

                connection.execute(
                    insert(orders).values(
                        order_id=order_id,
                        order_date=order_date,
                        customer_id=customer_id,
                        seller_id=seller_id,
                        order_status=self.settings.order_status,
                    )
                )
                connection.execute(
                    insert(order_items).values(
                        order_item_id=order_item_id,
                        order_id=order_id,
                        product_id=product_id,
                        quantity=quantity,
                        price_per_unit=unit_price,
                        total_value=total_value,
                    )
                )
                stock_after = self._decrement_stock(connection, record.inventory_id, quantity)
        except _StockChanged as changed:
            logger.warning(
                f"Rolled back sale of {quantity} x product {product_id}: "
                f"stock changed to {changed.available} before the decrement"
            )
            return InsufficientStock(product_id, product_name, quantity, changed.available)
        except IntegrityError as e:
            raise self._integrity_error(e, order_id, order_item_id, product_id) from e
        except SQLAlchemyError as e:
            raise TransactionError(
                f"Failed to record sale: {e.__class__.__name__}: {e}",
                operation="record_sale",
                error_code="TRANSACTION_FAILED",
                product_id=product_id,
                order_id=order_id,
            ) from e

        logger.info(
            f"Recorded order {order_id}: {quantity} x product {product_id} "
            f"for {total_value}, stock now {stock_after}"
        )
        return SaleConfirmation(
            order_id=order_id,
            order_item_id=order_item_id,
            product_id=product_id,
            product_name=product_name,
            quantity=quantity,
            unit_price=unit_price,
            total_value=total_value,
            order_date=order_date,
            stock_after=stock_after,
        )

    def _fetch_product(self, connection: Connection, product_id: int) -> Any:
        row = connection.execute(
            select(products.c.product_name, products.c.price).where(
                products.c.product_id == product_id
            )
        ).first()
        if row is None or row.price is None:
            raise UnknownProductError(product_id, operation="record_sale")
        return row

    def _lock_inventory(
        self, connection: Connection, product_id: int, warehouse_id: int | None
    ) -> Any:
        stmt = select(inventory.c.inventory_id, inventory.c.stock).where(
            inventory.c.product_id == product_id
        )
        if warehouse_id is not None:
            stmt = stmt.where(inventory.c.warehouse_id == warehouse_id)
        stmt = stmt.order_by(inventory.c.inventory_id).limit(1).with_for_update()

        row = connection.execute(stmt).first()
        if row is None:
            raise UnknownInventoryRecordError(product_id, warehouse_id, operation="record_sale")
        return row

    def _check_identifiers_unused(
        self, connection: Connection, order_id: int, order_item_id: int, product_id: int
    ) -> None:
        if connection.execute(
            select(orders.c.order_id).where(orders.c.order_id == order_id)
        ).first() is not None:
            raise DuplicateIdentifierError(
                f"Order {order_id} already exists",
                "orders",
                order_id,
                operation="record_sale",
                product_id=product_id,
            )
        if connection.execute(
            select(order_items.c.order_item_id).where(order_items.c.order_item_id == order_item_id)
        ).first() is not None:
            raise DuplicateIdentifierError(
                f"Order item {order_item_id} already exists",
                "order_items",
                order_item_id,
                operation="record_sale",
                product_id=product_id,
            )

    def _decrement_stock(self, connection: Connection, inventory_id: int, quantity: int) -> int:
        result = connection.execute(
            update(inventory)
            .where(inventory.c.inventory_id == inventory_id)
            .where(inventory.c.stock >= quantity)
            .values(stock=inventory.c.stock - quantity)
        )
        current = connection.execute(
            select(inventory.c.stock).where(inventory.c.inventory_id == inventory_id)
        ).scalar_one()
        if result.rowcount != 1:
            raise _StockChanged(current)
        return current

    def _integrity_error(
        self, error: IntegrityError, order_id: int, order_item_id: int, product_id: int
    ) -> Exception:
        text = str(error.orig).lower()
        if "unique" in text or "duplicate" in text or "primary key" in text:
            table_name = "order_items" if "order_item" in text else "orders"
            identifier = order_item_id if table_name == "order_items" else order_id
            return DuplicateIdentifierError(
                f"Identifier {identifier} already exists in {table_name}",
                table_name,
                identifier,
                operation="record_sale",
                product_id=product_id,
            )
        return TransactionError(
            f"Store rejected the sale: {error.orig}",
            operation="record_sale",
            error_code="INTEGRITY_VIOLATION",
            product_id=product_id,
            order_id=order_id,
            details={"order_item": order_item_id},
        )


def record_sale(
    engine: Engine,
    order_id: int,
    customer_id: int,
    seller_id: int,
    order_item_id: int,
    product_id: int,
    quantity: int,
    *,
    warehouse_id: int | None = None,
    order_date: date | None = None,
    settings: Settings | None = None,
) -> SaleResult:
    """Record one sale; see ``SaleRecorder.record_sale``."""
    return SaleRecorder(engine, settings).record_sale(
        order_id,
        customer_id,
        seller_id,
        order_item_id,
        product_id,
        quantity,
        warehouse_id=warehouse_id,
        order_date=order_date,
    )
