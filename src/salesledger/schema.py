"""
Store schema.

The nine tables of the e-commerce store as SQLAlchemy Core objects bound to
one MetaData. ``TABLES_IN_LOAD_ORDER`` lists them parents first so bulk loads
satisfy foreign keys.
"""

from __future__ import annotations

from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    Engine,
    ForeignKey,
    Integer,
    MetaData,
    Numeric,
    String,
    Table,
)

from salesledger.exceptions import SchemaError

metadata = MetaData()

category = Table(
    "category",
    metadata,
    Column("category_id", Integer, primary_key=True, autoincrement=False),
    Column("category_name", String(50)),
)

customers = Table(
    "customers",
    metadata,
    Column("customer_id", Integer, primary_key=True, autoincrement=False),
    Column("first_name", String(20)),
    Column("last_name", String(20)),
    Column("state", String(20)),
    Column("address", String(50)),
)

sellers = Table(
    "sellers",
    metadata,
    Column("seller_id", Integer, primary_key=True, autoincrement=False),
    Column("seller_name", String(25)),
    Column("origin", String(15)),
)

products = Table(
    "products",
    metadata,
    Column("product_id", Integer, primary_key=True, autoincrement=False),
    Column("product_name", String(100), nullable=False),
    Column("price", Numeric(10, 2), nullable=False),
    Column("cogs", Numeric(10, 2)),
    Column("category_id", Integer, ForeignKey("category.category_id")),
)

orders = Table(
    "orders",
    metadata,
    Column("order_id", Integer, primary_key=True, autoincrement=False),
    Column("order_date", Date, nullable=False),
    Column("customer_id", Integer, ForeignKey("customers.customer_id"), nullable=False),
    Column("seller_id", Integer, ForeignKey("sellers.seller_id"), nullable=False),
    Column("order_status", String(15)),
)

order_items = Table(
    "order_items",
    metadata,
    Column("order_item_id", Integer, primary_key=True, autoincrement=False),
    Column("order_id", Integer, ForeignKey("orders.order_id"), nullable=False, index=True),
    Column("product_id", Integer, ForeignKey("products.product_id"), nullable=False, index=True),
    Column("quantity", Integer, nullable=False),
    Column("price_per_unit", Numeric(10, 2), nullable=False),
    Column("total_value", Numeric(12, 2), nullable=False),
    CheckConstraint("quantity > 0", name="ck_order_items_quantity_positive"),
)

payments = Table(
    "payments",
    metadata,
    Column("payment_id", Integer, primary_key=True, autoincrement=False),
    Column("order_id", Integer, ForeignKey("orders.order_id"), index=True),
    Column("payment_date", Date),
    Column("payment_status", String(20)),
)

shippings = Table(
    "shippings",
    metadata,
    Column("shipping_id", Integer, primary_key=True, autoincrement=False),
    Column("order_id", Integer, ForeignKey("orders.order_id"), index=True),
    Column("shipping_date", Date),
    Column("return_date", Date),
    Column("shipping_providers", String(15)),
    Column("delivery_status", String(15)),
)

inventory = Table(
    "inventory",
    metadata,
    Column("inventory_id", Integer, primary_key=True, autoincrement=False),
    Column("product_id", Integer, ForeignKey("products.product_id"), nullable=False, index=True),
    Column("stock", Integer, nullable=False),
    Column("warehouse_id", Integer),
    Column("last_stock_date", Date),
    CheckConstraint("stock >= 0", name="ck_inventory_stock_non_negative"),
)

TABLES_IN_LOAD_ORDER = [
    category,
    customers,
    sellers,
    products,
    orders,
    order_items,
    payments,
    shippings,
    inventory,
]


def get_table(table_name: str) -> Table:
    """
    Look up a store table by name.

    Raises:
        SchemaError: If the name is not one of the store tables
    """
    try:
        return metadata.tables[table_name]
    except KeyError:
        raise SchemaError(
            f"Unknown table '{table_name}'",
            table_name=table_name,
            error_code="UNKNOWN_TABLE",
            details={"known_tables": sorted(metadata.tables)},
        ) from None


def primary_key_columns(table_name: str) -> list[str]:
    """Return the primary key column names of a store table."""
    return [col.name for col in get_table(table_name).primary_key.columns]


def create_schema(engine: Engine) -> None:
    """Create every store table that does not exist yet."""
    with engine.begin() as conn:
        metadata.create_all(bind=conn, checkfirst=True)


def drop_schema(engine: Engine) -> None:
    """Drop every store table, children first."""
    with engine.begin() as conn:
        metadata.drop_all(bind=conn, checkfirst=True)
