"""Order and order-product association table models."""

from datetime import UTC, datetime

import sqlalchemy as sa
from sqlmodel import Field, SQLModel


class OrderTable(SQLModel, table=True):
    """Database persistence model for orders."""

    __tablename__ = "orders"

    id: int | None = Field(default=None, primary_key=True)
    order_description: str = Field(max_length=100)
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        nullable=False,
        sa_column_kwargs={"server_default": sa.func.now()},
    )


class OrderProductMapTable(SQLModel, table=True):
    """Join row linking one order to one product.

    Both foreign keys cascade on delete, so removing an order removes its
    associations in the same statement.
    """

    __tablename__ = "order_product_map"

    id: int | None = Field(default=None, primary_key=True)
    order_id: int = Field(
        foreign_key="orders.id", ondelete="CASCADE", nullable=False, index=True
    )
    product_id: int = Field(
        foreign_key="products.id", ondelete="CASCADE", nullable=False, index=True
    )
