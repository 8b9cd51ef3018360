"""Order repository: the aggregate query and the mutation statements."""

from collections.abc import Sequence
from datetime import datetime
from typing import Any

from sqlalchemy import delete, update
from sqlmodel import Session, col, select

from src.order_manager.entities.service.product.entity import Product
from src.order_manager.entities.service.product.table import ProductTable

from .entity import Order
from .table import OrderProductMapTable, OrderTable


def _aggregate_select() -> Any:
    """Order rows left-joined to their products, one result row per association."""
    return (
        select(OrderTable, ProductTable)
        .join(
            OrderProductMapTable,
            col(OrderProductMapTable.order_id) == col(OrderTable.id),
            isouter=True,
        )
        .join(
            ProductTable,
            col(ProductTable.id) == col(OrderProductMapTable.product_id),
            isouter=True,
        )
    )


def _to_orders(rows: Sequence[tuple[OrderTable, ProductTable | None]]) -> list[Order]:
    """Fold joined rows into Order aggregates, keeping each product once per order."""
    orders: dict[int, Order] = {}
    seen: dict[int, set[int]] = {}

    for order_row, product_row in rows:
        order_id = order_row.id
        assert order_id is not None
        order = orders.get(order_id)
        if order is None:
            order = Order(
                id=order_id,
                order_description=order_row.order_description,
                created_at=order_row.created_at,
            )
            orders[order_id] = order
            seen[order_id] = set()

        if product_row is None or product_row.id in seen[order_id]:
            continue
        seen[order_id].add(product_row.id)
        order.products.append(Product.model_validate(product_row, from_attributes=True))

    return list(orders.values())


class OrderRepository:
    """Data-access layer for orders and their product associations.

    Mutations run in the caller's session and are committed by the caller,
    which makes several of them one transaction.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def find_all(self) -> list[Order]:
        """Return all orders with their products, newest first."""
        statement = _aggregate_select().order_by(
            col(OrderTable.created_at).desc(),
            col(OrderTable.id).desc(),
            col(ProductTable.id),
        )
        return _to_orders(self._session.exec(statement).all())

    def find_by_id(self, order_id: int) -> Order | None:
        """Return the order with its products, or None when it does not exist."""
        statement = (
            _aggregate_select()
            .where(col(OrderTable.id) == order_id)
            .order_by(col(ProductTable.id))
        )
        orders = _to_orders(self._session.exec(statement).all())
        return orders[0] if orders else None

    def exists(self, order_id: int) -> bool:
        statement = select(OrderTable.id).where(col(OrderTable.id) == order_id)
        return self._session.exec(statement).first() is not None

    def insert(self, order_description: str) -> tuple[int, datetime]:
        """Insert an order row and return its generated id and creation time."""
        row = OrderTable(order_description=order_description)
        self._session.add(row)
        self._session.flush()
        assert row.id is not None
        return row.id, row.created_at

    def update_description(self, order_id: int, order_description: str) -> None:
        """Overwrite the description; associations are left alone."""
        statement = (
            update(OrderTable)
            .where(col(OrderTable.id) == order_id)
            .values(order_description=order_description)
        )
        self._session.exec(statement)  # type: ignore[call-overload]

    def add_products(self, order_id: int, product_ids: Sequence[int]) -> None:
        """Insert one association row per id, duplicates included."""
        if not product_ids:
            return
        self._session.add_all(
            OrderProductMapTable(order_id=order_id, product_id=product_id)
            for product_id in product_ids
        )
        self._session.flush()

    def delete_products(self, order_id: int) -> None:
        statement = delete(OrderProductMapTable).where(
            col(OrderProductMapTable.order_id) == order_id
        )
        self._session.exec(statement)  # type: ignore[call-overload]

    def replace_associations(self, order_id: int, product_ids: Sequence[int]) -> None:
        """Make `product_ids` the order's entire association set.

        Existing rows are deleted first; an empty list leaves the order with
        no products.
        """
        self.delete_products(order_id)
        self.add_products(order_id, product_ids)

    def delete(self, order_id: int) -> bool:
        """Delete the order (associations cascade). Returns whether a row was removed."""
        statement = delete(OrderTable).where(col(OrderTable.id) == order_id)
        result = self._session.exec(statement)  # type: ignore[call-overload]
        return result.rowcount > 0
