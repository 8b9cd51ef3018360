"""Order service: creates and updates orders as all-or-nothing units.

Every write follows the same two steps. Input is validated first, outside any
transaction, so invalid requests never hold a connection in a transaction.
The order row and its product associations are then written inside a single
`session_scope()`, which commits on success and rolls back on any error.
Results are re-read in a fresh session after the commit, so callers see
exactly the committed state.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from loguru import logger

from src.order_manager.core.exceptions import BadRequestError, NotFoundError
from src.order_manager.core.services.database.db_session import DbSessionService
from src.order_manager.entities.service.order import Order, OrderRepository
from src.order_manager.entities.service.product import Product, ProductRepository


class _Unset:
    """Marker for an update field the caller did not provide."""

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Any = _Unset()


class OrderService:
    """Coordinates the product and order stores for every order operation."""

    def __init__(self, database_service: DbSessionService) -> None:
        self._db = database_service

    # --- Reads ---------------------------------------------------------------

    def list_orders(self) -> list[Order]:
        with self._db.read_scope() as session:
            return OrderRepository(session).find_all()

    def get_order(self, order_id: int) -> Order:
        with self._db.read_scope() as session:
            order = OrderRepository(session).find_by_id(order_id)
        if order is None:
            raise NotFoundError(f"Order with id {order_id} not found")
        return order

    def list_products(self) -> list[Product]:
        with self._db.read_scope() as session:
            return ProductRepository(session).find_all()

    # --- Writes --------------------------------------------------------------

    def create_order(self, order_description: str, product_ids: Sequence[int]) -> Order:
        """Insert an order and its product associations in one transaction."""
        product_ids = list(product_ids)
        self._ensure_products_exist(product_ids)

        with self._db.session_scope() as session:
            orders = OrderRepository(session)
            order_id, _ = orders.insert(order_description)
            orders.add_products(order_id, product_ids)

        logger.info(
            "Created order {} with {} product association(s)", order_id, len(product_ids)
        )
        return self.get_order(order_id)

    def update_order(
        self,
        order_id: int,
        order_description: str = UNSET,
        product_ids: Sequence[int] = UNSET,
    ) -> Order:
        """Apply a partial update.

        An omitted field is left untouched. `product_ids=[]` is not the same as
        omitting it: the provided list replaces the whole association set, so
        an empty list removes every product from the order.
        """
        self._ensure_order_exists(order_id)

        replace_products = product_ids is not UNSET
        if replace_products:
            product_ids = list(product_ids)
            self._ensure_products_exist(product_ids)

        with self._db.session_scope() as session:
            orders = OrderRepository(session)
            # The order may have been deleted since the check above
            if not orders.exists(order_id):
                raise NotFoundError(f"Order with id {order_id} not found")
            if order_description is not UNSET:
                orders.update_description(order_id, order_description)
            if replace_products:
                orders.replace_associations(order_id, product_ids)

        logger.info(
            "Updated order {} (description={}, products={})",
            order_id,
            order_description is not UNSET,
            list(product_ids) if replace_products else "unchanged",
        )
        return self.get_order(order_id)

    def delete_order(self, order_id: int) -> None:
        """Delete an order; its associations go with it through the cascade."""
        with self._db.session_scope() as session:
            removed = OrderRepository(session).delete(order_id)

        if not removed:
            raise NotFoundError(f"Order with id {order_id} not found")
        logger.info("Deleted order {}", order_id)

    # --- Validation ----------------------------------------------------------

    def _ensure_order_exists(self, order_id: int) -> None:
        with self._db.read_scope() as session:
            found = OrderRepository(session).exists(order_id)
        if not found:
            raise NotFoundError(f"Order with id {order_id} not found")

    def _ensure_products_exist(self, product_ids: Sequence[int]) -> None:
        if not product_ids:
            return
        with self._db.read_scope() as session:
            valid = ProductRepository(session).all_exist(product_ids)
        if not valid:
            logger.warning("Rejected unknown product ids in {}", list(product_ids))
            raise BadRequestError("One or more product IDs are invalid")
