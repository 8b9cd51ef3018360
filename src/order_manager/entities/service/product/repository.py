"""Product repository: read-only lookups and existence checks."""

from collections.abc import Iterable

from sqlalchemy import func
from sqlmodel import Session, col, select

from .entity import Product
from .table import ProductTable


class ProductRepository:
    """Data-access layer for products."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def find_all(self) -> list[Product]:
        """Return every product ordered by id."""
        statement = select(ProductTable).order_by(col(ProductTable.id))
        rows = self._session.exec(statement).all()
        return [Product.model_validate(row, from_attributes=True) for row in rows]

    def count(self) -> int:
        statement = select(func.count()).select_from(ProductTable)
        return self._session.exec(statement).one()

    def count_existing(self, product_ids: Iterable[int]) -> int:
        """Count how many of the given ids exist, in a single query."""
        distinct_ids = set(product_ids)
        if not distinct_ids:
            return 0
        statement = (
            select(func.count())
            .select_from(ProductTable)
            .where(col(ProductTable.id).in_(distinct_ids))
        )
        return self._session.exec(statement).one()

    def all_exist(self, product_ids: Iterable[int]) -> bool:
        """True when every distinct id refers to an existing product.

        An empty id collection trivially passes.
        """
        distinct_ids = set(product_ids)
        if not distinct_ids:
            return True
        return self.count_existing(distinct_ids) == len(distinct_ids)
