"""Entity: Order."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from src.order_manager.entities.service.product.entity import Product


class Order(BaseModel):
    """Order aggregate: the order row together with its associated products.

    `products` holds each associated product once, whatever the number of
    association rows pointing at it.
    """

    id: int = Field(description="Generated order identifier")
    order_description: str = Field(max_length=100, description="Order description")
    created_at: datetime = Field(description="Server-assigned creation time")
    products: list[Product] = Field(default_factory=list)

    @property
    def product_ids(self) -> set[int]:
        return {product.id for product in self.products}

    def __eq__(self, other: Any) -> bool:
        """Compare orders by id, description and product set, ignoring ordering."""
        if not isinstance(other, Order):
            return False

        return (
            self.id == other.id
            and self.order_description == other.order_description
            and set(self.products) == set(other.products)
        )

    def __hash__(self) -> int:
        return hash((self.id, self.order_description))
