"""Entity: Product."""

from typing import Any

from pydantic import BaseModel, Field


class Product(BaseModel):
    """Catalogue item that orders can reference.

    Products are seeded once and are read-only from the order side.
    """

    id: int = Field(description="Externally assigned product identifier")
    product_name: str = Field(description="Product name")
    product_description: str | None = Field(
        default=None, description="Optional product description"
    )

    def __eq__(self, other: Any) -> bool:
        """Compare products by their attributes."""
        if not isinstance(other, Product):
            return False

        return (
            self.id == other.id
            and self.product_name == other.product_name
            and self.product_description == other.product_description
        )

    def __hash__(self) -> int:
        return hash((self.id, self.product_name, self.product_description))
