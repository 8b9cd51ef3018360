"""Product database table model."""

import sqlalchemy as sa
from sqlmodel import Field, SQLModel


class ProductTable(SQLModel, table=True):
    """Database persistence model for products.

    Ids come from the seed data, so the primary key is not autoincremented.
    """

    __tablename__ = "products"

    id: int = Field(primary_key=True, sa_column_kwargs={"autoincrement": False})
    product_name: str = Field(max_length=100)
    product_description: str | None = Field(default=None, sa_type=sa.Text)
