"""Entities module with an entity-centric structure.

Each entity has its own package containing:
- entity.py: Domain model returned to callers
- table.py: Database persistence model
- repository.py: Data access layer
"""

from .service.order import Order, OrderProductMapTable, OrderRepository, OrderTable
from .service.product import Product, ProductRepository, ProductTable

__all__ = [
    "Order",
    "OrderTable",
    "OrderProductMapTable",
    "OrderRepository",
    "Product",
    "ProductTable",
    "ProductRepository",
]
