"""Entity package: Order."""

from .entity import Order
from .repository import OrderRepository
from .table import OrderProductMapTable, OrderTable

__all__ = ["Order", "OrderProductMapTable", "OrderRepository", "OrderTable"]
