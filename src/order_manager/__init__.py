"""Order management service.

A REST backend for orders and their products: FastAPI routing, SQLModel
persistence and the transactional order-write path that keeps an order and
its product associations consistent.
"""

__version__ = "0.1.0"
