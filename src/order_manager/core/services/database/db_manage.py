"""Schema bootstrap and product seeding."""

from loguru import logger
from sqlmodel import SQLModel

from src.order_manager.core.services.database.db_session import DbSessionService
from src.order_manager.entities.service.product import ProductRepository, ProductTable

SEED_PRODUCTS: tuple[dict[str, object], ...] = (
    {"id": 1, "product_name": "HP laptop", "product_description": "This is HP laptop"},
    {"id": 2, "product_name": "lenovo laptop", "product_description": "This is lenovo"},
    {"id": 3, "product_name": "Car", "product_description": "This is Car"},
    {"id": 4, "product_name": "Bike", "product_description": "This is Bike"},
)


class DbManageService:
    def __init__(self, database_service: DbSessionService):
        self._db = database_service

    def create_all(self) -> None:
        """Create all database tables and indexes that do not exist yet."""
        # Registers every table on SQLModel.metadata
        from src.order_manager.entities import OrderProductMapTable, OrderTable  # noqa: F401

        SQLModel.metadata.create_all(self._db.engine)
        logger.info("Database initialized with tables.")

    def seed_products(self) -> int:
        """Insert the product catalogue when the products table is empty.

        Returns:
            Number of products inserted (0 when the catalogue already exists).
        """
        with self._db.session_scope() as session:
            if ProductRepository(session).count() > 0:
                logger.debug("Products already present; skipping seed")
                return 0
            session.add_all(ProductTable(**product) for product in SEED_PRODUCTS)

        logger.info("Products seeded successfully ({} rows)", len(SEED_PRODUCTS))
        return len(SEED_PRODUCTS)
