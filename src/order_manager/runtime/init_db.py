"""Database initialization script."""

from loguru import logger

from src.order_manager.core.services.database.db_manage import DbManageService
from src.order_manager.core.services.database.db_session import DbSessionService
from src.order_manager.runtime.config.config_data import ConfigData
from src.order_manager.runtime.context import get_config


def init_db(
    database_service: DbSessionService | None = None,
    config: ConfigData | None = None,
) -> DbSessionService:
    """Create all tables and seed the product catalogue. Safe to run repeatedly."""
    config = config or get_config()
    database_service = database_service or DbSessionService()
    manage_service = DbManageService(database_service)

    logger.info("Initializing database schema...")
    manage_service.create_all()
    if config.database.seed_products:
        manage_service.seed_products()
    logger.info("Database initialized successfully")
    return database_service


if __name__ == "__main__":
    init_db()
