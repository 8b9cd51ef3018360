"""Database engine and session factory used across the application."""

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from loguru import logger
from sqlalchemy import event, text
from sqlalchemy.engine import Engine
from sqlmodel import Session, create_engine

from src.order_manager.runtime.config.config_data import ConfigData
from src.order_manager.runtime.context import get_config


def _enable_sqlite_foreign_keys(dbapi_connection: Any, _connection_record: Any) -> None:
    # SQLite ignores ON DELETE CASCADE unless foreign keys are switched on per connection
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(config: ConfigData) -> Engine:
    """Create the process-wide engine for the configured database."""
    db_config = config.database

    logger.info("Configuring database engine for environment: {}", config.app.environment)
    engine_kwargs: dict[str, Any] = {
        "pool_pre_ping": True,  # Validate connections before use
        "echo": db_config.echo,
        "connect_args": _get_connect_args(config),
    }

    if not db_config.is_sqlite:
        engine_kwargs.update(
            {
                "pool_size": db_config.pool_size,
                "max_overflow": db_config.max_overflow,
                "pool_timeout": db_config.pool_timeout,
                "pool_recycle": db_config.pool_recycle,
            }
        )

    config.warn_on_insecure_settings()
    return create_engine(db_config.connection_string, **engine_kwargs)


def _get_connect_args(config: ConfigData) -> dict:
    """Get database-specific connection arguments."""
    connect_args: dict[str, Any] = {}

    if config.database.is_sqlite:
        connect_args.update(
            {
                "check_same_thread": False,  # Sessions are used from the threadpool
                "timeout": 20,  # Lock timeout
            }
        )
    elif "postgresql" in config.database.url:
        connect_args.update(
            {
                "application_name": f"{config.app.environment}_order_manager",
                "connect_timeout": 30,
            }
        )

    return connect_args


class DbSessionService:
    """Owns the shared engine and hands out sessions bound to it."""

    def __init__(self, engine: Engine | None = None):
        if engine is None:
            logger.info("Setting up database engine and session factory")
            engine = build_engine(get_config())
        self._engine = engine

        if self._engine.dialect.name == "sqlite":
            event.listen(self._engine, "connect", _enable_sqlite_foreign_keys)

    @property
    def engine(self) -> Engine:
        return self._engine

    def get_session(self) -> Session:
        """Return a new SQLModel session bound to the shared engine."""
        return Session(
            self._engine,
            expire_on_commit=False,  # Prevent lazy loading issues
            autoflush=True,
        )

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        """Run the enclosed block as one transaction.

        Commits when the block exits normally, rolls back and re-raises on any
        error, and always returns the connection to the pool.
        """
        db = self.get_session()
        try:
            yield db
            db.commit()
        except Exception as e:
            db.rollback()
            logger.error(
                "Database transaction rolled back",
                error_type=type(e).__name__,
                error_message=str(e),
            )
            raise
        finally:
            db.close()

    @contextmanager
    def read_scope(self) -> Iterator[Session]:
        """Short-lived session for read-only queries outside a transaction."""
        db = self.get_session()
        try:
            yield db
        finally:
            db.close()

    def health_check(self) -> bool:
        """Perform a health check on the database connection."""
        try:
            with self._engine.connect() as connection:
                connection.execute(text("SELECT 1"))
                return True
        except Exception as e:
            logger.error(
                "Database health check failed",
                error_type=type(e).__name__,
                error_message=str(e),
            )
            return False

    def get_pool_status(self) -> dict:
        """Get current connection pool status for monitoring."""
        pool = self._engine.pool
        return {
            "size": getattr(pool, "size", lambda: 0)(),
            "checked_in": getattr(pool, "checkedin", lambda: 0)(),
            "checked_out": getattr(pool, "checkedout", lambda: 0)(),
            "overflow": getattr(pool, "overflow", lambda: 0)(),
        }

    def dispose(self) -> None:
        self._engine.dispose()
