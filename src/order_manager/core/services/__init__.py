"""Core services exports."""

# Database Services
from .database.db_manage import DbManageService
from .database.db_session import DbSessionService

# Order Services
from .order_service import UNSET, OrderService

__all__ = [
    # Database Services
    "DbManageService",
    "DbSessionService",
    # Order Services
    "OrderService",
    "UNSET",
]
