from .db_manage import SEED_PRODUCTS, DbManageService
from .db_session import DbSessionService, build_engine

__all__ = ["DbManageService", "DbSessionService", "SEED_PRODUCTS", "build_engine"]
