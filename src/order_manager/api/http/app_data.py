from dataclasses import dataclass

from src.order_manager.core.services import DbSessionService, OrderService


@dataclass
class ApplicationDependencies:
    database_service: DbSessionService
    order_service: OrderService
