"""FastAPI dependency implementations."""

from __future__ import annotations

from fastapi import Request

from src.order_manager.api.http.app_data import ApplicationDependencies
from src.order_manager.core.services import DbSessionService, OrderService
from src.order_manager.runtime.config.config_data import ConfigData


def get_app_dependencies(request: Request) -> ApplicationDependencies:
    return request.app.state.app_dependencies


def get_app_config(request: Request) -> ConfigData:
    """Get the configuration the application was created with."""
    return request.app.state.config


def get_database_service(request: Request) -> DbSessionService:
    """Get the database session service instance."""
    return get_app_dependencies(request).database_service


def get_order_service(request: Request) -> OrderService:
    """Get the order service instance."""
    return get_app_dependencies(request).order_service
