"""FastAPI application factory and setup."""

import time
import uuid
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from sqlalchemy.exc import DataError, IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse

from src.order_manager.api.http.app_data import ApplicationDependencies
from src.order_manager.api.http.routers.health import router as health_router
from src.order_manager.api.http.routers.service.order import router as order_router
from src.order_manager.api.http.schemas import ErrorResponse, FieldError
from src.order_manager.api.utils.app_startup import configure_logging
from src.order_manager.core.exceptions import (
    BadRequestError,
    ConflictError,
    InternalServerError,
    OrderManagerError,
)
from src.order_manager.core.services import DbSessionService, OrderService
from src.order_manager.core.services.database.db_session import build_engine
from src.order_manager.runtime.config.config_data import ConfigData
from src.order_manager.runtime.context import get_config
from src.order_manager.runtime.init_db import init_db

# Messages for required body fields that were left out entirely
_MISSING_FIELD_MESSAGES = {
    "orderDescription": "Order description is required",
    "productIds": "At least one product must be selected",
}

_PRODUCT_ID_MESSAGE = "Product IDs must be positive integers"

# productIds that is not a list at all, by request method
_NOT_A_LIST_MESSAGES = {
    "POST": "At least one product must be selected",
    "PUT": "Product IDs must be an array",
}

_PG_UNIQUE_VIOLATION = "23505"
_PG_FOREIGN_KEY_VIOLATION = "23503"


# --- Security middleware ---
class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, environment: str):
        super().__init__(app)
        self.environment = environment

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault(
            "Referrer-Policy", "strict-origin-when-cross-origin"
        )
        # HSTS only in prod
        if self.environment == "production":
            response.headers.setdefault(
                "Strict-Transport-Security",
                "max-age=31536000; includeSubDomains; preload",
            )
        return response


def _error_response(
    status_code: int,
    message: str,
    errors: list[FieldError] | None = None,
) -> JSONResponse:
    body = ErrorResponse(message=message, errors=errors)
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(exclude_none=True),
    )


# --- Request logging middleware ---
async def log_requests(request: Request, call_next):
    # Correlation / tracing
    request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())

    xff = request.headers.get("x-forwarded-for")
    client_ip = (
        xff.split(",")[0].strip()
        if xff
        else request.client.host
        if request.client
        else "unknown"
    )

    base_ctx = {
        "request_id": request_id,
        "method": request.method,
        "path": request.url.path,
        "client_ip": client_ip,
        "user_agent": request.headers.get("user-agent", "unknown"),
    }

    start = time.perf_counter()

    # Everything that logs within this block inherits base_ctx
    with logger.contextualize(**base_ctx):
        try:
            logger.info("request.start")
            response = await call_next(request)

            duration_ms = (time.perf_counter() - start) * 1000
            logger.bind(
                status_code=response.status_code,
                duration_ms=round(duration_ms, 1),
            ).info("request.end")

            response.headers.setdefault("X-Request-ID", request_id)
            return response

        except Exception as exc:
            duration_ms = (time.perf_counter() - start) * 1000
            logger.bind(
                status_code=500,
                duration_ms=round(duration_ms, 1),
                error_type=type(exc).__name__,
            ).exception("request.error")

            config: ConfigData = request.app.state.config
            error = (
                InternalServerError()
                if config.app.environment == "production"
                else InternalServerError(str(exc))
            )
            response = _error_response(error.status_code, error.message)
            response.headers["X-Request-ID"] = request_id
            return response


# --- Exception handlers ---
def _field_name(loc: tuple[Any, ...]) -> str:
    if loc[:1] == ("path",):
        return "id"
    parts = [str(part) for part in loc if part not in ("body", "query")]
    return ".".join(parts) or "body"


def _field_message(error: dict[str, Any], method: str) -> str:
    loc = tuple(error.get("loc", ()))
    if loc[:1] == ("path",):
        return "Order ID must be a positive integer"

    if loc[:2] == ("body", "productIds"):
        if len(loc) == 3:
            return _PRODUCT_ID_MESSAGE
        if error.get("type") == "list_type":
            return _NOT_A_LIST_MESSAGES.get(method, error["msg"])

    ctx_error = (error.get("ctx") or {}).get("error")
    if isinstance(ctx_error, Exception):
        return str(ctx_error)

    if error.get("type") == "missing" and len(loc) == 2:
        return _MISSING_FIELD_MESSAGES.get(str(loc[1]), error["msg"])

    return error["msg"]


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = [
        FieldError(
            field=_field_name(tuple(err.get("loc", ()))),
            message=_field_message(err, request.method),
        )
        for err in exc.errors()
    ]
    logger.bind(errors=[e.model_dump() for e in errors]).info("request.validation_error")
    return _error_response(400, "Validation failed", errors)


async def order_manager_exception_handler(
    request: Request, exc: OrderManagerError
) -> JSONResponse:
    return _error_response(exc.status_code, exc.message)


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    if exc.status_code == 404 and exc.detail == "Not Found":
        message = f"Route {request.method} {request.url.path} not found"
    else:
        message = str(exc.detail)
    return _error_response(exc.status_code, message)


def _is_unique_violation(exc: IntegrityError) -> bool:
    pgcode = getattr(exc.orig, "pgcode", None)
    if pgcode is not None:
        return pgcode == _PG_UNIQUE_VIOLATION
    return "UNIQUE constraint failed" in str(exc.orig)


def _is_foreign_key_violation(exc: IntegrityError) -> bool:
    pgcode = getattr(exc.orig, "pgcode", None)
    if pgcode is not None:
        return pgcode == _PG_FOREIGN_KEY_VIOLATION
    return "FOREIGN KEY constraint failed" in str(exc.orig)


async def integrity_exception_handler(
    request: Request, exc: IntegrityError
) -> JSONResponse:
    logger.warning("Integrity error: {}", exc.orig)
    if _is_unique_violation(exc):
        error: OrderManagerError = ConflictError()
    elif _is_foreign_key_violation(exc):
        error = BadRequestError("Referenced resource does not exist")
    else:
        error = BadRequestError("Invalid request")
    return _error_response(error.status_code, error.message)


async def data_exception_handler(request: Request, exc: DataError) -> JSONResponse:
    logger.warning("Data error: {}", exc.orig)
    error = BadRequestError("Invalid input format")
    return _error_response(error.status_code, error.message)


# --- FastAPI app setup ---
def _build_dependencies(database_service: DbSessionService) -> ApplicationDependencies:
    return ApplicationDependencies(
        database_service=database_service,
        order_service=OrderService(database_service),
    )


def create_app(
    config: ConfigData | None = None,
    database_service: DbSessionService | None = None,
) -> FastAPI:
    """Build the application.

    Args:
        config: Configuration to run with; defaults to the active context.
        database_service: Pre-built database service. When omitted, one is
            created from `config` at startup and disposed at shutdown.
    """
    config = config or get_config()
    configure_logging(config)

    cors = config.app.cors
    if config.app.environment == "production" and "*" in cors.origins and cors.allow_credentials:
        raise RuntimeError(
            "CORS misconfigured: cannot use '*' with allow_credentials=True in production"
        )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owns_database = not hasattr(app.state, "app_dependencies")
        if owns_database:
            app.state.app_dependencies = _build_dependencies(
                DbSessionService(build_engine(config))
            )
        deps: ApplicationDependencies = app.state.app_dependencies

        logger.info("Starting up application in {} environment", config.app.environment)
        init_db(deps.database_service, config)
        try:
            yield
        finally:
            logger.info("Shutting down application")
            if owns_database:
                deps.database_service.dispose()
                del app.state.app_dependencies

    is_production = config.app.environment == "production"
    app = FastAPI(
        title="Order Manager",
        lifespan=lifespan,
        docs_url=None if is_production else "/docs",
        redoc_url=None if is_production else "/redoc",
        openapi_url=None if is_production else "/openapi.json",
    )
    app.state.config = config
    if database_service is not None:
        app.state.app_dependencies = _build_dependencies(database_service)

    # Innermost, so CORS and security headers also wrap its 500 responses
    app.middleware("http")(log_requests)
    app.add_middleware(SecurityHeadersMiddleware, environment=config.app.environment)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors.origins,
        allow_credentials=cors.allow_credentials,
        allow_methods=cors.allow_methods,
        allow_headers=cors.allow_headers,
    )

    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(OrderManagerError, order_manager_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(IntegrityError, integrity_exception_handler)
    app.add_exception_handler(DataError, data_exception_handler)

    # --- Router registration ---
    app.include_router(health_router)
    app.include_router(order_router, prefix=config.app.api_prefix)

    return app


app = create_app()

__all__ = ["app", "create_app"]
