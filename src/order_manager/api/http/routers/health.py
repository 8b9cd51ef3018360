"""Health check endpoints router for monitoring service availability."""

from datetime import UTC, datetime
from typing import Any

from fastapi import APIRouter, Depends
from starlette.responses import JSONResponse

from src.order_manager.api.http.deps import get_app_config, get_database_service
from src.order_manager.core.services import DbSessionService
from src.order_manager.runtime.config.config_data import ConfigData

router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
async def health() -> dict[str, Any]:
    """Liveness probe: 200 as long as the process is running."""
    return {
        "success": True,
        "message": "Server is running",
        "timestamp": datetime.now(UTC).isoformat(),
    }


@router.get("/ready", response_model=None)
def readiness(
    database_service: DbSessionService = Depends(get_database_service),
    config: ConfigData = Depends(get_app_config),
) -> dict[str, Any] | JSONResponse:
    """Readiness probe: 200 when the database answers, 503 otherwise."""
    db_healthy = database_service.health_check()
    checks = {
        "database": {
            "status": "healthy" if db_healthy else "unhealthy",
            "type": database_service.engine.dialect.name,
            "pool": database_service.get_pool_status(),
        }
    }
    body = {
        "success": db_healthy,
        "status": "ready" if db_healthy else "not_ready",
        "environment": config.app.environment,
        "checks": checks,
    }
    if not db_healthy:
        return JSONResponse(status_code=503, content=body)
    return body
