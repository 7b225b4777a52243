import structlog
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text

from ...config import settings
from ...infrastructure.adapters import ChannelGatewayRegistry
from ...infrastructure.logging import Timer
from ...infrastructure.persistence.database import Database
from ..dependencies import get_database, get_gateway_registry

router = APIRouter(tags=["health"])
logger = structlog.get_logger()


@router.get("/health", summary="Liveness check")
async def health() -> dict:
    return {"status": "healthy"}


@router.get("/health/ready", summary="Readiness check")
async def readiness(
    db: Database = Depends(get_database),
    registry: ChannelGatewayRegistry = Depends(get_gateway_registry),
) -> JSONResponse:
    """
    Report whether a publishing pass could run right now.

    Ready means the posts store answers, a service-role key is configured
    (without one every trigger call is rejected) and at least one provider
    gateway is registered. Anything else answers 503.
    """
    checks: dict[str, dict] = {}

    try:
        with Timer() as t:
            async with db.session() as session:
                await session.execute(text("SELECT 1"))
        checks["database"] = {"status": "healthy", "latency_ms": t.duration_ms}
    except Exception as e:
        logger.error("Database readiness check failed", error=str(e))
        checks["database"] = {"status": "unhealthy", "error": str(e)}

    checks["trigger_auth"] = {"status": "healthy" if settings.service_role_key else "unconfigured"}

    providers = registry.names()
    checks["providers"] = {"status": "healthy" if providers else "unconfigured", "registered": providers}

    ready = all(c["status"] == "healthy" for c in checks.values())
    return JSONResponse(
        status_code=200 if ready else 503,
        content={"status": "ready" if ready else "not_ready", "checks": checks},
    )
