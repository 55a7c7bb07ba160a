"""Health & Readiness Checks.

Invariants:
    - GET /health/ returns 200 whenever the process serves requests
    - GET /health/ready checks the database; the pub/sub endpoint is NOT checked,
      because notification delivery is best-effort and never blocks saves
"""

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from buildhub.infrastructure import database, pubsub_client

router = APIRouter(prefix="/api/v1/health", tags=["health"])


@router.get("/", status_code=status.HTTP_200_OK)
async def health_check():
    return {"status": "healthy", "service": "buildhub-api", "version": "0.1.0"}


@router.get("/ready")
async def readiness_check():
    """Ready when the database answers; reports whether pub/sub is configured."""
    manager = database.db_manager
    checks = {
        "database": "healthy" if manager and await manager.health_check() else "unavailable",
        "pubsub": "configured" if pubsub_client.pubsub_client else "not_configured",
    }
    if checks["database"] != "healthy":
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "not_ready", "checks": checks},
        )
    return {"status": "ready", "checks": checks}
