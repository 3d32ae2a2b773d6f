"""Health check endpoints router for monitoring service availability."""

from typing import Any

from fastapi import APIRouter, Request
from starlette.concurrency import run_in_threadpool
from starlette.responses import JSONResponse

from src.unieats.api.http.app_data import ApplicationDependencies

router = APIRouter(tags=["health"])


@router.get("/health")
async def health() -> dict[str, str]:
    """Liveness check: 200 as long as the process is serving requests."""
    return {"status": "healthy", "service": "unieats-api"}


@router.get("/ready", response_model=None)
async def readiness(request: Request) -> dict[str, Any] | JSONResponse:
    """Readiness check: 503 unless the database answers and session storage is usable."""
    app_deps: ApplicationDependencies = request.app.state.app_dependencies

    db_healthy = await run_in_threadpool(app_deps.database_service.health_check)
    storage_healthy = app_deps.session_storage.is_available()
    checks = {
        "database": "healthy" if db_healthy else "unhealthy",
        "session_storage": "healthy" if storage_healthy else "unhealthy",
    }

    body = {"status": "ready" if db_healthy and storage_healthy else "not_ready", "checks": checks}
    if body["status"] != "ready":
        return JSONResponse(status_code=503, content=body)
    return body
