"""Health check endpoints for monitoring and observability."""
from typing import Any, Dict

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse
import structlog

from ...lifecycle.health import HealthStatus, health_summary
from ...lifecycle.manager import LifecycleManager
from ...schemas.lifecycle import SystemState

router = APIRouter(prefix="/api/v1/health", tags=["health"])
logger = structlog.get_logger(__name__)


def _manager(request: Request) -> LifecycleManager:
    return request.app.state.lifecycle_manager


@router.get("", response_model=Dict[str, Any], summary="System health check")
@router.get("/", include_in_schema=False)
async def health_check(request: Request):
    """
    Comprehensive system health check.

    Status Codes:
    - 200: All components healthy
    - 503: One or more components not healthy
    """
    manager = _manager(request)
    summary = health_summary(manager.list_components())
    summary["system_state"] = manager.system_state.value

    status_code = status.HTTP_200_OK
    if summary["overall_status"] != HealthStatus.HEALTHY.value:
        status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    return JSONResponse(status_code=status_code, content=summary)


@router.get("/live", summary="Liveness probe")
async def liveness():
    """Returns 200 while the process is up; does not look at components."""
    return {"status": "alive", "probe": "liveness"}


@router.get("/ready", summary="Readiness probe")
async def readiness(request: Request):
    """
    Returns:
    - 200: System is RUNNING
    - 503: Starting, paused, stopped or failed
    """
    system_state = _manager(request).system_state

    if system_state == SystemState.RUNNING:
        return JSONResponse(
            status_code=status.HTTP_200_OK,
            content={"status": "ready", "probe": "readiness"}
        )

    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "status": "not_ready",
            "probe": "readiness",
            "reason": system_state.value
        }
    )
