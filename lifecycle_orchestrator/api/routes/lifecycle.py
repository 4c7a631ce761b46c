"""
lifecycle_orchestrator/api/routes/lifecycle.py
Status snapshots and single-component operations.
"""

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse
import structlog

from ...core.exceptions import GeneralError, LifecycleError
from ...lifecycle.manager import LifecycleManager

router = APIRouter(prefix="/api/v1/lifecycle", tags=["lifecycle"])
logger = structlog.get_logger(__name__)


def _manager(request: Request) -> LifecycleManager:
    return request.app.state.lifecycle_manager


def _error_response(error: LifecycleError) -> JSONResponse:
    """Unknown ids map to 404, every other lifecycle error to 409."""
    status_code = status.HTTP_409_CONFLICT
    if isinstance(error, GeneralError) and error.message == "Component not found":
        status_code = status.HTTP_404_NOT_FOUND
    return JSONResponse(
        status_code=status_code,
        content={"error": str(error), **error.to_dict()}
    )


@router.get("/status", summary="Aggregate lifecycle status")
async def get_status(request: Request):
    return _manager(request).get_status().to_dict()


@router.get("/components", summary="All component snapshots")
async def list_components(request: Request):
    return [snapshot.to_dict() for snapshot in _manager(request).list_components()]


@router.get("/components/{component_id}", summary="Single component snapshot")
async def get_component(component_id: str, request: Request):
    try:
        return _manager(request).get_component(component_id).to_dict()
    except GeneralError as e:
        return _error_response(e)


@router.get("/order", summary="Startup and shutdown plan")
async def get_order(request: Request):
    """
    Dry-run both resolver directions.

    Returns 409 when the dependency graph cannot be ordered.
    """
    manager = _manager(request)
    try:
        return {
            "startup": manager.startup_order(),
            "shutdown": manager.shutdown_order(),
        }
    except LifecycleError as e:
        return _error_response(e)


# Hooks may block, so the operations below are plain ``def`` endpoints and
# run in the threadpool.

@router.post("/components/{component_id}/pause", summary="Pause a component")
def pause_component(component_id: str, request: Request):
    manager = _manager(request)
    try:
        manager.pause_component(component_id)
    except LifecycleError as e:
        logger.warning("pause_request_failed", component=component_id, error=str(e))
        return _error_response(e)
    return manager.get_component(component_id).to_dict()


@router.post("/components/{component_id}/resume", summary="Resume a component")
def resume_component(component_id: str, request: Request):
    manager = _manager(request)
    try:
        manager.resume_component(component_id)
    except LifecycleError as e:
        logger.warning("resume_request_failed", component=component_id, error=str(e))
        return _error_response(e)
    return manager.get_component(component_id).to_dict()


@router.post("/components/{component_id}/reinitialize", summary="Recover a failed component")
def reinitialize_component(component_id: str, request: Request):
    manager = _manager(request)
    try:
        manager.reinitialize_component(component_id)
    except LifecycleError as e:
        logger.warning("reinitialize_request_failed", component=component_id, error=str(e))
        return _error_response(e)
    return manager.get_component(component_id).to_dict()
