"""
lifecycle_orchestrator/api/main.py
FastAPI application exposing lifecycle status.

Architecture:
- Thin main.py (just app creation)
- Lifespan starts the system on startup and stops it on shutdown
- REST API for status, health probes and single-component operations
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from starlette.concurrency import run_in_threadpool

from ..core.config import Settings, get_settings
from ..core.exceptions import LifecycleError
from ..core.logging import get_logger
from ..lifecycle.manager import LifecycleManager
from ..schemas.lifecycle import SystemState
from .routes import health, lifecycle

logger = get_logger("api")


def build_lifespan(manager: LifecycleManager, settings: Settings):
    """
    FastAPI lifespan bound to one manager.

    Startup runs ``start_system`` in a worker thread. A failed start is
    logged and the app keeps serving so the status endpoints can show what
    went wrong. Shutdown runs ``stop_system`` unless the system is already
    terminated.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(
            "application_starting",
            app_name=settings.APP_NAME,
            version=settings.APP_VERSION,
            environment=settings.ENVIRONMENT,
            component_count=manager.get_status().component_count
        )

        try:
            await run_in_threadpool(manager.start_system)
            logger.info("startup_completed_successfully")
        except LifecycleError as e:
            logger.error("system_start_failed", **e.to_dict())

        yield

        logger.info("application_shutting_down")

        if manager.system_state != SystemState.TERMINATED:
            try:
                await run_in_threadpool(manager.stop_system)
                logger.info("shutdown_completed")
            except LifecycleError as e:
                logger.error("system_stop_failed", **e.to_dict())

    return lifespan


# ============================================================================
# Create Application
# ============================================================================

def create_app(
    manager: Optional[LifecycleManager] = None,
    settings: Optional[Settings] = None,
) -> FastAPI:
    """
    Create FastAPI application around a lifecycle manager.

    Args:
        manager: Pre-populated manager (composition root). A fresh one built
            from settings is used when omitted.
        settings: Application settings, defaults to ``get_settings()``

    Returns:
        Configured FastAPI app
    """
    settings = settings or get_settings()
    manager = manager or LifecycleManager(settings.to_lifecycle_config())

    logger.info(
        "creating_app",
        name=settings.APP_NAME,
        version=settings.APP_VERSION,
        environment=settings.ENVIRONMENT
    )

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="Lifecycle orchestrator status and control API",
        lifespan=build_lifespan(manager, settings),
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
    )
    app.state.lifecycle_manager = manager
    app.state.settings = settings

    app.include_router(health.router)
    app.include_router(lifecycle.router)

    @app.get("/", tags=["Root"])
    async def root():
        """Service info endpoint"""
        return {
            "service": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "system_state": manager.system_state.value,
            "endpoints": {
                "health": "/api/v1/health",
                "status": "/api/v1/lifecycle/status",
                "components": "/api/v1/lifecycle/components",
            }
        }

    logger.info("app_created_successfully")
    return app


# ============================================================================
# Exports
# ============================================================================

__all__ = ["create_app", "build_lifespan"]
