"""
lifecycle_orchestrator/core/logging.py
Structured logging setup using structlog
"""

import logging
import sys
from typing import Optional
import structlog
from structlog.stdlib import BoundLogger
from .config import Settings, get_settings


def _add_service(service: str, environment: str):
    """Processor stamping every event with the service name and environment"""
    def processor(logger, method_name, event_dict):
        event_dict.setdefault("service", service)
        event_dict.setdefault("environment", environment)
        return event_dict
    return processor


def setup_logging(settings: Optional[Settings] = None) -> BoundLogger:
    """
    Configure structured logging for the application
    Returns configured logger instance
    """
    settings = settings or get_settings()

    # Configure stdlib logging
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, settings.LOG_LEVEL),
    )

    # Shared processors for all logs
    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        _add_service(settings.APP_NAME, settings.ENVIRONMENT),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if settings.LOG_FORMAT == "json":
        processors = shared_processors + [
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer()
        ]
    else:
        processors = shared_processors + [
            structlog.dev.ConsoleRenderer(colors=True)
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logger = structlog.get_logger("lifecycle")

    logger.info(
        "logging_configured",
        level=settings.LOG_LEVEL,
        format=settings.LOG_FORMAT,
        environment=settings.ENVIRONMENT
    )

    return logger


def get_logger(name: Optional[str] = None) -> BoundLogger:
    """
    Get a logger instance

    Args:
        name: Logger name (e.g., "manager", "api")

    Returns:
        Configured structlog logger
    """
    if name:
        return structlog.get_logger(f"lifecycle.{name}")
    return structlog.get_logger("lifecycle")


def component_logger(component_id: str) -> BoundLogger:
    """
    Logger named after one component, with its id bound

    Yields logger names like "lifecycle.component.db" so per-component
    output can be filtered through stdlib logging.
    """
    return structlog.get_logger(f"lifecycle.component.{component_id}").bind(
        component=component_id
    )


# ============================================================================
# Context Manager for Operation Logging
# ============================================================================

class LogContext:
    """
    Context manager for tagging every log line of one orchestration run

    Usage:
        with LogContext(operation="start_system"):
            logger.info("component_initialized")
    """

    def __init__(self, **kwargs):
        self.context = kwargs
        self._tokens = {}

    def __enter__(self):
        self._tokens = structlog.contextvars.bind_contextvars(**self.context)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        structlog.contextvars.reset_contextvars(**self._tokens)
        return False


# ============================================================================
# Export
# ============================================================================

__all__ = ["setup_logging", "get_logger", "component_logger", "LogContext"]
