"""
lifecycle_orchestrator/core/exceptions.py
Error taxonomy for lifecycle orchestration
"""

from typing import Optional, List


class LifecycleError(Exception):
    """Base exception for all lifecycle errors"""

    label: str = "Lifecycle error"

    def __init__(
        self,
        message: str,
        error_code: str = "LIFECYCLE_ERROR",
        details: Optional[dict] = None
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        return f"{self.label}: {self.message}"

    def to_dict(self) -> dict:
        """Convert exception to dictionary for logging/response"""
        return {
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details
        }


# ============================================================================
# Orchestration Exceptions
# ============================================================================

class InitializationError(LifecycleError):
    """Startup failed: hook failure, unresolvable dependencies or timeout"""

    label = "Initialization error"

    def __init__(
        self,
        message: str,
        component_id: Optional[str] = None,
        details: Optional[dict] = None
    ):
        details = dict(details or {})
        if component_id is not None:
            details["component_id"] = component_id
        self.component_id = component_id
        super().__init__(
            message=message,
            error_code="INITIALIZATION_ERROR",
            details=details
        )


class TransitionError(LifecycleError):
    """Illegal state machine transition"""

    label = "Transition error"

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(
            message=message,
            error_code="TRANSITION_ERROR",
            details=details
        )


class ComponentError(LifecycleError):
    """A component hook failed outside of startup"""

    label = "Component error"

    def __init__(
        self,
        message: str,
        component_id: Optional[str] = None,
        operation: Optional[str] = None,
        details: Optional[dict] = None,
        error_code: str = "COMPONENT_ERROR"
    ):
        details = dict(details or {})
        if component_id is not None:
            details["component_id"] = component_id
        if operation is not None:
            details["operation"] = operation
        self.component_id = component_id
        self.operation = operation
        super().__init__(
            message=message,
            error_code=error_code,
            details=details
        )

    @property
    def failures(self) -> List[dict]:
        """Per-component failures when several shutdowns failed at once"""
        return self.details.get("failures", [])


class GeneralError(LifecycleError):
    """Misuse of the manager API (duplicate id, unknown id)"""

    label = "General lifecycle error"

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(
            message=message,
            error_code="GENERAL_ERROR",
            details=details
        )


# ============================================================================
# Recovery Exceptions
# ============================================================================

class RecoveryExhaustedError(ComponentError):
    """Component used up its recovery budget"""

    def __init__(self, component_id: str, attempts: int, max_attempts: int):
        super().__init__(
            message=(
                f"Component {component_id} exhausted recovery attempts "
                f"({attempts}/{max_attempts})"
            ),
            component_id=component_id,
            operation="reinitialize",
            details={"attempts": attempts, "max_attempts": max_attempts},
            error_code="RECOVERY_EXHAUSTED"
        )


# ============================================================================
# Export
# ============================================================================

__all__ = [
    "LifecycleError",
    "InitializationError",
    "TransitionError",
    "ComponentError",
    "GeneralError",
    "RecoveryExhaustedError",
]
