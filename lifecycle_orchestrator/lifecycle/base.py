"""Base classes and type aliases for lifecycle components."""
from abc import ABC, abstractmethod
from typing import Any, Callable, List

from ..core.logging import component_logger
from ..schemas.lifecycle import ComponentState, SystemState


# A hook succeeds by returning and fails by raising; str(exc) is the reason.
Hook = Callable[[], Any]


class BaseLifecycleComponent(ABC):
    """
    Capability interface for subsystems managed by the orchestrator.

    Each subclass represents a discrete subsystem requiring initialization
    and cleanup (resource accounting, adapters, sandboxes, etc.). Register
    an instance with ``LifecycleManager.register_lifecycle``.

    ``pause`` and ``resume`` are optional: override them to make the
    component pausable. Components that leave them alone are reported as
    not supporting pause/resume and the manager refuses those transitions.
    """

    # Override these in subclasses
    component_id: str = ""
    name: str = "UnnamedComponent"
    depends_on: List[str] = []

    def __init__(self):
        self._logger = component_logger(self.component_id or self.name)

    @abstractmethod
    def initialize(self) -> None:
        """
        Bring the subsystem up.

        Raise on failure; the message becomes the component's error message.
        """

    @abstractmethod
    def shutdown(self) -> None:
        """
        Tear the subsystem down.

        Raise on failure. Should be safe to call on a partially initialized
        subsystem.
        """

    def pause(self) -> None:
        """
        Suspend work without releasing resources.

        Overriding this method is what makes the component pausable;
        the default only marks the capability as absent.
        """
        raise NotImplementedError

    def resume(self) -> None:
        """
        Continue after ``pause``.

        Overriding this method is what makes the component resumable;
        the default only marks the capability as absent.
        """
        raise NotImplementedError

    @property
    def supports_pause(self) -> bool:
        return type(self).pause is not BaseLifecycleComponent.pause

    @property
    def supports_resume(self) -> bool:
        return type(self).resume is not BaseLifecycleComponent.resume

    def safe_log(self, event: str, **kwargs):
        """Helper for structured logging."""
        self._logger.info(event, **kwargs)

    def log_error(self, event: str, error: Exception, **kwargs):
        """Helper for error logging with full context."""
        self._logger.error(
            event,
            error=str(error),
            error_type=type(error).__name__,
            **kwargs,
            exc_info=True
        )


__all__ = [
    "Hook",
    "BaseLifecycleComponent",
    "ComponentState",
    "SystemState",
]
