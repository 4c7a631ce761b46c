"""
Component state machine.

A Component wraps up to four opaque hooks and moves through the states in
``ComponentState``. Its mutable fields sit behind a per-component lock that
is released while a hook runs, so readers taking a snapshot never wait on a
slow hook. Only the lifecycle manager drives transitions.
"""
from datetime import datetime, timezone
from threading import Lock
from typing import Iterable, Optional, Tuple

from ..core.exceptions import ComponentError, GeneralError, TransitionError
from ..core.logging import component_logger
from ..schemas.lifecycle import ComponentSnapshot, ComponentState
from .base import BaseLifecycleComponent, Hook


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Component:
    """A named orchestration unit with a state machine and lifecycle hooks."""

    def __init__(
        self,
        component_id: str,
        name: str,
        dependencies: Optional[Iterable[str]] = None,
        init_hook: Optional[Hook] = None,
        shutdown_hook: Optional[Hook] = None,
        pause_hook: Optional[Hook] = None,
        resume_hook: Optional[Hook] = None,
    ):
        if not component_id:
            raise GeneralError("Component id must be a non-empty string")
        if init_hook is None or shutdown_hook is None:
            raise GeneralError(
                f"Component {component_id} requires both init and shutdown hooks"
            )

        deps = []
        for dep in dependencies or ():
            if dep == component_id:
                raise GeneralError(
                    f"Component {component_id} cannot depend on itself"
                )
            if dep not in deps:
                deps.append(dep)

        self._id = component_id
        self._name = name or component_id
        self._dependencies: Tuple[str, ...] = tuple(deps)
        self._init_hook = init_hook
        self._shutdown_hook = shutdown_hook
        self._pause_hook = pause_hook
        self._resume_hook = resume_hook
        self._logger = component_logger(component_id)

        self._lock = Lock()
        self._state = ComponentState.UNINITIALIZED
        self._last_transition_time: Optional[datetime] = None
        self._error_message: Optional[str] = None
        self._recovery_attempts = 0

    @classmethod
    def from_lifecycle(cls, obj: BaseLifecycleComponent) -> "Component":
        """Wrap a capability object, binding only the hooks it implements."""
        return cls(
            component_id=obj.component_id,
            name=obj.name,
            dependencies=obj.depends_on,
            init_hook=obj.initialize,
            shutdown_hook=obj.shutdown,
            pause_hook=obj.pause if obj.supports_pause else None,
            resume_hook=obj.resume if obj.supports_resume else None,
        )

    # ------------------------------------------------------------------
    # Read accessors
    # ------------------------------------------------------------------

    @property
    def id(self) -> str:
        return self._id

    @property
    def name(self) -> str:
        return self._name

    @property
    def dependencies(self) -> Tuple[str, ...]:
        return self._dependencies

    @property
    def supports_pause(self) -> bool:
        return self._pause_hook is not None

    @property
    def supports_resume(self) -> bool:
        return self._resume_hook is not None

    @property
    def state(self) -> ComponentState:
        with self._lock:
            return self._state

    @property
    def error_message(self) -> Optional[str]:
        with self._lock:
            return self._error_message

    @property
    def last_transition_time(self) -> Optional[datetime]:
        with self._lock:
            return self._last_transition_time

    @property
    def recovery_attempts(self) -> int:
        with self._lock:
            return self._recovery_attempts

    def snapshot(self) -> ComponentSnapshot:
        with self._lock:
            return ComponentSnapshot(
                id=self._id,
                name=self._name,
                state=self._state,
                dependencies=list(self._dependencies),
                supports_pause=self.supports_pause,
                supports_resume=self.supports_resume,
                last_transition_time=self._last_transition_time,
                error_message=self._error_message,
                recovery_attempts=self._recovery_attempts,
            )

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def initialize(self) -> None:
        """Uninitialized -> Initializing -> Running (or Error)."""
        with self._lock:
            if self._state != ComponentState.UNINITIALIZED:
                raise TransitionError(
                    f"Component {self._id} is not in uninitialized state",
                    details={"component_id": self._id, "state": self._state.value},
                )
            self._set_state(ComponentState.INITIALIZING)

        reason = self._call_hook(self._init_hook, "initialize")

        with self._lock:
            if reason is None:
                self._set_state(ComponentState.RUNNING)
                return
            self._error_message = reason
            self._set_state(ComponentState.ERROR)
        raise ComponentError(reason, component_id=self._id, operation="initialize")

    def shutdown(self) -> None:
        """Any non-terminal state -> ShuttingDown -> Terminated (or Error).

        No-op for components that never started or already terminated.
        """
        with self._lock:
            if self._state in (ComponentState.UNINITIALIZED, ComponentState.TERMINATED):
                return
            self._set_state(ComponentState.SHUTTING_DOWN)

        reason = self._call_hook(self._shutdown_hook, "shutdown")

        with self._lock:
            if reason is None:
                self._set_state(ComponentState.TERMINATED)
                return
            self._error_message = reason
            self._set_state(ComponentState.ERROR)
        raise ComponentError(reason, component_id=self._id, operation="shutdown")

    def pause(self) -> None:
        """Running -> Paused. A failing hook leaves the component Running."""
        self._toggle(
            hook=self._pause_hook,
            operation="pause",
            required=ComponentState.RUNNING,
            target=ComponentState.PAUSED,
        )

    def resume(self) -> None:
        """Paused -> Running. A failing hook leaves the component Paused."""
        self._toggle(
            hook=self._resume_hook,
            operation="resume",
            required=ComponentState.PAUSED,
            target=ComponentState.RUNNING,
        )

    def reset_error(self) -> None:
        """Error -> Uninitialized, clearing the error message."""
        with self._lock:
            if self._state != ComponentState.ERROR:
                return
            self._error_message = None
            self._set_state(ComponentState.UNINITIALIZED)

    def rearm(self) -> None:
        """Terminated -> Uninitialized so a stopped system can start again."""
        with self._lock:
            if self._state == ComponentState.TERMINATED:
                self._set_state(ComponentState.UNINITIALIZED)

    def record_recovery_attempt(self) -> int:
        with self._lock:
            self._recovery_attempts += 1
            return self._recovery_attempts

    def reset_recovery_attempts(self) -> None:
        with self._lock:
            self._recovery_attempts = 0

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _toggle(
        self,
        hook: Optional[Hook],
        operation: str,
        required: ComponentState,
        target: ComponentState,
    ) -> None:
        with self._lock:
            if self._state != required:
                raise TransitionError(
                    f"Component {self._id} is not in {required.value} state",
                    details={"component_id": self._id, "state": self._state.value},
                )
            if hook is None:
                raise TransitionError(
                    f"Component {self._id} does not support {operation}",
                    details={"component_id": self._id, "operation": operation},
                )

        reason = self._call_hook(hook, operation)

        with self._lock:
            # the hook ran either way
            self._last_transition_time = _utcnow()
            if reason is None:
                self._state = target
                return
        raise ComponentError(reason, component_id=self._id, operation=operation)

    def _set_state(self, state: ComponentState) -> None:
        # caller holds self._lock
        self._state = state
        self._last_transition_time = _utcnow()

    def _call_hook(self, hook: Hook, operation: str) -> Optional[str]:
        """Run a hook without holding the lock; return the failure reason."""
        try:
            hook()
        except Exception as e:
            self._logger.warning(
                "component_hook_failed",
                operation=operation,
                error=str(e),
                error_type=type(e).__name__,
                exc_info=True,
            )
            return str(e) or type(e).__name__
        return None

    def __repr__(self) -> str:
        return f"Component(id={self._id!r}, state={self.state.value})"


__all__ = ["Component"]
