"""
lifecycle_orchestrator/lifecycle/manager.py
Lifecycle manager: the orchestration facade.

Responsibilities:
1. Own the component registry
2. Start every component in dependency order, bounded by a wall-clock budget
3. Stop every component in reverse dependency order
4. Pause/resume/recover single components
5. Produce status snapshots for concurrent readers

Writers (start/stop/register/...) are serialised on one operation lock and
run synchronously on the calling thread. Readers never take that lock.
"""

import time
from datetime import datetime, timezone
from threading import Lock, RLock
from typing import Callable, Dict, Iterable, List, Optional, Sequence
import structlog

from ..core.config import LifecycleConfig
from ..core.exceptions import (
    ComponentError,
    InitializationError,
    LifecycleError,
    RecoveryExhaustedError,
    TransitionError,
)
from ..core.logging import LogContext
from ..schemas.lifecycle import (
    ComponentSnapshot,
    ComponentState,
    LifecycleStatus,
    SystemState,
)
from .base import BaseLifecycleComponent, Hook
from .component import Component
from .registry import ComponentRegistry
from .resolver import (
    DependencyResolver,
    Direction,
    ResolutionStalled,
    ResolutionTimeout,
    run_unordered,
)

logger = structlog.get_logger("lifecycle.manager")


class LifecycleManager:
    """
    Brings a set of interdependent components up and down.

    Construct one per application (or per test) and pass it around; there
    is no global instance.

    Usage:
        manager = LifecycleManager(LifecycleConfig(startup_timeout=10))
        manager.register("db", "Database", [], db.connect, db.close)
        manager.register("api", "API", ["db"], api.start, api.stop)
        manager.start_system()
        ...
        manager.stop_system()
    """

    def __init__(
        self,
        config: Optional[LifecycleConfig] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.config = config or LifecycleConfig()
        self._clock = clock
        self._registry = ComponentRegistry()

        # one writer at a time; RLock so composite operations can nest
        self._operation_lock = RLock()
        self._state_lock = Lock()

        self._system_state = SystemState.UNINITIALIZED
        self._last_transition_time: Optional[datetime] = None
        self._running_since: Optional[float] = None

    # ========================================================================
    # System state
    # ========================================================================

    @property
    def system_state(self) -> SystemState:
        with self._state_lock:
            return self._system_state

    def _set_system_state(self, state: SystemState) -> None:
        with self._state_lock:
            previous = self._system_state
            self._system_state = state
            self._last_transition_time = datetime.now(timezone.utc)
            if state == SystemState.RUNNING and previous != SystemState.PAUSED:
                self._running_since = self._clock()
            elif state in (SystemState.TERMINATED, SystemState.INITIALIZING):
                self._running_since = None

        logger.debug(
            "system_state_changed",
            previous=previous.value,
            current=state.value
        )

    # ========================================================================
    # Registration
    # ========================================================================

    def register_component(self, component: Component) -> None:
        """
        Add a component to the registry.

        Raises:
            GeneralError: If the id is already registered (existing entry
                is left untouched)
        """
        with self._operation_lock:
            self._registry.add(component)

        logger.info(
            "component_registered",
            component=component.id,
            name=component.name,
            depends_on=list(component.dependencies),
            component_count=len(self._registry)
        )

    def register(
        self,
        component_id: str,
        name: str,
        dependencies: Optional[Iterable[str]],
        init_hook: Hook,
        shutdown_hook: Hook,
        pause_hook: Optional[Hook] = None,
        resume_hook: Optional[Hook] = None,
    ) -> None:
        """Build a Component from plain callables and register it."""
        self.register_component(
            Component(
                component_id,
                name,
                dependencies,
                init_hook=init_hook,
                shutdown_hook=shutdown_hook,
                pause_hook=pause_hook,
                resume_hook=resume_hook,
            )
        )

    def register_lifecycle(self, obj: BaseLifecycleComponent) -> None:
        """Register an object implementing the capability interface."""
        self.register_component(Component.from_lifecycle(obj))

    def unregister_component(self, component_id: str) -> None:
        """
        Remove a component, shutting it down first if it ever started.

        Raises:
            GeneralError: If the id is unknown (nothing is mutated)
            ComponentError: If the implicit shutdown fails; the component
                stays registered in ERROR state
        """
        with self._operation_lock:
            component = self._registry.get(component_id)

            if component.state not in (ComponentState.UNINITIALIZED, ComponentState.TERMINATED):
                logger.info(
                    "implicit_shutdown_before_unregister",
                    component=component_id,
                    state=component.state.value
                )
                self._shutdown_one(component_id)

            self._registry.remove(component_id)

        logger.info(
            "component_unregistered",
            component=component_id,
            component_count=len(self._registry)
        )

    # ========================================================================
    # Read access (safe from any thread)
    # ========================================================================

    def get_component(self, component_id: str) -> ComponentSnapshot:
        """
        Raises:
            GeneralError: If the id is unknown
        """
        return self._registry.get(component_id).snapshot()

    def list_components(self) -> List[ComponentSnapshot]:
        return [component.snapshot() for component in self._registry.components()]

    def get_status(self) -> LifecycleStatus:
        """Compute the aggregate status. Never raises."""
        snapshots = self.list_components()

        with self._state_lock:
            state = self._system_state
            last_transition = self._last_transition_time
            running_since = self._running_since

        uptime = 0.0
        if running_since is not None:
            uptime = max(0.0, self._clock() - running_since)

        return LifecycleStatus(
            system_state=state,
            component_count=len(snapshots),
            running_component_count=sum(1 for s in snapshots if s.state == ComponentState.RUNNING),
            paused_component_count=sum(1 for s in snapshots if s.state == ComponentState.PAUSED),
            failed_component_count=sum(1 for s in snapshots if s.state == ComponentState.ERROR),
            uptime=uptime,
            last_transition_time=last_transition,
            recovery_attempts=sum(s.recovery_attempts for s in snapshots),
        )

    def startup_order(self) -> List[List[str]]:
        """Dry-run the startup resolver; one list of ids per pass."""
        return self._plan(Direction.STARTUP)

    def shutdown_order(self) -> List[List[str]]:
        """Dry-run the shutdown resolver; one list of ids per pass."""
        return self._plan(Direction.SHUTDOWN)

    # ========================================================================
    # System start / stop
    # ========================================================================

    def start_system(self) -> None:
        """
        Initialize every component in dependency order.

        A component is initialized only after all of its dependencies are
        RUNNING. The startup timeout is checked between resolver passes, so
        a hook that hangs can overrun it.

        There is no rollback: if a hook fails or the budget runs out, the
        components that already started are left RUNNING and the system
        goes to ERROR. Call ``stop_system`` to tear them down.

        Raises:
            TransitionError: System is not UNINITIALIZED or TERMINATED
            InitializationError: Hook failure, cycle/missing dependency,
                or startup timeout
        """
        with self._operation_lock, LogContext(operation="start_system"):
            state = self.system_state
            if state not in (SystemState.UNINITIALIZED, SystemState.TERMINATED):
                raise TransitionError(
                    f"System is not in uninitialized or terminated state: {state.value}",
                    details={"system_state": state.value},
                )

            self._set_system_state(SystemState.INITIALIZING)

            components = self._registry.components()
            for component in components:
                component.rearm()
                component.reset_recovery_attempts()

            logger.info(
                "system_starting",
                component_count=len(components),
                startup_timeout=self.config.startup_timeout
            )

            try:
                self._registry.validate_dependencies()
            except InitializationError as e:
                self._set_system_state(SystemState.ERROR)
                logger.error("dependency_validation_failed", **e.to_dict())
                raise

            resolver = DependencyResolver(
                self._graph(),
                Direction.STARTUP,
                timeout=self.config.startup_timeout,
                clock=self._clock,
            )

            try:
                order = resolver.run(self._initialize_one)
            except ResolutionTimeout as e:
                self._set_system_state(SystemState.ERROR)
                logger.error(
                    "startup_timeout",
                    timeout=self.config.startup_timeout,
                    initialized=e.resolved,
                    pending=e.remaining
                )
                raise InitializationError(
                    f"Startup timeout after {self.config.startup_timeout} seconds",
                    details={"initialized": e.resolved, "pending": e.remaining},
                ) from e
            except ResolutionStalled as e:
                self._set_system_state(SystemState.ERROR)
                raise InitializationError(
                    str(e),
                    details={"initialized": e.resolved, "pending": e.remaining},
                ) from e
            except LifecycleError:
                self._set_system_state(SystemState.ERROR)
                raise

            self._set_system_state(SystemState.RUNNING)
            logger.info("system_started", order=order)

    def stop_system(self) -> None:
        """
        Shut every component down.

        With graceful shutdown enabled, dependents stop before their
        dependencies and the first failure aborts the sequence. Without
        it, every component gets a shutdown attempt in registration order
        and all failures are reported together.

        Raises:
            TransitionError: System is already TERMINATED
            ComponentError: A shutdown hook failed, or the shutdown timeout
                ran out (graceful mode only)
        """
        with self._operation_lock, LogContext(operation="stop_system"):
            state = self.system_state
            if state == SystemState.TERMINATED:
                raise TransitionError(
                    "System is already terminated",
                    details={"system_state": state.value},
                )

            self._set_system_state(SystemState.SHUTTING_DOWN)
            logger.info(
                "system_stopping",
                previous_state=state.value,
                graceful=self.config.enable_graceful_shutdown,
                shutdown_timeout=self.config.shutdown_timeout
            )

            if self.config.enable_graceful_shutdown:
                self._stop_ordered()
            else:
                self._stop_best_effort()

            self._set_system_state(SystemState.TERMINATED)
            logger.info("system_stopped")

    def _stop_ordered(self) -> None:
        resolver = DependencyResolver(
            self._graph(),
            Direction.SHUTDOWN,
            timeout=self.config.shutdown_timeout,
            clock=self._clock,
        )
        try:
            resolver.run(self._shutdown_one)
        except ResolutionTimeout as e:
            self._set_system_state(SystemState.ERROR)
            logger.error(
                "shutdown_timeout",
                timeout=self.config.shutdown_timeout,
                terminated=e.resolved,
                pending=e.remaining
            )
            raise ComponentError(
                f"Shutdown timeout after {self.config.shutdown_timeout} seconds",
                operation="shutdown",
                details={"terminated": e.resolved, "pending": e.remaining},
            ) from e
        except ResolutionStalled as e:
            self._set_system_state(SystemState.ERROR)
            raise ComponentError(
                str(e),
                operation="shutdown",
                details={"terminated": e.resolved, "pending": e.remaining},
            ) from e
        except LifecycleError:
            self._set_system_state(SystemState.ERROR)
            raise

    def _stop_best_effort(self) -> None:
        failures = run_unordered(self._registry.ids(), self._shutdown_one)
        if not failures:
            return

        self._set_system_state(SystemState.ERROR)
        summary = [
            {"component_id": cid, "reason": getattr(err, "details", {}).get("reason", str(err))}
            for cid, err in failures
        ]
        raise ComponentError(
            f"{len(failures)} component(s) failed to shut down: "
            + "; ".join(f"{f['component_id']} ({f['reason']})" for f in summary),
            operation="shutdown",
            details={"failures": summary},
        )

    # ========================================================================
    # Single-component operations
    # ========================================================================

    def pause_component(self, component_id: str) -> None:
        """
        Raises:
            GeneralError: Unknown id
            TransitionError: Not RUNNING, or no pause hook
            ComponentError: Pause hook failed (component stays RUNNING)
        """
        with self._operation_lock:
            self._registry.get(component_id).pause()
        logger.info("component_paused", component=component_id)

    def resume_component(self, component_id: str) -> None:
        """
        Raises:
            GeneralError: Unknown id
            TransitionError: Not PAUSED, or no resume hook
            ComponentError: Resume hook failed (component stays PAUSED)
        """
        with self._operation_lock:
            self._registry.get(component_id).resume()
        logger.info("component_resumed", component=component_id)

    def reset_component(self, component_id: str) -> None:
        """Clear a component's ERROR state back to UNINITIALIZED."""
        with self._operation_lock:
            self._registry.get(component_id).reset_error()

    def reinitialize_component(self, component_id: str) -> None:
        """
        Recovery entry point for an external health checker.

        Retries ``initialize`` on a component in ERROR state. Each call
        consumes one of ``max_recovery_attempts``; once they are used up the
        call fails with ``RecoveryExhaustedError`` and no hook runs. The
        system state is left as it is.

        Raises:
            GeneralError: Unknown id
            TransitionError: Recovery disabled, or component not in ERROR
            InitializationError: A dependency is not up, or the hook failed
            RecoveryExhaustedError: Attempt budget used up
        """
        with self._operation_lock, LogContext(operation="reinitialize_component"):
            component = self._registry.get(component_id)

            if not self.config.enable_automatic_recovery:
                raise TransitionError(
                    "Automatic recovery is disabled",
                    details={"component_id": component_id},
                )

            state = component.state
            if state != ComponentState.ERROR:
                raise TransitionError(
                    f"Component {component_id} is not in error state",
                    details={"component_id": component_id, "state": state.value},
                )

            attempts = component.recovery_attempts
            max_attempts = self.config.max_recovery_attempts
            if attempts >= max_attempts:
                logger.error(
                    "component_recovery_exhausted",
                    component=component_id,
                    attempts=attempts,
                    max_attempts=max_attempts
                )
                raise RecoveryExhaustedError(component_id, attempts, max_attempts)

            blocked = self._dependencies_not_up(component)
            if blocked:
                raise InitializationError(
                    f"Component {component_id} cannot be reinitialized; "
                    f"dependencies not running: {', '.join(blocked)}",
                    component_id=component_id,
                    details={"blocked_by": blocked},
                )

            attempt = component.record_recovery_attempt()
            logger.info(
                "component_recovery_attempt",
                component=component_id,
                attempt=attempt,
                max_attempts=max_attempts
            )
            component.reset_error()
            self._initialize_one(component_id)

    # ========================================================================
    # System pause / resume
    # ========================================================================

    def pause_system(self) -> None:
        """
        Pause every pausable RUNNING component, dependents first.

        Only components with both a pause and a resume hook are paused; the
        rest keep running. On a hook failure the system stays RUNNING and
        components paused so far stay paused.
        """
        with self._operation_lock, LogContext(operation="pause_system"):
            state = self.system_state
            if state != SystemState.RUNNING:
                raise TransitionError(
                    f"System is not running: {state.value}",
                    details={"system_state": state.value},
                )

            for component_id in self._flat_order(Direction.SHUTDOWN):
                component = self._registry.get(component_id)
                if not (component.supports_pause and component.supports_resume):
                    continue
                if component.state == ComponentState.RUNNING:
                    component.pause()
                    logger.info("component_paused", component=component_id)

            self._set_system_state(SystemState.PAUSED)
            logger.info("system_paused")

    def resume_system(self) -> None:
        """
        Resume every PAUSED component, dependencies first.

        A component paused on its own without a resume hook stays PAUSED.
        """
        with self._operation_lock, LogContext(operation="resume_system"):
            state = self.system_state
            if state != SystemState.PAUSED:
                raise TransitionError(
                    f"System is not paused: {state.value}",
                    details={"system_state": state.value},
                )

            for component_id in self._flat_order(Direction.STARTUP):
                component = self._registry.get(component_id)
                if component.state == ComponentState.PAUSED and component.supports_resume:
                    component.resume()
                    logger.info("component_resumed", component=component_id)

            self._set_system_state(SystemState.RUNNING)
            logger.info("system_resumed")

    # ========================================================================
    # Context manager
    # ========================================================================

    def __enter__(self) -> "LifecycleManager":
        self.start_system()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.system_state == SystemState.TERMINATED:
            return False
        try:
            self.stop_system()
        except LifecycleError as e:
            if exc_type is None:
                raise
            # the in-flight exception wins; log the teardown failure
            logger.error("teardown_failed", **e.to_dict())
        return False

    # ========================================================================
    # Internals
    # ========================================================================

    def _graph(self) -> Dict[str, Sequence[str]]:
        return {c.id: c.dependencies for c in self._registry.components()}

    def _plan(self, direction: Direction) -> List[List[str]]:
        try:
            return DependencyResolver(self._graph(), direction).plan()
        except ResolutionStalled as e:
            raise InitializationError(
                str(e),
                details={"pending": e.remaining, "direction": direction.value},
            ) from e

    def _flat_order(self, direction: Direction) -> List[str]:
        return [cid for passed in self._plan(direction) for cid in passed]

    def _dependencies_not_up(self, component: Component) -> List[str]:
        blocked = []
        for dep in component.dependencies:
            if not self._registry.contains(dep):
                blocked.append(dep)
            elif self._registry.get(dep).state not in (ComponentState.RUNNING, ComponentState.PAUSED):
                blocked.append(dep)
        return blocked

    def _initialize_one(self, component_id: str) -> None:
        component = self._registry.get(component_id)
        try:
            component.initialize()
        except ComponentError as e:
            logger.error(
                "component_initialization_failed",
                component=component_id,
                reason=e.message
            )
            raise InitializationError(
                f"Component {component_id} failed to initialize: {e.message}",
                component_id=component_id,
                details={"reason": e.message},
            ) from e
        except TransitionError as e:
            raise InitializationError(
                f"Component {component_id} cannot be initialized: {e.message}",
                component_id=component_id,
                details={"reason": e.message},
            ) from e

        logger.info("component_initialized", component=component_id)

    def _shutdown_one(self, component_id: str) -> None:
        component = self._registry.get(component_id)
        try:
            component.shutdown()
        except ComponentError as e:
            logger.error(
                "component_shutdown_failed",
                component=component_id,
                reason=e.message
            )
            raise ComponentError(
                f"Component {component_id} failed to shut down: {e.message}",
                component_id=component_id,
                operation="shutdown",
                details={"reason": e.message},
            ) from e

        logger.debug("component_shut_down", component=component_id)


__all__ = ["LifecycleManager"]
