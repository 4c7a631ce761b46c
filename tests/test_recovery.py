import pytest

from lifecycle_orchestrator.core.config import LifecycleConfig
from lifecycle_orchestrator.core.exceptions import (
    ComponentError,
    InitializationError,
    RecoveryExhaustedError,
    TransitionError,
)
from lifecycle_orchestrator.lifecycle.manager import LifecycleManager
from lifecycle_orchestrator.schemas.lifecycle import ComponentState, SystemState

from conftest import add


def failed_start(manager, recorder, fail_times=None):
    """A runs, B (depends on A) fails to initialize."""
    add(manager, recorder, "A")
    add(manager, recorder, "B", ["A"], init_fail="boom", init_fail_times=fail_times)
    with pytest.raises(InitializationError):
        manager.start_system()
    assert manager.get_component("B").state == ComponentState.ERROR


def test_reinitialize_recovers_failed_component(manager, recorder):
    failed_start(manager, recorder, fail_times=1)

    manager.reinitialize_component("B")

    snapshot = manager.get_component("B")
    assert snapshot.state == ComponentState.RUNNING
    assert snapshot.error_message is None
    assert snapshot.recovery_attempts == 1
    assert manager.get_status().recovery_attempts == 1
    # recovery does not touch the aggregate state
    assert manager.system_state == SystemState.ERROR


def test_recovery_budget_is_enforced(clock, recorder):
    manager = LifecycleManager(LifecycleConfig(max_recovery_attempts=2), clock=clock)
    failed_start(manager, recorder)

    for _ in range(2):
        with pytest.raises(InitializationError, match="boom"):
            manager.reinitialize_component("B")
    calls_before = len(recorder.calls)

    with pytest.raises(RecoveryExhaustedError) as exc_info:
        manager.reinitialize_component("B")

    assert isinstance(exc_info.value, ComponentError)
    assert exc_info.value.error_code == "RECOVERY_EXHAUSTED"
    assert len(recorder.calls) == calls_before
    assert manager.get_status().recovery_attempts == 2


def test_recovery_disabled(clock, recorder):
    manager = LifecycleManager(LifecycleConfig(enable_automatic_recovery=False), clock=clock)
    failed_start(manager, recorder)

    with pytest.raises(TransitionError, match="disabled"):
        manager.reinitialize_component("B")
    assert manager.get_component("B").recovery_attempts == 0


def test_reinitialize_requires_error_state(manager, recorder):
    failed_start(manager, recorder)
    with pytest.raises(TransitionError):
        manager.reinitialize_component("A")


def test_reinitialize_waits_for_dependencies(manager, recorder):
    failed_start(manager, recorder)
    manager.unregister_component("A")

    with pytest.raises(InitializationError) as exc_info:
        manager.reinitialize_component("B")

    assert exc_info.value.details["blocked_by"] == ["A"]
    snapshot = manager.get_component("B")
    assert snapshot.state == ComponentState.ERROR
    assert snapshot.recovery_attempts == 0


def test_restart_resets_recovery_attempts(manager, recorder):
    failed_start(manager, recorder)
    with pytest.raises(InitializationError):
        manager.reinitialize_component("B")
    assert manager.get_status().recovery_attempts == 1

    manager.stop_system()
    with pytest.raises(InitializationError):
        manager.start_system()
    assert manager.get_status().recovery_attempts == 0


def test_reset_component_clears_error(manager, recorder):
    failed_start(manager, recorder)
    manager.reset_component("B")
    snapshot = manager.get_component("B")
    assert snapshot.state == ComponentState.UNINITIALIZED
    assert snapshot.error_message is None
