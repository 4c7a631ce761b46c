import pytest
from pydantic import ValidationError

from lifecycle_orchestrator.core.exceptions import (
    ComponentError,
    GeneralError,
    TransitionError,
)
from lifecycle_orchestrator.lifecycle.base import BaseLifecycleComponent
from lifecycle_orchestrator.lifecycle.component import Component
from lifecycle_orchestrator.schemas.lifecycle import ComponentState


def make(recorder, component_id="svc", deps=(), init_fail=None, shutdown_fail=None,
         pause=True, pause_fail=None, resume_fail=None):
    return Component(
        component_id,
        "Service",
        deps,
        init_hook=recorder.hook(component_id, "init", fail=init_fail),
        shutdown_hook=recorder.hook(component_id, "shutdown", fail=shutdown_fail),
        pause_hook=recorder.hook(component_id, "pause", fail=pause_fail) if pause else None,
        resume_hook=recorder.hook(component_id, "resume", fail=resume_fail) if pause else None,
    )


def test_new_component_is_uninitialized(recorder):
    component = make(recorder, deps=["db", "db", "cache"])
    assert component.state == ComponentState.UNINITIALIZED
    assert component.dependencies == ("db", "cache")
    assert component.last_transition_time is None
    assert component.error_message is None


def test_self_dependency_rejected(recorder):
    with pytest.raises(GeneralError):
        make(recorder, component_id="svc", deps=["svc"])


def test_missing_mandatory_hook_rejected():
    with pytest.raises(GeneralError):
        Component("svc", "Service", [], init_hook=lambda: None, shutdown_hook=None)


def test_initialize_success(recorder):
    component = make(recorder)
    component.initialize()
    assert component.state == ComponentState.RUNNING
    assert component.last_transition_time is not None
    assert recorder.calls == [("svc", "init")]


def test_initialize_failure_records_error(recorder):
    component = make(recorder, init_fail="disk full")
    with pytest.raises(ComponentError) as exc_info:
        component.initialize()

    assert exc_info.value.message == "disk full"
    assert exc_info.value.operation == "initialize"
    assert component.state == ComponentState.ERROR
    assert component.error_message == "disk full"


def test_initialize_twice_is_a_transition_error(recorder):
    component = make(recorder)
    component.initialize()
    stamp = component.last_transition_time

    with pytest.raises(TransitionError):
        component.initialize()

    assert component.state == ComponentState.RUNNING
    assert component.last_transition_time == stamp
    assert recorder.order("init") == ["svc"]


def test_shutdown_is_noop_when_never_started(recorder):
    component = make(recorder)
    component.shutdown()
    assert component.state == ComponentState.UNINITIALIZED
    assert recorder.calls == []


def test_shutdown_then_shutdown_again_is_idempotent(recorder):
    component = make(recorder)
    component.initialize()
    component.shutdown()
    component.shutdown()
    assert component.state == ComponentState.TERMINATED
    assert recorder.order("shutdown") == ["svc"]


def test_shutdown_failure_moves_to_error(recorder):
    component = make(recorder, shutdown_fail="stuck")
    component.initialize()
    with pytest.raises(ComponentError):
        component.shutdown()
    assert component.state == ComponentState.ERROR
    assert component.error_message == "stuck"


def test_shutdown_from_error_runs_hook(recorder):
    component = make(recorder, init_fail="boom")
    with pytest.raises(ComponentError):
        component.initialize()
    component.shutdown()
    assert component.state == ComponentState.TERMINATED
    assert recorder.order("shutdown") == ["svc"]


def test_pause_and_resume(recorder):
    component = make(recorder)
    component.initialize()
    component.pause()
    assert component.state == ComponentState.PAUSED
    component.resume()
    assert component.state == ComponentState.RUNNING


@pytest.mark.parametrize("prepare", ["uninitialized", "paused", "terminated"])
def test_pause_requires_running(recorder, prepare):
    component = make(recorder)
    if prepare in ("paused", "terminated"):
        component.initialize()
    if prepare == "paused":
        component.pause()
    if prepare == "terminated":
        component.shutdown()
    before = component.state

    with pytest.raises(TransitionError):
        component.pause()
    assert component.state == before


def test_resume_requires_paused(recorder):
    component = make(recorder)
    component.initialize()
    with pytest.raises(TransitionError):
        component.resume()
    assert component.state == ComponentState.RUNNING


def test_pause_without_hook_is_refused(recorder):
    component = make(recorder, pause=False)
    component.initialize()
    with pytest.raises(TransitionError, match="does not support pause"):
        component.pause()
    assert component.state == ComponentState.RUNNING
    assert not component.supports_pause


def test_pause_hook_failure_keeps_running(recorder):
    component = make(recorder, pause_fail="busy")
    component.initialize()
    with pytest.raises(ComponentError, match="busy"):
        component.pause()
    assert component.state == ComponentState.RUNNING
    assert component.error_message is None


def test_resume_hook_failure_keeps_paused(recorder):
    component = make(recorder, resume_fail="busy")
    component.initialize()
    component.pause()
    with pytest.raises(ComponentError):
        component.resume()
    assert component.state == ComponentState.PAUSED


def test_reset_error(recorder):
    component = make(recorder, init_fail="boom")
    with pytest.raises(ComponentError):
        component.initialize()

    component.reset_error()
    assert component.state == ComponentState.UNINITIALIZED
    assert component.error_message is None


def test_reset_error_outside_error_is_noop(recorder):
    component = make(recorder)
    component.initialize()
    component.reset_error()
    assert component.state == ComponentState.RUNNING


def test_rearm_only_from_terminated(recorder):
    component = make(recorder)
    component.rearm()
    component.initialize()
    component.rearm()
    assert component.state == ComponentState.RUNNING

    component.shutdown()
    component.rearm()
    assert component.state == ComponentState.UNINITIALIZED


def test_hook_exception_without_message_uses_type_name():
    def broken():
        raise ValueError()

    component = Component("svc", "Service", [], init_hook=broken, shutdown_hook=lambda: None)
    with pytest.raises(ComponentError):
        component.initialize()
    assert component.error_message == "ValueError"


def test_snapshot_is_a_copy(recorder):
    component = make(recorder, deps=["db"])
    snapshot = component.snapshot()
    component.initialize()

    assert snapshot.state == ComponentState.UNINITIALIZED
    assert snapshot.dependencies == ["db"]
    assert snapshot.supports_pause is True
    assert component.snapshot().state == ComponentState.RUNNING


def test_snapshot_is_immutable(recorder):
    snapshot = make(recorder).snapshot()
    with pytest.raises(ValidationError):
        snapshot.state = ComponentState.RUNNING
    assert snapshot.to_dict()["state"] == "uninitialized"


class Sandbox(BaseLifecycleComponent):
    component_id = "sandbox"
    name = "Sandbox"
    depends_on = ["resources"]

    def __init__(self):
        super().__init__()
        self.events = []

    def initialize(self):
        self.events.append("init")

    def shutdown(self):
        self.events.append("shutdown")

    def pause(self):
        self.events.append("pause")


def test_from_lifecycle_binds_implemented_hooks_only():
    sandbox = Sandbox()
    component = Component.from_lifecycle(sandbox)

    assert component.id == "sandbox"
    assert component.dependencies == ("resources",)
    assert component.supports_pause
    assert not component.supports_resume

    component.initialize()
    component.pause()
    with pytest.raises(TransitionError, match="does not support resume"):
        component.resume()
    assert sandbox.events == ["init", "pause"]
