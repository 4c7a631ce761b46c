import pytest

from lifecycle_orchestrator.core.config import LifecycleConfig
from lifecycle_orchestrator.lifecycle.manager import LifecycleManager


class HookRecorder:
    """Builds hooks that record (component_id, operation) in call order."""

    def __init__(self):
        self.calls = []

    def hook(self, component_id, operation, fail=None, fail_times=None, side_effect=None):
        """
        fail: message to raise with
        fail_times: raise only on the first N calls (None = always)
        side_effect: callable run before the hook returns
        """
        state = {"count": 0}

        def _hook():
            self.calls.append((component_id, operation))
            state["count"] += 1
            if side_effect is not None:
                side_effect()
            if fail is not None and (fail_times is None or state["count"] <= fail_times):
                raise RuntimeError(fail)

        return _hook

    def order(self, operation):
        return [cid for cid, op in self.calls if op == operation]


class FakeClock:
    """Monotonic clock advanced by hand."""

    def __init__(self, start=0.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def recorder():
    return HookRecorder()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def manager(clock):
    return LifecycleManager(LifecycleConfig(), clock=clock)


def add(manager, recorder, component_id, deps=(), init_fail=None, shutdown_fail=None,
        pausable=False, **kwargs):
    """Register a recorded component on ``manager``."""
    manager.register(
        component_id,
        component_id.upper(),
        list(deps),
        init_hook=recorder.hook(component_id, "init", fail=init_fail,
                                fail_times=kwargs.get("init_fail_times")),
        shutdown_hook=recorder.hook(component_id, "shutdown", fail=shutdown_fail,
                                    fail_times=kwargs.get("shutdown_fail_times")),
        pause_hook=recorder.hook(component_id, "pause") if pausable else None,
        resume_hook=recorder.hook(component_id, "resume") if pausable else None,
    )


@pytest.fixture
def abc_manager(manager, recorder):
    """A (no deps), B (A), C (A, B)."""
    add(manager, recorder, "A")
    add(manager, recorder, "B", ["A"])
    add(manager, recorder, "C", ["A", "B"])
    return manager
