from fastapi.testclient import TestClient

from lifecycle_orchestrator.api.main import create_app
from lifecycle_orchestrator.core.config import LifecycleConfig, Settings
from lifecycle_orchestrator.lifecycle.manager import LifecycleManager
from lifecycle_orchestrator.schemas.lifecycle import SystemState

from conftest import HookRecorder, add

SETTINGS = Settings(LOG_FORMAT="console", ENVIRONMENT="development")


def build(init_fail=None):
    recorder = HookRecorder()
    manager = LifecycleManager(LifecycleConfig())
    add(manager, recorder, "kernel", pausable=True)
    add(manager, recorder, "sandbox", ["kernel"], init_fail=init_fail)
    return manager, recorder, create_app(manager, SETTINGS)


def test_lifespan_starts_and_stops_system():
    manager, recorder, app = build()
    with TestClient(app) as client:
        assert manager.system_state == SystemState.RUNNING
        response = client.get("/")
        assert response.status_code == 200
        assert response.json()["system_state"] == "running"

    assert manager.system_state == SystemState.TERMINATED
    assert recorder.order("shutdown") == ["sandbox", "kernel"]


def test_health_check_healthy():
    _, _, app = build()
    with TestClient(app) as client:
        response = client.get("/api/v1/health")
        assert response.status_code == 200
        data = response.json()
        assert data["overall_status"] == "healthy"
        assert data["summary"]["healthy"] == 2

        assert client.get("/api/v1/health/ready").status_code == 200
        assert client.get("/api/v1/health/live").json()["status"] == "alive"


def test_failed_start_is_reported_unhealthy():
    manager, _, app = build(init_fail="no sandbox")
    with TestClient(app) as client:
        assert manager.system_state == SystemState.ERROR

        response = client.get("/api/v1/health")
        assert response.status_code == 503
        data = response.json()
        assert data["overall_status"] == "unhealthy"
        assert data["components"]["sandbox"]["error_message"] == "no sandbox"

        ready = client.get("/api/v1/health/ready")
        assert ready.status_code == 503
        assert ready.json()["reason"] == "error"


def test_status_and_components():
    _, _, app = build()
    with TestClient(app) as client:
        status = client.get("/api/v1/lifecycle/status").json()
        assert status["system_state"] == "running"
        assert status["component_count"] == 2
        assert status["running_component_count"] == 2

        components = client.get("/api/v1/lifecycle/components").json()
        assert [c["id"] for c in components] == ["kernel", "sandbox"]

        sandbox = client.get("/api/v1/lifecycle/components/sandbox").json()
        assert sandbox["dependencies"] == ["kernel"]
        assert sandbox["state"] == "running"


def test_unknown_component_is_404():
    _, _, app = build()
    with TestClient(app) as client:
        response = client.get("/api/v1/lifecycle/components/ghost")
        assert response.status_code == 404
        assert response.json()["error_code"] == "GENERAL_ERROR"

        assert client.post("/api/v1/lifecycle/components/ghost/pause").status_code == 404


def test_order_endpoint():
    _, _, app = build()
    with TestClient(app) as client:
        order = client.get("/api/v1/lifecycle/order").json()
        assert order == {
            "startup": [["kernel"], ["sandbox"]],
            "shutdown": [["sandbox"], ["kernel"]],
        }


def test_pause_resume_endpoints():
    _, _, app = build()
    with TestClient(app) as client:
        paused = client.post("/api/v1/lifecycle/components/kernel/pause")
        assert paused.status_code == 200
        assert paused.json()["state"] == "paused"

        health = client.get("/api/v1/health").json()
        assert health["overall_status"] == "degraded"

        resumed = client.post("/api/v1/lifecycle/components/kernel/resume")
        assert resumed.json()["state"] == "running"

        # sandbox has no pause hook
        refused = client.post("/api/v1/lifecycle/components/sandbox/pause")
        assert refused.status_code == 409
        assert refused.json()["error_code"] == "TRANSITION_ERROR"


def test_reinitialize_endpoint():
    recorder = HookRecorder()
    manager = LifecycleManager(LifecycleConfig())
    add(manager, recorder, "kernel")
    add(manager, recorder, "sandbox", ["kernel"], init_fail="flaky", init_fail_times=1)
    app = create_app(manager, SETTINGS)

    with TestClient(app) as client:
        response = client.post("/api/v1/lifecycle/components/sandbox/reinitialize")
        assert response.status_code == 200
        assert response.json()["state"] == "running"
        assert response.json()["recovery_attempts"] == 1

        again = client.post("/api/v1/lifecycle/components/sandbox/reinitialize")
        assert again.status_code == 409
