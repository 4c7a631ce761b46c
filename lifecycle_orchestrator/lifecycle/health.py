"""Health view over the components owned by a lifecycle manager."""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional
import structlog

from ..schemas.lifecycle import ComponentSnapshot, ComponentState

logger = structlog.get_logger(__name__)


class HealthStatus(Enum):
    """Component health status levels."""
    HEALTHY = "healthy"          # Fully operational
    DEGRADED = "degraded"        # Paused
    UNHEALTHY = "unhealthy"      # In ERROR
    UNKNOWN = "unknown"          # Not started, starting, or stopped


_STATE_TO_HEALTH = {
    ComponentState.RUNNING: HealthStatus.HEALTHY,
    ComponentState.PAUSED: HealthStatus.DEGRADED,
    ComponentState.ERROR: HealthStatus.UNHEALTHY,
}


@dataclass
class ComponentHealth:
    """Health information for a single component."""
    name: str
    status: HealthStatus
    state: ComponentState
    last_check: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    error_message: Optional[str] = None
    recovery_attempts: int = 0

    @classmethod
    def from_snapshot(cls, snapshot: ComponentSnapshot) -> "ComponentHealth":
        return cls(
            name=snapshot.id,
            status=_STATE_TO_HEALTH.get(snapshot.state, HealthStatus.UNKNOWN),
            state=snapshot.state,
            error_message=snapshot.error_message,
            recovery_attempts=snapshot.recovery_attempts,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dictionary for API responses."""
        return {
            "name": self.name,
            "status": self.status.value,
            "state": self.state.value,
            "last_check": self.last_check.isoformat(),
            "error_message": self.error_message,
            "recovery_attempts": self.recovery_attempts,
        }


def overall_status(components: List[ComponentHealth]) -> HealthStatus:
    """
    Calculate overall system health based on component statuses.

    Logic:
    - UNHEALTHY: Any component is unhealthy
    - DEGRADED: Any component is degraded
    - HEALTHY: All components healthy
    - UNKNOWN: No components, or some not yet started
    """
    if not components:
        return HealthStatus.UNKNOWN

    statuses = [c.status for c in components]

    if any(s == HealthStatus.UNHEALTHY for s in statuses):
        return HealthStatus.UNHEALTHY

    if any(s == HealthStatus.DEGRADED for s in statuses):
        return HealthStatus.DEGRADED

    if all(s == HealthStatus.HEALTHY for s in statuses):
        return HealthStatus.HEALTHY

    return HealthStatus.UNKNOWN


def health_summary(snapshots: List[ComponentSnapshot]) -> Dict[str, Any]:
    """
    Build a health summary for API responses.

    Returns:
        Dictionary with overall status, timestamp, component details, and summary stats
    """
    health = [ComponentHealth.from_snapshot(s) for s in snapshots]
    overall = overall_status(health)
    components = {h.name: h.to_dict() for h in health}

    return {
        "overall_status": overall.value,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "components": components,
        "summary": {
            "total": len(health),
            "healthy": sum(1 for h in health if h.status == HealthStatus.HEALTHY),
            "degraded": sum(1 for h in health if h.status == HealthStatus.DEGRADED),
            "unhealthy": sum(1 for h in health if h.status == HealthStatus.UNHEALTHY),
            "unknown": sum(1 for h in health if h.status == HealthStatus.UNKNOWN),
        }
    }


__all__ = [
    "HealthStatus",
    "ComponentHealth",
    "overall_status",
    "health_summary",
]
