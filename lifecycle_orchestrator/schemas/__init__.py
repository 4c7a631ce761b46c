"""Read-only data transfer objects for lifecycle state."""
from lifecycle_orchestrator.schemas.lifecycle import (
    ComponentState,
    SystemState,
    ComponentSnapshot,
    LifecycleStatus,
)

__all__ = [
    "ComponentState",
    "SystemState",
    "ComponentSnapshot",
    "LifecycleStatus",
]
