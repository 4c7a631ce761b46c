"""
lifecycle_orchestrator/schemas/lifecycle.py
State enums and read-only snapshots handed to external readers
"""

from enum import Enum
from datetime import datetime
from typing import List, Optional
from pydantic import Field
from .base import BaseModel


# ============================================================================
# States
# ============================================================================

class ComponentState(Enum):
    """Lifecycle states for a single component."""
    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    RUNNING = "running"
    PAUSED = "paused"
    SHUTTING_DOWN = "shutting_down"
    TERMINATED = "terminated"
    ERROR = "error"


class SystemState(Enum):
    """Aggregate orchestration state, independent of any one component."""
    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    RUNNING = "running"
    PAUSED = "paused"
    SHUTTING_DOWN = "shutting_down"
    TERMINATED = "terminated"
    ERROR = "error"


# ============================================================================
# Component Snapshot
# ============================================================================

class ComponentSnapshot(BaseModel):
    """Copy of a component's state taken under its lock"""
    id: str = Field(..., description="Unique component identifier")
    name: str = Field(..., description="Display name")
    state: ComponentState
    dependencies: List[str] = Field(default_factory=list)
    supports_pause: bool = False
    supports_resume: bool = False
    last_transition_time: Optional[datetime] = None
    error_message: Optional[str] = None
    recovery_attempts: int = Field(default=0, ge=0)

    @property
    def is_running(self) -> bool:
        return self.state == ComponentState.RUNNING

    @property
    def is_failed(self) -> bool:
        return self.state == ComponentState.ERROR


# ============================================================================
# Lifecycle Status
# ============================================================================

class LifecycleStatus(BaseModel):
    """System-wide aggregate, derived on demand from the registry"""
    system_state: SystemState
    component_count: int = Field(default=0, ge=0)
    running_component_count: int = Field(default=0, ge=0)
    paused_component_count: int = Field(default=0, ge=0)
    failed_component_count: int = Field(default=0, ge=0)
    uptime: float = Field(default=0.0, ge=0.0, description="Seconds since the system reached RUNNING")
    last_transition_time: Optional[datetime] = None
    recovery_attempts: int = Field(default=0, ge=0)


__all__ = [
    "ComponentState",
    "SystemState",
    "ComponentSnapshot",
    "LifecycleStatus",
]
