"""
Lifecycle orchestrator.
Starts, stops, pauses and recovers interdependent subsystems in dependency order.
"""

from lifecycle_orchestrator.core.config import LifecycleConfig, Settings, get_settings
from lifecycle_orchestrator.core.exceptions import (
    LifecycleError,
    InitializationError,
    TransitionError,
    ComponentError,
    GeneralError,
    RecoveryExhaustedError,
)
from lifecycle_orchestrator.schemas.lifecycle import (
    ComponentState,
    SystemState,
    ComponentSnapshot,
    LifecycleStatus,
)
from lifecycle_orchestrator.lifecycle import (
    BaseLifecycleComponent,
    Component,
    LifecycleManager,
)

__version__ = "1.0.0"

__all__ = [
    "LifecycleConfig",
    "Settings",
    "get_settings",
    "LifecycleError",
    "InitializationError",
    "TransitionError",
    "ComponentError",
    "GeneralError",
    "RecoveryExhaustedError",
    "ComponentState",
    "SystemState",
    "ComponentSnapshot",
    "LifecycleStatus",
    "BaseLifecycleComponent",
    "Component",
    "LifecycleManager",
]
