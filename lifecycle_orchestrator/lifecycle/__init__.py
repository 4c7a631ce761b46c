"""
Lifecycle orchestration: components, dependency resolution, and the manager
that starts and stops them in order.
"""

from lifecycle_orchestrator.lifecycle.base import BaseLifecycleComponent, Hook
from lifecycle_orchestrator.lifecycle.component import Component
from lifecycle_orchestrator.lifecycle.registry import ComponentRegistry
from lifecycle_orchestrator.lifecycle.resolver import (
    DependencyResolver,
    Direction,
    ResolutionStalled,
    ResolutionTimeout,
)
from lifecycle_orchestrator.lifecycle.manager import LifecycleManager
from lifecycle_orchestrator.lifecycle.health import (
    ComponentHealth,
    HealthStatus,
    health_summary,
)


__all__ = [
    "BaseLifecycleComponent",
    "Hook",
    "Component",
    "ComponentRegistry",
    "DependencyResolver",
    "Direction",
    "ResolutionStalled",
    "ResolutionTimeout",
    "LifecycleManager",
    "ComponentHealth",
    "HealthStatus",
    "health_summary",
]
