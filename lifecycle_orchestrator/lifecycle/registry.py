"""Component registry owned by a single lifecycle manager."""
from threading import RLock
from typing import Dict, List, Optional, Set
import structlog

from ..core.exceptions import GeneralError, InitializationError
from .component import Component

logger = structlog.get_logger(__name__)


class ComponentRegistry:
    """
    Ordered mapping of component id to Component.

    Features:
    - Registration-order iteration (keeps resolver passes deterministic)
    - Missing dependency detection
    - Circular dependency detection

    The internal lock only guards the mapping itself. It is never held while
    a component hook runs.
    """

    def __init__(self):
        self._components: Dict[str, Component] = {}
        self._lock = RLock()

    def add(self, component: Component) -> None:
        """
        Register a component.

        Raises:
            GeneralError: If a component with the same id is already present
        """
        with self._lock:
            if component.id in self._components:
                logger.warning(
                    "duplicate_component_registration",
                    component=component.id,
                    action="rejected"
                )
                raise GeneralError(
                    "Component already registered",
                    details={"component_id": component.id},
                )
            self._components[component.id] = component

        logger.debug(
            "component_added",
            component=component.id,
            name=component.name,
            depends_on=list(component.dependencies)
        )

    def remove(self, component_id: str) -> Component:
        with self._lock:
            try:
                return self._components.pop(component_id)
            except KeyError:
                raise GeneralError(
                    "Component not found",
                    details={"component_id": component_id},
                ) from None

    def get(self, component_id: str) -> Component:
        with self._lock:
            component = self._components.get(component_id)
        if component is None:
            raise GeneralError(
                "Component not found",
                details={"component_id": component_id},
            )
        return component

    def contains(self, component_id: str) -> bool:
        with self._lock:
            return component_id in self._components

    def ids(self) -> List[str]:
        """Component ids in registration order."""
        with self._lock:
            return list(self._components.keys())

    def components(self) -> List[Component]:
        with self._lock:
            return list(self._components.values())

    def __len__(self) -> int:
        with self._lock:
            return len(self._components)

    def __contains__(self, component_id: str) -> bool:
        return self.contains(component_id)

    # ------------------------------------------------------------------
    # Dependency graph checks
    # ------------------------------------------------------------------

    def missing_dependencies(self) -> Dict[str, List[str]]:
        """Map each component id to the dependencies that are not registered."""
        with self._lock:
            known = set(self._components)
            missing = {}
            for component in self._components.values():
                absent = [dep for dep in component.dependencies if dep not in known]
                if absent:
                    missing[component.id] = absent
            return missing

    def find_cycle(self) -> Optional[List[str]]:
        """
        Detect a circular dependency using depth-first search.

        Returns:
            The cycle as an id path whose last element repeats the first
            (e.g. ``["a", "b", "a"]``), or None if the graph is acyclic.
        """
        with self._lock:
            graph = {cid: c.dependencies for cid, c in self._components.items()}

        visited: Set[str] = set()

        def visit(node: str, rec_stack: Set[str], path: List[str]) -> Optional[List[str]]:
            visited.add(node)
            rec_stack.add(node)
            path.append(node)

            for dep in graph.get(node, ()):
                if dep not in graph:
                    continue
                if dep not in visited:
                    cycle = visit(dep, rec_stack, path)
                    if cycle:
                        return cycle
                elif dep in rec_stack:
                    cycle_start = path.index(dep)
                    return path[cycle_start:] + [dep]

            path.pop()
            rec_stack.remove(node)
            return None

        for name in graph:
            if name not in visited:
                cycle = visit(name, set(), [])
                if cycle:
                    return cycle
        return None

    def validate_dependencies(self) -> None:
        """
        Validate that every dependency is registered and the graph is acyclic.

        Raises:
            InitializationError: If any dependency is missing or circular
        """
        missing = self.missing_dependencies()
        if missing:
            component_id, deps = next(iter(missing.items()))
            raise InitializationError(
                f"Component '{component_id}' depends on {deps} which "
                f"{'is' if len(deps) == 1 else 'are'} not registered",
                component_id=component_id,
                details={"missing": missing},
            )

        cycle = self.find_cycle()
        if cycle:
            raise InitializationError(
                f"Circular dependency detected: {' -> '.join(cycle)}",
                component_id=cycle[0],
                details={"cycle": cycle},
            )

        logger.debug("dependency_validation_passed", total_components=len(self))


__all__ = ["ComponentRegistry"]
