"""
Dependency resolution for startup and shutdown ordering.

The resolver works pass by pass. Each pass takes every still-remaining
component that is eligible at the start of the pass, hands it to the
caller's action in registration order, and marks it resolved. It stops when
nothing remains, when a pass finds no eligible component (a cycle or a
missing dependency), or when the wall-clock budget checked before each pass
has run out. The budget never interrupts an action that is already running.
"""
import time
from enum import Enum
from typing import Callable, Dict, List, Optional, Sequence, Tuple
import structlog

logger = structlog.get_logger(__name__)


class Direction(Enum):
    """Which way dependency edges are honoured."""
    STARTUP = "startup"      # dependencies before dependents
    SHUTDOWN = "shutdown"    # dependents before dependencies


class ResolutionStalled(Exception):
    """A full pass found nothing eligible while components remain."""

    def __init__(self, remaining: List[str], resolved: List[str]):
        self.remaining = remaining
        self.resolved = resolved
        super().__init__(
            "Dependency cycle or missing dependency among: " + ", ".join(remaining)
        )


class ResolutionTimeout(Exception):
    """The wall-clock budget ran out between passes."""

    def __init__(self, timeout: float, elapsed: float, remaining: List[str], resolved: List[str]):
        self.timeout = timeout
        self.elapsed = elapsed
        self.remaining = remaining
        self.resolved = resolved
        super().__init__(f"Timed out after {elapsed:.3f}s (budget {timeout}s)")


class DependencyResolver:
    """
    Fixpoint ordering over a dependency graph.

    Args:
        graph: component id -> ids it depends on, in registration order
        direction: STARTUP or SHUTDOWN eligibility
        timeout: wall-clock budget in seconds, None for unbounded
        clock: monotonic time source (injectable for tests)
    """

    def __init__(
        self,
        graph: Dict[str, Sequence[str]],
        direction: Direction = Direction.STARTUP,
        timeout: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.graph = {cid: tuple(deps) for cid, deps in graph.items()}
        self.direction = direction
        self.timeout = timeout
        self.clock = clock

    def _eligible(self, component_id: str, resolved: set, remaining: List[str]) -> bool:
        if self.direction == Direction.STARTUP:
            return all(dep in resolved for dep in self.graph[component_id])
        return not any(
            component_id in self.graph[other]
            for other in remaining
            if other != component_id
        )

    def _next_pass(self, resolved: set, remaining: List[str]) -> List[str]:
        return [cid for cid in remaining if self._eligible(cid, resolved, remaining)]

    def plan(self) -> List[List[str]]:
        """Compute the pass-by-pass order without running anything."""
        passes = []
        resolved: set = set()
        remaining = list(self.graph)
        while remaining:
            eligible = self._next_pass(resolved, remaining)
            if not eligible:
                raise ResolutionStalled(remaining, [c for p in passes for c in p])
            passes.append(eligible)
            resolved.update(eligible)
            remaining = [cid for cid in remaining if cid not in resolved]
        return passes

    def run(self, action: Callable[[str], None]) -> List[str]:
        """
        Apply ``action`` to every component in dependency order.

        Exceptions raised by ``action`` propagate immediately; components
        already handled stay handled.

        Returns:
            Component ids in the order the action was applied

        Raises:
            ResolutionTimeout: budget exceeded before a pass
            ResolutionStalled: no progress possible
        """
        started = self.clock()
        order: List[str] = []
        resolved: set = set()
        remaining = list(self.graph)
        passes = 0

        while remaining:
            if self.timeout is not None:
                elapsed = self.clock() - started
                if elapsed >= self.timeout:
                    raise ResolutionTimeout(self.timeout, elapsed, list(remaining), order)

            eligible = self._next_pass(resolved, remaining)
            if not eligible:
                logger.warning(
                    "dependency_stall",
                    direction=self.direction.value,
                    remaining=remaining,
                    passes=passes,
                )
                raise ResolutionStalled(list(remaining), order)

            passes += 1
            logger.debug(
                "resolver_pass",
                direction=self.direction.value,
                pass_number=passes,
                eligible=eligible,
            )
            for component_id in eligible:
                action(component_id)
                order.append(component_id)
                resolved.add(component_id)
            remaining = [cid for cid in remaining if cid not in resolved]

        return order


def run_unordered(
    component_ids: Sequence[str],
    action: Callable[[str], None],
) -> List[Tuple[str, Exception]]:
    """
    Best-effort sweep: apply ``action`` to every id, ignoring dependencies.

    A failure never stops the sweep. Returns (id, exception) for each failure.
    """
    failures = []
    for component_id in component_ids:
        try:
            action(component_id)
        except Exception as e:
            failures.append((component_id, e))
    return failures


__all__ = [
    "Direction",
    "DependencyResolver",
    "ResolutionStalled",
    "ResolutionTimeout",
    "run_unordered",
]
