"""Exceptions raised by the scheduling engine."""

from typing import Optional


class SchedulingError(Exception):
    """Base class for scheduling engine errors."""


class CycleDetected(SchedulingError, ValueError):
    """
    Raised when dependency edges do not form a DAG.

    Attributes:
        cycle: Item ids on one offending cycle, in edge order
        edge: The (from_id, to_id) edge that was refused, if any
    """

    def __init__(self, cycle: list[str], edge: Optional[tuple[str, str]] = None):
        self.cycle = list(cycle)
        self.edge = edge
        if edge is not None:
            message = (f"Circular dependency: adding {edge[0]} -> {edge[1]} "
                       f"closes the cycle {' -> '.join(self.cycle + self.cycle[:1])}")
        else:
            message = (f"Circular dependency detected involving {len(self.cycle)} items: "
                       f"{' -> '.join(self.cycle + self.cycle[:1])}")
        super().__init__(message)
