"""
Move metrics consumed by clustering and risk scoring.

An address change can be measured two ways:
- AtMove: headcount before vs. right after the move
- SinceMove: headcount right after the move vs. the latest observation

Both carry the same complete field set. metrics_for() is the one place
that decides which one applies to a given item.
"""

import math
from dataclasses import dataclass
from typing import Optional, Union

from lokalradar.analysis.changes import AddressChangeEvent, RelocationCandidate


@dataclass(frozen=True)
class _MoveMetrics:
    years_since_move: int
    employee_change: int
    change_percent: float  # NaN when there was no baseline
    employees_now: int

    basis = ""

    @property
    def is_finite(self) -> bool:
        return all(math.isfinite(v) for v in self.as_tuple())

    def as_tuple(self) -> tuple[float, float, float, float]:
        return (
            float(self.years_since_move),
            float(self.employee_change),
            float(self.change_percent),
            float(self.employees_now),
        )

    def to_dict(self) -> dict:
        """Convert to dictionary (NaN percent becomes None)."""
        return {
            "basis": self.basis,
            "years_since_move": self.years_since_move,
            "employee_change": self.employee_change,
            "change_percent": self.change_percent if math.isfinite(self.change_percent) else None,
            "employees_now": self.employees_now,
        }


@dataclass(frozen=True)
class AtMove(_MoveMetrics):
    """Metrics measured across the move itself."""

    basis = "at_move"


@dataclass(frozen=True)
class SinceMove(_MoveMetrics):
    """Metrics measured from the move to the latest observation."""

    basis = "since_move"


MoveMetrics = Union[AtMove, SinceMove]
MovedItem = Union[AddressChangeEvent, RelocationCandidate]


def at_move(event: AddressChangeEvent, reference_year: int) -> AtMove:
    return AtMove(
        years_since_move=event.years_since(reference_year),
        employee_change=event.employee_change,
        change_percent=event.change_percent_value,
        employees_now=event.employees_after,
    )


def since_move(candidate: RelocationCandidate) -> SinceMove:
    return SinceMove(
        years_since_move=candidate.years_since_move,
        employee_change=candidate.employee_change_since_move,
        change_percent=candidate.change_percent_since_move_value,
        employees_now=candidate.employees_now,
    )


def metrics_for(item: MovedItem, reference_year: Optional[int] = None) -> MoveMetrics:
    """
    Select the metrics for an event or candidate.

    Candidates always use their since-move figures; plain events can only
    be measured at the move and need the reference year for that.
    """
    if isinstance(item, (AtMove, SinceMove)):
        return item
    if isinstance(item, RelocationCandidate):
        return since_move(item)
    if isinstance(item, AddressChangeEvent):
        if reference_year is None:
            raise ValueError("reference_year is required to measure an event at the move")
        return at_move(item, reference_year)
    raise TypeError(f"Cannot derive move metrics from {type(item).__name__}")
