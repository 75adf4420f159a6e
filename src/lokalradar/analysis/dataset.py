"""
Processed dataset and its query surface.

A Dataset is the complete, read-only result of one ingest run. Every
query returns new lists; nothing here mutates the underlying analysis.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional, Sequence

from lokalradar.analysis.changes import (
    AddressChangeEvent,
    ChangeAnalysis,
    ChangeAnalyzer,
    EmployeeChangeSummary,
    RelocationCandidate,
    build_candidate,
)
from lokalradar.analysis.statistics import (
    DatasetStatistics,
    compute_statistics,
    is_extreme_change,
    target_year,
)
from lokalradar.timeline.models import Company, CompanyRegistry

logger = logging.getLogger(__name__)


class ChangeDirection(str, Enum):
    """Filter on the sign of an employee change."""

    ALL = "all"
    INCREASE = "increase"
    DECREASE = "decrease"

    def accepts(self, change: int) -> bool:
        if self is ChangeDirection.INCREASE:
            return change > 0
        if self is ChangeDirection.DECREASE:
            return change < 0
        return True


def _limit(items: list, count: Optional[int]) -> list:
    return items if count is None else items[:count]


@dataclass
class Dataset:
    """Timelines, change events and statistics for one ingest run."""

    registry: CompanyRegistry
    analysis: ChangeAnalysis
    statistics: DatasetStatistics

    @classmethod
    def from_registry(
        cls,
        registry: CompanyRegistry,
        analyzer: Optional[ChangeAnalyzer] = None,
    ) -> "Dataset":
        analysis = (analyzer or ChangeAnalyzer()).analyze(registry)
        return cls(
            registry=registry,
            analysis=analysis,
            statistics=compute_statistics(registry, analysis),
        )

    @property
    def reference_year(self) -> Optional[int]:
        return self.registry.reference_year

    @property
    def address_changes(self) -> list[AddressChangeEvent]:
        return list(self.analysis.address_changes)

    @property
    def employee_changes(self) -> list[EmployeeChangeSummary]:
        return list(self.analysis.employee_changes)

    def target_year(self, years_ago: int) -> Optional[int]:
        """Calendar year that lies `years_ago` before the reference year."""
        return target_year(self.reference_year, years_ago)

    def get_company(self, orgnr: str) -> Optional[Company]:
        return self.registry.get(orgnr)

    def changes_for_company(self, orgnr: str) -> list[AddressChangeEvent]:
        return [e for e in self.analysis.address_changes if e.orgnr == orgnr]

    def moved_years_ago(self, years_ago: int) -> list[RelocationCandidate]:
        """Companies whose move happened exactly `years_ago` before the reference year."""
        year = self.target_year(years_ago)
        if year is None:
            return []

        candidates = []
        for event in self.analysis.address_changes:
            if event.year != year:
                continue
            company = self.registry.get(event.orgnr)
            candidates.append(build_candidate(event, company, self.reference_year))
        return candidates

    def candidates_for_windows(self, windows: Iterable[int]) -> list[RelocationCandidate]:
        """Movers from several 'years ago' windows, in window order."""
        candidates = []
        for years_ago in windows:
            candidates.extend(self.moved_years_ago(years_ago))
        return candidates

    def address_changes_filtered(
        self,
        years_ago: Optional[int] = None,
        direction: ChangeDirection = ChangeDirection.ALL,
        count: Optional[int] = None,
        latest_only: bool = False,
    ) -> list:
        """
        Address-change events, optionally restricted to one move year.

        Events are sorted by absolute employee change at the move, largest
        first. With `years_ago` the since-move view is returned instead of
        bare events.

        Args:
            years_ago: Only moves made this many years before the reference year
            direction: Keep only growth or only decline at the move
            count: Maximum number of items (None for all)
            latest_only: Keep only each company's most recent move
        """
        if years_ago is None:
            items = list(self.analysis.address_changes)
        else:
            items = self.moved_years_ago(years_ago)

        items = [
            item for item in items
            if direction.accepts(self._event_of(item).employee_change)
        ]
        if latest_only:
            items = self.latest_change_per_company(items)
        items.sort(key=lambda item: abs(self._event_of(item).employee_change), reverse=True)
        return _limit(items, count)

    def top_movers(
        self,
        years_ago: int,
        count: Optional[int] = 10,
        direction: ChangeDirection = ChangeDirection.ALL,
    ) -> list[RelocationCandidate]:
        """Movers from one year, largest headcount change at the move first."""
        movers = [
            m for m in self.moved_years_ago(years_ago)
            if direction.accepts(m.event.employee_change)
        ]
        movers.sort(key=lambda m: abs(m.event.employee_change), reverse=True)
        return _limit(movers, count)

    def top_employee_changes(
        self,
        count: Optional[int] = 10,
        direction: ChangeDirection = ChangeDirection.ALL,
    ) -> list[EmployeeChangeSummary]:
        """Employee summaries sorted by absolute total change."""
        changes = [
            s for s in self.analysis.employee_changes
            if direction.accepts(s.total_change)
        ]
        changes.sort(key=lambda s: abs(s.total_change), reverse=True)
        return _limit(changes, count)

    def extreme_changes(self) -> list[AddressChangeEvent]:
        return [e for e in self.analysis.address_changes if is_extreme_change(e)]

    def changes_by_year(self) -> dict[int, list[AddressChangeEvent]]:
        """Address-change events grouped by move year, ascending."""
        by_year: dict[int, list[AddressChangeEvent]] = {}
        for event in sorted(self.analysis.address_changes, key=lambda e: e.year):
            by_year.setdefault(event.year, []).append(event)
        return by_year

    @staticmethod
    def latest_change_per_company(items: Sequence) -> list:
        """
        Keep only each company's most recent move.

        Works on events and candidates alike; first-seen order is kept.
        """
        latest: dict[str, object] = {}
        for item in items:
            existing = latest.get(item.orgnr)
            if existing is None or item.year > existing.year:
                latest[item.orgnr] = item
        return list(latest.values())

    @staticmethod
    def _event_of(item) -> AddressChangeEvent:
        return item.event if isinstance(item, RelocationCandidate) else item
