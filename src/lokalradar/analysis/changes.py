"""
Address and employee change detection.

Walks each company's timeline and derives:
- Address-change events between adjacent observations
- Start/end employee change summaries over the whole observed span
- The "since move" view of an event, relative to the latest observation
"""

import logging
import math
import re
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Optional

from lokalradar.timeline.models import Company, CompanyRegistry, TimelineEntry

logger = logging.getLogger(__name__)


NOT_AVAILABLE = "N/A"

WHITESPACE = re.compile(r"\s+")

ONE_DECIMAL = Decimal("0.1")


def normalize_location_part(value: Optional[str]) -> str:
    """Lower-case, collapse whitespace and trim."""
    return WHITESPACE.sub(" ", (value or "").lower()).strip()


def location_key(entry: TimelineEntry) -> str:
    """
    Comparison key for an observation's location.

    Address, postal code and postal place all take part, so a changed postal
    code with an unchanged street string is still a move.
    """
    parts = (entry.address, entry.postal_code, entry.postal_place)
    return "|".join(normalize_location_part(p) for p in parts)


def has_location(entry: TimelineEntry) -> bool:
    return any(
        normalize_location_part(p)
        for p in (entry.address, entry.postal_code, entry.postal_place)
    )


def is_address_change(previous: TimelineEntry, current: TimelineEntry) -> bool:
    """Two empty locations are not a change."""
    if not (has_location(previous) or has_location(current)):
        return False
    return location_key(previous) != location_key(current)


def format_change_percent(before: int, after: int) -> str:
    """
    Percentage change rounded to one decimal, ties away from zero.

    Rounds the exact binary value of the float, so 6.25 becomes "6.3" while
    1.15 (stored just below) stays "1.1". Returns "N/A" when there is no
    baseline (before == 0).
    """
    if before == 0:
        return NOT_AVAILABLE
    percent = Decimal((after - before) / before * 100)
    return str(percent.quantize(ONE_DECIMAL, rounding=ROUND_HALF_UP))


def parse_change_percent(value: str) -> float:
    """Numeric value of a formatted percentage; NaN for "N/A"."""
    try:
        return float(value)
    except (TypeError, ValueError):
        return math.nan


@dataclass(frozen=True)
class AddressChangeEvent:
    """A detected move between two adjacent observations of a company."""

    orgnr: str
    name: str
    year: int
    old_address: str
    new_address: str
    old_postal_code: str
    new_postal_code: str
    old_postal_place: str
    new_postal_place: str
    employees_before: int
    employees_after: int
    employee_change: int
    employee_change_percent: str  # One decimal, or "N/A"

    @property
    def change_percent_value(self) -> float:
        return parse_change_percent(self.employee_change_percent)

    def years_since(self, reference_year: int) -> int:
        return reference_year - self.year

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "orgnr": self.orgnr,
            "name": self.name,
            "year": self.year,
            "old_address": self.old_address,
            "new_address": self.new_address,
            "old_postal_code": self.old_postal_code,
            "new_postal_code": self.new_postal_code,
            "old_postal_place": self.old_postal_place,
            "new_postal_place": self.new_postal_place,
            "employees_before": self.employees_before,
            "employees_after": self.employees_after,
            "employee_change": self.employee_change,
            "employee_change_percent": self.employee_change_percent,
        }


@dataclass(frozen=True)
class RelocationCandidate:
    """
    An address change seen from the company's latest observation.

    Answers "what happened to headcount after the move", which is what
    drives the need for new premises.
    """

    event: AddressChangeEvent
    years_since_move: int
    current_year: int
    employees_at_move: int
    employees_now: int
    employee_change_since_move: int
    change_percent_since_move: str

    @property
    def orgnr(self) -> str:
        return self.event.orgnr

    @property
    def name(self) -> str:
        return self.event.name

    @property
    def year(self) -> int:
        return self.event.year

    @property
    def change_percent_since_move_value(self) -> float:
        return parse_change_percent(self.change_percent_since_move)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            **self.event.to_dict(),
            "years_since_move": self.years_since_move,
            "current_year": self.current_year,
            "employees_at_move": self.employees_at_move,
            "employees_now": self.employees_now,
            "employee_change_since_move": self.employee_change_since_move,
            "change_percent_since_move": self.change_percent_since_move,
        }


@dataclass
class EmployeeChangeSummary:
    """Employee change between a company's first and last observation."""

    orgnr: str
    name: str
    first_year: int
    last_year: int
    employees_start: int
    employees_end: int
    total_change: int
    total_change_percent: str
    timeline: list[TimelineEntry] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "orgnr": self.orgnr,
            "name": self.name,
            "first_year": self.first_year,
            "last_year": self.last_year,
            "employees_start": self.employees_start,
            "employees_end": self.employees_end,
            "total_change": self.total_change,
            "total_change_percent": self.total_change_percent,
            "timeline": [e.to_dict() for e in self.timeline],
        }


@dataclass
class ChangeAnalysis:
    """All events and summaries derived from one registry."""

    address_changes: list[AddressChangeEvent] = field(default_factory=list)
    employee_changes: list[EmployeeChangeSummary] = field(default_factory=list)


def build_candidate(
    event: AddressChangeEvent,
    company: Company,
    reference_year: int,
) -> RelocationCandidate:
    """Combine an event with the company's latest observation."""
    latest = company.latest
    employees_now = latest.employees if latest else event.employees_after
    current_year = latest.year if latest else event.year
    at_move = event.employees_after

    return RelocationCandidate(
        event=event,
        years_since_move=event.years_since(reference_year),
        current_year=current_year,
        employees_at_move=at_move,
        employees_now=employees_now,
        employee_change_since_move=employees_now - at_move,
        change_percent_since_move=format_change_percent(at_move, employees_now),
    )


class ChangeAnalyzer:
    """
    Derive change events from company timelines.

    Timelines must be sorted by year (TimelineBuilder guarantees this).
    """

    def detect_address_changes(self, company: Company) -> list[AddressChangeEvent]:
        """Compare each adjacent pair of observations."""
        events = []
        timeline = company.timeline

        for previous, current in zip(timeline, timeline[1:]):
            if not is_address_change(previous, current):
                continue

            events.append(
                AddressChangeEvent(
                    orgnr=company.orgnr,
                    name=company.name,
                    year=current.year,
                    old_address=previous.address,
                    new_address=current.address,
                    old_postal_code=previous.postal_code,
                    new_postal_code=current.postal_code,
                    old_postal_place=previous.postal_place,
                    new_postal_place=current.postal_place,
                    employees_before=previous.employees,
                    employees_after=current.employees,
                    employee_change=current.employees - previous.employees,
                    employee_change_percent=format_change_percent(
                        previous.employees, current.employees
                    ),
                )
            )

        return events

    def summarize_employees(self, company: Company) -> Optional[EmployeeChangeSummary]:
        """First vs. last observation; None if they are the same year."""
        first, last = company.first, company.latest
        if first is None or last is None or first.year == last.year:
            return None

        return EmployeeChangeSummary(
            orgnr=company.orgnr,
            name=company.name,
            first_year=first.year,
            last_year=last.year,
            employees_start=first.employees,
            employees_end=last.employees,
            total_change=last.employees - first.employees,
            total_change_percent=format_change_percent(first.employees, last.employees),
            timeline=list(company.timeline),
        )

    def analyze(self, registry: CompanyRegistry) -> ChangeAnalysis:
        """
        Analyze every company with at least two observations.

        Returns:
            Address-change events and employee summaries in registry order
        """
        analysis = ChangeAnalysis()

        for company in registry:
            if len(company.timeline) < 2:
                continue

            analysis.address_changes.extend(self.detect_address_changes(company))

            summary = self.summarize_employees(company)
            if summary is not None:
                analysis.employee_changes.append(summary)

        logger.info(
            f"Detected {len(analysis.address_changes)} address changes, "
            f"{len(analysis.employee_changes)} employee summaries"
        )
        return analysis
