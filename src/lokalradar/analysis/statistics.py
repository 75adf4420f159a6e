"""
Dataset-wide statistics.

Aggregates the change analysis into the headline numbers shown to users,
including a count of "extreme" changes that are more likely to be data
errors than real growth. Extreme changes are flagged, never filtered.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Optional

from lokalradar.analysis.changes import AddressChangeEvent, ChangeAnalysis
from lokalradar.timeline.models import CompanyRegistry

logger = logging.getLogger(__name__)


# Extreme change thresholds
EXTREME_GROWTH_PERCENT = 200.0
EXTREME_DECLINE_PERCENT = -50.0
EXTREME_ABSOLUTE_CHANGE = 100

LONG_WINDOW_YEARS = 8
SHORT_WINDOW_YEARS = 3


def is_extreme_change(event: AddressChangeEvent) -> bool:
    """
    Flag implausibly large headcount changes.

    Extreme if the percentage is above +200% or below -50%, or if the
    absolute change exceeds 100 from a non-zero baseline.
    """
    percent = event.change_percent_value
    if math.isfinite(percent) and (
        percent > EXTREME_GROWTH_PERCENT or percent < EXTREME_DECLINE_PERCENT
    ):
        return True
    return abs(event.employee_change) > EXTREME_ABSOLUTE_CHANGE and event.employees_before > 0


def target_year(reference_year: Optional[int], years_ago: int) -> Optional[int]:
    if reference_year is None:
        return None
    return reference_year - years_ago


@dataclass
class DatasetStatistics:
    """Headline numbers for one ingested dataset."""

    total_companies: int = 0
    total_address_changes: int = 0
    companies_with_growth: int = 0
    companies_with_decline: int = 0
    total_employee_increase: int = 0
    total_employee_decrease: int = 0  # Reported as a positive number
    movers_8_years_ago: int = 0
    movers_3_years_ago: int = 0
    extreme_changes: int = 0
    years: list[int] = field(default_factory=list)
    reference_year: Optional[int] = None

    @property
    def earliest_year(self) -> Optional[int]:
        return min(self.years) if self.years else None

    @property
    def year_range(self) -> str:
        if not self.years:
            return "N/A"
        return f"{min(self.years)}-{max(self.years)}"

    @property
    def target_year_8_years_ago(self) -> Optional[int]:
        return target_year(self.reference_year, LONG_WINDOW_YEARS)

    @property
    def target_year_3_years_ago(self) -> Optional[int]:
        return target_year(self.reference_year, SHORT_WINDOW_YEARS)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "total_companies": self.total_companies,
            "total_address_changes": self.total_address_changes,
            "companies_with_growth": self.companies_with_growth,
            "companies_with_decline": self.companies_with_decline,
            "total_employee_increase": self.total_employee_increase,
            "total_employee_decrease": self.total_employee_decrease,
            "movers_8_years_ago": self.movers_8_years_ago,
            "movers_3_years_ago": self.movers_3_years_ago,
            "extreme_changes": self.extreme_changes,
            "year_range": self.year_range,
            "earliest_year": self.earliest_year,
            "reference_year": self.reference_year,
            "target_year_8_years_ago": self.target_year_8_years_ago,
            "target_year_3_years_ago": self.target_year_3_years_ago,
        }


def compute_statistics(
    registry: CompanyRegistry,
    analysis: ChangeAnalysis,
) -> DatasetStatistics:
    """
    Aggregate a change analysis.

    Growth/decline is decided by the sign of each company's total change
    between its first and last observation.
    """
    increases = [s.total_change for s in analysis.employee_changes if s.total_change > 0]
    decreases = [s.total_change for s in analysis.employee_changes if s.total_change < 0]

    reference_year = registry.reference_year
    long_target = target_year(reference_year, LONG_WINDOW_YEARS)
    short_target = target_year(reference_year, SHORT_WINDOW_YEARS)

    stats = DatasetStatistics(
        total_companies=len(registry),
        total_address_changes=len(analysis.address_changes),
        companies_with_growth=len(increases),
        companies_with_decline=len(decreases),
        total_employee_increase=sum(increases),
        total_employee_decrease=abs(sum(decreases)),
        movers_8_years_ago=sum(1 for e in analysis.address_changes if e.year == long_target),
        movers_3_years_ago=sum(1 for e in analysis.address_changes if e.year == short_target),
        extreme_changes=sum(1 for e in analysis.address_changes if is_extreme_change(e)),
        years=list(registry.years),
        reference_year=reference_year,
    )

    logger.debug(f"Statistics: {stats.to_dict()}")
    return stats
