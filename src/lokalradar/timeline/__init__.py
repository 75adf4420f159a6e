"""
Per-company timeline reconstruction.
"""

from lokalradar.timeline.models import Company, CompanyRegistry, TimelineEntry
from lokalradar.timeline.builder import (
    TimelineBuilder,
    build_timelines,
    parse_employee_count,
    resolve_reference_year,
)

__all__ = [
    "Company",
    "CompanyRegistry",
    "TimelineEntry",
    "TimelineBuilder",
    "build_timelines",
    "parse_employee_count",
    "resolve_reference_year",
]
