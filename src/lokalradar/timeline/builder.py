"""
Timeline reconstruction from parsed extracts.

Folds every extract's rows into per-company timelines:
- Extracts without a year are excluded
- Extracts are processed in ascending year order
- The latest non-empty name wins
- One entry per (company, year); a later row for the same year replaces it
"""

import logging
import re
from datetime import date
from typing import Iterable, Optional

from lokalradar.registry.parser import (
    COL_ADDRESS,
    COL_EMPLOYEES,
    COL_FOUNDED,
    COL_NAME,
    COL_ORG_FORM,
    COL_ORGNR,
    COL_POSTAL_CODE,
    COL_POSTAL_PLACE,
    ParsedExtract,
    RawRow,
)
from lokalradar.timeline.models import CompanyRegistry, TimelineEntry

logger = logging.getLogger(__name__)


WHITESPACE = re.compile(r"\s+")
DIGITS = re.compile(r"\d+")


def parse_employee_count(raw: Optional[str]) -> int:
    """
    Parse an employee count, tolerating thousands separators.

    "1 250" -> 1250, "" -> 0, "ukjent" -> 0, "-3" -> 0
    """
    if not raw:
        return 0
    cleaned = WHITESPACE.sub("", raw)
    if not DIGITS.fullmatch(cleaned):
        return 0
    return int(cleaned)


def entry_from_row(row: RawRow, year: int) -> TimelineEntry:
    """Build a timeline entry from one parsed row."""
    return TimelineEntry(
        year=year,
        address=row.get(COL_ADDRESS),
        postal_code=row.get(COL_POSTAL_CODE),
        postal_place=row.get(COL_POSTAL_PLACE),
        employees=parse_employee_count(row.get(COL_EMPLOYEES)),
        founded=row.get(COL_FOUNDED),
        org_form=row.get(COL_ORG_FORM),
    )


def resolve_reference_year(
    years: list[int],
    policy: str = "dataset",
    today: Optional[date] = None,
) -> Optional[int]:
    """
    Year that "N years ago" is measured from.

    The default 'dataset' policy uses the newest extract, so results do not
    depend on when the analysis runs. 'wall_clock' uses the current year.
    """
    if policy == "wall_clock":
        return (today or date.today()).year
    if policy != "dataset":
        raise ValueError(f"Unknown reference year policy: {policy}")
    return max(years) if years else None


class TimelineBuilder:
    """
    Build a CompanyRegistry from parsed extracts.

    Each call to build() starts from an empty registry.
    """

    def __init__(self, reference_year_policy: str = "dataset"):
        self.reference_year_policy = reference_year_policy

    def build(self, extracts: Iterable[ParsedExtract]) -> CompanyRegistry:
        """
        Fold all extracts into company timelines.

        Args:
            extracts: Parsed extracts in any order

        Returns:
            Registry with timelines sorted ascending by year
        """
        usable = [e for e in extracts if e.year is not None]
        usable.sort(key=lambda e: e.year)

        registry = CompanyRegistry()
        skipped_rows = 0

        for extract in usable:
            for row in extract.rows:
                orgnr = row.get(COL_ORGNR)
                if not orgnr:
                    skipped_rows += 1
                    continue

                company = registry.get_or_create(orgnr)
                name = row.get(COL_NAME)
                if name:
                    company.name = name
                company.upsert(entry_from_row(row, extract.year))

        for company in registry:
            company.sort_timeline()

        registry.years = sorted({e.year for e in usable if e.rows})
        registry.reference_year = resolve_reference_year(
            registry.years, self.reference_year_policy
        )

        logger.info(
            f"Built timelines for {len(registry)} companies from "
            f"{len(usable)} extracts ({skipped_rows} rows without orgnr skipped)"
        )
        return registry


def build_timelines(
    extracts: Iterable[ParsedExtract],
    reference_year_policy: str = "dataset",
) -> CompanyRegistry:
    """Convenience wrapper around TimelineBuilder.build()."""
    return TimelineBuilder(reference_year_policy).build(extracts)
