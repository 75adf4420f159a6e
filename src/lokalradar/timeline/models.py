"""
Company timeline models.

A company is keyed by its orgnr and holds at most one observation per
extract year, kept in ascending year order once building is finished.
"""

from dataclasses import dataclass, field
from typing import Any, Iterator, Optional


@dataclass
class TimelineEntry:
    """One year's observation of one company."""

    year: int
    address: str = ""
    postal_code: str = ""
    postal_place: str = ""
    employees: int = 0
    founded: str = ""  # Stiftelsesdato
    org_form: str = ""  # Organisasjonsform

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "year": self.year,
            "address": self.address,
            "postal_code": self.postal_code,
            "postal_place": self.postal_place,
            "employees": self.employees,
            "founded": self.founded,
            "org_form": self.org_form,
        }


@dataclass
class Company:
    """A registry entity and its yearly observations."""

    orgnr: str
    name: str = ""
    timeline: list[TimelineEntry] = field(default_factory=list)

    def upsert(self, entry: TimelineEntry) -> None:
        """Add an observation, replacing any existing one for the same year."""
        for index, existing in enumerate(self.timeline):
            if existing.year == entry.year:
                self.timeline[index] = entry
                return
        self.timeline.append(entry)

    def sort_timeline(self) -> None:
        self.timeline.sort(key=lambda e: e.year)

    @property
    def first(self) -> Optional[TimelineEntry]:
        return self.timeline[0] if self.timeline else None

    @property
    def latest(self) -> Optional[TimelineEntry]:
        return self.timeline[-1] if self.timeline else None

    @property
    def years(self) -> list[int]:
        return [e.year for e in self.timeline]

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "orgnr": self.orgnr,
            "name": self.name,
            "timeline": [e.to_dict() for e in self.timeline],
        }


@dataclass
class CompanyRegistry:
    """
    All companies reconstructed from one ingest run.

    Built from scratch on every ingest; nothing is carried over between runs.
    """

    companies: dict[str, Company] = field(default_factory=dict)
    years: list[int] = field(default_factory=list)  # Extract years, ascending
    reference_year: Optional[int] = None

    def __len__(self) -> int:
        return len(self.companies)

    def __iter__(self) -> Iterator[Company]:
        return iter(self.companies.values())

    def __contains__(self, orgnr: str) -> bool:
        return orgnr in self.companies

    def get(self, orgnr: str) -> Optional[Company]:
        return self.companies.get(orgnr)

    def get_or_create(self, orgnr: str) -> Company:
        company = self.companies.get(orgnr)
        if company is None:
            company = Company(orgnr=orgnr)
            self.companies[orgnr] = company
        return company

    @property
    def earliest_year(self) -> Optional[int]:
        return self.years[0] if self.years else None

    @property
    def latest_year(self) -> Optional[int]:
        return self.years[-1] if self.years else None
