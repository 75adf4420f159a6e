"""
Pytest configuration and shared fixtures for lokalradar tests.

The sample dataset spans 2014-2023 (reference year 2023):
- Four companies move in 2015 (8 years ago) and four in 2020 (3 years ago)
- One company moves in 2023, one appears only in 2023
- The 2023 extract contains a row without orgnr
"""

from typing import Callable

import numpy as np
import pytest

from lokalradar.analysis.dataset import Dataset
from lokalradar.registry.parser import parse_extract
from lokalradar.timeline.builder import TimelineBuilder
from lokalradar.timeline.models import CompanyRegistry

HEADER = "Orgnr;Navn;Forretningsadresse;Fadr postnr;Fadr poststed;Antall ansatte"
SEPARATOR = "-----;----;------------------;-----------;-------------;--------------"

# orgnr -> (name, {year: (address, postal code, postal place, employees)})
SAMPLE_COMPANIES = {
    "910000001": ("Alfa AS", {
        2014: ("Storgata 1", "0150", "OSLO", "10"),
        2015: ("Kongens gate 5", "0153", "OSLO", "12"),
        2019: ("Kongens gate 5", "0153", "OSLO", "20"),
        2020: ("Kongens gate 5", "0153", "OSLO", "30"),
        2023: ("Kongens gate 5", "0153", "OSLO", "60"),
    }),
    "910000002": ("Beta AS", {
        2014: ("Bryggen 1", "5003", "BERGEN", "40"),
        2015: ("Bryggen 9", "5004", "BERGEN", "45"),
        2019: ("Bryggen 9", "5004", "BERGEN", "45"),
        2020: ("Bryggen 9", "5004", "BERGEN", "45"),
        2023: ("Bryggen 9", "5004", "BERGEN", "45"),
    }),
    "910000003": ("Gamma AS", {
        2014: ("Nygata 3", "7010", "TRONDHEIM", "50"),
        2015: ("Nygata 30", "7011", "TRONDHEIM", "200"),
        2019: ("Nygata 30", "7011", "TRONDHEIM", "80"),
        2020: ("Nygata 30", "7011", "TRONDHEIM", "60"),
        2023: ("Nygata 30", "7011", "TRONDHEIM", "30"),
    }),
    "910000004": ("Delta AS", {
        2014: ("Havnegata 2", "9008", "TROMSØ", "5"),
        2015: ("Havnegata 20", "9008", "TROMSØ", "8"),
        2019: ("Havnegata 20", "9008", "TROMSØ", "40"),
        2020: ("Havnegata 20", "9008", "TROMSØ", "70"),
        2023: ("Havnegata 20", "9008", "TROMSØ", "1 20"),
    }),
    "910000005": ("Epsilon AS", {
        2019: ("Elvegata 1", "3015", "DRAMMEN", "20"),
        2020: ("Elvegata 10", "3015", "DRAMMEN", "22"),
        2023: ("Elvegata 10", "3015", "DRAMMEN", "25"),
    }),
    "910000006": ("Zeta AS", {
        2019: ("Torget 2", "4006", "STAVANGER", "0"),
        2020: ("Torget 20", "4006", "STAVANGER", "10"),
        2023: ("Torget 20", "4006", "STAVANGER", "15"),
    }),
    "910000007": ("Eta AS", {
        2019: ("Sjøgata 3", "8006", "BODØ", "200"),
        2020: ("Sjøgata 30", "8006", "BODØ", "210"),
        2023: ("Sjøgata 30", "8006", "BODØ", "150"),
    }),
    "910000008": ("Theta AS", {
        2019: ("Fjordveien 4", "1366", "LYSAKER", "30"),
        2020: ("Fjordveien 40", "1366", "LYSAKER", "30"),
        2023: ("Fjordveien 40", "1366", "LYSAKER", "90"),
    }),
    "910000009": ("Iota AS", {
        2023: ("Solveien 1", "0001", "OSLO", "7"),
    }),
    "910000010": ("Kappa AS", {
        2020: ("Parkveien 1", "0350", "OSLO", "3"),
        2023: ("Parkveien 9", "0350", "OSLO", "4"),
    }),
}

SAMPLE_YEARS = (2014, 2015, 2019, 2020, 2023)


def render_extract(rows: list[tuple[str, ...]], header: str = HEADER) -> str:
    """Render data rows as extract text (header and separator included)."""
    lines = [header, SEPARATOR]
    lines.extend(";".join(row) for row in rows)
    return "\n".join(lines) + "\n"


def sample_rows(year: int) -> list[tuple[str, ...]]:
    rows = []
    for orgnr, (name, timeline) in SAMPLE_COMPANIES.items():
        if year in timeline:
            rows.append((orgnr, name, *timeline[year]))
    if year == 2023:
        rows.append(("", "Uten Orgnr AS", "Ukjent 1", "0000", "OSLO", "3"))
    return rows


@pytest.fixture
def make_extract() -> Callable[..., bytes]:
    """Factory building UTF-8 extract bytes from row tuples."""

    def _make(rows: list[tuple[str, ...]], header: str = HEADER) -> bytes:
        return render_extract(rows, header).encode("utf-8")

    return _make


@pytest.fixture
def scenario_a_files(make_extract) -> list[tuple[str, bytes]]:
    """One company moving from Storgata 1 (10 employees) to Storgata 2 (25)."""
    return [
        ("enheter_2015.csv", make_extract([("900000000", "Test AS", "Storgata 1", "0150", "OSLO", "10")])),
        ("enheter_2023.csv", make_extract([("900000000", "Test AS", "Storgata 2", "0150", "OSLO", "25")])),
    ]


@pytest.fixture
def sample_files(make_extract) -> list[tuple[str, bytes]]:
    """Yearly extracts of the sample dataset, newest first."""
    return [
        (f"enheter_{year}.csv", make_extract(sample_rows(year)))
        for year in sorted(SAMPLE_YEARS, reverse=True)
    ]


@pytest.fixture
def sample_registry(sample_files) -> CompanyRegistry:
    extracts = [parse_extract(content, name) for name, content in sample_files]
    return TimelineBuilder().build(extracts)


@pytest.fixture
def sample_dataset(sample_registry) -> Dataset:
    return Dataset.from_registry(sample_registry)


@pytest.fixture
def rng() -> np.random.Generator:
    """Seeded random source for reproducible clustering."""
    return np.random.default_rng(42)
