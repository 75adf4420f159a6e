"""
Tests for dataset statistics and query helpers.
"""

import pytest

from lokalradar.analysis.changes import (
    AddressChangeEvent,
    RelocationCandidate,
    format_change_percent,
)
from lokalradar.analysis.dataset import ChangeDirection, Dataset
from lokalradar.analysis.statistics import compute_statistics, is_extreme_change
from lokalradar.registry.parser import parse_extract
from lokalradar.timeline.builder import build_timelines


def _event(before, after, year=2020):
    return AddressChangeEvent(
        orgnr="111",
        name="A AS",
        year=year,
        old_address="Gate 1",
        new_address="Gate 2",
        old_postal_code="0001",
        new_postal_code="0001",
        old_postal_place="OSLO",
        new_postal_place="OSLO",
        employees_before=before,
        employees_after=after,
        employee_change=after - before,
        employee_change_percent=format_change_percent(before, after),
    )


class TestExtremeChange:
    """Tests for the extreme-change data quality flag."""

    @pytest.mark.parametrize(
        "before,after,expected",
        [
            (10, 31, True),  # +210%
            (10, 30, False),  # +200% exactly
            (10, 4, True),  # -60%
            (10, 5, False),  # -50% exactly
            (500, 620, True),  # +120 absolute
            (500, 600, False),  # +100 absolute, 20%
            (0, 150, False),  # No baseline
            (0, 5, False),
        ],
    )
    def test_thresholds(self, before, after, expected):
        assert is_extreme_change(_event(before, after)) is expected


class TestStatistics:
    """Tests for dataset-wide statistics."""

    def test_sample_statistics(self, sample_dataset):
        stats = sample_dataset.statistics

        assert stats.total_companies == 10
        assert stats.total_address_changes == 9
        assert stats.companies_with_growth == 7
        assert stats.companies_with_decline == 2
        assert stats.total_employee_increase == 251
        assert stats.total_employee_decrease == 70
        assert stats.movers_8_years_ago == 4
        assert stats.movers_3_years_ago == 4
        assert stats.extreme_changes == 1

    def test_year_fields(self, sample_dataset):
        stats = sample_dataset.statistics

        assert stats.reference_year == 2023
        assert stats.earliest_year == 2014
        assert stats.year_range == "2014-2023"
        assert stats.target_year_8_years_ago == 2015
        assert stats.target_year_3_years_ago == 2020

    def test_statistics_are_reproducible(self, sample_files):
        def build():
            registry = build_timelines([parse_extract(c, n) for n, c in sample_files])
            return Dataset.from_registry(registry).statistics.to_dict()

        assert build() == build()

    def test_empty_registry(self):
        registry = build_timelines([])
        stats = compute_statistics(registry, Dataset.from_registry(registry).analysis)

        assert stats.total_companies == 0
        assert stats.year_range == "N/A"
        assert stats.reference_year is None
        assert stats.target_year_8_years_ago is None


class TestDatasetQueries:
    """Tests for the query helpers used by the API."""

    def test_target_year(self, sample_dataset):
        assert sample_dataset.target_year(8) == 2015
        assert sample_dataset.target_year(0) == 2023

    def test_moved_years_ago(self, sample_dataset):
        movers = sample_dataset.moved_years_ago(8)

        assert {m.orgnr for m in movers} == {"910000001", "910000002", "910000003", "910000004"}
        assert all(isinstance(m, RelocationCandidate) for m in movers)
        assert all(m.years_since_move == 8 for m in movers)

    def test_moved_years_ago_outside_data(self, sample_dataset):
        assert sample_dataset.moved_years_ago(30) == []

    def test_candidates_for_windows(self, sample_dataset):
        candidates = sample_dataset.candidates_for_windows([8, 3])

        assert len(candidates) == 8
        assert [c.year for c in candidates[:4]] == [2015] * 4
        assert [c.year for c in candidates[4:]] == [2020] * 4

    def test_filtered_sorted_by_absolute_change(self, sample_dataset):
        events = sample_dataset.address_changes_filtered()

        changes = [abs(e.employee_change) for e in events]
        assert changes == sorted(changes, reverse=True)
        assert events[0].orgnr == "910000003"

    def test_filtered_by_direction(self, sample_dataset):
        increases = sample_dataset.address_changes_filtered(direction=ChangeDirection.INCREASE)
        decreases = sample_dataset.address_changes_filtered(direction=ChangeDirection.DECREASE)

        assert all(e.employee_change > 0 for e in increases)
        assert decreases == []

    def test_filtered_years_ago_returns_candidates(self, sample_dataset):
        items = sample_dataset.address_changes_filtered(years_ago=3, count=2)

        assert len(items) == 2
        assert all(isinstance(i, RelocationCandidate) for i in items)
        assert all(i.year == 2020 for i in items)

    def test_latest_only_keeps_one_move_per_company(self, make_extract):
        files = [
            ("e_2018.csv", make_extract([("111", "A AS", "Gate 1", "0001", "OSLO", "5")])),
            ("e_2020.csv", make_extract([("111", "A AS", "Gate 2", "0001", "OSLO", "6")])),
            ("e_2022.csv", make_extract([("111", "A AS", "Gate 3", "0001", "OSLO", "7")])),
        ]
        dataset = Dataset.from_registry(
            build_timelines([parse_extract(c, n) for n, c in files])
        )

        assert len(dataset.address_changes_filtered()) == 2
        latest = dataset.address_changes_filtered(latest_only=True)
        assert [e.year for e in latest] == [2022]

    def test_top_movers(self, sample_dataset):
        movers = sample_dataset.top_movers(8, count=2)

        # ranked by the change at the move: +150 and +5, not since it
        assert [m.orgnr for m in movers] == ["910000003", "910000002"]

    def test_top_movers_direction(self, sample_dataset):
        movers = sample_dataset.top_movers(3, direction=ChangeDirection.INCREASE)

        assert {m.orgnr for m in movers} == {"910000005", "910000006", "910000007"}
        assert movers[-1].orgnr == "910000005"

    def test_top_employee_changes(self, sample_dataset):
        top = sample_dataset.top_employee_changes(count=3)

        assert [s.orgnr for s in top] == ["910000004", "910000008", "910000001"]

    def test_top_employee_changes_decline(self, sample_dataset):
        top = sample_dataset.top_employee_changes(direction=ChangeDirection.DECREASE)

        assert [s.orgnr for s in top] == ["910000007", "910000003"]

    def test_extreme_changes(self, sample_dataset):
        assert [e.orgnr for e in sample_dataset.extreme_changes()] == ["910000003"]

    def test_changes_by_year(self, sample_dataset):
        by_year = sample_dataset.changes_by_year()

        assert list(by_year) == [2015, 2020, 2023]
        assert len(by_year[2015]) == 4
        assert len(by_year[2023]) == 1

    def test_get_company(self, sample_dataset):
        assert sample_dataset.get_company("910000001").name == "Alfa AS"
        assert sample_dataset.get_company("999999999") is None

    def test_queries_return_copies(self, sample_dataset):
        sample_dataset.address_changes.clear()

        assert len(sample_dataset.address_changes) == 9
