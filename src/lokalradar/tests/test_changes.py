"""
Tests for address and employee change detection.

Tests:
- Location comparison rules
- Percentage formatting and the "N/A" sentinel
- Event and summary emission over sample timelines
- The since-move view of an event
"""

import math

import pytest

from lokalradar.analysis.changes import (
    NOT_AVAILABLE,
    ChangeAnalyzer,
    build_candidate,
    format_change_percent,
    is_address_change,
    location_key,
    parse_change_percent,
)
from lokalradar.analysis.statistics import is_extreme_change
from lokalradar.registry.parser import parse_extract
from lokalradar.timeline.builder import build_timelines
from lokalradar.timeline.models import Company, TimelineEntry


def _entry(year, address="", postal_code="", postal_place="", employees=0):
    return TimelineEntry(
        year=year,
        address=address,
        postal_code=postal_code,
        postal_place=postal_place,
        employees=employees,
    )


class TestLocationComparison:
    """Tests for deciding whether two observations are a move."""

    def test_normalization_ignores_case_and_whitespace(self):
        a = _entry(2015, "Storgata  1", "0150", "Oslo")
        b = _entry(2016, " storgata 1 ", "0150", "OSLO")

        assert location_key(a) == location_key(b)
        assert not is_address_change(a, b)

    def test_street_change(self):
        assert is_address_change(
            _entry(2015, "Storgata 1", "0150", "OSLO"),
            _entry(2016, "Storgata 2", "0150", "OSLO"),
        )

    def test_postal_code_change_alone_is_a_move(self):
        assert is_address_change(
            _entry(2015, "Storgata 1", "0150", "OSLO"),
            _entry(2016, "Storgata 1", "0151", "OSLO"),
        )

    def test_postal_place_change_alone_is_a_move(self):
        assert is_address_change(
            _entry(2015, "Storgata 1", "0150", "OSLO"),
            _entry(2016, "Storgata 1", "0150", "BÆRUM"),
        )

    def test_two_empty_locations_are_not_a_move(self):
        assert not is_address_change(_entry(2015), _entry(2016, "  ", "", ""))

    def test_empty_to_known_location_is_a_move(self):
        assert is_address_change(_entry(2015), _entry(2016, "Storgata 1", "0150", "OSLO"))


class TestChangePercent:
    """Tests for percentage formatting."""

    @pytest.mark.parametrize(
        "before,after,expected",
        [
            (10, 25, "150.0"),
            (40, 45, "12.5"),
            (22, 25, "13.6"),
            (210, 150, "-28.6"),
            (30, 30, "0.0"),
            (3, 4, "33.3"),
            (16, 17, "6.3"),
            (16, 3, "-81.3"),
            (16, 15, "-6.3"),
        ],
    )
    def test_one_decimal(self, before, after, expected):
        assert format_change_percent(before, after) == expected

    def test_zero_baseline_is_not_available(self):
        assert format_change_percent(0, 5) == NOT_AVAILABLE
        assert format_change_percent(0, 0) == NOT_AVAILABLE

    def test_parse(self):
        assert parse_change_percent("150.0") == 150.0
        assert math.isnan(parse_change_percent(NOT_AVAILABLE))


class TestChangeAnalyzer:
    """Tests for event and summary emission."""

    def test_scenario_a(self, scenario_a_files):
        registry = build_timelines([parse_extract(c, n) for n, c in scenario_a_files])

        analysis = ChangeAnalyzer().analyze(registry)

        assert len(analysis.address_changes) == 1
        event = analysis.address_changes[0]
        assert event.orgnr == "900000000"
        assert event.year == 2023
        assert event.old_address == "Storgata 1"
        assert event.new_address == "Storgata 2"
        assert event.employees_before == 10
        assert event.employees_after == 25
        assert event.employee_change == 15
        assert event.employee_change_percent == "150.0"

    def test_single_entry_company_contributes_nothing(self, sample_dataset):
        """Scenario C: one observation, no events and no summary."""
        assert not sample_dataset.changes_for_company("910000009")
        assert all(s.orgnr != "910000009" for s in sample_dataset.employee_changes)

    def test_zero_baseline_event(self, sample_dataset):
        """Scenario D: 0 -> 10 is "N/A" and not extreme."""
        event = sample_dataset.changes_for_company("910000006")[0]

        assert event.employees_before == 0
        assert event.employees_after == 10
        assert event.employee_change_percent == NOT_AVAILABLE
        assert not is_extreme_change(event)

    def test_sentinel_only_for_zero_baseline(self, sample_dataset):
        for event in sample_dataset.address_changes:
            if event.employees_before == 0:
                assert event.employee_change_percent == NOT_AVAILABLE
            else:
                assert event.employee_change_percent != NOT_AVAILABLE

    def test_event_count_matches_differing_adjacent_pairs(self, sample_registry):
        analyzer = ChangeAnalyzer()

        for company in sample_registry:
            expected = sum(
                1 for prev, cur in zip(company.timeline, company.timeline[1:])
                if location_key(prev) != location_key(cur)
            )
            assert len(analyzer.detect_address_changes(company)) == expected

    def test_gaps_between_years_allowed(self):
        company = Company(
            orgnr="111",
            name="A AS",
            timeline=[_entry(2010, "Gate 1", employees=5), _entry(2020, "Gate 2", employees=6)],
        )

        events = ChangeAnalyzer().detect_address_changes(company)

        assert [e.year for e in events] == [2020]

    def test_sample_events(self, sample_dataset):
        assert sorted((e.orgnr, e.year) for e in sample_dataset.address_changes) == [
            ("910000001", 2015),
            ("910000002", 2015),
            ("910000003", 2015),
            ("910000004", 2015),
            ("910000005", 2020),
            ("910000006", 2020),
            ("910000007", 2020),
            ("910000008", 2020),
            ("910000010", 2023),
        ]

    def test_employee_summary_uses_first_and_last(self, sample_dataset):
        summary = next(s for s in sample_dataset.employee_changes if s.orgnr == "910000003")

        assert summary.first_year == 2014
        assert summary.last_year == 2023
        assert summary.employees_start == 50
        assert summary.employees_end == 30
        assert summary.total_change == -20
        assert summary.total_change_percent == "-40.0"
        assert len(summary.timeline) == 5

    def test_no_summary_for_single_year(self):
        company = Company(orgnr="111", timeline=[_entry(2020, "Gate 1", employees=5)])

        assert ChangeAnalyzer().summarize_employees(company) is None


class TestRelocationCandidate:
    """Tests for the since-move view."""

    def test_since_move_figures(self, sample_registry, sample_dataset):
        event = sample_dataset.changes_for_company("910000001")[0]
        company = sample_registry.get("910000001")

        candidate = build_candidate(event, company, sample_registry.reference_year)

        assert candidate.years_since_move == 8
        assert candidate.current_year == 2023
        assert candidate.employees_at_move == 12
        assert candidate.employees_now == 60
        assert candidate.employee_change_since_move == 48
        assert candidate.change_percent_since_move == "400.0"

    def test_to_dict_is_flat(self, sample_dataset):
        candidate = sample_dataset.moved_years_ago(3)[0]

        data = candidate.to_dict()

        assert data["orgnr"] == candidate.orgnr
        assert data["employee_change_percent"] == candidate.event.employee_change_percent
        assert data["employees_now"] == candidate.employees_now
