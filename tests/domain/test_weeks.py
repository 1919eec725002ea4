"""
Tests for work-week bucketing.

Covers:
- Monday..Saturday windows and ISO numbering
- Year boundaries
- Week labels
- Voucher counts per week
"""

from datetime import date, datetime

import pytest

from haulage_kernel.domain.weeks import (
    WorkWeek,
    format_week_range,
    week_of,
    weeks_with_vouchers,
)


class TestWeekOf:
    def test_midweek(self):
        week = week_of(date(2025, 2, 5))

        assert week.start == date(2025, 2, 3)
        assert week.end == date(2025, 2, 8)
        assert (week.year, week.number) == (2025, 6)
        assert week.key == "2025-06"

    def test_monday_and_saturday_same_week(self):
        assert week_of(date(2025, 2, 3)) == week_of(date(2025, 2, 8))

    def test_sunday_belongs_to_previous_monday(self):
        week = week_of(date(2025, 2, 9))

        assert week.start == date(2025, 2, 3)
        assert not week.contains(date(2025, 2, 9))

    def test_datetime_input(self):
        assert week_of(datetime(2025, 2, 5, 23, 59)) == week_of(date(2025, 2, 5))

    def test_year_boundary_uses_iso_year(self):
        week = week_of(date(2025, 1, 1))

        assert week.start == date(2024, 12, 30)
        assert (week.year, week.number) == (2025, 1)


class TestWorkWeek:
    def test_contains(self):
        week = week_of(date(2025, 2, 5))

        assert week.contains(date(2025, 2, 3))
        assert week.contains(datetime(2025, 2, 8, 18, 0))
        assert not week.contains(date(2025, 2, 2))

    def test_must_start_on_monday(self):
        with pytest.raises(ValueError):
            WorkWeek(year=2025, number=6, start=date(2025, 2, 4), end=date(2025, 2, 9))

    def test_must_end_on_saturday(self):
        with pytest.raises(ValueError):
            WorkWeek(year=2025, number=6, start=date(2025, 2, 3), end=date(2025, 2, 9))


class TestLabels:
    def test_same_month(self):
        assert format_week_range(week_of(date(2025, 2, 5))) == "3-8 feb"

    def test_across_months(self):
        assert format_week_range(week_of(date(2024, 12, 31))) == "30 dic - 4 ene"


class TestWeeksWithVouchers:
    def test_counts_newest_first(self):
        dates = [
            date(2025, 2, 3),
            date(2025, 2, 5),
            date(2025, 2, 12),
            date(2025, 1, 28),
        ]

        weeks = weeks_with_vouchers(dates)

        assert [(w.key, n) for w, n in weeks] == [
            ("2025-07", 1),
            ("2025-06", 2),
            ("2025-05", 1),
        ]

    def test_empty(self):
        assert weeks_with_vouchers([]) == []
