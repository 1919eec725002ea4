"""
Work-week bucketing.

Reconciliations are issued per work week: Monday through Saturday.  Week
number and year follow ISO 8601, so a week that straddles New Year belongs
to the ISO year of its Monday's week.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime, timedelta

_MONTHS_ES = (
    "ene", "feb", "mar", "abr", "may", "jun",
    "jul", "ago", "sep", "oct", "nov", "dic",
)


@dataclass(frozen=True, order=True)
class WorkWeek:
    """A Monday..Saturday reconciliation window."""

    year: int
    number: int
    start: date
    end: date

    def __post_init__(self) -> None:
        if self.start.weekday() != 0:
            raise ValueError(f"Work week must start on a Monday, got {self.start}")
        if self.end != self.start + timedelta(days=5):
            raise ValueError("Work week must end on the Saturday after its start")

    def contains(self, day: date | datetime) -> bool:
        """True when the day falls inside the window (time of day ignored)."""
        if isinstance(day, datetime):
            day = day.date()
        return self.start <= day <= self.end

    @property
    def key(self) -> str:
        return f"{self.year}-{self.number:02d}"


def week_of(day: date | datetime) -> WorkWeek:
    """Return the work week containing ``day``.

    Sundays belong to the week that started the previous Monday, even though
    they fall outside its Monday..Saturday billing window.
    """
    if isinstance(day, datetime):
        day = day.date()
    monday = day - timedelta(days=day.weekday())
    iso_year, iso_week, _ = monday.isocalendar()
    return WorkWeek(
        year=iso_year,
        number=iso_week,
        start=monday,
        end=monday + timedelta(days=5),
    )


def weeks_with_vouchers(dates: Iterable[date | datetime]) -> list[tuple[WorkWeek, int]]:
    """Bucket voucher creation dates per work week, newest week first."""
    counts: dict[WorkWeek, int] = {}
    for day in dates:
        week = week_of(day)
        counts[week] = counts.get(week, 0) + 1
    return sorted(counts.items(), key=lambda item: item[0], reverse=True)


def format_week_range(week: WorkWeek) -> str:
    """Short Spanish label: ``"3-8 feb"`` or ``"29 dic - 3 ene"``."""
    start_month = _MONTHS_ES[week.start.month - 1]
    end_month = _MONTHS_ES[week.end.month - 1]
    if start_month == end_month:
        return f"{week.start.day}-{week.end.day} {start_month}"
    return f"{week.start.day} {start_month} - {week.end.day} {end_month}"
