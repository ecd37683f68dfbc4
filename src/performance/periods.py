"""ISO week arithmetic for the weekly performance records.

Weeks start on Monday and week 1 is the week holding the year's first
Thursday. Everything here is pure; invalid input raises ``MalformedInput``.
"""
from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date, timedelta

from django.utils import timezone

from performance.exceptions import MalformedInput

MIN_YEAR = 2000
MAX_YEAR = 2100


@dataclass(frozen=True)
class WeekPeriod:
    year: int
    week: int
    start: date
    end: date

    def days(self) -> list[date]:
        return [self.start + timedelta(days=offset) for offset in range(7)]

    def __str__(self):
        return f"{self.year}-W{self.week:02d}"


@dataclass(frozen=True)
class MonthSegment:
    month_start: date
    month_end: date
    days_in_window: int
    days_in_month: int


def coerce_int(value, label: str) -> int:
    if isinstance(value, bool):
        raise MalformedInput(f"{label} must be an integer, got {value!r}.")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            pass
    raise MalformedInput(f"{label} must be an integer, got {value!r}.")


def _validate_year(year) -> int:
    year = coerce_int(year, "year")
    if not MIN_YEAR <= year <= MAX_YEAR:
        raise MalformedInput(f"year {year} is outside {MIN_YEAR}-{MAX_YEAR}.")
    return year


def first_monday(year: int) -> date:
    """Monday of ISO week 1 (the week containing January 4th)."""
    jan4 = date(year, 1, 4)
    return jan4 - timedelta(days=jan4.weekday())


def week_count(year) -> int:
    year = _validate_year(year)
    jan1 = date(year, 1, 1).weekday()
    if jan1 == calendar.THURSDAY or (jan1 == calendar.WEDNESDAY and calendar.isleap(year)):
        return 53
    return 52


def iso_week(value: date) -> tuple[int, int]:
    iso_year, week, _ = value.isocalendar()
    return iso_year, week


def validate_week(year, week_number) -> tuple[int, int]:
    year = _validate_year(year)
    week_number = coerce_int(week_number, "week_number")
    if week_number <= 0:
        raise MalformedInput(f"week_number must be positive, got {week_number}.")
    if week_number > week_count(year):
        raise MalformedInput(f"{year} has only {week_count(year)} weeks, got {week_number}.")
    return year, week_number


def week_bounds(year, week_number) -> WeekPeriod:
    year, week_number = validate_week(year, week_number)
    start = first_monday(year) + timedelta(weeks=week_number - 1)
    return WeekPeriod(year=year, week=week_number, start=start, end=start + timedelta(days=6))


def period_for_date(value: date) -> WeekPeriod:
    return week_bounds(*iso_week(value))


def current_week(today: date | None = None) -> WeekPeriod:
    return period_for_date(today or timezone.localdate())


def previous_week(period: WeekPeriod) -> WeekPeriod:
    return period_for_date(period.start - timedelta(days=7))


def recent_weeks(count: int, today: date | None = None) -> list[WeekPeriod]:
    """The current week and the ``count - 1`` weeks before it, newest first."""
    period = current_week(today)
    weeks = []
    for _ in range(max(1, int(count))):
        weeks.append(period)
        period = previous_week(period)
    return weeks


def month_segments(start: date, end: date) -> list[MonthSegment]:
    if end < start:
        raise MalformedInput(f"window end {end} is before start {start}.")
    segments = []
    cursor = start
    while cursor <= end:
        days_in_month = calendar.monthrange(cursor.year, cursor.month)[1]
        month_start = cursor.replace(day=1)
        month_end = cursor.replace(day=days_in_month)
        segment_end = min(end, month_end)
        segments.append(
            MonthSegment(
                month_start=month_start,
                month_end=month_end,
                days_in_window=(segment_end - cursor).days + 1,
                days_in_month=days_in_month,
            )
        )
        cursor = segment_end + timedelta(days=1)
    return segments
