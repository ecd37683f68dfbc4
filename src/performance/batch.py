"""Recompute many venue-weeks in small, rate-limited groups."""
from __future__ import annotations

import logging
import time
from dataclasses import asdict, dataclass
from typing import Iterable

from django.conf import settings
from django.db import DatabaseError

from performance.engine import ensure_week, recompute_week
from performance.exceptions import PerformanceError
from performance.models import WeeklyPerformanceRecord
from performance.periods import current_week, previous_week

logger = logging.getLogger("venueops")


@dataclass(frozen=True)
class Unit:
    venue_id: int
    year: int
    week_number: int


@dataclass
class UnitOutcome:
    venue_id: int
    year: int
    week_number: int
    success: bool
    record_id: int | None = None
    error: str | None = None

    def as_dict(self) -> dict:
        data = asdict(self)
        if self.error is None:
            data.pop("error")
        return data


def _chunks(items, size):
    for index in range(0, len(items), size):
        yield items[index:index + size]


def recompute_units(
    units: Iterable[Unit],
    *,
    create_missing=False,
    batch_size=None,
    delay_seconds=None,
    sleep=time.sleep,
) -> list[UnitOutcome]:
    """Recompute ``units`` in groups, pausing between groups.

    A unit that fails is reported as an error outcome and the run goes on.
    """
    units = list(units)
    batch_size = max(1, int(batch_size or getattr(settings, "PERFORMANCE_BATCH_SIZE", 3)))
    if delay_seconds is None:
        delay_seconds = float(getattr(settings, "PERFORMANCE_BATCH_DELAY_SECONDS", 2))

    outcomes = []
    for index, group in enumerate(_chunks(units, batch_size)):
        if index and delay_seconds > 0:
            sleep(delay_seconds)
        for unit in group:
            outcomes.append(_recompute_unit(unit, create_missing=create_missing))

    failed = sum(1 for outcome in outcomes if not outcome.success)
    logger.info("Batch recompute finished: %s units, %s failed.", len(outcomes), failed)
    return outcomes


def _unit_context(unit: Unit) -> dict:
    return {"venue_id": unit.venue_id, "week": f"{unit.year}-W{unit.week_number:02d}"}


def _recompute_unit(unit: Unit, *, create_missing: bool) -> UnitOutcome:
    try:
        record = recompute_week(unit.venue_id, unit.year, unit.week_number, create_missing=create_missing)
    except PerformanceError as exc:
        logger.warning("Recompute of %s skipped: %s", unit, exc, extra=_unit_context(unit))
        return UnitOutcome(unit.venue_id, unit.year, unit.week_number, success=False, error=str(exc))
    except DatabaseError as exc:
        logger.exception("Recompute of %s failed while saving.", unit, extra=_unit_context(unit))
        return UnitOutcome(unit.venue_id, unit.year, unit.week_number, success=False, error=str(exc))
    return UnitOutcome(unit.venue_id, unit.year, unit.week_number, success=True, record_id=record.pk)


def existing_weeks(venue_ids, *, limit=None) -> list[Unit]:
    """Existing records for the venues, newest first, at most ``limit`` per venue."""
    units = []
    for venue_id in venue_ids:
        queryset = (
            WeeklyPerformanceRecord.objects.filter(venue_id=venue_id)
            .order_by("-year", "-week_number")
            .values_list("year", "week_number")
        )
        if limit:
            queryset = queryset[: int(limit)]
        units.extend(Unit(venue_id, year, week) for year, week in queryset)
    return units


def weekly_rollover(venue, today=None) -> list[UnitOutcome]:
    """Close the previous week and open the current one for ``venue``.

    The previous week is recomputed only when it already exists; the current
    week is created if needed and then recomputed.
    """
    current = current_week(today)
    previous = previous_week(current)
    outcomes = []

    if WeeklyPerformanceRecord.objects.filter(
        venue=venue, year=previous.year, week_number=previous.week
    ).exists():
        outcomes.append(_recompute_unit(Unit(venue.pk, previous.year, previous.week), create_missing=False))

    unit = Unit(venue.pk, current.year, current.week)
    try:
        ensure_week(venue, current.year, current.week)
    except (PerformanceError, DatabaseError) as exc:
        logger.exception("Could not open week %s.", unit, extra=_unit_context(unit))
        outcomes.append(UnitOutcome(unit.venue_id, unit.year, unit.week_number, success=False, error=str(exc)))
        return outcomes
    outcomes.append(_recompute_unit(unit, create_missing=False))
    return outcomes
