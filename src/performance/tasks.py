"""Celery tasks for the weekly performance engine."""
from celery import shared_task
from django.conf import settings

from performance import batch
from performance.engine import recompute_week as recompute_one
from performance.exceptions import PerformanceError
from performance.periods import current_week, recent_weeks


def _iter_venues(venue_id=None):
    from venues.models import Venue

    qs = Venue.objects.filter(is_active=True)
    if venue_id:
        qs = qs.filter(pk=venue_id)
    return qs


def _summary(outcomes):
    return {
        "total": len(outcomes),
        "succeeded": sum(1 for outcome in outcomes if outcome.success),
        "failed": sum(1 for outcome in outcomes if not outcome.success),
        "results": [outcome.as_dict() for outcome in outcomes],
    }


@shared_task(name="performance.tasks.recompute_week")
def recompute_week(venue_id, year=None, week_number=None, create_missing=False):
    if year is None or week_number is None:
        period = current_week()
        year, week_number = period.year, period.week
    try:
        record = recompute_one(venue_id, year, week_number, create_missing=create_missing)
    except PerformanceError as exc:
        return {"success": False, "venue_id": venue_id, "year": year, "week_number": week_number, "error": str(exc)}
    return {"success": True, "venue_id": venue_id, "year": year, "week_number": week_number, "record_id": record.pk}


@shared_task(name="performance.tasks.weekly_rollover")
def weekly_rollover(venue_id=None):
    """Monday routine: recompute last week and open the new one."""
    outcomes = []
    for venue in _iter_venues(venue_id):
        outcomes.extend(batch.weekly_rollover(venue))
    return _summary(outcomes)


@shared_task(name="performance.tasks.recompute_recent_weeks")
def recompute_recent_weeks(venue_id=None, weeks=None):
    count = int(weeks or getattr(settings, "PERFORMANCE_RECENT_WEEKS", 4))
    periods = recent_weeks(count)
    units = [
        batch.Unit(venue.pk, period.year, period.week)
        for venue in _iter_venues(venue_id)
        for period in periods
    ]
    return _summary(batch.recompute_units(units, create_missing=True))


@shared_task(name="performance.tasks.recompute_all_weeks")
def recompute_all_weeks(venue_id=None, limit=None):
    venue_ids = [venue.pk for venue in _iter_venues(venue_id)]
    return _summary(batch.recompute_units(batch.existing_weeks(venue_ids, limit=limit)))
