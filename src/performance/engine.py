"""Recompute one venue-week of performance metrics.

``recompute_week`` resolves the week, runs every aggregator against the raw
sources, assembles the derived fields and upserts the record keyed by
(venue, year, week_number). Aggregators only read raw sources, so they may
run inline or on a thread pool (``PERFORMANCE_MAX_WORKERS``). An aggregator
that raises or whose reads were cut short is recorded in
``degraded_sources``; only an unknown venue/week or malformed input aborts.
"""
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable

from django.conf import settings
from django.db import connection, transaction
from django.utils import timezone

from performance import allocation, delays, guest, mix, retention, revenue, stockout, timing
from performance.config import build_rules
from performance.exceptions import MalformedInput, VenueNotFound, WeekNotFound
from performance.models import WeeklyPerformanceRecord
from performance.periods import coerce_int, week_bounds
from performance.results import AggregatorResult, DegradedReason
from performance.utils import percent
from sources.reader import SourceReader

logger = logging.getLogger("venueops")


@dataclass(frozen=True)
class Aggregator:
    name: str
    compute: Callable
    empty: Callable


AGGREGATORS = (
    Aggregator("revenue", revenue.compute_revenue, revenue.RevenueFigures),
    Aggregator("labor", allocation.compute_labor, allocation.LaborFigures),
    Aggregator("operating_costs", allocation.compute_operating_costs, allocation.OperatingCostFigures),
    Aggregator("delays", delays.compute_delays, delays.DelayFigures),
    Aggregator("stockout", stockout.compute_stockout, stockout.StockoutFigures),
    Aggregator("retention", retention.compute_retention, retention.RetentionFigures),
    Aggregator("mix", mix.compute_mix, mix.MixFigures),
    Aggregator("guest", guest.compute_guest, guest.GuestFigures),
    Aggregator("sales_timing", timing.compute_sales_timing, timing.SalesTimingFigures),
    Aggregator("cancellations", timing.compute_cancellations, timing.CancellationFigures),
)


def resolve_venue(venue):
    from venues.models import Venue

    if isinstance(venue, Venue):
        return venue
    venue_id = coerce_int(venue, "venue_id")
    if venue_id <= 0:
        raise MalformedInput(f"venue_id must be positive, got {venue_id}.")
    try:
        return Venue.objects.get(pk=venue_id)
    except Venue.DoesNotExist:
        raise VenueNotFound(venue_id) from None


def ensure_week(venue, year, week_number):
    """Return ``(record, created)``; a missing week is created zero-valued."""
    period = week_bounds(year, week_number)
    venue = resolve_venue(venue)
    record, created = WeeklyPerformanceRecord.objects.get_or_create(
        venue=venue,
        year=period.year,
        week_number=period.week,
        defaults={"start_date": period.start, "end_date": period.end},
    )
    if created:
        logger.info("Created performance week %s for venue %s.", period, venue.code)
    return record, created


def run_aggregator(aggregator, venue_id, period, rules, *, reader_factory=SourceReader) -> AggregatorResult:
    reader = reader_factory()
    context = {"venue_id": venue_id, "week": str(period), "aggregator": aggregator.name}
    try:
        value = aggregator.compute(reader, venue_id, period, rules)
    except Exception as exc:
        logger.exception(
            "Aggregator %s failed for venue %s week %s; using empty figures.",
            aggregator.name,
            venue_id,
            period,
            extra=context,
        )
        return AggregatorResult(
            aggregator.name,
            aggregator.empty(),
            [DegradedReason(aggregator.name, f"error: {exc.__class__.__name__}: {exc}")],
        )
    degraded = [DegradedReason(aggregator.name, str(failure)) for failure in reader.failures]
    if degraded:
        logger.warning(
            "Aggregator %s for venue %s week %s used partial data: %s",
            aggregator.name,
            venue_id,
            period,
            "; ".join(reason.reason for reason in degraded),
            extra=context,
        )
    return AggregatorResult(aggregator.name, value, degraded)


def _run_in_thread(aggregator, venue_id, period, rules):
    try:
        return run_aggregator(aggregator, venue_id, period, rules)
    finally:
        connection.close()


def run_aggregators(venue_id, period, rules, *, max_workers=None, aggregators=None) -> dict:
    aggregators = aggregators or AGGREGATORS
    if max_workers is None:
        max_workers = int(getattr(settings, "PERFORMANCE_MAX_WORKERS", 1))
    if max_workers <= 1:
        results = [run_aggregator(aggregator, venue_id, period, rules) for aggregator in aggregators]
    else:
        with ThreadPoolExecutor(max_workers=min(max_workers, len(aggregators))) as pool:
            futures = [
                pool.submit(_run_in_thread, aggregator, venue_id, period, rules)
                for aggregator in aggregators
            ]
            results = [future.result() for future in futures]
    return {result.name: result for result in results}


def assemble_fields(results: dict, *, cogs_amount) -> dict:
    """Merge aggregator figures and derive the cross-aggregator ratios."""
    fields = {}
    for result in results.values():
        fields.update(result.value.as_fields())

    net = fields["net_revenue"]
    fields["labor_cost_pct"] = percent(fields["labor_cost"], net)
    fields["promotion_cost_pct"] = percent(fields["promotion_cost"], net)
    fields["cogs_pct"] = percent(cogs_amount, fields["margin_eligible_revenue"])
    fields["cogs_global_pct"] = percent(cogs_amount, net)
    fields["degraded_sources"] = [
        reason.as_dict() for result in results.values() for reason in result.degraded
    ]
    return fields


def recompute_week(venue, year, week_number, *, create_missing=False, max_workers=None):
    """Recompute and upsert one venue-week; return the saved record.

    Raises ``MalformedInput`` for unusable identifiers, ``VenueNotFound`` for
    an unknown venue and ``WeekNotFound`` when the week row is absent and
    ``create_missing`` is false.
    """
    period = week_bounds(year, week_number)
    venue = resolve_venue(venue)

    record = WeeklyPerformanceRecord.objects.filter(
        venue=venue, year=period.year, week_number=period.week
    ).first()
    if record is None:
        if not create_missing:
            raise WeekNotFound(venue.pk, period.year, period.week)
        record, _ = ensure_week(venue, period.year, period.week)

    rules = build_rules(venue)
    results = run_aggregators(venue.pk, period, rules, max_workers=max_workers)
    fields = assemble_fields(results, cogs_amount=record.cogs_amount)
    fields.update(
        start_date=period.start,
        end_date=period.end,
        last_recomputed_at=timezone.now(),
    )

    with transaction.atomic():
        record, _ = WeeklyPerformanceRecord.objects.update_or_create(
            venue=venue,
            year=period.year,
            week_number=period.week,
            defaults=fields,
        )

    logger.info(
        "Recomputed performance week %s for venue %s: net=%s degraded=%s",
        period,
        venue.code,
        record.net_revenue,
        len(fields["degraded_sources"]),
        extra={"venue_id": venue.pk, "week": str(period)},
    )
    return record
