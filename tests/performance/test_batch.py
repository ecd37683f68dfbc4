import logging
from datetime import date
from decimal import Decimal

import pytest
from django.db import DatabaseError

from performance import batch
from performance.batch import Unit, existing_weeks, recompute_units, weekly_rollover
from performance.engine import ensure_week
from performance.models import WeeklyPerformanceRecord


class SleepRecorder:
    def __init__(self):
        self.calls = []

    def __call__(self, seconds):
        self.calls.append(seconds)


@pytest.mark.django_db
def test_recompute_units_pauses_between_groups_only(venue):
    for week in range(1, 6):
        ensure_week(venue, 2024, week)
    sleep = SleepRecorder()

    outcomes = recompute_units(
        [Unit(venue.pk, 2024, week) for week in range(1, 6)],
        batch_size=2,
        delay_seconds=1.5,
        sleep=sleep,
    )

    assert sleep.calls == [1.5, 1.5]
    assert [outcome.week_number for outcome in outcomes] == [1, 2, 3, 4, 5]
    assert all(outcome.success for outcome in outcomes)


@pytest.mark.django_db
def test_failed_unit_is_reported_and_the_batch_goes_on(venue):
    ensure_week(venue, 2024, 6)
    sleep = SleepRecorder()

    outcomes = recompute_units(
        [Unit(venue.pk, 2024, 5), Unit(venue.pk, 2024, 60), Unit(venue.pk, 2024, 6)],
        delay_seconds=0,
        sleep=sleep,
    )

    assert [outcome.success for outcome in outcomes] == [False, False, True]
    assert "not found" in outcomes[0].error
    assert outcomes[2].record_id is not None
    assert "error" not in outcomes[2].as_dict()
    assert sleep.calls == []


@pytest.mark.django_db
def test_recompute_units_can_create_missing_weeks(venue):
    outcomes = recompute_units([Unit(venue.pk, 2024, 5)], create_missing=True, sleep=SleepRecorder())
    assert outcomes[0].success
    assert WeeklyPerformanceRecord.objects.filter(venue=venue, year=2024, week_number=5).exists()


@pytest.mark.django_db
def test_existing_weeks_newest_first_with_limit(venue, other_venue):
    for year, week in [(2023, 52), (2024, 1), (2024, 2)]:
        ensure_week(venue, year, week)
    ensure_week(other_venue, 2024, 3)

    units = existing_weeks([venue.pk, other_venue.pk], limit=2)

    assert units == [
        Unit(venue.pk, 2024, 2),
        Unit(venue.pk, 2024, 1),
        Unit(other_venue.pk, 2024, 3),
    ]


@pytest.mark.django_db
def test_weekly_rollover_closes_previous_week_and_opens_current(revenue_week):
    ensure_week(revenue_week, 2024, 5)

    # Wednesday of 2024-W06.
    outcomes = weekly_rollover(revenue_week, today=date(2024, 2, 7))

    assert [(outcome.week_number, outcome.success) for outcome in outcomes] == [(5, True), (6, True)]
    closed = WeeklyPerformanceRecord.objects.get(venue=revenue_week, year=2024, week_number=5)
    assert closed.net_revenue == Decimal("9600.00")
    opened = WeeklyPerformanceRecord.objects.get(venue=revenue_week, year=2024, week_number=6)
    assert opened.net_revenue == Decimal("0.00")
    assert opened.last_recomputed_at is not None


@pytest.mark.django_db
def test_weekly_rollover_skips_missing_previous_week(venue):
    outcomes = weekly_rollover(venue, today=date(2024, 2, 7))
    assert [outcome.week_number for outcome in outcomes] == [6]
    assert not WeeklyPerformanceRecord.objects.filter(week_number=5).exists()


@pytest.mark.django_db
def test_weekly_rollover_across_year_boundary(venue):
    ensure_week(venue, 2020, 53)
    outcomes = weekly_rollover(venue, today=date(2021, 1, 4))
    assert [(o.year, o.week_number) for o in outcomes] == [(2020, 53), (2021, 1)]


def _locked_table(venue, year, week_number):
    raise DatabaseError("could not obtain lock on row")


@pytest.mark.django_db
def test_weekly_rollover_reports_week_that_cannot_be_opened(monkeypatch, venue):
    monkeypatch.setattr(batch, "ensure_week", _locked_table)

    outcomes = weekly_rollover(venue, today=date(2024, 2, 7))

    assert len(outcomes) == 1
    assert (outcomes[0].week_number, outcomes[0].success) == (6, False)
    assert "could not obtain lock" in outcomes[0].error
    assert not WeeklyPerformanceRecord.objects.filter(venue=venue).exists()


@pytest.mark.django_db
def test_failed_unit_logs_venue_and_week_context(caplog, monkeypatch, venue):
    monkeypatch.setattr(logging.getLogger("venueops"), "propagate", True)
    with caplog.at_level(logging.WARNING, logger="venueops"):
        recompute_units([Unit(venue.pk, 2024, 9)], delay_seconds=0, sleep=SleepRecorder())

    record = next(r for r in caplog.records if "skipped" in r.getMessage())
    assert record.venue_id == venue.pk
    assert record.week == "2024-W09"
