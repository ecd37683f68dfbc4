from datetime import date
from decimal import Decimal

import pytest

from performance.config import DelayRules, build_rules
from performance.delays import belongs_to, classify_channel, compute_delays
from sources.models import PreparationTiming
from sources.reader import SourceReader

MONDAY = date(2024, 1, 29)
TUESDAY = date(2024, 1, 30)


def _row(seconds, day=MONDAY, product="Gin Tônica"):
    return {
        "business_date": day,
        "category": "drink",
        "location_label": "Montados",
        "product_name": product,
        "launch_to_ready_seconds": seconds,
        "start_to_ready_seconds": None,
    }


def test_classify_discards_non_positive_readings_and_counts_thresholds():
    rows = [
        _row(0),
        _row(-5),
        _row(None),
        _row(120),
        _row(300),
        _row(600, product="Caipirinha"),
        _row(480, product="Negroni"),
    ]

    result = classify_channel(rows, DelayRules().drink)

    assert result.valid_count == 4
    assert result.mean_minutes == Decimal("6.25")
    assert result.minor_count == 3
    assert result.major_count == 2
    assert result.minor_pct == Decimal("75.00")
    assert result.major_pct == Decimal("50.00")


def test_major_delays_never_exceed_minor_delays():
    rows = [_row(seconds) for seconds in (30, 239, 240, 479, 480, 481, 5000)]
    result = classify_channel(rows, DelayRules().drink)
    assert result.major_count <= result.minor_count
    assert (result.minor_count, result.major_count) == (5, 3)


def test_late_items_grouped_by_weekday_and_sorted_by_mean():
    rows = [
        _row(480, product="Negroni"),
        _row(600, product="Caipirinha"),
        _row(720, product="Caipirinha"),
        _row(900, day=TUESDAY, product="Mojito"),
        _row(100, day=TUESDAY, product="Chopp"),
    ]

    result = classify_channel(rows, DelayRules().drink)

    assert list(result.late_items) == ["monday", "tuesday"]
    assert result.late_items["monday"] == [
        {"product": "Caipirinha", "count": 2, "mean_minutes": "11.00"},
        {"product": "Negroni", "count": 1, "mean_minutes": "8.00"},
    ]
    assert result.late_items["tuesday"] == [{"product": "Mojito", "count": 1, "mean_minutes": "15.00"}]
    assert result.by_weekday["monday"] == {"minor": 3, "major": 3}
    assert result.by_weekday["sunday"] == {"minor": 0, "major": 0}


def test_empty_channel_is_zero_valued():
    result = classify_channel([_row(None), _row(0)], DelayRules().drink)
    assert result.valid_count == 0
    assert result.mean_minutes == Decimal("0.00")
    assert result.late_items == {}


def test_channel_membership_prefers_category_over_location():
    rules = DelayRules()
    assert belongs_to({"category": "food", "location_label": "Bar"}, rules.kitchen)
    assert not belongs_to({"category": "food", "location_label": "Bar"}, rules.drink)
    assert belongs_to({"category": "", "location_label": "Cozinha 1"}, rules.kitchen)
    assert belongs_to({"category": "", "location_label": "shot e dose"}, rules.drink)
    assert not belongs_to({"category": "", "location_label": "Salão"}, rules.kitchen)


@pytest.mark.django_db
def test_compute_delays_uses_a_different_checkpoint_per_channel(venue, week):
    PreparationTiming.objects.create(
        venue=venue, business_date=MONDAY, category="drink", product_name="Negroni",
        launch_to_ready_seconds=540, start_to_ready_seconds=60,
    )
    PreparationTiming.objects.create(
        venue=venue, business_date=MONDAY, category="food", product_name="Picanha",
        launch_to_ready_seconds=60, start_to_ready_seconds=21 * 60,
    )
    PreparationTiming.objects.create(
        venue=venue, business_date=MONDAY, category="food", product_name="Fritas",
        launch_to_ready_seconds=3000, start_to_ready_seconds=10 * 60,
    )

    figures = compute_delays(SourceReader(), venue.pk, week, build_rules(venue))

    assert figures.drink.valid_count == 1
    assert figures.drink.major_count == 1
    assert figures.kitchen.valid_count == 2
    assert figures.kitchen.mean_minutes == Decimal("15.50")
    assert figures.kitchen.minor_count == 1
    assert figures.kitchen.major_count == 1
    fields = figures.as_fields()
    assert fields["kitchen_late_items"]["monday"][0]["product"] == "Picanha"
    assert fields["delays_by_weekday"]["drink"]["monday"]["major"] == 1


@pytest.mark.django_db
def test_delay_thresholds_follow_venue_overrides(venue, week):
    venue.performance_overrides = {"delays": {"kitchen": {"minor_minutes": 5, "major_minutes": 10}}}
    PreparationTiming.objects.create(
        venue=venue, business_date=MONDAY, category="food", start_to_ready_seconds=11 * 60,
    )

    figures = compute_delays(SourceReader(), venue.pk, week, build_rules(venue))

    assert figures.kitchen.major_count == 1
