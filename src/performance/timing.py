"""Revenue distribution across the day and the week, and cancellations."""
from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from decimal import Decimal

from performance.utils import WEEKDAYS, ZERO, money, percent, venue_window, weekday_name


@dataclass
class SalesTimingFigures:
    revenue_before_19h_pct: Decimal = ZERO
    revenue_after_22h_pct: Decimal = ZERO
    thu_to_sun_revenue: Decimal = ZERO

    def as_fields(self) -> dict:
        return {
            "revenue_before_19h_pct": self.revenue_before_19h_pct,
            "revenue_after_22h_pct": self.revenue_after_22h_pct,
            "thu_to_sun_revenue": self.thu_to_sun_revenue,
        }


@dataclass
class CancellationFigures:
    total: Decimal = ZERO
    details: dict = field(default_factory=dict)

    def as_fields(self) -> dict:
        return {"cancellations": self.total, "cancellation_details": self.details}


def split_by_hour(rows, rules) -> SalesTimingFigures:
    total = Decimal("0")
    early = Decimal("0")
    late = Decimal("0")
    weekend = Decimal("0")
    for row in rows:
        amount = row["amount"]
        hour = row["hour"]
        total += amount
        if rules.day_start_hour <= hour < rules.early_cutoff_hour:
            early += amount
        if hour >= rules.late_start_hour or hour < rules.day_start_hour:
            late += amount
        if row["business_date"].weekday() in rules.weekend_weekdays:
            weekend += amount
    return SalesTimingFigures(
        revenue_before_19h_pct=percent(early, total),
        revenue_after_22h_pct=percent(late, total),
        thu_to_sun_revenue=money(weekend),
    )


def compute_sales_timing(reader, venue_id, period, rules) -> SalesTimingFigures:
    rows = reader.fetch_all(
        "hourly_revenue",
        ["business_date", "hour", "amount"],
        venue_window(venue_id, "business_date", period.start, period.end),
    )
    return split_by_hour(rows, rules.timing)


def compute_cancellations(reader, venue_id, period, rules) -> CancellationFigures:
    rows = reader.fetch_all(
        "cancellations",
        ["business_date", "amount"],
        venue_window(venue_id, "business_date", period.start, period.end),
    )
    per_day = defaultdict(lambda: {"count": 0, "amount": Decimal("0")})
    for row in rows:
        bucket = per_day[weekday_name(row["business_date"])]
        bucket["count"] += 1
        bucket["amount"] += abs(row["amount"])
    details = {}
    for day in WEEKDAYS:
        if day in per_day:
            details[day] = {"count": per_day[day]["count"], "amount": str(money(per_day[day]["amount"]))}
    return CancellationFigures(
        total=money(sum((abs(row["amount"]) for row in rows), Decimal("0"))),
        details=details,
    )
