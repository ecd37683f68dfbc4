"""Customer identity metrics built on normalized phone numbers."""
from __future__ import annotations

import re
from collections import defaultdict
from dataclasses import dataclass
from datetime import timedelta
from decimal import Decimal

from performance.utils import ZERO, percent, venue_window

_NON_DIGITS = re.compile(r"\D+")


@dataclass
class RetentionFigures:
    retention_30d_pct: Decimal = ZERO
    retention_60d_pct: Decimal = ZERO
    new_customers_pct: Decimal = ZERO
    active_customers: int = 0

    def as_fields(self) -> dict:
        return {
            "retention_30d_pct": self.retention_30d_pct,
            "retention_60d_pct": self.retention_60d_pct,
            "new_customers_pct": self.new_customers_pct,
            "active_customers": self.active_customers,
        }


def normalize_phone(value, min_digits: int = 10):
    digits = _NON_DIGITS.sub("", str(value or ""))
    if len(digits) < min_digits:
        return None
    return digits


def retention_rate(current: set, lagged: set) -> Decimal:
    """Share of the lagged customers seen again in the current set."""
    if not lagged:
        return ZERO
    return percent(len(current & lagged), len(lagged))


def lag_window(start, lag_days: int, tolerance_days: int):
    anchor = start - timedelta(days=lag_days)
    return anchor - timedelta(days=tolerance_days), anchor


def compute_retention(reader, venue_id, period, rules) -> RetentionFigures:
    rules = rules.retention
    window_start = min(
        period.start - timedelta(days=max(rules.short_lag_days, rules.long_lag_days) + rules.tolerance_days),
        period.start - timedelta(days=rules.new_customer_history_days),
        period.end - timedelta(days=rules.active_window_days - 1),
    )
    rows = reader.fetch_all(
        "visits",
        ["business_date", "customer_phone"],
        venue_window(venue_id, "business_date", window_start, period.end),
    )

    visits = []
    for row in rows:
        phone = normalize_phone(row["customer_phone"], rules.min_phone_digits)
        if phone is not None:
            visits.append((row["business_date"], phone))

    def identifiers(first, last):
        return {phone for day, phone in visits if first <= day <= last}

    current = identifiers(period.start, period.end)
    short_lag = identifiers(*lag_window(period.start, rules.short_lag_days, rules.tolerance_days))
    long_lag = identifiers(*lag_window(period.start, rules.long_lag_days, rules.tolerance_days))

    history = identifiers(
        period.start - timedelta(days=rules.new_customer_history_days),
        period.start - timedelta(days=1),
    )

    active_since = period.end - timedelta(days=rules.active_window_days - 1)
    visit_days = defaultdict(set)
    for day, phone in visits:
        if active_since <= day <= period.end:
            visit_days[phone].add(day)

    return RetentionFigures(
        retention_30d_pct=retention_rate(current, short_lag),
        retention_60d_pct=retention_rate(current, long_lag),
        new_customers_pct=percent(len(current - history), len(current)),
        active_customers=sum(1 for days in visit_days.values() if len(days) >= rules.active_min_visits),
    )
