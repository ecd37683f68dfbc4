"""Day-weighted product unavailability per macro-group."""
from __future__ import annotations

import re
from collections import defaultdict
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal

from performance.utils import CENT, HUNDRED, ZERO, label_set, normalize_label, venue_window

MACRO_GROUPS = ("bar", "drinks", "kitchen")


@dataclass
class StockoutFigures:
    bar_pct: Decimal = ZERO
    drinks_pct: Decimal = ZERO
    kitchen_pct: Decimal = ZERO
    overall_pct: Decimal = ZERO
    bar_unavailable: int = 0
    drinks_unavailable: int = 0
    kitchen_unavailable: int = 0
    daily: dict = field(default_factory=dict)

    def as_fields(self) -> dict:
        return {
            "stockout_bar_pct": self.bar_pct,
            "stockout_drinks_pct": self.drinks_pct,
            "stockout_kitchen_pct": self.kitchen_pct,
            "stockout_overall_pct": self.overall_pct,
            "stockout_bar": self.bar_unavailable,
            "stockout_drinks": self.drinks_unavailable,
            "stockout_kitchen": self.kitchen_unavailable,
            "stockout_daily": self.daily,
        }


class SnapshotFilter:
    """Applies the ignore-lists and location lookup of a ``StockoutRules``."""

    def __init__(self, rules):
        self.ignored_locations = label_set(rules.ignored_locations)
        self.ignored_groups = label_set(rules.ignored_groups)
        self.patterns = [re.compile(pattern, re.IGNORECASE) for pattern in rules.ignored_name_patterns]
        self.location_group = {}
        for group, locations in rules.location_groups:
            for location in locations:
                self.location_group.setdefault(normalize_label(location), group)

    def keep(self, row) -> bool:
        if not row["is_active"]:
            return False
        location = normalize_label(row["location_label"])
        if not location or location in self.ignored_locations:
            return False
        if normalize_label(row["group_label"]) in self.ignored_groups:
            return False
        name = row["product_name"] or ""
        return not any(pattern.search(name) for pattern in self.patterns)

    def macro_group(self, row):
        return self.location_group.get(normalize_label(row["location_label"]))


def _day_weighted(days: dict) -> Decimal:
    """Mean of per-day unavailability percentages over days with data."""
    daily = [Decimal(missing) / total * HUNDRED for total, missing in days.values() if total]
    if not daily:
        return ZERO
    return (sum(daily, Decimal("0")) / len(daily)).quantize(CENT, rounding=ROUND_HALF_UP)


def analyze_stockout(rows, rules) -> StockoutFigures:
    snapshot_filter = SnapshotFilter(rules)

    # Repeated inspections of the same product and location on one day count once; the last one wins.
    unique = {}
    for row in rows:
        if snapshot_filter.keep(row):
            key = (row["inspection_date"], row["product_code"], normalize_label(row["location_label"]))
            unique[key] = row

    # (total, unavailable) per day, per group and overall.
    per_group = {group: defaultdict(lambda: [0, 0]) for group in MACRO_GROUPS}
    overall = defaultdict(lambda: [0, 0])
    unavailable_products = {group: set() for group in MACRO_GROUPS}
    for row in unique.values():
        day = row["inspection_date"]
        missing = 0 if row["is_sellable"] else 1
        overall[day][0] += 1
        overall[day][1] += missing
        group = snapshot_filter.macro_group(row)
        if group not in per_group:
            continue
        per_group[group][day][0] += 1
        per_group[group][day][1] += missing
        if missing:
            unavailable_products[group].add(row["product_code"])

    daily = {}
    for day in sorted(overall):
        entry = {}
        for group in MACRO_GROUPS:
            total, missing = per_group[group].get(day, (0, 0))
            entry[group] = str((Decimal(missing) / total * HUNDRED).quantize(CENT, rounding=ROUND_HALF_UP)) if total else None
        daily[day.isoformat()] = entry

    return StockoutFigures(
        bar_pct=_day_weighted(per_group["bar"]),
        drinks_pct=_day_weighted(per_group["drinks"]),
        kitchen_pct=_day_weighted(per_group["kitchen"]),
        overall_pct=_day_weighted(overall),
        bar_unavailable=len(unavailable_products["bar"]),
        drinks_unavailable=len(unavailable_products["drinks"]),
        kitchen_unavailable=len(unavailable_products["kitchen"]),
        daily=daily,
    )


def compute_stockout(reader, venue_id, period, rules) -> StockoutFigures:
    rows = reader.fetch_all(
        "availability",
        [
            "inspection_date",
            "product_code",
            "product_name",
            "location_label",
            "group_label",
            "is_active",
            "is_sellable",
        ],
        venue_window(venue_id, "inspection_date", period.start, period.end),
    )
    return analyze_stockout(rows, rules.stockout)
