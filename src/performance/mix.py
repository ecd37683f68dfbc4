"""Sales mix by location category, units produced and happy-hour share."""
from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from performance.utils import ZERO, money, normalize_label, percent, venue_window

MIX_CATEGORIES = ("beverages", "kitchen", "drinks")


@dataclass
class MixFigures:
    beverages_revenue: Decimal = ZERO
    kitchen_revenue: Decimal = ZERO
    drinks_revenue: Decimal = ZERO
    beverages_pct: Decimal = ZERO
    kitchen_pct: Decimal = ZERO
    drinks_pct: Decimal = ZERO
    bar_units: int = 0
    kitchen_units: int = 0
    happy_hour_pct: Decimal = ZERO

    def as_fields(self) -> dict:
        return {
            "mix_beverages_pct": self.beverages_pct,
            "mix_kitchen_pct": self.kitchen_pct,
            "mix_drinks_pct": self.drinks_pct,
            "bar_units": self.bar_units,
            "kitchen_units": self.kitchen_units,
            "happy_hour_pct": self.happy_hour_pct,
        }


def location_lookup(rules) -> dict:
    lookup = {}
    for category, locations in rules.category_locations:
        for location in locations:
            lookup.setdefault(normalize_label(location), category)
    return lookup


def _contains_any(label: str, needles) -> bool:
    return any(needle in label for needle in needles)


def _units(value: Decimal) -> int:
    return int(value.to_integral_value(rounding=ROUND_HALF_UP))


def classify_sales(rows, rules) -> MixFigures:
    lookup = location_lookup(rules)
    revenue = {category: Decimal("0") for category in MIX_CATEGORIES}
    for row in rows:
        if row["amount"] <= 0:
            continue
        category = lookup.get(normalize_label(row["location_label"]))
        if category in revenue:
            revenue[category] += row["amount"]
    classified = sum(revenue.values(), Decimal("0"))

    supply = normalize_label(rules.supply_group_keyword)
    happy_hour = normalize_label(rules.happy_hour_group)
    bar_groups = [normalize_label(group) for group in rules.bar_groups]
    kitchen_groups = [normalize_label(group) for group in rules.kitchen_groups]
    bar_units = Decimal("0")
    kitchen_units = Decimal("0")
    sold_units = Decimal("0")
    happy_hour_units = Decimal("0")
    for row in rows:
        group = normalize_label(row["group_label"])
        if supply and supply in group:
            continue
        quantity = row["quantity"]
        sold_units += quantity
        if group == happy_hour:
            happy_hour_units += quantity
        if _contains_any(group, bar_groups):
            bar_units += quantity
        elif _contains_any(group, kitchen_groups):
            kitchen_units += quantity

    return MixFigures(
        beverages_revenue=money(revenue["beverages"]),
        kitchen_revenue=money(revenue["kitchen"]),
        drinks_revenue=money(revenue["drinks"]),
        beverages_pct=percent(revenue["beverages"], classified),
        kitchen_pct=percent(revenue["kitchen"], classified),
        drinks_pct=percent(revenue["drinks"], classified),
        bar_units=_units(bar_units),
        kitchen_units=_units(kitchen_units),
        happy_hour_pct=percent(happy_hour_units, sold_units),
    )


def compute_mix(reader, venue_id, period, rules) -> MixFigures:
    rows = reader.fetch_all(
        "sale_lines",
        ["location_label", "group_label", "quantity", "amount"],
        venue_window(venue_id, "business_date", period.start, period.end),
    )
    return classify_sales(rows, rules.mix)
