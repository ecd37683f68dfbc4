"""Small numeric and text helpers shared by the aggregators."""
from __future__ import annotations

import unicodedata
from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from sources.reader import eq, gte, lte

CENT = Decimal("0.01")
HUNDRED = Decimal("100")
ZERO = Decimal("0.00")


def _safe_decimal(value, default="0.00"):
    if value is None:
        return Decimal(default)
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def money(value) -> Decimal:
    return _safe_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def ratio(numerator, denominator) -> Decimal:
    """Unrounded ``numerator / denominator``; zero when the denominator is zero."""
    denominator = _safe_decimal(denominator)
    if denominator == 0:
        return Decimal("0")
    return _safe_decimal(numerator) / denominator


def percent(numerator, denominator) -> Decimal:
    return (ratio(numerator, denominator) * HUNDRED).quantize(CENT, rounding=ROUND_HALF_UP)


def mean(values) -> Decimal | None:
    values = [_safe_decimal(v) for v in values]
    if not values:
        return None
    return (sum(values, Decimal("0")) / len(values)).quantize(CENT, rounding=ROUND_HALF_UP)


def normalize_label(value) -> str:
    """Trim, casefold and strip accents so "Provisão " matches "PROVISAO"."""
    text = unicodedata.normalize("NFKD", str(value or "").strip())
    text = "".join(ch for ch in text if not unicodedata.combining(ch))
    return " ".join(text.casefold().split())


def label_set(labels) -> frozenset:
    return frozenset(normalize_label(label) for label in labels)


def venue_window(venue_id: int, date_column: str, start: date, end: date) -> list:
    return [
        eq("venue_id", venue_id),
        gte(date_column, start),
        lte(date_column, end),
    ]


WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")


def weekday_name(value: date) -> str:
    return WEEKDAYS[value.weekday()]
