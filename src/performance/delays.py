"""Fulfillment latency and late-order classification per channel."""
from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal

from performance.utils import CENT, WEEKDAYS, ZERO, label_set, normalize_label, percent, venue_window, weekday_name

SIXTY = Decimal("60")


@dataclass
class ChannelDelays:
    valid_count: int = 0
    mean_minutes: Decimal = ZERO
    minor_count: int = 0
    major_count: int = 0
    minor_pct: Decimal = ZERO
    major_pct: Decimal = ZERO
    late_items: dict = field(default_factory=dict)
    by_weekday: dict = field(default_factory=dict)


@dataclass
class DelayFigures:
    drink: ChannelDelays = field(default_factory=ChannelDelays)
    kitchen: ChannelDelays = field(default_factory=ChannelDelays)

    def as_fields(self) -> dict:
        data = {}
        for prefix, channel in (("drink", self.drink), ("kitchen", self.kitchen)):
            data[f"{prefix}_mean_fulfillment_minutes"] = channel.mean_minutes
            data[f"{prefix}_minor_delays"] = channel.minor_count
            data[f"{prefix}_major_delays"] = channel.major_count
            data[f"{prefix}_minor_delay_pct"] = channel.minor_pct
            data[f"{prefix}_major_delay_pct"] = channel.major_pct
            data[f"{prefix}_late_items"] = channel.late_items
        data["delays_by_weekday"] = {
            "drink": self.drink.by_weekday,
            "kitchen": self.kitchen.by_weekday,
        }
        return data


def belongs_to(row, channel) -> bool:
    """Category decides when present; the location label otherwise."""
    category = normalize_label(row.get("category"))
    if category:
        return category == normalize_label(channel.category)
    return normalize_label(row.get("location_label")) in label_set(channel.locations)


def _minutes(seconds) -> Decimal:
    return Decimal(seconds) / SIXTY


def classify_channel(rows, channel) -> ChannelDelays:
    """Classify timing rows for one channel.

    Readings that are missing or not strictly positive are discarded. Every
    remaining reading counts toward the mean; a reading at or above the major
    threshold is also counted as minor.
    """
    valid = [
        row
        for row in rows
        if row.get(channel.elapsed_column) is not None and row[channel.elapsed_column] > 0
    ]
    if not valid:
        return ChannelDelays()

    minor_seconds = channel.minor_minutes * 60
    major_seconds = channel.major_minutes * 60
    total_minutes = sum((_minutes(row[channel.elapsed_column]) for row in valid), Decimal("0"))

    minor = 0
    major = 0
    counts = {day: {"minor": 0, "major": 0} for day in WEEKDAYS}
    late = defaultdict(lambda: defaultdict(list))
    for row in valid:
        elapsed = row[channel.elapsed_column]
        day = weekday_name(row["business_date"])
        if elapsed >= minor_seconds:
            minor += 1
            counts[day]["minor"] += 1
        if elapsed >= major_seconds:
            major += 1
            counts[day]["major"] += 1
            late[day][row.get("product_name") or "?"].append(_minutes(elapsed))

    late_items = {}
    for day in WEEKDAYS:
        if day not in late:
            continue
        buckets = []
        for product, minutes in late[day].items():
            buckets.append(
                {
                    "product": product,
                    "count": len(minutes),
                    "mean_minutes": (sum(minutes, Decimal("0")) / len(minutes)).quantize(CENT, rounding=ROUND_HALF_UP),
                }
            )
        buckets.sort(key=lambda bucket: (-bucket["mean_minutes"], bucket["product"]))
        late_items[day] = [{**bucket, "mean_minutes": str(bucket["mean_minutes"])} for bucket in buckets]

    return ChannelDelays(
        valid_count=len(valid),
        mean_minutes=(total_minutes / len(valid)).quantize(CENT, rounding=ROUND_HALF_UP),
        minor_count=minor,
        major_count=major,
        minor_pct=percent(minor, len(valid)),
        major_pct=percent(major, len(valid)),
        late_items=late_items,
        by_weekday=counts,
    )


def compute_delays(reader, venue_id, period, rules) -> DelayFigures:
    rows = reader.fetch_all(
        "preparation_timing",
        [
            "business_date",
            "location_label",
            "category",
            "product_name",
            "launch_to_ready_seconds",
            "start_to_ready_seconds",
        ],
        venue_window(venue_id, "business_date", period.start, period.end),
    )

    def classify(channel):
        return classify_channel([row for row in rows if belongs_to(row, channel)], channel)

    return DelayFigures(drink=classify(rules.delays.drink), kitchen=classify(rules.delays.kitchen))
