"""Revenue across the three channels plus visit-level ticket metrics."""
from __future__ import annotations

from dataclasses import asdict, dataclass
from decimal import Decimal

from performance.utils import ZERO, label_set, money, normalize_label, ratio, venue_window
from sources.models import ChannelRevenue


@dataclass
class RevenueFigures:
    gross_revenue: Decimal = ZERO
    deferred_revenue: Decimal = ZERO
    primary_channel_revenue: Decimal = ZERO
    event_channel_revenue: Decimal = ZERO
    ticketing_channel_revenue: Decimal = ZERO
    net_revenue: Decimal = ZERO
    entry_fee_revenue: Decimal = ZERO
    commission: Decimal = ZERO
    in_venue_revenue: Decimal = ZERO
    margin_eligible_revenue: Decimal = ZERO
    customers_served: int = 0
    average_ticket: Decimal = ZERO
    average_entry_ticket: Decimal = ZERO
    average_in_venue_ticket: Decimal = ZERO
    tax_amount: Decimal = ZERO
    counter_sales_revenue: Decimal = ZERO

    def as_fields(self) -> dict:
        return asdict(self)


def _is_counter_sale(row, keywords) -> bool:
    labels = (normalize_label(row.get("sale_type")), normalize_label(row.get("table_label")))
    return any(keyword in label for keyword in keywords for label in labels if label)


def compute_revenue(reader, venue_id, period, rules) -> RevenueFigures:
    house_accounts = label_set(rules.revenue.house_account_methods)

    payments = reader.fetch_all(
        "payments",
        ["payment_method", "net_amount"],
        venue_window(venue_id, "business_date", period.start, period.end),
    )
    primary_gross = sum((row["net_amount"] for row in payments), Decimal("0"))
    deferred = sum(
        (row["net_amount"] for row in payments if normalize_label(row["payment_method"]) in house_accounts),
        Decimal("0"),
    )

    channels = reader.fetch_all(
        "channel_revenue",
        ["channel", "net_amount"],
        venue_window(venue_id, "business_date", period.start, period.end),
    )
    event_total = sum(
        (row["net_amount"] for row in channels if row["channel"] == ChannelRevenue.Channel.EVENT_POS),
        Decimal("0"),
    )
    ticketing_total = sum(
        (row["net_amount"] for row in channels if row["channel"] == ChannelRevenue.Channel.TICKETING),
        Decimal("0"),
    )

    visits = reader.fetch_all(
        "visits",
        ["headcount", "entry_fee_amount", "commission_amount", "payments_amount", "sale_type", "table_label"],
        venue_window(venue_id, "business_date", period.start, period.end),
    )
    entry_fee = sum((row["entry_fee_amount"] for row in visits), Decimal("0"))
    commission = sum((row["commission_amount"] for row in visits), Decimal("0"))
    # Only paying visits carry a trustworthy headcount.
    paying = [row for row in visits if row["payments_amount"] > 0]
    paid_total = sum((row["payments_amount"] for row in paying), Decimal("0"))
    headcount = sum(row["headcount"] for row in paying)
    counter_keywords = [normalize_label(keyword) for keyword in rules.revenue.counter_sale_keywords if keyword]
    counter_sales = sum(
        (row["payments_amount"] for row in visits if _is_counter_sale(row, counter_keywords)),
        Decimal("0"),
    )

    primary = primary_gross - deferred
    net = primary + event_total + ticketing_total
    in_venue = net - entry_fee

    return RevenueFigures(
        gross_revenue=money(primary_gross + event_total + ticketing_total),
        deferred_revenue=money(deferred),
        primary_channel_revenue=money(primary),
        event_channel_revenue=money(event_total),
        ticketing_channel_revenue=money(ticketing_total),
        net_revenue=money(net),
        entry_fee_revenue=money(entry_fee),
        commission=money(commission),
        in_venue_revenue=money(in_venue),
        margin_eligible_revenue=money(in_venue - commission),
        customers_served=headcount,
        average_ticket=money(ratio(paid_total, headcount)),
        average_entry_ticket=money(ratio(entry_fee, headcount)),
        average_in_venue_ticket=money(ratio(in_venue, headcount)),
        tax_amount=money(net * rules.revenue.tax_rate),
        counter_sales_revenue=money(counter_sales),
    )
