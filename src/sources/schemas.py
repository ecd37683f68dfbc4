"""Typed row schemas for every readable source.

The reader coerces raw values through these schemas so downstream code
only ever sees ``Decimal``/``int``/``date``/``str``/``bool`` values.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, InvalidOperation

from django.apps import apps

DECIMAL = "decimal"
INT = "int"
DATE = "date"
STR = "str"
BOOL = "bool"


def _to_decimal(value):
    if value is None or value == "":
        return Decimal("0.00")
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        return Decimal("0.00")


def _to_int(value):
    if value is None or value == "":
        return 0
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def _to_date(value):
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        return None


def _to_str(value):
    if value is None:
        return ""
    return str(value)


def _to_bool(value):
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).strip().lower() in {"1", "true", "t", "yes", "s", "y"}


COERCERS = {
    DECIMAL: _to_decimal,
    INT: _to_int,
    DATE: _to_date,
    STR: _to_str,
    BOOL: _to_bool,
}


@dataclass(frozen=True)
class SourceSchema:
    name: str
    model_label: str
    date_column: str
    columns: dict
    # Columns left as ``None`` when missing instead of the type default.
    nullable: frozenset = frozenset()

    @property
    def model(self):
        return apps.get_model(self.model_label)

    def coerce_row(self, raw: dict) -> dict:
        row = {}
        for column, value in raw.items():
            if value is None and column in self.nullable:
                row[column] = None
                continue
            row[column] = COERCERS[self.columns[column]](value)
        return row


_SURVEY_SCORES = (
    "overall",
    "ambience",
    "service",
    "cleanliness",
    "music",
    "food",
    "drink",
    "price",
    "reservations",
)

SOURCES = {
    schema.name: schema
    for schema in (
        SourceSchema(
            name="payments",
            model_label="sources.PaymentLine",
            date_column="business_date",
            columns={
                "id": INT,
                "venue_id": INT,
                "business_date": DATE,
                "payment_method": STR,
                "gross_amount": DECIMAL,
                "net_amount": DECIMAL,
            },
        ),
        SourceSchema(
            name="channel_revenue",
            model_label="sources.ChannelRevenue",
            date_column="business_date",
            columns={
                "id": INT,
                "venue_id": INT,
                "business_date": DATE,
                "channel": STR,
                "net_amount": DECIMAL,
            },
        ),
        SourceSchema(
            name="visits",
            model_label="sources.VisitPeriod",
            date_column="business_date",
            columns={
                "id": INT,
                "venue_id": INT,
                "business_date": DATE,
                "headcount": INT,
                "entry_fee_amount": DECIMAL,
                "commission_amount": DECIMAL,
                "payments_amount": DECIMAL,
                "customer_phone": STR,
                "sale_type": STR,
                "table_label": STR,
            },
        ),
        SourceSchema(
            name="sale_lines",
            model_label="sources.SaleLine",
            date_column="business_date",
            columns={
                "id": INT,
                "venue_id": INT,
                "business_date": DATE,
                "location_label": STR,
                "group_label": STR,
                "product_name": STR,
                "quantity": DECIMAL,
                "amount": DECIMAL,
            },
        ),
        SourceSchema(
            name="hourly_revenue",
            model_label="sources.HourlyRevenue",
            date_column="business_date",
            columns={
                "id": INT,
                "venue_id": INT,
                "business_date": DATE,
                "hour": INT,
                "amount": DECIMAL,
            },
        ),
        SourceSchema(
            name="cancellations",
            model_label="sources.Cancellation",
            date_column="business_date",
            columns={
                "id": INT,
                "venue_id": INT,
                "business_date": DATE,
                "product_name": STR,
                "reason": STR,
                "amount": DECIMAL,
            },
        ),
        SourceSchema(
            name="expenses",
            model_label="sources.ExpenseEntry",
            date_column="accrual_date",
            columns={
                "id": INT,
                "venue_id": INT,
                "accrual_date": DATE,
                "category_label": STR,
                "description": STR,
                "amount": DECIMAL,
            },
        ),
        SourceSchema(
            name="availability",
            model_label="sources.ProductAvailabilitySnapshot",
            date_column="inspection_date",
            columns={
                "id": INT,
                "venue_id": INT,
                "inspection_date": DATE,
                "product_code": STR,
                "product_name": STR,
                "location_label": STR,
                "group_label": STR,
                "is_active": BOOL,
                "is_sellable": BOOL,
            },
        ),
        SourceSchema(
            name="preparation_timing",
            model_label="sources.PreparationTiming",
            date_column="business_date",
            columns={
                "id": INT,
                "venue_id": INT,
                "business_date": DATE,
                "location_label": STR,
                "category": STR,
                "product_name": STR,
                "quantity": INT,
                "launch_to_ready_seconds": INT,
                "start_to_ready_seconds": INT,
            },
            nullable=frozenset({"launch_to_ready_seconds", "start_to_ready_seconds"}),
        ),
        SourceSchema(
            name="reservations",
            model_label="sources.Reservation",
            date_column="reservation_date",
            columns={
                "id": INT,
                "venue_id": INT,
                "reservation_date": DATE,
                "status": STR,
                "no_show": BOOL,
                "people": INT,
            },
        ),
        SourceSchema(
            name="reviews",
            model_label="sources.Review",
            date_column="review_date",
            columns={
                "id": INT,
                "venue_id": INT,
                "review_date": DATE,
                "star_rating": INT,
                "average_rating": DECIMAL,
            },
            nullable=frozenset({"average_rating"}),
        ),
        SourceSchema(
            name="surveys",
            model_label="sources.SurveyResponse",
            date_column="survey_date",
            columns={
                "id": INT,
                "venue_id": INT,
                "survey_date": DATE,
                **{score: DECIMAL for score in _SURVEY_SCORES},
            },
            nullable=frozenset(_SURVEY_SCORES),
        ),
    )
}


def get_schema(source: str) -> SourceSchema:
    try:
        return SOURCES[source]
    except KeyError:
        raise ValueError(f"Unknown source {source!r}.") from None
