"""Reservations, public reviews and satisfaction survey scores."""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from performance.utils import label_set, mean, normalize_label, venue_window

SURVEY_FIELDS = (
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


@dataclass
class GuestFigures:
    reservations_total: int = 0
    reservations_honored: int = 0
    reservation_people_total: int = 0
    reservation_people_honored: int = 0
    review_count: int = 0
    five_star_reviews: int = 0
    review_average: Decimal | None = None
    survey_responses: int = 0
    nps_overall: Decimal | None = None
    nps_ambience: Decimal | None = None
    nps_service: Decimal | None = None
    nps_cleanliness: Decimal | None = None
    nps_music: Decimal | None = None
    nps_food: Decimal | None = None
    nps_drink: Decimal | None = None
    nps_price: Decimal | None = None
    nps_reservations: Decimal | None = None

    def as_fields(self) -> dict:
        return dict(self.__dict__)


def is_honored(row, rules) -> bool:
    status = normalize_label(row["status"])
    if status in label_set(rules.seated_statuses):
        return True
    return status in label_set(rules.confirmed_statuses) and not row["no_show"]


def compute_guest(reader, venue_id, period, rules) -> GuestFigures:
    guest_rules = rules.guest

    reservations = reader.fetch_all(
        "reservations",
        ["status", "no_show", "people"],
        venue_window(venue_id, "reservation_date", period.start, period.end),
    )
    honored = [row for row in reservations if is_honored(row, guest_rules)]

    reviews = reader.fetch_all(
        "reviews",
        ["star_rating", "average_rating"],
        venue_window(venue_id, "review_date", period.start, period.end),
    )

    surveys = reader.fetch_all(
        "surveys",
        list(SURVEY_FIELDS),
        venue_window(venue_id, "survey_date", period.start, period.end),
    )
    scores = {
        f"nps_{name}": mean(row[name] for row in surveys if row[name] is not None)
        for name in SURVEY_FIELDS
    }

    return GuestFigures(
        reservations_total=len(reservations),
        reservations_honored=len(honored),
        reservation_people_total=sum(row["people"] for row in reservations),
        reservation_people_honored=sum(row["people"] for row in honored),
        review_count=len(reviews),
        five_star_reviews=sum(1 for row in reviews if row["star_rating"] == guest_rules.five_star_rating),
        review_average=mean(row["average_rating"] for row in reviews if row["average_rating"] is not None),
        survey_responses=len(surveys),
        **scores,
    )
