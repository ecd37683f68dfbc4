"""Raw rows exported by the venues' operational systems.

Every row is an immutable historical fact scoped to one venue and one
business date. The weekly performance engine only reads them.
"""
from decimal import Decimal

from django.db import models

from core.models import TimeStampedModel


class RawSourceRow(TimeStampedModel):
    venue = models.ForeignKey(
        "venues.Venue",
        on_delete=models.CASCADE,
        related_name="%(class)s_rows",
    )

    class Meta:
        abstract = True


class PaymentLine(RawSourceRow):
    """Payment line from the primary point-of-sale channel."""

    business_date = models.DateField(db_index=True)
    payment_method = models.CharField(max_length=100, blank=True, default="")
    gross_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    net_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))

    class Meta:
        ordering = ["business_date", "id"]
        indexes = [models.Index(fields=["venue", "business_date"])]

    def __str__(self):
        return f"{self.venue_id} {self.business_date} {self.payment_method} {self.net_amount}"


class ChannelRevenue(RawSourceRow):
    """Daily total from a secondary revenue channel."""

    class Channel(models.TextChoices):
        EVENT_POS = "EVENT_POS", "Event point-of-sale"
        TICKETING = "TICKETING", "Ticketing"

    business_date = models.DateField(db_index=True)
    channel = models.CharField(max_length=20, choices=Channel.choices, db_index=True)
    net_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))

    class Meta:
        ordering = ["business_date", "channel"]
        indexes = [models.Index(fields=["venue", "business_date"])]

    def __str__(self):
        return f"{self.venue_id} {self.business_date} {self.channel} {self.net_amount}"


class VisitPeriod(RawSourceRow):
    """One customer visit (table/tab) with headcount and payment totals."""

    business_date = models.DateField(db_index=True)
    headcount = models.PositiveIntegerField(default=0)
    entry_fee_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    commission_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    payments_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    customer_phone = models.CharField(max_length=40, blank=True, default="")
    sale_type = models.CharField(max_length=60, blank=True, default="")
    table_label = models.CharField(max_length=60, blank=True, default="")

    class Meta:
        ordering = ["business_date", "id"]
        indexes = [models.Index(fields=["venue", "business_date"])]

    def __str__(self):
        return f"{self.venue_id} {self.business_date} x{self.headcount}"


class SaleLine(RawSourceRow):
    """Item-level sale aggregated per product, location and day."""

    business_date = models.DateField(db_index=True)
    location_label = models.CharField(max_length=100, blank=True, default="")
    group_label = models.CharField(max_length=100, blank=True, default="")
    product_name = models.CharField(max_length=255, blank=True, default="")
    quantity = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))

    class Meta:
        ordering = ["business_date", "id"]
        indexes = [models.Index(fields=["venue", "business_date"])]

    def __str__(self):
        return f"{self.venue_id} {self.business_date} {self.product_name}"


class HourlyRevenue(RawSourceRow):
    """Revenue booked during one hour of a business day."""

    business_date = models.DateField(db_index=True)
    hour = models.PositiveSmallIntegerField()
    amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))

    class Meta:
        ordering = ["business_date", "hour"]
        indexes = [models.Index(fields=["venue", "business_date"])]

    def __str__(self):
        return f"{self.venue_id} {self.business_date} {self.hour}h"


class Cancellation(RawSourceRow):
    business_date = models.DateField(db_index=True)
    product_name = models.CharField(max_length=255, blank=True, default="")
    reason = models.CharField(max_length=255, blank=True, default="")
    amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))

    class Meta:
        ordering = ["business_date", "id"]
        indexes = [models.Index(fields=["venue", "business_date"])]

    def __str__(self):
        return f"{self.venue_id} {self.business_date} -{self.amount}"


class ExpenseEntry(RawSourceRow):
    """Expense ledger entry; amounts are signed as exported."""

    accrual_date = models.DateField(db_index=True)
    category_label = models.CharField(max_length=150)
    description = models.CharField(max_length=255, blank=True, default="")
    amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))

    class Meta:
        ordering = ["accrual_date", "id"]
        indexes = [models.Index(fields=["venue", "accrual_date", "category_label"])]

    def __str__(self):
        return f"{self.venue_id} {self.accrual_date} {self.category_label} {self.amount}"


class ProductAvailabilitySnapshot(RawSourceRow):
    """Daily catalog inspection: is the product on sale at that location?"""

    inspection_date = models.DateField(db_index=True)
    product_code = models.CharField(max_length=64)
    product_name = models.CharField(max_length=255)
    location_label = models.CharField(max_length=100, blank=True, default="")
    group_label = models.CharField(max_length=100, blank=True, default="")
    is_active = models.BooleanField(default=True)
    is_sellable = models.BooleanField(default=True)

    class Meta:
        ordering = ["inspection_date", "product_code"]
        indexes = [models.Index(fields=["venue", "inspection_date"])]

    def __str__(self):
        return f"{self.venue_id} {self.inspection_date} {self.product_name}"


class PreparationTiming(RawSourceRow):
    """Order item timing captured by the kitchen/bar display system."""

    class Category(models.TextChoices):
        FOOD = "food", "Food"
        DRINK = "drink", "Drink"

    business_date = models.DateField(db_index=True)
    location_label = models.CharField(max_length=100, blank=True, default="")
    category = models.CharField(max_length=10, choices=Category.choices, blank=True, default="")
    product_name = models.CharField(max_length=255, blank=True, default="")
    quantity = models.PositiveIntegerField(default=1)
    # Order launch to item ready.
    launch_to_ready_seconds = models.IntegerField(null=True, blank=True)
    # Preparation start to item ready.
    start_to_ready_seconds = models.IntegerField(null=True, blank=True)

    class Meta:
        ordering = ["business_date", "id"]
        indexes = [models.Index(fields=["venue", "business_date"])]

    def __str__(self):
        return f"{self.venue_id} {self.business_date} {self.product_name}"


class Reservation(RawSourceRow):
    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        CONFIRMED = "confirmed", "Confirmed"
        SEATED = "seated", "Seated"
        CANCELLED = "cancelled", "Cancelled"

    reservation_date = models.DateField(db_index=True)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING)
    no_show = models.BooleanField(default=False)
    people = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["reservation_date", "id"]
        indexes = [models.Index(fields=["venue", "reservation_date"])]

    def __str__(self):
        return f"{self.venue_id} {self.reservation_date} {self.status} x{self.people}"


class Review(RawSourceRow):
    review_date = models.DateField(db_index=True)
    star_rating = models.PositiveSmallIntegerField()
    average_rating = models.DecimalField(max_digits=4, decimal_places=2, null=True, blank=True)

    class Meta:
        ordering = ["review_date", "id"]
        indexes = [models.Index(fields=["venue", "review_date"])]

    def __str__(self):
        return f"{self.venue_id} {self.review_date} {self.star_rating}*"


class SurveyResponse(RawSourceRow):
    """Satisfaction survey answer; each category score is optional."""

    survey_date = models.DateField(db_index=True)
    overall = models.DecimalField(max_digits=5, decimal_places=2, null=True, blank=True)
    ambience = models.DecimalField(max_digits=5, decimal_places=2, null=True, blank=True)
    service = models.DecimalField(max_digits=5, decimal_places=2, null=True, blank=True)
    cleanliness = models.DecimalField(max_digits=5, decimal_places=2, null=True, blank=True)
    music = models.DecimalField(max_digits=5, decimal_places=2, null=True, blank=True)
    food = models.DecimalField(max_digits=5, decimal_places=2, null=True, blank=True)
    drink = models.DecimalField(max_digits=5, decimal_places=2, null=True, blank=True)
    price = models.DecimalField(max_digits=5, decimal_places=2, null=True, blank=True)
    reservations = models.DecimalField(max_digits=5, decimal_places=2, null=True, blank=True)

    class Meta:
        ordering = ["survey_date", "id"]
        indexes = [models.Index(fields=["venue", "survey_date"])]

    def __str__(self):
        return f"{self.venue_id} {self.survey_date} survey"
