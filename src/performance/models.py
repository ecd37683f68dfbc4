"""Weekly performance summary, one row per venue and ISO week."""
from decimal import Decimal

from django.db import models

from core.models import TimeStampedModel


def _money(verbose_name):
    return models.DecimalField(verbose_name, max_digits=14, decimal_places=2, default=Decimal("0.00"))


def _pct(verbose_name):
    return models.DecimalField(verbose_name, max_digits=10, decimal_places=2, default=Decimal("0.00"))


def _score(verbose_name):
    return models.DecimalField(verbose_name, max_digits=5, decimal_places=2, null=True, blank=True)


class WeeklyPerformanceRecord(TimeStampedModel):
    """Derived metrics for one venue over one Monday-Sunday week.

    Every field except ``MANUAL_FIELDS`` and the timestamps is overwritten by
    each recompute. ``MANUAL_FIELDS`` belong to the manual-edit path and are
    never written by the engine.
    """

    MANUAL_FIELDS = ("cogs_amount", "weekly_target", "notes")

    venue = models.ForeignKey(
        "venues.Venue",
        on_delete=models.CASCADE,
        related_name="weekly_performance",
    )
    year = models.PositiveSmallIntegerField("ISO year")
    week_number = models.PositiveSmallIntegerField("ISO week")
    start_date = models.DateField("week start")
    end_date = models.DateField("week end")

    # Revenue
    gross_revenue = _money("gross revenue")
    deferred_revenue = _money("house-account revenue excluded")
    primary_channel_revenue = _money("primary channel revenue")
    event_channel_revenue = _money("event channel revenue")
    ticketing_channel_revenue = _money("ticketing channel revenue")
    net_revenue = _money("net revenue")
    entry_fee_revenue = _money("entry fee revenue")
    in_venue_revenue = _money("in-venue revenue")
    margin_eligible_revenue = _money("margin-eligible revenue")
    commission = _money("commission (repique)")
    tax_amount = _money("sales tax reserve")
    counter_sales_revenue = _money("counter sales revenue")

    # Customers
    customers_served = models.PositiveIntegerField("customers served", default=0)
    new_customers_pct = _pct("new customers %")
    active_customers = models.PositiveIntegerField("active customers", default=0)
    retention_30d_pct = _pct("retention 30 days %")
    retention_60d_pct = _pct("retention 60 days %")

    # Tickets
    average_ticket = _money("average ticket")
    average_entry_ticket = _money("average entry ticket")
    average_in_venue_ticket = _money("average in-venue ticket")

    # Costs
    cogs_amount = _money("cost of goods sold")
    cogs_pct = _pct("COGS % of margin-eligible revenue")
    cogs_global_pct = _pct("COGS % of net revenue")
    labor_cost = _money("labor cost")
    labor_cost_pct = _pct("labor cost %")
    labor_cost_breakdown = models.JSONField("labor cost by category", default=dict, blank=True)
    promotion_cost = _money("promotion cost")
    promotion_cost_pct = _pct("promotion cost %")
    cogs_ledger_amount = _money("COGS booked in the ledger")
    freelance_cost = _money("freelance cost")
    meal_cost = _money("staff meal cost")
    hr_other_cost = _money("HR and other operating cost")
    materials_cost = _money("materials cost")
    maintenance_cost = _money("maintenance cost")
    utensils_cost = _money("utensils cost")

    # Reservations
    reservations_total = models.PositiveIntegerField(default=0)
    reservations_honored = models.PositiveIntegerField(default=0)
    reservation_people_total = models.PositiveIntegerField(default=0)
    reservation_people_honored = models.PositiveIntegerField(default=0)

    # Reputation
    review_count = models.PositiveIntegerField(default=0)
    five_star_reviews = models.PositiveIntegerField(default=0)
    review_average = _score("review average")
    survey_responses = models.PositiveIntegerField(default=0)
    nps_overall = _score("overall score")
    nps_ambience = _score("ambience score")
    nps_service = _score("service score")
    nps_cleanliness = _score("cleanliness score")
    nps_music = _score("music score")
    nps_food = _score("food score")
    nps_drink = _score("drink score")
    nps_price = _score("price score")
    nps_reservations = _score("reservations score")

    # Product operations
    bar_units = models.PositiveIntegerField("bar units", default=0)
    kitchen_units = models.PositiveIntegerField("kitchen units", default=0)
    happy_hour_pct = _pct("happy hour share %")
    drink_mean_fulfillment_minutes = _pct("drink mean fulfillment (min)")
    drink_minor_delays = models.PositiveIntegerField(default=0)
    drink_major_delays = models.PositiveIntegerField(default=0)
    drink_minor_delay_pct = _pct("drink minor delay %")
    drink_major_delay_pct = _pct("drink major delay %")
    drink_late_items = models.JSONField(default=dict, blank=True)
    kitchen_mean_fulfillment_minutes = _pct("kitchen mean fulfillment (min)")
    kitchen_minor_delays = models.PositiveIntegerField(default=0)
    kitchen_major_delays = models.PositiveIntegerField(default=0)
    kitchen_minor_delay_pct = _pct("kitchen minor delay %")
    kitchen_major_delay_pct = _pct("kitchen major delay %")
    kitchen_late_items = models.JSONField(default=dict, blank=True)
    delays_by_weekday = models.JSONField(default=dict, blank=True)
    cancellations = _money("cancellations")
    cancellation_details = models.JSONField(default=dict, blank=True)
    stockout_bar_pct = _pct("bar stockout %")
    stockout_drinks_pct = _pct("drinks stockout %")
    stockout_kitchen_pct = _pct("kitchen stockout %")
    stockout_overall_pct = _pct("overall stockout %")
    stockout_bar = models.PositiveIntegerField("bar products unavailable", default=0)
    stockout_drinks = models.PositiveIntegerField("drinks products unavailable", default=0)
    stockout_kitchen = models.PositiveIntegerField("kitchen products unavailable", default=0)
    stockout_daily = models.JSONField(default=dict, blank=True)
    mix_beverages_pct = _pct("beverages mix %")
    mix_drinks_pct = _pct("drinks mix %")
    mix_kitchen_pct = _pct("kitchen mix %")

    # Sales timing
    revenue_before_19h_pct = _pct("revenue before 19h %")
    revenue_after_22h_pct = _pct("revenue after 22h %")
    thu_to_sun_revenue = _money("Thursday-Sunday revenue")

    # Manual and bookkeeping
    weekly_target = _money("weekly revenue target")
    notes = models.TextField(blank=True, default="")
    degraded_sources = models.JSONField(default=list, blank=True)
    last_recomputed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        unique_together = [["venue", "year", "week_number"]]
        ordering = ["venue", "-year", "-week_number"]
        indexes = [models.Index(fields=["year", "week_number"])]
        verbose_name = "weekly performance record"

    def __str__(self):
        return f"{self.venue} {self.year}-W{self.week_number:02d}"

    @classmethod
    def derived_field_names(cls):
        skip = {"id", "venue", "year", "week_number", "created_at", "updated_at", "last_recomputed_at"}
        skip.update(cls.MANUAL_FIELDS)
        return [f.name for f in cls._meta.concrete_fields if f.name not in skip]
