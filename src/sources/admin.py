"""Admin configuration for raw sources (read-only)."""
from django.contrib import admin

from sources.models import (
    Cancellation,
    ChannelRevenue,
    ExpenseEntry,
    HourlyRevenue,
    PaymentLine,
    PreparationTiming,
    ProductAvailabilitySnapshot,
    Reservation,
    Review,
    SaleLine,
    SurveyResponse,
    VisitPeriod,
)


class ReadOnlySourceAdmin(admin.ModelAdmin):
    list_select_related = ("venue",)
    list_filter = ("venue",)

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False


@admin.register(PaymentLine)
class PaymentLineAdmin(ReadOnlySourceAdmin):
    list_display = ("venue", "business_date", "payment_method", "gross_amount", "net_amount")
    list_filter = ("venue", "payment_method")
    date_hierarchy = "business_date"


@admin.register(ChannelRevenue)
class ChannelRevenueAdmin(ReadOnlySourceAdmin):
    list_display = ("venue", "business_date", "channel", "net_amount")
    list_filter = ("venue", "channel")
    date_hierarchy = "business_date"


@admin.register(VisitPeriod)
class VisitPeriodAdmin(ReadOnlySourceAdmin):
    list_display = ("venue", "business_date", "headcount", "entry_fee_amount", "payments_amount")
    date_hierarchy = "business_date"
    search_fields = ("customer_phone",)


@admin.register(SaleLine)
class SaleLineAdmin(ReadOnlySourceAdmin):
    list_display = ("venue", "business_date", "location_label", "group_label", "product_name", "quantity", "amount")
    list_filter = ("venue", "location_label")
    date_hierarchy = "business_date"
    search_fields = ("product_name",)


@admin.register(HourlyRevenue)
class HourlyRevenueAdmin(ReadOnlySourceAdmin):
    list_display = ("venue", "business_date", "hour", "amount")
    date_hierarchy = "business_date"


@admin.register(Cancellation)
class CancellationAdmin(ReadOnlySourceAdmin):
    list_display = ("venue", "business_date", "product_name", "reason", "amount")
    date_hierarchy = "business_date"


@admin.register(ExpenseEntry)
class ExpenseEntryAdmin(ReadOnlySourceAdmin):
    list_display = ("venue", "accrual_date", "category_label", "amount")
    list_filter = ("venue", "category_label")
    date_hierarchy = "accrual_date"
    search_fields = ("category_label", "description")


@admin.register(ProductAvailabilitySnapshot)
class ProductAvailabilitySnapshotAdmin(ReadOnlySourceAdmin):
    list_display = ("venue", "inspection_date", "product_name", "location_label", "is_active", "is_sellable")
    list_filter = ("venue", "location_label", "is_sellable")
    date_hierarchy = "inspection_date"
    search_fields = ("product_name", "product_code")


@admin.register(PreparationTiming)
class PreparationTimingAdmin(ReadOnlySourceAdmin):
    list_display = (
        "venue",
        "business_date",
        "category",
        "location_label",
        "product_name",
        "launch_to_ready_seconds",
        "start_to_ready_seconds",
    )
    list_filter = ("venue", "category")
    date_hierarchy = "business_date"


@admin.register(Reservation)
class ReservationAdmin(ReadOnlySourceAdmin):
    list_display = ("venue", "reservation_date", "status", "no_show", "people")
    list_filter = ("venue", "status", "no_show")
    date_hierarchy = "reservation_date"


@admin.register(Review)
class ReviewAdmin(ReadOnlySourceAdmin):
    list_display = ("venue", "review_date", "star_rating", "average_rating")
    list_filter = ("venue", "star_rating")
    date_hierarchy = "review_date"


@admin.register(SurveyResponse)
class SurveyResponseAdmin(ReadOnlySourceAdmin):
    list_display = ("venue", "survey_date", "overall", "service", "food", "drink")
    date_hierarchy = "survey_date"
