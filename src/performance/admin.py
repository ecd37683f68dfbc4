"""Admin configuration for weekly performance records."""
from django.contrib import admin, messages

from performance.engine import recompute_week
from performance.exceptions import PerformanceError
from performance.models import WeeklyPerformanceRecord


@admin.register(WeeklyPerformanceRecord)
class WeeklyPerformanceRecordAdmin(admin.ModelAdmin):
    list_display = (
        "venue",
        "year",
        "week_number",
        "start_date",
        "net_revenue",
        "customers_served",
        "labor_cost_pct",
        "stockout_overall_pct",
        "last_recomputed_at",
    )
    list_filter = ("venue", "year")
    search_fields = ("venue__name", "venue__code")
    date_hierarchy = "start_date"
    list_select_related = ("venue",)
    actions = ["recompute_selected"]

    def get_readonly_fields(self, request, obj=None):
        # Only the manual whitelist stays editable.
        return WeeklyPerformanceRecord.derived_field_names() + ["last_recomputed_at", "created_at", "updated_at"]

    @admin.action(description="Recompute selected weeks")
    def recompute_selected(self, request, queryset):
        done = 0
        for record in queryset.select_related("venue"):
            try:
                recompute_week(record.venue, record.year, record.week_number)
            except PerformanceError as exc:
                self.message_user(request, f"{record}: {exc}", level=messages.ERROR)
                continue
            done += 1
        self.message_user(request, f"{done} week(s) recomputed.", level=messages.SUCCESS)
