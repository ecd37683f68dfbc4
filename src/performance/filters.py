"""FilterSets for weekly performance listings."""
import django_filters

from performance.models import WeeklyPerformanceRecord


class WeeklyPerformanceRecordFilter(django_filters.FilterSet):
    venue = django_filters.NumberFilter(field_name="venue_id")
    venue_code = django_filters.CharFilter(field_name="venue__code", lookup_expr="iexact")
    year = django_filters.NumberFilter()
    week_from = django_filters.NumberFilter(field_name="week_number", lookup_expr="gte")
    week_to = django_filters.NumberFilter(field_name="week_number", lookup_expr="lte")
    start_after = django_filters.DateFilter(field_name="start_date", lookup_expr="gte")
    start_before = django_filters.DateFilter(field_name="start_date", lookup_expr="lte")

    class Meta:
        model = WeeklyPerformanceRecord
        fields = ["venue", "venue_code", "year", "week_number"]
