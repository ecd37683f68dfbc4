"""Serializers for weekly performance API payloads."""
from rest_framework import serializers

from performance.models import WeeklyPerformanceRecord


class WeeklyPerformanceRecordSerializer(serializers.ModelSerializer):
    venue_name = serializers.CharField(source="venue.name", read_only=True)
    venue_code = serializers.CharField(source="venue.code", read_only=True)

    class Meta:
        model = WeeklyPerformanceRecord
        exclude = ["created_at"]
        read_only_fields = [
            field.name
            for field in WeeklyPerformanceRecord._meta.concrete_fields
            if field.name not in WeeklyPerformanceRecord.MANUAL_FIELDS and field.name != "created_at"
        ]


class RecomputeRequestSerializer(serializers.Serializer):
    venue_id = serializers.IntegerField(required=False, min_value=1)
    year = serializers.IntegerField(required=False)
    week_number = serializers.IntegerField(required=False)
    recompute_all = serializers.BooleanField(required=False, default=False)
    limit = serializers.IntegerField(required=False, min_value=1, max_value=520)
    create_missing = serializers.BooleanField(required=False, default=False)

    def validate(self, attrs):
        if ("year" in attrs) != ("week_number" in attrs):
            raise serializers.ValidationError("year and week_number must be given together.")
        return attrs
