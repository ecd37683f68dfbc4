"""REST API endpoints for weekly venue performance."""
import logging

from rest_framework import mixins, status, viewsets
from rest_framework.filters import OrderingFilter
from rest_framework.response import Response
from rest_framework.views import APIView
from django_filters.rest_framework import DjangoFilterBackend

from api.v1.pagination import WeeklyPagination
from api.v1.permissions import CanRecomputePerformance, CanViewPerformance
from performance import batch
from performance.engine import recompute_week
from performance.exceptions import MalformedInput, NotFound
from performance.filters import WeeklyPerformanceRecordFilter
from performance.models import WeeklyPerformanceRecord
from performance.periods import current_week, validate_week
from performance.serializers import RecomputeRequestSerializer, WeeklyPerformanceRecordSerializer
from venues.models import Venue

logger = logging.getLogger("venueops")


class WeeklyPerformanceRecordViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.UpdateModelMixin,
    viewsets.GenericViewSet,
):
    """List and read weekly records; updates only touch the manual fields."""

    queryset = WeeklyPerformanceRecord.objects.select_related("venue")
    serializer_class = WeeklyPerformanceRecordSerializer
    permission_classes = [CanViewPerformance]
    pagination_class = WeeklyPagination
    filter_backends = [DjangoFilterBackend, OrderingFilter]
    filterset_class = WeeklyPerformanceRecordFilter
    ordering_fields = ["year", "week_number", "net_revenue", "start_date"]
    ordering = ["-year", "-week_number"]


class RecomputePerformanceAPIView(APIView):
    """Trigger a recompute.

    Body: ``{venue_id?, year?, week_number?, recompute_all?, limit?, create_missing?}``.
    Without year/week the current ISO week is used; without venue_id every
    active venue is processed.
    """

    permission_classes = [CanRecomputePerformance]
    throttle_scope = "recompute"

    def post(self, request):
        payload = RecomputeRequestSerializer(data=request.data)
        if not payload.is_valid():
            return Response(
                {"success": False, "error": "Invalid request.", "details": payload.errors},
                status=status.HTTP_400_BAD_REQUEST,
            )
        data = payload.validated_data

        if "year" in data:
            try:
                year, week_number = validate_week(data["year"], data["week_number"])
            except MalformedInput as exc:
                return Response({"success": False, "error": str(exc)}, status=status.HTTP_400_BAD_REQUEST)
        else:
            period = current_week()
            year, week_number = period.year, period.week

        venue_id = data.get("venue_id")
        if venue_id and not Venue.objects.filter(pk=venue_id).exists():
            return Response(
                {"success": False, "error": f"Venue {venue_id} does not exist."},
                status=status.HTTP_404_NOT_FOUND,
            )
        venue_ids = [venue_id] if venue_id else list(
            Venue.objects.filter(is_active=True).values_list("pk", flat=True)
        )

        if data["recompute_all"]:
            outcomes = batch.recompute_units(batch.existing_weeks(venue_ids, limit=data.get("limit")))
            return self._batch_response(outcomes)

        if venue_id:
            try:
                record = recompute_week(
                    venue_id,
                    year,
                    week_number,
                    create_missing=data["create_missing"],
                )
            except NotFound as exc:
                return Response({"success": False, "error": str(exc)}, status=status.HTTP_404_NOT_FOUND)
            except MalformedInput as exc:
                return Response({"success": False, "error": str(exc)}, status=status.HTTP_400_BAD_REQUEST)
            logger.info("Week %s/%s recomputed for venue %s by %s.", week_number, year, venue_id, request.user)
            return Response(
                {
                    "success": True,
                    "message": f"Week {week_number}/{year} recomputed.",
                    "data": WeeklyPerformanceRecordSerializer(record).data,
                }
            )

        units = [batch.Unit(pk, year, week_number) for pk in venue_ids]
        outcomes = batch.recompute_units(units, create_missing=data["create_missing"])
        return self._batch_response(outcomes)

    def _batch_response(self, outcomes):
        failed = [outcome for outcome in outcomes if not outcome.success]
        return Response(
            {
                "success": not failed,
                "message": f"{len(outcomes) - len(failed)} of {len(outcomes)} week(s) recomputed.",
                "results": [outcome.as_dict() for outcome in outcomes],
            }
        )
