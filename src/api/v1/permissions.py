"""Custom DRF permissions for the venue operations API."""
from rest_framework.permissions import SAFE_METHODS, BasePermission


class CanRecomputePerformance(BasePermission):
    """Staff users, or users allowed to change weekly performance records."""

    message = "You are not allowed to recompute weekly performance."

    def has_permission(self, request, view):
        user = request.user
        if not (user and user.is_authenticated):
            return False
        return user.is_staff or user.has_perm("performance.change_weeklyperformancerecord")


class CanViewPerformance(BasePermission):
    def has_permission(self, request, view):
        user = request.user
        if not (user and user.is_authenticated):
            return False
        if request.method in SAFE_METHODS:
            return user.is_staff or user.has_perm("performance.view_weeklyperformancerecord")
        return user.is_staff or user.has_perm("performance.change_weeklyperformancerecord")
