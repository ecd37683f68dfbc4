from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model
from django.contrib.auth.models import Permission
from django.urls import reverse

from performance.engine import ensure_week
from performance.models import WeeklyPerformanceRecord
from performance.periods import current_week

RECOMPUTE_URL = reverse("api:performance-recompute")
WEEKS_URL = reverse("api:performance-week-list")


def _grant(user, codename):
    user.user_permissions.add(Permission.objects.get(codename=codename))
    return get_user_model().objects.get(pk=user.pk)


@pytest.mark.django_db
def test_recompute_requires_authentication(api_client, venue):
    response = api_client.post(RECOMPUTE_URL, {"venue_id": venue.pk}, format="json")
    assert response.status_code == 401


@pytest.mark.django_db
def test_recompute_requires_change_permission(api_client, plain_user, venue):
    api_client.force_authenticate(user=plain_user)
    response = api_client.post(RECOMPUTE_URL, {"venue_id": venue.pk}, format="json")
    assert response.status_code == 403


@pytest.mark.django_db
def test_user_with_change_permission_may_recompute(api_client, plain_user, revenue_week):
    api_client.force_authenticate(user=_grant(plain_user, "change_weeklyperformancerecord"))
    response = api_client.post(
        RECOMPUTE_URL,
        {"venue_id": revenue_week.pk, "year": 2024, "week_number": 5, "create_missing": True},
        format="json",
    )
    assert response.status_code == 200


@pytest.mark.django_db
def test_recompute_missing_week_is_not_found(staff_client, venue):
    response = staff_client.post(
        RECOMPUTE_URL, {"venue_id": venue.pk, "year": 2024, "week_number": 5}, format="json"
    )
    assert response.status_code == 404
    assert response.data["success"] is False
    assert not WeeklyPerformanceRecord.objects.exists()


@pytest.mark.django_db
def test_recompute_one_week(staff_client, revenue_week):
    response = staff_client.post(
        RECOMPUTE_URL,
        {"venue_id": revenue_week.pk, "year": 2024, "week_number": 5, "create_missing": True},
        format="json",
    )

    assert response.status_code == 200
    assert response.data["success"] is True
    assert response.data["message"] == "Week 5/2024 recomputed."
    data = response.data["data"]
    assert data["venue_code"] == "ORD"
    assert data["net_revenue"] == "9600.00"
    assert data["customers_served"] == 200
    assert data["degraded_sources"] == []


@pytest.mark.django_db
@pytest.mark.parametrize(
    "body",
    [
        {"year": 2024, "week_number": 54},
        {"year": 2024, "week_number": 0},
        {"year": 2024},
        {"week_number": 5},
        {"year": "soon", "week_number": 5},
    ],
)
def test_recompute_rejects_malformed_weeks(staff_client, venue, body):
    response = staff_client.post(RECOMPUTE_URL, {"venue_id": venue.pk, **body}, format="json")
    assert response.status_code == 400
    assert response.data["success"] is False


@pytest.mark.django_db
def test_recompute_unknown_venue(staff_client):
    response = staff_client.post(
        RECOMPUTE_URL, {"venue_id": 999, "year": 2024, "week_number": 5}, format="json"
    )
    assert response.status_code == 404


@pytest.mark.django_db
def test_recompute_without_venue_runs_every_active_venue(staff_client, venue, other_venue):
    response = staff_client.post(RECOMPUTE_URL, {"create_missing": True}, format="json")

    assert response.status_code == 200
    assert response.data["success"] is True
    assert len(response.data["results"]) == 2
    period = current_week()
    assert WeeklyPerformanceRecord.objects.filter(year=period.year, week_number=period.week).count() == 2


@pytest.mark.django_db
def test_recompute_all_existing_weeks(staff_client, venue):
    for week in (1, 2, 3):
        ensure_week(venue, 2024, week)

    response = staff_client.post(
        RECOMPUTE_URL, {"venue_id": venue.pk, "recompute_all": True, "limit": 2}, format="json"
    )

    assert response.status_code == 200
    assert response.data["message"] == "2 of 2 week(s) recomputed."
    assert [row["week_number"] for row in response.data["results"]] == [3, 2]


@pytest.mark.django_db
def test_list_weeks_filtered_by_venue_code(staff_client, venue, other_venue):
    ensure_week(venue, 2024, 4)
    ensure_week(venue, 2024, 5)
    ensure_week(other_venue, 2024, 5)

    response = staff_client.get(WEEKS_URL, {"venue_code": "ord"})

    assert response.status_code == 200
    assert response.data["count"] == 2
    assert [row["week_number"] for row in response.data["results"]] == [5, 4]


@pytest.mark.django_db
def test_listing_requires_view_permission(api_client, plain_user, venue):
    ensure_week(venue, 2024, 5)
    api_client.force_authenticate(user=plain_user)
    assert api_client.get(WEEKS_URL).status_code == 403

    api_client.force_authenticate(user=_grant(plain_user, "view_weeklyperformancerecord"))
    assert api_client.get(WEEKS_URL).status_code == 200


@pytest.mark.django_db
def test_patch_only_changes_manual_fields(staff_client, venue):
    record, _ = ensure_week(venue, 2024, 5)
    url = reverse("api:performance-week-detail", args=[record.pk])

    response = staff_client.patch(
        url,
        {"notes": "Rain all weekend", "cogs_amount": "1500.00", "net_revenue": "99999.00"},
        format="json",
    )

    assert response.status_code == 200
    record.refresh_from_db()
    assert record.notes == "Rain all weekend"
    assert record.cogs_amount == Decimal("1500.00")
    assert record.net_revenue == Decimal("0.00")
