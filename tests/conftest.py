import pytest
from datetime import date
from decimal import Decimal

from django.contrib.auth import get_user_model
from rest_framework.test import APIClient

from performance.periods import week_bounds
from sources.models import ChannelRevenue, PaymentLine, VisitPeriod
from venues.models import Venue


@pytest.fixture
def venue(db):
    return Venue.objects.create(name="Bar Ordinário", code="ORD", city="Brasília")


@pytest.fixture
def other_venue(db):
    return Venue.objects.create(name="Deboche Bar", code="DEB", city="Brasília")


@pytest.fixture
def staff_user(db):
    return get_user_model().objects.create_user(
        username="ops",
        email="ops@test.com",
        password="testpass123",
        is_staff=True,
    )


@pytest.fixture
def plain_user(db):
    return get_user_model().objects.create_user(
        username="viewer",
        email="viewer@test.com",
        password="testpass123",
    )


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def staff_client(api_client, staff_user):
    api_client.force_authenticate(user=staff_user)
    return api_client


@pytest.fixture
def week():
    """2024-W05, Monday 2024-01-29 to Sunday 2024-02-04 (straddles two months)."""
    return week_bounds(2024, 5)


@pytest.fixture
def revenue_week(venue, week):
    """Raw rows for the reference week: net 9600, entry fee 800, repique 50, headcount 200."""
    PaymentLine.objects.create(
        venue=venue, business_date=date(2024, 1, 29), payment_method="Pix",
        gross_amount=Decimal("5000.00"), net_amount=Decimal("5000.00"),
    )
    PaymentLine.objects.create(
        venue=venue, business_date=date(2024, 2, 2), payment_method="Crédito",
        gross_amount=Decimal("3900.00"), net_amount=Decimal("3800.00"),
    )
    PaymentLine.objects.create(
        venue=venue, business_date=date(2024, 2, 3), payment_method=" conta assinada ",
        gross_amount=Decimal("1200.00"), net_amount=Decimal("1200.00"),
    )
    ChannelRevenue.objects.create(
        venue=venue, business_date=date(2024, 2, 3),
        channel=ChannelRevenue.Channel.EVENT_POS, net_amount=Decimal("500.00"),
    )
    ChannelRevenue.objects.create(
        venue=venue, business_date=date(2024, 2, 4),
        channel=ChannelRevenue.Channel.TICKETING, net_amount=Decimal("300.00"),
    )
    VisitPeriod.objects.create(
        venue=venue, business_date=date(2024, 2, 2), headcount=120,
        entry_fee_amount=Decimal("500.00"), commission_amount=Decimal("30.00"),
        payments_amount=Decimal("6000.00"), customer_phone="(61) 99876-5432",
    )
    VisitPeriod.objects.create(
        venue=venue, business_date=date(2024, 2, 3), headcount=80,
        entry_fee_amount=Decimal("300.00"), commission_amount=Decimal("20.00"),
        payments_amount=Decimal("4000.00"), customer_phone="61 98888 7777",
    )
    # Non-paying visit: excluded from the headcount base.
    VisitPeriod.objects.create(
        venue=venue, business_date=date(2024, 2, 3), headcount=10,
        payments_amount=Decimal("0.00"),
    )
    return venue
