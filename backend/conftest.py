from datetime import timedelta
from decimal import Decimal

import pytest
from django.utils import timezone
from rest_framework.test import APIClient

from accounts.models import User
from destinations.models import Destination
from trips.models import Trip, TripDate

TRIP_DESCRIPTION = (
    "Five days among glacial lakes and larch forests, staying in family-run lodges "
    "and walking between villages with a local guide who knows every trail."
)


def make_user(email: str, *, role: str = User.CUSTOMER, password: str = "password123", **extra) -> User:
    user = User.objects.create_user(
        username=email,
        email=email,
        password=password,
        full_name=extra.pop("full_name", "Test Traveler"),
        role=role,
        **extra,
    )
    return user


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def customer(db):
    return make_user("traveler@example.com", is_email_verified=True)


@pytest.fixture
def other_customer(db):
    return make_user("other@example.com", full_name="Other Traveler")


@pytest.fixture
def admin_user(db):
    return make_user("admin@example.com", role=User.ADMIN, full_name="Ada Admin")


@pytest.fixture
def customer_client(customer):
    client = APIClient()
    client.force_authenticate(customer)
    return client


@pytest.fixture
def admin_client(admin_user):
    client = APIClient()
    client.force_authenticate(admin_user)
    return client


@pytest.fixture
def destination(db):
    return Destination.objects.create(
        name="Dolomites",
        description="Jagged limestone peaks, alpine meadows and mountain huts in northern Italy.",
        country="Italy",
        region="South Tyrol",
        average_cost_per_day={"budget": 90, "mid_range": 180, "luxury": 400},
        tags=["hiking", "mountains"],
    )


@pytest.fixture
def trip(db, destination):
    return Trip.objects.create(
        name="Dolomites Hut to Hut",
        destination=destination,
        description=TRIP_DESCRIPTION,
        duration_days=5,
        duration_nights=4,
        price_amount=Decimal("1000.00"),
        max_capacity=10,
        cancellation_policy=Trip.MODERATE,
    )


@pytest.fixture
def trip_date(trip):
    departure = timezone.localdate() + timedelta(days=30)
    return TripDate.objects.create(
        trip=trip,
        departure_date=departure,
        return_date=departure + timedelta(days=4),
        capacity=10,
        spots_available=10,
    )
