from decimal import Decimal

import pytest
from rest_framework.test import APIClient

from bookings.models import Booking
from bookings.services.reservations import create_booking
from payments.models import Payment


@pytest.fixture
def booking(customer, trip, trip_date):
    return create_booking(
        user=customer,
        trip_id=str(trip.pk),
        departure_date=trip_date.departure_date,
        number_of_travelers=1,
    ).booking


@pytest.mark.django_db
def test_create_checkout_and_verify(customer_client, booking):
    created = customer_client.post("/api/payments/create-checkout/", {"booking_id": booking.pk}, format="json")

    assert created.status_code == 200
    session_id = created.json()["data"]["session_id"]
    assert session_id.startswith("cs_test_")
    assert f"session={session_id}" in created.json()["data"]["url"]

    verified = customer_client.get(f"/api/payments/verify/{session_id}/")

    assert verified.status_code == 200
    data = verified.json()["data"]
    assert data["paid"] is True
    assert data["booking_status"] == Booking.CONFIRMED
    booking.refresh_from_db()
    assert booking.stripe_payment_intent_id == f"pi_test_{session_id.removeprefix('cs_test_')}"

    customer_client.get(f"/api/payments/verify/{session_id}/")
    assert Payment.objects.filter(booking=booking, type=Payment.TYPE_PAYMENT).count() == 1


@pytest.mark.django_db
def test_cannot_pay_for_someone_elses_booking(api_client, other_customer, booking):
    api_client.force_authenticate(other_customer)

    response = api_client.post("/api/payments/create-checkout/", {"booking_id": booking.pk}, format="json")

    assert response.status_code == 403


@pytest.mark.django_db
def test_cannot_pay_twice(customer_client, booking):
    booking.payment_status = Booking.PAYMENT_COMPLETED
    booking.save()

    response = customer_client.post("/api/payments/create-checkout/", {"booking_id": booking.pk}, format="json")

    assert response.status_code == 400


@pytest.mark.django_db
def test_payment_history_lists_own_payments(customer_client, other_customer, booking):
    session_id = customer_client.post(
        "/api/payments/create-checkout/", {"booking_id": booking.pk}, format="json"
    ).json()["data"]["session_id"]
    customer_client.get(f"/api/payments/verify/{session_id}/")

    history = customer_client.get("/api/payments/history/")

    assert history.status_code == 200
    assert [row["booking_code"] for row in history.json()["data"]] == [booking.confirmation_code]
    payment_id = history.json()["data"][0]["id"]
    assert "stripe_payment_intent_id" not in history.json()["data"][0]

    stranger = APIClient()
    stranger.force_authenticate(other_customer)
    assert stranger.get(f"/api/payments/{payment_id}/").status_code == 403


@pytest.mark.django_db
def test_payment_stats_for_admin(admin_client, customer_client, booking):
    session_id = customer_client.post(
        "/api/payments/create-checkout/", {"booking_id": booking.pk}, format="json"
    ).json()["data"]["session_id"]
    customer_client.get(f"/api/payments/verify/{session_id}/")

    response = admin_client.get("/api/payments/admin/stats/")

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["successful_payments"] == 1
    assert Decimal(data["gross_revenue"]) == booking.total_price
