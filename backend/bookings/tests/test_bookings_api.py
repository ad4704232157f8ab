import re
from datetime import timedelta
from decimal import Decimal

import pytest
from django.utils import timezone

from bookings.models import Booking
from bookings.services.reservations import cancel_booking, create_booking
from core.exceptions import BadRequest
from notifications.models import OutboundEmail
from payments.models import Payment
from payments.services import gateway
from trips.models import TripDate


def _payload(trip, trip_date, **overrides):
    payload = {
        "trip_id": str(trip.pk),
        "departure_date": trip_date.departure_date.isoformat(),
        "number_of_travelers": 2,
    }
    payload.update(overrides)
    return payload


def _paid_booking(customer, trip, trip_date, travelers=2):
    booking = create_booking(
        user=customer,
        trip_id=str(trip.pk),
        departure_date=trip_date.departure_date,
        number_of_travelers=travelers,
    ).booking
    booking.payment_status = Booking.PAYMENT_COMPLETED
    booking.booking_status = Booking.CONFIRMED
    booking.stripe_payment_intent_id = "pi_test_abc123"
    booking.save()
    return booking


@pytest.mark.django_db
def test_create_booking_prices_and_reserves_seats(customer_client, customer, trip, trip_date):
    response = customer_client.post("/api/bookings/", _payload(trip, trip_date), format="json")

    assert response.status_code == 201
    body = response.json()["data"]["booking"]
    assert re.fullmatch(r"GB-[0-9A-F]{8}", body["confirmation_code"])
    assert Decimal(body["total_price"]) == Decimal("2225.00")
    assert body["booking_status"] == Booking.PENDING
    assert body["payment_status"] == Booking.PAYMENT_PENDING
    assert "checkout" not in response.json()["data"]

    booking = Booking.objects.get(pk=body["id"])
    assert booking.contact_email == customer.email
    trip.refresh_from_db()
    trip_date.refresh_from_db()
    assert trip.current_bookings == 2
    assert trip_date.spots_available == 8


@pytest.mark.django_db
def test_create_booking_with_pay_now_returns_checkout(customer_client, trip, trip_date):
    response = customer_client.post(
        "/api/bookings/",
        _payload(trip, trip_date, pay_now=True),
        format="json",
    )

    assert response.status_code == 201
    checkout = response.json()["data"]["checkout"]
    assert checkout["session_id"].startswith("cs_test_")
    booking = Booking.objects.get(pk=response.json()["data"]["booking"]["id"])
    assert booking.stripe_checkout_session_id == checkout["session_id"]


@pytest.mark.django_db
def test_gateway_failure_keeps_pending_booking(monkeypatch, customer_client, trip, trip_date):
    def fail(**kwargs):
        raise gateway.PaymentGatewayError("provider down")

    monkeypatch.setattr(gateway, "create_checkout_session", fail)

    response = customer_client.post(
        "/api/bookings/",
        _payload(trip, trip_date, pay_now=True),
        format="json",
    )

    assert response.status_code == 201
    assert "checkout" not in response.json()["data"]
    assert Booking.objects.filter(booking_status=Booking.PENDING).count() == 1


@pytest.mark.django_db
def test_oversell_is_rejected_with_remaining_count(customer_client, trip, trip_date):
    trip_date.capacity = 3
    trip_date.spots_available = 3
    trip_date.save()

    response = customer_client.post(
        "/api/bookings/",
        _payload(trip, trip_date, number_of_travelers=4),
        format="json",
    )

    assert response.status_code == 400
    assert response.json()["message"] == "Only 3 spots available for the selected date."
    assert not Booking.objects.exists()


@pytest.mark.django_db
def test_booking_more_than_capacity_leaves_counters_alone(customer_client, trip, trip_date):
    response = customer_client.post(
        "/api/bookings/",
        _payload(trip, trip_date, number_of_travelers=11),
        format="json",
    )

    assert response.status_code == 400
    assert response.json()["message"] == "Only 10 spots available."
    trip.refresh_from_db()
    trip_date.refresh_from_db()
    assert trip.current_bookings == 0
    assert trip_date.spots_available == 10


@pytest.mark.django_db
def test_trip_capacity_limits_every_departure(customer_client, trip, trip_date):
    trip.current_bookings = 9
    trip.save()

    response = customer_client.post("/api/bookings/", _payload(trip, trip_date), format="json")

    assert response.status_code == 400
    assert response.json()["message"] == "Only 1 spots available."


@pytest.mark.django_db
def test_unknown_departure_date_is_rejected(customer_client, trip, trip_date):
    response = customer_client.post(
        "/api/bookings/",
        _payload(trip, trip_date, departure_date=(trip_date.departure_date + timedelta(days=1)).isoformat()),
        format="json",
    )

    assert response.status_code == 400
    assert response.json()["message"] == "Selected date is not available."


@pytest.mark.django_db
def test_traveler_list_must_match_count(customer_client, trip, trip_date):
    response = customer_client.post(
        "/api/bookings/",
        _payload(trip, trip_date, travelers=[{"full_name": "Ana Ruiz"}]),
        format="json",
    )

    assert response.status_code == 422


@pytest.mark.django_db
def test_confirmation_code_is_stable_across_saves(customer, trip, trip_date):
    booking = create_booking(
        user=customer,
        trip_id=str(trip.pk),
        departure_date=trip_date.departure_date,
        number_of_travelers=1,
    ).booking
    code = booking.confirmation_code

    booking.special_requests = "Window seat please"
    booking.save()
    booking.refresh_from_db()

    assert booking.confirmation_code == code


@pytest.mark.django_db
def test_other_customers_cannot_read_a_booking(customer, other_customer, trip, trip_date, api_client):
    booking = _paid_booking(customer, trip, trip_date)
    api_client.force_authenticate(other_customer)

    assert api_client.get(f"/api/bookings/{booking.pk}/").status_code == 403

    public = api_client.get(f"/api/bookings/confirmation/{booking.confirmation_code.lower()}/")
    assert public.status_code == 200
    assert "total_price" not in public.json()["data"]["booking"]


@pytest.mark.django_db
def test_cancel_unpaid_booking_restores_capacity(customer_client, customer, trip, trip_date):
    booking = create_booking(
        user=customer,
        trip_id=str(trip.pk),
        departure_date=trip_date.departure_date,
        number_of_travelers=3,
    ).booking

    response = customer_client.put(
        f"/api/bookings/{booking.pk}/cancel/",
        {"reason": "Change of plans"},
        format="json",
    )

    assert response.status_code == 200
    booking.refresh_from_db()
    assert booking.booking_status == Booking.CANCELLED
    assert booking.is_cancelled
    assert booking.refund_amount == Decimal("0.00")
    assert booking.refund_status == ""
    trip.refresh_from_db()
    trip_date.refresh_from_db()
    assert trip.current_bookings == 0
    assert trip_date.spots_available == 10
    assert OutboundEmail.objects.filter(template="booking_cancellation").count() == 1

    again = customer_client.put(f"/api/bookings/{booking.pk}/cancel/", {}, format="json")
    assert again.status_code == 400
    trip_date.refresh_from_db()
    assert trip_date.spots_available == 10


@pytest.mark.django_db
def test_cancel_paid_booking_refunds_per_policy(customer, trip, trip_date):
    booking = _paid_booking(customer, trip, trip_date)

    booking = cancel_booking(booking=booking, actor=customer, reason="Injury")

    assert booking.refund_amount == Decimal("2225.00")
    assert booking.refund_status == Booking.REFUND_COMPLETED
    assert booking.payment_status == Booking.PAYMENT_REFUNDED
    refund = Payment.objects.get(booking=booking)
    assert refund.type == Payment.TYPE_REFUND
    assert refund.amount == Decimal("2225.00")
    assert refund.refund_reason == "Injury"


@pytest.mark.django_db
def test_late_cancellation_gets_partial_refund(customer, trip, trip_date):
    booking = _paid_booking(customer, trip, trip_date)
    now = timezone.now() + timedelta(days=25)

    booking = cancel_booking(booking=booking, actor=customer, now=now)

    assert booking.refund_amount == Decimal("1112.50")
    assert booking.payment_status == Booking.PAYMENT_PARTIALLY_REFUNDED
    assert Payment.objects.get(booking=booking).type == Payment.TYPE_PARTIAL_REFUND


@pytest.mark.django_db
def test_cancel_subtracts_earlier_refunds(customer, trip, trip_date):
    booking = _paid_booking(customer, trip, trip_date)
    booking.payment_status = Booking.PAYMENT_PARTIALLY_REFUNDED
    booking.save()
    Payment.objects.create(
        user=customer,
        booking=booking,
        amount=Decimal("500.00"),
        type=Payment.TYPE_PARTIAL_REFUND,
        status=Payment.SUCCEEDED,
    )

    booking = cancel_booking(booking=booking, actor=customer)

    assert booking.refund_amount == Decimal("1725.00")
    assert booking.payment_status == Booking.PAYMENT_REFUNDED
    latest = Payment.objects.filter(booking=booking).order_by("-created_at", "-pk").first()
    assert latest.type == Payment.TYPE_REFUND
    assert latest.amount == Decimal("1725.00")


@pytest.mark.django_db
def test_non_refundable_trip_denies_refund(customer, trip, trip_date):
    trip.cancellation_policy = "non-refundable"
    trip.save()
    booking = _paid_booking(customer, trip, trip_date)

    booking = cancel_booking(booking=booking, actor=customer)

    assert booking.refund_status == Booking.REFUND_DENIED
    assert booking.payment_status == Booking.PAYMENT_COMPLETED
    assert not Payment.objects.filter(booking=booking).exists()


@pytest.mark.django_db
def test_failed_refund_keeps_booking_cancelled(monkeypatch, customer, trip, trip_date):
    def fail(**kwargs):
        raise gateway.PaymentGatewayError("card network unavailable")

    monkeypatch.setattr(gateway, "create_refund", fail)
    booking = _paid_booking(customer, trip, trip_date)

    booking = cancel_booking(booking=booking, actor=customer)

    booking.refresh_from_db()
    assert booking.booking_status == Booking.CANCELLED
    assert booking.refund_status == Booking.REFUND_FAILED
    assert booking.payment_status == Booking.PAYMENT_COMPLETED
    assert TripDate.objects.get(pk=trip_date.pk).spots_available == 10


@pytest.mark.django_db
def test_admin_status_change_to_cancelled_releases_seats(admin_client, customer, trip, trip_date):
    booking = _paid_booking(customer, trip, trip_date)

    response = admin_client.put(
        f"/api/bookings/{booking.pk}/status/",
        {"booking_status": "cancelled", "reason": "Operator cancelled departure"},
        format="json",
    )

    assert response.status_code == 200
    trip_date.refresh_from_db()
    assert trip_date.spots_available == 10


@pytest.mark.django_db
def test_admin_booking_list_is_admin_only(customer_client, admin_client, customer, trip, trip_date):
    _paid_booking(customer, trip, trip_date)

    assert customer_client.get("/api/bookings/admin/all/").status_code == 403
    response = admin_client.get("/api/bookings/admin/all/", {"payment_status": "completed"})
    assert response.status_code == 200
    assert response.json()["pagination"]["totalItems"] == 1


@pytest.mark.django_db
def test_counters_stay_in_bounds_across_creates_and_cancels(customer, trip, trip_date):
    bookings = []
    for travelers in (4, 3, 3):
        bookings.append(
            create_booking(
                user=customer,
                trip_id=str(trip.pk),
                departure_date=trip_date.departure_date,
                number_of_travelers=travelers,
            ).booking
        )
    with pytest.raises(BadRequest):
        create_booking(
            user=customer,
            trip_id=str(trip.pk),
            departure_date=trip_date.departure_date,
            number_of_travelers=1,
        )

    for booking in bookings:
        cancel_booking(booking=booking, actor=customer)
        trip.refresh_from_db()
        trip_date.refresh_from_db()
        assert 0 <= trip.current_bookings <= trip.max_capacity
        assert 0 <= trip_date.spots_available <= trip_date.capacity

    assert trip.current_bookings == 0
    assert trip_date.spots_available == 10
