from datetime import timedelta

import pytest
from django.core.management import call_command
from django.utils import timezone

from bookings.models import Booking
from bookings.services.reservations import create_booking
from notifications.models import OutboundEmail
from trips.models import TripDate


@pytest.mark.django_db
def test_reminder_is_sent_once_per_window(customer, trip):
    departure = timezone.localdate() + timedelta(days=7)
    TripDate.objects.create(
        trip=trip,
        departure_date=departure,
        return_date=departure + timedelta(days=4),
        capacity=10,
        spots_available=10,
    )
    booking = create_booking(
        user=customer,
        trip_id=str(trip.pk),
        departure_date=departure,
        number_of_travelers=2,
    ).booking
    booking.booking_status = Booking.CONFIRMED
    booking.save()

    call_command("send_trip_reminders")
    call_command("send_trip_reminders")

    booking.refresh_from_db()
    assert booking.reminder_7_day_sent is True
    assert booking.reminder_1_day_sent is False
    assert OutboundEmail.objects.filter(template="trip_reminder").count() == 1


@pytest.mark.django_db
def test_pending_bookings_get_no_reminder(customer, trip):
    departure = timezone.localdate() + timedelta(days=1)
    TripDate.objects.create(
        trip=trip,
        departure_date=departure,
        return_date=departure + timedelta(days=4),
        capacity=10,
        spots_available=10,
    )
    create_booking(user=customer, trip_id=str(trip.pk), departure_date=departure, number_of_travelers=1)

    call_command("send_trip_reminders")

    assert not OutboundEmail.objects.filter(template="trip_reminder").exists()
