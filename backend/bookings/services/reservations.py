from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal

from django.conf import settings
from django.db import transaction
from django.db.models import F, Sum, Value
from django.db.models.functions import Greatest, Least
from django.utils import timezone

from core.exceptions import BadRequest
from notifications.services import emails
from payments.models import Payment
from payments.services import gateway
from trips.models import Trip, TripDate
from trips.selectors import resolve_trip

from ..cancellation import calculate_refund_amount, days_until_departure
from ..models import Booking
from ..pricing import quote

logger = logging.getLogger(__name__)


@dataclass
class Reservation:
    booking: Booking
    checkout_session: object | None = None

    @property
    def checkout_url(self) -> str | None:
        return getattr(self.checkout_session, "url", None) if self.checkout_session else None


def _check_availability(trip: Trip, trip_date: TripDate | None, travelers: int) -> TripDate:
    if trip.status != Trip.ACTIVE:
        raise BadRequest("This trip is not available for booking.")
    if travelers < trip.min_travelers:
        raise BadRequest(f"This trip requires at least {trip.min_travelers} travelers.")
    if travelers > trip.spots_remaining:
        raise BadRequest(f"Only {trip.spots_remaining} spots available.")
    if trip_date is None:
        raise BadRequest("Selected date is not available.")
    if trip_date.spots_available < travelers:
        raise BadRequest(f"Only {trip_date.spots_available} spots available for the selected date.")
    return trip_date


def _reserve_capacity(trip: Trip, trip_date: TripDate, travelers: int) -> None:
    """Take seats on the trip and the departure; each update only applies while seats remain."""

    reserved = Trip.objects.filter(
        pk=trip.pk,
        status=Trip.ACTIVE,
        current_bookings__lte=F("max_capacity") - travelers,
    ).update(current_bookings=F("current_bookings") + travelers)
    if not reserved:
        trip.refresh_from_db(fields=["current_bookings", "max_capacity", "status"])
        raise BadRequest(f"Only {trip.spots_remaining} spots available.")

    reserved = TripDate.objects.filter(
        pk=trip_date.pk,
        spots_available__gte=travelers,
    ).update(spots_available=F("spots_available") - travelers)
    if not reserved:
        trip_date.refresh_from_db(fields=["spots_available"])
        raise BadRequest(f"Only {trip_date.spots_available} spots available for the selected date.")


def _release_capacity(booking: Booking) -> None:
    travelers = booking.number_of_travelers
    Trip.objects.filter(pk=booking.trip_id).update(
        current_bookings=Greatest(F("current_bookings") - travelers, Value(0)),
    )
    TripDate.objects.filter(pk=booking.trip_date_id).update(
        spots_available=Least(F("spots_available") + travelers, F("capacity")),
    )


def start_checkout(booking: Booking):
    """Open a checkout session for ``booking`` and remember its id."""

    session = gateway.create_checkout_session(booking=booking)
    booking.stripe_checkout_session_id = session.id
    booking.save(update_fields=["stripe_checkout_session_id", "updated_at"])
    logger.info("Checkout session %s opened for booking %s", session.id, booking.confirmation_code)
    return session


def create_booking(
    *,
    user,
    trip_id: str,
    departure_date,
    number_of_travelers: int,
    travelers: list | None = None,
    add_ons: list | None = None,
    contact_name: str = "",
    contact_email: str = "",
    contact_phone: str = "",
    billing_address: dict | None = None,
    special_requests: str = "",
    payment_method: str = "card",
    source: str = "website",
    pay_now: bool = False,
) -> Reservation:
    """
    Reserve seats on a trip departure and price the booking.

    Seats are taken with guarded updates in the same transaction as the booking
    insert, so two requests racing for the last seats cannot both succeed. With
    ``pay_now`` a checkout session is opened after commit; a provider failure
    leaves the pending booking in place.
    """

    trip = resolve_trip(trip_id)
    trip_date = trip.available_dates.filter(departure_date=departure_date).first()
    trip_date = _check_availability(trip, trip_date, number_of_travelers)

    breakdown = quote(
        base_price=trip.price_amount,
        date_modifier=trip_date.price_modifier,
        travelers=number_of_travelers,
        tax_rate=settings.BOOKING_TAX_RATE,
        service_fee=settings.BOOKING_SERVICE_FEE,
        add_ons=add_ons,
    )

    with transaction.atomic():
        booking = Booking.objects.create(
            user=user,
            trip=trip,
            trip_date=trip_date,
            departure_date=trip_date.departure_date,
            return_date=trip_date.return_date,
            number_of_travelers=number_of_travelers,
            travelers=travelers or [],
            price_per_person=breakdown.price_per_person,
            taxes=breakdown.taxes,
            fees=breakdown.fees,
            discount=breakdown.discount,
            add_ons=add_ons or [],
            currency=trip.currency,
            payment_method=payment_method,
            contact_name=contact_name or user.full_name,
            contact_email=contact_email or user.email,
            contact_phone=contact_phone or user.phone,
            billing_address=billing_address or {},
            special_requests=special_requests,
            source=source,
        )
        _reserve_capacity(trip, trip_date, number_of_travelers)

    logger.info(
        "Booking %s created for %s traveler(s) on trip %s",
        booking.confirmation_code,
        number_of_travelers,
        trip.pk,
    )

    reservation = Reservation(booking=booking)
    if pay_now:
        try:
            reservation.checkout_session = start_checkout(booking)
        except gateway.PaymentGatewayError:
            logger.exception("Could not open checkout for booking %s", booking.confirmation_code)
    return reservation


def _refunded_so_far(booking: Booking) -> Decimal:
    total = booking.payments.filter(
        type__in=Payment.REFUND_TYPES,
        status=Payment.SUCCEEDED,
    ).aggregate(total=Sum("amount"))["total"]
    return total or Decimal("0")


def _refund_charge(booking: Booking, amount) -> None:
    """Refund ``amount`` against the booking's charge and record the ledger entry."""

    try:
        refund = gateway.create_refund(
            payment_intent_id=booking.stripe_payment_intent_id,
            amount=amount,
        )
    except gateway.PaymentGatewayError as exc:
        logger.error("Refund failed for booking %s: %s", booking.confirmation_code, exc)
        booking.refund_status = Booking.REFUND_FAILED
        booking.save(update_fields=["refund_status", "updated_at"])
        return

    full = _refunded_so_far(booking) + amount >= booking.total_price
    original = (
        booking.payments.filter(type=Payment.TYPE_PAYMENT, status=Payment.SUCCEEDED)
        .order_by("-created_at")
        .first()
    )
    with transaction.atomic():
        Payment.objects.create(
            user=booking.user,
            booking=booking,
            amount=amount,
            currency=booking.currency,
            type=Payment.TYPE_REFUND if full else Payment.TYPE_PARTIAL_REFUND,
            status=Payment.SUCCEEDED,
            stripe_payment_intent_id=booking.stripe_payment_intent_id,
            stripe_refund_id=getattr(refund, "id", ""),
            original_payment=original,
            refund_reason=booking.cancellation_reason,
            refunded_at=timezone.now(),
        )
        booking.refund_status = Booking.REFUND_COMPLETED
        booking.payment_status = (
            Booking.PAYMENT_REFUNDED if full else Booking.PAYMENT_PARTIALLY_REFUNDED
        )
        booking.save(update_fields=["refund_status", "payment_status", "updated_at"])
    logger.info("Refunded %s %s for booking %s", amount, booking.currency, booking.confirmation_code)


def cancel_booking(*, booking: Booking, actor, reason: str = "", now=None) -> Booking:
    """
    Cancel a booking, give its seats back and refund per the trip's policy.

    The cancellation and seat release commit before the provider is asked for
    the refund. A failed refund leaves the booking cancelled with
    ``refund_status`` set to ``failed`` for staff follow-up.
    """

    now = now or timezone.now()
    with transaction.atomic():
        booking = (
            Booking.objects.select_for_update()
            .select_related("trip", "user")
            .get(pk=booking.pk)
        )
        if not booking.can_be_cancelled(now=now):
            raise BadRequest("This booking cannot be cancelled.")

        days = days_until_departure(booking.departure_date, now=now)
        refund = calculate_refund_amount(days, booking.total_price, booking.trip.cancellation_policy)
        refund = max(refund - _refunded_so_far(booking), Decimal("0"))

        booking.is_cancelled = True
        booking.booking_status = Booking.CANCELLED
        booking.cancelled_at = now
        booking.cancelled_by = actor
        booking.cancellation_reason = reason
        if booking.is_charged:
            booking.refund_amount = refund
            booking.refund_status = Booking.REFUND_PENDING if refund > 0 else Booking.REFUND_DENIED
        else:
            booking.refund_amount = 0
            booking.refund_status = ""
        booking.save()
        _release_capacity(booking)

    logger.info("Booking %s cancelled %s day(s) before departure", booking.confirmation_code, days)

    if booking.refund_status == Booking.REFUND_PENDING:
        _refund_charge(booking, booking.refund_amount)

    emails.send_booking_cancellation_email(booking)
    return booking
