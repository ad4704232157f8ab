"""
Apply payment outcomes to bookings.

The success redirect (``confirm_checkout``) and the ``checkout.session.completed``
webhook both land here; whichever arrives first records the charge and the
other sees an existing charge and does nothing. A refunded booking is never
confirmed again.
"""

from __future__ import annotations

import logging

from django.db import transaction
from django.utils import timezone

from bookings.models import Booking
from bookings.pricing import from_minor_units
from core.exceptions import NotFound
from notifications.services import emails

from ..models import Payment, ProcessedWebhookEvent

logger = logging.getLogger(__name__)


def _value(obj, key, default=None):
    if isinstance(obj, dict):
        return obj.get(key, default)
    return getattr(obj, key, default)


@transaction.atomic
def confirm_checkout(
    *,
    session_id: str,
    payment_intent_id: str = "",
    receipt_url: str = "",
    card_details: dict | None = None,
) -> tuple[Booking, bool]:
    """Mark the booking behind ``session_id`` as paid. Returns ``(booking, newly_confirmed)``."""

    booking = (
        Booking.objects.select_for_update()
        .select_related("trip", "user")
        .filter(stripe_checkout_session_id=session_id)
        .first()
    )
    if booking is None:
        raise NotFound("Booking not found for this payment session.")
    if booking.is_charged or booking.payment_status == Booking.PAYMENT_REFUNDED:
        return booking, False
    charged = Payment.objects.filter(type=Payment.TYPE_PAYMENT, stripe_checkout_session_id=session_id)
    if charged.exclude(status=Payment.FAILED).exists():
        return booking, False

    booking.payment_status = Booking.PAYMENT_COMPLETED
    if not booking.is_cancelled:
        booking.booking_status = Booking.CONFIRMED
    if payment_intent_id:
        booking.stripe_payment_intent_id = payment_intent_id
    booking.save(update_fields=["payment_status", "booking_status", "stripe_payment_intent_id", "updated_at"])

    payment = Payment.objects.create(
        user=booking.user,
        booking=booking,
        amount=booking.total_price,
        currency=booking.currency,
        type=Payment.TYPE_PAYMENT,
        status=Payment.SUCCEEDED,
        payment_method=booking.payment_method,
        card_details=card_details or {},
        stripe_checkout_session_id=session_id,
        stripe_payment_intent_id=booking.stripe_payment_intent_id,
        receipt_url=receipt_url,
        metadata={"confirmation_code": booking.confirmation_code},
    )
    logger.info("Payment recorded for booking %s", booking.confirmation_code)

    if booking.is_cancelled:
        logger.warning("Booking %s was paid after cancellation", booking.confirmation_code)
    else:
        emails.send_booking_confirmation_email(booking)
    emails.send_payment_receipt_email(booking, payment)
    return booking, True


def _booking_for_intent(payment_object) -> Booking | None:
    intent_id = _value(payment_object, "id", "")
    booking = Booking.objects.filter(stripe_payment_intent_id=intent_id).first() if intent_id else None
    if booking is not None:
        return booking
    booking_id = (_value(payment_object, "metadata") or {}).get("booking_id")
    if booking_id and str(booking_id).isdigit():
        return Booking.objects.filter(pk=int(booking_id)).first()
    return None


def record_payment_failure(payment_intent) -> Payment | None:
    booking = _booking_for_intent(payment_intent)
    if booking is None:
        logger.warning("Payment failure for unknown intent %s", _value(payment_intent, "id"))
        return None

    error = _value(payment_intent, "last_payment_error") or {}
    if booking.payment_status != Booking.PAYMENT_COMPLETED:
        booking.payment_status = Booking.PAYMENT_FAILED
        booking.stripe_payment_intent_id = _value(payment_intent, "id", "") or booking.stripe_payment_intent_id
        booking.save(update_fields=["payment_status", "stripe_payment_intent_id", "updated_at"])

    return Payment.objects.create(
        user=booking.user,
        booking=booking,
        amount=from_minor_units(_value(payment_intent, "amount", 0) or 0) or booking.total_price,
        currency=booking.currency,
        type=Payment.TYPE_PAYMENT,
        status=Payment.FAILED,
        stripe_payment_intent_id=_value(payment_intent, "id", ""),
        failure_reason=error.get("message", ""),
        failure_code=error.get("code", ""),
    )


def apply_charge_refund(charge) -> Payment | None:
    """Sync a provider-side refund onto the original charge and its booking."""

    intent_id = _value(charge, "payment_intent", "")
    payment = (
        Payment.objects.select_related("booking")
        .filter(type=Payment.TYPE_PAYMENT, stripe_payment_intent_id=intent_id)
        .exclude(status=Payment.FAILED)
        .first()
    )
    if payment is None:
        logger.warning("Refund for unknown payment intent %s", intent_id)
        return None

    fully_refunded = bool(_value(charge, "refunded", False))
    payment.status = Payment.REFUNDED if fully_refunded else Payment.PARTIALLY_REFUNDED
    payment.stripe_charge_id = _value(charge, "id", "") or payment.stripe_charge_id
    payment.refunded_at = timezone.now()
    payment.save(update_fields=["status", "stripe_charge_id", "refunded_at", "updated_at"])

    booking = payment.booking
    booking.payment_status = (
        Booking.PAYMENT_REFUNDED if fully_refunded else Booking.PAYMENT_PARTIALLY_REFUNDED
    )
    booking.save(update_fields=["payment_status", "updated_at"])
    return payment


def _on_checkout_completed(session) -> None:
    if _value(session, "payment_status") != "paid":
        logger.info("Checkout session %s completed without payment", _value(session, "id"))
        return
    try:
        confirm_checkout(
            session_id=_value(session, "id"),
            payment_intent_id=_value(session, "payment_intent") or "",
        )
    except NotFound:
        logger.warning("Checkout session %s has no matching booking", _value(session, "id"))


HANDLERS = {
    "checkout.session.completed": _on_checkout_completed,
    "payment_intent.payment_failed": record_payment_failure,
    "charge.refunded": apply_charge_refund,
}


def handle_webhook_event(event: dict) -> str:
    """
    Apply one verified webhook event exactly once.

    Returns ``"processed"``, ``"duplicate"`` or ``"ignored"``.
    """

    with transaction.atomic():
        _, created = ProcessedWebhookEvent.objects.get_or_create(
            event_id=event["id"],
            defaults={"event_type": event.get("type", "")},
        )
        if not created:
            logger.info("Skipping already processed webhook event %s", event["id"])
            return "duplicate"

        handler = HANDLERS.get(event.get("type"))
        if handler is None:
            logger.info("Ignoring webhook event type %s", event.get("type"))
            return "ignored"
        handler(event["data"]["object"])
    return "processed"
