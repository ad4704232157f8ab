from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional
from uuid import uuid4

import stripe
from django.conf import settings

from bookings.pricing import to_minor_units

logger = logging.getLogger(__name__)


class PaymentGatewayError(Exception):
    """The payment provider rejected a request or could not be reached."""


@dataclass
class CheckoutSessionStub:
    """
    Lightweight stand-in for stripe.checkout.Session when running in stub mode.

    Tests and local development do not hit Stripe; instead, we return predictable
    identifiers so the booking flow (payment records, emails, links) behaves as
    if Stripe responded.
    """

    id: str
    payment_intent: str
    payment_status: str
    url: str
    amount_total: int = 0
    metadata: dict = field(default_factory=dict)


@dataclass
class RefundStub:
    id: str
    status: str
    amount: int


def build_checkout_preview_url(*, booking_id, amount_cents: int, session_id: str) -> str:
    return (
        f"{settings.FRONTEND_URL.rstrip('/')}/payments/preview?"
        f"booking={booking_id}&amount={amount_cents}&session={session_id}"
    )


def _get_stripe_api_key() -> Optional[str]:
    key = getattr(settings, "STRIPE_SECRET_KEY", "")
    return key or None


def _should_use_stub() -> bool:
    if getattr(settings, "STRIPE_USE_STUB", False):
        return True
    return _get_stripe_api_key() is None


def _configure() -> None:
    api_key = _get_stripe_api_key()
    if not api_key:
        raise PaymentGatewayError("Stripe secret key is not configured.")
    stripe.api_key = api_key


def _stub_intent_for(session_id: str) -> str:
    return f"pi_test_{session_id.removeprefix('cs_test_')}"


def create_checkout_session(*, booking):
    """
    Create a Stripe Checkout session (or stub equivalent) for a booking.

    The session expires after ``CHECKOUT_SESSION_TTL_MINUTES`` and carries the
    booking id in its metadata so webhook events can be matched back.
    """

    amount_cents = to_minor_units(booking.total_price)
    metadata = {
        "booking_id": str(booking.pk),
        "confirmation_code": booking.confirmation_code,
        "user_id": str(booking.user_id),
    }

    if _should_use_stub():
        session_id = f"cs_test_{uuid4().hex}"
        return CheckoutSessionStub(
            id=session_id,
            payment_intent=_stub_intent_for(session_id),
            payment_status="unpaid",
            url=build_checkout_preview_url(
                booking_id=booking.pk,
                amount_cents=amount_cents,
                session_id=session_id,
            ),
            amount_total=amount_cents,
            metadata=metadata,
        )

    _configure()
    frontend = settings.FRONTEND_URL.rstrip("/")
    expires_at = int(time.time()) + settings.CHECKOUT_SESSION_TTL_MINUTES * 60
    try:
        return stripe.checkout.Session.create(
            mode="payment",
            payment_method_types=["card"],
            customer_email=booking.contact_email or booking.user.email,
            client_reference_id=str(booking.pk),
            line_items=[
                {
                    "quantity": 1,
                    "price_data": {
                        "currency": booking.currency.lower(),
                        "unit_amount": amount_cents,
                        "product_data": {
                            "name": booking.trip.name,
                            "description": (
                                f"{booking.number_of_travelers} traveler(s) departing "
                                f"{booking.departure_date.isoformat()}"
                            ),
                        },
                    },
                }
            ],
            success_url=f"{frontend}/booking/success?session_id={{CHECKOUT_SESSION_ID}}",
            cancel_url=f"{frontend}/booking/cancel?booking={booking.pk}",
            expires_at=expires_at,
            metadata=metadata,
            payment_intent_data={"metadata": metadata},
        )
    except stripe.StripeError as exc:
        raise PaymentGatewayError(str(exc)) from exc


def retrieve_checkout_session(session_id: str):
    """Fetch a checkout session; stub sessions always report as paid."""

    if _should_use_stub():
        return CheckoutSessionStub(
            id=session_id,
            payment_intent=_stub_intent_for(session_id),
            payment_status="paid",
            url="",
        )

    _configure()
    try:
        return stripe.checkout.Session.retrieve(session_id)
    except stripe.StripeError as exc:
        raise PaymentGatewayError(str(exc)) from exc


def create_refund(*, payment_intent_id: str, amount: Decimal, reason: str = "requested_by_customer"):
    amount_cents = to_minor_units(amount)
    if _should_use_stub():
        return RefundStub(id=f"re_test_{uuid4().hex}", status="succeeded", amount=amount_cents)

    _configure()
    try:
        return stripe.Refund.create(
            payment_intent=payment_intent_id,
            amount=amount_cents,
            reason=reason,
        )
    except stripe.StripeError as exc:
        raise PaymentGatewayError(str(exc)) from exc


def construct_webhook_event(payload: bytes, signature: str) -> dict:
    """
    Verify the ``Stripe-Signature`` header against the raw body.

    Raises ``stripe.SignatureVerificationError`` or ``ValueError`` for a bad
    signature or malformed payload. Returns the event as a plain dict.
    """

    secret = getattr(settings, "STRIPE_WEBHOOK_SECRET", "")
    if not secret:
        raise PaymentGatewayError("Stripe webhook secret is not configured.")
    stripe.Webhook.construct_event(payload, signature, secret)
    return json.loads(payload)
