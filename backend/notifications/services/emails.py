from __future__ import annotations

from urllib.parse import urlencode

from django.conf import settings

from .outbox import queue_email


def _frontend_url(path: str, **params) -> str:
    url = f"{settings.FRONTEND_URL.rstrip('/')}/{path.lstrip('/')}"
    if params:
        url = f"{url}?{urlencode(params)}"
    return url


def _booking_recipient(booking) -> str:
    return booking.contact_email or booking.user.email


def send_verification_email(user, token: str):
    return queue_email(
        to=user.email,
        subject="Verify your email address",
        template="verify_email",
        context={
            "user": user,
            "verify_url": _frontend_url("verify-email", token=token, email=user.email),
        },
    )


def send_welcome_email(user):
    return queue_email(
        to=user.email,
        subject="Welcome to GB Travel",
        template="welcome",
        context={"user": user, "explore_url": _frontend_url("trips")},
    )


def send_login_notification_email(user, *, user_agent: str, ip_address: str):
    return queue_email(
        to=user.email,
        subject="New sign-in to your account",
        template="login_notification",
        context={
            "user": user,
            "user_agent": user_agent,
            "ip_address": ip_address,
            "reset_url": _frontend_url("forgot-password"),
        },
    )


def send_password_reset_email(user, token: str):
    return queue_email(
        to=user.email,
        subject="Reset your password",
        template="password_reset",
        context={
            "user": user,
            "reset_url": _frontend_url("reset-password", token=token, email=user.email),
        },
    )


def send_booking_confirmation_email(booking):
    return queue_email(
        to=_booking_recipient(booking),
        subject=f"Booking confirmed: {booking.confirmation_code}",
        template="booking_confirmation",
        context={
            "booking": booking,
            "trip": booking.trip,
            "booking_url": _frontend_url(f"bookings/{booking.pk}"),
        },
    )


def send_payment_receipt_email(booking, payment):
    return queue_email(
        to=_booking_recipient(booking),
        subject=f"Payment receipt for {booking.confirmation_code}",
        template="payment_receipt",
        context={"booking": booking, "trip": booking.trip, "payment": payment},
    )


def send_booking_cancellation_email(booking):
    return queue_email(
        to=_booking_recipient(booking),
        subject=f"Booking cancelled: {booking.confirmation_code}",
        template="booking_cancellation",
        context={"booking": booking, "trip": booking.trip},
    )


def send_trip_reminder_email(booking, *, days_before: int):
    return queue_email(
        to=_booking_recipient(booking),
        subject=f"{booking.trip.name} departs in {days_before} day{'s' if days_before != 1 else ''}",
        template="trip_reminder",
        context={
            "booking": booking,
            "trip": booking.trip,
            "days_before": days_before,
            "booking_url": _frontend_url(f"bookings/{booking.pk}"),
        },
    )
