"""Cancellation eligibility and refund policy, as plain functions."""

from __future__ import annotations

import math
from datetime import date, datetime, time
from decimal import Decimal

from django.utils import timezone

from .pricing import to_money

FULL = Decimal("1")
HALF = Decimal("0.5")

# policy -> [(minimum days before departure, share refunded)], checked in order
REFUND_SCHEDULES = {
    "flexible": [(1, FULL)],
    "moderate": [(7, FULL), (3, HALF)],
    "strict": [(14, FULL), (7, HALF)],
    "non-refundable": [],
}


def _as_datetime(value) -> datetime:
    if isinstance(value, datetime):
        return value if timezone.is_aware(value) else timezone.make_aware(value)
    if isinstance(value, date):
        return timezone.make_aware(datetime.combine(value, time.min))
    raise TypeError(f"Unsupported departure value: {value!r}")


def days_until_departure(departure, now=None) -> int:
    """Whole days until departure, rounded up."""

    now = now or timezone.now()
    seconds = (_as_datetime(departure) - now).total_seconds()
    return math.ceil(seconds / 86400)


def calculate_refund_amount(days: int, total_price, policy: str) -> Decimal:
    for minimum_days, share in REFUND_SCHEDULES.get(policy, []):
        if days >= minimum_days:
            return to_money(Decimal(str(total_price)) * share)
    return to_money(0)


def can_be_cancelled(*, booking_status: str, is_cancelled: bool, departure, now=None) -> bool:
    if is_cancelled or booking_status in {"cancelled", "completed"}:
        return False
    now = now or timezone.now()
    return _as_datetime(departure) > now
