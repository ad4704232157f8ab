from datetime import date, datetime, timedelta
from decimal import Decimal

import pytest
from django.utils import timezone

from bookings.cancellation import calculate_refund_amount, can_be_cancelled, days_until_departure

TOTAL = Decimal("2225.00")


@pytest.mark.parametrize(
    "policy, days, expected",
    [
        ("flexible", 1, "2225.00"),
        ("flexible", 0, "0.00"),
        ("moderate", 7, "2225.00"),
        ("moderate", 6, "1112.50"),
        ("moderate", 3, "1112.50"),
        ("moderate", 2, "0.00"),
        ("strict", 14, "2225.00"),
        ("strict", 13, "1112.50"),
        ("strict", 7, "1112.50"),
        ("strict", 6, "0.00"),
        ("non-refundable", 90, "0.00"),
    ],
)
def test_refund_schedule(policy, days, expected):
    assert calculate_refund_amount(days, TOTAL, policy) == Decimal(expected)


def test_unknown_policy_refunds_nothing():
    assert calculate_refund_amount(30, TOTAL, "mystery") == Decimal("0.00")


def test_days_until_departure_rounds_up_partial_days():
    now = timezone.make_aware(datetime(2026, 3, 1, 18, 0))

    assert days_until_departure(date(2026, 3, 8), now=now) == 7
    assert days_until_departure(date(2026, 3, 2), now=now) == 1
    assert days_until_departure(now + timedelta(days=2, hours=1), now=now) == 3


def test_cannot_cancel_after_departure_or_twice():
    now = timezone.now()
    future = (now + timedelta(days=5)).date()
    past = (now - timedelta(days=1)).date()

    assert can_be_cancelled(booking_status="confirmed", is_cancelled=False, departure=future, now=now)
    assert not can_be_cancelled(booking_status="confirmed", is_cancelled=False, departure=past, now=now)
    assert not can_be_cancelled(booking_status="pending", is_cancelled=True, departure=future, now=now)
    assert not can_be_cancelled(booking_status="completed", is_cancelled=False, departure=future, now=now)


@pytest.mark.parametrize("days, expected", [(10, "10000.00"), (5, "5000.00"), (1, "0.00")])
def test_moderate_policy_on_round_total(days, expected):
    assert calculate_refund_amount(days, Decimal("10000"), "moderate") == Decimal(expected)
