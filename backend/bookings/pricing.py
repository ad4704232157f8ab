"""
Booking price arithmetic.

All amounts are ``Decimal`` in major currency units, quantized to cents.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Mapping

CENT = Decimal("0.01")


def to_money(value) -> Decimal:
    return Decimal(str(value or 0)).quantize(CENT, rounding=ROUND_HALF_UP)


def to_minor_units(amount) -> int:
    """Convert a major-unit amount to the integer cents Stripe expects."""
    return int((to_money(amount) * 100).to_integral_value(rounding=ROUND_HALF_UP))


def from_minor_units(cents: int) -> Decimal:
    return to_money(Decimal(cents) / 100)


def add_ons_total(add_ons: Iterable[Mapping] | None) -> Decimal:
    total = Decimal("0")
    for add_on in add_ons or []:
        total += to_money(add_on.get("price")) * int(add_on.get("quantity") or 1)
    return to_money(total)


@dataclass(frozen=True)
class PriceBreakdown:
    price_per_person: Decimal
    subtotal: Decimal
    taxes: Decimal
    fees: Decimal
    add_ons_total: Decimal
    discount: Decimal
    total_price: Decimal

    def as_dict(self) -> dict:
        return {
            "price_per_person": self.price_per_person,
            "subtotal": self.subtotal,
            "taxes": self.taxes,
            "fees": self.fees,
            "add_ons_total": self.add_ons_total,
            "discount": self.discount,
            "total_price": self.total_price,
        }


def total_from_components(
    *,
    price_per_person,
    travelers: int,
    taxes,
    fees,
    add_ons=None,
    discount=0,
) -> PriceBreakdown:
    """Sum stored components: subtotal + taxes + fees + add-ons - discount."""

    price_per_person = to_money(price_per_person)
    subtotal = to_money(price_per_person * travelers)
    extras = add_ons_total(add_ons)
    taxes = to_money(taxes)
    fees = to_money(fees)
    discount = to_money(discount)
    total = max(subtotal + taxes + fees + extras - discount, Decimal("0"))
    return PriceBreakdown(
        price_per_person=price_per_person,
        subtotal=subtotal,
        taxes=taxes,
        fees=fees,
        add_ons_total=extras,
        discount=discount,
        total_price=to_money(total),
    )


def quote(
    *,
    base_price,
    date_modifier,
    travelers: int,
    tax_rate,
    service_fee,
    add_ons=None,
    discount=0,
) -> PriceBreakdown:
    """Price a new booking from the trip's base price and the chosen date."""

    price_per_person = to_money(Decimal(str(base_price)) + Decimal(str(date_modifier or 0)))
    subtotal = to_money(price_per_person * travelers)
    taxes = to_money(subtotal * Decimal(str(tax_rate)))
    return total_from_components(
        price_per_person=price_per_person,
        travelers=travelers,
        taxes=taxes,
        fees=service_fee,
        add_ons=add_ons,
        discount=discount,
    )
