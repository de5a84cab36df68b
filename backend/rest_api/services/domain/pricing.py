"""
Order money computation.

All amounts are integer cents. Intermediate math runs on Decimal in currency
units and every rounding step is half-up to the cent:

    subtotal = sum(price * quantity)
    discount = percent -> round(subtotal * value / 100)
               amount  -> round(value)
               none    -> 0
    tax      = round((subtotal - discount) * TAX_RATE)
    total    = subtotal - discount + tax
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable

from shared.config.constants import DiscountType, Limits, TAX_RATE
from shared.utils.exceptions import ValidationError


CENT = Decimal("0.01")


@dataclass(frozen=True)
class OrderTotals:
    """Derived money fields of an order."""

    subtotal_cents: int
    discount_cents: int
    tax_cents: int
    total_cents: int


def round_to_cent(value: Decimal) -> Decimal:
    """Round half-up to 2 decimals."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def to_cents(value: Decimal) -> int:
    """Currency units -> integer cents (half-up)."""
    return int(round_to_cent(value) * 100)


def from_cents(cents: int) -> Decimal:
    """Integer cents -> currency units."""
    return Decimal(cents) / 100


def line_amount_cents(unit_price_cents: int, quantity: int) -> int:
    return unit_price_cents * quantity


def subtotal_cents(amounts: Iterable[int]) -> int:
    return sum(amounts)


def validate_discount(discount_type: str, discount_value: float) -> None:
    """
    Reject discount parameters that cannot be applied.

    Raises:
        ValidationError: unknown type, non-finite or negative value, or
            percent over 100.
    """
    if not math.isfinite(discount_value):
        raise ValidationError(
            "Discount value must be a finite number",
            field="discount_value",
            value=str(discount_value),
        )
    if discount_type not in DiscountType.ALL:
        raise ValidationError(
            f"Unknown discount type '{discount_type}'",
            field="discount_type",
            value=discount_type,
        )
    if discount_value < 0:
        raise ValidationError(
            "Discount value cannot be negative",
            field="discount_value",
            value=discount_value,
        )
    if discount_type == DiscountType.PERCENT and discount_value > Limits.MAX_DISCOUNT_PERCENT:
        raise ValidationError(
            "Discount percent cannot exceed 100",
            field="discount_value",
            value=discount_value,
        )


def compute_totals(
    subtotal: int,
    discount_type: str = DiscountType.NONE,
    discount_value: float = 0.0,
    tax_rate: Decimal = TAX_RATE,
) -> OrderTotals:
    """
    Compute discount, tax and total for a subtotal in cents.

    Raises:
        ValidationError: if the discount parameters are invalid or the
            discount is larger than the subtotal.
    """
    validate_discount(discount_type, discount_value)

    base = from_cents(subtotal)
    # Via str() so 8.99 converts exactly
    value = Decimal(str(discount_value))

    if discount_type == DiscountType.PERCENT:
        discount = round_to_cent(base * value / 100)
    elif discount_type == DiscountType.AMOUNT:
        discount = round_to_cent(value)
    else:
        discount = Decimal("0.00")

    if discount > base:
        raise ValidationError(
            "Discount cannot exceed the order subtotal",
            field="discount_value",
            discount=str(discount),
            subtotal=str(base),
        )

    tax = round_to_cent((base - discount) * tax_rate)
    total = round_to_cent(base - discount + tax)

    return OrderTotals(
        subtotal_cents=subtotal,
        discount_cents=to_cents(discount),
        tax_cents=to_cents(tax),
        total_cents=to_cents(total),
    )
