# backend/tuitiontime/core/money.py
"""Decimal money helpers. Amounts are rupees with two decimal places."""

from decimal import ROUND_HALF_UP, Decimal
from typing import Tuple, Union

from .constants import MIN_ORDER_AMOUNT_PAISE

Number = Union[Decimal, int, float, str]

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def to_money(value: Number) -> Decimal:
    """Quantize a value to two decimal places, rounding half up."""
    if isinstance(value, float):
        value = repr(value)
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def to_paise(amount: Number) -> int:
    """Convert rupees to an integer paise amount with the gateway minimum applied."""
    paise = int((to_money(amount) * 100).to_integral_value(rounding=ROUND_HALF_UP))
    return max(paise, MIN_ORDER_AMOUNT_PAISE)


def percentage_of(amount: Number, percent: Number) -> Decimal:
    return to_money(to_money(amount) * Decimal(str(percent)) / Decimal(100))


def split_share(amount: Number, share_percent: Number) -> Tuple[Decimal, Decimal]:
    """
    Split ``amount`` into ``(share, remainder)``.

    ``share`` is ``share_percent`` of the amount rounded to paise and the
    remainder is computed by subtraction, so the two always add back up
    to the original amount exactly.
    """
    total = to_money(amount)
    share = percentage_of(total, share_percent)
    return share, total - share


def divide_evenly(amount: Number, parts: int) -> Decimal:
    """Per-part amount rounded to paise."""
    if parts <= 0:
        raise ValueError("parts must be positive")
    return to_money(to_money(amount) / parts)
