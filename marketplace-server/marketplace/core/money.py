"""Fixed-point money helpers.

Domain code works with ``Decimal`` amounts quantized to two places; the
database stores integer minor units.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

CENT = Decimal("0.01")


def quantize(amount: Decimal | int | str) -> Decimal:
    """Round an amount to cents using half-up rounding."""
    return Decimal(amount).quantize(CENT, rounding=ROUND_HALF_UP)


def to_cents(amount: Decimal | int | str) -> int:
    return int(quantize(amount) * 100)


def from_cents(cents: int | None) -> Decimal:
    return (Decimal(cents or 0) / 100).quantize(CENT)


__all__ = ["CENT", "quantize", "to_cents", "from_cents"]
