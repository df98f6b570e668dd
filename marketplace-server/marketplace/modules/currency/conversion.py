"""Base-mediated currency conversion.

There is no direct EUR<->TRY table in the conversion path: every amount is
routed through USD so that one ``ExchangeRateSet`` stays internally
consistent. Results are not quantized here; callers round once at the money
boundary.
"""

from __future__ import annotations

from decimal import Decimal

from .models import BASE_CURRENCY, Currency, ExchangeRateSet


def to_base(amount: Decimal, from_currency: Currency, rates: ExchangeRateSet) -> Decimal:
    currency = Currency(from_currency)
    if currency is BASE_CURRENCY:
        return Decimal(amount)
    return Decimal(amount) / rates.per_usd(currency)


def from_base(amount_base: Decimal, to_currency: Currency, rates: ExchangeRateSet) -> Decimal:
    currency = Currency(to_currency)
    if currency is BASE_CURRENCY:
        return Decimal(amount_base)
    return Decimal(amount_base) * rates.per_usd(currency)


def convert(
    amount: Decimal,
    from_currency: Currency,
    to_currency: Currency,
    rates: ExchangeRateSet,
) -> Decimal:
    if Currency(from_currency) is Currency(to_currency):
        return Decimal(amount)
    return from_base(to_base(amount, from_currency, rates), to_currency, rates)


def effective_rate(from_currency: Currency, to_currency: Currency, rates: ExchangeRateSet) -> Decimal:
    """Units of ``to_currency`` per one unit of ``from_currency``."""
    return convert(Decimal(1), from_currency, to_currency, rates)


__all__ = ["to_base", "from_base", "convert", "effective_rate"]
