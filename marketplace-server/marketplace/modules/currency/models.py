"""Currency and exchange-rate domain models."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Optional


class Currency(str, enum.Enum):
    USD = "USD"
    EUR = "EUR"
    TRY = "TRY"


BASE_CURRENCY = Currency.USD


class RateSource(str, enum.Enum):
    LIVE = "live"
    FALLBACK = "fallback"


# Pairs the rate store is expected to hold, keyed as (from, to).
RATE_PAIRS: tuple[tuple[Currency, Currency], ...] = (
    (Currency.USD, Currency.TRY),
    (Currency.USD, Currency.EUR),
    (Currency.EUR, Currency.TRY),
)


@dataclass(frozen=True, slots=True)
class ExchangeRateSet:
    """Conversion factors: units of the quote currency per one unit of the base."""

    usd_try: Decimal
    usd_eur: Decimal
    eur_try: Decimal

    def per_usd(self, currency: Currency) -> Decimal:
        """Units of ``currency`` bought by one USD."""
        if currency is Currency.USD:
            return Decimal(1)
        if currency is Currency.TRY:
            return self.usd_try
        if currency is Currency.EUR:
            return self.usd_eur
        raise ValueError(f"unsupported currency: {currency}")


DEFAULT_RATES = ExchangeRateSet(
    usd_try=Decimal("38.0"),
    usd_eur=Decimal("0.92"),
    eur_try=Decimal("41.30"),
)


@dataclass(frozen=True, slots=True)
class RateSnapshot:
    """Rates used for one settlement attempt, tagged with where they came from."""

    rates: ExchangeRateSet
    source: RateSource
    missing_pairs: tuple[str, ...] = field(default_factory=tuple)

    @property
    def is_fallback(self) -> bool:
        return self.source is RateSource.FALLBACK


@dataclass(slots=True)
class CurrencyRateRecord:
    from_currency: str
    to_currency: str
    rate: Decimal
    updated_at: Optional[datetime]
