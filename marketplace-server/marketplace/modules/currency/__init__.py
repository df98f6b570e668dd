"""Currency conversion exports"""

from .conversion import convert, effective_rate, from_base, to_base
from .models import (
    BASE_CURRENCY,
    DEFAULT_RATES,
    Currency,
    CurrencyRateRecord,
    ExchangeRateSet,
    RateSnapshot,
    RateSource,
)
from .service import CurrencyService

__all__ = [
    "BASE_CURRENCY",
    "DEFAULT_RATES",
    "Currency",
    "CurrencyRateRecord",
    "CurrencyService",
    "ExchangeRateSet",
    "RateSnapshot",
    "RateSource",
    "convert",
    "effective_rate",
    "from_base",
    "to_base",
]
