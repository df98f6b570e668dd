"""Repository protocol for the exchange-rate store."""

from __future__ import annotations

from decimal import Decimal
from typing import Protocol, Sequence

from .models import CurrencyRateRecord


class RateRepository(Protocol):
    async def list_rates(self) -> Sequence[CurrencyRateRecord]:
        ...

    async def upsert_rate(self, from_currency: str, to_currency: str, rate: Decimal) -> CurrencyRateRecord:
        ...
