"""SQLAlchemy implementation of the exchange-rate store."""

from __future__ import annotations

from decimal import Decimal
from typing import Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.db.models import CurrencyRate
from marketplace.modules.currency.models import CurrencyRateRecord


class SqlRateRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def list_rates(self) -> Sequence[CurrencyRateRecord]:
        stmt = select(CurrencyRate).order_by(CurrencyRate.from_currency, CurrencyRate.to_currency)
        result = await self.session.execute(stmt)
        return [self._to_domain(row) for row in result.scalars().all()]

    async def upsert_rate(self, from_currency: str, to_currency: str, rate: Decimal) -> CurrencyRateRecord:
        stmt = select(CurrencyRate).where(
            CurrencyRate.from_currency == from_currency,
            CurrencyRate.to_currency == to_currency,
        )
        result = await self.session.execute(stmt)
        model = result.scalars().first()
        if model is None:
            model = CurrencyRate(from_currency=from_currency, to_currency=to_currency, rate=rate)
            self.session.add(model)
        else:
            model.rate = rate
        await self.session.flush()
        await self.session.refresh(model)
        return self._to_domain(model)

    @staticmethod
    def _to_domain(model: CurrencyRate) -> CurrencyRateRecord:
        return CurrencyRateRecord(
            from_currency=model.from_currency,
            to_currency=model.to_currency,
            rate=Decimal(model.rate),
            updated_at=model.updated_at,
        )
