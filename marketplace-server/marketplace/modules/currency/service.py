"""Exchange-rate loading with compiled-in fallback."""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.core.config import get_settings
from marketplace.infrastructure.database.repositories.rate_repository import SqlRateRepository

from .models import (
    DEFAULT_RATES,
    RATE_PAIRS,
    Currency,
    CurrencyRateRecord,
    ExchangeRateSet,
    RateSnapshot,
    RateSource,
)
from .repository import RateRepository

logger = logging.getLogger(__name__)


def _pair_key(from_currency: str, to_currency: str) -> str:
    return f"{from_currency}_{to_currency}"


class CurrencyService:
    """Loads the rate set used by one settlement attempt."""

    def __init__(self, repository: RateRepository, defaults: ExchangeRateSet = DEFAULT_RATES) -> None:
        self._repository = repository
        self._defaults = defaults

    @classmethod
    def with_session(cls, session: AsyncSession) -> "CurrencyService":
        settlement = get_settings().settlement
        defaults = ExchangeRateSet(
            usd_try=settlement.default_usd_try,
            usd_eur=settlement.default_usd_eur,
            eur_try=settlement.default_eur_try,
        )
        return cls(SqlRateRepository(session), defaults)

    @property
    def defaults(self) -> ExchangeRateSet:
        return self._defaults

    async def load_rates(self) -> RateSnapshot:
        """Return live rates, or the default set if the store is unusable.

        Never raises: an unreachable or incomplete rate store must not block a
        purchase. The returned snapshot says which set was used.
        """
        try:
            records = await self._repository.list_rates()
        except Exception as exc:
            logger.warning("Rate store unavailable, settling with default rates: %s", exc)
            return RateSnapshot(
                rates=self._defaults,
                source=RateSource.FALLBACK,
                missing_pairs=tuple(_pair_key(f.value, t.value) for f, t in RATE_PAIRS),
            )

        found: dict[str, Decimal] = {}
        for record in records:
            rate = Decimal(record.rate) if record.rate is not None else None
            if rate is not None and rate > 0:
                found[_pair_key(record.from_currency, record.to_currency)] = rate

        missing = tuple(
            _pair_key(f.value, t.value) for f, t in RATE_PAIRS if _pair_key(f.value, t.value) not in found
        )
        if missing:
            logger.warning("Rate store incomplete (missing %s), settling with default rates", ", ".join(missing))
            return RateSnapshot(rates=self._defaults, source=RateSource.FALLBACK, missing_pairs=missing)

        return RateSnapshot(
            rates=ExchangeRateSet(
                usd_try=found["USD_TRY"],
                usd_eur=found["USD_EUR"],
                eur_try=found["EUR_TRY"],
            ),
            source=RateSource.LIVE,
        )

    async def list_rates(self) -> Sequence[CurrencyRateRecord]:
        return await self._repository.list_rates()

    async def upsert_rate(self, from_currency: Currency, to_currency: Currency, rate: Decimal) -> CurrencyRateRecord:
        pair = (Currency(from_currency), Currency(to_currency))
        if pair not in RATE_PAIRS:
            raise ValueError(f"unsupported rate pair: {_pair_key(pair[0].value, pair[1].value)}")
        if rate <= 0:
            raise ValueError("rate must be positive")
        record = await self._repository.upsert_rate(pair[0].value, pair[1].value, rate)
        logger.info("Exchange rate %s set to %s", _pair_key(pair[0].value, pair[1].value), rate)
        return record
