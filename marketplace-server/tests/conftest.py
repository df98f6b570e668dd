from __future__ import annotations

from decimal import Decimal

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from marketplace.core.config import EffectsSettings, SecuritySettings, Settings, SettlementSettings
from marketplace.core.crypto import hash_password
from marketplace.db.models import Account, Listing
from marketplace.infrastructure.database.base import Base
from marketplace.modules.currency import Currency, CurrencyService
from marketplace.modules.effects import EffectsDispatcher
from marketplace.modules.listings import ListingService
from marketplace.modules.settlement import SettlementLocks, SettlementService
from marketplace.modules.subscriptions import SubscriptionService, SubscriptionTier
from marketplace.modules.wallets import WalletService, WalletSnapshot


@pytest.fixture
async def engine(tmp_path):
    """File-backed SQLite per test so concurrent sessions see each other's commits."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'marketplace.db'}",
        connect_args={"timeout": 30},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(bind=engine, expire_on_commit=False)


@pytest.fixture
def settings():
    return Settings(
        environment="test",
        security=SecuritySettings(secret_key="test-secret-key"),
        settlement=SettlementSettings(ledger_timeout_seconds=5),
        effects=EffectsSettings(max_attempts=2, wait_min_seconds=0, wait_max_seconds=0),
    )


@pytest.fixture
def effects(session_factory, settings):
    return EffectsDispatcher(session_factory, settings.effects)


@pytest.fixture
async def settlement(session_factory, settings, effects):
    yield SettlementService(
        session_factory,
        settings=settings.settlement,
        locks=SettlementLocks(),
        effects=effects,
    )
    await effects.drain()


class Seeder:
    """Builds marketplace state through the same services the app uses."""

    def __init__(self, session_factory) -> None:
        self.session_factory = session_factory

    async def account(
        self,
        username: str,
        *,
        currency: Currency = Currency.USD,
        balance: Decimal = Decimal("0"),
        role: str = "user",
        password: str | None = None,
        tier: SubscriptionTier | None = None,
        wallet: bool = True,
    ) -> str:
        async with self.session_factory() as session:
            async with session.begin():
                account = Account(
                    username=username,
                    password_hash=hash_password(password) if password else "!",
                    role=role,
                    is_active=True,
                )
                session.add(account)
                await session.flush()
                if wallet:
                    wallets = WalletService.with_session(session)
                    await wallets.ensure_wallet(account.id, currency)
                    if balance > 0:
                        await wallets.top_up(owner_id=account.id, amount=Decimal(balance))
                if tier is not None:
                    await SubscriptionService.with_session(session).set_tier(account.id, tier)
                return account.id

    async def listing(
        self,
        seller_id: str,
        price: Decimal = Decimal("100"),
        currency: Currency = Currency.USD,
        title: str = "Charizard Base Set Holo",
    ) -> str:
        async with self.session_factory() as session:
            async with session.begin():
                listing = await ListingService.with_session(session).create_listing(
                    seller_id=seller_id,
                    title=title,
                    price=Decimal(price),
                    currency=currency,
                    category="pokemon",
                    condition="psa_9",
                )
                return listing.id

    async def rates(
        self,
        usd_try: Decimal = Decimal("38.0"),
        usd_eur: Decimal = Decimal("0.92"),
        eur_try: Decimal = Decimal("41.30"),
    ) -> None:
        async with self.session_factory() as session:
            async with session.begin():
                service = CurrencyService.with_session(session)
                await service.upsert_rate(Currency.USD, Currency.TRY, usd_try)
                await service.upsert_rate(Currency.USD, Currency.EUR, usd_eur)
                await service.upsert_rate(Currency.EUR, Currency.TRY, eur_try)

    async def wallet(self, owner_id: str) -> WalletSnapshot:
        async with self.session_factory() as session:
            wallet = await WalletService.with_session(session).get_wallet(owner_id)
            assert wallet is not None
            return wallet

    async def listing_status(self, listing_id: str) -> str:
        async with self.session_factory() as session:
            listing = await session.get(Listing, listing_id)
            return listing.status

    async def count(self, model, *criteria) -> int:
        async with self.session_factory() as session:
            stmt = select(func.count()).select_from(model)
            if criteria:
                stmt = stmt.where(*criteria)
            result = await session.execute(stmt)
            return int(result.scalar_one())

    async def all(self, model, *criteria) -> list:
        async with self.session_factory() as session:
            stmt = select(model)
            if criteria:
                stmt = stmt.where(*criteria)
            result = await session.execute(stmt)
            return list(result.scalars().all())


@pytest.fixture
def seed(session_factory):
    return Seeder(session_factory)
