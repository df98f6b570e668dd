"""
Seed a development database.

Creates an admin, a buyer and a seller with funded wallets, the three
exchange-rate pairs and one active listing.
"""
import asyncio
from decimal import Decimal

from marketplace.core.config import get_settings
from marketplace.infrastructure.database.session import dispose_engine, get_session_factory, init_db
from marketplace.modules.accounts import ADMIN_ROLE, AccountCreateInput, AccountService
from marketplace.modules.currency import Currency, CurrencyService
from marketplace.modules.listings import ListingService
from marketplace.modules.wallets import WalletService

SEED_ACCOUNTS = (
    # username, password, role, wallet currency, opening balance
    ("admin", "admin123", ADMIN_ROLE, Currency.USD, Decimal("0")),
    ("buyer", "buyer123", "user", Currency.TRY, Decimal("10000")),
    ("seller", "seller123", "user", Currency.USD, Decimal("0")),
)


async def seed() -> None:
    await init_db()
    settlement = get_settings().settlement

    async with get_session_factory()() as db:
        async with db.begin():
            accounts = AccountService.with_session(db)
            wallets = WalletService.with_session(db)
            ids: dict[str, str] = {}

            for username, password, role, currency, balance in SEED_ACCOUNTS:
                account = await accounts.get_by_username(username)
                if account is None:
                    account = await accounts.create_account(
                        AccountCreateInput(username=username, password=password, role=role)
                    )
                    print(f"created account {username} / {password}")
                ids[username] = account.id
                wallet = await wallets.ensure_wallet(account.id, currency)
                if balance > 0 and wallet.balance == 0:
                    await wallets.top_up(owner_id=account.id, amount=balance, description="Seed balance")

            rates = CurrencyService.with_session(db)
            await rates.upsert_rate(Currency.USD, Currency.TRY, settlement.default_usd_try)
            await rates.upsert_rate(Currency.USD, Currency.EUR, settlement.default_usd_eur)
            await rates.upsert_rate(Currency.EUR, Currency.TRY, settlement.default_eur_try)

            listing = await ListingService.with_session(db).create_listing(
                seller_id=ids["seller"],
                title="Charizard Base Set Holo",
                price=Decimal("100.00"),
                currency=Currency.USD,
                category="pokemon",
                condition="psa_9",
            )
            print(f"created listing {listing.id}: {listing.title} {listing.price} {listing.currency}")

    await dispose_engine()


if __name__ == "__main__":
    asyncio.run(seed())
