import asyncio
from decimal import Decimal

import aiosqlite
import pytest

from marketplace.core.config import SettlementSettings
from marketplace.db.models import Order, Transaction, VaultItem, Wallet
from marketplace.infrastructure.database.repositories.rate_repository import SqlRateRepository
from marketplace.infrastructure.database.repositories.wallet_repository import SqlWalletRepository
from marketplace.modules.currency import Currency
from marketplace.modules.orders import DeliveryOption, OrderStatus
from marketplace.modules.settlement import (
    InsufficientFunds,
    LedgerWriteFailure,
    LedgerWriter,
    ListingUnavailable,
    NotAuthenticated,
    SelfPurchase,
    SettlementLocks,
    SettlementService,
    WalletNotFound,
)
from marketplace.modules.subscriptions import SubscriptionTier


async def _ledger_total(seed, owner_id: str) -> Decimal:
    wallet = await seed.wallet(owner_id)
    txs = await seed.all(Transaction, Transaction.wallet_id == wallet.id)
    return Decimal(sum(tx.amount_cents for tx in txs)) / 100


async def test_standard_purchase_settles_all_legs(seed, settlement, effects):
    buyer = await seed.account("buyer", balance=Decimal("105"))
    seller = await seed.account("seller")
    listing = await seed.listing(seller, Decimal("100"))
    await seed.rates()

    result = await settlement.purchase(buyer, listing)
    await effects.drain()

    order = result.order
    assert order.status == OrderStatus.PAID.value
    assert order.buyer_total == Decimal("105.00")
    assert order.seller_payout == Decimal("92.00")
    assert order.buyer_fee == Decimal("5.00")
    assert order.seller_fee == Decimal("8.00")
    assert order.exchange_rate == Decimal("1")
    assert order.rate_source == "live"

    assert (await seed.wallet(buyer)).balance == Decimal("0.00")
    assert (await seed.wallet(seller)).balance == Decimal("92.00")
    assert await seed.listing_status(listing) == "sold"

    legs = await seed.all(Transaction, Transaction.reference_id == order.id)
    assert sorted((tx.type, tx.amount_cents, tx.fee_cents) for tx in legs) == [
        ("purchase", -10500, 500),
        ("sale", 9200, 800),
    ]


async def test_pro_buyer_pays_reduced_fee(seed, settlement):
    buyer = await seed.account("buyer", balance=Decimal("102.50"), tier=SubscriptionTier.PRO)
    seller = await seed.account("seller")
    listing = await seed.listing(seller, Decimal("100"))
    await seed.rates()

    result = await settlement.purchase(buyer, listing)

    assert result.order.buyer_total == Decimal("102.50")
    assert result.order.buyer_tier == "pro"
    assert (await seed.wallet(buyer)).balance == Decimal("0.00")


async def test_one_cent_short_leaves_no_trace(seed, settlement):
    buyer = await seed.account("buyer", balance=Decimal("104.99"))
    seller = await seed.account("seller")
    listing = await seed.listing(seller, Decimal("100"))
    await seed.rates()

    with pytest.raises(InsufficientFunds) as excinfo:
        await settlement.purchase(buyer, listing)

    assert excinfo.value.required == Decimal("105.00")
    assert excinfo.value.shortfall == Decimal("0.01")
    assert "105.00 USD" in excinfo.value.user_message
    assert (await seed.wallet(buyer)).balance == Decimal("104.99")
    assert (await seed.wallet(seller)).balance == Decimal("0.00")
    assert await seed.listing_status(listing) == "active"
    assert await seed.count(Order) == 0


async def test_cross_currency_purchase(seed, settlement):
    buyer = await seed.account("buyer", currency=Currency.TRY, balance=Decimal("5000"))
    seller = await seed.account("seller", currency=Currency.USD)
    listing = await seed.listing(seller, Decimal("100"), currency=Currency.EUR)
    await seed.rates(usd_try=Decimal("38"), usd_eur=Decimal("0.92"))

    result = await settlement.purchase(buyer, listing)
    order = result.order

    # 105 EUR -> 114.1304.. USD -> 4336.956.. TRY
    assert order.buyer_currency == "TRY"
    assert order.buyer_total == Decimal("4336.96")
    # 92 EUR -> 100.0 USD
    assert order.seller_currency == "USD"
    assert order.seller_payout == Decimal("100.00")
    assert order.base_price == Decimal("108.70")
    assert order.price_in_listing_currency == Decimal("100.00")
    assert order.usd_try == Decimal("38")
    assert (await seed.wallet(buyer)).balance == Decimal("663.04")
    assert (await seed.wallet(seller)).balance == Decimal("100.00")


async def test_unreachable_rate_store_settles_with_defaults(seed, settlement, monkeypatch):
    buyer = await seed.account("buyer", currency=Currency.TRY, balance=Decimal("10000"))
    seller = await seed.account("seller")
    listing = await seed.listing(seller, Decimal("100"))

    async def unreachable(self):
        raise ConnectionError("rate store down")

    monkeypatch.setattr(SqlRateRepository, "list_rates", unreachable)

    result = await settlement.purchase(buyer, listing)

    assert result.rate_source == "fallback"
    assert result.order.rate_source == "fallback"
    assert result.order.exchange_rate == Decimal("38")
    assert result.order.usd_try == Decimal("38")
    assert result.order.buyer_total == Decimal("3990.00")


async def test_empty_rate_store_uses_fallback(seed, settlement):
    buyer = await seed.account("buyer", balance=Decimal("105"))
    seller = await seed.account("seller")
    listing = await seed.listing(seller, Decimal("100"))

    result = await settlement.purchase(buyer, listing)

    assert result.order.rate_source == "fallback"
    assert result.order.exchange_rate == Decimal("1")


async def test_concurrent_purchases_of_one_listing(seed, settlement):
    first = await seed.account("first", balance=Decimal("500"))
    second = await seed.account("second", balance=Decimal("500"))
    seller = await seed.account("seller")
    listing = await seed.listing(seller, Decimal("100"))
    await seed.rates()

    outcomes = await asyncio.gather(
        settlement.purchase(first, listing),
        settlement.purchase(second, listing),
        return_exceptions=True,
    )

    failures = [o for o in outcomes if isinstance(o, Exception)]
    assert len(failures) == 1
    assert isinstance(failures[0], ListingUnavailable)
    assert await seed.count(Order) == 1
    assert await seed.listing_status(listing) == "sold"
    assert (await seed.wallet(seller)).balance == Decimal("92.00")
    balances = sorted([(await seed.wallet(first)).balance, (await seed.wallet(second)).balance])
    assert balances == [Decimal("395.00"), Decimal("500.00")]


async def test_concurrent_purchases_from_one_wallet_never_overdraw(seed, settlement):
    buyer = await seed.account("buyer", balance=Decimal("150"))
    seller = await seed.account("seller")
    listings = [await seed.listing(seller, Decimal("100"), title=f"Card {i}") for i in range(3)]
    await seed.rates()

    outcomes = await asyncio.gather(
        *(settlement.purchase(buyer, listing) for listing in listings),
        return_exceptions=True,
    )

    assert sum(1 for o in outcomes if not isinstance(o, Exception)) == 1
    assert all(isinstance(o, InsufficientFunds) for o in outcomes if isinstance(o, Exception))
    assert (await seed.wallet(buyer)).balance == Decimal("45.00")
    assert await seed.count(Wallet, Wallet.balance_cents < 0) == 0


async def test_ledger_sums_match_balances(seed, settlement):
    alice = await seed.account("alice", balance=Decimal("1000"))
    bob = await seed.account("bob", balance=Decimal("1000"))
    await seed.rates()
    for price, seller, buyer in ((Decimal("100"), bob, alice), (Decimal("40.10"), alice, bob), (Decimal("9.99"), bob, alice)):
        listing = await seed.listing(seller, price)
        await settlement.purchase(buyer, listing)

    for owner in (alice, bob):
        assert (await seed.wallet(owner)).balance == await _ledger_total(seed, owner)


async def test_every_paid_order_has_both_legs(seed, settlement):
    buyer = await seed.account("buyer", balance=Decimal("1000"))
    seller = await seed.account("seller")
    await seed.rates()
    for i in range(3):
        await settlement.purchase(buyer, await seed.listing(seller, Decimal("50"), title=f"Card {i}"))

    for order in await seed.all(Order, Order.status == OrderStatus.PAID.value):
        types = {tx.type for tx in await seed.all(Transaction, Transaction.reference_id == order.id)}
        assert types == {"purchase", "sale"}


async def test_missing_buyer_is_not_authenticated(settlement):
    with pytest.raises(NotAuthenticated):
        await settlement.purchase(None, "listing")


async def test_cannot_buy_own_listing(seed, settlement):
    seller = await seed.account("seller", balance=Decimal("500"))
    listing = await seed.listing(seller)
    with pytest.raises(SelfPurchase):
        await settlement.purchase(seller, listing)


async def test_sold_listing_is_unavailable_before_balance_check(seed, settlement):
    rich = await seed.account("rich", balance=Decimal("500"))
    poor = await seed.account("poor", balance=Decimal("1"))
    seller = await seed.account("seller")
    listing = await seed.listing(seller)
    await settlement.purchase(rich, listing)

    with pytest.raises(ListingUnavailable):
        await settlement.purchase(poor, listing)


async def test_unknown_listing_is_unavailable(seed, settlement):
    buyer = await seed.account("buyer", balance=Decimal("500"))
    with pytest.raises(ListingUnavailable):
        await settlement.purchase(buyer, "missing-listing")


async def test_missing_wallet_raises_and_alerts(seed, settlement, caplog):
    buyer = await seed.account("buyer", wallet=False)
    seller = await seed.account("seller")
    listing = await seed.listing(seller)

    with pytest.raises(WalletNotFound) as excinfo:
        await settlement.purchase(buyer, listing)

    assert excinfo.value.role == "buyer"
    assert "Wallet integrity alert" in caplog.text
    assert await seed.listing_status(listing) == "active"


class StallingLedgerWriter(LedgerWriter):
    async def settle(self, session, quote, progress=None):
        order = await super().settle(session, quote, progress)
        await asyncio.sleep(10)
        return order


async def test_timeout_rolls_back_every_write(seed, session_factory, caplog):
    service = SettlementService(
        session_factory,
        settings=SettlementSettings(ledger_timeout_seconds=0.2),
        locks=SettlementLocks(),
        ledger=StallingLedgerWriter(),
    )
    buyer = await seed.account("buyer", balance=Decimal("105"))
    seller = await seed.account("seller")
    listing = await seed.listing(seller)
    await seed.rates()

    with pytest.raises(LedgerWriteFailure) as excinfo:
        await service.purchase(buyer, listing)

    assert excinfo.value.order_id is not None
    assert excinfo.value.order_id in caplog.text
    assert await seed.count(Order) == 0
    assert await seed.listing_status(listing) == "active"
    assert (await seed.wallet(buyer)).balance == Decimal("105.00")
    assert (await seed.wallet(seller)).balance == Decimal("0.00")



async def test_slow_commit_acknowledgement_still_settles(seed, session_factory, effects, monkeypatch):
    service = SettlementService(
        session_factory,
        settings=SettlementSettings(ledger_timeout_seconds=0.3),
        locks=SettlementLocks(),
        effects=effects,
    )
    buyer = await seed.account("buyer", balance=Decimal("105"))
    seller = await seed.account("seller")
    listing = await seed.listing(seller)
    await seed.rates()

    original = aiosqlite.Connection.commit
    delayed = []

    async def slow_commit(self):
        await original(self)
        if not delayed:
            delayed.append(True)
            await asyncio.sleep(1)

    monkeypatch.setattr(aiosqlite.Connection, "commit", slow_commit)

    result = await service.purchase(buyer, listing)
    await effects.drain()

    assert delayed == [True]
    assert result.order.status == OrderStatus.PAID.value
    assert await seed.listing_status(listing) == "sold"
    assert (await seed.wallet(buyer)).balance == Decimal("0.00")
    assert await seed.count(VaultItem, VaultItem.order_id == result.order.id) == 1

async def test_failure_after_order_insert_rolls_back(seed, settlement, monkeypatch):
    buyer = await seed.account("buyer", balance=Decimal("105"))
    seller = await seed.account("seller")
    listing = await seed.listing(seller)
    await seed.rates()

    original = SqlWalletRepository.add_transaction

    async def failing_add_transaction(self, **kwargs):
        if kwargs["type"] == "sale":
            raise RuntimeError("disk full")
        return await original(self, **kwargs)

    monkeypatch.setattr(SqlWalletRepository, "add_transaction", failing_add_transaction)

    with pytest.raises(LedgerWriteFailure) as excinfo:
        await settlement.purchase(buyer, listing)

    assert excinfo.value.step == "record_sale"
    assert await seed.count(Order) == 0
    assert await seed.count(Transaction, Transaction.type == "purchase") == 0
    assert await seed.listing_status(listing) == "active"
    assert (await seed.wallet(buyer)).balance == Decimal("105.00")


async def test_delivery_option_is_recorded(seed, settlement):
    buyer = await seed.account("buyer", balance=Decimal("105"))
    seller = await seed.account("seller")
    listing = await seed.listing(seller)
    await seed.rates()

    result = await settlement.purchase(buyer, listing, DeliveryOption.SHIP)

    assert result.order.delivery_option == "ship"


async def test_quote_without_buyer_is_estimate(seed, settlement):
    seller = await seed.account("seller", tier=SubscriptionTier.PRO)
    listing = await seed.listing(seller)

    quote = await settlement.quote(listing)

    assert quote.estimated
    assert quote.fees.seller_tier is SubscriptionTier.STANDARD
    assert quote.buyer_total == Decimal("105.00")


async def test_quote_for_buyer_uses_real_tiers_and_wallet_currency(seed, settlement):
    buyer = await seed.account("buyer", currency=Currency.TRY, tier=SubscriptionTier.PRO)
    seller = await seed.account("seller")
    listing = await seed.listing(seller)
    await seed.rates(usd_try=Decimal("40"))

    quote = await settlement.quote(listing, buyer)

    assert not quote.estimated
    assert quote.buyer_currency == "TRY"
    assert quote.buyer_total == Decimal("4100.00")
    assert await seed.count(Order) == 0
