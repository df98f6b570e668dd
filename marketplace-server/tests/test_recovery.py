from decimal import Decimal

from sqlalchemy import delete, update

from marketplace.core.money import to_cents
from marketplace.db.models import Listing, Order, Transaction, Wallet
from marketplace.modules.settlement import SettlementLocks, SettlementRecovery


async def _purchase(seed, settlement):
    buyer = await seed.account("buyer", balance=Decimal("200"))
    seller = await seed.account("seller")
    listing = await seed.listing(seller, Decimal("100"))
    await seed.rates()
    result = await settlement.purchase(buyer, listing)
    return buyer, seller, listing, result.order


async def _drop_sale_leg(session_factory, order) -> None:
    """Leave the order paid with only the buyer side recorded."""
    async with session_factory() as session:
        async with session.begin():
            await session.execute(
                delete(Transaction).where(Transaction.reference_id == order.id, Transaction.type == "sale")
            )
            await session.execute(
                update(Wallet)
                .where(Wallet.owner_id == order.seller_id)
                .values(balance_cents=Wallet.balance_cents - to_cents(order.seller_payout))
            )


async def test_sweep_leaves_complete_orders_alone(seed, settlement, session_factory):
    await _purchase(seed, settlement)

    report = await SettlementRecovery(session_factory, SettlementLocks()).sweep()

    assert (report.checked, report.completed, report.reversed, report.failed) == (0, 0, 0, 0)


async def test_sweep_only_visits_dangling_orders(seed, settlement, session_factory):
    buyer = await seed.account("buyer", balance=Decimal("1000"))
    seller = await seed.account("seller")
    await seed.rates()
    orders = []
    for i in range(6):
        listing = await seed.listing(seller, Decimal("10"), title=f"Card {i}")
        orders.append((await settlement.purchase(buyer, listing)).order)
    await _drop_sale_leg(session_factory, orders[3])

    report = await SettlementRecovery(session_factory, SettlementLocks()).sweep()

    assert (report.checked, report.completed) == (1, 1)
    legs = await seed.all(Transaction, Transaction.reference_id == orders[3].id)
    assert sorted(tx.type for tx in legs) == ["purchase", "sale"]


async def test_sweep_completes_missing_credit_for_sold_listing(seed, settlement, session_factory):
    buyer, seller, listing, order = await _purchase(seed, settlement)
    await _drop_sale_leg(session_factory, order)
    assert (await seed.wallet(seller)).balance == Decimal("0.00")

    report = await SettlementRecovery(session_factory, SettlementLocks()).sweep()

    assert report.completed == 1
    assert (await seed.wallet(seller)).balance == Decimal("92.00")
    legs = await seed.all(Transaction, Transaction.reference_id == order.id)
    assert sorted(tx.type for tx in legs) == ["purchase", "sale"]
    assert await seed.listing_status(listing) == "sold"


async def test_sweep_reverses_when_listing_not_sold(seed, settlement, session_factory):
    buyer, seller, listing, order = await _purchase(seed, settlement)
    await _drop_sale_leg(session_factory, order)
    async with session_factory() as session:
        async with session.begin():
            await session.execute(update(Listing).where(Listing.id == listing).values(status="active"))

    report = await SettlementRecovery(session_factory, SettlementLocks()).sweep()

    assert report.reversed == 1
    assert (await seed.wallet(buyer)).balance == Decimal("200.00")
    refunds = await seed.all(Transaction, Transaction.reference_id == order.id, Transaction.type == "refund")
    assert [tx.amount_cents for tx in refunds] == [10500]
    cancelled = await seed.all(Order, Order.id == order.id)
    assert cancelled[0].status == "cancelled"
    assert await seed.listing_status(listing) == "active"


async def test_sweep_reverses_when_buyer_cannot_cover_missing_debit(seed, settlement, session_factory):
    buyer, seller, listing, order = await _purchase(seed, settlement)
    async with session_factory() as session:
        async with session.begin():
            await session.execute(
                delete(Transaction).where(Transaction.reference_id == order.id, Transaction.type == "purchase")
            )
            # Buyer balance no longer covers the charge.
            await session.execute(update(Wallet).where(Wallet.owner_id == buyer).values(balance_cents=0))

    report = await SettlementRecovery(session_factory, SettlementLocks()).sweep()

    assert report.reversed == 1
    assert (await seed.wallet(seller)).balance == Decimal("0.00")
    reversals = await seed.all(Transaction, Transaction.reference_id == order.id, Transaction.type == "reversal")
    assert [tx.amount_cents for tx in reversals] == [-9200]
    assert await seed.listing_status(listing) == "active"
