from decimal import Decimal

from marketplace.core.config import EffectsSettings, SettlementSettings
from marketplace.db.models import EffectFailure, PortfolioItem, UserAchievement, VaultItem, XpEvent
from marketplace.modules.effects import EffectsDispatcher, purchase_achievements, sale_achievements
from marketplace.modules.orders import DeliveryOption
from marketplace.modules.settlement import SettlementLocks, SettlementService


def test_achievement_milestones():
    assert purchase_achievements(0) == []
    assert purchase_achievements(1) == ["first_purchase"]
    assert purchase_achievements(10) == ["first_purchase", "purchase_5", "purchase_10"]
    assert sale_achievements(100)[-1] == "sales_100"


async def _portfolio_entry(session_factory, user_id: str, name: str) -> None:
    async with session_factory() as session:
        async with session.begin():
            session.add(PortfolioItem(user_id=user_id, custom_name=name, in_vault=False))


async def test_vault_purchase_runs_every_effect(seed, settlement, effects, session_factory):
    buyer = await seed.account("buyer", balance=Decimal("500"))
    seller = await seed.account("seller")
    await _portfolio_entry(session_factory, seller, "charizard base set holo")
    await _portfolio_entry(session_factory, seller, "Blastoise")
    listing = await seed.listing(seller, Decimal("100"), title="Charizard Base Set Holo")
    await seed.rates()

    result = await settlement.purchase(buyer, listing, DeliveryOption.VAULT)
    await effects.drain()

    vault = await seed.all(VaultItem, VaultItem.owner_id == buyer)
    assert [(item.order_id, item.estimated_value_cents) for item in vault] == [(result.order.id, 10000)]

    buyer_portfolio = await seed.all(PortfolioItem, PortfolioItem.user_id == buyer)
    assert [(p.custom_name, p.in_vault) for p in buyer_portfolio] == [("Charizard Base Set Holo", True)]
    seller_portfolio = await seed.all(PortfolioItem, PortfolioItem.user_id == seller)
    assert [p.custom_name for p in seller_portfolio] == ["Blastoise"]

    assert {a.achievement_key for a in await seed.all(UserAchievement, UserAchievement.user_id == buyer)} == {
        "first_purchase"
    }
    assert {a.achievement_key for a in await seed.all(UserAchievement, UserAchievement.user_id == seller)} == {
        "first_sale"
    }
    assert sorted(x.xp_amount for x in await seed.all(XpEvent, XpEvent.user_id == buyer)) == [10, 50]
    assert [x.xp_amount for x in await seed.all(XpEvent, XpEvent.user_id == seller)] == [15]
    assert await seed.count(EffectFailure) == 0


async def test_shipped_purchase_skips_vault(seed, settlement, effects):
    buyer = await seed.account("buyer", balance=Decimal("500"))
    seller = await seed.account("seller")
    listing = await seed.listing(seller)

    await settlement.purchase(buyer, listing, DeliveryOption.SHIP)
    await effects.drain()

    assert await seed.count(VaultItem) == 0
    portfolio = await seed.all(PortfolioItem, PortfolioItem.user_id == buyer)
    assert [p.in_vault for p in portfolio] == [False]


async def test_achievements_are_awarded_once(seed, settlement, effects):
    buyer = await seed.account("buyer", balance=Decimal("1000"))
    seller = await seed.account("seller")
    for i in range(5):
        await settlement.purchase(buyer, await seed.listing(seller, Decimal("10"), title=f"Card {i}"))
        await effects.drain()

    keys = sorted(a.achievement_key for a in await seed.all(UserAchievement, UserAchievement.user_id == buyer))
    assert keys == ["first_purchase", "purchase_5"]
    # One first-purchase bonus, five purchase grants.
    assert sorted(x.action for x in await seed.all(XpEvent, XpEvent.user_id == buyer)) == (
        ["first_purchase"] + ["purchase"] * 5
    )


async def test_failing_effect_is_dead_lettered_without_failing_purchase(seed, session_factory, caplog):
    calls = []

    async def broken(repo, ctx):
        calls.append(ctx.order.id)
        raise RuntimeError("portfolio service down")

    async def working(repo, ctx):
        await repo.award_achievement(ctx.order.buyer_id, "first_purchase")

    effects = EffectsDispatcher(
        session_factory,
        EffectsSettings(max_attempts=3, wait_min_seconds=0, wait_max_seconds=0),
        handlers={"broken": broken, "working": working},
    )
    service = SettlementService(
        session_factory,
        settings=SettlementSettings(),
        locks=SettlementLocks(),
        effects=effects,
    )
    buyer = await seed.account("buyer", balance=Decimal("500"))
    seller = await seed.account("seller")
    listing = await seed.listing(seller)

    result = await service.purchase(buyer, listing)
    await effects.drain()

    assert result.order.status == "paid"
    assert len(calls) == 3
    failures = await seed.all(EffectFailure)
    assert [(f.order_id, f.effect, f.attempts) for f in failures] == [(result.order.id, "broken", 3)]
    assert "effect broken failed for order" in caplog.text
    assert await seed.count(UserAchievement, UserAchievement.user_id == buyer) == 1


async def test_disabled_dispatcher_schedules_nothing(session_factory):
    effects = EffectsDispatcher(session_factory, EffectsSettings(enabled=False))
    assert effects.dispatch(order=None, listing=None) == []
    assert effects.pending == 0
