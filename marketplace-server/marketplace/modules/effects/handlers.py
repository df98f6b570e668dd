"""Individual post-settlement effects.

Each handler runs in its own transaction and may be retried, so a handler
must leave no partial state when it raises.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from datetime import date

from marketplace.core.money import to_cents
from marketplace.modules.orders import DeliveryOption

from .models import XP_AMOUNTS, EffectContext, XpAction, purchase_achievements, sale_achievements
from .repository import ProgressRepository

logger = logging.getLogger(__name__)

EffectHandler = Callable[[ProgressRepository, EffectContext], Awaitable[None]]


async def add_buyer_portfolio_item(repo: ProgressRepository, ctx: EffectContext) -> None:
    order = ctx.order
    await repo.add_portfolio_item(
        user_id=order.buyer_id,
        custom_name=ctx.listing.title,
        purchase_price_cents=to_cents(order.price_in_listing_currency),
        currency=order.listing_currency,
        purchase_date=(order.created_at.date() if order.created_at else date.today()),
        image_url=ctx.listing.image_url,
        in_vault=order.delivery_option == DeliveryOption.VAULT.value,
    )


async def add_vault_item(repo: ProgressRepository, ctx: EffectContext) -> None:
    order = ctx.order
    if order.delivery_option != DeliveryOption.VAULT.value:
        return
    if await repo.has_vault_item(order.id):
        return
    await repo.add_vault_item(
        owner_id=order.buyer_id,
        title=ctx.listing.title,
        category=ctx.listing.category,
        condition=ctx.listing.condition,
        estimated_value_cents=to_cents(ctx.listing.price),
        currency=ctx.listing.currency,
        listing_id=ctx.listing.id,
        order_id=order.id,
        image_url=ctx.listing.image_url,
    )


async def remove_seller_portfolio_item(repo: ProgressRepository, ctx: EffectContext) -> None:
    removed = await repo.delete_portfolio_by_name(ctx.order.seller_id, ctx.listing.title)
    if removed:
        logger.debug("Removed %s portfolio entries for seller %s", removed, ctx.order.seller_id)


async def award_buyer_progress(repo: ProgressRepository, ctx: EffectContext) -> None:
    buyer_id = ctx.order.buyer_id
    count = await repo.count_purchases(buyer_id)
    for key in purchase_achievements(count):
        await repo.award_achievement(buyer_id, key)
    await repo.add_xp(
        user_id=buyer_id,
        action=XpAction.PURCHASE.value,
        xp_amount=XP_AMOUNTS[XpAction.PURCHASE],
        reference_id=ctx.order.id,
    )
    if count == 1:
        await repo.add_xp(
            user_id=buyer_id,
            action=XpAction.FIRST_PURCHASE.value,
            xp_amount=XP_AMOUNTS[XpAction.FIRST_PURCHASE],
            reference_id=ctx.order.id,
        )


async def award_seller_progress(repo: ProgressRepository, ctx: EffectContext) -> None:
    seller_id = ctx.order.seller_id
    count = await repo.count_sales(seller_id)
    for key in sale_achievements(count):
        await repo.award_achievement(seller_id, key)
    await repo.add_xp(
        user_id=seller_id,
        action=XpAction.SALE.value,
        xp_amount=XP_AMOUNTS[XpAction.SALE],
        reference_id=ctx.order.id,
    )


DEFAULT_EFFECTS: dict[str, EffectHandler] = {
    "buyer_portfolio": add_buyer_portfolio_item,
    "vault_item": add_vault_item,
    "seller_portfolio": remove_seller_portfolio_item,
    "buyer_progress": award_buyer_progress,
    "seller_progress": award_seller_progress,
}
