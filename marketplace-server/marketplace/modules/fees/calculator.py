"""Tiered buyer/seller fee calculation."""

from __future__ import annotations

from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.core.money import quantize
from marketplace.modules.subscriptions import SubscriptionService, SubscriptionTier

from .models import BUYER_FEE_RATES, SELLER_FEE_RATES, FeeBreakdown


def compute_fees(
    base_price: Decimal,
    buyer_tier: SubscriptionTier,
    seller_tier: SubscriptionTier,
) -> FeeBreakdown:
    """Fees for one sale; each party's rate comes from its own tier."""
    if base_price < 0:
        raise ValueError("base price must not be negative")
    buyer_tier = SubscriptionTier(buyer_tier)
    seller_tier = SubscriptionTier(seller_tier)
    price = quantize(base_price)
    buyer_fee = quantize(price * BUYER_FEE_RATES[buyer_tier])
    seller_fee = quantize(price * SELLER_FEE_RATES[seller_tier])
    return FeeBreakdown(
        base_price=price,
        buyer_fee=buyer_fee,
        seller_fee=seller_fee,
        total_buyer_pays=price + buyer_fee,
        seller_receives=price - seller_fee,
        buyer_tier=buyer_tier,
        seller_tier=seller_tier,
    )


def estimate_fees(
    base_price: Decimal,
    buyer_tier: SubscriptionTier = SubscriptionTier.STANDARD,
    seller_tier: SubscriptionTier = SubscriptionTier.STANDARD,
) -> FeeBreakdown:
    """Display-only estimate that assumes standard tiers unless told otherwise.

    Settlement never uses this; it goes through ``FeeCalculator.compute_for``
    so that Pro rates come from the subscription store.
    """
    return compute_fees(base_price, buyer_tier, seller_tier)


class FeeCalculator:
    def __init__(self, subscriptions: SubscriptionService) -> None:
        self._subscriptions = subscriptions

    @classmethod
    def with_session(cls, session: AsyncSession) -> "FeeCalculator":
        return cls(SubscriptionService.with_session(session))

    async def compute_for(self, base_price: Decimal, buyer_id: str, seller_id: str) -> FeeBreakdown:
        buyer_tier = await self._subscriptions.get_tier(buyer_id)
        seller_tier = await self._subscriptions.get_tier(seller_id)
        return compute_fees(base_price, buyer_tier, seller_tier)
