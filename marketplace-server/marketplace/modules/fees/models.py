"""Fee table and fee breakdown."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from types import MappingProxyType

from marketplace.modules.subscriptions.models import SubscriptionTier

BUYER_FEE_RATES = MappingProxyType(
    {
        SubscriptionTier.STANDARD: Decimal("0.05"),
        SubscriptionTier.PRO: Decimal("0.025"),
    }
)

SELLER_FEE_RATES = MappingProxyType(
    {
        SubscriptionTier.STANDARD: Decimal("0.08"),
        SubscriptionTier.PRO: Decimal("0.045"),
    }
)

# Lowest base price at which cent rounding still leaves Pro strictly cheaper for both parties.
MIN_TIERED_BASE_PRICE = Decimal("1.00")


@dataclass(frozen=True, slots=True)
class FeeBreakdown:
    base_price: Decimal
    buyer_fee: Decimal
    seller_fee: Decimal
    total_buyer_pays: Decimal
    seller_receives: Decimal
    buyer_tier: SubscriptionTier
    seller_tier: SubscriptionTier
