"""Post-settlement effect models."""

from __future__ import annotations

import enum
from dataclasses import dataclass

from marketplace.modules.listings import ListingSnapshot
from marketplace.modules.orders import OrderRecord


class XpAction(str, enum.Enum):
    PURCHASE = "purchase"
    SALE = "sale"
    FIRST_PURCHASE = "first_purchase"


XP_AMOUNTS = {
    XpAction.PURCHASE: 10,
    XpAction.SALE: 15,
    XpAction.FIRST_PURCHASE: 50,
}

COUNT_MILESTONES = (5, 10, 25, 50, 100)


def purchase_achievements(purchase_count: int) -> list[str]:
    keys = ["first_purchase"] if purchase_count >= 1 else []
    keys.extend(f"purchase_{n}" for n in COUNT_MILESTONES if purchase_count >= n)
    return keys


def sale_achievements(sale_count: int) -> list[str]:
    keys = ["first_sale"] if sale_count >= 1 else []
    keys.extend(f"sales_{n}" for n in COUNT_MILESTONES if sale_count >= n)
    return keys


@dataclass(frozen=True, slots=True)
class EffectContext:
    """What every effect handler sees: the committed order and the listing it sold."""

    order: OrderRecord
    listing: ListingSnapshot
