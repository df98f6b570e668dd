"""Listing domain models."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from decimal import Decimal
from types import MappingProxyType
from typing import Optional

from marketplace.modules.currency.models import Currency


# Per-currency price floor; each stays at or above 1.00 USD at the default rates.
MIN_LISTING_PRICE = MappingProxyType(
    {
        Currency.USD: Decimal("1.00"),
        Currency.EUR: Decimal("1.00"),
        Currency.TRY: Decimal("50.00"),
    }
)


class ListingStatus(str, enum.Enum):
    ACTIVE = "active"
    SOLD = "sold"
    CANCELLED = "cancelled"
    RESERVED = "reserved"


@dataclass(slots=True)
class ListingSnapshot:
    id: str
    seller_id: str
    title: str
    category: str
    condition: str
    image_url: Optional[str]
    price: Decimal
    currency: str
    status: str
    version: int

    @property
    def is_purchasable(self) -> bool:
        return self.status == ListingStatus.ACTIVE.value
