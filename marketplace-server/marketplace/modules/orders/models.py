"""Domain models for settled orders."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional


class OrderStatus(str, enum.Enum):
    PENDING = "pending"
    PAID = "paid"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class DeliveryOption(str, enum.Enum):
    VAULT = "vault"
    TRADE = "trade"
    SHIP = "ship"


@dataclass(slots=True)
class OrderRecord:
    id: str
    listing_id: str
    buyer_id: str
    seller_id: str
    delivery_option: str
    status: str
    base_price: Decimal
    buyer_fee: Decimal
    seller_fee: Decimal
    listing_currency: str
    price_in_listing_currency: Decimal
    buyer_currency: str
    buyer_total: Decimal
    seller_currency: str
    seller_payout: Decimal
    exchange_rate: Decimal
    usd_try: Decimal
    usd_eur: Decimal
    eur_try: Decimal
    rate_source: str
    buyer_tier: str
    seller_tier: str
    created_at: Optional[datetime]
