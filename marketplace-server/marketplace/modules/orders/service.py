"""Order queries."""

from __future__ import annotations

from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.core.money import from_cents
from marketplace.db.models import Order as OrderModel
from marketplace.infrastructure.database.repositories.order_repository import SqlOrderRepository

from .models import OrderRecord
from .repository import OrderRepository


class OrderService:
    def __init__(self, repository: OrderRepository) -> None:
        self._repository = repository

    @classmethod
    def with_session(cls, session: AsyncSession) -> "OrderService":
        return cls(SqlOrderRepository(session))

    async def get_order(self, order_id: str) -> OrderRecord | None:
        model = await self._repository.get_order(order_id)
        return self.to_record(model) if model else None

    async def list_orders(self, user_id: str, limit: int = 20, offset: int = 0) -> list[OrderRecord]:
        rows = await self._repository.list_for_user(user_id, limit, offset)
        return [self.to_record(row) for row in rows]

    async def count_orders(self, user_id: str) -> int:
        return await self._repository.count_for_user(user_id)

    @staticmethod
    def to_record(model: OrderModel) -> OrderRecord:
        return OrderRecord(
            id=model.id,
            listing_id=model.listing_id,
            buyer_id=model.buyer_id,
            seller_id=model.seller_id,
            delivery_option=model.delivery_option,
            status=model.status,
            base_price=from_cents(model.base_price_cents),
            buyer_fee=from_cents(model.buyer_fee_cents),
            seller_fee=from_cents(model.seller_fee_cents),
            listing_currency=model.listing_currency,
            price_in_listing_currency=from_cents(model.price_in_listing_cents),
            buyer_currency=model.buyer_currency,
            buyer_total=from_cents(model.buyer_total_cents),
            seller_currency=model.seller_currency,
            seller_payout=from_cents(model.seller_payout_cents),
            exchange_rate=Decimal(model.exchange_rate),
            usd_try=Decimal(model.usd_try),
            usd_eur=Decimal(model.usd_eur),
            eur_try=Decimal(model.eur_try),
            rate_source=model.rate_source,
            buyer_tier=model.buyer_tier,
            seller_tier=model.seller_tier,
            created_at=model.created_at,
        )
