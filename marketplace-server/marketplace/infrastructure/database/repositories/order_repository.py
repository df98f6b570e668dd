"""SQLAlchemy implementation for orders"""

from __future__ import annotations

from typing import Any, Sequence

from sqlalchemy import desc, exists, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.db.models import Order, Transaction


class SqlOrderRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create_order(self, **values: Any) -> Order:
        order = Order(**values)
        self.session.add(order)
        await self.session.flush()
        await self.session.refresh(order)
        return order

    async def get_order(self, order_id: str) -> Order | None:
        stmt = select(Order).where(Order.id == order_id).execution_options(populate_existing=True)
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def list_for_user(self, user_id: str, limit: int, offset: int) -> Sequence[Order]:
        stmt = (
            select(Order)
            .where(or_(Order.buyer_id == user_id, Order.seller_id == user_id))
            .order_by(desc(Order.created_at))
            .offset(offset)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def count_for_user(self, user_id: str) -> int:
        stmt = (
            select(func.count())
            .select_from(Order)
            .where(or_(Order.buyer_id == user_id, Order.seller_id == user_id))
        )
        result = await self.session.execute(stmt)
        return int(result.scalar_one())

    async def list_missing_legs(self, status: str, leg_types: Sequence[str]) -> Sequence[Order]:
        """Orders in ``status`` lacking at least one transaction of ``leg_types``."""
        missing = [
            ~exists().where(Transaction.reference_id == Order.id, Transaction.type == leg_type)
            for leg_type in leg_types
        ]
        stmt = select(Order).where(Order.status == status, or_(*missing)).order_by(Order.created_at)
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def update_status(self, order_id: str, *, from_status: str, to_status: str) -> bool:
        stmt = (
            update(Order)
            .where(Order.id == order_id, Order.status == from_status)
            .values(status=to_status)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1
