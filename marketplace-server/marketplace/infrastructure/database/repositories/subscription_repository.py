"""SQLAlchemy implementation of the subscription store."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.db.models import UserSubscription
from marketplace.modules.subscriptions.models import SubscriptionRecord


class SqlSubscriptionRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_subscription(self, user_id: str) -> SubscriptionRecord | None:
        stmt = select(UserSubscription).where(UserSubscription.user_id == user_id)
        result = await self.session.execute(stmt)
        model = result.scalars().first()
        return self._to_domain(model) if model else None

    async def set_subscription(self, user_id: str, tier: str, expires_at: datetime | None) -> SubscriptionRecord:
        stmt = select(UserSubscription).where(UserSubscription.user_id == user_id)
        result = await self.session.execute(stmt)
        model = result.scalars().first()
        if model is None:
            model = UserSubscription(user_id=user_id, tier=tier, expires_at=expires_at)
            self.session.add(model)
        else:
            model.tier = tier
            model.expires_at = expires_at
        await self.session.flush()
        return self._to_domain(model)

    @staticmethod
    def _to_domain(model: UserSubscription) -> SubscriptionRecord:
        return SubscriptionRecord(
            user_id=model.user_id,
            tier=model.tier,
            expires_at=model.expires_at,
        )
