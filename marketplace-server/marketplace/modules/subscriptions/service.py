"""Subscription tier lookup."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.infrastructure.database.repositories.subscription_repository import SqlSubscriptionRepository

from .models import SubscriptionRecord, SubscriptionTier
from .repository import SubscriptionRepository


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone-aware columns.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class SubscriptionService:
    def __init__(self, repository: SubscriptionRepository) -> None:
        self._repository = repository

    @classmethod
    def with_session(cls, session: AsyncSession) -> "SubscriptionService":
        return cls(SqlSubscriptionRepository(session))

    async def get_tier(self, user_id: str, now: datetime | None = None) -> SubscriptionTier:
        """Active tier for ``user_id``; absent, unknown or expired records count as standard."""
        record = await self._repository.get_subscription(user_id)
        if record is None:
            return SubscriptionTier.STANDARD
        now = now or datetime.now(timezone.utc)
        if record.expires_at is not None and _as_utc(record.expires_at) <= now:
            return SubscriptionTier.STANDARD
        try:
            return SubscriptionTier(record.tier)
        except ValueError:
            return SubscriptionTier.STANDARD

    async def set_tier(
        self,
        user_id: str,
        tier: SubscriptionTier,
        expires_at: datetime | None = None,
    ) -> SubscriptionRecord:
        return await self._repository.set_subscription(user_id, SubscriptionTier(tier).value, expires_at)
