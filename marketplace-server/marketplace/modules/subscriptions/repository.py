"""Repository protocol for the subscription store."""

from __future__ import annotations

from datetime import datetime
from typing import Protocol

from .models import SubscriptionRecord


class SubscriptionRepository(Protocol):
    async def get_subscription(self, user_id: str) -> SubscriptionRecord | None:
        ...

    async def set_subscription(self, user_id: str, tier: str, expires_at: datetime | None) -> SubscriptionRecord:
        ...
