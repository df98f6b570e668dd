from datetime import datetime, timedelta, timezone

from marketplace.modules.subscriptions import SubscriptionRecord, SubscriptionService, SubscriptionTier

NOW = datetime(2026, 1, 1, tzinfo=timezone.utc)


class InMemorySubscriptions:
    def __init__(self) -> None:
        self.records: dict[str, SubscriptionRecord] = {}

    async def get_subscription(self, user_id):
        return self.records.get(user_id)

    async def set_subscription(self, user_id, tier, expires_at):
        record = SubscriptionRecord(user_id=user_id, tier=tier, expires_at=expires_at)
        self.records[user_id] = record
        return record


async def test_missing_subscription_is_standard():
    service = SubscriptionService(InMemorySubscriptions())
    assert await service.get_tier("nobody", now=NOW) is SubscriptionTier.STANDARD


async def test_active_pro():
    service = SubscriptionService(InMemorySubscriptions())
    await service.set_tier("u1", SubscriptionTier.PRO, NOW + timedelta(days=30))
    assert await service.get_tier("u1", now=NOW) is SubscriptionTier.PRO


async def test_pro_without_expiry_stays_pro():
    service = SubscriptionService(InMemorySubscriptions())
    await service.set_tier("u1", SubscriptionTier.PRO)
    assert await service.get_tier("u1", now=NOW) is SubscriptionTier.PRO


async def test_expired_pro_is_standard():
    service = SubscriptionService(InMemorySubscriptions())
    await service.set_tier("u1", SubscriptionTier.PRO, NOW - timedelta(seconds=1))
    assert await service.get_tier("u1", now=NOW) is SubscriptionTier.STANDARD


async def test_naive_expiry_treated_as_utc():
    repo = InMemorySubscriptions()
    repo.records["u1"] = SubscriptionRecord("u1", "pro", datetime(2026, 6, 1))
    assert await SubscriptionService(repo).get_tier("u1", now=NOW) is SubscriptionTier.PRO


async def test_unknown_tier_is_standard():
    repo = InMemorySubscriptions()
    repo.records["u1"] = SubscriptionRecord("u1", "platinum", None)
    assert await SubscriptionService(repo).get_tier("u1", now=NOW) is SubscriptionTier.STANDARD
