"""Subscription domain exports"""

from .models import SubscriptionRecord, SubscriptionTier
from .service import SubscriptionService

__all__ = [
    "SubscriptionRecord",
    "SubscriptionService",
    "SubscriptionTier",
]
