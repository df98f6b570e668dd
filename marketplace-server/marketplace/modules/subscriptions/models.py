"""Subscription tier models."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import datetime
from typing import Optional


class SubscriptionTier(str, enum.Enum):
    STANDARD = "standard"
    PRO = "pro"


@dataclass(slots=True)
class SubscriptionRecord:
    user_id: str
    tier: str
    expires_at: Optional[datetime]
