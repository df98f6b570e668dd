"""Domain models for wallet operations."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional


class TransactionType(str, enum.Enum):
    TOPUP = "topup"
    PURCHASE = "purchase"
    SALE = "sale"
    FEE = "fee"
    SUBSCRIPTION = "subscription"
    WITHDRAWAL = "withdrawal"
    REFUND = "refund"
    REVERSAL = "reversal"


@dataclass(slots=True)
class WalletSnapshot:
    id: str
    owner_id: str
    balance: Decimal
    currency: str
    version: int
    updated_at: Optional[datetime]


@dataclass(slots=True)
class WalletTransactionRecord:
    id: str
    wallet_id: str
    type: str
    amount: Decimal
    fee: Decimal
    description: Optional[str]
    reference_id: Optional[str]
    created_at: Optional[datetime]


@dataclass(slots=True)
class ReconciliationReport:
    wallet_id: str
    owner_id: str
    currency: str
    balance: Decimal
    ledger_total: Decimal

    @property
    def discrepancy(self) -> Decimal:
        return self.balance - self.ledger_total

    @property
    def is_balanced(self) -> bool:
        return self.discrepancy == 0
