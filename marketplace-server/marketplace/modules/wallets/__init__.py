"""Wallet domain exports"""

from .balance import ensure_sufficient_funds, has_sufficient_funds, shortfall
from .models import ReconciliationReport, TransactionType, WalletSnapshot, WalletTransactionRecord
from .service import WalletService

__all__ = [
    "ReconciliationReport",
    "TransactionType",
    "WalletService",
    "WalletSnapshot",
    "WalletTransactionRecord",
    "ensure_sufficient_funds",
    "has_sufficient_funds",
    "shortfall",
]
