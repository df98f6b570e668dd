"""Settlement domain exports"""

from .exceptions import (
    EffectDispatchFailure,
    InsufficientFunds,
    LedgerWriteFailure,
    ListingUnavailable,
    NotAuthenticated,
    SelfPurchase,
    SettlementError,
    WalletNotFound,
)
from .ledger import LedgerProgress, LedgerWriter
from .locks import SettlementLocks, listing_key, wallet_key
from .quote import PriceQuote, SettlementQuote, build_quote
from .recovery import RecoveryReport, SettlementRecovery
from .service import PurchaseResult, SettlementService

__all__ = [
    "EffectDispatchFailure",
    "InsufficientFunds",
    "LedgerProgress",
    "LedgerWriteFailure",
    "LedgerWriter",
    "ListingUnavailable",
    "NotAuthenticated",
    "PriceQuote",
    "PurchaseResult",
    "RecoveryReport",
    "SelfPurchase",
    "SettlementError",
    "SettlementLocks",
    "SettlementQuote",
    "SettlementRecovery",
    "SettlementService",
    "WalletNotFound",
    "build_quote",
    "listing_key",
    "wallet_key",
]
