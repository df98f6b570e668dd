"""Settlement error taxonomy.

Every error carries a stable ``code`` for the presentation layer and a
``user_message`` that is safe to show. Internal detail stays in ``str(exc)``.
"""

from __future__ import annotations

from decimal import Decimal


class SettlementError(Exception):
    """Base class for settlement errors."""

    code = "SETTLEMENT_FAILED"
    user_message = "Purchase failed. Please try again."


class NotAuthenticated(SettlementError):
    code = "AUTH_REQUIRED"
    user_message = "Please sign in to make a purchase."


class SelfPurchase(SettlementError):
    code = "SELF_PURCHASE"
    user_message = "You cannot buy your own listing."


class WalletNotFound(SettlementError):
    """An account without a wallet: the account is in an invalid state."""

    code = "WALLET_NOT_FOUND"
    user_message = "Wallet not found. Please contact support."

    def __init__(self, owner_id: str, role: str) -> None:
        super().__init__(f"{role} wallet not found for account {owner_id}")
        self.owner_id = owner_id
        self.role = role


class InsufficientFunds(SettlementError):
    code = "INSUFFICIENT_BALANCE"

    def __init__(self, required: Decimal, available: Decimal, currency: str) -> None:
        self.required = required
        self.available = available
        self.currency = currency
        super().__init__(self.user_message)

    @property
    def shortfall(self) -> Decimal:
        return max(self.required - self.available, Decimal("0.00"))

    @property
    def user_message(self) -> str:  # type: ignore[override]
        return (
            f"Insufficient balance. You need {self.required} {self.currency} (including fees) "
            f"but have {self.available} {self.currency}; add {self.shortfall} {self.currency} to continue."
        )


class ListingUnavailable(SettlementError):
    code = "LISTING_UNAVAILABLE"
    user_message = "This listing is no longer available."

    def __init__(self, listing_id: str, status: str | None) -> None:
        super().__init__(f"listing {listing_id} is not purchasable (status={status})")
        self.listing_id = listing_id
        self.status = status


class LedgerWriteFailure(SettlementError):
    """A write after the order insert failed; the whole unit was rolled back."""

    code = "LEDGER_WRITE_FAILED"

    def __init__(self, order_id: str | None, step: str, reason: str = "") -> None:
        super().__init__(f"ledger write failed at {step} (order={order_id}): {reason}")
        self.order_id = order_id
        self.step = step


class EffectDispatchFailure(SettlementError):
    """Logged only; never returned to the buyer."""

    code = "EFFECT_DISPATCH_FAILED"

    def __init__(self, effect: str, order_id: str, reason: str = "") -> None:
        super().__init__(f"effect {effect} failed for order {order_id}: {reason}")
        self.effect = effect
        self.order_id = order_id


__all__ = [
    "EffectDispatchFailure",
    "InsufficientFunds",
    "LedgerWriteFailure",
    "ListingUnavailable",
    "NotAuthenticated",
    "SelfPurchase",
    "SettlementError",
    "WalletNotFound",
]
