"""Balance validation.

The required amount must already be in the wallet's own currency; conversion
happens before this check, never inside it.
"""

from __future__ import annotations

from decimal import Decimal

from .models import WalletSnapshot


def has_sufficient_funds(wallet: WalletSnapshot, required: Decimal) -> bool:
    return wallet.balance >= required


def shortfall(wallet: WalletSnapshot, required: Decimal) -> Decimal:
    return max(required - wallet.balance, Decimal("0.00"))


def ensure_sufficient_funds(wallet: WalletSnapshot, required: Decimal) -> None:
    """Raise ``InsufficientFunds`` when ``wallet`` cannot cover ``required``."""
    # settlement imports this package at load time
    from marketplace.modules.settlement.exceptions import InsufficientFunds

    if not has_sufficient_funds(wallet, required):
        raise InsufficientFunds(required, wallet.balance, wallet.currency)


__all__ = ["ensure_sufficient_funds", "has_sufficient_funds", "shortfall"]
