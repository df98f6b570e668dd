"""Repository protocol for wallet operations."""

from __future__ import annotations

from typing import Protocol, Sequence

from marketplace.db.models import Transaction as TransactionModel, Wallet as WalletModel


class WalletRepository(Protocol):
    async def get_by_owner(self, owner_id: str, *, for_update: bool = False) -> WalletModel | None:
        ...

    async def create_wallet(self, owner_id: str, currency: str) -> WalletModel:
        ...

    async def apply_delta(self, wallet_id: str, delta_cents: int) -> WalletModel | None:
        """Add ``delta_cents`` unless the balance would go negative; ``None`` when refused."""
        ...

    async def add_transaction(
        self,
        *,
        wallet_id: str,
        type: str,
        amount_cents: int,
        fee_cents: int,
        description: str | None,
        reference_id: str | None,
    ) -> TransactionModel:
        ...

    async def list_transactions(self, wallet_id: str, limit: int, offset: int) -> Sequence[TransactionModel]:
        ...

    async def count_transactions(self, wallet_id: str) -> int:
        ...

    async def ledger_total(self, wallet_id: str) -> int:
        ...

    async def list_for_reference(self, reference_id: str) -> Sequence[TransactionModel]:
        ...
