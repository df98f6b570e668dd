"""Wallet domain service"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.core.money import from_cents, to_cents
from marketplace.db.models import Transaction as TransactionModel, Wallet as WalletModel
from marketplace.infrastructure.database.repositories.wallet_repository import SqlWalletRepository
from marketplace.modules.currency import Currency

from .models import ReconciliationReport, TransactionType, WalletSnapshot, WalletTransactionRecord
from .repository import WalletRepository

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class WalletService:
    repository: WalletRepository

    @classmethod
    def with_session(cls, session: AsyncSession) -> "WalletService":
        return cls(SqlWalletRepository(session))

    async def get_wallet(self, owner_id: str) -> WalletSnapshot | None:
        wallet = await self.repository.get_by_owner(owner_id)
        return self._to_snapshot(wallet) if wallet else None

    async def ensure_wallet(self, owner_id: str, currency: Currency = Currency.USD) -> WalletSnapshot:
        wallet = await self.repository.get_by_owner(owner_id)
        if wallet is None:
            wallet = await self.repository.create_wallet(owner_id, Currency(currency).value)
        return self._to_snapshot(wallet)

    async def top_up(
        self,
        *,
        owner_id: str,
        amount: Decimal,
        description: Optional[str] = None,
    ) -> WalletSnapshot:
        """Credit a wallet and record the matching ``topup`` ledger line."""
        if amount <= 0:
            raise ValueError("top-up amount must be positive")
        wallet = await self.repository.get_by_owner(owner_id)
        if wallet is None:
            raise LookupError(f"wallet not found for owner {owner_id}")
        cents = to_cents(amount)
        updated = await self.repository.apply_delta(wallet.id, cents)
        if updated is None:
            raise LookupError(f"wallet {wallet.id} disappeared during top-up")
        await self.repository.add_transaction(
            wallet_id=wallet.id,
            type=TransactionType.TOPUP.value,
            amount_cents=cents,
            fee_cents=0,
            description=description or "Wallet top-up",
            reference_id=None,
        )
        logger.info("Wallet %s topped up by %s %s", wallet.id, from_cents(cents), updated.currency)
        return self._to_snapshot(updated)

    async def list_transactions(self, owner_id: str, limit: int = 20, offset: int = 0) -> list[WalletTransactionRecord]:
        wallet = await self.repository.get_by_owner(owner_id)
        if wallet is None:
            return []
        rows = await self.repository.list_transactions(wallet.id, limit, offset)
        return [self._to_transaction(row) for row in rows]

    async def count_transactions(self, owner_id: str) -> int:
        wallet = await self.repository.get_by_owner(owner_id)
        if wallet is None:
            return 0
        return await self.repository.count_transactions(wallet.id)

    async def reconcile(self, owner_id: str) -> ReconciliationReport | None:
        """Compare the stored balance with the sum of the wallet's ledger lines."""
        wallet = await self.repository.get_by_owner(owner_id)
        if wallet is None:
            return None
        total = await self.repository.ledger_total(wallet.id)
        report = ReconciliationReport(
            wallet_id=wallet.id,
            owner_id=wallet.owner_id,
            currency=wallet.currency,
            balance=from_cents(wallet.balance_cents),
            ledger_total=from_cents(total),
        )
        if not report.is_balanced:
            logger.error(
                "Wallet %s out of balance: stored %s, ledger %s",
                wallet.id,
                report.balance,
                report.ledger_total,
            )
        return report

    @staticmethod
    def _to_snapshot(model: WalletModel) -> WalletSnapshot:
        return WalletSnapshot(
            id=model.id,
            owner_id=model.owner_id,
            balance=from_cents(model.balance_cents),
            currency=model.currency,
            version=model.version,
            updated_at=model.updated_at,
        )

    @staticmethod
    def _to_transaction(model: TransactionModel) -> WalletTransactionRecord:
        return WalletTransactionRecord(
            id=model.id,
            wallet_id=model.wallet_id,
            type=model.type,
            amount=from_cents(model.amount_cents),
            fee=from_cents(model.fee_cents),
            description=model.description,
            reference_id=model.reference_id,
            created_at=model.created_at,
        )
