"""SQLAlchemy implementation for wallet domain"""

from __future__ import annotations

from typing import Sequence

from sqlalchemy import desc, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.db.models import Transaction, Wallet


class SqlWalletRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_by_owner(self, owner_id: str, *, for_update: bool = False) -> Wallet | None:
        stmt = select(Wallet).where(Wallet.owner_id == owner_id).execution_options(populate_existing=True)
        if for_update:
            stmt = stmt.with_for_update()
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def create_wallet(self, owner_id: str, currency: str) -> Wallet:
        wallet = Wallet(owner_id=owner_id, currency=currency, balance_cents=0)
        self.session.add(wallet)
        try:
            await self.session.flush()
        except IntegrityError:
            await self.session.rollback()
            wallet = await self.get_by_owner(owner_id)
            if wallet is None:
                raise
        return wallet

    async def apply_delta(self, wallet_id: str, delta_cents: int) -> Wallet | None:
        # Single statement with a floor check: concurrent debits cannot overdraw.
        stmt = (
            update(Wallet)
            .where(Wallet.id == wallet_id, Wallet.balance_cents + delta_cents >= 0)
            .values(balance_cents=Wallet.balance_cents + delta_cents, version=Wallet.version + 1)
            .returning(Wallet)
            .execution_options(synchronize_session=False, populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def add_transaction(
        self,
        *,
        wallet_id: str,
        type: str,
        amount_cents: int,
        fee_cents: int,
        description: str | None,
        reference_id: str | None,
    ) -> Transaction:
        tx = Transaction(
            wallet_id=wallet_id,
            type=type,
            amount_cents=amount_cents,
            fee_cents=fee_cents,
            description=description,
            reference_id=reference_id,
        )
        self.session.add(tx)
        await self.session.flush()
        return tx

    async def list_transactions(self, wallet_id: str, limit: int, offset: int) -> Sequence[Transaction]:
        stmt = (
            select(Transaction)
            .where(Transaction.wallet_id == wallet_id)
            .order_by(desc(Transaction.created_at))
            .offset(offset)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def count_transactions(self, wallet_id: str) -> int:
        stmt = select(func.count()).select_from(Transaction).where(Transaction.wallet_id == wallet_id)
        result = await self.session.execute(stmt)
        return int(result.scalar_one())

    async def ledger_total(self, wallet_id: str) -> int:
        stmt = select(func.coalesce(func.sum(Transaction.amount_cents), 0)).where(Transaction.wallet_id == wallet_id)
        result = await self.session.execute(stmt)
        return int(result.scalar_one())

    async def list_for_reference(self, reference_id: str) -> Sequence[Transaction]:
        stmt = select(Transaction).where(Transaction.reference_id == reference_id)
        result = await self.session.execute(stmt)
        return result.scalars().all()
