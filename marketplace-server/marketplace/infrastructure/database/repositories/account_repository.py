"""SQLAlchemy implementation of the account repository."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.db.models import Account as AccountModel
from marketplace.modules.accounts.models import Account


class SqlAccountRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, account_id: str) -> Account | None:
        result = await self._session.execute(select(AccountModel).where(AccountModel.id == account_id))
        return self._to_domain(result.scalar_one_or_none())

    async def get_by_username(self, username: str) -> Account | None:
        result = await self._session.execute(select(AccountModel).where(AccountModel.username == username))
        return self._to_domain(result.scalar_one_or_none())

    async def create_account(
        self,
        *,
        username: str,
        password_hash: str,
        role: str,
        email: str | None,
        is_active: bool,
    ) -> Account:
        model = AccountModel(
            username=username,
            password_hash=password_hash,
            role=role,
            email=email,
            is_active=is_active,
        )
        self._session.add(model)
        await self._session.flush()
        await self._session.refresh(model)
        return self._to_domain(model)

    async def set_last_login(self, account_id: str, timestamp: datetime) -> None:
        await self._session.execute(
            update(AccountModel).where(AccountModel.id == account_id).values(last_login_at=timestamp)
        )

    @staticmethod
    def _to_domain(model: AccountModel | None) -> Account | None:
        if model is None:
            return None
        return Account(
            id=str(model.id),
            username=model.username,
            role=model.role or "user",
            is_active=bool(model.is_active),
            password_hash=model.password_hash,
            email=model.email,
            created_at=model.created_at,
            last_login_at=model.last_login_at,
        )
