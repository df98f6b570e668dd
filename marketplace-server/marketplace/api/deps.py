"""Request-scoped dependencies."""

from __future__ import annotations

from collections.abc import AsyncGenerator

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.core.container import ApplicationContainer


def get_app_container(request: Request) -> ApplicationContainer:
    return request.app.state.container


async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Session committed when the handler returns, rolled back when it raises."""
    factory = get_app_container(request).session_factory
    async with factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
