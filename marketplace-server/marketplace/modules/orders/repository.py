"""Repository protocol for orders."""

from __future__ import annotations

from typing import Any, Protocol, Sequence

from marketplace.db.models import Order as OrderModel


class OrderRepository(Protocol):
    async def create_order(self, **values: Any) -> OrderModel:
        ...

    async def get_order(self, order_id: str) -> OrderModel | None:
        ...

    async def list_for_user(self, user_id: str, limit: int, offset: int) -> Sequence[OrderModel]:
        ...

    async def count_for_user(self, user_id: str) -> int:
        ...

    async def list_missing_legs(self, status: str, leg_types: Sequence[str]) -> Sequence[OrderModel]:
        ...

    async def update_status(self, order_id: str, *, from_status: str, to_status: str) -> bool:
        ...
