"""Repository protocol for collection and progress side effects."""

from __future__ import annotations

from datetime import date
from typing import Protocol


class ProgressRepository(Protocol):
    async def add_portfolio_item(
        self,
        *,
        user_id: str,
        custom_name: str,
        purchase_price_cents: int,
        currency: str,
        purchase_date: date,
        image_url: str | None,
        in_vault: bool,
    ) -> str:
        ...

    async def add_vault_item(
        self,
        *,
        owner_id: str,
        title: str,
        category: str | None,
        condition: str | None,
        estimated_value_cents: int,
        currency: str,
        listing_id: str,
        order_id: str,
        image_url: str | None,
    ) -> str:
        ...

    async def has_vault_item(self, order_id: str) -> bool:
        ...

    async def delete_portfolio_by_name(self, user_id: str, name: str) -> int:
        ...

    async def award_achievement(self, user_id: str, key: str) -> bool:
        ...

    async def add_xp(self, *, user_id: str, action: str, xp_amount: int, reference_id: str | None) -> None:
        ...

    async def count_purchases(self, user_id: str) -> int:
        ...

    async def count_sales(self, user_id: str) -> int:
        ...

    async def record_failure(self, *, order_id: str, effect: str, error: str, attempts: int) -> None:
        ...
