"""SQLAlchemy implementation for portfolio, vault and progress records"""

from __future__ import annotations

from datetime import date

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.db.models import (
    EffectFailure,
    Order,
    PortfolioItem,
    UserAchievement,
    VaultItem,
    XpEvent,
)


class SqlProgressRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

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
        item = PortfolioItem(
            user_id=user_id,
            custom_name=custom_name,
            purchase_price_cents=purchase_price_cents,
            currency=currency,
            purchase_date=purchase_date,
            image_url=image_url,
            in_vault=in_vault,
        )
        self.session.add(item)
        await self.session.flush()
        return item.id

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
        item = VaultItem(
            owner_id=owner_id,
            title=title,
            category=category,
            condition=condition,
            estimated_value_cents=estimated_value_cents,
            currency=currency,
            listing_id=listing_id,
            order_id=order_id,
            image_url=image_url,
        )
        self.session.add(item)
        await self.session.flush()
        return item.id

    async def has_vault_item(self, order_id: str) -> bool:
        stmt = select(func.count()).select_from(VaultItem).where(VaultItem.order_id == order_id)
        result = await self.session.execute(stmt)
        return int(result.scalar_one()) > 0

    async def delete_portfolio_by_name(self, user_id: str, name: str) -> int:
        stmt = (
            delete(PortfolioItem)
            .where(
                PortfolioItem.user_id == user_id,
                func.lower(PortfolioItem.custom_name) == name.lower(),
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount or 0

    async def award_achievement(self, user_id: str, key: str) -> bool:
        stmt = select(UserAchievement.id).where(
            UserAchievement.user_id == user_id,
            UserAchievement.achievement_key == key,
        )
        result = await self.session.execute(stmt)
        if result.first() is not None:
            return False
        self.session.add(UserAchievement(user_id=user_id, achievement_key=key))
        await self.session.flush()
        return True

    async def add_xp(self, *, user_id: str, action: str, xp_amount: int, reference_id: str | None) -> None:
        self.session.add(XpEvent(user_id=user_id, action=action, xp_amount=xp_amount, reference_id=reference_id))
        await self.session.flush()

    async def count_purchases(self, user_id: str) -> int:
        stmt = select(func.count()).select_from(Order).where(Order.buyer_id == user_id)
        result = await self.session.execute(stmt)
        return int(result.scalar_one())

    async def count_sales(self, user_id: str) -> int:
        stmt = select(func.count()).select_from(Order).where(Order.seller_id == user_id)
        result = await self.session.execute(stmt)
        return int(result.scalar_one())

    async def record_failure(self, *, order_id: str, effect: str, error: str, attempts: int) -> None:
        self.session.add(EffectFailure(order_id=order_id, effect=effect, error=error, attempts=attempts))
        await self.session.flush()
