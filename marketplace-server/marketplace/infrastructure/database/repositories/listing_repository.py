"""SQLAlchemy implementation for listings"""

from __future__ import annotations

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.db.models import Listing


class SqlListingRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get(self, listing_id: str, *, for_update: bool = False) -> Listing | None:
        stmt = select(Listing).where(Listing.id == listing_id).execution_options(populate_existing=True)
        if for_update:
            stmt = stmt.with_for_update()
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def create_listing(
        self,
        *,
        seller_id: str,
        title: str,
        category: str,
        condition: str,
        image_url: str | None,
        price_cents: int,
        currency: str,
    ) -> Listing:
        listing = Listing(
            seller_id=seller_id,
            title=title,
            category=category,
            condition=condition,
            image_url=image_url,
            price_cents=price_cents,
            currency=currency,
        )
        self.session.add(listing)
        await self.session.flush()
        await self.session.refresh(listing)
        return listing

    async def transition(self, listing_id: str, *, from_status: str, to_status: str) -> bool:
        stmt = (
            update(Listing)
            .where(Listing.id == listing_id, Listing.status == from_status)
            .values(status=to_status, version=Listing.version + 1)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1
