"""Listing lookups used by settlement."""

from __future__ import annotations

from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.core.money import from_cents, to_cents
from marketplace.db.models import Listing as ListingModel
from marketplace.infrastructure.database.repositories.listing_repository import SqlListingRepository
from marketplace.modules.currency import Currency

from .models import MIN_LISTING_PRICE, ListingSnapshot
from .repository import ListingRepository


class ListingService:
    def __init__(self, repository: ListingRepository) -> None:
        self._repository = repository

    @classmethod
    def with_session(cls, session: AsyncSession) -> "ListingService":
        return cls(SqlListingRepository(session))

    async def get_listing(self, listing_id: str) -> ListingSnapshot | None:
        model = await self._repository.get(listing_id)
        return self.to_snapshot(model) if model else None

    async def create_listing(
        self,
        *,
        seller_id: str,
        title: str,
        price: Decimal,
        currency: Currency = Currency.USD,
        category: str = "other",
        condition: str = "raw",
        image_url: str | None = None,
    ) -> ListingSnapshot:
        currency = Currency(currency)
        minimum = MIN_LISTING_PRICE[currency]
        if price < minimum:
            raise ValueError(f"listing price must be at least {minimum} {currency.value}")
        model = await self._repository.create_listing(
            seller_id=seller_id,
            title=title,
            category=category,
            condition=condition,
            image_url=image_url,
            price_cents=to_cents(price),
            currency=currency.value,
        )
        return self.to_snapshot(model)

    @staticmethod
    def to_snapshot(model: ListingModel) -> ListingSnapshot:
        return ListingSnapshot(
            id=model.id,
            seller_id=model.seller_id,
            title=model.title,
            category=model.category,
            condition=model.condition,
            image_url=model.image_url,
            price=from_cents(model.price_cents),
            currency=model.currency,
            status=model.status,
            version=model.version,
        )
