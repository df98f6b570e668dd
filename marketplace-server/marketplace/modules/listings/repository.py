"""Repository protocol for listings."""

from __future__ import annotations

from typing import Protocol

from marketplace.db.models import Listing as ListingModel


class ListingRepository(Protocol):
    async def get(self, listing_id: str, *, for_update: bool = False) -> ListingModel | None:
        ...

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
    ) -> ListingModel:
        ...

    async def transition(self, listing_id: str, *, from_status: str, to_status: str) -> bool:
        """Compare-and-set the listing status; ``False`` when the listing was not in ``from_status``."""
        ...
