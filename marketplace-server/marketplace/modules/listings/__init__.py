"""Listing domain exports"""

from .models import MIN_LISTING_PRICE, ListingSnapshot, ListingStatus
from .service import ListingService

__all__ = [
    "MIN_LISTING_PRICE",
    "ListingService",
    "ListingSnapshot",
    "ListingStatus",
]
