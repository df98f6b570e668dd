"""Fee calculation exports"""

from .calculator import FeeCalculator, compute_fees, estimate_fees
from .models import BUYER_FEE_RATES, MIN_TIERED_BASE_PRICE, SELLER_FEE_RATES, FeeBreakdown

__all__ = [
    "BUYER_FEE_RATES",
    "SELLER_FEE_RATES",
    "FeeBreakdown",
    "FeeCalculator",
    "MIN_TIERED_BASE_PRICE",
    "compute_fees",
    "estimate_fees",
]
