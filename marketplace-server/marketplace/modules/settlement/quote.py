"""Pre-commit settlement figures.

All conversion happens here, once, before the balance check and the ledger
write. Fees are computed in the listing currency; wallet-side amounts are
converted through the base currency and rounded to cents exactly once.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from marketplace.core.money import quantize
from marketplace.modules.currency import Currency, RateSnapshot, convert, effective_rate, to_base
from marketplace.modules.fees import FeeBreakdown
from marketplace.modules.listings import ListingSnapshot
from marketplace.modules.orders import DeliveryOption
from marketplace.modules.wallets import WalletSnapshot

RATE_PLACES = Decimal("0.00000001")


@dataclass(frozen=True, slots=True)
class SettlementQuote:
    listing: ListingSnapshot
    buyer_wallet: WalletSnapshot
    seller_wallet: WalletSnapshot
    fees: FeeBreakdown
    rates: RateSnapshot
    delivery_option: DeliveryOption
    # buyer side, in the buyer wallet currency
    buyer_charge: Decimal
    buyer_fee_local: Decimal
    # seller side, in the seller wallet currency
    seller_credit: Decimal
    seller_fee_local: Decimal
    # base currency figures recorded on the order
    base_price: Decimal
    base_buyer_fee: Decimal
    base_seller_fee: Decimal
    exchange_rate: Decimal

    @property
    def buyer_id(self) -> str:
        return self.buyer_wallet.owner_id

    @property
    def seller_id(self) -> str:
        return self.seller_wallet.owner_id


def build_quote(
    *,
    listing: ListingSnapshot,
    buyer_wallet: WalletSnapshot,
    seller_wallet: WalletSnapshot,
    fees: FeeBreakdown,
    rates: RateSnapshot,
    delivery_option: DeliveryOption,
) -> SettlementQuote:
    listing_currency = Currency(listing.currency)
    buyer_currency = Currency(buyer_wallet.currency)
    seller_currency = Currency(seller_wallet.currency)
    rate_set = rates.rates

    return SettlementQuote(
        listing=listing,
        buyer_wallet=buyer_wallet,
        seller_wallet=seller_wallet,
        fees=fees,
        rates=rates,
        delivery_option=DeliveryOption(delivery_option),
        buyer_charge=quantize(convert(fees.total_buyer_pays, listing_currency, buyer_currency, rate_set)),
        buyer_fee_local=quantize(convert(fees.buyer_fee, listing_currency, buyer_currency, rate_set)),
        seller_credit=quantize(convert(fees.seller_receives, listing_currency, seller_currency, rate_set)),
        seller_fee_local=quantize(convert(fees.seller_fee, listing_currency, seller_currency, rate_set)),
        base_price=quantize(to_base(fees.base_price, listing_currency, rate_set)),
        base_buyer_fee=quantize(to_base(fees.buyer_fee, listing_currency, rate_set)),
        base_seller_fee=quantize(to_base(fees.seller_fee, listing_currency, rate_set)),
        exchange_rate=effective_rate(listing_currency, buyer_currency, rate_set).quantize(RATE_PLACES),
    )


@dataclass(frozen=True, slots=True)
class PriceQuote:
    """Display-only price preview; never used to move money."""

    listing_id: str
    listing_currency: str
    fees: FeeBreakdown
    buyer_currency: str
    buyer_total: Decimal
    rate_source: str
    estimated: bool
