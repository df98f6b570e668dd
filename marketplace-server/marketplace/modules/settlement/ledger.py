"""Settlement ledger writer.

Performs the six settlement writes against one session. The caller owns the
transaction: either all six land on commit or none do.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.core.money import from_cents, to_cents
from marketplace.db.models import Order as OrderModel
from marketplace.infrastructure.database.repositories.listing_repository import SqlListingRepository
from marketplace.infrastructure.database.repositories.order_repository import SqlOrderRepository
from marketplace.infrastructure.database.repositories.wallet_repository import SqlWalletRepository
from marketplace.modules.listings import ListingStatus
from marketplace.modules.orders import OrderStatus
from marketplace.modules.wallets import TransactionType

from .exceptions import InsufficientFunds, LedgerWriteFailure, ListingUnavailable, SettlementError, WalletNotFound
from .quote import SettlementQuote

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class LedgerProgress:
    """How far a write got; read by the orchestrator after a timeout."""

    order_id: Optional[str] = None
    step: str = "lock"


class LedgerWriter:
    async def settle(
        self,
        session: AsyncSession,
        quote: SettlementQuote,
        progress: LedgerProgress | None = None,
    ) -> OrderModel:
        progress = progress or LedgerProgress()
        orders = SqlOrderRepository(session)
        listings = SqlListingRepository(session)
        wallets = SqlWalletRepository(session)

        # Lock the listing and both wallet rows, then re-validate against fresh state.
        progress.step = "lock"
        listing = await listings.get(quote.listing.id, for_update=True)
        if listing is None or listing.status != ListingStatus.ACTIVE.value:
            raise ListingUnavailable(quote.listing.id, listing.status if listing else None)
        buyer = await wallets.get_by_owner(quote.buyer_id, for_update=True)
        if buyer is None:
            raise WalletNotFound(quote.buyer_id, "buyer")
        seller = await wallets.get_by_owner(quote.seller_id, for_update=True)
        if seller is None:
            raise WalletNotFound(quote.seller_id, "seller")
        if buyer.currency != quote.buyer_wallet.currency or seller.currency != quote.seller_wallet.currency:
            raise LedgerWriteFailure(None, progress.step, "wallet currency changed since quote")

        charge_cents = to_cents(quote.buyer_charge)
        credit_cents = to_cents(quote.seller_credit)
        if buyer.balance_cents < charge_cents:
            raise InsufficientFunds(quote.buyer_charge, from_cents(buyer.balance_cents), buyer.currency)

        try:
            progress.step = "create_order"
            order = await orders.create_order(**self._order_values(quote))
            progress.order_id = order.id

            progress.step = "mark_listing_sold"
            if not await listings.transition(
                quote.listing.id,
                from_status=ListingStatus.ACTIVE.value,
                to_status=ListingStatus.SOLD.value,
            ):
                raise ListingUnavailable(quote.listing.id, ListingStatus.SOLD.value)

            progress.step = "debit_buyer"
            if await wallets.apply_delta(buyer.id, -charge_cents) is None:
                raise InsufficientFunds(quote.buyer_charge, from_cents(buyer.balance_cents), buyer.currency)

            progress.step = "record_purchase"
            await wallets.add_transaction(
                wallet_id=buyer.id,
                type=TransactionType.PURCHASE.value,
                amount_cents=-charge_cents,
                fee_cents=to_cents(quote.buyer_fee_local),
                description=f"Purchase: {quote.listing.title}",
                reference_id=order.id,
            )

            progress.step = "credit_seller"
            if await wallets.apply_delta(seller.id, credit_cents) is None:
                raise LedgerWriteFailure(order.id, progress.step, "seller wallet rejected credit")

            progress.step = "record_sale"
            await wallets.add_transaction(
                wallet_id=seller.id,
                type=TransactionType.SALE.value,
                amount_cents=credit_cents,
                fee_cents=to_cents(quote.seller_fee_local),
                description=f"Sale: {quote.listing.title}",
                reference_id=order.id,
            )
        except SettlementError:
            raise
        except Exception as exc:
            raise LedgerWriteFailure(progress.order_id, progress.step, str(exc)) from exc

        progress.step = "done"
        logger.info(
            "Order %s settled: listing %s, buyer %s charged %s %s, seller %s credited %s %s",
            order.id,
            quote.listing.id,
            quote.buyer_id,
            quote.buyer_charge,
            buyer.currency,
            quote.seller_id,
            quote.seller_credit,
            seller.currency,
        )
        return order

    @staticmethod
    def _order_values(quote: SettlementQuote) -> dict:
        rates = quote.rates.rates
        return {
            "listing_id": quote.listing.id,
            "buyer_id": quote.buyer_id,
            "seller_id": quote.seller_id,
            "delivery_option": quote.delivery_option.value,
            "status": OrderStatus.PAID.value,
            "base_price_cents": to_cents(quote.base_price),
            "buyer_fee_cents": to_cents(quote.base_buyer_fee),
            "seller_fee_cents": to_cents(quote.base_seller_fee),
            "listing_currency": quote.listing.currency,
            "price_in_listing_cents": to_cents(quote.fees.base_price),
            "buyer_currency": quote.buyer_wallet.currency,
            "buyer_total_cents": to_cents(quote.buyer_charge),
            "seller_currency": quote.seller_wallet.currency,
            "seller_payout_cents": to_cents(quote.seller_credit),
            "exchange_rate": quote.exchange_rate,
            "usd_try": rates.usd_try,
            "usd_eur": rates.usd_eur,
            "eur_try": rates.eur_try,
            "rate_source": quote.rates.source.value,
            "buyer_tier": quote.fees.buyer_tier.value,
            "seller_tier": quote.fees.seller_tier.value,
        }
