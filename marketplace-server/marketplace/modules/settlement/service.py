"""Purchase orchestration.

Flow: authentication, listing status, self-purchase, wallets, rates, tiers,
fees, conversion, balance check, then the ledger write under locks and a
timeout, then best-effort effects.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from marketplace.core.config import SettlementSettings
from marketplace.core.money import quantize
from marketplace.modules.currency import Currency, CurrencyService, convert
from marketplace.modules.fees import FeeCalculator, estimate_fees
from marketplace.modules.listings import ListingService
from marketplace.modules.orders import DeliveryOption, OrderRecord, OrderService
from marketplace.modules.wallets import WalletService, WalletSnapshot, ensure_sufficient_funds

from .exceptions import (
    LedgerWriteFailure,
    ListingUnavailable,
    NotAuthenticated,
    SelfPurchase,
    WalletNotFound,
)
from .ledger import LedgerProgress, LedgerWriter
from .locks import SettlementLocks, listing_key, wallet_key
from .quote import PriceQuote, SettlementQuote, build_quote

if TYPE_CHECKING:
    from marketplace.modules.effects import EffectsDispatcher

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class PurchaseResult:
    order: OrderRecord
    rate_source: str


class SettlementService:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        *,
        settings: SettlementSettings,
        locks: SettlementLocks | None = None,
        ledger: LedgerWriter | None = None,
        effects: Optional["EffectsDispatcher"] = None,
    ) -> None:
        self._session_factory = session_factory
        self._settings = settings
        self._locks = locks or SettlementLocks()
        self._ledger = ledger or LedgerWriter()
        self._effects = effects

    async def purchase(
        self,
        buyer_id: str | None,
        listing_id: str,
        delivery_option: DeliveryOption = DeliveryOption.VAULT,
    ) -> PurchaseResult:
        if not buyer_id:
            raise NotAuthenticated("no authenticated buyer")

        quote = await self._prepare(buyer_id, listing_id, DeliveryOption(delivery_option))

        progress = LedgerProgress()
        async with self._locks.hold(
            listing_key(listing_id),
            wallet_key(quote.buyer_id),
            wallet_key(quote.seller_id),
        ):
            try:
                order = await self._commit(quote, progress)
            except asyncio.TimeoutError as exc:
                logger.error(
                    "Settlement of listing %s timed out at step %s (order %s); rolled back",
                    listing_id,
                    progress.step,
                    progress.order_id,
                )
                raise LedgerWriteFailure(progress.order_id, progress.step, "timeout") from exc
            except LedgerWriteFailure as exc:
                logger.error(
                    "Settlement of listing %s failed at step %s (order %s); rolled back",
                    listing_id,
                    exc.step,
                    exc.order_id,
                    exc_info=True,
                )
                raise
            except WalletNotFound as exc:
                logger.error("Wallet integrity alert during settlement: %s", exc)
                raise

        if quote.rates.is_fallback:
            logger.warning("Order %s settled with fallback exchange rates", order.id)

        if self._effects is not None:
            self._effects.dispatch(order, quote.listing)

        return PurchaseResult(order=order, rate_source=quote.rates.source.value)

    async def quote(self, listing_id: str, buyer_id: str | None = None) -> PriceQuote:
        async with self._session_factory() as session:
            listing = await ListingService.with_session(session).get_listing(listing_id)
            if listing is None or not listing.is_purchasable:
                raise ListingUnavailable(listing_id, listing.status if listing else None)
            rates = await CurrencyService.with_session(session).load_rates()
            buyer_currency = Currency(listing.currency)
            if buyer_id:
                fees = await FeeCalculator.with_session(session).compute_for(listing.price, buyer_id, listing.seller_id)
                wallet = await WalletService.with_session(session).get_wallet(buyer_id)
                if wallet is not None:
                    buyer_currency = Currency(wallet.currency)
            else:
                fees = estimate_fees(listing.price)

        total = quantize(convert(fees.total_buyer_pays, Currency(listing.currency), buyer_currency, rates.rates))
        return PriceQuote(
            listing_id=listing.id,
            listing_currency=listing.currency,
            fees=fees,
            buyer_currency=buyer_currency.value,
            buyer_total=total,
            rate_source=rates.source.value,
            estimated=not buyer_id,
        )

    async def _prepare(self, buyer_id: str, listing_id: str, delivery_option: DeliveryOption) -> SettlementQuote:
        async with self._session_factory() as session:
            listing = await ListingService.with_session(session).get_listing(listing_id)
            if listing is None or not listing.is_purchasable:
                raise ListingUnavailable(listing_id, listing.status if listing else None)
            if listing.seller_id == buyer_id:
                raise SelfPurchase(f"account {buyer_id} attempted to buy own listing {listing_id}")

            wallets = WalletService.with_session(session)
            buyer_wallet = await self._require_wallet(wallets, buyer_id, "buyer")
            seller_wallet = await self._require_wallet(wallets, listing.seller_id, "seller")

            rates = await CurrencyService.with_session(session).load_rates()
            fees = await FeeCalculator.with_session(session).compute_for(listing.price, buyer_id, listing.seller_id)

        quote = build_quote(
            listing=listing,
            buyer_wallet=buyer_wallet,
            seller_wallet=seller_wallet,
            fees=fees,
            rates=rates,
            delivery_option=delivery_option,
        )
        ensure_sufficient_funds(buyer_wallet, quote.buyer_charge)
        return quote

    @staticmethod
    async def _require_wallet(wallets: WalletService, owner_id: str, role: str) -> WalletSnapshot:
        wallet = await wallets.get_wallet(owner_id)
        if wallet is None:
            exc = WalletNotFound(owner_id, role)
            logger.error("Wallet integrity alert: %s", exc)
            raise exc
        return wallet

    async def _commit(self, quote: SettlementQuote, progress: LedgerProgress) -> OrderRecord:
        async with self._session_factory() as session:
            async with session.begin():
                # Only the writes are timed; once settle returns the commit always runs to completion.
                order = await asyncio.wait_for(
                    self._ledger.settle(session, quote, progress),
                    timeout=self._settings.ledger_timeout_seconds,
                )
            return OrderService.to_record(order)


__all__ = ["PurchaseResult", "SettlementService"]
