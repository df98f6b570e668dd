"""Repair of ``paid`` orders whose ledger legs are incomplete.

The ledger writer commits all legs together, so a dangling order only appears
after external interference (manual edits, a crashed writer on a database
without transactional DDL, partial imports). Each order is repaired in its
own transaction under the same locks a purchase would take.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from marketplace.db.models import Order as OrderModel, Transaction as TransactionModel
from marketplace.infrastructure.database.repositories.listing_repository import SqlListingRepository
from marketplace.infrastructure.database.repositories.order_repository import SqlOrderRepository
from marketplace.infrastructure.database.repositories.wallet_repository import SqlWalletRepository
from marketplace.modules.listings import ListingStatus
from marketplace.modules.orders import OrderStatus
from marketplace.modules.wallets import TransactionType

from .locks import SettlementLocks, listing_key, wallet_key

logger = logging.getLogger(__name__)

COMPLETED = "completed"
REVERSED = "reversed"
SKIPPED = "skipped"


@dataclass(slots=True)
class RecoveryReport:
    checked: int = 0
    completed: int = 0
    reversed: int = 0
    failed: int = 0


class SettlementRecovery:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession], locks: SettlementLocks) -> None:
        self._session_factory = session_factory
        self._locks = locks

    async def sweep(self) -> RecoveryReport:
        report = RecoveryReport()
        async with self._session_factory() as session:
            orders = await SqlOrderRepository(session).list_missing_legs(
                OrderStatus.PAID.value,
                (TransactionType.PURCHASE.value, TransactionType.SALE.value),
            )
            candidates = [(o.id, o.listing_id, o.buyer_id, o.seller_id) for o in orders]

        for order_id, listing_id, buyer_id, seller_id in candidates:
            report.checked += 1
            try:
                async with self._locks.hold(listing_key(listing_id), wallet_key(buyer_id), wallet_key(seller_id)):
                    outcome = await self._repair(order_id)
            except Exception:
                logger.exception("Recovery of order %s failed; left for the next sweep", order_id)
                report.failed += 1
                continue
            if outcome == COMPLETED:
                report.completed += 1
            elif outcome == REVERSED:
                report.reversed += 1

        if report.completed or report.reversed or report.failed:
            logger.warning(
                "Settlement recovery: checked=%s completed=%s reversed=%s failed=%s",
                report.checked,
                report.completed,
                report.reversed,
                report.failed,
            )
        return report

    async def _repair(self, order_id: str) -> str:
        async with self._session_factory() as session:
            async with session.begin():
                orders = SqlOrderRepository(session)
                wallets = SqlWalletRepository(session)
                listings = SqlListingRepository(session)

                order = await orders.get_order(order_id)
                if order is None or order.status != OrderStatus.PAID.value:
                    return SKIPPED
                legs = {tx.type: tx for tx in await wallets.list_for_reference(order.id)}
                purchase = legs.get(TransactionType.PURCHASE.value)
                sale = legs.get(TransactionType.SALE.value)
                if purchase is not None and sale is not None:
                    return SKIPPED

                listing = await listings.get(order.listing_id, for_update=True)
                buyer = await wallets.get_by_owner(order.buyer_id, for_update=True)
                seller = await wallets.get_by_owner(order.seller_id, for_update=True)
                if buyer is None or seller is None:
                    raise LookupError(f"order {order.id} references a missing wallet")

                title = listing.title if listing is not None else order.listing_id
                if listing is not None and listing.status == ListingStatus.SOLD.value:
                    if await self._complete(wallets, order, purchase, sale, buyer.id, seller.id, title):
                        logger.warning("Order %s: missing ledger legs completed", order.id)
                        return COMPLETED

                await self._reverse(wallets, order, purchase, sale, buyer.id, seller.id, title)
                if listing is not None:
                    await listings.transition(
                        listing.id,
                        from_status=ListingStatus.SOLD.value,
                        to_status=ListingStatus.ACTIVE.value,
                    )
                await orders.update_status(
                    order.id,
                    from_status=OrderStatus.PAID.value,
                    to_status=OrderStatus.CANCELLED.value,
                )
                logger.warning("Order %s: recorded legs reversed and order cancelled", order.id)
                return REVERSED

    @staticmethod
    async def _complete(
        wallets: SqlWalletRepository,
        order: OrderModel,
        purchase: TransactionModel | None,
        sale: TransactionModel | None,
        buyer_wallet_id: str,
        seller_wallet_id: str,
        title: str,
    ) -> bool:
        if purchase is None:
            if await wallets.apply_delta(buyer_wallet_id, -order.buyer_total_cents) is None:
                return False
            await wallets.add_transaction(
                wallet_id=buyer_wallet_id,
                type=TransactionType.PURCHASE.value,
                amount_cents=-order.buyer_total_cents,
                fee_cents=0,
                description=f"Purchase: {title}",
                reference_id=order.id,
            )
        if sale is None:
            if await wallets.apply_delta(seller_wallet_id, order.seller_payout_cents) is None:
                raise LookupError(f"seller wallet {seller_wallet_id} rejected credit")
            await wallets.add_transaction(
                wallet_id=seller_wallet_id,
                type=TransactionType.SALE.value,
                amount_cents=order.seller_payout_cents,
                fee_cents=0,
                description=f"Sale: {title}",
                reference_id=order.id,
            )
        return True

    @staticmethod
    async def _reverse(
        wallets: SqlWalletRepository,
        order: OrderModel,
        purchase: TransactionModel | None,
        sale: TransactionModel | None,
        buyer_wallet_id: str,
        seller_wallet_id: str,
        title: str,
    ) -> None:
        if purchase is not None:
            refund = -purchase.amount_cents
            await wallets.apply_delta(buyer_wallet_id, refund)
            await wallets.add_transaction(
                wallet_id=buyer_wallet_id,
                type=TransactionType.REFUND.value,
                amount_cents=refund,
                fee_cents=0,
                description=f"Refund: {title}",
                reference_id=order.id,
            )
        if sale is not None:
            if await wallets.apply_delta(seller_wallet_id, -sale.amount_cents) is None:
                raise LookupError(f"seller wallet {seller_wallet_id} cannot cover reversal of order {order.id}")
            await wallets.add_transaction(
                wallet_id=seller_wallet_id,
                type=TransactionType.REVERSAL.value,
                amount_cents=-sale.amount_cents,
                fee_cents=0,
                description=f"Reversal: {title}",
                reference_id=order.id,
            )
