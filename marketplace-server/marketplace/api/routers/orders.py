"""Purchase, quote and order history endpoints."""
from fastapi import APIRouter, Depends, HTTPException, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.api.deps import get_app_container, get_db_session
from marketplace.api.errors import to_http_exception
from marketplace.core.container import ApplicationContainer
from marketplace.core.security import get_current_account
from marketplace.modules.accounts import Account
from marketplace.modules.fees import FeeBreakdown
from marketplace.modules.orders import OrderService
from marketplace.modules.settlement import SettlementError
from marketplace.schemas import (
    FeeBreakdownResponse,
    OrderListResponse,
    OrderResponse,
    PriceQuoteResponse,
    PurchaseRequest,
    PurchaseResponse,
)

router = APIRouter()


def _fees_response(fees: FeeBreakdown) -> FeeBreakdownResponse:
    return FeeBreakdownResponse(
        base_price=fees.base_price,
        buyer_fee=fees.buyer_fee,
        seller_fee=fees.seller_fee,
        total_buyer_pays=fees.total_buyer_pays,
        seller_receives=fees.seller_receives,
        buyer_tier=fees.buyer_tier.value,
        seller_tier=fees.seller_tier.value,
    )


@router.get("/quote/{listing_id}", response_model=PriceQuoteResponse)
async def quote_listing(
    listing_id: str = Path(..., min_length=1),
    as_buyer: bool = Query(False, description="Use the caller's tiers and wallet currency"),
    account: Account = Depends(get_current_account),
    container: ApplicationContainer = Depends(get_app_container),
) -> PriceQuoteResponse:
    try:
        quote = await container.settlement.quote(listing_id, account.id if as_buyer else None)
    except SettlementError as exc:
        raise to_http_exception(exc) from exc
    return PriceQuoteResponse(
        listing_id=quote.listing_id,
        listing_currency=quote.listing_currency,
        fees=_fees_response(quote.fees),
        buyer_currency=quote.buyer_currency,
        buyer_total=quote.buyer_total,
        rate_source=quote.rate_source,
        estimated=quote.estimated,
    )


@router.post("", response_model=PurchaseResponse, status_code=status.HTTP_201_CREATED)
async def purchase_listing(
    payload: PurchaseRequest,
    account: Account = Depends(get_current_account),
    container: ApplicationContainer = Depends(get_app_container),
) -> PurchaseResponse:
    try:
        result = await container.settlement.purchase(account.id, payload.listing_id, payload.delivery_option)
    except SettlementError as exc:
        raise to_http_exception(exc) from exc
    return PurchaseResponse(order=OrderResponse.model_validate(result.order))


@router.get("", response_model=OrderListResponse)
async def list_orders(
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    account: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_db_session),
) -> OrderListResponse:
    orders = OrderService.with_session(db)
    records = await orders.list_orders(account.id, limit=limit, offset=offset)
    return OrderListResponse(
        total=await orders.count_orders(account.id),
        orders=[OrderResponse.model_validate(record) for record in records],
    )


@router.get("/{order_id}", response_model=OrderResponse)
async def get_order(
    order_id: str = Path(..., min_length=1),
    account: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_db_session),
) -> OrderResponse:
    record = await OrderService.with_session(db).get_order(order_id)
    if record is None or account.id not in {record.buyer_id, record.seller_id}:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"code": "ORDER_NOT_FOUND", "message": "Order not found."},
        )
    return OrderResponse.model_validate(record)
