"""Administrative endpoints: exchange rates, wallet top-ups and settlement recovery."""
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Path, status
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.api.deps import get_app_container, get_db_session
from marketplace.core.container import ApplicationContainer
from marketplace.core.security import get_current_admin
from marketplace.modules.accounts import Account
from marketplace.modules.currency import CurrencyService
from marketplace.modules.wallets import WalletService
from marketplace.schemas import (
    CurrencyRateResponse,
    CurrencyRateUpdate,
    RecoveryResponse,
    WalletResponse,
    WalletTopupRequest,
)

router = APIRouter()


@router.get("/rates", response_model=List[CurrencyRateResponse])
async def list_rates(
    admin: Account = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db_session),
) -> List[CurrencyRateResponse]:
    records = await CurrencyService.with_session(db).list_rates()
    return [CurrencyRateResponse.model_validate(record) for record in records]


@router.put("/rates", response_model=CurrencyRateResponse)
async def update_rate(
    payload: CurrencyRateUpdate,
    admin: Account = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db_session),
) -> CurrencyRateResponse:
    try:
        record = await CurrencyService.with_session(db).upsert_rate(
            payload.from_currency, payload.to_currency, payload.rate
        )
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"code": "INVALID_RATE", "message": str(exc)},
        ) from exc
    return CurrencyRateResponse.model_validate(record)


@router.post("/wallets/{owner_id}/topup", response_model=WalletResponse)
async def top_up_wallet(
    payload: WalletTopupRequest,
    owner_id: str = Path(..., min_length=1),
    admin: Account = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db_session),
) -> WalletResponse:
    try:
        wallet = await WalletService.with_session(db).top_up(
            owner_id=owner_id,
            amount=payload.amount,
            description=payload.description,
        )
    except LookupError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"code": "WALLET_NOT_FOUND", "message": str(exc)},
        ) from exc
    return WalletResponse.model_validate(wallet)


@router.post("/settlement/recover", response_model=RecoveryResponse)
async def recover_settlements(
    admin: Account = Depends(get_current_admin),
    container: ApplicationContainer = Depends(get_app_container),
) -> RecoveryResponse:
    report = await container.recovery.sweep()
    return RecoveryResponse.model_validate(report)
