"""Wallet endpoints for the signed-in account."""
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.api.deps import get_db_session
from marketplace.core.security import get_current_account
from marketplace.modules.accounts import Account
from marketplace.modules.wallets import WalletService
from marketplace.schemas import (
    ReconciliationResponse,
    WalletResponse,
    WalletTransactionListResponse,
    WalletTransactionResponse,
)

router = APIRouter()

_WALLET_MISSING = {"code": "WALLET_NOT_FOUND", "message": "Wallet not found. Please contact support."}


@router.get("", response_model=WalletResponse)
async def get_wallet(
    account: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_db_session),
) -> WalletResponse:
    wallet = await WalletService.with_session(db).get_wallet(account.id)
    if wallet is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=_WALLET_MISSING)
    return WalletResponse.model_validate(wallet)


@router.get("/transactions", response_model=WalletTransactionListResponse)
async def list_transactions(
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    account: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_db_session),
) -> WalletTransactionListResponse:
    wallets = WalletService.with_session(db)
    records = await wallets.list_transactions(account.id, limit=limit, offset=offset)
    return WalletTransactionListResponse(
        total=await wallets.count_transactions(account.id),
        transactions=[WalletTransactionResponse.model_validate(record) for record in records],
    )


@router.get("/reconciliation", response_model=ReconciliationResponse)
async def reconcile_wallet(
    account: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_db_session),
) -> ReconciliationResponse:
    report = await WalletService.with_session(db).reconcile(account.id)
    if report is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=_WALLET_MISSING)
    return ReconciliationResponse.model_validate(report)
