"""Login endpoint issuing bearer tokens."""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.api.deps import get_db_session
from marketplace.core.security import create_access_token
from marketplace.modules.accounts import AccountService
from marketplace.schemas import AccountLoginResponse, LoginRequest

router = APIRouter()


@router.post("/login", response_model=AccountLoginResponse)
async def login(
    payload: LoginRequest,
    db: AsyncSession = Depends(get_db_session),
) -> AccountLoginResponse:
    account_service = AccountService.with_session(db)
    account = await account_service.authenticate(payload.username, payload.password)
    if account is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"code": "INVALID_CREDENTIALS", "message": "Incorrect username or password."},
        )

    await account_service.set_last_login(account.id)

    token = create_access_token(account.id, account.username, account.role)
    return AccountLoginResponse(
        access_token=token,
        account_id=account.id,
        username=account.username,
        role=account.role,
    )
