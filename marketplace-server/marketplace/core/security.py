"""JWT access tokens and the authenticated-account dependencies."""
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.api.deps import get_db_session
from marketplace.api.errors import error_detail
from marketplace.core.config import get_settings
from marketplace.modules.accounts import Account, AccountService
from marketplace.modules.settlement import NotAuthenticated
from marketplace.schemas import TokenData

security = HTTPBearer(auto_error=False)


def create_access_token(account_id: str, username: str, role: str, expires_delta: Optional[timedelta] = None) -> str:
    settings = get_settings()
    expire_delta = expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    payload = {
        "sub": account_id,
        "username": username,
        "role": role,
        "exp": datetime.now(timezone.utc) + expire_delta,
    }
    return jwt.encode(payload, settings.secret_key, algorithm=settings.algorithm)


def decode_access_token(token: str) -> TokenData:
    settings = get_settings()
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError as exc:
        raise NotAuthenticated("invalid access token") from exc

    account_id = payload.get("sub")
    username = payload.get("username")
    role = payload.get("role")
    if not all([account_id, username, role]):
        raise NotAuthenticated("incomplete access token")
    return TokenData(account_id=account_id, username=username, role=role)


def _unauthorized(exc: NotAuthenticated) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=error_detail(exc),
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_account(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_db_session),
) -> Account:
    try:
        if credentials is None:
            raise NotAuthenticated("missing bearer token")
        token_data = decode_access_token(credentials.credentials)
        account = await AccountService.with_session(db).get_by_id(token_data.account_id)
        if account is None or not account.is_active:
            raise NotAuthenticated(f"account {token_data.account_id} missing or disabled")
    except NotAuthenticated as exc:
        raise _unauthorized(exc) from exc
    return account


async def get_current_admin(account: Account = Depends(get_current_account)) -> Account:
    if not account.is_admin():
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={"code": "ADMIN_REQUIRED", "message": "Administrator access required."},
        )
    return account
