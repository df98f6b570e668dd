"""Translation of settlement errors into HTTP responses."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import HTTPException, status

from marketplace.modules.settlement import (
    InsufficientFunds,
    LedgerWriteFailure,
    ListingUnavailable,
    NotAuthenticated,
    SelfPurchase,
    SettlementError,
    WalletNotFound,
)

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR: tuple[tuple[type[SettlementError], int], ...] = (
    (NotAuthenticated, status.HTTP_401_UNAUTHORIZED),
    (SelfPurchase, status.HTTP_400_BAD_REQUEST),
    (InsufficientFunds, status.HTTP_402_PAYMENT_REQUIRED),
    (ListingUnavailable, status.HTTP_409_CONFLICT),
    (WalletNotFound, status.HTTP_500_INTERNAL_SERVER_ERROR),
    (LedgerWriteFailure, status.HTTP_500_INTERNAL_SERVER_ERROR),
)


def error_detail(exc: SettlementError) -> dict[str, Any]:
    detail: dict[str, Any] = {"code": exc.code, "message": exc.user_message}
    if isinstance(exc, InsufficientFunds):
        detail.update(
            required=str(exc.required),
            available=str(exc.available),
            shortfall=str(exc.shortfall),
            currency=exc.currency,
        )
    return detail


def to_http_exception(exc: SettlementError) -> HTTPException:
    code = status.HTTP_500_INTERNAL_SERVER_ERROR
    for error_type, mapped in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            code = mapped
            break
    if code >= 500:
        logger.error("Settlement request failed: %s", exc)
    return HTTPException(status_code=code, detail=error_detail(exc))


__all__ = ["error_detail", "to_http_exception"]
