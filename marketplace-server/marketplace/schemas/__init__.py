"""Pydantic schemas used across the project."""
from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from marketplace.modules.currency import Currency
from marketplace.modules.orders import DeliveryOption


class LoginRequest(BaseModel):
    username: str = Field(..., min_length=3, max_length=50)
    password: str = Field(..., min_length=6)


class AccountLoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    account_id: str
    username: str
    role: str


class TokenData(BaseModel):
    account_id: str
    username: str
    role: str


class ErrorResponse(BaseModel):
    code: str
    message: str


class WalletResponse(BaseModel):
    id: str
    owner_id: str
    balance: Decimal
    currency: str
    version: int
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class WalletTransactionResponse(BaseModel):
    id: str
    type: str
    amount: Decimal
    fee: Decimal
    description: Optional[str] = None
    reference_id: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class WalletTransactionListResponse(BaseModel):
    total: int
    transactions: list[WalletTransactionResponse]


class ReconciliationResponse(BaseModel):
    wallet_id: str
    currency: str
    balance: Decimal
    ledger_total: Decimal
    discrepancy: Decimal
    is_balanced: bool

    model_config = ConfigDict(from_attributes=True)


class WalletTopupRequest(BaseModel):
    amount: Decimal = Field(..., gt=0, max_digits=14, decimal_places=2)
    description: Optional[str] = Field(None, max_length=255)


class FeeBreakdownResponse(BaseModel):
    base_price: Decimal
    buyer_fee: Decimal
    seller_fee: Decimal
    total_buyer_pays: Decimal
    seller_receives: Decimal
    buyer_tier: str
    seller_tier: str

    model_config = ConfigDict(from_attributes=True)


class PriceQuoteResponse(BaseModel):
    listing_id: str
    listing_currency: str
    fees: FeeBreakdownResponse
    buyer_currency: str
    buyer_total: Decimal
    rate_source: str
    estimated: bool

    model_config = ConfigDict(from_attributes=True)


class PurchaseRequest(BaseModel):
    listing_id: str = Field(..., min_length=1)
    delivery_option: DeliveryOption = DeliveryOption.VAULT


class OrderResponse(BaseModel):
    id: str
    listing_id: str
    buyer_id: str
    seller_id: str
    delivery_option: str
    status: str
    base_price: Decimal
    buyer_fee: Decimal
    seller_fee: Decimal
    listing_currency: str
    price_in_listing_currency: Decimal
    buyer_currency: str
    buyer_total: Decimal
    seller_currency: str
    seller_payout: Decimal
    exchange_rate: Decimal
    rate_source: str
    buyer_tier: str
    seller_tier: str
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class PurchaseResponse(BaseModel):
    success: bool = True
    order: OrderResponse


class OrderListResponse(BaseModel):
    total: int
    orders: list[OrderResponse]


class CurrencyRateResponse(BaseModel):
    from_currency: str
    to_currency: str
    rate: Decimal
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class CurrencyRateUpdate(BaseModel):
    from_currency: Currency
    to_currency: Currency
    rate: Decimal = Field(..., gt=0)


class RecoveryResponse(BaseModel):
    checked: int
    completed: int
    reversed: int
    failed: int

    model_config = ConfigDict(from_attributes=True)


class SuccessResponse(BaseModel):
    success: bool = True
    message: str = "OK"
    data: Optional[Any] = None
