"""SQLAlchemy ORM models."""
import uuid

from sqlalchemy import (
    BigInteger,
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from marketplace.infrastructure.database.base import Base


def generate_uuid() -> str:
    return str(uuid.uuid4())


class Account(Base):
    __tablename__ = "accounts"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    username = Column(String(50), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(20), default="user")
    is_active = Column(Boolean, default=True)
    email = Column(String(100), unique=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
    last_login_at = Column(DateTime(timezone=True))


class Wallet(Base):
    __tablename__ = "wallets"
    __table_args__ = (CheckConstraint("balance_cents >= 0", name="ck_wallets_balance_non_negative"),)

    id = Column(String(36), primary_key=True, default=generate_uuid)
    owner_id = Column(String(36), ForeignKey("accounts.id"), nullable=False, unique=True, index=True)
    balance_cents = Column(BigInteger, nullable=False, default=0)
    currency = Column(String(3), nullable=False, default="USD")
    version = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    owner = relationship("Account")
    transactions = relationship("Transaction", back_populates="wallet", cascade="all, delete-orphan")


class Listing(Base):
    __tablename__ = "listings"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    seller_id = Column(String(36), ForeignKey("accounts.id"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    category = Column(String(50), nullable=False, default="other")
    condition = Column(String(50), nullable=False, default="raw")
    image_url = Column(String(500))
    price_cents = Column(BigInteger, nullable=False)
    currency = Column(String(3), nullable=False, default="USD")
    status = Column(String(20), nullable=False, default="active", index=True)  # active, sold, cancelled, reserved
    version = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    seller = relationship("Account")


class Order(Base):
    __tablename__ = "orders"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    listing_id = Column(String(36), ForeignKey("listings.id"), nullable=False, index=True)
    buyer_id = Column(String(36), ForeignKey("accounts.id"), nullable=False, index=True)
    seller_id = Column(String(36), ForeignKey("accounts.id"), nullable=False, index=True)
    delivery_option = Column(String(10), nullable=False, default="vault")  # vault, trade, ship
    status = Column(String(20), nullable=False, default="paid")
    # base currency amounts
    base_price_cents = Column(BigInteger, nullable=False)
    buyer_fee_cents = Column(BigInteger, nullable=False)
    seller_fee_cents = Column(BigInteger, nullable=False)
    # currency snapshot
    listing_currency = Column(String(3), nullable=False)
    price_in_listing_cents = Column(BigInteger, nullable=False)
    buyer_currency = Column(String(3), nullable=False)
    buyer_total_cents = Column(BigInteger, nullable=False)
    seller_currency = Column(String(3), nullable=False)
    seller_payout_cents = Column(BigInteger, nullable=False)
    exchange_rate = Column(Numeric(18, 8), nullable=False)
    usd_try = Column(Numeric(18, 8), nullable=False)
    usd_eur = Column(Numeric(18, 8), nullable=False)
    eur_try = Column(Numeric(18, 8), nullable=False)
    rate_source = Column(String(10), nullable=False, default="live")
    buyer_tier = Column(String(20), nullable=False, default="standard")
    seller_tier = Column(String(20), nullable=False, default="standard")
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    listing = relationship("Listing")


class Transaction(Base):
    __tablename__ = "transactions"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    wallet_id = Column(String(36), ForeignKey("wallets.id"), nullable=False, index=True)
    type = Column(String(20), nullable=False)  # topup, purchase, sale, refund, reversal, ...
    amount_cents = Column(BigInteger, nullable=False)
    fee_cents = Column(BigInteger, nullable=False, default=0)
    description = Column(String(255))
    reference_id = Column(String(36), ForeignKey("orders.id"), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    wallet = relationship("Wallet", back_populates="transactions")


class CurrencyRate(Base):
    __tablename__ = "currency_rates"
    __table_args__ = (UniqueConstraint("from_currency", "to_currency", name="uq_currency_rates_pair"),)

    id = Column(String(36), primary_key=True, default=generate_uuid)
    from_currency = Column(String(3), nullable=False)
    to_currency = Column(String(3), nullable=False)
    rate = Column(Numeric(18, 8), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class UserSubscription(Base):
    __tablename__ = "user_subscriptions"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String(36), ForeignKey("accounts.id"), nullable=False, unique=True, index=True)
    tier = Column(String(20), nullable=False, default="standard")
    expires_at = Column(DateTime(timezone=True))
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class PortfolioItem(Base):
    __tablename__ = "portfolio_items"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String(36), ForeignKey("accounts.id"), nullable=False, index=True)
    custom_name = Column(String(255), nullable=False)
    purchase_price_cents = Column(BigInteger)
    currency = Column(String(3))
    purchase_date = Column(Date)
    image_url = Column(String(500))
    in_vault = Column(Boolean, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class VaultItem(Base):
    __tablename__ = "vault_items"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    owner_id = Column(String(36), ForeignKey("accounts.id"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    category = Column(String(50))
    condition = Column(String(50))
    estimated_value_cents = Column(BigInteger)
    currency = Column(String(3))
    listing_id = Column(String(36), ForeignKey("listings.id"))
    order_id = Column(String(36), ForeignKey("orders.id"), index=True)
    image_url = Column(String(500))
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class UserAchievement(Base):
    __tablename__ = "user_achievements"
    __table_args__ = (UniqueConstraint("user_id", "achievement_key", name="uq_user_achievements_key"),)

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String(36), ForeignKey("accounts.id"), nullable=False, index=True)
    achievement_key = Column(String(50), nullable=False)
    awarded_at = Column(DateTime(timezone=True), server_default=func.now())


class XpEvent(Base):
    __tablename__ = "xp_events"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String(36), ForeignKey("accounts.id"), nullable=False, index=True)
    action = Column(String(30), nullable=False)
    xp_amount = Column(Integer, nullable=False)
    reference_id = Column(String(36))
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class EffectFailure(Base):
    __tablename__ = "effect_failures"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    order_id = Column(String(36), nullable=False, index=True)
    effect = Column(String(50), nullable=False)
    error = Column(Text)
    attempts = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
