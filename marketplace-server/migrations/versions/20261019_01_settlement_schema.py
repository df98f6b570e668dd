"""settlement schema

Revision ID: 20261019_01
Revises:
Create Date: 2026-10-19 09:00:00.000000
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "20261019_01"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True)),
    ]


def upgrade() -> None:
    op.create_table(
        "accounts",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("username", sa.String(length=50), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("role", sa.String(length=20), server_default="user"),
        sa.Column("is_active", sa.Boolean(), server_default=sa.true()),
        sa.Column("email", sa.String(length=100), unique=True),
        *_timestamps(),
        sa.Column("last_login_at", sa.DateTime(timezone=True)),
    )
    op.create_index("ix_accounts_username", "accounts", ["username"], unique=True)

    op.create_table(
        "wallets",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("owner_id", sa.String(length=36), sa.ForeignKey("accounts.id"), nullable=False),
        sa.Column("balance_cents", sa.BigInteger(), nullable=False, server_default="0"),
        sa.Column("currency", sa.String(length=3), nullable=False, server_default="USD"),
        sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
        *_timestamps(),
        sa.CheckConstraint("balance_cents >= 0", name="ck_wallets_balance_non_negative"),
    )
    op.create_index("ix_wallets_owner_id", "wallets", ["owner_id"], unique=True)

    op.create_table(
        "listings",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("seller_id", sa.String(length=36), sa.ForeignKey("accounts.id"), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("category", sa.String(length=50), nullable=False, server_default="other"),
        sa.Column("condition", sa.String(length=50), nullable=False, server_default="raw"),
        sa.Column("image_url", sa.String(length=500)),
        sa.Column("price_cents", sa.BigInteger(), nullable=False),
        sa.Column("currency", sa.String(length=3), nullable=False, server_default="USD"),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="active"),
        sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
        *_timestamps(),
    )
    op.create_index("ix_listings_seller_id", "listings", ["seller_id"])
    op.create_index("ix_listings_status", "listings", ["status"])

    op.create_table(
        "orders",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("listing_id", sa.String(length=36), sa.ForeignKey("listings.id"), nullable=False),
        sa.Column("buyer_id", sa.String(length=36), sa.ForeignKey("accounts.id"), nullable=False),
        sa.Column("seller_id", sa.String(length=36), sa.ForeignKey("accounts.id"), nullable=False),
        sa.Column("delivery_option", sa.String(length=10), nullable=False, server_default="vault"),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="paid"),
        sa.Column("base_price_cents", sa.BigInteger(), nullable=False),
        sa.Column("buyer_fee_cents", sa.BigInteger(), nullable=False),
        sa.Column("seller_fee_cents", sa.BigInteger(), nullable=False),
        sa.Column("listing_currency", sa.String(length=3), nullable=False),
        sa.Column("price_in_listing_cents", sa.BigInteger(), nullable=False),
        sa.Column("buyer_currency", sa.String(length=3), nullable=False),
        sa.Column("buyer_total_cents", sa.BigInteger(), nullable=False),
        sa.Column("seller_currency", sa.String(length=3), nullable=False),
        sa.Column("seller_payout_cents", sa.BigInteger(), nullable=False),
        sa.Column("exchange_rate", sa.Numeric(18, 8), nullable=False),
        sa.Column("usd_try", sa.Numeric(18, 8), nullable=False),
        sa.Column("usd_eur", sa.Numeric(18, 8), nullable=False),
        sa.Column("eur_try", sa.Numeric(18, 8), nullable=False),
        sa.Column("rate_source", sa.String(length=10), nullable=False, server_default="live"),
        sa.Column("buyer_tier", sa.String(length=20), nullable=False, server_default="standard"),
        sa.Column("seller_tier", sa.String(length=20), nullable=False, server_default="standard"),
        *_timestamps(),
    )
    for column in ("listing_id", "buyer_id", "seller_id"):
        op.create_index(f"ix_orders_{column}", "orders", [column])

    op.create_table(
        "transactions",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("wallet_id", sa.String(length=36), sa.ForeignKey("wallets.id"), nullable=False),
        sa.Column("type", sa.String(length=20), nullable=False),
        sa.Column("amount_cents", sa.BigInteger(), nullable=False),
        sa.Column("fee_cents", sa.BigInteger(), nullable=False, server_default="0"),
        sa.Column("description", sa.String(length=255)),
        sa.Column("reference_id", sa.String(length=36), sa.ForeignKey("orders.id")),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_transactions_wallet_id", "transactions", ["wallet_id"])
    op.create_index("ix_transactions_reference_id", "transactions", ["reference_id"])

    op.create_table(
        "currency_rates",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("from_currency", sa.String(length=3), nullable=False),
        sa.Column("to_currency", sa.String(length=3), nullable=False),
        sa.Column("rate", sa.Numeric(18, 8), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("from_currency", "to_currency", name="uq_currency_rates_pair"),
    )

    op.create_table(
        "user_subscriptions",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("user_id", sa.String(length=36), sa.ForeignKey("accounts.id"), nullable=False),
        sa.Column("tier", sa.String(length=20), nullable=False, server_default="standard"),
        sa.Column("expires_at", sa.DateTime(timezone=True)),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_user_subscriptions_user_id", "user_subscriptions", ["user_id"], unique=True)

    op.create_table(
        "portfolio_items",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("user_id", sa.String(length=36), sa.ForeignKey("accounts.id"), nullable=False),
        sa.Column("custom_name", sa.String(length=255), nullable=False),
        sa.Column("purchase_price_cents", sa.BigInteger()),
        sa.Column("currency", sa.String(length=3)),
        sa.Column("purchase_date", sa.Date()),
        sa.Column("image_url", sa.String(length=500)),
        sa.Column("in_vault", sa.Boolean(), server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_portfolio_items_user_id", "portfolio_items", ["user_id"])

    op.create_table(
        "vault_items",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("owner_id", sa.String(length=36), sa.ForeignKey("accounts.id"), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("category", sa.String(length=50)),
        sa.Column("condition", sa.String(length=50)),
        sa.Column("estimated_value_cents", sa.BigInteger()),
        sa.Column("currency", sa.String(length=3)),
        sa.Column("listing_id", sa.String(length=36), sa.ForeignKey("listings.id")),
        sa.Column("order_id", sa.String(length=36), sa.ForeignKey("orders.id")),
        sa.Column("image_url", sa.String(length=500)),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_vault_items_owner_id", "vault_items", ["owner_id"])
    op.create_index("ix_vault_items_order_id", "vault_items", ["order_id"])

    op.create_table(
        "user_achievements",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("user_id", sa.String(length=36), sa.ForeignKey("accounts.id"), nullable=False),
        sa.Column("achievement_key", sa.String(length=50), nullable=False),
        sa.Column("awarded_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("user_id", "achievement_key", name="uq_user_achievements_key"),
    )
    op.create_index("ix_user_achievements_user_id", "user_achievements", ["user_id"])

    op.create_table(
        "xp_events",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("user_id", sa.String(length=36), sa.ForeignKey("accounts.id"), nullable=False),
        sa.Column("action", sa.String(length=30), nullable=False),
        sa.Column("xp_amount", sa.Integer(), nullable=False),
        sa.Column("reference_id", sa.String(length=36)),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_xp_events_user_id", "xp_events", ["user_id"])

    op.create_table(
        "effect_failures",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("order_id", sa.String(length=36), nullable=False),
        sa.Column("effect", sa.String(length=50), nullable=False),
        sa.Column("error", sa.Text()),
        sa.Column("attempts", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_effect_failures_order_id", "effect_failures", ["order_id"])


def downgrade() -> None:
    for table in (
        "effect_failures",
        "xp_events",
        "user_achievements",
        "vault_items",
        "portfolio_items",
        "user_subscriptions",
        "currency_rates",
        "transactions",
        "orders",
        "listings",
        "wallets",
        "accounts",
    ):
        op.drop_table(table)
