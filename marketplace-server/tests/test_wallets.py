from decimal import Decimal

import pytest

from marketplace.db.models import Transaction
from marketplace.modules.currency import Currency
from marketplace.modules.settlement import InsufficientFunds
from marketplace.modules.wallets import (
    TransactionType,
    WalletService,
    WalletSnapshot,
    ensure_sufficient_funds,
    has_sufficient_funds,
    shortfall,
)


def _wallet(balance: str) -> WalletSnapshot:
    return WalletSnapshot(id="w1", owner_id="u1", balance=Decimal(balance), currency="USD", version=1, updated_at=None)


def test_exact_balance_is_sufficient():
    assert has_sufficient_funds(_wallet("105.00"), Decimal("105.00"))


def test_one_cent_short_is_insufficient():
    wallet = _wallet("104.99")
    assert not has_sufficient_funds(wallet, Decimal("105.00"))
    assert shortfall(wallet, Decimal("105.00")) == Decimal("0.01")


def test_shortfall_never_negative():
    assert shortfall(_wallet("500"), Decimal("105")) == Decimal("0.00")


def test_ensure_sufficient_funds_reports_the_gap():
    ensure_sufficient_funds(_wallet("105.00"), Decimal("105.00"))
    with pytest.raises(InsufficientFunds) as excinfo:
        ensure_sufficient_funds(_wallet("104.99"), Decimal("105.00"))
    assert (excinfo.value.required, excinfo.value.available) == (Decimal("105.00"), Decimal("104.99"))
    assert excinfo.value.shortfall == Decimal("0.01")
    assert excinfo.value.currency == "USD"


async def test_top_up_records_ledger_line(seed, session_factory):
    owner = await seed.account("alice", currency=Currency.EUR)
    async with session_factory() as session:
        async with session.begin():
            wallet = await WalletService.with_session(session).top_up(owner_id=owner, amount=Decimal("50.25"))
    assert wallet.balance == Decimal("50.25")
    assert wallet.currency == "EUR"
    assert wallet.version == 2

    txs = await seed.all(Transaction, Transaction.wallet_id == wallet.id)
    assert [(tx.type, tx.amount_cents) for tx in txs] == [(TransactionType.TOPUP.value, 5025)]


async def test_top_up_rejects_non_positive_amount(seed, session_factory):
    owner = await seed.account("alice")
    async with session_factory() as session:
        with pytest.raises(ValueError):
            await WalletService.with_session(session).top_up(owner_id=owner, amount=Decimal("0"))


async def test_top_up_unknown_wallet(seed, session_factory):
    owner = await seed.account("walletless", wallet=False)
    async with session_factory() as session:
        with pytest.raises(LookupError):
            await WalletService.with_session(session).top_up(owner_id=owner, amount=Decimal("10"))


async def test_ensure_wallet_is_idempotent(seed, session_factory):
    owner = await seed.account("alice", currency=Currency.TRY)
    async with session_factory() as session:
        async with session.begin():
            wallet = await WalletService.with_session(session).ensure_wallet(owner, Currency.USD)
    assert wallet.currency == "TRY"


async def test_reconcile_balanced_after_top_ups(seed, session_factory):
    owner = await seed.account("alice", balance=Decimal("30"))
    async with session_factory() as session:
        async with session.begin():
            await WalletService.with_session(session).top_up(owner_id=owner, amount=Decimal("12.50"))
    async with session_factory() as session:
        report = await WalletService.with_session(session).reconcile(owner)
    assert report.balance == Decimal("42.50")
    assert report.ledger_total == Decimal("42.50")
    assert report.is_balanced


async def test_reconcile_reports_drift(seed, session_factory, caplog):
    owner = await seed.account("alice", balance=Decimal("30"))
    async with session_factory() as session:
        async with session.begin():
            repo = WalletService.with_session(session).repository
            wallet = await repo.get_by_owner(owner)
            await repo.apply_delta(wallet.id, 100)
    async with session_factory() as session:
        report = await WalletService.with_session(session).reconcile(owner)
    assert report.discrepancy == Decimal("1.00")
    assert not report.is_balanced
    assert "out of balance" in caplog.text


async def test_apply_delta_refuses_overdraft(seed, session_factory):
    owner = await seed.account("alice", balance=Decimal("1"))
    async with session_factory() as session:
        async with session.begin():
            repo = WalletService.with_session(session).repository
            wallet = await repo.get_by_owner(owner)
            assert await repo.apply_delta(wallet.id, -101) is None
            updated = await repo.apply_delta(wallet.id, -100)
    assert updated.balance_cents == 0
