"""AccountStore tests: lookups and the guarded balance update."""

from decimal import Decimal

import pytest

from app.services.account_store import AccountStore
from app.services.errors import AccountNotFoundError, InsufficientBalanceError


async def test_find_by_email_normalizes_input(accounts, session_factory):
    async with session_factory() as session:
        found = await AccountStore(session).find_by_email("  ALICE@college.edu")

    assert found is not None
    assert found.id == accounts["alice"].id


async def test_find_by_email_returns_none_for_unknown(accounts, session_factory):
    async with session_factory() as session:
        assert await AccountStore(session).find_by_email("ghost@college.edu") is None


async def test_create_account_stores_normalized_email(session_factory):
    async with session_factory() as session:
        account = await AccountStore(session).create_account(" Dana@Example.COM ", " Dana ", Decimal("100.00"))
        await session.commit()

    assert account.email == "dana@example.com"
    assert account.name == "Dana"


async def test_get_balance_of_missing_account_raises(accounts, session_factory):
    async with session_factory() as session:
        with pytest.raises(AccountNotFoundError):
            await AccountStore(session).get_balance(4242)


async def test_apply_delta_returns_new_balance(accounts, session_factory, read_balance):
    bob = accounts["bob"]

    async with session_factory() as session:
        store = AccountStore(session)
        assert await store.apply_delta(bob.id, Decimal("-20.00")) == Decimal("30.00")
        assert await store.apply_delta(bob.id, Decimal("5.50")) == Decimal("35.50")
        await session.commit()

    assert await read_balance(bob.id) == Decimal("35.50")


async def test_apply_delta_refuses_to_go_negative(accounts, session_factory, read_balance):
    bob = accounts["bob"]

    async with session_factory() as session:
        with pytest.raises(InsufficientBalanceError):
            await AccountStore(session).apply_delta(bob.id, Decimal("-50.01"))
        await session.rollback()

    assert await read_balance(bob.id) == Decimal("50.00")


async def test_apply_delta_on_missing_account_raises_not_found(accounts, session_factory):
    async with session_factory() as session:
        with pytest.raises(AccountNotFoundError):
            await AccountStore(session).apply_delta(4242, Decimal("1.00"))


async def test_lock_accounts_returns_requested_rows(accounts, session_factory):
    alice, carol = accounts["alice"], accounts["carol"]

    async with session_factory() as session:
        locked = await AccountStore(session).lock_accounts([carol.id, alice.id, carol.id])

    assert sorted(locked) == sorted([alice.id, carol.id])
    assert locked[alice.id].balance == Decimal("100.00")
