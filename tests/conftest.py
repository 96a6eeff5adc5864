"""Shared fixtures: per-test SQLite database, seeded accounts, API client.

Every test gets its own file-backed SQLite database (not :memory:) so that
concurrent sessions use separate connections, like they would against
PostgreSQL. Sessions are short-lived: with BEGIN IMMEDIATE, an open
transaction blocks every other writer.
"""

import os

# Must be set before app modules import their settings
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test_bootstrap.db")
os.environ.setdefault("JWT_SECRET", "test-secret")

from decimal import Decimal

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

import app.models  # noqa: F401
from app.database import Base, build_engine, get_db
from app.main import app as fastapi_app
from app.models import LedgerEntry
from app.services.account_store import AccountStore
from app.services.identity import create_access_token
from app.services.transfer_service import TransferService


@pytest.fixture
async def test_engine(tmp_path):
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'ledger.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def accounts(session_factory):
    """alice 100.00, bob 50.00, carol 0.00"""
    async with session_factory() as session:
        store = AccountStore(session)
        alice = await store.create_account("alice@college.edu", "Alice", Decimal("100.00"))
        bob = await store.create_account("bob@college.edu", "Bob", Decimal("50.00"))
        carol = await store.create_account("carol@university.edu", "Carol", Decimal("0.00"))
        await session.commit()
    return {"alice": alice, "bob": bob, "carol": carol}


@pytest.fixture
def read_balance(session_factory):
    """Read a balance through a fresh session."""
    async def _read(account_id):
        async with session_factory() as session:
            return await AccountStore(session).get_balance(account_id)
    return _read


@pytest.fixture
def count_entries(session_factory):
    """Total number of ledger rows."""
    async def _count():
        async with session_factory() as session:
            result = await session.execute(select(func.count(LedgerEntry.id)))
            return result.scalar_one()
    return _count


@pytest.fixture
def run_transfer(session_factory):
    """Execute one transfer in its own session, like one API request."""
    async def _run(actor_id, request, idempotency_key=None):
        async with session_factory() as session:
            return await TransferService(session).execute_transfer(
                actor_id, request, idempotency_key=idempotency_key,
            )
    return _run


@pytest.fixture
def auth_headers():
    def _headers(account_id):
        return {"Authorization": f"Bearer {create_access_token(account_id)}"}
    return _headers


@pytest.fixture
async def client(session_factory):
    """FastAPI test client with DB dependency overridden."""
    async def override_get_db():
        async with session_factory() as session:
            yield session

    fastapi_app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=fastapi_app), base_url="http://test",
    ) as c:
        yield c

    fastapi_app.dependency_overrides.clear()


@pytest.fixture
async def unavailable_client(tmp_path):
    """API client whose database file cannot be opened."""
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'missing' / 'ledger.db'}")
    broken_sessions = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async def override_get_db():
        async with broken_sessions() as session:
            yield session

    fastapi_app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=fastapi_app), base_url="http://test",
    ) as c:
        yield c

    fastapi_app.dependency_overrides.clear()
    await engine.dispose()
