"""Database engine, session factory and FastAPI session dependency"""
import logging
from typing import AsyncGenerator

from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from app.config import settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Base class for all ORM models"""
    pass


def use_immediate_transactions(engine: AsyncEngine) -> None:
    """
    Make every SQLite transaction start with BEGIN IMMEDIATE.

    SQLite has no row locks and ignores SELECT FOR UPDATE, so writers are
    serialized at BEGIN instead. The pysqlite/aiosqlite driver's own BEGIN
    handling is switched off so ours is the only one emitted.

    Read-only sessions take the write lock too, so on SQLite history and
    balance reads wait behind an in-flight transfer. PostgreSQL engines are
    not affected.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _disable_driver_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def build_engine(database_url: str, **kwargs) -> AsyncEngine:
    """Create an async engine; pool sizing only applies to server databases"""
    url = make_url(database_url)

    if url.get_backend_name() == "sqlite":
        engine = create_async_engine(database_url, echo=False)
        use_immediate_transactions(engine)
        return engine

    return create_async_engine(
        database_url,
        echo=False,
        pool_pre_ping=True,
        pool_recycle=3600,
        pool_size=kwargs.get("pool_size", settings.DATABASE_POOL_SIZE),
        max_overflow=kwargs.get("max_overflow", settings.DATABASE_MAX_OVERFLOW),
    )


engine = build_engine(settings.DATABASE_URL)

AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency that yields one session per request"""
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


async def init_db() -> None:
    """Create all tables (local development and seeding only; use Alembic otherwise)"""
    import app.models  # noqa: F401  register models on Base.metadata

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    await engine.dispose()
    logger.info("Database engine disposed")
