# app/db/session.py
from __future__ import annotations
import logging

from sqlalchemy import event, text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from app.core.config import get_settings
from app.domain.models.product import Base

logger = logging.getLogger(__name__)

_engine: AsyncEngine | None = None
_sessionmaker: async_sessionmaker[AsyncSession] | None = None


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite ignores FOREIGN KEY / ON DELETE CASCADE unless enabled per connection
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(url: str, *, echo: bool = False) -> AsyncEngine:
    engine = create_async_engine(url, echo=echo, pool_pre_ping=True)
    if engine.dialect.name == "sqlite":
        event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
    return engine


def build_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # expire_on_commit=False: the service reads the saved product after commit
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def create_tables(engine: AsyncEngine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


def get_engine() -> AsyncEngine:
    assert _engine is not None, "Database engine not initialized"
    return _engine


def get_sessionmaker() -> async_sessionmaker[AsyncSession]:
    assert _sessionmaker is not None, "Database sessionmaker not initialized"
    return _sessionmaker


async def connect():
    """
    Create the engine and sessionmaker from settings, optionally create tables,
    then ping once so a bad DATABASE_URL fails at startup rather than on the first request.
    """
    global _engine, _sessionmaker
    settings = get_settings()

    _engine = build_engine(settings.DATABASE_URL, echo=settings.DB_ECHO)
    _sessionmaker = build_sessionmaker(_engine)

    if settings.DB_CREATE_TABLES:
        await create_tables(_engine)
        logger.info("Database tables ensured")

    await ping()
    logger.info(f"Database connected ({_engine.dialect.name})")


async def ping() -> None:
    async with get_engine().connect() as conn:
        await conn.execute(text("SELECT 1"))


async def disconnect():
    global _engine, _sessionmaker
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _sessionmaker = None
