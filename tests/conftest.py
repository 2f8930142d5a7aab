"""Shared fixtures: a fresh SQLite file database per test and an ASGI client wired to it."""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from app.api.deps import db_session, namer_dep
from app.db.session import build_engine, build_sessionmaker, create_tables
from app.domain.services.naming_svc import StubProductNamer


@pytest_asyncio.fixture
async def engine(tmp_path):
    """File-backed so that concurrent sessions really use separate connections."""
    eng = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'inventory.db'}")
    await create_tables(eng)
    yield eng
    await eng.dispose()


@pytest.fixture
def sessionmaker(engine):
    return build_sessionmaker(engine)


@pytest_asyncio.fixture
async def session(sessionmaker):
    async with sessionmaker() as s:
        yield s


@pytest_asyncio.fixture
async def client(sessionmaker):
    from app.main import app

    async def _test_session():
        async with sessionmaker() as s:
            yield s

    app.dependency_overrides[db_session] = _test_session
    app.dependency_overrides[namer_dep] = StubProductNamer
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()
