# app/api/deps.py
from typing import AsyncIterator
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import Settings, get_settings
from app.db.session import get_sessionmaker
from app.domain.services.naming_svc import ProductNamer, build_namer


# One session per request; the service owns commit/rollback
async def db_session() -> AsyncIterator[AsyncSession]:
    async with get_sessionmaker()() as session:
        yield session


# Dependency for injecting the configured product namer into endpoints/services
def namer_dep(settings: Settings = Depends(get_settings)) -> ProductNamer:
    return build_namer(settings)
