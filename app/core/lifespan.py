# app/core/lifespan.py
from contextlib import asynccontextmanager
import logging
from fastapi import FastAPI
from app.db import session as db
from app.core.config import get_settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()

    # --- Startup ---
    # The relational store is mandatory: fail fast if it is unreachable
    try:
        await db.connect()
    except Exception as e:
        logger.critical(f"Database connection failed: {e}")
        raise

    if settings.NAMING_BACKEND == "openai" and not settings.OPENAI_API_KEY:
        logger.warning("NAMING_BACKEND=openai but OPENAI_API_KEY is empty, names will fall back to placeholders")
    logger.info(f"Product naming backend: {settings.NAMING_BACKEND}")

    # Application runs
    yield

    # --- Shutdown ---
    await db.disconnect()
    logger.info("Database disconnected")
