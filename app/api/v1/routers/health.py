# app/api/v1/routers/health.py
import time
import subprocess
from functools import lru_cache
from fastapi import APIRouter
from app.core.config import get_settings
from app.db import session as db

router = APIRouter(tags=["health"])
START_TIME = time.time()


@lru_cache
def _git_sha(short: bool = True) -> str:
    # resolved once per process; deployments without .git get "unknown"
    try:
        cmd = ["git", "rev-parse", "--short" if short else "HEAD"]
        return subprocess.check_output(cmd, stderr=subprocess.DEVNULL).decode().strip()
    except Exception:
        return "unknown"


@router.get("/health")
async def health():
    """
    Liveness/readiness check:
    - SELECT 1 against the relational store
    - naming backend, and whether its API key is present when it needs one
    """
    settings = get_settings()
    checks: dict[str, object] = {
        "app_name": settings.APP_NAME,
        "env": settings.APP_ENV,
        "debug": settings.DEBUG,
        "version": settings.GIT_SHA if settings.GIT_SHA != "unknown" else _git_sha(),
        "uptime_seconds": int(time.time() - START_TIME),
        "naming_backend": settings.NAMING_BACKEND,
    }

    # --- Database ---
    try:
        await db.ping()
        checks["database"] = "ok"
    except Exception as e:
        checks["database"] = f"error: {e}"

    # --- Naming: the stub needs nothing, openai needs a key
    if settings.NAMING_BACKEND == "openai":
        checks["naming"] = "ok" if settings.OPENAI_API_KEY else "error: OPENAI_API_KEY not set"
    else:
        checks["naming"] = "skipped"

    def _is_ok(v):
        return v in ("ok", "skipped")

    health_keys = ("database", "naming")
    status = "ok" if all(_is_ok(checks.get(k)) for k in health_keys) else "error"

    return {"status": status, "checks": checks, "timestamp": int(time.time())}
