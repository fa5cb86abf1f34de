"""Liveness and schema readiness."""
from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path

from alembic.config import Config
from alembic.runtime.migration import MigrationContext
from alembic.script import ScriptDirectory
from fastapi import APIRouter
from sqlalchemy import text

from ledger.config import AppInfo, get_settings
from ledger.db import get_engine
from ledger.utils.time import utcnow

router = APIRouter(prefix="/health", tags=["health"])
logger = logging.getLogger(__name__)

ALEMBIC_INI = Path(__file__).resolve().parents[2] / "alembic.ini"


def _db_status() -> str:
    """'ok' when a trivial query round-trips, 'error' otherwise."""

    try:
        with get_engine().connect() as conn:
            conn.execute(text("SELECT 1"))
    except Exception:  # noqa: BLE001
        logger.exception("DB health check failed")
        return "error"
    return "ok"


@lru_cache
def _expected_migration_head() -> str | None:
    try:
        return ScriptDirectory.from_config(Config(str(ALEMBIC_INI))).get_current_head()
    except Exception:  # noqa: BLE001
        logger.exception("Failed to load Alembic head revision")
        return None


def _migrations_status() -> tuple[bool, str]:
    """Compare the database revision with the newest migration script."""

    expected_head = _expected_migration_head()
    if expected_head is None:
        return False, "unknown"
    try:
        with get_engine().connect() as conn:
            current_heads = MigrationContext.configure(conn).get_current_heads()
    except Exception:  # noqa: BLE001
        logger.exception("Migration check failed")
        return False, "unknown"
    if current_heads == (expected_head,):
        return True, "up_to_date"
    logger.warning(
        "Database schema behind migrations",
        extra={"current_heads": list(current_heads), "expected_head": expected_head},
    )
    return False, "out_of_date"


@router.get("", summary="Health check")
def healthcheck() -> dict[str, object]:
    settings = get_settings()
    db_status = _db_status()
    db_ok = db_status == "ok"
    migrations_ok, migrations_status = _migrations_status() if db_ok else (False, "unknown")
    return {
        "status": "ok" if db_ok and migrations_ok else "degraded",
        "version": AppInfo().version,
        "environment": settings.app_env,
        "timestamp": utcnow().isoformat(),
        "db_ok": db_ok,
        "db_status": db_status,
        "migrations_ok": migrations_ok,
        "migrations_status": migrations_status,
    }


__all__ = ["router"]
