"""
Health checks.

- liveness: the process is up (no dependency checks)
- readiness: the database answers a trivial query
"""
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.logging import get_logger
from app.db.database import AsyncSessionLocal

logger = get_logger(__name__)

_STATUS_HEALTHY = "healthy"
_STATUS_DEGRADED = "degraded"

_CHECK_OK = "ok"
# No infrastructure details in the public response
_ERROR_DB = "error: db_unavailable"


async def _check_db(session_factory: async_sessionmaker[AsyncSession]) -> str:
    try:
        async with session_factory() as session:
            await session.execute(text("SELECT 1"))
        return _CHECK_OK
    except Exception as e:
        logger.warning("Database health check failed", extra_data={"error": str(e)})
        return _ERROR_DB


async def check_readiness(
    session_factory: async_sessionmaker[AsyncSession] = AsyncSessionLocal,
) -> dict[str, Any]:
    """Return ``{"status": "healthy"|"degraded", "db": ...}``"""
    db_status = await _check_db(session_factory)
    overall = _STATUS_HEALTHY if db_status == _CHECK_OK else _STATUS_DEGRADED
    if overall != _STATUS_HEALTHY:
        logger.warning("Readiness check degraded", extra_data={"db": db_status})
    return {"status": overall, "db": db_status}
