"""Liveness and dependency status."""
import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from core.redis import get_redis_client
from db.session import get_async_session

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])

HEALTHY = "healthy"


class HealthResponse(BaseModel):
    """Overall status plus one entry per backing service."""

    status: str
    database: str
    cache: str


async def _database_status(db: AsyncSession) -> str:
    try:
        await db.execute(text("SELECT 1"))
    except Exception:
        logger.exception("health_database_failed")
        return "unhealthy"
    return HEALTHY


async def _cache_status() -> str:
    redis_client = get_redis_client()
    if redis_client is None or not await redis_client.ping():
        return "unavailable"
    return HEALTHY


@router.get("/health", response_model=HealthResponse)
async def health_check(
    db: AsyncSession = Depends(get_async_session),
) -> HealthResponse:
    """
    Report database and cache reachability.

    A missing cache marks the service degraded, not down: logins fall back to
    the database, password resets are refused until Redis returns.
    """
    database = await _database_status(db)
    cache = await _cache_status()
    overall = HEALTHY if database == HEALTHY and cache == HEALTHY else "degraded"
    return HealthResponse(status=overall, database=database, cache=cache)
