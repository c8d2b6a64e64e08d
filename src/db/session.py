"""Async SQLAlchemy session factory."""
from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from core.config import Settings, get_settings


def _engine_options(app_settings: Settings) -> dict[str, Any]:
    """Pool options; SQLite engines manage their own pool and reject sizing."""
    if app_settings.is_sqlite:
        return {}
    return {
        "pool_pre_ping": True,
        "pool_size": app_settings.db_pool_size,
        "max_overflow": app_settings.db_max_overflow,
    }


settings = get_settings()

engine = create_async_engine(
    settings.database_url,
    echo=False,
    **_engine_options(settings),
)

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_async_session() -> AsyncGenerator[AsyncSession]:
    """
    Yield a request-scoped session and own its transaction.

    Repositories and services only flush(). The commit happens here once the
    endpoint returns; any exception rolls back every write of the request.
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
