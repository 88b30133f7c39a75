"""
Async SQLAlchemy engine + session factory for the MySQL event store.

The engine is created once at import and reused across all requests.
Aggregation calls open one session each so they can run concurrently;
an AsyncSession must never be shared between concurrent tasks.
"""
import logging

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from admin_api.config import settings

logger = logging.getLogger(__name__)

UTC_SESSION_INIT = "SET time_zone = '+00:00'"


def connect_args_for(url: str) -> dict:
    """Driver connect args; MySQL sessions are pinned to UTC so NOW() matches the windows."""
    if url.startswith("mysql"):
        return {"init_command": UTC_SESSION_INIT}
    return {}


engine = create_async_engine(
    settings.database_url,
    connect_args=connect_args_for(settings.database_url),
    pool_pre_ping=True,
    pool_size=settings.db_pool_size,
    max_overflow=settings.db_max_overflow,
    echo=False,
)

AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    pass


async def init_db() -> None:
    """Create all tables if they don't exist (idempotent)."""
    # Register the mapped classes on Base.metadata
    from admin_api import models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables initialised")


def get_session_factory() -> async_sessionmaker:
    """FastAPI dependency returning the session factory (overridden in tests)."""
    return AsyncSessionLocal


async def get_db(session_factory: async_sessionmaker = Depends(get_session_factory)):
    """Yield a session that commits on success and rolls back on error."""
    async with session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
