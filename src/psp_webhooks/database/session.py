"""Async engine and session lifecycle for the auth and configuration stores."""

import logging
from typing import AsyncGenerator, Optional

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine as sa_create_async_engine,
)
from sqlalchemy.pool import StaticPool

from ..config import get_database_url
from .models import Base

logger = logging.getLogger(__name__)

_engine: Optional[AsyncEngine] = None
_session_factory: Optional[async_sessionmaker[AsyncSession]] = None


def _sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # Repositories flush explicitly; objects stay usable after commit
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


def create_async_engine(database_url: Optional[str] = None, echo: bool = False) -> AsyncEngine:
    """
    Build the engine for the configured database.

    SQLite (the default, and what the tests use in memory) shares one
    connection through StaticPool; other backends get a regular pool.
    """
    url = database_url or get_database_url()
    if url.startswith("sqlite"):
        return sa_create_async_engine(
            url,
            echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return sa_create_async_engine(url, echo=echo, pool_pre_ping=True)


def get_async_session_factory(
    engine: Optional[AsyncEngine] = None,
) -> async_sessionmaker[AsyncSession]:
    """Return a session factory for ``engine``, or the one set up by init_db()."""
    if engine is not None:
        return _sessionmaker(engine)
    if _session_factory is None:
        raise RuntimeError("Database not initialized. Call init_db() first.")
    return _session_factory


async def init_db(database_url: Optional[str] = None, create_tables: bool = True) -> None:
    """Open the application engine and create the installation_auth and
    provider_configurations tables when missing."""
    global _engine, _session_factory

    _engine = create_async_engine(database_url)
    _session_factory = _sessionmaker(_engine)
    if create_tables:
        async with _engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
    logger.info(f"Database ready ({_engine.url.get_backend_name()})")


async def close_db() -> None:
    global _engine, _session_factory

    if _engine is None:
        return
    await _engine.dispose()
    _engine = None
    _session_factory = None
    logger.info("Database connection closed")


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency yielding a session committed after the request."""
    async with get_async_session_factory()() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
