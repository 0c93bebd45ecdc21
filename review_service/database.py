"""Async SQLAlchemy engine and session plumbing for the review service.

The engine is not a module global: :func:`create_app` builds one during the
application lifespan and keeps it on ``app.state``. Request handlers receive
a session through the :func:`get_db` dependency.
"""

from __future__ import annotations

import logging
from typing import AsyncGenerator

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from review_service.db_core import Base

logger = logging.getLogger(__name__)


def build_engine(database_url: str, echo: bool = False, **kwargs) -> AsyncEngine:
    """Create an async engine for ``database_url``."""
    if not database_url:
        raise RuntimeError("DATABASE_URL is not set!")
    return create_async_engine(database_url, echo=echo, **kwargs)


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind=engine, expire_on_commit=False)


async def init_models(engine: AsyncEngine) -> None:
    """Create the tables if they do not exist yet."""
    # Registers the model classes on Base.metadata.
    from review_service import models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database schema initialized")


async def is_database_healthy(session: AsyncSession) -> bool:
    """Run a trivial query to check the database is reachable."""
    try:
        result = await session.execute(text("SELECT 1"))
        return result.scalar_one() == 1
    except SQLAlchemyError as exc:
        logger.error("Database health check failed: %s", exc)
        return False


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency that yields an asynchronous database session.

    Sessions come from the factory stored on the application state, so every
    request owns exactly one session for its lifetime.
    """
    session_factory: async_sessionmaker[AsyncSession] = request.app.state.session_factory
    async with session_factory() as session:
        yield session
