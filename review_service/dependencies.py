"""FastAPI dependencies shared by the routers."""

from __future__ import annotations

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from review_service.database import get_db
from review_service.store import ReviewStore


async def get_store(db: AsyncSession = Depends(get_db)) -> ReviewStore:
    """Review store bound to the request's database session."""
    return ReviewStore(db)
