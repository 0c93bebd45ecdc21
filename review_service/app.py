"""Review service FastAPI application.

Exposes review CRUD under ``/api/reviews`` together with the dashboard
analytics endpoints (``/api/metrics``, ``/api/usage``) and data exports
(``/api/export``). The database engine is created in the application
lifespan and handed to request handlers through ``app.state``.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.ext.asyncio import AsyncSession

from review_service import __version__, config
from review_service.database import (
    build_engine,
    build_session_factory,
    get_db,
    init_models,
    is_database_healthy,
)
from review_service.responses import register_exception_handlers
from review_service.routers import register_routers

logging.basicConfig(level=config.LOG_LEVEL, format=config.LOG_FORMAT)
logger = logging.getLogger(__name__)

ENDPOINTS = {
    "reviews": [
        "GET /api/reviews",
        "GET /api/reviews/{id}",
        "POST /api/reviews",
        "PUT /api/reviews/{id}",
        "DELETE /api/reviews/{id}",
    ],
    "metrics": ["GET /api/metrics/timeseries", "GET /api/metrics/summary"],
    "usage": ["GET /api/usage/details", "GET /api/usage/summary"],
    "export": [
        "GET /api/export",
        "GET /api/export/csv",
        "GET /api/export/json",
        "GET /api/export/summary",
    ],
}


def create_app(database_url: Optional[str] = None) -> FastAPI:
    """Build the application.

    ``database_url`` overrides ``DATABASE_URL`` from the environment; tests
    use it to point every app instance at its own database.
    """
    url = database_url or config.DATABASE_URL

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        engine = build_engine(url, echo=config.SQL_ECHO)
        try:
            await init_models(engine)
        except Exception as exc:
            logger.error("DB Init failed: %s", exc)
            await engine.dispose()
            raise

        app.state.engine = engine
        app.state.session_factory = build_session_factory(engine)
        logger.info("Review service started")

        yield

        await engine.dispose()
        logger.info("Database connection closed")

    app = FastAPI(
        root_path=config.ROOT_PATH,
        title="Review Service",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs",
        openapi_url="/openapi.json",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)
    register_routers(app)

    @app.get("/")
    async def index() -> Dict[str, Any]:
        """Service name and an index of the available endpoints."""
        return {"service": "Customer Satisfaction System API", "endpoints": ENDPOINTS}

    @app.get("/health")
    async def health(db: AsyncSession = Depends(get_db)) -> Dict[str, str]:
        """Health check endpoint returning the service and database status."""
        healthy = await is_database_healthy(db)
        return {"status": "ok", "database": "ready" if healthy else "unavailable"}

    return app


app = create_app()


def main() -> None:
    import uvicorn

    uvicorn.run("review_service.app:app", host=config.HOST, port=config.PORT)


if __name__ == "__main__":
    main()
