"""Routers package - register all API routers."""

from fastapi import FastAPI


def register_routers(app: FastAPI) -> None:
    """Register all routers with the application."""
    from .reviews import router as reviews_router
    from .metrics import router as metrics_router
    from .usage import router as usage_router
    from .export import router as export_router

    app.include_router(reviews_router, prefix="/api/reviews", tags=["reviews"])
    app.include_router(metrics_router, prefix="/api/metrics", tags=["metrics"])
    app.include_router(usage_router, prefix="/api/usage", tags=["usage"])
    app.include_router(export_router, prefix="/api/export", tags=["export"])
