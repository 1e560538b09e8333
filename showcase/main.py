"""
FastAPI application entrypoint for the media showcase back office.
"""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI

from showcase.api.routes import router as api_router
from showcase.core.config import get_settings
from showcase.core.logging import configure_logging
from showcase.dependencies import get_context


@asynccontextmanager
async def _lifespan(app: FastAPI):
    yield
    if get_context.cache_info().currsize:
        await get_context().aclose()


def create_app() -> FastAPI:
    """Factory for the FastAPI application."""
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Media Showcase Back Office",
        version="0.1.0",
        description="Catalog browsing and admin-gated media management.",
        lifespan=_lifespan,
    )
    app.include_router(api_router, prefix="/api")
    return app


app = create_app()

__all__ = ["app", "create_app"]
