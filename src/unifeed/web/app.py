"""FastAPI application factory for the Unifeed web API."""

from __future__ import annotations

from fastapi import FastAPI

from unifeed.service import FeedService
from unifeed.web.routes import health_router, router


def create_app(service: FeedService, database_path: str) -> FastAPI:
    """Build and return a configured FastAPI application."""
    app = FastAPI(title="Unifeed", docs_url="/api/docs")
    app.state.service = service
    app.state.database_path = database_path
    app.include_router(health_router)
    app.include_router(router, prefix="/api/v1")
    return app
