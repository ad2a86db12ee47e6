"""
FastAPI application entrypoint for the PointBridge backend adapter.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from pointbridge.api.routes import router as api_router
from pointbridge.core.config import get_settings
from pointbridge.core.logging import configure_logging
from pointbridge.dependencies import get_database

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    # Bind the backend before serving so a misconfigured remote mode fails at boot.
    database = get_database()
    logger.info("PointBridge API serving with the %s database backend", database.mode.value)
    yield


def create_app() -> FastAPI:
    """Factory for the FastAPI application."""
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="PointBridge Rewards API",
        version="0.1.0",
        description="Auth and city lookup endpoints served through the database adapter.",
        lifespan=lifespan,
    )
    app.include_router(api_router, prefix="/api")
    return app


app = create_app()

__all__ = ["app", "create_app"]
