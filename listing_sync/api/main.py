"""FastAPI application entry point."""
from contextlib import asynccontextmanager
from collections.abc import AsyncGenerator

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from listing_sync.api.routes import health, listings
from listing_sync.infrastructure.database.connection import engine, products_engine
from listing_sync.logging_config import configure_logging

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    configure_logging()
    logger.info("listing_sync_starting")
    yield
    logger.info("listing_sync_stopping")
    await engine.dispose()
    await products_engine.dispose()


def create_app() -> FastAPI:
    app = FastAPI(
        title="Listing Sync",
        description="Publishes catalog products to third-party marketplaces and keeps their status in sync.",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health.router)
    app.include_router(listings.router)

    return app


app = create_app()
