"""FastAPI application entry point."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from epg_inventory.api.v1 import equipment, health, sku_admin
from epg_inventory.config import settings
from epg_inventory.db import dispose_engine
from epg_inventory.logging import setup_logging

# Configure logging before anything else
setup_logging()

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan handler for startup/shutdown events."""
    logger.info(
        "Starting EPG inventory API",
        debug=settings.debug,
        sku_org_prefix=settings.sku_org_prefix,
        auto_generation_forced_off=settings.disable_auto_sku_generation,
    )

    yield

    logger.info("Shutting down EPG inventory API")
    await dispose_engine()
    logger.info("Database connections disposed")


app = FastAPI(
    title="EPG Inventory API",
    description="Equipment instances and SKU allocation for the rental inventory",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.backend_cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# API routes
app.include_router(health.router, prefix="/api/v1", tags=["health"])
app.include_router(equipment.router, prefix="/api/v1")
app.include_router(sku_admin.router, prefix="/api/v1")
