"""FastAPI application factory for the holders report API."""

from __future__ import annotations

import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from loguru import logger
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from config.settings import settings
from holders_intel.parsers.api_usage import usage_metrics
from holders_intel.parsers.holders_report import create_report_builder

# Rate limiter (shared instance)
limiter = Limiter(key_func=get_remote_address)

API_VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    builder = create_report_builder(settings, recorder=usage_metrics)
    app.state.report_builder = builder
    logger.info(f"[API] Report builder ready ({len(settings.rpc_endpoints)} RPC endpoints)")
    try:
        yield
    finally:
        await builder.aclose()
        logger.info(f"[API] Shutdown, {usage_metrics.format_stats_line()}")


def create_app() -> FastAPI:
    """Build and configure the FastAPI application."""
    app = FastAPI(
        title="Holders Intel API",
        version=API_VERSION,
        docs_url="/api/docs" if os.getenv("API_DEBUG") else None,
        redoc_url=None,
        openapi_url="/api/openapi.json" if os.getenv("API_DEBUG") else None,
        lifespan=lifespan,
    )

    # Rate limiting
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    from holders_intel.api.routers.health import router as health_router
    from holders_intel.api.routers.holders import router as holders_router

    app.include_router(health_router)
    app.include_router(holders_router)

    return app
