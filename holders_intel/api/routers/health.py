"""Health check: uptime and external API usage counters."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter
from pydantic import BaseModel

from config.settings import settings
from holders_intel.parsers.api_usage import usage_metrics

router = APIRouter(prefix="/api/v1", tags=["health"])


class HealthResponse(BaseModel):
    status: str
    version: str
    uptime_sec: int
    rpc_endpoints: int
    markets_api_enabled: bool
    api_usage: dict[str, Any]


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    from holders_intel.api.app import API_VERSION

    summary = usage_metrics.get_summary()
    rpc_count = len(settings.rpc_endpoints)
    return HealthResponse(
        status="ok" if rpc_count else "degraded",
        version=API_VERSION,
        uptime_sec=summary.get("uptime_sec", 0),
        rpc_endpoints=rpc_count,
        markets_api_enabled=bool(settings.solscan_api_key),
        api_usage=summary.get("services", {}),
    )
