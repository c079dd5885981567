"""Holders report endpoint."""

import asyncio

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from loguru import logger

from config.settings import settings
from holders_intel.api.app import limiter
from holders_intel.errors import LedgerFetchError
from holders_intel.models.report import HoldersReport, LedgerFailureOut, ReportRequest
from holders_intel.parsers.holders_report import HoldersReportBuilder

router = APIRouter(prefix="/api/v1/holders", tags=["holders"])

# nginx convention for "client closed request"
CLIENT_CLOSED_REQUEST = 499


class ClientDisconnected(Exception):
    """The HTTP client went away before the report was ready."""


def get_report_builder(request: Request) -> HoldersReportBuilder:
    """Return the builder created by the app lifespan."""
    return request.app.state.report_builder


async def _wait_for_disconnect(request: Request) -> None:
    while True:
        message = await request.receive()
        if message["type"] == "http.disconnect":
            return


async def build_unless_disconnected(
    request: Request,
    builder: HoldersReportBuilder,
    mint: str,
    manual_price: float | None,
) -> HoldersReport:
    """Run ``builder.build`` and cancel it as soon as the client disconnects.

    Raises:
        ClientDisconnected: the client left first; every in-flight leg was cancelled.
    """
    build_task = asyncio.create_task(builder.build(mint, manual_price))
    watch_task = asyncio.create_task(_wait_for_disconnect(request))
    try:
        await asyncio.wait({build_task, watch_task}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        # also reached when this handler itself is cancelled
        for task in (build_task, watch_task):
            if not task.done():
                task.cancel()
        await asyncio.gather(build_task, watch_task, return_exceptions=True)

    if not build_task.cancelled():
        return build_task.result()
    logger.info(f"[API] Client disconnected, report for {mint[:12]} cancelled")
    raise ClientDisconnected(mint)


@router.post("/report")
@limiter.limit(settings.report_rate_limit)
async def holders_report(
    request: Request,
    body: ReportRequest,
    builder: HoldersReportBuilder = Depends(get_report_builder),
) -> JSONResponse:
    """Build a holder-distribution report for a token mint.

    Returns 502 with every tried RPC endpoint when no holders can be fetched.
    """
    try:
        report = await build_unless_disconnected(request, builder, body.token_mint, body.manual_price)
    except ClientDisconnected:
        return JSONResponse(status_code=CLIENT_CLOSED_REQUEST, content={"error": "client disconnected"})
    except LedgerFetchError as e:
        logger.warning(f"[API] Report failed for {body.token_mint[:12]}: {e}")
        failure = LedgerFailureOut(
            error=str(e),
            token_mint=e.token_mint,
            attempts=[{"source": label, "reason": reason} for label, reason in e.attempts],
        )
        return JSONResponse(
            status_code=status.HTTP_502_BAD_GATEWAY,
            content=failure.model_dump(by_alias=True),
        )

    return JSONResponse(content=report.to_json_dict())
