"""Entry point: one-off holders report or the HTTP API server.

    python -m holders_intel.main report <mint> [--price 0.0012]
    python -m holders_intel.main serve
"""

import argparse
import asyncio
import json
import signal
import sys

from loguru import logger

from config.settings import settings
from holders_intel.errors import LedgerFetchError
from holders_intel.parsers.api_usage import usage_metrics
from holders_intel.parsers.holders_report import create_report_builder
from holders_intel.utils.logger import setup_logger


async def run_report(mint: str, manual_price: float | None) -> int:
    builder = create_report_builder(settings, recorder=usage_metrics)
    try:
        report = await builder.build(mint, manual_price)
    except LedgerFetchError as e:
        logger.error(f"Report failed: {e}")
        return 1
    finally:
        await builder.aclose()

    print(json.dumps(report.to_json_dict(), indent=2))
    logger.info(f"Done, {usage_metrics.format_stats_line()}")
    return 0


async def run_server() -> None:
    from holders_intel.api.server import run_api_server

    logger.info("Starting holders-intel API...")

    # Graceful shutdown on SIGINT/SIGTERM
    loop = asyncio.get_running_loop()
    shutdown_event = asyncio.Event()

    def _signal_handler() -> None:
        logger.info("Shutdown signal received")
        shutdown_event.set()

    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, _signal_handler)

    server_task = asyncio.create_task(run_api_server())

    # Wait for either server to finish or shutdown signal
    done, pending = await asyncio.wait(
        [server_task, asyncio.create_task(shutdown_event.wait())],
        return_when=asyncio.FIRST_COMPLETED,
    )

    # Cancel remaining tasks
    for task in pending:
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    logger.info(f"Shutdown complete, {usage_metrics.format_stats_line()}")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Solana token holder distribution reports")
    parser.add_argument("--json-logs", action="store_true", help="Emit structured JSON logs")
    sub = parser.add_subparsers(dest="command", required=True)

    report_cmd = sub.add_parser("report", help="Build one report and print it as JSON")
    report_cmd.add_argument("mint", help="Token mint address")
    report_cmd.add_argument("--price", type=float, default=None, help="Manual USD price override")

    sub.add_parser("serve", help="Run the HTTP API")

    args = parser.parse_args(argv)
    setup_logger(json_logs=args.json_logs, level="INFO")

    if args.command == "report":
        if args.price is not None and args.price <= 0:
            parser.error("--price must be positive")
        return asyncio.run(run_report(args.mint, args.price))

    asyncio.run(run_server())
    return 0


if __name__ == "__main__":
    sys.exit(main())
