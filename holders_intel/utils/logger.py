import os
import sys

from loguru import logger

# "mint" is bound per report by HoldersReportBuilder.build via logger.contextualize
_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<magenta>{extra[mint]: <12}</magenta> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan> - "
    "<level>{message}</level>"
)


def setup_logger(*, json_logs: bool = False, level: str = "INFO") -> None:
    """Configure loguru sinks for the CLI and the API server.

    Every line carries the mint of the report being built ("-" outside a
    report), so interleaved concurrent API requests can be told apart.
    Console level follows LOG_LEVEL env (default: ``level``); the file sink
    keeps DEBUG so soft-failed legs of a degraded report can be traced.
    """
    console_level = os.getenv("LOG_LEVEL", level).upper()
    logger.remove()
    logger.configure(extra={"mint": "-"})

    if json_logs:
        logger.add(sys.stderr, serialize=True, level=console_level)
    else:
        logger.add(sys.stderr, format=_FORMAT, level=console_level, colorize=True)

    logger.add(
        "logs/holders_intel_{time:YYYY-MM-DD}.log",
        format=_FORMAT,
        rotation="50 MB",
        retention="3 days",
        compression="gz",
        level="DEBUG",
        serialize=json_logs,
    )
