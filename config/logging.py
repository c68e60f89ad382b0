# coding: utf-8
"""
Logging configuration with loguru for the CNC Signal Ledger
"""
import logging
import sys
from pathlib import Path
from typing import Optional

from loguru import logger
import sentry_sdk

from config.config import LOG_LEVEL, ENVIRONMENT, SENTRY_DSN, STORE_BACKEND

FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} | {message}"


def setup_logging(logs_dir: Optional[Path] = None, console_level: Optional[str] = None) -> None:
    """
    Setup loguru logging configuration

    Args:
        logs_dir: Directory for rotating log files (default: <project>/logs)
        console_level: Console level override (default: LOG_LEVEL)
    """
    # Remove default handler
    logger.remove()

    if logs_dir is None:
        logs_dir = Path(__file__).parent.parent / 'logs'
    logs_dir.mkdir(parents=True, exist_ok=True)

    # Tracebacks with variable values may include passwords passed to login/register
    diagnose = ENVIRONMENT == "development"

    # Console output with colors and formatting
    logger.add(
        sys.stdout,
        format=(
            "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
            "<level>{message}</level>"
        ),
        level=console_level or LOG_LEVEL,
        colorize=True,
        diagnose=diagnose,
    )

    # File output - all ledger activity
    logger.add(
        logs_dir / "ledger_{time:YYYY-MM-DD}.log",
        format=FILE_FORMAT,
        level="DEBUG",
        rotation="00:00",  # Rotate at midnight, same boundary as the daily quota
        retention="7 days",
        compression="zip",
        encoding="utf-8",
        diagnose=diagnose,
    )

    # File output - errors only
    logger.add(
        logs_dir / "error_{time:YYYY-MM-DD}.log",
        format=FILE_FORMAT,
        level="ERROR",
        rotation="00:00",
        retention="30 days",
        compression="zip",
        encoding="utf-8",
        diagnose=diagnose,
    )

    # Sentry integration - send ERROR and CRITICAL to Sentry
    if SENTRY_DSN:
        sentry_sdk.init(dsn=SENTRY_DSN, environment=ENVIRONMENT, send_default_pii=False)
        sentry_sdk.set_tag("store_backend", STORE_BACKEND)
        logger.add(
            sentry_sink,
            level="ERROR",
            format="{message}",
        )

    # Redis client logs through stdlib logging
    logging.getLogger('redis').setLevel(logging.WARNING)
    logging.getLogger('asyncio').setLevel(logging.WARNING)

    logger.info(
        f"Ledger logging initialized | Environment: {ENVIRONMENT} | "
        f"Log level: {console_level or LOG_LEVEL} | Store: {STORE_BACKEND}"
    )


def sentry_sink(message):
    """
    Custom sink to send ERROR and CRITICAL logs to Sentry
    """
    record = message.record
    level = record["level"].name

    if level in ("ERROR", "CRITICAL"):
        sentry_sdk.capture_message(
            record["message"],
            level="error" if level == "ERROR" else "fatal",
            extras={
                "function": record["function"],
                "file": record["file"].path,
                "line": record["line"],
            }
        )

    # If there's an exception, send it to Sentry
    if record["exception"]:
        sentry_sdk.capture_exception(record["exception"].value)
