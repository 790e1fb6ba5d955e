"""Logging setup and configuration."""

import logging
import secrets
import sys
from datetime import datetime
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path

from core.logging.context import set_log_context
from core.logging.formatters import ConsoleFormatter, JSONFormatter

# Default settings
DEFAULT_ROTATION_WHEN = "midnight"
DEFAULT_BACKUP_COUNT = 7
DEFAULT_CONSOLE_LEVEL = logging.INFO
DEFAULT_FILE_LEVEL = logging.DEBUG

# Noisy loggers to suppress
NOISY_LOGGERS = [
    "aiohttp",
    "aiohttp.access",
    "asyncio",
    "urllib3",
]


def get_log_file_path(log_dir: Path, name: str, stage: str | None = None) -> Path:
    """
    Build log file path organized by date.

    Example:
        logs/2026-10-18/sticker_pipeline_ingest_1018_1430.log
    """
    now = datetime.now()
    parts = [name]
    if stage:
        parts.append(stage)
    parts.append(now.strftime("%m%d_%H%M"))
    return log_dir / now.strftime("%Y-%m-%d") / f"{'_'.join(parts)}.log"


def setup_logging(
    name: str = "sticker_pipeline",
    stage: str | None = None,
    log_dir: Path | None = None,
    json_format: bool = False,
    console_level: int = DEFAULT_CONSOLE_LEVEL,
    file_level: int = DEFAULT_FILE_LEVEL,
    suppress_noisy: bool = True,
) -> logging.Logger:
    """
    Configure the root logger with a console handler and an optional rotating file.

    Args:
        name: Logger name and log file prefix
        stage: Stage name (ingest/discover/serve) stored in the log context
        log_dir: Directory for log files; no file handler when None
        json_format: Use JSON on the console as well (files are always JSON)
        console_level: Console handler level (default: INFO)
        file_level: File handler level (default: DEBUG)
        suppress_noisy: Quiet down HTTP client and event loop loggers

    Returns:
        Configured logger instance
    """
    if stage:
        set_log_context(stage=stage)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)  # Capture all, handlers filter
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(JSONFormatter() if json_format else ConsoleFormatter())
    root_logger.addHandler(console_handler)

    if log_dir is not None:
        log_file = get_log_file_path(log_dir, name, stage)
        log_file.parent.mkdir(parents=True, exist_ok=True)

        file_handler = TimedRotatingFileHandler(
            log_file,
            when=DEFAULT_ROTATION_WHEN,
            backupCount=DEFAULT_BACKUP_COUNT,
            encoding="utf-8",
        )
        file_handler.setLevel(file_level)
        file_handler.setFormatter(JSONFormatter())
        root_logger.addHandler(file_handler)

    if suppress_noisy:
        for logger_name in NOISY_LOGGERS:
            logging.getLogger(logger_name).setLevel(logging.WARNING)

    logger = logging.getLogger(name)
    logger.debug(
        "Logging configured",
        extra={"stage": stage, "log_dir": str(log_dir) if log_dir else None},
    )
    return logger


def generate_run_id() -> str:
    """
    Generate unique ingestion run identifier.

    Format: r-YYYYMMDD-HHMMSS-XXXX where XXXX is random hex.
    """
    ts = datetime.now().strftime("%Y%m%d-%H%M%S")
    suffix = secrets.token_hex(2)
    return f"r-{ts}-{suffix}"
