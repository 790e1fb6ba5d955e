"""Log formatters for JSON and console output."""

import json
import logging
import re
import sys
from datetime import UTC, datetime
from typing import Any

from core.logging.context import get_log_context
from core.utils.json_serializers import json_serializer


class JSONFormatter(logging.Formatter):
    """
    JSON log formatter with context injection.

    Produces one JSON object per line for easy parsing with jq/grep.
    Sanitizes URLs to remove bot tokens and keys before logging.
    """

    # Fields to extract from LogRecord extras
    EXTRA_FIELDS = [
        # Correlation
        "sequence_index",
        "duration_ms",
        # HTTP
        "http_status",
        "http_method",
        "http_url",
        "api_endpoint",
        # Errors
        "error_category",
        "error_message",
        "error",
        "error_type",
        # Asset processing
        "source_ref",
        "storage_path",
        "bucket",
        "mime_type",
        "is_animated",
        "byte_length",
        "max_object_size",
        "outcome",
        # Run tallies
        "total_discovered",
        "uploaded",
        "skipped",
        "failed",
        "animated_count",
        "concurrency_limit",
        # Catalog discovery
        "page",
        "source_variant",
        "collections_found",
        "listing_url",
    ]

    # Type mapping for numeric fields so they never serialize as strings
    NUMERIC_FIELDS = {
        "duration_ms": float,
        "sequence_index": int,
        "http_status": int,
        "byte_length": int,
        "max_object_size": int,
        "total_discovered": int,
        "uploaded": int,
        "skipped": int,
        "failed": int,
        "animated_count": int,
        "concurrency_limit": int,
        "page": int,
        "source_variant": int,
        "collections_found": int,
    }

    # Fields that contain URLs and should be sanitized
    URL_FIELDS = ["http_url", "listing_url", "source_ref", "url"]

    # Telegram embeds the bot token in the path: /bot<token>/ and /file/bot<token>/
    BOT_TOKEN_PATTERN = re.compile(r"/bot[^/]+/")

    # Pattern to match sensitive query parameters
    SENSITIVE_PARAMS_PATTERN = re.compile(
        r"([?&])(sig|token|key|secret|password|apikey)=[^&]*",
        re.IGNORECASE,
    )

    def _sanitize_url(self, url: str) -> str:
        url = self.BOT_TOKEN_PATTERN.sub("/bot[REDACTED]/", url)
        return self.SENSITIVE_PARAMS_PATTERN.sub(r"\1\2=[REDACTED]", url)

    def _sanitize_value(self, key: str, value: Any) -> Any:
        if key in self.URL_FIELDS and isinstance(value, str):
            return self._sanitize_url(value)
        return value

    def _ensure_type(self, field: str, value: Any) -> Any:
        if field not in self.NUMERIC_FIELDS or value is None:
            return value

        expected_type = self.NUMERIC_FIELDS[field]
        try:
            return expected_type(value)
        except (ValueError, TypeError):
            return None

    @staticmethod
    def _base_log_entry(record: logging.LogRecord) -> dict[str, Any]:
        return {
            "ts": datetime.now(UTC).strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z",
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

    @staticmethod
    def _inject_context(log_entry: dict[str, Any], log_context: dict[str, Any]) -> None:
        for field in ("run_id", "stage", "collection_id"):
            if log_context[field]:
                log_entry[field] = log_context[field]

    @staticmethod
    def _should_include_source_location(record: logging.LogRecord) -> bool:
        return record.levelno in (logging.DEBUG, logging.ERROR, logging.CRITICAL)

    def _inject_extra_fields(self, log_entry: dict[str, Any], record: logging.LogRecord) -> None:
        for field in self.EXTRA_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                typed_value = self._ensure_type(field, value)
                if typed_value is None:
                    continue
                log_entry[field] = self._sanitize_value(field, typed_value)

    def _inject_exception(self, log_entry: dict[str, Any], record: logging.LogRecord) -> None:
        if not record.exc_info:
            return

        exc_type, exc_value, _ = record.exc_info
        log_entry["exception"] = {
            "type": exc_type.__name__ if exc_type else None,
            "message": str(exc_value) if exc_value else None,
            "stacktrace": self.formatException(record.exc_info),
        }

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as a single JSON line."""
        log_entry = self._base_log_entry(record)
        self._inject_context(log_entry, get_log_context())

        if self._should_include_source_location(record):
            log_entry["file"] = f"{record.filename}:{record.lineno}"

        # Type validation must happen before sanitization
        self._inject_extra_fields(log_entry, record)
        self._inject_exception(log_entry, record)

        return json.dumps(log_entry, default=json_serializer, ensure_ascii=False)


class ConsoleFormatter(logging.Formatter):
    """
    Human-readable console formatter with color-coded log levels.

    Colors are auto-disabled when output is not a TTY (pipes, files).
    """

    # ANSI color codes
    COLORS = {
        logging.DEBUG: "\033[36m",  # Cyan
        logging.INFO: "\033[32m",  # Green
        logging.WARNING: "\033[33m",  # Yellow
        logging.ERROR: "\033[31m",  # Red
        logging.CRITICAL: "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._use_colors = sys.stdout.isatty()

    def _format_level_name(self, record: logging.LogRecord) -> str:
        level_name = record.levelname
        if not self._use_colors:
            return level_name

        color = self.COLORS.get(record.levelno, "")
        if not color:
            return level_name

        return f"{color}{level_name}{self.RESET}"

    @staticmethod
    def _build_prefix(level_name: str, log_context: dict[str, Any]) -> str:
        parts = [
            datetime.now().strftime("%Y-%m-%d %H:%M:%S"),
            level_name,
        ]

        if log_context["stage"]:
            parts.append(f"[{log_context['stage']}]")
        if log_context["collection_id"]:
            parts.append(f"[{log_context['collection_id']}]")

        return " - ".join(parts)

    @staticmethod
    def _build_tags(record: logging.LogRecord, log_context: dict[str, Any]) -> list[str]:
        run_id = log_context.get("run_id")
        sequence_index = getattr(record, "sequence_index", None)

        tags = []
        if run_id:
            tags.append(f"[{run_id[-4:]}]")
        if sequence_index is not None:
            tags.append(f"[#{sequence_index}]")
        return tags

    def format(self, record: logging.LogRecord) -> str:
        """Format log record for console output with optional color coding."""
        log_context = get_log_context()

        level_name = self._format_level_name(record)
        prefix = self._build_prefix(level_name, log_context)
        tags = self._build_tags(record, log_context)

        if tags:
            return f"{prefix} - {' '.join(tags)} {record.getMessage()}"

        return f"{prefix} - {record.getMessage()}"
