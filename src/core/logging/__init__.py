"""
Structured logging module.

Provides JSON logging with run correlation IDs and context propagation.
"""

from core.logging.context import (
    clear_log_context,
    get_log_context,
    set_log_context,
)
from core.logging.formatters import ConsoleFormatter, JSONFormatter
from core.logging.setup import (
    generate_run_id,
    get_log_file_path,
    setup_logging,
)

__all__ = [
    # Setup
    "setup_logging",
    "generate_run_id",
    "get_log_file_path",
    # Formatters
    "JSONFormatter",
    "ConsoleFormatter",
    # Context
    "set_log_context",
    "get_log_context",
    "clear_log_context",
]
