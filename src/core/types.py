"""
Core types used across modules.

This module provides base enums that are shared across the core library to
ensure consistency and type safety.
"""

from enum import Enum


class ErrorCategory(Enum):
    """
    Classification of error types for handling decisions.

    Used throughout the pipeline to tag errors in logs and reports so that a
    caller can decide whether re-running an ingestion is worthwhile.

    Categories:
        TRANSIENT: Temporary failures that may succeed on a later run
                   (e.g., network timeouts, 429/503 errors)
        PERMANENT: Failures that won't succeed on retry
                   (e.g., 404, validation errors, oversize payloads)
        UNKNOWN: Unclassified errors
    """

    TRANSIENT = "transient"
    PERMANENT = "permanent"
    UNKNOWN = "unknown"


__all__ = ["ErrorCategory"]
