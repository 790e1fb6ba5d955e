"""
Error classification and exception hierarchy.

Provides:
- ErrorCategory enum for classifying errors
- PipelineError hierarchy for typed exceptions
- HTTP status classification
"""

from core.errors.exceptions import (
    ErrorCategory,
    FetchError,
    IngestionFault,
    InputError,
    NoAssetsError,
    NotFoundError,
    ParseError,
    PipelineError,
    SizeExceededError,
    StoreError,
    UpstreamError,
    classify_http_status,
)

__all__ = [
    # Enums
    "ErrorCategory",
    # Base class
    "PipelineError",
    # Run-level errors
    "InputError",
    "NotFoundError",
    "NoAssetsError",
    "ParseError",
    "UpstreamError",
    "IngestionFault",
    # Asset-level errors
    "FetchError",
    "SizeExceededError",
    "StoreError",
    # Utilities
    "classify_http_status",
]
