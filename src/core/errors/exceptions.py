"""
Unified exception hierarchy for the sticker ingestion pipeline.

Run-level errors (InputError, NotFoundError, ParseError, UpstreamError,
NoAssetsError) abort an ingestion before any asset task starts and surface
to the caller with their ``http_status``. Asset-level errors (FetchError,
SizeExceededError, StoreError) are caught inside a single asset task and
recorded as that asset's outcome.
"""

# Import ErrorCategory from canonical source to avoid duplicate enum issues
# (comparing enums from different classes always returns False)
from core.types import ErrorCategory


class PipelineError(Exception):
    """
    Base exception for all pipeline errors.

    Attributes:
        message: Human-readable error description
        category: Error classification for retry decisions
        http_status: Status class reported to HTTP callers
        cause: Original exception if wrapping
        context: Additional context dict for debugging
    """

    category: ErrorCategory = ErrorCategory.UNKNOWN
    http_status: int = 500

    def __init__(
        self,
        message: str,
        cause: Exception | None = None,
        context: dict | None = None,
    ):
        self.message = message
        self.cause = cause
        self.context = context or {}
        super().__init__(message)

    @property
    def is_retryable(self) -> bool:
        return self.category in (ErrorCategory.TRANSIENT, ErrorCategory.UNKNOWN)

    def __str__(self) -> str:
        parts = [self.message]
        if self.cause:
            parts.append(f"Caused by: {self.cause}")
        return " | ".join(parts)


# =============================================================================
# Run-level Errors (abort before any asset task starts)
# =============================================================================


class InputError(PipelineError):
    """Malformed collection identifier, page number or source variant."""

    category = ErrorCategory.PERMANENT
    http_status = 400


class NotFoundError(PipelineError):
    """Upstream reports that the collection does not exist."""

    category = ErrorCategory.PERMANENT
    http_status = 404


class NoAssetsError(PipelineError):
    """Collection resolved successfully but contains zero assets."""

    category = ErrorCategory.PERMANENT
    http_status = 404


class ParseError(PipelineError):
    """Catalog listing could not be parsed as HTML at all."""

    category = ErrorCategory.PERMANENT
    http_status = 500


class UpstreamError(PipelineError):
    """Non-success response from the metadata/bot API or catalog site."""

    category = ErrorCategory.TRANSIENT
    http_status = 500

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        cause: Exception | None = None,
        context: dict | None = None,
    ):
        super().__init__(message, cause, context)
        self.status_code = status_code


class IngestionFault(PipelineError):
    """Internal programming fault inside an asset task; aborts the run."""

    http_status = 500


# =============================================================================
# Asset-level Errors (recorded as outcomes, never abort the run)
# =============================================================================


class FetchError(PipelineError):
    """Transport failure while retrieving asset bytes."""

    category = ErrorCategory.TRANSIENT

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        category: ErrorCategory | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message, cause, {"status_code": status_code})
        self.status_code = status_code
        if category is not None:
            self.category = category


class SizeExceededError(PipelineError):
    """Payload exceeds the configured maximum object size."""

    category = ErrorCategory.PERMANENT
    http_status = 400

    def __init__(self, size: int, limit: int):
        super().__init__(
            f"Payload size {size} bytes exceeds maximum {limit} bytes",
            context={"size": size, "limit": limit},
        )
        self.size = size
        self.limit = limit


class StoreError(PipelineError):
    """Object store operation failed."""

    category = ErrorCategory.TRANSIENT

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message, cause, {"status_code": status_code})
        self.status_code = status_code
        if status_code is not None:
            self.category = classify_http_status(status_code)


# =============================================================================
# Error Classification Utilities
# =============================================================================


def classify_http_status(status_code: int) -> ErrorCategory:
    """Classify HTTP status code into error category."""
    if 200 <= status_code < 300:
        return ErrorCategory.UNKNOWN  # Not an error

    if status_code == 429:
        return ErrorCategory.TRANSIENT  # Rate limited

    if 400 <= status_code < 500:
        return ErrorCategory.PERMANENT  # Client errors, won't fix with retry

    if status_code >= 500:
        return ErrorCategory.TRANSIENT  # Server errors, may recover

    return ErrorCategory.UNKNOWN


__all__ = [
    "ErrorCategory",
    "PipelineError",
    "InputError",
    "NotFoundError",
    "NoAssetsError",
    "ParseError",
    "UpstreamError",
    "IngestionFault",
    "FetchError",
    "SizeExceededError",
    "StoreError",
    "classify_http_status",
]
