"""
Wire schemas for the HTTP entry point and CLI output.

The ingest response keeps the keys existing clients read (message, total,
uploaded, animated, details) and adds skipped/failed counts and per-asset
error entries.
"""

from pydantic import BaseModel, Field

from sticker_pipeline.schemas.models import IngestionReport, UploadFailed, UploadSkipped


class UploadDetail(BaseModel):
    """One stored asset."""

    filename: str
    isAnimated: bool
    contentType: str
    size: int
    url: str | None = None


class AssetError(BaseModel):
    """One asset that was skipped or failed."""

    index: int
    status: str
    reason: str


class IngestResponse(BaseModel):
    message: str
    total: int
    uploaded: int
    animated: int
    skipped: int = 0
    failed: int = 0
    details: list[UploadDetail] = Field(default_factory=list)
    errors: list[AssetError] = Field(default_factory=list)

    @classmethod
    def from_report(cls, report: IngestionReport) -> "IngestResponse":
        details = [
            UploadDetail(
                filename=s.storage_path,
                isAnimated=s.is_animated,
                contentType=s.mime_type,
                size=s.byte_length,
                url=s.public_url,
            )
            for s in report.successes
        ]
        errors = [
            AssetError(index=o.sequence_index, status=o.status.value, reason=o.reason)
            for o in report.outcomes
            if isinstance(o, (UploadSkipped, UploadFailed))
        ]
        return cls(
            message=(
                f"Uploaded {report.uploaded}/{report.total_discovered} stickers "
                f"from {report.collection_id}"
            ),
            total=report.total_discovered,
            uploaded=report.uploaded,
            animated=report.animated_count,
            skipped=report.skipped,
            failed=report.failed,
            details=details,
            errors=errors,
        )


class ErrorResponse(BaseModel):
    error: str
    success: bool = False


class StorageRequest(BaseModel):
    """Body of a storage operation request."""

    operation: str
    bucket: str
    path: str | None = None
    file: str | None = None  # base64 encoded payload
    fileType: str | None = None
    fileName: str | None = None


class CollectionStats(BaseModel):
    totalCollections: int
    totalStickers: int
    animatedCount: int
    collections: dict[str, int] = Field(default_factory=dict)


__all__ = [
    "UploadDetail",
    "AssetError",
    "IngestResponse",
    "ErrorResponse",
    "StorageRequest",
    "CollectionStats",
]
