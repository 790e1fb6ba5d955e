from sticker_pipeline.schemas.models import (
    AssetDescriptor,
    ClassifiedAsset,
    FetchedAsset,
    IngestionReport,
    OutcomeStatus,
    UploadFailed,
    UploadOutcome,
    UploadSkipped,
    UploadSuccess,
    is_valid_collection_id,
    storage_path,
)
from sticker_pipeline.schemas.responses import (
    AssetError,
    CollectionStats,
    ErrorResponse,
    IngestResponse,
    StorageRequest,
    UploadDetail,
)

__all__ = [
    "AssetDescriptor",
    "FetchedAsset",
    "ClassifiedAsset",
    "OutcomeStatus",
    "UploadOutcome",
    "UploadSuccess",
    "UploadSkipped",
    "UploadFailed",
    "IngestionReport",
    "is_valid_collection_id",
    "storage_path",
    "IngestResponse",
    "UploadDetail",
    "AssetError",
    "ErrorResponse",
    "StorageRequest",
    "CollectionStats",
]
