"""
Data models for a single ingestion run.

Flow of one asset:
    AssetDescriptor -> FetchedAsset -> ClassifiedAsset -> UploadOutcome

Descriptors come from a Source Provider and are never mutated. Fetched and
classified assets are owned by the asset task that created them and are
dropped once the task has produced its outcome. IngestionReport is the only
artifact returned to the caller.
"""

import re
from dataclasses import dataclass, field
from enum import Enum

# Telegram sticker set names: letters, digits, underscores (hyphen allowed for
# catalog slugs), at most 64 characters
COLLECTION_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]{1,64}$")


def is_valid_collection_id(value: str) -> bool:
    return bool(value) and COLLECTION_ID_PATTERN.match(value) is not None


def storage_path(collection_id: str, sequence_index: int, extension: str) -> str:
    """Object path for an asset: {collection_id}/sticker_{sequence_index}.{extension}."""
    return f"{collection_id}/sticker_{sequence_index}.{extension}"


@dataclass(frozen=True)
class AssetDescriptor:
    """
    One asset of a collection as reported by a Source Provider.

    Attributes:
        source_ref: Opaque upstream reference (Telegram file_id or URL)
        sequence_index: 1-based position, unique within one resolution
        collection_id: Owning collection
    """

    source_ref: str
    sequence_index: int
    collection_id: str


@dataclass(frozen=True)
class FetchedAsset:
    """Raw payload of a descriptor, plus the upstream path used as a format hint."""

    descriptor: AssetDescriptor
    data: bytes = field(repr=False)
    path_hint: str | None = None

    @property
    def byte_length(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class ClassifiedAsset:
    """FetchedAsset with its sniffed format."""

    fetched: FetchedAsset
    mime_type: str
    is_animated: bool
    extension: str

    @property
    def descriptor(self) -> AssetDescriptor:
        return self.fetched.descriptor

    @property
    def byte_length(self) -> int:
        return self.fetched.byte_length

    @property
    def storage_path(self) -> str:
        d = self.descriptor
        return storage_path(d.collection_id, d.sequence_index, self.extension)


class OutcomeStatus(Enum):
    SUCCESS = "success"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class UploadOutcome:
    """Base for the per-asset outcome variants."""

    sequence_index: int

    status = None  # set by each variant


@dataclass(frozen=True)
class UploadSuccess(UploadOutcome):
    storage_path: str
    byte_length: int
    mime_type: str
    is_animated: bool
    public_url: str | None = None

    status = OutcomeStatus.SUCCESS


@dataclass(frozen=True)
class UploadSkipped(UploadOutcome):
    reason: str

    status = OutcomeStatus.SKIPPED


@dataclass(frozen=True)
class UploadFailed(UploadOutcome):
    reason: str
    error_category: str | None = None

    status = OutcomeStatus.FAILED


@dataclass(frozen=True)
class IngestionReport:
    """
    Aggregated result of one ingestion run.

    ``outcomes`` is ordered by ascending sequence_index; all counts are
    derived from it so uploaded + skipped + failed == total_discovered.
    """

    collection_id: str
    total_discovered: int
    outcomes: tuple[UploadOutcome, ...]

    def __post_init__(self):
        if len(self.outcomes) != self.total_discovered:
            raise ValueError(
                f"Report for {self.collection_id} has {len(self.outcomes)} outcomes "
                f"for {self.total_discovered} discovered assets"
            )

    @classmethod
    def from_outcomes(cls, collection_id: str, outcomes: list[UploadOutcome]) -> "IngestionReport":
        ordered = tuple(sorted(outcomes, key=lambda o: o.sequence_index))
        return cls(collection_id=collection_id, total_discovered=len(ordered), outcomes=ordered)

    def _count(self, status: OutcomeStatus) -> int:
        return sum(1 for o in self.outcomes if o.status is status)

    @property
    def uploaded(self) -> int:
        return self._count(OutcomeStatus.SUCCESS)

    @property
    def skipped(self) -> int:
        return self._count(OutcomeStatus.SKIPPED)

    @property
    def failed(self) -> int:
        return self._count(OutcomeStatus.FAILED)

    @property
    def animated_count(self) -> int:
        return sum(1 for o in self.outcomes if isinstance(o, UploadSuccess) and o.is_animated)

    @property
    def successes(self) -> list[UploadSuccess]:
        return [o for o in self.outcomes if isinstance(o, UploadSuccess)]


__all__ = [
    "COLLECTION_ID_PATTERN",
    "is_valid_collection_id",
    "storage_path",
    "AssetDescriptor",
    "FetchedAsset",
    "ClassifiedAsset",
    "OutcomeStatus",
    "UploadOutcome",
    "UploadSuccess",
    "UploadSkipped",
    "UploadFailed",
    "IngestionReport",
]
