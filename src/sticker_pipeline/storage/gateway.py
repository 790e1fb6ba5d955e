"""
Object Store Gateway.

Uniform upload/update/remove/list over a pluggable ObjectStore backend.
The gateway owns the size limit: an oversize payload raises
SizeExceededError before the backend is touched. Backends translate their
own failures into StoreError.
"""

import logging
import time
from dataclasses import dataclass
from typing import Protocol

from core.errors.exceptions import InputError, SizeExceededError
from core.media.sniff import is_animated_extension

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoredObject:
    path: str
    public_url: str


@dataclass(frozen=True)
class StorageEntry:
    """One listing entry; folders have no size."""

    name: str
    is_folder: bool = False
    size: int | None = None
    content_type: str | None = None
    updated_at: str | None = None


@dataclass(frozen=True)
class StoreStats:
    total_collections: int
    total_objects: int
    animated_count: int
    per_collection: dict[str, int]


class ObjectStore(Protocol):
    """Backend contract used by StorageGateway. Every method raises StoreError on failure."""

    async def put(
        self, bucket: str, path: str, data: bytes, content_type: str, overwrite: bool = True
    ) -> None: ...

    async def remove(self, bucket: str, paths: list[str]) -> None: ...

    async def list(self, bucket: str, prefix: str = "") -> list[StorageEntry]: ...

    def public_url(self, bucket: str, path: str) -> str: ...


def _validate_path(path: str) -> str:
    path = (path or "").strip().lstrip("/")
    if not path:
        raise InputError("Storage path must not be empty")
    return path


class StorageGateway:
    """
    Size-enforcing facade over an ObjectStore.

    Args:
        store: Backend implementation
        max_object_size: Largest payload accepted, in bytes
    """

    def __init__(self, store: ObjectStore, max_object_size: int):
        self.store = store
        self.max_object_size = max_object_size

    def check_size(self, size: int) -> None:
        if size > self.max_object_size:
            raise SizeExceededError(size, self.max_object_size)

    async def upload(
        self,
        bucket: str,
        path: str,
        data: bytes,
        mime_type: str,
        overwrite: bool = True,
    ) -> StoredObject:
        """
        Store a payload and return its path and public URL.

        Raises:
            SizeExceededError: payload larger than max_object_size (nothing is sent)
            StoreError: backend rejected the write
        """
        path = _validate_path(path)
        self.check_size(len(data))

        start = time.perf_counter()
        await self.store.put(bucket, path, data, mime_type, overwrite=overwrite)
        public_url = self.store.public_url(bucket, path)

        logger.debug(
            "Stored object",
            extra={
                "bucket": bucket,
                "storage_path": path,
                "mime_type": mime_type,
                "byte_length": len(data),
                "duration_ms": round((time.perf_counter() - start) * 1000, 1),
            },
        )
        return StoredObject(path=path, public_url=public_url)

    async def update(self, bucket: str, path: str, data: bytes, mime_type: str) -> StoredObject:
        """Replace the object at path; same as upload with overwrite forced on."""
        return await self.upload(bucket, path, data, mime_type, overwrite=True)

    async def remove(self, bucket: str, path: str) -> None:
        path = _validate_path(path)
        await self.store.remove(bucket, [path])
        logger.info("Removed object", extra={"bucket": bucket, "storage_path": path})

    async def list(self, bucket: str, path: str = "") -> list[StorageEntry]:
        prefix = (path or "").strip().strip("/")
        return await self.store.list(bucket, prefix)

    def public_url(self, bucket: str, path: str) -> str:
        return self.store.public_url(bucket, _validate_path(path))

    async def collection_stats(self, bucket: str) -> StoreStats:
        """
        Count stored collections and assets.

        Each top-level folder is one collection. Animation is judged by the
        stored extension only, so animated WebP files count as static.
        """
        per_collection = {}
        animated = 0
        for folder in await self.store.list(bucket, ""):
            if not folder.is_folder:
                continue
            files = [e for e in await self.store.list(bucket, folder.name) if not e.is_folder]
            per_collection[folder.name] = len(files)
            animated += sum(
                1 for f in files if is_animated_extension(f.name.rsplit(".", 1)[-1])
            )

        stats = StoreStats(
            total_collections=len(per_collection),
            total_objects=sum(per_collection.values()),
            animated_count=animated,
            per_collection=per_collection,
        )
        logger.info(
            "Computed bucket statistics",
            extra={
                "bucket": bucket,
                "collections_found": stats.total_collections,
                "uploaded": stats.total_objects,
                "animated_count": stats.animated_count,
            },
        )
        return stats


__all__ = [
    "ObjectStore",
    "StorageEntry",
    "StorageGateway",
    "StoreStats",
    "StoredObject",
]
