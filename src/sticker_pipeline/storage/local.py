"""
Local filesystem object store.

Mirrors the bucket/path layout of the remote store under a base directory:

    stickers_store/
        telegram-stickers/
            cattos/
                sticker_1.webp
                sticker_2.tgs

Writes are atomic (temp file + rename) and every path is confined to the
base directory.
"""

import asyncio
import logging
import os
from datetime import UTC, datetime
from pathlib import Path

from core.errors.exceptions import StoreError
from sticker_pipeline.storage.gateway import StorageEntry

logger = logging.getLogger(__name__)

TEMP_SUFFIX = ".tmp"


class LocalObjectStore:
    """Filesystem-backed ObjectStore for development and offline runs."""

    def __init__(self, base_path: Path | str):
        self.base_path = Path(base_path).resolve()
        logger.info(
            "Initialized LocalObjectStore",
            extra={"storage_path": str(self.base_path)},
        )

    async def __aenter__(self) -> "LocalObjectStore":
        await asyncio.to_thread(self.base_path.mkdir, parents=True, exist_ok=True)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        return None

    def _resolve(self, bucket: str, path: str = "") -> Path:
        """Map bucket/path to a filesystem path, rejecting anything that escapes the base."""
        relative = f"{bucket}/{path}" if path else bucket
        if os.path.isabs(path) or os.path.isabs(relative) or ".." in Path(relative).parts:
            raise StoreError(f"Invalid storage path: {relative!r}", status_code=400)

        full = (self.base_path / relative).resolve()
        try:
            full.relative_to(self.base_path)
        except ValueError:
            raise StoreError(f"Storage path escapes base directory: {relative!r}", status_code=400)
        return full

    def public_url(self, bucket: str, path: str) -> str:
        return self._resolve(bucket, path).as_uri()

    @staticmethod
    def _write_atomic(dest: Path, data: bytes, overwrite: bool) -> None:
        if not overwrite and dest.exists():
            raise FileExistsError(f"File already exists: {dest}")
        dest.parent.mkdir(parents=True, exist_ok=True)
        temp_path = dest.with_suffix(dest.suffix + TEMP_SUFFIX)
        try:
            temp_path.write_bytes(data)
            temp_path.replace(dest)
        finally:
            if temp_path.exists():
                temp_path.unlink()

    async def put(
        self,
        bucket: str,
        path: str,
        data: bytes,
        content_type: str,
        overwrite: bool = True,
    ) -> None:
        dest = self._resolve(bucket, path)
        try:
            await asyncio.to_thread(self._write_atomic, dest, data, overwrite)
        except FileExistsError as e:
            raise StoreError(f"Object already exists: {path}", status_code=409, cause=e) from e
        except OSError as e:
            raise StoreError(f"Upload failed: {e}", cause=e) from e

        logger.debug(
            "Wrote object to local store",
            extra={"bucket": bucket, "storage_path": path, "byte_length": len(data)},
        )

    async def remove(self, bucket: str, paths: list[str]) -> None:
        targets = [self._resolve(bucket, p) for p in paths]

        def _unlink_all() -> None:
            for target in targets:
                target.unlink(missing_ok=True)

        try:
            await asyncio.to_thread(_unlink_all)
        except OSError as e:
            raise StoreError(f"Delete failed: {e}", cause=e) from e

    @staticmethod
    def _scan(directory: Path) -> list[StorageEntry]:
        if not directory.is_dir():
            return []
        entries = []
        for child in sorted(directory.iterdir()):
            if child.name.endswith(TEMP_SUFFIX):
                continue
            if child.is_dir():
                entries.append(StorageEntry(name=child.name, is_folder=True))
                continue
            stat = child.stat()
            entries.append(
                StorageEntry(
                    name=child.name,
                    size=stat.st_size,
                    updated_at=datetime.fromtimestamp(stat.st_mtime, UTC).isoformat(),
                )
            )
        return entries

    async def list(self, bucket: str, prefix: str = "") -> list[StorageEntry]:
        directory = self._resolve(bucket, prefix)
        try:
            return await asyncio.to_thread(self._scan, directory)
        except OSError as e:
            raise StoreError(f"List failed: {e}", cause=e) from e


__all__ = ["LocalObjectStore"]
