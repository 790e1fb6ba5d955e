"""Supabase Storage backend over the storage REST API."""

import logging
from typing import Any
from urllib.parse import quote

import aiohttp

from core.errors.exceptions import StoreError
from sticker_pipeline.storage.gateway import StorageEntry

logger = logging.getLogger(__name__)

LIST_PAGE_SIZE = 1000


def _entry_from_item(item: dict[str, Any]) -> StorageEntry:
    metadata = item.get("metadata") or {}
    return StorageEntry(
        name=item.get("name", ""),
        # folders come back without an object id
        is_folder=item.get("id") is None,
        size=metadata.get("size"),
        content_type=metadata.get("mimetype"),
        updated_at=item.get("updated_at"),
    )


class SupabaseStorageClient:
    """
    Async Supabase Storage client.

    Usage:
        async with SupabaseStorageClient(url, service_key) as store:
            await store.put("telegram-stickers", "cattos/sticker_1.webp", data, "image/webp")
    """

    def __init__(
        self,
        url: str,
        service_key: str,
        timeout_seconds: float = 60,
        session: aiohttp.ClientSession | None = None,
    ):
        if not url or not service_key:
            raise ValueError(
                "SupabaseStorageClient requires 'url' and 'service_key'. "
                "Set SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY environment variables."
            )
        self.url = url.rstrip("/")
        if not self.url.startswith(("http://", "https://")):
            raise ValueError(
                f"SupabaseStorageClient url must start with http:// or https://, got: {self.url!r}"
            )
        self._key = service_key
        self.timeout_seconds = timeout_seconds
        self._session = session
        self._owns_session = session is None

    async def __aenter__(self) -> "SupabaseStorageClient":
        await self._ensure_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def _ensure_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()
        self._session = None

    def _headers(self, **extra: str) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._key}",
            "apikey": self._key,
            **extra,
        }

    def _object_url(self, bucket: str, path: str = "") -> str:
        base = f"{self.url}/storage/v1/object/{quote(bucket)}"
        return f"{base}/{quote(path)}" if path else base

    def public_url(self, bucket: str, path: str) -> str:
        return f"{self.url}/storage/v1/object/public/{quote(bucket)}/{quote(path)}"

    async def _request(self, operation: str, method: str, url: str, **kwargs) -> Any:
        session = await self._ensure_session()
        try:
            async with session.request(
                method,
                url,
                timeout=aiohttp.ClientTimeout(total=self.timeout_seconds),
                **kwargs,
            ) as response:
                if response.status >= 300:
                    text = await response.text()
                    logger.warning(
                        "Storage request failed",
                        extra={
                            "http_method": method,
                            "http_url": url,
                            "http_status": response.status,
                            "error_message": text[:500],
                        },
                    )
                    raise StoreError(
                        f"{operation} failed: HTTP {response.status}: {text[:200]}",
                        status_code=response.status,
                    )
                try:
                    return await response.json(content_type=None)
                except ValueError:
                    return None
        except TimeoutError as e:
            raise StoreError(f"{operation} timed out after {self.timeout_seconds}s", cause=e) from e
        except aiohttp.ClientError as e:
            raise StoreError(f"{operation} connection error: {e}", cause=e) from e

    async def put(
        self,
        bucket: str,
        path: str,
        data: bytes,
        content_type: str,
        overwrite: bool = True,
    ) -> None:
        await self._request(
            "Upload",
            "POST",
            self._object_url(bucket, path),
            data=data,
            headers=self._headers(
                **{"Content-Type": content_type, "x-upsert": "true" if overwrite else "false"}
            ),
        )

    async def remove(self, bucket: str, paths: list[str]) -> None:
        await self._request(
            "Delete",
            "DELETE",
            self._object_url(bucket),
            json={"prefixes": paths},
            headers=self._headers(),
        )

    async def list(self, bucket: str, prefix: str = "") -> list[StorageEntry]:
        url = f"{self.url}/storage/v1/object/list/{quote(bucket)}"
        entries = []
        offset = 0
        while True:
            page = await self._request(
                "List",
                "POST",
                url,
                json={
                    "prefix": prefix,
                    "limit": LIST_PAGE_SIZE,
                    "offset": offset,
                    "sortBy": {"column": "name", "order": "asc"},
                },
                headers=self._headers(),
            )
            page = page or []
            entries.extend(_entry_from_item(item) for item in page)
            if len(page) < LIST_PAGE_SIZE:
                break
            offset += LIST_PAGE_SIZE
        return entries


__all__ = ["SupabaseStorageClient"]
