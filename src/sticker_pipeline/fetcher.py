"""
Asset fetcher: descriptor -> raw bytes.

Plain http(s) references are downloaded directly. Anything else is treated
as a provider file reference and resolved to a URL through a FileLocator
first. The whole fetch (lookup plus download) runs under one timeout and is
attempted exactly once; every failure surfaces as FetchError.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Protocol

import aiohttp

from core.download.http_client import DEFAULT_TIMEOUT_SECONDS, download_url
from core.errors.exceptions import ErrorCategory, FetchError
from sticker_pipeline.schemas.models import AssetDescriptor, FetchedAsset

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LocatedFile:
    url: str
    path_hint: str | None = None


class FileLocator(Protocol):
    async def locate(self, source_ref: str) -> LocatedFile:
        """Resolve a provider file reference; raise FetchError on failure."""
        ...


def is_direct_url(source_ref: str) -> bool:
    return source_ref.startswith(("http://", "https://"))


class AssetFetcher:
    """Retrieve asset payloads with a bounded timeout and no internal retries."""

    def __init__(
        self,
        session: aiohttp.ClientSession,
        locator: FileLocator | None = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ):
        self.session = session
        self.locator = locator
        self.timeout = timeout

    async def _locate(self, source_ref: str) -> LocatedFile:
        if is_direct_url(source_ref):
            return LocatedFile(url=source_ref, path_hint=source_ref)
        if self.locator is None:
            raise FetchError(
                f"No file locator configured for reference {source_ref!r}",
                category=ErrorCategory.PERMANENT,
            )
        return await self.locator.locate(source_ref)

    async def _fetch_bytes(self, source_ref: str, timeout: float) -> tuple[bytes, str | None]:
        located = await self._locate(source_ref)
        response, error = await download_url(located.url, self.session, timeout=timeout)
        if error:
            raise FetchError(
                error.error_message,
                status_code=error.status_code,
                category=error.error_category,
            )
        return response.content, located.path_hint

    async def fetch(self, descriptor: AssetDescriptor, timeout: float | None = None) -> FetchedAsset:
        """
        Fetch the payload for one descriptor.

        Args:
            descriptor: Asset to fetch
            timeout: Overall budget in seconds (defaults to the fetcher's timeout)

        Raises:
            FetchError: on lookup failure, non-200 status, connection error or timeout
        """
        if timeout is None:
            timeout = self.timeout
        start = time.perf_counter()
        try:
            async with asyncio.timeout(timeout):
                data, path_hint = await self._fetch_bytes(descriptor.source_ref, timeout)
        except TimeoutError as e:
            logger.warning(
                "Asset fetch timeout",
                extra={
                    "sequence_index": descriptor.sequence_index,
                    "duration_ms": timeout * 1000,
                },
            )
            raise FetchError(
                f"Fetch timeout after {timeout}s",
                category=ErrorCategory.TRANSIENT,
                cause=e,
            ) from e

        logger.debug(
            "Fetched asset",
            extra={
                "sequence_index": descriptor.sequence_index,
                "byte_length": len(data),
                "duration_ms": round((time.perf_counter() - start) * 1000, 1),
            },
        )
        return FetchedAsset(descriptor=descriptor, data=data, path_hint=path_hint)
