"""
Wiring of the pipeline components from an IngestConfig.

StickerService owns the shared HTTP session and store backend and exposes
the operations offered to callers (HTTP entry point and CLI):
ingest, discover, storage operations and bucket statistics.
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator

import aiohttp

from config.config import IngestConfig
from core.download.http_client import create_session
from core.errors.exceptions import InputError
from sticker_pipeline.catalog import CatalogScraper
from sticker_pipeline.fetcher import AssetFetcher
from sticker_pipeline.orchestrator import IngestionOrchestrator
from sticker_pipeline.schemas.models import IngestionReport
from sticker_pipeline.storage.gateway import (
    ObjectStore,
    StorageEntry,
    StorageGateway,
    StoredObject,
    StoreStats,
)
from sticker_pipeline.storage.local import LocalObjectStore
from sticker_pipeline.storage.supabase import SupabaseStorageClient
from sticker_pipeline.telegram.api_client import TelegramBotClient
from sticker_pipeline.telegram.resolver import TelegramFileLocator, TelegramPackResolver

logger = logging.getLogger(__name__)


def create_store(config: IngestConfig, session: aiohttp.ClientSession | None = None) -> ObjectStore:
    if config.storage_backend == "local":
        return LocalObjectStore(Path(config.local_storage_path))
    return SupabaseStorageClient(
        url=config.storage_url,
        service_key=config.storage_key,
        session=session,
    )


class StickerService:
    """Caller-facing operations over one set of wired components."""

    def __init__(
        self,
        config: IngestConfig,
        orchestrator: IngestionOrchestrator | None,
        catalog: CatalogScraper,
        gateway: StorageGateway,
    ):
        self.config = config
        self.orchestrator = orchestrator
        self.catalog = catalog
        self.gateway = gateway

    async def ingest(self, collection_id: str) -> IngestionReport:
        if self.orchestrator is None:
            raise InputError(
                "Ingestion requires a Telegram bot token; set TELEGRAM_API_KEY"
            )
        return await self.orchestrator.ingest(collection_id)

    async def discover(self, page: int = 1, source_variant: int = 0) -> set[str]:
        return await self.catalog.list_collections(page, source_variant)

    async def upload(self, bucket: str, path: str, data: bytes, mime_type: str) -> StoredObject:
        return await self.gateway.upload(bucket, path, data, mime_type, overwrite=True)

    async def update(self, bucket: str, path: str, data: bytes, mime_type: str) -> StoredObject:
        return await self.gateway.update(bucket, path, data, mime_type)

    async def remove(self, bucket: str, path: str) -> None:
        await self.gateway.remove(bucket, path)

    async def list_objects(self, bucket: str, path: str = "") -> list[StorageEntry]:
        return await self.gateway.list(bucket, path)

    async def stats(self, bucket: str | None = None) -> StoreStats:
        return await self.gateway.collection_stats(bucket or self.config.bucket)


@asynccontextmanager
async def build_service(config: IngestConfig) -> AsyncIterator[StickerService]:
    """
    Create a StickerService and close its network resources on exit.

    Ingestion is only wired when a Telegram token is configured; discovery
    and storage operations work without one.
    """
    session = create_session(
        max_connections=config.concurrency_limit * 2,
        max_connections_per_host=config.concurrency_limit,
    )
    telegram = None
    try:
        store = create_store(config, session=session)
        gateway = StorageGateway(store, config.max_object_size)
        catalog = CatalogScraper(
            session,
            sources=config.catalog_sources,
            exclude=config.catalog_exclude,
            timeout=config.catalog_timeout_seconds,
        )

        orchestrator = None
        if config.telegram_token:
            telegram = TelegramBotClient(
                token=config.telegram_token,
                base_url=config.telegram_api_url,
                timeout_seconds=config.api_timeout_seconds,
                max_concurrent=config.concurrency_limit,
                session=session,
            )
            fetcher = AssetFetcher(
                session,
                locator=TelegramFileLocator(telegram),
                timeout=config.fetch_timeout_seconds,
            )
            orchestrator = IngestionOrchestrator(
                resolver=TelegramPackResolver(telegram),
                fetcher=fetcher,
                gateway=gateway,
                config=config,
            )
        else:
            logger.warning("No Telegram token configured; ingestion disabled")

        yield StickerService(config, orchestrator, catalog, gateway)
    finally:
        if telegram is not None:
            await telegram.close()
        await session.close()


__all__ = ["StickerService", "build_service", "create_store"]
