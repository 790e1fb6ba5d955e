"""
Ingestion Orchestrator.

Turns one collection identifier into an IngestionReport:

    resolve -> one task per descriptor (bounded by a semaphore)
            -> fetch -> sniff -> size check -> upload -> outcome

Resolution failures abort the run before any task starts. After that every
asset task runs to completion on its own: fetch, size and store errors
become that asset's outcome and never cancel or block sibling tasks.
Outcomes are written into a slot per sequence_index, so the report order
does not depend on completion order.
"""

import asyncio
import logging
import time
from typing import Protocol

from config.config import IngestConfig
from core.errors.exceptions import (
    FetchError,
    IngestionFault,
    NoAssetsError,
    SizeExceededError,
    StoreError,
)
from core.logging.context import set_log_context
from core.logging.setup import generate_run_id
from core.media.sniff import sniff
from sticker_pipeline.schemas.models import (
    AssetDescriptor,
    ClassifiedAsset,
    FetchedAsset,
    IngestionReport,
    UploadFailed,
    UploadOutcome,
    UploadSkipped,
    UploadSuccess,
)
from sticker_pipeline.storage.gateway import StorageGateway

logger = logging.getLogger(__name__)

RUN_DEADLINE_REASON = "run deadline exceeded before the asset finished"


class PackResolver(Protocol):
    async def resolve_collection(self, collection_id: str) -> list[AssetDescriptor]: ...


class Fetcher(Protocol):
    async def fetch(self, descriptor: AssetDescriptor, timeout: float | None = None) -> FetchedAsset: ...


def classify(fetched: FetchedAsset) -> ClassifiedAsset:
    """Attach the sniffed format to a fetched payload."""
    result = sniff(fetched.data, fetched.path_hint)
    return ClassifiedAsset(
        fetched=fetched,
        mime_type=result.mime_type,
        is_animated=result.is_animated,
        extension=result.extension,
    )


class IngestionOrchestrator:
    """
    Concurrent ingestion of one collection at a time.

    Args:
        resolver: Source Provider resolving a collection into descriptors
        fetcher: Asset Fetcher
        gateway: Object Store Gateway
        config: Limits, bucket and timeouts for every run
    """

    def __init__(
        self,
        resolver: PackResolver,
        fetcher: Fetcher,
        gateway: StorageGateway,
        config: IngestConfig,
    ):
        self.resolver = resolver
        self.fetcher = fetcher
        self.gateway = gateway
        self.config = config
        # Strong references so tasks outliving a cancelled or timed-out run
        # are not garbage collected mid-flight
        self._in_flight: set[asyncio.Task] = set()

    @property
    def in_flight_count(self) -> int:
        return len(self._in_flight)

    async def ingest(self, collection_id: str) -> IngestionReport:
        """
        Ingest every asset of a collection.

        Raises:
            InputError, NotFoundError, UpstreamError, NoAssetsError: resolution failed
            IngestionFault: an asset task crashed with an unexpected exception
        """
        run_id = generate_run_id()
        set_log_context(run_id=run_id, stage="ingest", collection_id=collection_id)
        start = time.perf_counter()

        descriptors = await self.resolver.resolve_collection(collection_id)
        if not descriptors:
            raise NoAssetsError(f"No assets found in {collection_id!r}")
        indices = [d.sequence_index for d in descriptors]
        if len(set(indices)) != len(indices):
            raise IngestionFault(
                f"Resolver returned duplicate sequence indices for {collection_id!r}",
                context={"indices": indices},
            )

        logger.info(
            "Starting ingestion",
            extra={
                "total_discovered": len(descriptors),
                "concurrency_limit": self.config.concurrency_limit,
                "bucket": self.config.bucket,
            },
        )

        outcomes = await self._run_tasks(descriptors)
        report = IngestionReport.from_outcomes(collection_id, outcomes)

        logger.info(
            "Ingestion complete",
            extra={
                "total_discovered": report.total_discovered,
                "uploaded": report.uploaded,
                "skipped": report.skipped,
                "failed": report.failed,
                "animated_count": report.animated_count,
                "duration_ms": round((time.perf_counter() - start) * 1000, 1),
            },
        )
        return report

    async def _run_tasks(self, descriptors: list[AssetDescriptor]) -> list[UploadOutcome]:
        semaphore = asyncio.Semaphore(self.config.concurrency_limit)
        slots: dict[int, UploadOutcome | None] = {d.sequence_index: None for d in descriptors}
        tasks: dict[asyncio.Task, AssetDescriptor] = {}

        for descriptor in descriptors:
            task = asyncio.create_task(self._process_with_semaphore(semaphore, descriptor))
            self._in_flight.add(task)
            task.add_done_callback(self._in_flight.discard)
            tasks[task] = descriptor

        # asyncio.wait never cancels the tasks, neither on timeout nor when
        # the caller cancels this coroutine
        done, pending = await asyncio.wait(tasks, timeout=self.config.run_timeout_seconds)

        for task in done:
            descriptor = tasks[task]
            if task.cancelled():
                slots[descriptor.sequence_index] = UploadFailed(
                    sequence_index=descriptor.sequence_index,
                    reason="asset task was cancelled",
                )
                continue
            error = task.exception()
            if error is not None:
                logger.error(
                    "Asset task crashed",
                    exc_info=error,
                    extra={"sequence_index": descriptor.sequence_index},
                )
                raise IngestionFault(
                    f"Unexpected error processing asset {descriptor.sequence_index}",
                    cause=error,
                ) from error
            slots[descriptor.sequence_index] = task.result()

        for task in pending:
            descriptor = tasks[task]
            logger.warning(
                "Asset still in flight at run deadline",
                extra={
                    "sequence_index": descriptor.sequence_index,
                    "duration_ms": (self.config.run_timeout_seconds or 0) * 1000,
                },
            )
            slots[descriptor.sequence_index] = UploadFailed(
                sequence_index=descriptor.sequence_index,
                reason=RUN_DEADLINE_REASON,
                error_category="transient",
            )

        return list(slots.values())

    async def _process_with_semaphore(
        self, semaphore: asyncio.Semaphore, descriptor: AssetDescriptor
    ) -> UploadOutcome:
        async with semaphore:
            return await self._process_asset(descriptor)

    async def _process_asset(self, descriptor: AssetDescriptor) -> UploadOutcome:
        """Fetching -> Classifying -> Uploading -> outcome for one descriptor."""
        set_log_context(collection_id=descriptor.collection_id)
        index = descriptor.sequence_index

        try:
            fetched = await self.fetcher.fetch(descriptor, timeout=self.config.fetch_timeout_seconds)
        except FetchError as e:
            logger.warning(
                "Asset fetch failed",
                extra={
                    "sequence_index": index,
                    "error_message": e.message,
                    "error_category": e.category.value,
                    "http_status": e.status_code,
                },
            )
            return UploadFailed(
                sequence_index=index,
                reason=f"transport error: {e.message}",
                error_category=e.category.value,
            )

        classified = classify(fetched)

        if classified.byte_length > self.config.max_object_size:
            logger.info(
                "Skipping oversize asset",
                extra={
                    "sequence_index": index,
                    "byte_length": classified.byte_length,
                    "max_object_size": self.config.max_object_size,
                },
            )
            return UploadSkipped(
                sequence_index=index,
                reason=(
                    f"oversize: {classified.byte_length} bytes exceeds "
                    f"{self.config.max_object_size} bytes"
                ),
            )

        try:
            stored = await self.gateway.upload(
                self.config.bucket,
                classified.storage_path,
                fetched.data,
                classified.mime_type,
                overwrite=True,
            )
        except SizeExceededError as e:
            return UploadSkipped(sequence_index=index, reason=f"oversize: {e.message}")
        except StoreError as e:
            logger.warning(
                "Asset upload failed",
                extra={
                    "sequence_index": index,
                    "storage_path": classified.storage_path,
                    "error_message": e.message,
                    "error_category": e.category.value,
                },
            )
            return UploadFailed(
                sequence_index=index,
                reason=f"store error: {e.message}",
                error_category=e.category.value,
            )

        logger.info(
            "Uploaded asset",
            extra={
                "sequence_index": index,
                "storage_path": stored.path,
                "mime_type": classified.mime_type,
                "is_animated": classified.is_animated,
                "byte_length": classified.byte_length,
            },
        )
        return UploadSuccess(
            sequence_index=index,
            storage_path=stored.path,
            byte_length=classified.byte_length,
            mime_type=classified.mime_type,
            is_animated=classified.is_animated,
            public_url=stored.public_url,
        )


__all__ = ["IngestionOrchestrator", "PackResolver", "Fetcher", "classify"]
