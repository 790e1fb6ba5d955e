"""
Telegram-backed Source Provider pieces.

TelegramPackResolver turns a sticker set name into ordered AssetDescriptors
via getStickerSet. TelegramFileLocator turns a sticker file_id into a
download URL via getFile, for use by the AssetFetcher.
"""

import logging

from core.errors.exceptions import (
    FetchError,
    InputError,
    NoAssetsError,
    NotFoundError,
)
from sticker_pipeline.fetcher import LocatedFile
from sticker_pipeline.schemas.models import AssetDescriptor, is_valid_collection_id
from sticker_pipeline.telegram.api_client import TelegramApiError, TelegramBotClient

logger = logging.getLogger(__name__)

# Bot API descriptions meaning "no such sticker set"
NOT_FOUND_MARKERS = ("STICKERSET_INVALID", "STICKERSET_NOT_FOUND", "NOT FOUND")


def _is_not_found(error: TelegramApiError) -> bool:
    if error.status_code == 404:
        return True
    description = error.description.upper()
    return any(marker in description for marker in NOT_FOUND_MARKERS)


class TelegramPackResolver:
    """Resolve a collection identifier into its ordered asset list."""

    def __init__(self, client: TelegramBotClient):
        self.client = client

    async def resolve_collection(self, collection_id: str) -> list[AssetDescriptor]:
        """
        Fetch the sticker set and number its stickers from 1 in upstream order.

        Raises:
            InputError: malformed identifier
            NotFoundError: upstream has no such sticker set
            UpstreamError: any other upstream failure
            NoAssetsError: the set exists but holds no stickers
        """
        if not is_valid_collection_id(collection_id):
            raise InputError(f"Invalid sticker set name: {collection_id!r}")

        try:
            sticker_set = await self.client.get_sticker_set(collection_id)
        except TelegramApiError as e:
            if _is_not_found(e):
                raise NotFoundError(
                    f"Sticker set {collection_id!r} not found", cause=e
                ) from e
            raise

        stickers = sticker_set.get("stickers") or []
        descriptors = [
            AssetDescriptor(
                source_ref=sticker["file_id"],
                sequence_index=idx,
                collection_id=collection_id,
            )
            for idx, sticker in enumerate(stickers, start=1)
            if sticker.get("file_id")
        ]

        if not descriptors:
            raise NoAssetsError(f"No stickers found in {collection_id!r}")

        logger.info(
            "Resolved sticker set",
            extra={"total_discovered": len(descriptors)},
        )
        return descriptors


class TelegramFileLocator:
    """Resolve a Telegram file_id into a download URL and its upstream file path."""

    def __init__(self, client: TelegramBotClient):
        self.client = client

    async def locate(self, source_ref: str) -> LocatedFile:
        try:
            info = await self.client.get_file(source_ref)
        except TelegramApiError as e:
            raise FetchError(
                f"getFile failed: {e.message}",
                status_code=e.status_code,
                category=e.category,
                cause=e,
            ) from e

        file_path = info.get("file_path")
        if not file_path:
            raise FetchError("getFile returned no file_path; file may exceed the Bot API download limit")

        return LocatedFile(url=self.client.file_url(file_path), path_hint=file_path)
