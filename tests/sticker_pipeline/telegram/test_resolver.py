"""Tests for TelegramPackResolver and TelegramFileLocator."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from core.errors.exceptions import (
    ErrorCategory,
    FetchError,
    InputError,
    NoAssetsError,
    NotFoundError,
    UpstreamError,
)
from sticker_pipeline.telegram.api_client import TelegramApiError
from sticker_pipeline.telegram.resolver import TelegramFileLocator, TelegramPackResolver


def _client(**methods) -> MagicMock:
    client = MagicMock()
    for name, mock in methods.items():
        setattr(client, name, mock)
    return client


class TestResolveCollection:
    @pytest.mark.asyncio
    async def test_numbers_stickers_from_one_in_upstream_order(self):
        client = _client(
            get_sticker_set=AsyncMock(
                return_value={
                    "name": "cattos",
                    "stickers": [{"file_id": "a"}, {"file_id": "b"}, {"file_id": "c"}],
                }
            )
        )

        descriptors = await TelegramPackResolver(client).resolve_collection("cattos")

        assert [(d.sequence_index, d.source_ref) for d in descriptors] == [
            (1, "a"),
            (2, "b"),
            (3, "c"),
        ]
        assert all(d.collection_id == "cattos" for d in descriptors)
        client.get_sticker_set.assert_awaited_once_with("cattos")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("bad", ["", "has space", "../etc", "x" * 65])
    async def test_invalid_identifier(self, bad):
        client = _client(get_sticker_set=AsyncMock())

        with pytest.raises(InputError):
            await TelegramPackResolver(client).resolve_collection(bad)
        client.get_sticker_set.assert_not_called()

    @pytest.mark.asyncio
    async def test_stickerset_invalid_is_not_found(self):
        error = TelegramApiError(
            "getStickerSet failed", status_code=400, description="Bad Request: STICKERSET_INVALID"
        )
        client = _client(get_sticker_set=AsyncMock(side_effect=error))

        with pytest.raises(NotFoundError) as exc_info:
            await TelegramPackResolver(client).resolve_collection("ghosts")
        assert exc_info.value.http_status == 404
        assert exc_info.value.cause is error

    @pytest.mark.asyncio
    async def test_404_is_not_found(self):
        error = TelegramApiError("getStickerSet failed", status_code=404)
        client = _client(get_sticker_set=AsyncMock(side_effect=error))

        with pytest.raises(NotFoundError):
            await TelegramPackResolver(client).resolve_collection("ghosts")

    @pytest.mark.asyncio
    async def test_other_failures_are_upstream_errors(self):
        error = TelegramApiError("getStickerSet failed", status_code=401, description="Unauthorized")
        client = _client(get_sticker_set=AsyncMock(side_effect=error))

        with pytest.raises(UpstreamError) as exc_info:
            await TelegramPackResolver(client).resolve_collection("cattos")
        assert not isinstance(exc_info.value, NotFoundError)
        assert exc_info.value.http_status == 500

    @pytest.mark.asyncio
    async def test_empty_set_is_no_assets(self):
        client = _client(get_sticker_set=AsyncMock(return_value={"name": "empty", "stickers": []}))

        with pytest.raises(NoAssetsError):
            await TelegramPackResolver(client).resolve_collection("empty")


class TestFileLocator:
    @pytest.mark.asyncio
    async def test_locates_download_url(self):
        client = _client(
            get_file=AsyncMock(return_value={"file_id": "a", "file_path": "stickers/file_7.tgs"}),
            file_url=MagicMock(return_value="https://api.telegram.org/file/botT/stickers/file_7.tgs"),
        )

        located = await TelegramFileLocator(client).locate("a")

        assert located.url == "https://api.telegram.org/file/botT/stickers/file_7.tgs"
        assert located.path_hint == "stickers/file_7.tgs"
        client.file_url.assert_called_once_with("stickers/file_7.tgs")

    @pytest.mark.asyncio
    async def test_api_error_becomes_fetch_error(self):
        error = TelegramApiError("getFile failed", status_code=400, description="Bad Request: file is too big")
        client = _client(get_file=AsyncMock(side_effect=error))

        with pytest.raises(FetchError) as exc_info:
            await TelegramFileLocator(client).locate("a")
        assert exc_info.value.status_code == 400
        assert exc_info.value.category == ErrorCategory.PERMANENT

    @pytest.mark.asyncio
    async def test_missing_file_path(self):
        client = _client(get_file=AsyncMock(return_value={"file_id": "a"}))

        with pytest.raises(FetchError, match="file_path"):
            await TelegramFileLocator(client).locate("a")
