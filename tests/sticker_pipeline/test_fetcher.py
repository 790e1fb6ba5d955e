"""
Tests for sticker_pipeline.fetcher.

Tests cover:
- Direct URL downloads
- File reference resolution through a locator
- Non-200 and connection failures surfacing as FetchError
- Overall timeout covering lookup and download
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import aiohttp
import pytest

from core.errors.exceptions import ErrorCategory, FetchError
from sticker_pipeline.fetcher import AssetFetcher, LocatedFile, is_direct_url
from sticker_pipeline.schemas.models import AssetDescriptor
from tests_support import make_response


def _descriptor(ref: str, index: int = 1) -> AssetDescriptor:
    return AssetDescriptor(source_ref=ref, sequence_index=index, collection_id="cattos")


def _session(response=None, side_effect=None) -> AsyncMock:
    session = AsyncMock()
    session.get = MagicMock(return_value=response, side_effect=side_effect)
    return session


class TestIsDirectUrl:
    def test_http_and_https(self):
        assert is_direct_url("https://example.com/a.webp")
        assert is_direct_url("http://example.com/a.webp")

    def test_file_id(self):
        assert not is_direct_url("CAACAgIAAxkBAAEB")


class TestAssetFetcher:
    @pytest.mark.asyncio
    async def test_direct_url(self, media):
        session = _session(make_response(200, media.static_webp()))
        fetcher = AssetFetcher(session)

        fetched = await fetcher.fetch(_descriptor("https://cdn.example/s/1.webp"))

        assert fetched.data == media.static_webp()
        assert fetched.byte_length == len(media.static_webp())
        assert fetched.path_hint == "https://cdn.example/s/1.webp"
        assert fetched.descriptor.sequence_index == 1

    @pytest.mark.asyncio
    async def test_file_reference_goes_through_locator(self, media):
        session = _session(make_response(200, media.tgs))
        locator = AsyncMock()
        locator.locate = AsyncMock(
            return_value=LocatedFile(
                url="https://api.telegram.org/file/botT/stickers/file_3.tgs",
                path_hint="stickers/file_3.tgs",
            )
        )
        fetcher = AssetFetcher(session, locator=locator)

        fetched = await fetcher.fetch(_descriptor("CAACAgIAAxkB"))

        locator.locate.assert_awaited_once_with("CAACAgIAAxkB")
        assert session.get.call_args[0][0] == "https://api.telegram.org/file/botT/stickers/file_3.tgs"
        assert fetched.path_hint == "stickers/file_3.tgs"

    @pytest.mark.asyncio
    async def test_file_reference_without_locator(self):
        fetcher = AssetFetcher(_session())

        with pytest.raises(FetchError) as exc_info:
            await fetcher.fetch(_descriptor("CAACAgIAAxkB"))
        assert exc_info.value.category == ErrorCategory.PERMANENT

    @pytest.mark.asyncio
    async def test_locator_failure_propagates(self):
        locator = AsyncMock()
        locator.locate = AsyncMock(side_effect=FetchError("getFile failed: file is too big"))
        fetcher = AssetFetcher(_session(), locator=locator)

        with pytest.raises(FetchError, match="getFile failed"):
            await fetcher.fetch(_descriptor("CAACAgIAAxkB"))

    @pytest.mark.asyncio
    async def test_non_200_status(self):
        fetcher = AssetFetcher(_session(make_response(404)))

        with pytest.raises(FetchError) as exc_info:
            await fetcher.fetch(_descriptor("https://cdn.example/missing.webp"))
        assert exc_info.value.status_code == 404
        assert exc_info.value.category == ErrorCategory.PERMANENT

    @pytest.mark.asyncio
    async def test_connection_error(self):
        fetcher = AssetFetcher(_session(side_effect=aiohttp.ClientConnectionError("reset")))

        with pytest.raises(FetchError) as exc_info:
            await fetcher.fetch(_descriptor("https://cdn.example/1.webp"))
        assert exc_info.value.category == ErrorCategory.TRANSIENT

    @pytest.mark.asyncio
    async def test_timeout_covers_slow_lookup(self):
        async def slow_locate(ref):
            await asyncio.sleep(5)

        locator = AsyncMock()
        locator.locate = slow_locate
        fetcher = AssetFetcher(_session(), locator=locator, timeout=0.05)

        with pytest.raises(FetchError, match="timeout") as exc_info:
            await fetcher.fetch(_descriptor("CAACAgIAAxkB"))
        assert exc_info.value.category == ErrorCategory.TRANSIENT

    @pytest.mark.asyncio
    async def test_per_call_timeout_overrides_default(self):
        async def slow_locate(ref):
            await asyncio.sleep(5)

        locator = AsyncMock()
        locator.locate = slow_locate
        fetcher = AssetFetcher(_session(), locator=locator, timeout=60)

        with pytest.raises(FetchError, match="0.05"):
            await fetcher.fetch(_descriptor("CAACAgIAAxkB"), timeout=0.05)

    @pytest.mark.asyncio
    async def test_zero_timeout_is_not_replaced_by_default(self):
        async def slow_locate(ref):
            await asyncio.sleep(5)

        locator = AsyncMock()
        locator.locate = slow_locate
        fetcher = AssetFetcher(_session(), locator=locator, timeout=60)

        with pytest.raises(FetchError, match="after 0s"):
            await fetcher.fetch(_descriptor("CAACAgIAAxkB"), timeout=0)
