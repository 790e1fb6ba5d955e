"""Tests for LocalObjectStore."""

import pytest

from core.errors.exceptions import StoreError
from sticker_pipeline.storage import LocalObjectStore, StorageGateway


@pytest.fixture
def store(tmp_path):
    return LocalObjectStore(tmp_path / "store")


class TestPut:
    @pytest.mark.asyncio
    async def test_writes_under_bucket(self, store):
        await store.put("stickers", "cattos/sticker_1.webp", b"abc", "image/webp")

        written = store.base_path / "stickers" / "cattos" / "sticker_1.webp"
        assert written.read_bytes() == b"abc"
        assert not written.with_suffix(".webp.tmp").exists()

    @pytest.mark.asyncio
    async def test_overwrite_replaces_content(self, store):
        await store.put("stickers", "a.png", b"old", "image/png")
        await store.put("stickers", "a.png", b"new", "image/png")

        assert (store.base_path / "stickers" / "a.png").read_bytes() == b"new"

    @pytest.mark.asyncio
    async def test_no_overwrite_conflict(self, store):
        await store.put("stickers", "a.png", b"old", "image/png")

        with pytest.raises(StoreError) as exc_info:
            await store.put("stickers", "a.png", b"new", "image/png", overwrite=False)

        assert exc_info.value.status_code == 409
        assert (store.base_path / "stickers" / "a.png").read_bytes() == b"old"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("path", ["../escape.png", "cattos/../../escape.png", "/etc/passwd"])
    async def test_path_traversal_rejected(self, store, path):
        with pytest.raises(StoreError) as exc_info:
            await store.put("stickers", path, b"x", "image/png")
        assert exc_info.value.status_code == 400


class TestRemoveAndList:
    @pytest.mark.asyncio
    async def test_list_root_and_folder(self, store):
        await store.put("stickers", "cattos/sticker_2.tgs", b"22", "application/x-tgsticker")
        await store.put("stickers", "cattos/sticker_1.webp", b"1", "image/webp")
        await store.put("stickers", "doggos/sticker_1.png", b"1", "image/png")

        root = await store.list("stickers")
        files = await store.list("stickers", "cattos")

        assert [(e.name, e.is_folder) for e in root] == [("cattos", True), ("doggos", True)]
        assert [e.name for e in files] == ["sticker_1.webp", "sticker_2.tgs"]
        assert files[1].size == 2
        assert files[1].updated_at is not None

    @pytest.mark.asyncio
    async def test_list_missing_prefix_is_empty(self, store):
        assert await store.list("stickers", "nothing-here") == []

    @pytest.mark.asyncio
    async def test_remove(self, store):
        await store.put("stickers", "cattos/sticker_1.webp", b"1", "image/webp")

        await store.remove("stickers", ["cattos/sticker_1.webp"])

        assert await store.list("stickers", "cattos") == []

    @pytest.mark.asyncio
    async def test_remove_missing_is_noop(self, store):
        await store.remove("stickers", ["never/written.png"])

    def test_public_url_is_file_uri(self, store):
        url = store.public_url("stickers", "cattos/sticker_1.webp")
        assert url.startswith("file://")
        assert url.endswith("/stickers/cattos/sticker_1.webp")


class TestThroughGateway:
    @pytest.mark.asyncio
    async def test_stats_over_local_store(self, store):
        gateway = StorageGateway(store, max_object_size=1024)
        await gateway.upload("stickers", "cattos/sticker_1.webp", b"1", "image/webp")
        await gateway.upload("stickers", "cattos/sticker_2.tgs", b"2", "application/x-tgsticker")
        await gateway.upload("stickers", "doggos/sticker_1.gif", b"3", "image/gif")

        stats = await gateway.collection_stats("stickers")

        assert stats.per_collection == {"cattos": 2, "doggos": 1}
        assert stats.animated_count == 2
