"""Unit tests for the key-value storage backends."""

import json

import pytest

from wallet_lookup.storage import JSONFileStore, MemoryStore, StorageError


@pytest.mark.asyncio
async def test_memory_store_get_set_remove():
    store = MemoryStore()

    assert await store.get("k") is None
    await store.set("k", "v")
    assert await store.get("k") == "v"
    await store.remove("k")
    await store.remove("k")
    assert await store.get("k") is None


class TestJSONFileStore:

    @pytest.mark.asyncio
    async def test_missing_file_reads_as_empty(self, tmp_path):
        store = JSONFileStore(tmp_path / "nested" / "storage.json")

        assert await store.get("k") is None

    @pytest.mark.asyncio
    async def test_set_creates_file_and_keeps_other_keys(self, tmp_path):
        path = tmp_path / "nested" / "storage.json"
        store = JSONFileStore(path)

        await store.set("a", "1")
        await store.set("b", "2")

        assert json.loads(path.read_text()) == {"a": "1", "b": "2"}
        assert await store.get("a") == "1"
        assert list(path.parent.iterdir()) == [path]

    @pytest.mark.asyncio
    async def test_remove(self, tmp_path):
        store = JSONFileStore(tmp_path / "storage.json")
        await store.set("a", "1")

        await store.remove("a")
        await store.remove("missing")

        assert await store.get("a") is None

    @pytest.mark.asyncio
    async def test_corrupt_file_raises_on_read(self, tmp_path):
        path = tmp_path / "storage.json"
        path.write_text("{ this is not json")

        with pytest.raises(StorageError):
            await JSONFileStore(path).get("a")

    @pytest.mark.asyncio
    async def test_corrupt_file_is_replaced_on_write(self, tmp_path):
        path = tmp_path / "storage.json"
        path.write_text("[]")
        store = JSONFileStore(path)

        await store.set("a", "1")

        assert await store.get("a") == "1"

    @pytest.mark.asyncio
    async def test_survives_new_instance(self, tmp_path):
        path = tmp_path / "storage.json"
        await JSONFileStore(path).set("a", "1")

        assert await JSONFileStore(path).get("a") == "1"
