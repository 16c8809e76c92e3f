"""Tests for the file and memory backed stores."""

import pytest

from matterbar.errors import HostAPIError
from matterbar.host.kvstore import FileKVStore, MemoryKVStore
from matterbar.host.mattermost import MattermostHost
from matterbar.mentions import MentionList, load_mentions, save_mentions


@pytest.mark.asyncio
async def test_memory_store_get_and_set():
    store = MemoryKVStore({"c1": b"{}"})

    await store.set("c2", b'{"daniel": true}')

    assert await store.get("c1") == b"{}"
    assert await store.get("c2") == b'{"daniel": true}'
    assert await store.get("missing") is None


@pytest.mark.asyncio
async def test_file_store_missing_file_reads_none(tmp_path):
    store = FileKVStore(tmp_path / "kv.json")
    assert await store.get("c1") is None


@pytest.mark.asyncio
async def test_file_store_survives_new_instance(tmp_path):
    path = tmp_path / "state" / "kv.json"
    await FileKVStore(path).set("c1", b'{"daniel": true}')

    assert await FileKVStore(path).get("c1") == b'{"daniel": true}'
    assert not path.with_name("kv.json.tmp").exists()


@pytest.mark.asyncio
async def test_file_store_keeps_other_keys(tmp_path):
    store = FileKVStore(tmp_path / "kv.json")

    await store.set("c1", b'{"daniel": true}')
    await store.set("c2", b'{"eric": true}')
    await store.set("c1", b"{}")

    assert await store.get("c1") == b"{}"
    assert await store.get("c2") == b'{"eric": true}'


@pytest.mark.asyncio
async def test_file_store_empty_file_reads_none(tmp_path):
    path = tmp_path / "kv.json"
    path.write_text("")
    assert await FileKVStore(path).get("c1") is None


@pytest.mark.parametrize("content", ["{not json", '["a", "b"]'])
@pytest.mark.asyncio
async def test_file_store_corrupt_file_raises(tmp_path, content: str):
    path = tmp_path / "kv.json"
    path.write_text(content)

    with pytest.raises(HostAPIError) as exc_info:
        await FileKVStore(path).get("c1")

    assert exc_info.value.message.startswith(f"Error parsing {path}")


@pytest.mark.asyncio
async def test_mentions_persist_across_hosts(tmp_path):
    path = tmp_path / "kv.json"
    first = MattermostHost("http://mattermost.test", "token", kv=FileKVStore(path))
    await save_mentions(first, "c1", MentionList(["daniel", "eric"]))
    await first.aclose()

    second = MattermostHost("http://mattermost.test", "token", kv=FileKVStore(path))
    try:
        assert await load_mentions(second, "c1") == MentionList(["daniel", "eric"])
    finally:
        await second.aclose()
