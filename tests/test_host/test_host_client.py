"""Tests for the cached host singleton."""

from unittest.mock import patch

from conftest import make_settings

from matterbar.host import client as host_client
from matterbar.host.kvstore import FileKVStore, MemoryKVStore
from matterbar.host.mattermost import MattermostHost, PreferenceKVStore


def test_get_chat_host_is_cached():
    host_client.reset_host()
    with patch.object(host_client, "get_settings", return_value=make_settings()):
        first = host_client.get_chat_host()
        second = host_client.get_chat_host()

    assert isinstance(first, MattermostHost)
    assert first is second
    host_client.reset_host()


def test_reset_host_creates_new_instance():
    host_client.reset_host()
    with patch.object(host_client, "get_settings", return_value=make_settings()):
        first = host_client.get_chat_host()
        host_client.reset_host()
        second = host_client.get_chat_host()

    assert first is not second
    host_client.reset_host()


def test_build_kv_store_defaults_to_bot_preferences():
    assert host_client.build_kv_store(make_settings()) is None


def test_build_kv_store_file_backend(tmp_path):
    path = tmp_path / "kv.json"
    store = host_client.build_kv_store(make_settings(kv_backend="file", kv_file=str(path)))

    assert isinstance(store, FileKVStore)
    assert store.path == path


def test_build_kv_store_memory_backend():
    assert isinstance(host_client.build_kv_store(make_settings(kv_backend="memory")), MemoryKVStore)


def test_chat_host_uses_preference_store_by_default():
    host_client.reset_host()
    with patch.object(host_client, "get_settings", return_value=make_settings()):
        host = host_client.get_chat_host()

    assert isinstance(host._kv, PreferenceKVStore)
    host_client.reset_host()
