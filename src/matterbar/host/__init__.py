"""Host chat server access: interface, Mattermost REST implementation, KV storage."""

from matterbar.host.base import ChatHost
from matterbar.host.client import build_kv_store, get_chat_host, reset_host
from matterbar.host.kvstore import FileKVStore, KVStore, MemoryKVStore
from matterbar.host.mattermost import MattermostHost, PreferenceKVStore

__all__ = [
    "ChatHost",
    "FileKVStore",
    "KVStore",
    "MattermostHost",
    "MemoryKVStore",
    "PreferenceKVStore",
    "build_kv_store",
    "get_chat_host",
    "reset_host",
]
