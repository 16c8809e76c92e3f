"""Mattermost host singleton.

Creates a cached MattermostHost configured from application settings,
following the same lazy-init pattern as the settings cache.
"""

from matterbar.config import Settings, get_settings
from matterbar.host.kvstore import FileKVStore, KVStore, MemoryKVStore
from matterbar.host.mattermost import MattermostHost

_host: MattermostHost | None = None


def build_kv_store(settings: Settings) -> KVStore | None:
    """Store selected by ``kv_backend``. None keeps the host's bot preference store."""
    if settings.kv_backend == "file":
        return FileKVStore(settings.kv_file)
    if settings.kv_backend == "memory":
        return MemoryKVStore()
    return None


def get_chat_host() -> MattermostHost:
    """Return a cached Mattermost host instance.

    Creates the host on first call using mattermost_url, mattermost_token and
    kv_backend from settings. Subsequent calls return the cached instance.
    """
    global _host
    if _host is None:
        settings = get_settings()
        _host = MattermostHost(
            settings.mattermost_url,
            settings.mattermost_token,
            kv=build_kv_store(settings),
        )
    return _host


def reset_host() -> None:
    """Reset the cached host instance. Used for testing."""
    global _host
    _host = None
