"""Key-value storage backing the per-channel mention lists.

``MattermostHost`` stores values as preferences of the bot account by
default (see ``PreferenceKVStore``), which every worker and every restart
sees. The stores here are for deployments without that permission and for
tests.
"""

import asyncio
import json
import logging
import os
from pathlib import Path
from typing import Protocol

from matterbar.errors import HostAPIError

logger = logging.getLogger(__name__)


class KVStore(Protocol):
    async def get(self, key: str) -> bytes | None: ...

    async def set(self, key: str, value: bytes) -> None: ...


class MemoryKVStore:
    """Process-local store. Values are lost on restart."""

    def __init__(self, initial: dict[str, bytes] | None = None) -> None:
        self._values: dict[str, bytes] = dict(initial or {})

    async def get(self, key: str) -> bytes | None:
        return self._values.get(key)

    async def set(self, key: str, value: bytes) -> None:
        self._values[key] = value


class FileKVStore:
    """Store persisted as one JSON object in a file.

    Values must be UTF-8 text. Writes go to a temporary file that replaces
    the original, so a crash never leaves a half-written store. Only one
    process should write a given file.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self._lock = asyncio.Lock()

    def _read(self) -> dict[str, str]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as exc:
            raise HostAPIError(f"Error reading {self.path}: {exc}") from exc
        if not raw.strip():
            return {}
        try:
            values = json.loads(raw)
        except ValueError as exc:
            raise HostAPIError(f"Error parsing {self.path}: {exc}") from exc
        if not isinstance(values, dict):
            raise HostAPIError(f"Error parsing {self.path}: expected an object")
        return values

    def _write(self, values: dict[str, str]) -> None:
        tmp = self.path.with_name(f"{self.path.name}.tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(json.dumps(values, sort_keys=True), encoding="utf-8")
            os.replace(tmp, self.path)
        except OSError as exc:
            raise HostAPIError(f"Error writing {self.path}: {exc}") from exc

    async def get(self, key: str) -> bytes | None:
        async with self._lock:
            values = await asyncio.to_thread(self._read)
        value = values.get(key)
        return value.encode("utf-8") if value is not None else None

    async def set(self, key: str, value: bytes) -> None:
        async with self._lock:
            values = await asyncio.to_thread(self._read)
            values[key] = value.decode("utf-8")
            await asyncio.to_thread(self._write, values)
        logger.debug("Stored %s in %s", key, self.path)
