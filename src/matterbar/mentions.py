"""Per-channel list of users mentioned on every Rollbar post.

The list is stored in the host key-value store under the channel id as a JSON
object mapping username to ``true``, e.g. ``{"daniel": true, "eric": true}``.
"""

import json
import logging
from collections.abc import Iterable

from matterbar.errors import HostAPIError, MentionStoreCorruption
from matterbar.host.base import ChatHost

logger = logging.getLogger(__name__)

EMPTY_RENDERING = "None"


class MentionList:
    """Immutable, de-duplicated set of usernames rendered in sorted order."""

    __slots__ = ("_usernames",)

    def __init__(self, usernames: Iterable[str] = ()) -> None:
        self._usernames = frozenset(u.lstrip("@") for u in usernames if u)

    def __contains__(self, username: object) -> bool:
        return username in self._usernames

    def __iter__(self):
        return iter(self.usernames)

    def __len__(self) -> int:
        return len(self._usernames)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MentionList):
            return NotImplemented
        return self._usernames == other._usernames

    def __hash__(self) -> int:
        return hash(self._usernames)

    def __repr__(self) -> str:
        return f"MentionList({self.usernames!r})"

    @property
    def usernames(self) -> list[str]:
        return sorted(self._usernames)

    def add(self, username: str) -> "MentionList":
        return MentionList(self._usernames | {username})

    def remove(self, username: str) -> "MentionList":
        return MentionList(self._usernames - {username})

    def render(self) -> str:
        """``@a, @b`` in alphabetical order, or ``None`` when empty."""
        if not self._usernames:
            return EMPTY_RENDERING
        return ", ".join(f"@{u}" for u in self.usernames)

    def to_json(self) -> bytes:
        return json.dumps({u: True for u in self.usernames}).encode("utf-8")

    @classmethod
    def from_json(cls, raw: bytes | None) -> "MentionList":
        """Decode a stored value. Raises MentionStoreCorruption if it is not a JSON object."""
        if not raw:
            return cls()
        try:
            stored = json.loads(raw)
        except (ValueError, UnicodeDecodeError) as exc:
            raise MentionStoreCorruption(f"Error parsing users to notify: {exc}") from exc
        if not isinstance(stored, dict):
            raise MentionStoreCorruption(
                f"Error parsing users to notify: expected an object, got {type(stored).__name__}"
            )
        return cls(name for name, enabled in stored.items() if enabled)


async def load_mentions(host: ChatHost, channel_id: str) -> MentionList:
    """Read the mention list for a channel.

    Raises MentionStoreCorruption if the stored value cannot be parsed, and
    lets HostAPIError from the store propagate.
    """
    raw = await host.kv_get(channel_id)
    return MentionList.from_json(raw)


async def load_mentions_lenient(host: ChatHost, channel_id: str) -> MentionList:
    """Read the mention list for a webhook post, never failing the request.

    Store errors and corrupt values are logged as warnings and treated as an
    empty list.
    """
    try:
        return await load_mentions(host, channel_id)
    except MentionStoreCorruption as exc:
        logger.warning("%s", exc)
    except HostAPIError:
        logger.warning("Error fetching users to notify in channel %s", channel_id, exc_info=True)
    return MentionList()


async def save_mentions(host: ChatHost, channel_id: str, mentions: MentionList) -> None:
    """Persist the mention list for a channel."""
    await host.kv_set(channel_id, mentions.to_json())
