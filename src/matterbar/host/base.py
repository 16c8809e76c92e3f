"""Interface the relay needs from the host chat server."""

from typing import Protocol

from matterbar.models.host import Channel, Post, Team, User


class ChatHost(Protocol):
    """Host chat API.

    Lookups return None when the object does not exist. Any other failure
    raises HostAPIError.
    """

    async def ensure_bot(self, username: str, display_name: str, description: str) -> str:
        """Return the user id of the bot account, creating it if needed."""
        ...

    async def set_profile_image(self, user_id: str, image: bytes, filename: str = "profile.png") -> None: ...

    async def get_team_by_name(self, name: str) -> Team | None: ...

    async def get_channel_by_name(self, team_id: str, name: str) -> Channel | None: ...

    async def get_user_by_username(self, username: str) -> User | None: ...

    async def create_post(self, post: Post) -> Post: ...

    async def kv_get(self, key: str) -> bytes | None: ...

    async def kv_set(self, key: str, value: bytes) -> None: ...
