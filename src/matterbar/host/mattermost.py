"""ChatHost implementation over the Mattermost REST API (v4).

Lookups that answer 404 return None; any other error response or transport
failure raises HostAPIError carrying Mattermost's error message.
"""

import logging
from pathlib import Path
from urllib.parse import quote

import httpx

from matterbar.errors import HostAPIError
from matterbar.host.kvstore import KVStore
from matterbar.models.host import Channel, Post, Team, User

logger = logging.getLogger(__name__)

PREFERENCE_CATEGORY = "matterbar"


def _error_message(response: httpx.Response) -> str:
    """Mattermost errors are JSON: ``{"message": ..., "detailed_error": ...}``."""
    try:
        body = response.json()
    except ValueError:
        return f"{response.status_code} {response.reason_phrase}"
    if not isinstance(body, dict):
        return f"{response.status_code} {response.reason_phrase}"
    message = body.get("message") or f"{response.status_code} {response.reason_phrase}"
    detailed = body.get("detailed_error")
    return f"{message}, {detailed}" if detailed else message


class PreferenceKVStore:
    """Stores values as preferences of the bot account, one per key.

    Preferences live in the Mattermost database, so every worker sees the
    same values and they survive restarts. Keys are channel ids (at most 32
    characters) and values are limited to 2000 characters.
    """

    def __init__(self, host: "MattermostHost", category: str = PREFERENCE_CATEGORY) -> None:
        self._host = host
        self.category = category

    def _user_id(self) -> str:
        if not self._host.bot_user_id:
            raise HostAPIError("bot account not ensured; no user to store preferences under")
        return self._host.bot_user_id

    async def get(self, key: str) -> bytes | None:
        value = await self._host.get_preference(self._user_id(), self.category, key)
        return value.encode("utf-8") if value is not None else None

    async def set(self, key: str, value: bytes) -> None:
        await self._host.save_preference(
            self._user_id(), self.category, key, value.decode("utf-8")
        )


class MattermostHost:
    """Talks to a Mattermost server with a bot or personal access token.

    Without an explicit ``kv`` store, values are kept as bot preferences.
    Writing another user's preferences needs the ``edit_other_users``
    permission unless the token belongs to the bot itself.
    """

    def __init__(
        self,
        base_url: str,
        token: str,
        kv: KVStore | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._client = client or httpx.AsyncClient(
            base_url=f"{base_url.rstrip('/')}/api/v4",
            headers={"Authorization": f"Bearer {token}"},
            timeout=httpx.Timeout(10.0),
        )
        self._kv: KVStore = kv or PreferenceKVStore(self)
        self.bot_user_id = ""

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            return await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            raise HostAPIError(f"{method} {path} failed: {exc}") from exc

    async def _get_optional(self, path: str) -> dict | None:
        response = await self._request("GET", path)
        if response.status_code == 404:
            return None
        if response.is_error:
            raise HostAPIError(_error_message(response))
        return response.json()

    async def ensure_bot(self, username: str, display_name: str, description: str) -> str:
        existing = await self.get_user_by_username(username)
        if existing is not None:
            self.bot_user_id = existing.id
            return existing.id

        response = await self._request(
            "POST",
            "/bots",
            json={
                "username": username,
                "display_name": display_name,
                "description": description,
            },
        )
        if response.is_error:
            raise HostAPIError(_error_message(response))
        logger.info("Created bot account %s", username)
        self.bot_user_id = response.json()["user_id"]
        return self.bot_user_id

    async def set_profile_image(self, user_id: str, image: bytes, filename: str = "profile.png") -> None:
        response = await self._request(
            "POST",
            f"/users/{quote(user_id, safe='')}/image",
            files={"image": (Path(filename).name, image)},
        )
        if response.is_error:
            raise HostAPIError(_error_message(response))

    async def get_team_by_name(self, name: str) -> Team | None:
        body = await self._get_optional(f"/teams/name/{quote(name, safe='')}")
        return Team.model_validate(body) if body is not None else None

    async def get_channel_by_name(self, team_id: str, name: str) -> Channel | None:
        body = await self._get_optional(
            f"/teams/{quote(team_id, safe='')}/channels/name/{quote(name, safe='')}"
        )
        return Channel.model_validate(body) if body is not None else None

    async def get_user_by_username(self, username: str) -> User | None:
        body = await self._get_optional(f"/users/username/{quote(username, safe='')}")
        return User.model_validate(body) if body is not None else None

    async def create_post(self, post: Post) -> Post:
        response = await self._request("POST", "/posts", json=post.model_dump())
        if response.is_error:
            raise HostAPIError(_error_message(response))
        return Post.model_validate(response.json())

    async def get_preference(self, user_id: str, category: str, name: str) -> str | None:
        body = await self._get_optional(
            f"/users/{quote(user_id, safe='')}/preferences/"
            f"{quote(category, safe='')}/name/{quote(name, safe='')}"
        )
        return body.get("value", "") if body is not None else None

    async def save_preference(self, user_id: str, category: str, name: str, value: str) -> None:
        response = await self._request(
            "PUT",
            f"/users/{quote(user_id, safe='')}/preferences",
            json=[{"user_id": user_id, "category": category, "name": name, "value": value}],
        )
        if response.is_error:
            raise HostAPIError(_error_message(response))

    async def kv_get(self, key: str) -> bytes | None:
        return await self._kv.get(key)

    async def kv_set(self, key: str, value: bytes) -> None:
        await self._kv.set(key, value)
