"""Shared test fixtures."""

from pathlib import Path
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from matterbar.app import create_app
from matterbar.config import Settings
from matterbar.errors import HostAPIError
from matterbar.models.host import Channel, Post, Team, User

FIXTURES = Path(__file__).parent / "fixtures"

SECRET = "abc123"
COMMAND_TOKEN = "cmd-token-xyz"
BOT_USER_ID = "bot-user-id"


def load_fixture(name: str) -> bytes:
    """Read a Rollbar payload from tests/fixtures."""
    return (FIXTURES / name).read_bytes()


def make_settings(**overrides) -> Settings:
    """Settings isolated from the environment's .env file."""
    values = {
        "mattermost_url": "http://mattermost.test",
        "mattermost_token": "token",
        "secret": SECRET,
        "command_token": COMMAND_TOKEN,
        "username": "rollbar",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


class FakeHost:
    """In-memory ChatHost recording every created post."""

    def __init__(self) -> None:
        self.teams: dict[str, Team] = {}
        self.channels: dict[tuple[str, str], Channel] = {}
        self.users: dict[str, User] = {}
        self.kv: dict[str, bytes] = {}
        self.posts: list[Post] = []
        self.post_error: HostAPIError | None = None
        self.kv_get_error: HostAPIError | None = None
        self.kv_set_error: HostAPIError | None = None
        self.profile_images: list[tuple[str, bytes, str]] = []
        self.profile_image_error: HostAPIError | None = None

    def add_team(self, team_id: str, name: str) -> Team:
        team = Team(id=team_id, name=name)
        self.teams[name] = team
        return team

    def add_channel(self, team_id: str, channel_id: str, name: str) -> Channel:
        channel = Channel(id=channel_id, name=name, team_id=team_id)
        self.channels[(team_id, name)] = channel
        return channel

    def add_user(self, user_id: str, username: str) -> User:
        user = User(id=user_id, username=username)
        self.users[username] = user
        return user

    async def ensure_bot(self, username: str, display_name: str, description: str) -> str:
        if username not in self.users:
            self.add_user(BOT_USER_ID, username)
        return self.users[username].id

    async def set_profile_image(self, user_id: str, image: bytes, filename: str = "profile.png") -> None:
        if self.profile_image_error is not None:
            raise self.profile_image_error
        self.profile_images.append((user_id, image, filename))

    async def get_team_by_name(self, name: str) -> Team | None:
        return self.teams.get(name)

    async def get_channel_by_name(self, team_id: str, name: str) -> Channel | None:
        return self.channels.get((team_id, name))

    async def get_user_by_username(self, username: str) -> User | None:
        return self.users.get(username)

    async def create_post(self, post: Post) -> Post:
        if self.post_error is not None:
            raise self.post_error
        self.posts.append(post)
        return post

    async def kv_get(self, key: str) -> bytes | None:
        if self.kv_get_error is not None:
            raise self.kv_get_error
        return self.kv.get(key)

    async def kv_set(self, key: str, value: bytes) -> None:
        if self.kv_set_error is not None:
            raise self.kv_set_error
        self.kv[key] = value


@pytest.fixture
def host() -> FakeHost:
    """A fresh in-memory host with an existing team and channel."""
    fake = FakeHost()
    fake.add_team("existingTeamId", "existingTeam")
    fake.add_channel("existingTeamId", "existingChannelId", "existingChannel")
    return fake


@pytest.fixture
def make_client(host: FakeHost):
    """Factory building an activated TestClient over the fake host."""
    clients: list[TestClient] = []

    def _make(**overrides) -> TestClient:
        app = create_app(settings=make_settings(**overrides), host=host)
        client = TestClient(app)
        client.__enter__()
        clients.append(client)
        return client

    with patch("matterbar.app.configure_logging"):
        yield _make
        for client in clients:
            client.__exit__(None, None, None)


@pytest.fixture
def client(make_client) -> TestClient:
    """Client with the default team and channel configured."""
    return make_client(default_team="existingTeam", default_channel="existingChannel")
