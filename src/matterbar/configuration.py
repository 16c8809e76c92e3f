"""Resolved plugin configuration and its copy-on-write store.

Settings name the default team, channel and posting user; on every
configuration change those names are resolved to ids against the host and a
new immutable ``Configuration`` snapshot replaces the active one. Readers
never lock: they receive whichever snapshot is current. Writers build a whole
new snapshot and swap it in.

Never call the host while holding the store lock; a host call may re-enter
the plugin.
"""

import logging
import threading

from pydantic import BaseModel, ConfigDict

from matterbar.config import Settings
from matterbar.errors import ConfigurationError
from matterbar.host.base import ChatHost

logger = logging.getLogger(__name__)


class Configuration(BaseModel):
    """Immutable snapshot of the active configuration."""

    model_config = ConfigDict(frozen=True)

    # Where webhooks are posted when the request names no team/channel
    default_team: str = ""
    default_channel: str = ""

    # Account the relay posts as
    username: str = ""

    # Shared secret expected in the webhook `auth` query parameter
    secret: str = ""

    # Mattermost slash command token
    command_token: str = ""

    # Ids resolved from the names above
    team_id: str = ""
    channel_id: str = ""
    user_id: str = ""

    @classmethod
    def from_settings(cls, settings: Settings) -> "Configuration":
        return cls(
            default_team=settings.default_team,
            default_channel=settings.default_channel,
            username=settings.username,
            secret=settings.secret,
            command_token=settings.command_token,
        )


class ConfigStore:
    """Holds the active Configuration and swaps it atomically."""

    def __init__(self, initial: Configuration | None = None) -> None:
        self._lock = threading.Lock()
        self._current = initial

    def get(self) -> Configuration:
        """Return the active snapshot, or an empty one before the first load."""
        current = self._current
        if current is None:
            return Configuration()
        return current

    def set(self, configuration: Configuration | None) -> None:
        """Replace the active snapshot.

        Raises ValueError when handed the snapshot that is already active:
        that means someone changed it instead of building a new one.
        """
        with self._lock:
            if configuration is not None and configuration is self._current:
                raise ValueError("set called with the existing configuration")
            self._current = configuration


async def ensure_user_exists(host: ChatHost, configuration: Configuration) -> str:
    """Return the id of the configured posting user, or "" if it does not exist."""
    user = await host.get_user_by_username(configuration.username)
    if user is None:
        logger.warning(
            "Configuration invalid: no user with Username %s exists", configuration.username
        )
        return ""
    return user.id


async def ensure_default_team_exists(host: ChatHost, configuration: Configuration) -> str:
    """Return the id of the default team, or "" if none is configured or found.

    Without a default team every webhook request must name a `team`.
    """
    if not configuration.default_team:
        return ""

    team = await host.get_team_by_name(configuration.default_team)
    if team is None:
        logger.warning(
            "Configuration invalid: no team named %s exists", configuration.default_team
        )
        return ""
    return team.id


async def ensure_default_channel_exists(host: ChatHost, configuration: Configuration) -> str:
    """Return the id of the default channel in the default team.

    Returns "" when no default channel is configured. Raises
    ConfigurationError when a channel is configured without a team, or the
    channel does not exist.
    """
    if not configuration.default_channel:
        return ""

    if not configuration.default_team:
        message = "Configuration invalid: a DefaultTeam must be specified before a DefaultChannel"
        logger.warning(message)
        raise ConfigurationError(message)

    team = await host.get_team_by_name(configuration.default_team)
    channel = None
    if team is not None:
        channel = await host.get_channel_by_name(team.id, configuration.default_channel)

    if channel is None:
        message = f"Configuration invalid: no channel named {configuration.default_channel} exists"
        logger.warning(message)
        raise ConfigurationError(message)
    return channel.id


async def resolve_configuration(host: ChatHost, settings: Settings) -> Configuration:
    """Build a new snapshot from settings, resolving names to ids against the host."""
    base = Configuration.from_settings(settings)
    user_id = await ensure_user_exists(host, base)
    team_id = await ensure_default_team_exists(host, base)
    channel_id = await ensure_default_channel_exists(host, base)
    return base.model_copy(update={"user_id": user_id, "team_id": team_id, "channel_id": channel_id})
