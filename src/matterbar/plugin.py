"""Relay lifecycle and request handling over an injected chat host.

``MatterbarPlugin`` owns the active configuration snapshot and the bot
account id. The HTTP layer calls ``handle_webhook`` and ``execute_command``;
the ASGI lifespan calls ``on_activate``.
"""

import hmac
import logging
from datetime import timezone, tzinfo
from pathlib import Path
from zoneinfo import ZoneInfo

from matterbar.commands.handler import CommandResponse, execute_command
from matterbar.config import Settings
from matterbar.configuration import ConfigStore, Configuration, resolve_configuration
from matterbar.errors import (
    AuthFailure,
    DownstreamPostFailure,
    HostAPIError,
    MalformedPayload,
    ResolutionFailure,
)
from matterbar.host.base import ChatHost
from matterbar.mentions import load_mentions_lenient
from matterbar.models.attachment import TestMessage
from matterbar.models.event import Event
from matterbar.models.host import POST_TYPE_SLACK_ATTACHMENT, Post
from matterbar.rollbar.formatter import LinkTemplates, format_event
from matterbar.rollbar.normalizer import parse_event

logger = logging.getLogger(__name__)

BOT_USERNAME = "rollbar"
BOT_DISPLAY_NAME = "Rollbar"
BOT_DESCRIPTION = "Rollbar->Mattermost webhook bot created by the Matterbar plugin."

# Props set on every relayed post
WEBHOOK_PROPS = {"from_webhook": "true", "use_user_icon": "true"}


def _zone(name: str) -> tzinfo:
    if name.upper() == "UTC":
        return timezone.utc
    return ZoneInfo(name)


class MatterbarPlugin:
    """Rollbar to Mattermost relay bound to one chat host."""

    def __init__(self, host: ChatHost, settings: Settings) -> None:
        self.host = host
        self.settings = settings
        self.configuration = ConfigStore()
        self.bot_user_id = ""
        self.links = LinkTemplates.from_settings(settings)
        self.tz = _zone(settings.deploy_timezone)

    async def on_activate(self) -> None:
        """Ensure the bot account exists, set its avatar, then load the configuration."""
        try:
            self.bot_user_id = await self.host.ensure_bot(
                self.settings.username or BOT_USERNAME, BOT_DISPLAY_NAME, BOT_DESCRIPTION
            )
        except HostAPIError as exc:
            raise HostAPIError(f"failed to ensure bot account: {exc}") from exc
        if self.settings.bot_icon_path:
            await self.set_bot_icon(Path(self.settings.bot_icon_path))
        await self.on_configuration_change()

    async def set_bot_icon(self, path: Path) -> None:
        """Upload the image at ``path`` as the bot's profile image."""
        try:
            image = path.read_bytes()
        except OSError as exc:
            raise HostAPIError(f"failed to read profile image: {exc}") from exc
        try:
            await self.host.set_profile_image(self.bot_user_id, image, path.name)
        except HostAPIError as exc:
            raise HostAPIError(f"failed to set profile image: {exc}") from exc

    async def on_configuration_change(self, settings: Settings | None = None) -> None:
        """Resolve settings against the host and swap in the new snapshot."""
        if settings is not None:
            self.settings = settings
            self.links = LinkTemplates.from_settings(settings)
            self.tz = _zone(settings.deploy_timezone)
        configuration = await resolve_configuration(self.host, self.settings)
        self.configuration.set(configuration)

    def get_configuration(self) -> Configuration:
        return self.configuration.get()

    def authenticate(self, token: str) -> None:
        """Compare the webhook `auth` token with the configured secret in constant time."""
        secret = self.get_configuration().secret
        if not secret or not hmac.compare_digest(token.encode(), secret.encode()):
            logger.warning("Unauthenticated matterbar webhook request.")
            raise AuthFailure("Unauthenticated.")

    def authenticate_command(self, token: str) -> None:
        expected = self.get_configuration().command_token
        if not expected or not hmac.compare_digest(token.encode(), expected.encode()):
            logger.warning("Unauthenticated slash command request.")
            raise AuthFailure("Unauthenticated.")

    async def resolve_channel(self, team: str = "", channel: str = "") -> str:
        """Pick the target channel id from query names, falling back to the defaults.

        Raises ResolutionFailure when neither a name nor a default is
        available, or a named team/channel does not exist.
        """
        configuration = self.get_configuration()

        if not configuration.team_id and not team:
            logger.warning("Default team not configured; expected team name in query param.")
            raise ResolutionFailure("Missing 'team' query parameter.")

        if not configuration.channel_id and not channel:
            logger.warning("Default channel not configured; expected channel name in query param.")
            raise ResolutionFailure("Missing 'channel' query parameter.")

        team_id = configuration.team_id
        if team:
            found_team = await self.host.get_team_by_name(team)
            if found_team is None:
                message = f"Team '{team}' does not exist."
                logger.warning(message)
                raise ResolutionFailure(message)
            team_id = found_team.id

        if not channel:
            return configuration.channel_id

        found_channel = await self.host.get_channel_by_name(team_id, channel)
        if found_channel is None:
            message = f"Channel '{channel}' does not exist."
            logger.warning(message)
            raise ResolutionFailure(message)
        return found_channel.id

    async def handle_webhook(self, body: bytes, team: str = "", channel: str = "") -> None:
        """Relay one Rollbar webhook body into the resolved channel."""
        channel_id = await self.resolve_channel(team, channel)

        try:
            event = parse_event(body)
        except MalformedPayload as exc:
            logger.error("Error in json decoding webhook: %s", exc)
            raise

        await self.post_event(channel_id, event)

    async def post_event(self, channel_id: str, event: Event) -> None:
        """Format an event for a channel and create the post.

        Raises DownstreamPostFailure when the host rejects the post.
        """
        mentions = await load_mentions_lenient(self.host, channel_id)

        if event.occurrence is not None and not event.occurrence.exception_text:
            logger.warning(
                "No %s exception message found. Link: %s", event.raw_event_name, event.url
            )

        formatted = format_event(event, mentions, self.links, self.tz)
        post = Post(
            channel_id=channel_id,
            user_id=self.bot_user_id or self.get_configuration().user_id,
            props=dict(WEBHOOK_PROPS),
        )
        if isinstance(formatted, TestMessage):
            post.message = formatted.message
        else:
            post.type = POST_TYPE_SLACK_ATTACHMENT
            post.props["attachments"] = [formatted.to_slack()]

        try:
            await self.host.create_post(post)
        except HostAPIError as exc:
            logger.error("Error creating a post: %s", exc)
            raise DownstreamPostFailure(str(exc)) from exc

        logger.info("Posted %s event to channel %s", event.raw_event_name, channel_id)

    async def execute_command(self, channel_id: str, command: str) -> CommandResponse:
        return await execute_command(self.host, channel_id, command)
