"""`/rollbar` slash command: list, add or remove users mentioned in a channel."""

import logging

from pydantic import BaseModel

from matterbar.errors import HostAPIError, MentionStoreCorruption
from matterbar.host.base import ChatHost
from matterbar.mentions import load_mentions, save_mentions

logger = logging.getLogger(__name__)

COMMAND_TRIGGER = "rollbar"
RESPONSE_USERNAME = "Rollbar"
GENERIC_ERROR_MESSAGE = "Something went wrong. Check server logs or try again later."
USAGE_ERROR_MESSAGE = "Usage: `/rollbar (notify|remove|list) @username`"
USERS_LIST_MESSAGE = "Users notified on each Rollbar posted to this channel: {}"


class CommandResponse(BaseModel):
    """Ephemeral reply shown only to the user who ran the command."""

    response_type: str = "ephemeral"
    text: str
    username: str = RESPONSE_USERNAME


def _reply(text: str) -> CommandResponse:
    return CommandResponse(text=text)


def _generic_error(exc: Exception) -> CommandResponse:
    logger.error("%s", exc)
    return _reply(GENERIC_ERROR_MESSAGE)


async def execute_command(host: ChatHost, channel_id: str, command: str) -> CommandResponse:
    """Run ``/rollbar <action> [@username]`` for a channel.

    Every outcome, including store failures, becomes an ephemeral reply; the
    command never raises.
    """
    tokens = command.split()
    if len(tokens) < 2 or len(tokens) > 3 or tokens[0].lstrip("/") != COMMAND_TRIGGER:
        return _reply(USAGE_ERROR_MESSAGE)

    try:
        mentions = await load_mentions(host, channel_id)
    except (HostAPIError, MentionStoreCorruption) as exc:
        return _generic_error(exc)

    action = tokens[1]
    if action == "list":
        if len(tokens) != 2:
            return _reply("Usage: `/rollbar list`")
        return _reply(USERS_LIST_MESSAGE.format(mentions.render()))

    if action not in ("notify", "remove"):
        return _reply(USAGE_ERROR_MESSAGE)

    if len(tokens) != 3:
        return _reply(f"Usage: `/rollbar {action} @username`")

    username = tokens[2].removeprefix("@")
    try:
        user = await host.get_user_by_username(username)
    except HostAPIError as exc:
        return _generic_error(exc)
    if user is None:
        return _reply(f"User `{username}` not found.")

    if action == "remove":
        if username not in mentions:
            return _reply(f"User `{username}` is already not being notified.")
        mentions = mentions.remove(username)
    else:
        if username in mentions:
            return _reply(f"User `{username}` is already being notified.")
        mentions = mentions.add(username)

    try:
        await save_mentions(host, channel_id, mentions)
    except HostAPIError as exc:
        return _generic_error(exc)

    return _reply(USERS_LIST_MESSAGE.format(mentions.render()))
