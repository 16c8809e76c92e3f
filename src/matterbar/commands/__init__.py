"""`/rollbar` slash command handling."""

from matterbar.commands.handler import (
    GENERIC_ERROR_MESSAGE,
    USAGE_ERROR_MESSAGE,
    USERS_LIST_MESSAGE,
    CommandResponse,
    execute_command,
)

__all__ = [
    "GENERIC_ERROR_MESSAGE",
    "USAGE_ERROR_MESSAGE",
    "USERS_LIST_MESSAGE",
    "CommandResponse",
    "execute_command",
]
