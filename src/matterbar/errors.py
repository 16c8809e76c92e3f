"""Error types raised while relaying a webhook or running a slash command.

Every error carries the HTTP status the webhook route answers with, so the
app-level exception handler can map it without knowing the concrete type.
"""

from typing import ClassVar


class MatterbarError(Exception):
    """Base exception for matterbar with an associated HTTP status."""

    status_code: ClassVar[int] = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class MalformedPayload(MatterbarError):
    """The webhook body is not JSON or lacks the event envelope."""

    status_code = 400


class AuthFailure(MatterbarError):
    """The request secret or slash command token did not match."""

    status_code = 401


class ResolutionFailure(MatterbarError):
    """A team or channel named by the request could not be found."""

    status_code = 400


class DownstreamPostFailure(MatterbarError):
    """The host refused to create the post."""

    status_code = 500


class MentionStoreCorruption(MatterbarError):
    """The stored mention list for a channel is not valid JSON."""

    status_code = 500


class HostAPIError(MatterbarError):
    """A call into the chat host failed."""

    status_code = 500


class ConfigurationError(MatterbarError):
    """The configured default team or channel is invalid."""

    status_code = 400
