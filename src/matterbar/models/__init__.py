"""Data models for Rollbar payloads, normalized events, attachments and host objects."""

from matterbar.models.attachment import Attachment, AttachmentField, TestMessage
from matterbar.models.event import (
    ChainException,
    DeployRecord,
    Event,
    EventName,
    NoException,
    OccurrenceRecord,
    OccurrenceSource,
    PlainMessage,
    TraceException,
    VelocityTrigger,
)
from matterbar.models.host import Channel, Post, Team, User
from matterbar.models.rollbar import RollbarPayload

__all__ = [
    "Attachment",
    "AttachmentField",
    "TestMessage",
    "ChainException",
    "DeployRecord",
    "Event",
    "EventName",
    "NoException",
    "OccurrenceRecord",
    "OccurrenceSource",
    "PlainMessage",
    "TraceException",
    "VelocityTrigger",
    "Channel",
    "Post",
    "Team",
    "User",
    "RollbarPayload",
]
