"""Normalized Rollbar event and its tagged sub-records."""

from decimal import Decimal
from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class EventName(str, Enum):
    """Rollbar webhook event names understood by the formatter."""

    NEW_ITEM = "new_item"
    OCCURRENCE = "occurrence"
    REACTIVATED_ITEM = "reactivated_item"
    REOPENED_ITEM = "reopened_item"
    RESOLVED_ITEM = "resolved_item"
    EXP_REPEAT_ITEM = "exp_repeat_item"
    ITEM_VELOCITY = "item_velocity"
    DEPLOY = "deploy"
    TEST = "test"
    OTHER = "other"

    @classmethod
    def parse(cls, value: str) -> "EventName":
        """Map a raw event name to its member, ``OTHER`` when unrecognized."""
        try:
            return cls(value)
        except ValueError:
            return cls.OTHER


class _Record(BaseModel):
    model_config = ConfigDict(frozen=True)


class TraceException(_Record):
    """A single exception trace."""

    kind: Literal["trace"] = "trace"
    class_name: str = ""
    message: str = ""

    @property
    def text(self) -> str:
        return f"{self.class_name}: {self.message}"


class ChainException(_Record):
    """The most recent exception of a trace chain."""

    kind: Literal["trace_chain"] = "trace_chain"
    class_name: str = ""
    message: str = ""
    chain_length: int = 1

    @property
    def text(self) -> str:
        return f"{self.class_name}: {self.message}"


class PlainMessage(_Record):
    """A message-only occurrence (no exception trace)."""

    kind: Literal["message"] = "message"
    body: str = ""

    @property
    def text(self) -> str:
        return self.body


class NoException(_Record):
    kind: Literal["none"] = "none"

    @property
    def text(self) -> str:
        return ""


ExceptionDetail = Annotated[
    Union[TraceException, ChainException, PlainMessage, NoException],
    Field(discriminator="kind"),
]


class OccurrenceSource(str, Enum):
    """Where in the payload the occurrence record was found."""

    LAST_OCCURRENCE = "last_occurrence"
    OCCURRENCE = "occurrence"
    MISSING = "missing"


class OccurrenceRecord(_Record):
    source: OccurrenceSource
    environment: str = ""
    framework: str = ""
    language: str = ""
    level: str = ""
    uuid: str = ""
    exception: ExceptionDetail = NoException()
    customer_timestamp: Decimal | None = None

    @property
    def exception_text(self) -> str:
        return self.exception.text


class DeployRecord(_Record):
    id: int = 0
    environment: str = ""
    revision: str = ""
    finish_time: int = 0
    local_username: str | None = None
    comment: str | None = None


class VelocityTrigger(_Record):
    threshold: int = 0
    window_size: int = 0
    window_description: str = ""


class Event(_Record):
    """One normalized webhook call.

    At most one of ``occurrence`` and ``deploy`` is set, chosen by
    ``event_name``: ``deploy`` events carry a deploy record, ``item_velocity``
    and ``test`` carry neither, every other event carries an occurrence.
    """

    event_name: EventName
    raw_event_name: str
    occurrence_count: int = 0
    trigger: VelocityTrigger | None = None
    occurrence: OccurrenceRecord | None = None
    deploy: DeployRecord | None = None
    item_id: int = 0
    counter: int = 0
    item_environment: str = ""
    url: str = ""
    message: str = ""
