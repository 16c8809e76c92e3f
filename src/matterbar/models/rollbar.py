"""Wire models for Rollbar webhook payloads.

Only the fields the relay reads are declared; everything else Rollbar sends is
ignored. Every nested object is optional because which of them are present
depends on the event name, and Rollbar sends ``null`` for many of them.
"""

from decimal import Decimal
from typing import Annotated

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field


def _none_to_empty(value: object) -> object:
    return "" if value is None else value


# Rollbar sends null for unset string fields
NullableStr = Annotated[str, BeforeValidator(_none_to_empty)]


class _WireModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class RollbarException(_WireModel):
    """Exception class and message of a single trace."""

    class_name: NullableStr = Field(default="", alias="class")
    message: NullableStr = ""


class Trace(_WireModel):
    exception: RollbarException | None = None


class MessageBody(_WireModel):
    body: NullableStr = ""


class OccurrenceBody(_WireModel):
    """Occurrence body: exactly one of trace, trace_chain or message is normally set."""

    trace: Trace | None = None
    trace_chain: list[Trace] | None = None  # most recent first
    message: MessageBody | None = None


class OccurrenceMetadata(_WireModel):
    # int or float depending on the client SDK
    customer_timestamp: Decimal | None = None


class Occurrence(_WireModel):
    body: OccurrenceBody | None = None
    environment: NullableStr = ""
    framework: NullableStr = ""
    language: NullableStr = ""
    level: NullableStr = ""
    uuid: NullableStr = ""
    metadata: OccurrenceMetadata | None = None


class Item(_WireModel):
    id: int | None = None
    counter: int | None = None
    environment: NullableStr = ""
    title: NullableStr = ""
    last_occurrence: Occurrence | None = None


class Trigger(_WireModel):
    threshold: int | None = None
    window_size: int | None = None
    window_size_description: NullableStr = ""


class Deploy(_WireModel):
    id: int | None = None
    environment: NullableStr = ""
    revision: NullableStr = ""
    finish_time: int | None = None  # unix seconds
    local_username: str | None = None
    comment: str | None = None


class EventData(_WireModel):
    item: Item | None = None
    occurrence: Occurrence | None = None  # only for the `occurrence` event
    occurrences: int | None = None  # only for `exp_repeat_item`
    trigger: Trigger | None = None  # only for `item_velocity`
    deploy: Deploy | None = None  # only for `deploy`
    url: NullableStr = ""
    message: NullableStr = ""  # only for `test`


class RollbarPayload(_WireModel):
    """The webhook envelope: an event name and its data."""

    event_name: str
    data: EventData
