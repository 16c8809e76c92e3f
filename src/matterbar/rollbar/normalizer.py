"""Decode Rollbar webhook bodies into normalized events.

Rollbar's payload shape depends on the event name: standard item events
carry ``item.last_occurrence``, the ``occurrence`` event carries
``data.occurrence``, ``item_velocity`` carries a trigger, ``deploy`` a deploy
record and ``test`` only a message. The normalizer resolves those variants
into the tagged records of :mod:`matterbar.models.event`.
"""

from pydantic import ValidationError

from matterbar.errors import MalformedPayload
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
from matterbar.models.rollbar import EventData, Occurrence, OccurrenceBody, RollbarPayload

# Events whose payload carries no occurrence data
_NO_OCCURRENCE_EVENTS = frozenset({EventName.ITEM_VELOCITY, EventName.TEST, EventName.DEPLOY})


def parse_event(raw: bytes | str) -> Event:
    """Decode a webhook body into an Event.

    Raises MalformedPayload if the body is not JSON or lacks the
    ``event_name``/``data`` envelope. Unknown fields are ignored.
    """
    try:
        payload = RollbarPayload.model_validate_json(raw)
    except ValidationError as exc:
        raise MalformedPayload(_describe(exc)) from exc

    return normalize(payload)


def normalize(payload: RollbarPayload) -> Event:
    """Build an Event from an already decoded payload."""
    name = EventName.parse(payload.event_name)
    data = payload.data
    item = data.item

    occurrence = None
    deploy = None
    trigger = None

    if name == EventName.DEPLOY:
        deploy = _deploy_record(data)
    elif name not in _NO_OCCURRENCE_EVENTS:
        occurrence = _occurrence_record(data)

    if name == EventName.ITEM_VELOCITY and data.trigger is not None:
        trigger = VelocityTrigger(
            threshold=data.trigger.threshold or 0,
            window_size=data.trigger.window_size or 0,
            window_description=data.trigger.window_size_description,
        )

    return Event(
        event_name=name,
        raw_event_name=payload.event_name,
        occurrence_count=data.occurrences or 0,
        trigger=trigger,
        occurrence=occurrence,
        deploy=deploy,
        item_id=(item.id or 0) if item else 0,
        counter=(item.counter or 0) if item else 0,
        item_environment=item.environment if item else "",
        url=data.url,
        message=data.message,
    )


def resolve_exception(body: OccurrenceBody | None):
    """Pick the exception representation of an occurrence body.

    Order: single trace with a message, then the most recent entry of a
    trace chain, then a plain message body, else NoException.
    """
    if body is None:
        return NoException()

    trace = body.trace
    if trace is not None and trace.exception is not None and trace.exception.message:
        return TraceException(
            class_name=trace.exception.class_name,
            message=trace.exception.message,
        )

    if body.trace_chain:
        latest = body.trace_chain[0].exception
        if latest is not None:
            return ChainException(
                class_name=latest.class_name,
                message=latest.message,
                chain_length=len(body.trace_chain),
            )

    if body.message is not None and body.message.body:
        return PlainMessage(body=body.message.body)

    return NoException()


def _occurrence_record(data: EventData) -> OccurrenceRecord:
    raw: Occurrence | None = None
    source = OccurrenceSource.MISSING

    if data.item is not None and data.item.last_occurrence is not None:
        raw = data.item.last_occurrence
        source = OccurrenceSource.LAST_OCCURRENCE
    elif data.occurrence is not None:
        raw = data.occurrence
        source = OccurrenceSource.OCCURRENCE

    if raw is None:
        return OccurrenceRecord(source=source)

    return OccurrenceRecord(
        source=source,
        environment=raw.environment,
        framework=raw.framework,
        language=raw.language,
        level=raw.level,
        uuid=raw.uuid,
        exception=resolve_exception(raw.body),
        customer_timestamp=raw.metadata.customer_timestamp if raw.metadata else None,
    )


def _deploy_record(data: EventData) -> DeployRecord:
    deploy = data.deploy
    if deploy is None:
        return DeployRecord()

    return DeployRecord(
        id=deploy.id or 0,
        environment=deploy.environment,
        revision=deploy.revision,
        finish_time=deploy.finish_time or 0,
        local_username=deploy.local_username or None,
        comment=deploy.comment,
    )


def _describe(exc: ValidationError) -> str:
    """Condense a ValidationError into a single line for the HTTP response."""
    first = exc.errors()[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    if location:
        return f"{first['msg']} ({location})"
    return first["msg"]
