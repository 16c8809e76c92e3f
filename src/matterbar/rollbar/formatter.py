"""Turn normalized Rollbar events into Mattermost attachments.

Formatting is table driven: each event name maps to an ``EventRule`` holding
its title builder and body builder, and to a color in ``EVENT_COLORS``.
Everything here is pure; logging and posting happen in the plugin.
"""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone, tzinfo

from pydantic import BaseModel, ConfigDict

from matterbar.config import Settings
from matterbar.mentions import EMPTY_RENDERING, MentionList
from matterbar.models.attachment import Attachment, AttachmentField, TestMessage
from matterbar.models.event import (
    DeployRecord,
    Event,
    EventName,
    OccurrenceRecord,
    OccurrenceSource,
    VelocityTrigger,
)

POST_FALLBACK_MAX_LENGTH = 500
POST_TEXT_MAX_LENGTH = 6000

NO_EXCEPTION_NOTICE = (
    "No exception message found in Rollbar webhook. Check server logs for more info."
)
VELOCITY_NOTICE = (
    "No details available. High occurrence rate rollbar events are minimally supported."
)
UNKNOWN_DEPLOY_USER = "unknown user"
DEPLOY_TIME_FORMAT = "%Y-%m-%d %H:%M:%S %Z %z"

EVENT_COLORS: dict[EventName, str] = {
    EventName.NEW_ITEM: "#ff0000",  # red
    EventName.OCCURRENCE: "#ff0000",  # red
    EventName.REACTIVATED_ITEM: "#ffff00",  # yellow
    EventName.EXP_REPEAT_ITEM: "#800080",  # purple
    EventName.ITEM_VELOCITY: "#ffa500",  # orange
    EventName.REOPENED_ITEM: "#add8e6",  # light blue
    EventName.RESOLVED_ITEM: "#00ff00",  # green
    EventName.DEPLOY: "#4bc6b9",  # teal
}


class LinkTemplates(BaseModel):
    """URL templates for Rollbar links, formatted with ``str.format``."""

    model_config = ConfigDict(frozen=True)

    item: str = "https://rollbar.com/item/uuid/?uuid={uuid}"
    occurrence: str = "https://rollbar.com/occurrence/uuid/?uuid={uuid}"
    item_velocity: str = "https://rollbar.com/{project}/items/{counter}/"
    item_by_id: str = "https://rollbar.com/item/{item_id}/"
    deploy: str = "https://rollbar.com/deploy/{deploy_id}/"
    # "account/project" slug used by counter links
    project: str = ""

    @classmethod
    def from_settings(cls, settings: Settings) -> "LinkTemplates":
        return cls(
            item=settings.item_url,
            occurrence=settings.occurrence_url,
            item_velocity=settings.item_velocity_url,
            item_by_id=settings.item_id_url,
            deploy=settings.deploy_url,
            project=settings.rollbar_project.strip("/"),
        )

    def item_link(self, uuid: str) -> str:
        return self.item.format(uuid=uuid)

    def occurrence_link(self, uuid: str) -> str:
        return self.occurrence.format(uuid=uuid)

    def velocity_link(self, event: Event) -> str:
        """Rollbar's own item url when supplied, else the counter link.

        Counter links only resolve within a project, so without a configured
        project the item id link is used instead.
        """
        if event.url:
            return event.url
        if self.project:
            return self.item_velocity.format(
                project=self.project, counter=event.counter, item_id=event.item_id
            )
        return self.item_by_id.format(item_id=event.item_id, counter=event.counter)

    def deploy_link(self, deploy_id: int) -> str:
        return self.deploy.format(deploy_id=deploy_id)


def truncate(text: str, length: int) -> str:
    """Shorten text to ``length`` characters, appending ``...`` if anything was cut."""
    if len(text) > length:
        return f"{text[:length]}..."
    return text


def code_block(text: str) -> str:
    return f"```\n{text}\n```"


def deploy_user(event: Event) -> str:
    """The local username that ran the deploy, or ``unknown user``."""
    if event.deploy is not None and event.deploy.local_username:
        return event.deploy.local_username
    return UNKNOWN_DEPLOY_USER


def deploy_datetime(event: Event, tz: tzinfo = timezone.utc) -> str:
    """Deploy finish time, e.g. ``2019-03-04 18:21:05 UTC +0000``.

    A value outside the platform's datetime range (such as a millisecond
    timestamp) is rendered as the raw number.
    """
    finish_time = event.deploy.finish_time if event.deploy is not None else 0
    try:
        return datetime.fromtimestamp(finish_time, tz).strftime(DEPLOY_TIME_FORMAT)
    except (ValueError, OverflowError, OSError):
        return str(finish_time)


def _level(event: Event) -> str:
    level = event.occurrence.level if event.occurrence is not None else ""
    return level.title()


def _prefixed(prefix: str) -> Callable[[Event], str]:
    def title(event: Event) -> str:
        return f"{prefix} {_level(event)}".rstrip()

    return title


def _occurrence_title(event: Event) -> str:
    return f"Occurrence - {_level(event)}".rstrip()


def _repeat_title(event: Event) -> str:
    return f"{event.occurrence_count}th {_level(event)}".rstrip()


def _velocity_title(event: Event) -> str:
    trigger = event.trigger or VelocityTrigger()
    return f"{trigger.threshold} occurrences in {trigger.window_description}".rstrip()


def _fixed(text: str) -> Callable[[Event], str]:
    def title(event: Event) -> str:
        return text

    return title


@dataclass(frozen=True)
class FormatContext:
    """Inputs shared by every body builder."""

    title: str
    color: str
    pretext: str | None
    links: LinkTemplates
    tz: tzinfo


Builder = Callable[[Event, FormatContext], Attachment | TestMessage]


def _standard_body(event: Event, ctx: FormatContext) -> Attachment:
    occurrence = event.occurrence or OccurrenceRecord(source=OccurrenceSource.MISSING)
    environment = occurrence.environment or event.item_environment
    item_link = ctx.links.item_link(occurrence.uuid)
    occurrence_link = ctx.links.occurrence_link(occurrence.uuid)
    text = occurrence.exception_text or NO_EXCEPTION_NOTICE

    return Attachment(
        color=ctx.color,
        fallback=f"[{environment}] {ctx.title} - {truncate(text, POST_FALLBACK_MAX_LENGTH)}",
        title=ctx.title,
        title_link=item_link,
        text=code_block(truncate(text, POST_TEXT_MAX_LENGTH)),
        fields=(
            AttachmentField(title="Environment", value=environment),
            AttachmentField(title="Framework", value=occurrence.framework),
            AttachmentField(title="Language", value=occurrence.language),
            AttachmentField(
                title="Links",
                value=f"[Item]({item_link}) | [Occurrence]({occurrence_link})",
            ),
        ),
        pretext=ctx.pretext,
    )


def _velocity_body(event: Event, ctx: FormatContext) -> Attachment:
    # Rollbar sends no occurrence data with velocity alerts
    return Attachment(
        color=ctx.color,
        fallback=ctx.title,
        title=ctx.title,
        title_link=ctx.links.velocity_link(event),
        text=code_block(VELOCITY_NOTICE),
        pretext=ctx.pretext,
    )


def _deploy_body(event: Event, ctx: FormatContext) -> Attachment:
    deploy = event.deploy or DeployRecord()
    text = (
        f"`{deploy_datetime(event, ctx.tz)}` **{deploy_user(event)}** "
        f"deployed `{deploy.environment}` revision `{deploy.revision}`"
    )
    return Attachment(
        color=ctx.color,
        fallback=f"[{ctx.title}] {deploy.environment} - {text}",
        title=ctx.title,
        title_link=ctx.links.deploy_link(deploy.id),
        text=text,
        pretext=ctx.pretext,
    )


def _test_body(event: Event, ctx: FormatContext) -> TestMessage:
    return TestMessage(message=event.message)


@dataclass(frozen=True)
class EventRule:
    title: Callable[[Event], str]
    build: Builder


EVENT_RULES: dict[EventName, EventRule] = {
    EventName.NEW_ITEM: EventRule(_prefixed("New"), _standard_body),
    EventName.OCCURRENCE: EventRule(_occurrence_title, _standard_body),
    EventName.REACTIVATED_ITEM: EventRule(_prefixed("Reactivated"), _standard_body),
    EventName.REOPENED_ITEM: EventRule(_prefixed("Reopened"), _standard_body),
    EventName.RESOLVED_ITEM: EventRule(_prefixed("Resolved"), _standard_body),
    EventName.EXP_REPEAT_ITEM: EventRule(_repeat_title, _standard_body),
    EventName.ITEM_VELOCITY: EventRule(_velocity_title, _velocity_body),
    EventName.DEPLOY: EventRule(_fixed("Deploy"), _deploy_body),
    EventName.TEST: EventRule(_fixed(""), _test_body),
    EventName.OTHER: EventRule(_level, _standard_body),
}


def event_title(event: Event) -> str:
    return EVENT_RULES[event.event_name].title(event)


def event_color(event: Event) -> str:
    return EVENT_COLORS.get(event.event_name, "")


def format_event(
    event: Event,
    mentions: MentionList,
    links: LinkTemplates | None = None,
    tz: tzinfo = timezone.utc,
) -> Attachment | TestMessage:
    """Format an event as an attachment, or a plain message for `test` events.

    Missing string fields are rendered as empty strings. The pretext is the
    rendered mention list unless it is empty.
    """
    rule = EVENT_RULES[event.event_name]
    rendered = mentions.render()
    ctx = FormatContext(
        title=rule.title(event),
        color=event_color(event),
        pretext=rendered if rendered != EMPTY_RENDERING else None,
        links=links or LinkTemplates(),
        tz=tz,
    )
    return rule.build(event, ctx)
