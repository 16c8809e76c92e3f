"""Chat attachment produced by the formatter.

Mattermost accepts Slack's message attachment schema, so the wire form is
rendered through slack_sdk's attachment models.
"""

from pydantic import BaseModel, ConfigDict
from slack_sdk.models.attachments import Attachment as SlackAttachment
from slack_sdk.models.attachments import AttachmentField as SlackAttachmentField


class AttachmentField(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str
    value: str
    short: bool = True


class Attachment(BaseModel):
    """A richly formatted message block: color, title, link, fields, body."""

    model_config = ConfigDict(frozen=True)

    color: str = ""
    fallback: str = ""
    title: str = ""
    title_link: str = ""
    text: str = ""
    fields: tuple[AttachmentField, ...] = ()
    pretext: str | None = None

    def to_slack(self) -> dict:
        """Render as a Slack-compatible attachment dict (empty values omitted)."""
        attachment = SlackAttachment(
            text=self.text,
            fallback=self.fallback or None,
            color=self.color or None,
            title=self.title or None,
            title_link=self.title_link or None,
            pretext=self.pretext,
            fields=[
                SlackAttachmentField(title=f.title, value=f.value, short=f.short)
                for f in self.fields
            ]
            or None,
        )
        return attachment.to_dict()


class TestMessage(BaseModel):
    """Plain text post used for Rollbar's `test` event instead of an attachment."""

    __test__ = False  # not a pytest test class

    model_config = ConfigDict(frozen=True)

    message: str
