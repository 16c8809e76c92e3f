"""Host chat server objects (subset of the Mattermost v4 API schema)."""

from pydantic import BaseModel, Field

POST_TYPE_SLACK_ATTACHMENT = "slack_attachment"


class Team(BaseModel):
    id: str
    name: str = ""
    display_name: str = ""


class Channel(BaseModel):
    id: str
    name: str = ""
    team_id: str = ""


class User(BaseModel):
    id: str
    username: str = ""


class Post(BaseModel):
    """A post to create in a channel."""

    channel_id: str
    user_id: str = ""
    message: str = ""
    type: str = ""
    props: dict = Field(default_factory=dict)
