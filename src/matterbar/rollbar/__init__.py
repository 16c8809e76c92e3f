"""Rollbar webhook handling: payload normalization and attachment formatting."""

from matterbar.rollbar.formatter import (
    EVENT_COLORS,
    EVENT_RULES,
    LinkTemplates,
    deploy_datetime,
    deploy_user,
    event_title,
    format_event,
    truncate,
)
from matterbar.rollbar.normalizer import normalize, parse_event, resolve_exception

__all__ = [
    "EVENT_COLORS",
    "EVENT_RULES",
    "LinkTemplates",
    "deploy_datetime",
    "deploy_user",
    "event_title",
    "format_event",
    "normalize",
    "parse_event",
    "resolve_exception",
    "truncate",
]
