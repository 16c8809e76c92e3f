"""Shared FastAPI dependencies."""

from fastapi import Request

from matterbar.plugin import MatterbarPlugin


def get_plugin(request: Request) -> MatterbarPlugin:
    """Return the plugin activated by the application lifespan."""
    return request.app.state.plugin
