"""Rollbar webhook authentication as a FastAPI dependency."""

from fastapi import Depends, Request

from matterbar.dependencies import get_plugin
from matterbar.plugin import MatterbarPlugin


async def verify_webhook_secret(
    request: Request,
    plugin: MatterbarPlugin = Depends(get_plugin),
) -> None:
    """Check the `auth` query parameter against the configured secret.

    Raises AuthFailure (401) if it is missing or does not match.
    """
    plugin.authenticate(request.query_params.get("auth", ""))
