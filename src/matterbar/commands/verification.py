"""Slash command request verification as a FastAPI dependency."""

from urllib.parse import parse_qsl

from fastapi import Depends, Request

from matterbar.dependencies import get_plugin
from matterbar.plugin import MatterbarPlugin


async def verify_command_request(
    request: Request,
    plugin: MatterbarPlugin = Depends(get_plugin),
) -> dict:
    """Parse the form-encoded slash command body and check its token.

    Mattermost sends the token both as ``Authorization: Token <token>`` and
    as the ``token`` form field; either is accepted. Raises AuthFailure (401)
    on mismatch.
    """
    body = await request.body()
    form = dict(parse_qsl(body.decode("utf-8", errors="replace"), keep_blank_values=True))

    token = form.get("token", "")
    authorization = request.headers.get("Authorization", "")
    if authorization.startswith("Token "):
        token = authorization.removeprefix("Token ")

    plugin.authenticate_command(token)
    return form
