"""Rollbar webhook router."""

from fastapi import APIRouter, Depends, Request, Response

from matterbar.dependencies import get_plugin
from matterbar.plugin import MatterbarPlugin
from matterbar.webhooks.verification import verify_webhook_secret

router = APIRouter(prefix="", tags=["rollbar"])


@router.post("/notify", dependencies=[Depends(verify_webhook_secret)])
async def notify(
    request: Request,
    team: str = "",
    channel: str = "",
    plugin: MatterbarPlugin = Depends(get_plugin),
) -> Response:
    """Receive a Rollbar webhook and post it to the requested or default channel.

    The raw body is handed to the normalizer so decode errors are reported
    with the parser's own message. Success is an empty 200.
    """
    body = await request.body()
    await plugin.handle_webhook(body, team=team, channel=channel)
    return Response(status_code=200)
