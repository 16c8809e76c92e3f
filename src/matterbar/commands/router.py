"""Slash command router."""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from matterbar.commands.verification import verify_command_request
from matterbar.dependencies import get_plugin
from matterbar.plugin import MatterbarPlugin

router = APIRouter(prefix="", tags=["commands"])


@router.post("/command")
async def rollbar_command(
    form: dict = Depends(verify_command_request),
    plugin: MatterbarPlugin = Depends(get_plugin),
) -> JSONResponse:
    """Run `/rollbar (notify|remove|list) @username` for the calling channel."""
    command = f"{form.get('command', '')} {form.get('text', '')}"
    response = await plugin.execute_command(form.get("channel_id", ""), command)
    return JSONResponse(response.model_dump())
