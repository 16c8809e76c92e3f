"""FastAPI application with lifespan, error mapping and health endpoint."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from matterbar.commands.router import router as command_router
from matterbar.config import Settings, get_settings
from matterbar.errors import MatterbarError
from matterbar.host.base import ChatHost
from matterbar.host.client import get_chat_host
from matterbar.logging_config import configure_logging
from matterbar.plugin import MatterbarPlugin
from matterbar.webhooks.router import router as webhook_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: configure logging, bind the host and activate the plugin."""
    settings: Settings = app.state.settings or get_settings()
    configure_logging(settings.log_level)

    host: ChatHost = app.state.host or get_chat_host()
    plugin = MatterbarPlugin(host, settings)
    await plugin.on_activate()
    app.state.plugin = plugin
    logger.info("Matterbar activated as user %s", plugin.bot_user_id)
    yield

    close = getattr(host, "aclose", None)
    if close is not None:
        await close()


async def matterbar_error_handler(request: Request, exc: MatterbarError) -> JSONResponse:
    """Answer with the status carried by the error and its message as detail."""
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


def create_app(settings: Settings | None = None, host: ChatHost | None = None) -> FastAPI:
    """Build the application. Settings and host default to the cached singletons."""
    app = FastAPI(
        title="Matterbar",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.host = host
    app.add_exception_handler(MatterbarError, matterbar_error_handler)
    app.include_router(webhook_router)
    app.include_router(command_router)

    @app.get("/health")
    async def health():
        """Health check endpoint for container probes and local development."""
        return {
            "status": "ok",
            "service": "matterbar",
            "version": "0.1.0",
        }

    return app


app = create_app()
