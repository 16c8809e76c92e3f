"""Rollbar webhook ingress."""

from matterbar.webhooks.router import router

__all__ = ["router"]
