"""Matterbar: relay Rollbar webhooks into Mattermost channels."""

__version__ = "0.1.0"
