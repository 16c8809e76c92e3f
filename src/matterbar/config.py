"""Application configuration via pydantic-settings."""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Mattermost
    mattermost_url: str = ""
    mattermost_token: str = ""

    # Where webhooks are posted when the request names no team/channel
    default_team: str = ""
    default_channel: str = ""

    # Account the relay posts as, and an optional PNG/JPEG set as its avatar
    username: str = "rollbar"
    bot_icon_path: str = ""

    # Mention list storage: "mattermost" (bot preferences), "file" or "memory"
    kv_backend: Literal["mattermost", "file", "memory"] = "mattermost"
    kv_file: str = "matterbar_kv.json"

    # Webhook and slash command authentication
    secret: str = ""
    command_token: str = ""

    # Rollbar links
    item_url: str = "https://rollbar.com/item/uuid/?uuid={uuid}"
    occurrence_url: str = "https://rollbar.com/occurrence/uuid/?uuid={uuid}"
    # Counter links need the "account/project" slug, e.g. "acme/web"
    rollbar_project: str = ""
    item_velocity_url: str = "https://rollbar.com/{project}/items/{counter}/"
    item_id_url: str = "https://rollbar.com/item/{item_id}/"
    deploy_url: str = "https://rollbar.com/deploy/{deploy_id}/"

    # Zone used to render deploy finish times
    deploy_timezone: str = "UTC"

    # App
    environment: str = "development"
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8080


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings. Lazy initialization to avoid import-time errors."""
    return Settings()
