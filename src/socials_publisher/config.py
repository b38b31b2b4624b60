"""Publisher configuration loading and validation."""

from __future__ import annotations

import os
from typing import Any

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from socials_publisher.constants import (
    GRAPH_API_HOST,
    GRAPH_API_VERSION_DEFAULT,
    GRAPH_REQUEST_TIMEOUT_SECONDS,
)

# Load .env file
load_dotenv()


class PublisherSettings(BaseSettings):
    """Instagram publishing settings, read from ``INSTAGRAM_*`` variables.

    Environment:
        INSTAGRAM_ACCESS_TOKEN      Graph API access token (required to publish)
        INSTAGRAM_USER_ID           Default node for items that don't set one
        INSTAGRAM_GRAPH_HOST        Graph API host
        INSTAGRAM_API_VERSION       Default Graph API version
        INSTAGRAM_REQUEST_TIMEOUT   Per-request timeout in seconds
        INSTAGRAM_CONTINUE_ON_FAIL  Keep going when an item fails
        INSTAGRAM_CONCURRENCY       Items published at once
    """

    model_config = SettingsConfigDict(
        env_prefix="INSTAGRAM_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    access_token: str = ""
    user_id: str = ""
    graph_host: str = GRAPH_API_HOST
    api_version: str = GRAPH_API_VERSION_DEFAULT
    request_timeout: float = Field(default=GRAPH_REQUEST_TIMEOUT_SECONDS, gt=0)
    continue_on_fail: bool = False
    concurrency: int = Field(default=1, ge=1)

    def check_credentials(self) -> tuple[bool, str]:
        """Validate that credentials needed to publish are present.

        Returns:
            Tuple of (is_valid, error_message).
        """
        if not self.access_token:
            return False, "Missing Instagram credentials: access_token (or INSTAGRAM_ACCESS_TOKEN)"
        return True, "OK"


def resolve_env(value: Any) -> Any:
    """Resolve ENV:VAR_NAME to the environment variable's value.

    Example:
        resolve_env("ENV:INSTAGRAM_USER_ID") -> "17841405793187218"
        resolve_env("literal_value") -> "literal_value"
    """
    if isinstance(value, str) and value.startswith("ENV:"):
        return os.getenv(value[4:], "")
    return value


def resolve_dict(data: dict[str, Any]) -> dict[str, Any]:
    """Resolve all ENV: references in a dictionary, recursing into lists and dicts."""
    resolved: dict[str, Any] = {}
    for key, value in data.items():
        if isinstance(value, dict):
            resolved[key] = resolve_dict(value)
        elif isinstance(value, list):
            resolved[key] = [resolve_dict(v) if isinstance(v, dict) else resolve_env(v) for v in value]
        else:
            resolved[key] = resolve_env(value)
    return resolved
