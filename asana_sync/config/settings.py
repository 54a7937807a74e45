"""
Runner settings using pydantic-settings.

These are the values the Actions runner (or a developer running locally)
provides through well-known environment variables, as opposed to the action
inputs handled by ``asana_sync.config.inputs``.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from asana_sync.exceptions import ConfigurationError


class RunnerSettings(BaseSettings):
    """Environment of the current run."""

    model_config = SettingsConfigDict(
        env_prefix="ASANA_SYNC_",
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore",
    )

    github_event_path: str | None = Field(
        default=None, validation_alias="GITHUB_EVENT_PATH", description="Path of the event payload JSON"
    )
    github_event_name: str | None = Field(
        default=None, validation_alias="GITHUB_EVENT_NAME", description="Name of the triggering event"
    )
    github_output: str | None = Field(
        default=None, validation_alias="GITHUB_OUTPUT", description="File that collects step outputs"
    )
    github_api_url: str = Field(
        default="https://api.github.com", validation_alias="GITHUB_API_URL", description="GitHub REST API base URL"
    )
    asana_base_url: str = Field(default="https://app.asana.com/api/1.0", description="Asana REST API base URL")
    reference_host: str = Field(default="app.asana.com", description="Host of task links in event text")
    log_level: str = Field(default="INFO", description="Minimum log level")

    def load_event_payload(self) -> dict[str, Any]:
        """Read the webhook payload of the triggering event.

        Returns:
            The parsed payload, or an empty dict when no event file is configured

        Raises:
            ConfigurationError: If the file cannot be read or is not a JSON object
        """
        if not self.github_event_path:
            return {}

        event_file = Path(self.github_event_path)
        try:
            with open(event_file) as f:
                payload = json.load(f)
        except OSError as e:
            raise ConfigurationError(f"Cannot read event payload: {event_file}") from e
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid JSON in event payload {event_file}: {e}") from e

        if not isinstance(payload, dict):
            raise ConfigurationError("Event payload must be a JSON object")
        return payload
