"""Factories that build provider clients from action inputs."""

import structlog

from asana_sync.config.inputs import ActionInputs
from asana_sync.config.settings import RunnerSettings
from asana_sync.providers.asana_rest import AsanaRestProvider
from asana_sync.providers.github_rest import GitHubRestProvider

log = structlog.get_logger(__name__)


def create_work_tracker(inputs: ActionInputs, settings: RunnerSettings) -> AsanaRestProvider:
    """Build the Asana client.

    Raises:
        ConfigurationError: If ``asana-pat`` is not supplied
    """
    token = inputs.require("asana-pat")
    log.debug("creating_work_tracker", base_url=settings.asana_base_url)
    return AsanaRestProvider(token=token, base_url=settings.asana_base_url)


def create_source_control(
    inputs: ActionInputs,
    settings: RunnerSettings,
    token_required: bool = True,
) -> GitHubRestProvider:
    """Build the GitHub client.

    Args:
        inputs: Action inputs
        settings: Runner settings (API URL)
        token_required: Whether a missing ``github-pat`` is a configuration error

    Raises:
        ConfigurationError: If the token is required and not supplied
    """
    token = inputs.require("github-pat") if token_required else inputs.get("github-pat")
    log.debug("creating_source_control", base_url=settings.github_api_url)
    return GitHubRestProvider(token=token, base_url=settings.github_api_url)
