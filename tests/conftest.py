"""Pytest configuration and shared fixtures."""

from collections.abc import Callable
from unittest.mock import AsyncMock

import pytest

from asana_sync.config.inputs import ActionInputs
from asana_sync.enums import ActionName
from asana_sync.models.domain import (
    ActionRequest,
    Commit,
    CommitPushEvent,
    EventContext,
    IssueEvent,
    PullRequestEvent,
)
from asana_sync.providers.base import SourceControlClient, WorkTrackingClient

TASK_URL = "https://app.asana.com/0/{project}/{task}"


def task_link(project: str, task: str, suffix: str = "") -> str:
    """Asana task URL as it appears in PR bodies and commit messages."""
    return TASK_URL.format(project=project, task=task) + suffix


@pytest.fixture
def mock_work() -> AsyncMock:
    """Work-tracking client whose methods are all AsyncMocks."""
    work = AsyncMock(spec=WorkTrackingClient)
    work.create_item.return_value = "9001"
    work.list_items_in_section.return_value = []
    return work


@pytest.fixture
def mock_scm() -> AsyncMock:
    """Source-control client whose methods are all AsyncMocks."""
    scm = AsyncMock(spec=SourceControlClient)
    scm.get_latest_release.return_value = "v1.2.3"
    scm.get_pull_request.return_value = "Original body"
    return scm


@pytest.fixture
def pr_event() -> PullRequestEvent:
    """Pull request whose body links two tasks of project 111."""
    return PullRequestEvent(
        title="Fix login redirect",
        body=(
            "Task/Issue URL: " + task_link("111", "201") + "\n"
            "Also fixes\nTask/Issue URL: " + task_link("111", "202", "/f")
        ),
        url="https://github.com/acme/app/pull/7",
        number=7,
        author="octocat",
        base_owner="acme",
        head_owner="acme",
    )


@pytest.fixture
def push_event() -> CommitPushEvent:
    """Push with two commits, each linking tasks."""
    return CommitPushEvent(
        commits=(
            Commit(
                id="0123456789abcdef",
                message="Fix crash on start\n\nTask/Issue URL: " + task_link("111", "301"),
                author="Alice",
                url="https://github.com/acme/app/commit/0123456789abcdef",
            ),
            Commit(
                id="fedcba9876543210",
                message=(
                    "Tidy settings\n\nTask/Issue URL: "
                    + task_link("111", "302")
                    + "\nTask/Issue URL: "
                    + task_link("222", "303")
                ),
                author="Bob",
                url="https://github.com/acme/app/commit/fedcba9876543210",
            ),
        )
    )


@pytest.fixture
def issue_event() -> IssueEvent:
    return IssueEvent(
        title="Crash when opening settings",
        body="Steps to reproduce...",
        url="https://github.com/acme/app/issues/12",
    )


@pytest.fixture
def make_request() -> Callable[..., ActionRequest]:
    """Build an ActionRequest from an action, an event and input values."""

    def _make(action: ActionName, context: EventContext, **values: str) -> ActionRequest:
        inputs = {name.replace("_", "-"): value for name, value in values.items()}
        inputs.setdefault("trigger-phrase", "Task/Issue URL: ")
        return ActionRequest(action=action, inputs=ActionInputs(values=inputs), context=context)

    return _make
