"""Enumerations for asana-sync action identifiers."""

from enum import Enum

from asana_sync.exceptions import ConfigurationError


class ActionName(str, Enum):
    """Action identifiers accepted by the ``action`` input.

    Each member is routed to exactly one orchestrator routine by the
    dispatcher.
    """

    CREATE_ISSUE_TASK = "create-asana-issue-task"
    NOTIFY_PR_APPROVED = "notify-pr-approved"
    NOTIFY_PR_MERGED = "notify-pr-merged"
    CHECK_PR_MEMBERSHIP = "check-pr-membership"
    ADD_COMMIT_COMMENT = "add-asana-commit-comment"
    ADD_PR_COMMENT = "add-asana-pr-comment"
    ADD_TASK_TO_PROJECT = "add-task-asana-project"
    CREATE_PR_TASK = "create-asana-pr-task"
    GET_LATEST_RELEASE = "get-latest-repo-release"
    CREATE_TASK = "create-asana-task"
    ADD_TASK_PR_DESCRIPTION = "add-task-pr-description"
    ADD_TAG = "add-tag-to-task"
    REMOVE_TAG = "remove-tag-from-task"
    MOVE_TO_SECTION = "move-task-to-section"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, name: str) -> "ActionName":
        """Resolve an action identifier.

        Raises:
            ConfigurationError: If the identifier is not recognised
        """
        try:
            return cls(name.strip())
        except ValueError as e:
            raise ConfigurationError(f"unexpected action {name}") from e

    @property
    def needs_source_control(self) -> bool:
        """Whether the action talks to GitHub."""
        return self in (ActionName.GET_LATEST_RELEASE, ActionName.ADD_TASK_PR_DESCRIPTION)

    @property
    def needs_work_tracker(self) -> bool:
        """Whether the action talks to Asana."""
        return self not in (
            ActionName.CHECK_PR_MEMBERSHIP,
            ActionName.GET_LATEST_RELEASE,
            ActionName.ADD_TASK_PR_DESCRIPTION,
        )
