"""
Action dispatch.

Maps every ``ActionName`` to its orchestrator routine and runs it to
completion. The routine table is checked against the enum when the dispatcher
is built, so an action without a routine is caught before anything runs.
"""

from collections.abc import Awaitable, Callable

import structlog

from asana_sync.config.inputs import ActionInputs
from asana_sync.engine.orchestrator import ActionOrchestrator
from asana_sync.enums import ActionName
from asana_sync.exceptions import ConfigurationError
from asana_sync.models.domain import ActionRequest, ActionResult, EventContext

log = structlog.get_logger(__name__)

Routine = Callable[[ActionRequest], Awaitable[ActionResult]]

# Action to orchestrator method name
ACTION_ROUTINE_MAP: dict[ActionName, str] = {
    ActionName.CREATE_ISSUE_TASK: "create_issue_task",
    ActionName.NOTIFY_PR_APPROVED: "notify_pr_approved",
    ActionName.NOTIFY_PR_MERGED: "complete_pr_tasks",
    ActionName.CHECK_PR_MEMBERSHIP: "check_pr_membership",
    ActionName.ADD_COMMIT_COMMENT: "comment_on_commit_tasks",
    ActionName.ADD_PR_COMMENT: "comment_on_pr_tasks",
    ActionName.ADD_TASK_TO_PROJECT: "add_task_to_project",
    ActionName.CREATE_PR_TASK: "create_pr_task",
    ActionName.GET_LATEST_RELEASE: "get_latest_release",
    ActionName.CREATE_TASK: "create_task",
    ActionName.ADD_TASK_PR_DESCRIPTION: "add_task_to_pr_description",
    ActionName.ADD_TAG: "tag_tasks",
    ActionName.REMOVE_TAG: "untag_tasks",
    ActionName.MOVE_TO_SECTION: "move_tasks_to_section",
}


class Dispatcher:
    """Routes an action request to its routine."""

    def __init__(
        self,
        orchestrator: ActionOrchestrator,
        routine_map: dict[ActionName, str] | None = None,
    ):
        """Initialize dispatcher.

        Args:
            orchestrator: Orchestrator providing the routines
            routine_map: Action to method name table (defaults to ACTION_ROUTINE_MAP)

        Raises:
            ConfigurationError: If an action has no routine
        """
        routine_map = ACTION_ROUTINE_MAP if routine_map is None else routine_map
        missing = [action.value for action in ActionName if action not in routine_map]
        if missing:
            raise ConfigurationError(f"No routine registered for actions: {', '.join(missing)}")

        self.orchestrator = orchestrator
        self.routine_names = dict(routine_map)
        self.routines: dict[ActionName, Routine] = {
            action: getattr(orchestrator, method) for action, method in routine_map.items()
        }

    async def dispatch(self, request: ActionRequest) -> ActionResult:
        """Run the routine for ``request.action`` and wait for all of its operations.

        Returns:
            The routine's result, including every per-reference outcome
        """
        routine = self.routines[request.action]
        log.info("calling_action", action=str(request.action), routine=self.routine_names[request.action])
        return await routine(request)

    async def dispatch_name(self, name: str, inputs: ActionInputs, context: EventContext) -> ActionResult:
        """Resolve ``name``, build the request and dispatch.

        Raises:
            ConfigurationError: If the name is not a recognised action; no routine runs
        """
        action = ActionName.parse(name)
        return await self.dispatch(ActionRequest(action=action, inputs=inputs, context=context))
