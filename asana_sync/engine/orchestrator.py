"""
Action routines for asana-sync.

This module provides the ActionOrchestrator, which holds one routine per
action family. Reference-driven routines share a single shape:

1. pick the text sources from the event (a PR or issue body, or every commit
   message of a push, in order)
2. extract task references from each source
3. run one Asana operation per reference, concurrently within a source, and
   finish a source before starting the next
4. record one OperationOutcome per attempted operation

A failed operation never stops its siblings: ``CollaboratorError`` is caught
per reference, logged and recorded as a failed outcome. The only exception a
routine lets escape is ``ConfigurationError``.

Single-target routines (task creation, PR description, releases) report an
unrecoverable remote failure through ``ActionResult.error`` instead.

Example:
    >>> orchestrator = ActionOrchestrator(work=asana, scm=github)
    >>> result = await orchestrator.tag_tasks(request)
    >>> [o.reference.item_id for o in result.failed_outcomes]
"""

import asyncio
from collections.abc import Awaitable, Callable, Iterable

import structlog

from asana_sync.engine import formatting
from asana_sync.engine.extractor import ReferenceExtractor
from asana_sync.engine.resolver import TaskResolver
from asana_sync.exceptions import CollaboratorError, ConfigurationError
from asana_sync.models.domain import (
    ActionRequest,
    ActionResult,
    CommitPushEvent,
    IssueEvent,
    OperationOutcome,
    PullRequestEvent,
    Reference,
)
from asana_sync.providers.base import SourceControlClient, WorkTrackingClient

log = structlog.get_logger(__name__)

Operation = Callable[[Reference], Awaitable[None]]
ReferenceFilter = Callable[[Reference], bool]


class ActionOrchestrator:
    """Runs action routines against the Asana and GitHub collaborators.

    Attributes:
        work: Work-tracking client, required by every Asana routine
        scm: Source-control client, required by the GitHub routines
        extractor: Reference extractor used on event text
    """

    def __init__(
        self,
        work: WorkTrackingClient | None = None,
        scm: SourceControlClient | None = None,
        extractor: ReferenceExtractor | None = None,
    ) -> None:
        self.work = work
        self.scm = scm
        self.extractor = extractor or ReferenceExtractor()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _work(self) -> WorkTrackingClient:
        if self.work is None:
            raise ConfigurationError("This action requires an Asana client")
        return self.work

    def _scm(self) -> SourceControlClient:
        if self.scm is None:
            raise ConfigurationError("This action requires a GitHub client")
        return self.scm

    @staticmethod
    def _pull_request(request: ActionRequest) -> PullRequestEvent:
        if not isinstance(request.context, PullRequestEvent):
            raise ConfigurationError(f"{request.action} requires a pull_request event")
        return request.context

    @staticmethod
    def _issue(request: ActionRequest) -> IssueEvent:
        if not isinstance(request.context, IssueEvent):
            raise ConfigurationError(f"{request.action} requires an issues event")
        return request.context

    @staticmethod
    def _event_texts(request: ActionRequest) -> list[str]:
        """PR or issue body, otherwise each commit message in push order."""
        context = request.context
        if isinstance(context, CommitPushEvent):
            return [commit.message for commit in context.commits]
        return [context.body]

    @staticmethod
    def _trigger(request: ActionRequest) -> str:
        return request.inputs.get("trigger-phrase", strip=False)

    async def _attempt(self, reference: Reference, operation: Operation) -> OperationOutcome:
        """Run one operation, turning a collaborator failure into an outcome."""
        try:
            await operation(reference)
        except CollaboratorError as e:
            log.error(
                "task_operation_failed",
                task=reference.item_id,
                project=reference.container_id,
                error=str(e),
            )
            return OperationOutcome.failed(reference, str(e))
        return OperationOutcome.ok(reference)

    async def _apply(
        self,
        sources: Iterable[tuple[str, Operation]],
        trigger: str,
        accept: ReferenceFilter | None = None,
    ) -> list[OperationOutcome]:
        """Extract references from each source and run its operation on them.

        Args:
            sources: (text, operation) pairs, processed in order
            trigger: Trigger phrase passed to the extractor
            accept: Optional filter; rejected references get no outcome

        Returns:
            Outcomes in discovery order
        """
        outcomes: list[OperationOutcome] = []
        for text, operation in sources:
            references = self.extractor.extract(text, trigger)
            if accept is not None:
                references = [r for r in references if accept(r)]
            if not references:
                continue
            outcomes.extend(await asyncio.gather(*(self._attempt(r, operation) for r in references)))
        return outcomes

    def _result(self, request: ActionRequest, outcomes: list[OperationOutcome]) -> ActionResult:
        result = ActionResult(action=request.action, outcomes=outcomes)
        log.info(
            "action_finished",
            action=str(request.action),
            attempted=len(outcomes),
            failed=len(result.failed_outcomes),
        )
        return result

    # ------------------------------------------------------------------
    # Reference-driven routines
    # ------------------------------------------------------------------

    async def comment_on_pr_tasks(self, request: ActionRequest) -> ActionResult:
        """Comment on every task linked from the PR body."""
        pr = self._pull_request(request)
        work = self._work()
        pinned = request.inputs.get_bool("is-pinned")
        custom = request.inputs.get("comment-text")
        if custom:
            log.info("using_custom_comment_text", text=custom)
        text = formatting.wrap_body(custom) if custom else formatting.pull_request_comment(pr.url)

        async def comment(ref: Reference) -> None:
            await work.add_note(ref.item_id, text, pinned)

        outcomes = await self._apply([(pr.body, comment)], self._trigger(request))
        return self._result(request, outcomes)

    async def comment_on_commit_tasks(self, request: ActionRequest) -> ActionResult:
        """Comment on every task linked from each pushed commit.

        Each commit gets its own default comment (short sha, first line of the
        message, committer) unless ``comment-text`` overrides it.
        """
        if not isinstance(request.context, CommitPushEvent):
            raise ConfigurationError(f"{request.action} requires a push event")
        work = self._work()
        pinned = request.inputs.get_bool("is-pinned")
        custom = request.inputs.get("comment-text")
        if custom:
            log.info("using_custom_comment_text", text=custom)

        def commenter(text: str) -> Operation:
            async def comment(ref: Reference) -> None:
                await work.add_note(ref.item_id, text, pinned)

            return comment

        sources = [
            (
                commit.message,
                commenter(formatting.wrap_body(custom) if custom else formatting.commit_comment(commit)),
            )
            for commit in request.context.commits
        ]
        outcomes = await self._apply(sources, self._trigger(request))
        return self._result(request, outcomes)

    async def notify_pr_approved(self, request: ActionRequest) -> ActionResult:
        """Tell every linked task that the PR was approved."""
        pr = self._pull_request(request)
        work = self._work()
        text = formatting.approval_comment(pr.url)

        async def comment(ref: Reference) -> None:
            await work.add_note(ref.item_id, text, False)

        outcomes = await self._apply([(pr.body, comment)], self._trigger(request))
        return self._result(request, outcomes)

    async def complete_pr_tasks(self, request: ActionRequest) -> ActionResult:
        """Mark every linked task complete (or incomplete, per ``is-complete``)."""
        pr = self._pull_request(request)
        work = self._work()
        completed = request.inputs.get_bool("is-complete")

        async def mark(ref: Reference) -> None:
            log.info("marking_task", task=ref.item_id, completed=completed)
            await work.set_completed(ref.item_id, completed)

        outcomes = await self._apply([(pr.body, mark)], self._trigger(request))
        return self._result(request, outcomes)

    async def tag_tasks(self, request: ActionRequest) -> ActionResult:
        """Add ``asana-tag-id`` to every linked task."""
        tag_id = request.inputs.require("asana-tag-id")
        work = self._work()

        async def tag(ref: Reference) -> None:
            await work.add_tag(ref.item_id, tag_id)

        sources = [(text, tag) for text in self._event_texts(request)]
        outcomes = await self._apply(sources, self._trigger(request))
        return self._result(request, outcomes)

    async def untag_tasks(self, request: ActionRequest) -> ActionResult:
        """Remove ``asana-tag-id`` from every linked task."""
        tag_id = request.inputs.require("asana-tag-id")
        work = self._work()

        async def untag(ref: Reference) -> None:
            log.info("removing_tag", tag=tag_id, task=ref.item_id)
            await work.remove_tag(ref.item_id, tag_id)

        sources = [(text, untag) for text in self._event_texts(request)]
        outcomes = await self._apply(sources, self._trigger(request))
        return self._result(request, outcomes)

    async def move_tasks_to_section(self, request: ActionRequest) -> ActionResult:
        """Move linked tasks of ``asana-project-id`` into ``asana-section-id``.

        Links that point at another project are skipped without an outcome.
        """
        section_id = request.inputs.require("asana-section-id")
        project_id = request.inputs.require("asana-project-id")
        work = self._work()

        def in_project(ref: Reference) -> bool:
            if ref.container_id == project_id:
                return True
            log.info("task_not_in_project", task=ref.item_id, project=ref.container_id, expected=project_id)
            return False

        async def move(ref: Reference) -> None:
            log.info("moving_task", task=ref.item_id, section=section_id)
            await work.move_to_section(ref.item_id, section_id)

        sources = [(text, move) for text in self._event_texts(request)]
        outcomes = await self._apply(sources, self._trigger(request), accept=in_project)
        return self._result(request, outcomes)

    # ------------------------------------------------------------------
    # Single-target routines
    # ------------------------------------------------------------------

    async def _create_with_link(
        self,
        request: ActionRequest,
        name: str,
        notes: str,
        link_label: str,
        url: str,
    ) -> ActionResult:
        project_id = request.inputs.require("asana-project")
        work = self._work()
        result = ActionResult(action=request.action)

        try:
            gid = await work.create_item(name, notes, project_id)
        except CollaboratorError as e:
            log.error("task_create_failed", name=name, project=project_id, error=str(e))
            result.error = f"Failed to create Asana task: {e}"
            return result

        result.outputs["taskId"] = gid
        text = formatting.link_comment(link_label, url)

        async def pin_link(ref: Reference) -> None:
            await work.add_note(ref.item_id, text, True)

        result.outcomes.append(await self._attempt(Reference(project_id, gid), pin_link))
        return result

    async def create_issue_task(self, request: ActionRequest) -> ActionResult:
        """Create a task for a GitHub issue and pin a link back to it."""
        issue = self._issue(request)
        log.info("creating_task_from_issue", title=issue.title)
        return await self._create_with_link(
            request,
            name=f"Github Issue: {issue.title}",
            notes=f"Description: {issue.body}",
            link_label="Issue",
            url=issue.url,
        )

    async def create_pr_task(self, request: ActionRequest) -> ActionResult:
        """Create a task for a community pull request and pin a link back to it."""
        pr = self._pull_request(request)
        log.info("creating_task_from_pull_request", title=pr.title)
        return await self._create_with_link(
            request,
            name=f"Community Pull Request: {pr.title}",
            notes=f"Description: {pr.body}",
            link_label="Pull Request",
            url=pr.url,
        )

    async def add_task_to_project(self, request: ActionRequest) -> ActionResult:
        """Add ``asana-task-id`` to ``asana-project`` (and ``asana-section``)."""
        project_id = request.inputs.require("asana-project")
        section_id = request.inputs.get("asana-section") or None
        task_id = request.inputs.require("asana-task-id")
        work = self._work()

        async def add(ref: Reference) -> None:
            await work.add_to_container(ref.item_id, ref.container_id, section_id)

        outcome = await self._attempt(Reference(project_id, task_id), add)
        return ActionResult(action=request.action, outcomes=[outcome], error=outcome.error)

    async def create_task(self, request: ActionRequest) -> ActionResult:
        """Create a named task, skipping creation when the section already has one.

        Without ``asana-section`` the task is created directly in the project.
        With it, the section is searched first and an existing task of the same
        name is reported as a duplicate.
        """
        project_id = request.inputs.require("asana-project")
        section_id = request.inputs.get("asana-section") or None
        name = request.inputs.require("asana-task-name")
        description = request.inputs.require("asana-task-description")
        work = self._work()
        result = ActionResult(action=request.action)

        if section_id is not None:
            existing = await TaskResolver(work).find_by_name(section_id, name)
            if existing is not None:
                log.info("task_already_exists", gid=existing, name=name)
                result.outputs.update({"taskId": existing, "duplicate": "true"})
                return result

        try:
            gid = await work.create_item(name, description, project_id, section_id)
        except CollaboratorError as e:
            log.error("task_create_failed", name=name, project=project_id, error=str(e))
            result.error = f"Failed to create Asana task: {e}"
            return result

        result.outputs.update({"taskId": gid, "duplicate": "false"})
        return result

    async def add_task_to_pr_description(self, request: ActionRequest) -> ActionResult:
        """Prepend the task link to the body of ``github-pr``."""
        inputs = request.inputs
        owner = inputs.require("github-org")
        repo = inputs.require("github-repository")
        raw_number = inputs.require("github-pr")
        project_id = inputs.require("asana-project")
        task_id = inputs.require("asana-task-id")
        if not raw_number.isdigit():
            raise ConfigurationError(f"github-pr must be a pull request number, got {raw_number!r}")
        number = int(raw_number)
        scm = self._scm()
        result = ActionResult(action=request.action)

        try:
            body = await scm.get_pull_request(owner, repo, number)
            await scm.update_pull_request(
                owner, repo, number, formatting.pull_request_description(body, project_id, task_id)
            )
        except CollaboratorError as e:
            log.error("pr_description_update_failed", number=number, error=str(e))
            result.error = f"Failed to update pull request #{number}: {e}"
        return result

    async def get_latest_release(self, request: ActionRequest) -> ActionResult:
        """Publish the latest release tag of the repository as ``version``."""
        owner = request.inputs.require("github-org")
        repo = request.inputs.require("github-repository")
        result = ActionResult(action=request.action)

        try:
            version = await self._scm().get_latest_release(owner, repo)
        except CollaboratorError as e:
            log.error("latest_release_not_found", repo=repo, error=str(e))
            result.error = f"can't find latest version for {repo}"
            return result

        log.info("latest_release", repo=repo, version=version)
        result.outputs["version"] = version
        return result

    async def check_pr_membership(self, request: ActionRequest) -> ActionResult:
        """Publish ``external`` = whether the PR head belongs to another owner."""
        pr = self._pull_request(request)
        external = pr.head_owner != pr.base_owner
        log.info(
            "pr_membership",
            author=pr.author,
            base_owner=pr.base_owner,
            head_owner=pr.head_owner,
            external=external,
        )
        return ActionResult(action=request.action, outputs={"external": "true" if external else "false"})
