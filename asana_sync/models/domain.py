"""
Domain models for asana-sync.

This module contains the data classes exchanged between the event parser, the
reference extractor, the orchestrator and the providers. GitHub event payloads
are normalized into one of the ``EventContext`` variants so routines never
touch raw webhook dictionaries.

Example:
    Building a context from the runner's event file::

        context = event_context_from_payload(json.load(f))
        if isinstance(context, PullRequestEvent):
            print(context.body)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from asana_sync.config.inputs import ActionInputs
    from asana_sync.enums import ActionName


@dataclass(frozen=True)
class Reference:
    """A task link found in free text.

    Attributes:
        container_id: Asana project gid
        item_id: Asana task gid
    """

    container_id: str
    item_id: str


@dataclass(frozen=True)
class Commit:
    """One commit of a push event."""

    id: str
    message: str
    author: str
    url: str

    @property
    def short_id(self) -> str:
        return self.id[:7]

    @property
    def header(self) -> str:
        """Commit message up to the first line break."""
        return self.message.split("\n", 1)[0]


@dataclass(frozen=True)
class IssueEvent:
    """An ``issues`` event."""

    title: str
    body: str
    url: str


@dataclass(frozen=True)
class PullRequestEvent:
    """A ``pull_request`` or ``pull_request_review`` event."""

    title: str
    body: str
    url: str
    number: int | None = None
    author: str = ""
    base_owner: str = ""
    head_owner: str = ""


@dataclass(frozen=True)
class CommitPushEvent:
    """A ``push`` event."""

    commits: tuple[Commit, ...] = ()


EventContext = IssueEvent | PullRequestEvent | CommitPushEvent


@dataclass(frozen=True)
class TaskSummary:
    """Compact task record returned when listing a section."""

    gid: str
    name: str


@dataclass
class ActionRequest:
    """Everything one routine needs: which action, its inputs and the event."""

    action: ActionName
    inputs: ActionInputs
    context: EventContext


@dataclass(frozen=True)
class OperationOutcome:
    """Result of one Asana operation on one task reference."""

    reference: Reference
    succeeded: bool
    error: str | None = None

    @classmethod
    def ok(cls, reference: Reference) -> OperationOutcome:
        return cls(reference=reference, succeeded=True)

    @classmethod
    def failed(cls, reference: Reference, error: str) -> OperationOutcome:
        return cls(reference=reference, succeeded=False, error=error)


@dataclass
class ActionResult:
    """Aggregate result of a routine.

    Attributes:
        action: Action that produced the result
        outcomes: Per-reference outcomes in discovery order
        outputs: Step outputs to publish (name -> value)
        error: Set when the routine could not do its job at all
    """

    action: ActionName
    outcomes: list[OperationOutcome] = field(default_factory=list)
    outputs: dict[str, str] = field(default_factory=dict)
    error: str | None = None

    @property
    def failed_outcomes(self) -> list[OperationOutcome]:
        return [o for o in self.outcomes if not o.succeeded]

    @property
    def success(self) -> bool:
        return self.error is None


def _text(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _login(obj: Any, *path: str) -> str:
    """Follow nested keys and return the ``login`` at the end, or ''."""
    for key in path:
        obj = obj.get(key) if isinstance(obj, dict) else None
    if isinstance(obj, dict):
        return _text(obj.get("login"))
    return ""


def _parse_commit(data: dict[str, Any]) -> Commit:
    committer = data.get("committer") or {}
    author = data.get("author") or {}
    return Commit(
        id=_text(data.get("id")),
        message=_text(data.get("message")),
        author=_text(committer.get("name")) or _text(author.get("name")),
        url=_text(data.get("url")),
    )


def event_context_from_payload(payload: dict[str, Any]) -> EventContext:
    """Normalize a GitHub webhook payload into an EventContext.

    Args:
        payload: Parsed JSON from the runner's event file

    Returns:
        PullRequestEvent when the payload carries ``pull_request``,
        IssueEvent for ``issue``, otherwise a CommitPushEvent (possibly empty)
    """
    pull_request = payload.get("pull_request")
    if isinstance(pull_request, dict):
        number = pull_request.get("number")
        return PullRequestEvent(
            title=_text(pull_request.get("title")),
            body=_text(pull_request.get("body")),
            url=_text(pull_request.get("html_url")),
            number=number if isinstance(number, int) else None,
            author=_login(pull_request, "user"),
            base_owner=_login(pull_request, "base", "repo", "owner"),
            head_owner=_login(pull_request, "head", "user"),
        )

    issue = payload.get("issue")
    if isinstance(issue, dict):
        return IssueEvent(
            title=_text(issue.get("title")),
            body=_text(issue.get("body")),
            url=_text(issue.get("html_url")),
        )

    commits = payload.get("commits") or []
    return CommitPushEvent(
        commits=tuple(_parse_commit(c) for c in commits if isinstance(c, dict)),
    )
