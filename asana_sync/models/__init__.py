"""Domain models shared by the extractor, orchestrator and providers.

Key Models:
    - Reference: (project, task) pair found in free text
    - IssueEvent, PullRequestEvent, CommitPushEvent: normalized GitHub events
    - ActionRequest: one action invocation
    - OperationOutcome, ActionResult: what a routine did

Example:
    >>> from asana_sync.models.domain import Reference
    >>> Reference(container_id="123", item_id="456")
"""
