"""GitHub provider implementation using PyGithub."""

import asyncio
from collections.abc import Callable
from typing import TypeVar

import structlog
from github import Auth, Github, GithubException  # type: ignore[import-not-found]
from github.Repository import Repository as GHRepository  # type: ignore[import-not-found]

from asana_sync.exceptions import CollaboratorError
from asana_sync.providers.base import SourceControlClient

log = structlog.get_logger(__name__)

T = TypeVar("T")


async def _run_sync(func: Callable[[], T]) -> T:
    """Run a synchronous function in a thread pool.

    This prevents blocking the event loop when calling synchronous
    PyGithub methods.
    """
    return await asyncio.to_thread(func)


def _collaborator_error(message: str, e: GithubException) -> CollaboratorError:
    return CollaboratorError(message, status_code=e.status, response_text=str(e.data))


class GitHubRestProvider(SourceControlClient):
    """GitHub implementation using PyGithub library."""

    def __init__(self, token: str, base_url: str = "https://api.github.com"):
        """Initialize GitHub provider.

        Args:
            token: GitHub personal access token
            base_url: GitHub API base URL (for GitHub Enterprise)
        """
        self.token = token.strip() if token else token
        self.base_url = base_url.rstrip("/")
        self._client: Github | None = None

    async def connect(self) -> None:
        """Initialize GitHub client."""

        def _connect() -> Github:
            auth = Auth.Token(self.token) if self.token else None
            return Github(auth=auth, base_url=self.base_url)

        self._client = await _run_sync(_connect)
        log.info("github_connected", base_url=self.base_url)

    async def disconnect(self) -> None:
        """Close GitHub client."""
        if self._client:
            await _run_sync(self._client.close)
            self._client = None

    def _repo(self, owner: str, repo: str) -> GHRepository:
        if self._client is None:
            raise CollaboratorError("GitHub client is not connected")
        return self._client.get_repo(f"{owner}/{repo}")

    async def get_latest_release(self, owner: str, repo: str) -> str:
        """Get the tag of the latest release."""
        log.info("get_latest_release", owner=owner, repo=repo)

        try:
            return await _run_sync(lambda: self._repo(owner, repo).get_latest_release().tag_name)

        except GithubException as e:
            log.error("github_get_latest_release_failed", owner=owner, repo=repo, error=str(e))
            raise _collaborator_error(f"can't find latest version for {repo}", e) from e

    async def get_pull_request(self, owner: str, repo: str, number: int) -> str:
        """Get the body of a pull request."""
        log.info("get_pull_request", owner=owner, repo=repo, number=number)

        try:
            body = await _run_sync(lambda: self._repo(owner, repo).get_pull(number).body)
            return body or ""

        except GithubException as e:
            log.error("github_get_pull_request_failed", number=number, error=str(e))
            raise _collaborator_error(f"Failed to fetch pull request #{number}", e) from e

    async def update_pull_request(self, owner: str, repo: str, number: int, body: str) -> None:
        """Replace the body of a pull request."""
        log.info("update_pull_request", owner=owner, repo=repo, number=number)

        try:

            def _update() -> None:
                self._repo(owner, repo).get_pull(number).edit(body=body)

            await _run_sync(_update)

        except GithubException as e:
            log.error("github_update_pull_request_failed", number=number, error=str(e))
            raise _collaborator_error(f"Failed to update pull request #{number}", e) from e
