"""
Abstract base classes for providers.

This module defines the two collaborator interfaces the orchestrator depends
on: a work-tracking service (Asana) and a source-control service (GitHub).
Routines only ever see these interfaces, which keeps them testable with
``AsyncMock`` stand-ins.
"""

from abc import ABC, abstractmethod

from asana_sync.models.domain import TaskSummary


class WorkTrackingClient(ABC):
    """Task operations against the work-tracking service.

    All methods are async. Implementations raise ``CollaboratorError`` when a
    remote call fails; each call is attempted exactly once.
    """

    async def connect(self) -> None:
        """Open the underlying session."""

    async def disconnect(self) -> None:
        """Release the underlying session."""

    @abstractmethod
    async def create_item(
        self,
        name: str,
        notes: str,
        container_id: str,
        section_id: str | None = None,
    ) -> str:
        """Create a task in a project.

        Args:
            name: Task name
            notes: Plain-text description
            container_id: Project gid
            section_id: Optional section gid inside the project

        Returns:
            gid of the new task
        """
        pass

    @abstractmethod
    async def add_note(self, item_id: str, text: str, pinned: bool = False) -> None:
        """Add a comment (story) with rich text to a task.

        Args:
            item_id: Task gid
            text: Rich text, wrapped in ``<body>``
            pinned: Whether to pin the comment
        """
        pass

    @abstractmethod
    async def add_tag(self, item_id: str, tag_id: str) -> None:
        pass

    @abstractmethod
    async def remove_tag(self, item_id: str, tag_id: str) -> None:
        pass

    @abstractmethod
    async def move_to_section(self, item_id: str, section_id: str) -> None:
        """Move a task into a section of a project it already belongs to."""
        pass

    @abstractmethod
    async def set_completed(self, item_id: str, completed: bool) -> None:
        pass

    @abstractmethod
    async def add_to_container(
        self,
        item_id: str,
        container_id: str,
        section_id: str | None = None,
    ) -> None:
        """Add an existing task to a project, optionally into a section."""
        pass

    @abstractmethod
    async def list_items_in_section(self, section_id: str) -> list[TaskSummary]:
        """List every task currently in a section."""
        pass


class SourceControlClient(ABC):
    """Repository operations against the source-control service."""

    async def connect(self) -> None:
        """Open the underlying session."""

    async def disconnect(self) -> None:
        """Release the underlying session."""

    @abstractmethod
    async def get_latest_release(self, owner: str, repo: str) -> str:
        """Return the tag name of the latest published release."""
        pass

    @abstractmethod
    async def get_pull_request(self, owner: str, repo: str, number: int) -> str:
        """Return the body of a pull request ('' when empty)."""
        pass

    @abstractmethod
    async def update_pull_request(self, owner: str, repo: str, number: int, body: str) -> None:
        """Replace the body of a pull request."""
        pass
