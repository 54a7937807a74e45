"""
Lookup of existing tasks by name.

Used before creating a task in a section so a re-run of the same workflow does
not create a duplicate. The lookup and the subsequent create are two separate
calls; two runs racing on the same name can both create a task.
"""

import structlog

from asana_sync.exceptions import CollaboratorError
from asana_sync.providers.base import WorkTrackingClient

log = structlog.get_logger(__name__)


class TaskResolver:
    """Finds a task in a section by exact name."""

    def __init__(self, work: WorkTrackingClient):
        self.work = work

    async def find_by_name(self, section_id: str, name: str) -> str | None:
        """Return the gid of the first task named ``name``.

        Args:
            section_id: Section to search
            name: Exact, case-sensitive task name

        Returns:
            Task gid, or None when no task matches or the lookup fails
        """
        log.info("searching_section", section=section_id, name=name)

        try:
            tasks = await self.work.list_items_in_section(section_id)
        except CollaboratorError as e:
            log.error("section_lookup_failed", section=section_id, error=str(e))
            return None

        for task in tasks:
            if task.name == name:
                log.info("task_found", gid=task.gid)
                return task.gid

        log.info("task_not_found", section=section_id, name=name)
        return None
