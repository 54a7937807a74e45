"""Asana provider implementation using direct REST API calls."""

from typing import Any

import httpx
import structlog

from asana_sync.exceptions import CollaboratorError
from asana_sync.models.domain import TaskSummary
from asana_sync.providers.base import WorkTrackingClient

log = structlog.get_logger(__name__)

# Asana caps page size at 100
PAGE_SIZE = 100


class AsanaRestProvider(WorkTrackingClient):
    """Asana implementation using direct REST API calls."""

    def __init__(
        self,
        token: str,
        base_url: str = "https://app.asana.com/api/1.0",
        timeout: float = 30.0,
    ):
        """Initialize Asana provider.

        Args:
            token: Personal access token
            base_url: Asana API base URL
            timeout: Per-request timeout in seconds
        """
        self.token = token.strip() if token else token
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client: httpx.AsyncClient | None = None

    async def connect(self) -> None:
        """Create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                headers={
                    "Authorization": f"Bearer {self.token}",
                    "Accept": "application/json",
                },
            )
        log.info("asana_connected", base_url=self.base_url)

    async def disconnect(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "AsanaRestProvider":
        """Async context manager entry."""
        await self.connect()
        return self

    async def __aexit__(self, *args: Any) -> None:
        """Async context manager exit."""
        await self.disconnect()

    async def _request(
        self,
        method: str,
        path: str,
        data: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Send one request and return the decoded JSON document.

        Raises:
            CollaboratorError: On transport errors, non-2xx responses and bodies that
                are not a JSON object
        """
        if self._client is None:
            raise CollaboratorError("Asana client is not connected")

        kwargs: dict[str, Any] = {}
        if data is not None:
            kwargs["json"] = {"data": data}
        if params:
            kwargs["params"] = params

        try:
            response = await self._client.request(method, path, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            log.error(
                "asana_request_failed",
                method=method,
                path=path,
                status_code=e.response.status_code,
            )
            raise CollaboratorError(
                f"Asana {method} {path} failed",
                status_code=e.response.status_code,
                response_text=e.response.text,
            ) from e
        except httpx.HTTPError as e:
            log.error("asana_request_error", method=method, path=path, error=str(e))
            raise CollaboratorError(f"Asana {method} {path} failed: {e}") from e

        if not response.content:
            return {}
        try:
            document = response.json()
        except ValueError as e:
            log.error("asana_invalid_response", method=method, path=path, status_code=response.status_code)
            raise CollaboratorError(
                f"Asana {method} {path} returned a non-JSON response",
                status_code=response.status_code,
                response_text=response.text,
            ) from e
        if not isinstance(document, dict):
            raise CollaboratorError(
                f"Asana {method} {path} returned an unexpected document",
                status_code=response.status_code,
                response_text=response.text,
            )
        return document

    async def create_item(
        self,
        name: str,
        notes: str,
        container_id: str,
        section_id: str | None = None,
    ) -> str:
        """Create task via REST API."""
        log.info("create_task", name=name, project=container_id, section=section_id)

        data: dict[str, Any] = {
            "name": name,
            "notes": notes,
            "projects": [container_id],
        }
        if section_id:
            data["memberships"] = [{"project": container_id, "section": section_id}]

        result = await self._request("POST", "/tasks", data=data)
        try:
            gid = str(result["data"]["gid"])
        except (KeyError, TypeError) as e:
            raise CollaboratorError("Asana POST /tasks response has no task gid") from e
        log.info("task_created", gid=gid)
        return gid

    async def add_note(self, item_id: str, text: str, pinned: bool = False) -> None:
        """Create a story on the task."""
        log.info("add_story", task=item_id, pinned=pinned)
        await self._request(
            "POST",
            f"/tasks/{item_id}/stories",
            data={"html_text": text, "is_pinned": pinned},
        )

    async def add_tag(self, item_id: str, tag_id: str) -> None:
        log.info("add_tag", task=item_id, tag=tag_id)
        await self._request("POST", f"/tasks/{item_id}/addTag", data={"tag": tag_id})

    async def remove_tag(self, item_id: str, tag_id: str) -> None:
        log.info("remove_tag", task=item_id, tag=tag_id)
        await self._request("POST", f"/tasks/{item_id}/removeTag", data={"tag": tag_id})

    async def move_to_section(self, item_id: str, section_id: str) -> None:
        log.info("move_task", task=item_id, section=section_id)
        await self._request("POST", f"/sections/{section_id}/addTask", data={"task": item_id})

    async def set_completed(self, item_id: str, completed: bool) -> None:
        log.info("set_completed", task=item_id, completed=completed)
        await self._request("PUT", f"/tasks/{item_id}", data={"completed": completed})

    async def add_to_container(
        self,
        item_id: str,
        container_id: str,
        section_id: str | None = None,
    ) -> None:
        """Add task to a project, placing it in ``section_id`` when given."""
        log.info("add_project", task=item_id, project=container_id, section=section_id)

        data: dict[str, Any] = {"project": container_id}
        if section_id:
            data["section"] = section_id
        await self._request("POST", f"/tasks/{item_id}/addProject", data=data)

    async def list_items_in_section(self, section_id: str) -> list[TaskSummary]:
        """List tasks in a section, following pagination."""
        log.info("list_section_tasks", section=section_id)

        tasks: list[TaskSummary] = []
        params: dict[str, Any] = {"limit": PAGE_SIZE, "opt_fields": "name"}
        while True:
            result = await self._request("GET", f"/sections/{section_id}/tasks", params=params)
            try:
                tasks.extend(
                    TaskSummary(gid=str(item["gid"]), name=item.get("name") or "")
                    for item in result.get("data") or []
                )
            except (KeyError, TypeError, AttributeError) as e:
                raise CollaboratorError(f"Asana GET /sections/{section_id}/tasks returned malformed tasks") from e
            next_page = result.get("next_page")
            if not next_page or not next_page.get("offset"):
                break
            params = {**params, "offset": next_page["offset"]}

        return tasks
