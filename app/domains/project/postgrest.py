"""Row-store backed by a Supabase/PostgREST table over HTTP."""

import logging
from typing import Any

import httpx

from app.exceptions.project import StoreError

logger = logging.getLogger(__name__)

Row = dict[str, Any]


class PostgrestRowStore:
    """
    Talks to ``{base_url}/{table}`` with PostgREST query syntax.

    Writes ask for ``return=representation`` so the store-assigned id and the
    persisted shape come back in the response body.

    :ivar table: Name of the table holding project rows.
    :type table: str
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        table: str = "projects",
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ):
        self.table = table
        self._client = client or httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers={
                "apikey": api_key,
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
            },
            timeout=timeout,
        )

    async def select_all(self) -> list[Row]:
        response = await self._request(
            "GET", params={"select": "*", "order": "created_at.desc"}, action="fetch projects"
        )
        return self._rows(response, "fetch projects")

    async def insert(self, row: Row) -> Row:
        response = await self._request(
            "POST",
            json=[row],
            headers={"Prefer": "return=representation"},
            action="create project",
        )
        return self._single(response, "create project")

    async def update_by_id(self, project_id: str, row: Row) -> Row:
        response = await self._request(
            "PATCH",
            params={"id": f"eq.{project_id}"},
            json=row,
            headers={"Prefer": "return=representation"},
            action="update project",
        )
        rows = self._rows(response, "update project")
        if not rows:
            raise StoreError(f"Project {project_id} does not exist in the store")
        return rows[0]

    async def delete_by_id(self, project_id: str) -> None:
        await self._request("DELETE", params={"id": f"eq.{project_id}"}, action="delete project")

    async def close(self) -> None:
        await self._client.aclose()

    # Private helper methods
    async def _request(self, method: str, *, action: str, **kwargs) -> httpx.Response:
        try:
            response = await self._client.request(method, f"/{self.table}", **kwargs)
        except httpx.HTTPError as e:
            logger.error("Failed to %s: %s", action, e)
            raise StoreError(f"Failed to {action}: {e}") from e

        if response.is_error:
            message = self._error_message(response)
            logger.error("Failed to %s: %s %s", action, response.status_code, message)
            raise StoreError(f"Failed to {action}: {message}")
        return response

    @staticmethod
    def _rows(response: httpx.Response, action: str) -> list[Row]:
        """Decode a body that must be a JSON array of row objects."""
        try:
            rows = response.json()
        except ValueError as e:
            logger.error("Failed to %s: invalid response body", action)
            raise StoreError(f"Failed to {action}: invalid response body") from e
        if not isinstance(rows, list) or not all(isinstance(row, dict) for row in rows):
            logger.error("Failed to %s: unexpected response shape", action)
            raise StoreError(f"Failed to {action}: unexpected response shape")
        return rows

    @classmethod
    def _single(cls, response: httpx.Response, action: str) -> Row:
        rows = cls._rows(response, action)
        if not rows:
            raise StoreError(f"Failed to {action}: store returned no row")
        return rows[0]

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text or response.reason_phrase
        if isinstance(body, dict):
            return str(body.get("message") or body.get("error") or body)
        return str(body)
