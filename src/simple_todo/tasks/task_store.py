# src/simple_todo/tasks/task_store.py

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Any

import httpx

from ..core.errors import RemoteError, UnauthorizedError
from ..core.http import create_async_client, error_message
from ..core.ports import SessionProvider
from .task_models import Task, TaskId

logger = logging.getLogger(__name__)


def _parse_ts(raw: Any) -> datetime | None:
    if raw is None or raw == "":
        return None
    if isinstance(raw, datetime):
        ts = raw
    else:
        s = str(raw).strip()
        if s.endswith("Z"):
            s = s[:-1] + "+00:00"
        ts = datetime.fromisoformat(s)
    # Columns without a zone are stored as UTC.
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=UTC)
    return ts


def _format_ts(ts: datetime | None) -> str | None:
    if ts is None:
        return None
    if ts.tzinfo is None:
        ts = ts.astimezone()
    return ts.astimezone(UTC).isoformat()


class SupabaseTaskStore:
    """
    Remote task collection backed by a Supabase (PostgREST) table.

    Row shape:
        id, text, completed, created_date, completed_date

    Row-level security on the table scopes every request to the signed-in
    user, so the store never filters by user id itself.

    Every public method requires a session from the SessionProvider; without
    one it raises UnauthorizedError before any request is made. All other
    failures are RemoteError. Nothing is retried here.
    """

    def __init__(
        self,
        settings,
        sessions: SessionProvider,
        *,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._base_url = str(getattr(settings, "supabase_url", "") or "").rstrip("/")
        self._api_key = getattr(settings, "supabase_anon_key", None)
        self._table = str(getattr(settings, "todos_table", "todos") or "todos")
        self._sessions = sessions
        self._owns_client = client is None
        self._client = client or create_async_client(
            float(getattr(settings, "http_timeout_seconds", 10.0))
        )
        logger.info("SupabaseTaskStore ready url=%s table=%s", self._base_url or "<unset>", self._table)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    # ---- low-level helpers ----

    def _table_url(self) -> str:
        if not self._base_url:
            raise RemoteError("Task store is not configured. Set SIMPLETODO_SUPABASE_URL in your .env.")
        return f"{self._base_url}/rest/v1/{self._table}"

    def _headers(self, prefer: str | None) -> dict[str, str]:
        session = self._sessions.current_session()
        if session is None:
            raise UnauthorizedError()

        headers = {
            "Authorization": f"Bearer {session.access_token}",
            "Accept": "application/json",
        }
        if self._api_key:
            headers["apikey"] = str(self._api_key)
        if prefer:
            headers["Prefer"] = prefer
        return headers

    async def _request(
        self,
        method: str,
        *,
        params: dict[str, str] | None = None,
        json: Any = None,
        prefer: str | None = None,
    ) -> Any:
        headers = self._headers(prefer)
        url = self._table_url()

        try:
            resp = await self._client.request(method, url, params=params, json=json, headers=headers)
        except httpx.HTTPError as e:
            logger.info("Task store %s failed: %s", method, e.__class__.__name__)
            raise RemoteError(f"Network error while contacting the task store ({e.__class__.__name__}).") from e

        if resp.is_error:
            msg = error_message(resp, default="Task store request failed.")
            logger.info("Task store %s -> HTTP %s: %s", method, resp.status_code, msg)
            raise RemoteError(msg, status_code=resp.status_code)

        if not resp.content:
            return None
        try:
            return resp.json()
        except ValueError as e:
            raise RemoteError("Task store returned invalid JSON.", status_code=resp.status_code) from e

    @staticmethod
    def _row_to_task(row: Any) -> Task:
        if not isinstance(row, dict):
            raise RemoteError("Task store returned an unexpected row.")
        try:
            created_at = _parse_ts(row.get("created_date"))
            completed_at = _parse_ts(row.get("completed_date"))
        except ValueError as e:
            raise RemoteError(f"Task store returned a bad timestamp for id={row.get('id')}.") from e

        if row.get("id") is None or created_at is None:
            raise RemoteError("Task store row is missing id/created_date.")

        return Task(
            id=row["id"],
            text=str(row.get("text") or ""),
            created_at=created_at,
            completed=bool(row.get("completed")),
            completed_at=completed_at,
        )

    @staticmethod
    def _id_filter(task_id: TaskId) -> dict[str, str]:
        return {"id": f"eq.{task_id}"}

    # ---- public API ----

    async def list_all(self) -> list[Task]:
        """All tasks for the signed-in user, newest first."""
        rows = await self._request(
            "GET",
            params={"select": "*", "order": "created_date.desc"},
        )
        if rows is None:
            return []
        if not isinstance(rows, list):
            raise RemoteError("Task store returned an unexpected payload.")
        tasks = [self._row_to_task(r) for r in rows]
        logger.debug("Fetched %d tasks", len(tasks))
        return tasks

    async def create(self, text: str) -> Task:
        rows = await self._request(
            "POST",
            json=[{"text": text, "completed": False, "completed_date": None}],
            prefer="return=representation",
        )
        if not isinstance(rows, list) or not rows:
            raise RemoteError("Task store did not return the created task.")
        task = self._row_to_task(rows[0])
        logger.debug("Task created id=%s", task.id)
        return task

    async def set_completion(
        self,
        task_id: TaskId,
        completed: bool,
        *,
        completed_at: datetime | None = None,
    ) -> None:
        """
        Flip completion in one PATCH.

        completed_date is `completed_at` (or now) when completing and null when
        re-opening, so the row never holds one without the other.
        """
        if completed:
            stamp = _format_ts(completed_at or datetime.now(UTC))
        else:
            stamp = None

        rows = await self._request(
            "PATCH",
            params=self._id_filter(task_id),
            json={"completed": bool(completed), "completed_date": stamp},
            prefer="return=representation",
        )
        if isinstance(rows, list) and not rows:
            raise RemoteError(f"Task {task_id} was not found.", status_code=404)
        logger.debug("Task id=%s completed=%s", task_id, completed)

    async def remove(self, task_id: TaskId) -> None:
        rows = await self._request(
            "DELETE",
            params=self._id_filter(task_id),
            prefer="return=representation",
        )
        if isinstance(rows, list) and not rows:
            raise RemoteError(f"Task {task_id} was not found.", status_code=404)
        logger.debug("Task deleted id=%s", task_id)
