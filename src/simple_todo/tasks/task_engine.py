# src/simple_todo/tasks/task_engine.py

"""
Task state engine.

Owns the in-memory mirror of the remote task collection:
- toggles are applied optimistically and rolled back from a captured snapshot
  if the remote update fails,
- adds and removes wait for remote confirmation before touching local state,
- buckets are a pure projection of the current collection, recomputed on
  every read (never cached).

All methods run on one asyncio event loop; no locking is needed. A failure
never raises out of the engine: it is logged and kept in `last_error`.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import UTC, datetime, tzinfo

from ..core.errors import TodoError
from ..core.ports import TaskRepo
from .task_buckets import partition
from .task_models import Task, TaskBuckets, TaskId

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass(slots=True, frozen=True)
class _Snapshot:
    """Pre-mutation copy of one record plus the version it carried."""

    task: Task
    version: int


class TaskStateEngine:
    def __init__(
        self,
        store: TaskRepo,
        *,
        clock: Callable[[], datetime] = _utc_now,
        tz: tzinfo | None = None,
    ) -> None:
        self._store = store
        self._clock = clock
        self._tz = tz

        self._tasks: list[Task] = []
        self.loading = True
        self.last_error: TodoError | None = None

        # Per-id version of the local record: bumped on every optimistic
        # toggle so a late failure cannot undo a newer toggle on the same id.
        self._seq = 0
        self._versions: dict[TaskId, int] = {}

    # ---- read side ----

    @property
    def tasks(self) -> tuple[Task, ...]:
        return tuple(self._tasks)

    def get(self, task_id: TaskId) -> Task | None:
        idx = self._index(task_id)
        return self._tasks[idx] if idx is not None else None

    def get_buckets(self, now: datetime | None = None) -> TaskBuckets:
        return partition(self._tasks, now if now is not None else self._clock(), self._tz)

    def completion_summary(self) -> tuple[int, int]:
        """(completed, total) over the whole collection."""
        done = sum(1 for t in self._tasks if t.completed)
        return done, len(self._tasks)

    def clear_error(self) -> None:
        self.last_error = None

    # ---- helpers ----

    def _index(self, task_id: TaskId) -> int | None:
        for i, t in enumerate(self._tasks):
            if t.id == task_id:
                return i
        return None

    def _fail(self, op: str, err: TodoError) -> None:
        self.last_error = err
        logger.warning("%s failed: %s", op, err.message)

    @staticmethod
    def _dedupe(tasks: list[Task]) -> list[Task]:
        seen: set = set()
        out: list[Task] = []
        for t in tasks:
            if t.id in seen:
                logger.warning("Dropping duplicate task id=%s from fetch", t.id)
                continue
            seen.add(t.id)
            out.append(t)
        return out

    # ---- mutations ----

    async def initialize(self) -> bool:
        """Replace the local collection with the remote one."""
        self.loading = True
        self.last_error = None
        try:
            fetched = await self._store.list_all()
        except TodoError as e:
            self._tasks = []
            self._versions.clear()
            self._fail("initialize", e)
            return False
        finally:
            self.loading = False

        self._tasks = self._dedupe(list(fetched))
        self._versions.clear()
        logger.info("Loaded %d tasks", len(self._tasks))
        return True

    async def add_task(self, text: str) -> Task | None:
        """
        Create a task remotely, then prepend it locally.

        Blank text is ignored without a remote call.
        """
        if not text or not text.strip():
            return None

        self.last_error = None
        try:
            task = await self._store.create(text)
        except TodoError as e:
            self._fail("add_task", e)
            return None

        idx = self._index(task.id)
        if idx is not None:
            self._tasks[idx] = task
        else:
            self._tasks.insert(0, task)
        logger.info("Task added id=%s", task.id)
        return task

    async def toggle_task(self, task_id: TaskId) -> bool:
        """
        Flip completion optimistically, then confirm remotely.

        Returns False when the id is unknown or the remote update failed
        (in which case the local record is restored).
        """
        idx = self._index(task_id)
        if idx is None:
            return False

        self.last_error = None
        prior = self._tasks[idx]
        snapshot = _Snapshot(task=prior, version=self._versions.get(task_id, 0))

        completed = not prior.completed
        updated = replace(
            prior,
            completed=completed,
            completed_at=self._clock() if completed else None,
        )
        self._seq += 1
        version = self._seq
        self._tasks[idx] = updated
        self._versions[task_id] = version

        try:
            await self._store.set_completion(task_id, completed, completed_at=updated.completed_at)
        except TodoError as e:
            self._rollback(task_id, version, snapshot)
            self._fail("toggle_task", e)
            return False

        logger.info("Task id=%s completed=%s", task_id, completed)
        return True

    def _rollback(self, task_id: TaskId, version: int, snapshot: _Snapshot) -> None:
        if self._versions.get(task_id) != version:
            logger.info("Not rolling back task id=%s: a newer toggle is in place", task_id)
            return

        idx = self._index(task_id)
        if idx is None:
            return

        self._tasks[idx] = snapshot.task
        if snapshot.version:
            self._versions[task_id] = snapshot.version
        else:
            self._versions.pop(task_id, None)

    async def remove_task(self, task_id: TaskId) -> bool:
        """Delete remotely first; drop the local record only on success."""
        self.last_error = None
        try:
            await self._store.remove(task_id)
        except TodoError as e:
            self._fail("remove_task", e)
            return False

        self._tasks = [t for t in self._tasks if t.id != task_id]
        self._versions.pop(task_id, None)
        logger.info("Task removed id=%s", task_id)
        return True
