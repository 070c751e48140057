# src/simple_todo/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from typing import Any

TaskId = Any
# Opaque remote-assigned id (int for bigint keys, str for uuid keys).


class Bucket(StrEnum):
    """
    Display grouping derived from a task's timestamps.

    Never stored on the record: "today" moves, the bucket moves with it.
    """

    TODAY_OPEN = "today_open"
    TODAY_COMPLETED = "today_completed"
    PAST_COMPLETED = "past_completed"


@dataclass(frozen=True, slots=True)
class Task:
    id: TaskId
    text: str
    created_at: datetime

    completed: bool = False
    completed_at: datetime | None = None


@dataclass(frozen=True, slots=True)
class TaskBuckets:
    """
    Result of partitioning a collection for one reference "now".

    `hidden` holds tasks that fall in no bucket (open tasks from earlier days,
    completed tasks without a completion time).
    """

    today_open: tuple[Task, ...] = ()
    today_completed: tuple[Task, ...] = ()
    past_completed: tuple[Task, ...] = ()
    hidden: tuple[Task, ...] = ()

    def get(self, bucket: Bucket) -> tuple[Task, ...]:
        if bucket is Bucket.TODAY_OPEN:
            return self.today_open
        if bucket is Bucket.TODAY_COMPLETED:
            return self.today_completed
        return self.past_completed
