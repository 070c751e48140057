# src/simple_todo/tasks/task_buckets.py

"""
Temporal classification of tasks.

"Same day" means the same calendar date in the viewer's local timezone,
not a rolling 24-hour window. All functions are pure; callers pass `now`
explicitly and re-run them on every read.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, datetime, tzinfo

from .task_models import Bucket, Task, TaskBuckets


def local_date(instant: datetime, tz: tzinfo | None = None) -> date:
    """Calendar date of `instant` in `tz` (system local zone when None)."""
    # Naive datetimes are interpreted as local time by astimezone().
    return instant.astimezone(tz).date()


def same_local_day(a: datetime, b: datetime, tz: tzinfo | None = None) -> bool:
    return local_date(a, tz) == local_date(b, tz)


def classify(task: Task, now: datetime, tz: tzinfo | None = None) -> Bucket | None:
    """
    Map a task to its bucket for the reference instant `now`.

    Open tasks are judged by created_at, completed tasks only by completed_at.
    Returns None for an open task created on an earlier day and for a
    completed task with no completion time.
    """
    if not task.completed:
        if same_local_day(task.created_at, now, tz):
            return Bucket.TODAY_OPEN
        return None

    if task.completed_at is None:
        return None

    if same_local_day(task.completed_at, now, tz):
        return Bucket.TODAY_COMPLETED
    return Bucket.PAST_COMPLETED


def partition(tasks: Iterable[Task], now: datetime, tz: tzinfo | None = None) -> TaskBuckets:
    """Split `tasks` into buckets, preserving the input order inside each one."""
    today_open: list[Task] = []
    today_completed: list[Task] = []
    past_completed: list[Task] = []
    hidden: list[Task] = []

    for task in tasks:
        bucket = classify(task, now, tz)
        if bucket is Bucket.TODAY_OPEN:
            today_open.append(task)
        elif bucket is Bucket.TODAY_COMPLETED:
            today_completed.append(task)
        elif bucket is Bucket.PAST_COMPLETED:
            past_completed.append(task)
        else:
            hidden.append(task)

    return TaskBuckets(
        today_open=tuple(today_open),
        today_completed=tuple(today_completed),
        past_completed=tuple(past_completed),
        hidden=tuple(hidden),
    )
