# tests/test_task_buckets.py

from __future__ import annotations

from datetime import UTC, datetime, timedelta, timezone

from simple_todo.tasks.task_buckets import classify, partition, same_local_day
from simple_todo.tasks.task_models import Bucket, Task

from .conftest import local

TODAY_9 = local(2026, 6, 10, 9)
TODAY_10 = local(2026, 6, 10, 10)
TODAY_11 = local(2026, 6, 10, 11)
TODAY_12 = local(2026, 6, 10, 12)
TOMORROW_9 = local(2026, 6, 11, 9)
YESTERDAY_9 = local(2026, 6, 9, 9)


def _open(task_id: int, created_at: datetime, text: str = "task") -> Task:
    return Task(id=task_id, text=text, created_at=created_at)


def _done(task_id: int, created_at: datetime, completed_at: datetime | None) -> Task:
    return Task(id=task_id, text="task", created_at=created_at, completed=True, completed_at=completed_at)


def test_open_task_created_today_is_today_open() -> None:
    task1 = _open(1, TODAY_9, "buy milk")

    buckets = partition([task1], TODAY_10)

    assert buckets.today_open == (task1,)
    assert buckets.today_completed == ()
    assert buckets.past_completed == ()


def test_task_completed_today_moves_to_today_completed() -> None:
    task1 = _done(1, TODAY_9, TODAY_11)

    buckets = partition([task1], TODAY_12)

    assert buckets.today_open == ()
    assert buckets.today_completed == (task1,)
    assert buckets.past_completed == ()


def test_task_completed_today_is_past_completed_tomorrow() -> None:
    task1 = _done(1, TODAY_9, TODAY_11)

    buckets = partition([task1], TOMORROW_9)

    assert buckets.today_open == ()
    assert buckets.today_completed == ()
    assert buckets.past_completed == (task1,)


def test_completed_task_is_judged_by_completion_day_only() -> None:
    old_task = _done(1, YESTERDAY_9, TODAY_11)
    assert classify(old_task, TODAY_12) is Bucket.TODAY_COMPLETED


def test_completed_without_completion_time_has_no_bucket() -> None:
    broken = _done(1, TODAY_9, None)

    assert classify(broken, TODAY_10) is None
    buckets = partition([broken], TODAY_10)
    assert buckets.hidden == (broken,)
    assert not (buckets.today_open or buckets.today_completed or buckets.past_completed)


def test_open_task_from_earlier_day_has_no_bucket() -> None:
    stale = _open(1, YESTERDAY_9)

    assert classify(stale, TODAY_10) is None
    assert partition([stale], TODAY_10).hidden == (stale,)


def test_same_day_uses_calendar_date_not_24h_window() -> None:
    late = local(2026, 6, 10, 23, 30)
    early_next = local(2026, 6, 11, 0, 30)
    assert not same_local_day(late, early_next)

    assert same_local_day(local(2026, 6, 10, 0, 10), local(2026, 6, 10, 23, 50))


def test_same_day_depends_on_viewer_timezone() -> None:
    a = datetime(2026, 6, 10, 2, 0, tzinfo=UTC)
    b = datetime(2026, 6, 10, 12, 0, tzinfo=UTC)
    new_york_ish = timezone(timedelta(hours=-5))

    assert same_local_day(a, b, UTC)
    # 02:00 UTC is still the previous evening at UTC-5.
    assert not same_local_day(a, b, new_york_ish)


def test_partition_keeps_order_and_never_duplicates() -> None:
    tasks = [
        _open(5, TODAY_11),
        _done(4, TODAY_9, TODAY_10),
        _open(3, TODAY_9),
        _done(2, YESTERDAY_9, YESTERDAY_9 + timedelta(hours=1)),
        _open(1, YESTERDAY_9),
        _done(0, TODAY_9, TODAY_11),
    ]

    buckets = partition(tasks, TODAY_12)

    assert [t.id for t in buckets.today_open] == [5, 3]
    assert [t.id for t in buckets.today_completed] == [4, 0]
    assert [t.id for t in buckets.past_completed] == [2]
    assert [t.id for t in buckets.hidden] == [1]

    seen = [
        t.id
        for group in (buckets.today_open, buckets.today_completed, buckets.past_completed, buckets.hidden)
        for t in group
    ]
    assert sorted(seen) == sorted(t.id for t in tasks)
    assert buckets.get(Bucket.TODAY_COMPLETED) == buckets.today_completed
