# tests/test_task_store.py

from __future__ import annotations

import json
from datetime import UTC, datetime

import httpx
import pytest

from simple_todo.core.errors import RemoteError, UnauthorizedError
from simple_todo.tasks.task_engine import TaskStateEngine
from simple_todo.tasks.task_store import SupabaseTaskStore

from .fakes import FakeSessions

TABLE_URL = "https://proj.supabase.test/rest/v1/todos"


class Recorder:
    """MockTransport handler that records requests and replays canned responses."""

    def __init__(self, *responses: httpx.Response) -> None:
        self.responses = list(responses)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.responses.pop(0)


def _store(settings, handler, sessions: FakeSessions | None = None) -> SupabaseTaskStore:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return SupabaseTaskStore(settings, sessions or FakeSessions(), client=client)


@pytest.mark.asyncio
async def test_list_all_requests_newest_first_and_parses_rows(settings) -> None:
    rows = [
        {
            "id": 2,
            "text": "walk the dog",
            "completed": True,
            "created_date": "2026-06-10T09:00:00+00:00",
            "completed_date": "2026-06-10T11:30:00.123Z",
            "user_id": "u1",
        },
        {"id": 1, "text": "buy milk", "completed": False, "created_date": "2026-06-09T08:00:00", "completed_date": None},
    ]
    rec = Recorder(httpx.Response(200, json=rows))
    store = _store(settings, rec)

    tasks = await store.list_all()

    req = rec.requests[0]
    assert req.method == "GET"
    assert str(req.url).startswith(TABLE_URL)
    assert req.url.params["order"] == "created_date.desc"
    assert req.headers["Authorization"] == "Bearer tok"
    assert req.headers["apikey"] == "anon-key"

    assert [t.id for t in tasks] == [2, 1]
    assert tasks[0].completed is True
    assert tasks[0].completed_at == datetime(2026, 6, 10, 11, 30, 0, 123000, tzinfo=UTC)
    # Zone-less timestamps are read as UTC.
    assert tasks[1].created_at == datetime(2026, 6, 9, 8, 0, tzinfo=UTC)
    assert tasks[1].completed_at is None


@pytest.mark.asyncio
async def test_no_session_raises_unauthorized_without_request(settings) -> None:
    rec = Recorder()
    store = _store(settings, rec, FakeSessions(session=None))

    with pytest.raises(UnauthorizedError):
        await store.list_all()
    with pytest.raises(UnauthorizedError):
        await store.create("x")
    with pytest.raises(UnauthorizedError):
        await store.set_completion(1, True)
    with pytest.raises(UnauthorizedError):
        await store.remove(1)

    assert rec.requests == []


@pytest.mark.asyncio
async def test_engine_surfaces_unauthorized(settings) -> None:
    rec = Recorder()
    engine = TaskStateEngine(_store(settings, rec, FakeSessions(session=None)))

    assert await engine.initialize() is False

    assert isinstance(engine.last_error, UnauthorizedError)
    assert rec.requests == []


@pytest.mark.asyncio
async def test_create_posts_open_task_and_returns_remote_record(settings) -> None:
    created = {
        "id": 42,
        "text": "buy milk",
        "completed": False,
        "created_date": "2026-06-10T09:00:00+00:00",
        "completed_date": None,
    }
    rec = Recorder(httpx.Response(201, json=[created]))
    store = _store(settings, rec)

    task = await store.create("buy milk")

    req = rec.requests[0]
    assert req.method == "POST"
    assert req.headers["Prefer"] == "return=representation"
    assert json.loads(req.content) == [{"text": "buy milk", "completed": False, "completed_date": None}]
    assert task.id == 42
    assert task.completed is False and task.completed_at is None


@pytest.mark.asyncio
async def test_create_rejection_forwards_server_message(settings) -> None:
    rec = Recorder(httpx.Response(400, json={"message": 'null value in column "text"', "code": "23502"}))
    store = _store(settings, rec)

    with pytest.raises(RemoteError) as exc:
        await store.create("")

    assert exc.value.status_code == 400
    assert 'null value in column "text"' in exc.value.message


@pytest.mark.asyncio
async def test_set_completion_sends_both_fields(settings) -> None:
    row = {"id": 1, "text": "t", "completed": True, "created_date": "2026-06-10T09:00:00+00:00"}
    rec = Recorder(httpx.Response(200, json=[row]), httpx.Response(200, json=[row]))
    store = _store(settings, rec)
    stamp = datetime(2026, 6, 10, 11, 0, tzinfo=UTC)

    await store.set_completion(1, True, completed_at=stamp)
    await store.set_completion(1, False)

    done_req, undo_req = rec.requests
    assert done_req.method == "PATCH"
    assert done_req.url.params["id"] == "eq.1"
    assert json.loads(done_req.content) == {"completed": True, "completed_date": "2026-06-10T11:00:00+00:00"}
    assert json.loads(undo_req.content) == {"completed": False, "completed_date": None}


@pytest.mark.asyncio
async def test_set_completion_stamps_now_when_not_given(settings) -> None:
    rec = Recorder(httpx.Response(200, json=[{"id": 1}]))
    store = _store(settings, rec)

    before = datetime.now(UTC)
    await store.set_completion(1, True)

    body = json.loads(rec.requests[0].content)
    assert datetime.fromisoformat(body["completed_date"]) >= before.replace(microsecond=0)


@pytest.mark.asyncio
async def test_update_or_delete_of_missing_row_is_not_found(settings) -> None:
    rec = Recorder(httpx.Response(200, json=[]), httpx.Response(200, json=[]))
    store = _store(settings, rec)

    with pytest.raises(RemoteError) as exc:
        await store.set_completion(99, True)
    assert exc.value.status_code == 404

    with pytest.raises(RemoteError):
        await store.remove(99)
    assert rec.requests[1].method == "DELETE"
    assert rec.requests[1].url.params["id"] == "eq.99"


@pytest.mark.asyncio
async def test_network_error_becomes_remote_error(settings) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    store = _store(settings, handler)

    with pytest.raises(RemoteError) as exc:
        await store.list_all()
    assert "ConnectError" in exc.value.message


@pytest.mark.asyncio
async def test_missing_url_is_reported_as_remote_error(settings) -> None:
    settings.supabase_url = ""
    rec = Recorder()
    store = _store(settings, rec)

    with pytest.raises(RemoteError):
        await store.list_all()
    assert rec.requests == []
