# tests/conftest.py

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from types import SimpleNamespace

import pytest

from simple_todo.core.state import AppState

from .fakes import FakeSessions, FakeTaskStore


def local(y: int, mo: int, d: int, h: int = 0, mi: int = 0) -> datetime:
    """Aware datetime for a wall-clock time in the machine's local zone."""
    return datetime(y, mo, d, h, mi).astimezone()


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState, store and auth.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="Simple Todo",
        log_level="INFO",
        supabase_url="https://proj.supabase.test",
        supabase_anon_key="anon-key",
        todos_table="todos",
        email_domain="simpletodo.app",
        http_timeout_seconds=5.0,
        data_dir=tmp_path,
        session_path=tmp_path / "session.json",
        persist_session=True,
    )


@pytest.fixture()
def sessions() -> FakeSessions:
    return FakeSessions()


@pytest.fixture()
def store() -> FakeTaskStore:
    return FakeTaskStore()


@pytest.fixture()
def state(settings: SimpleNamespace, sessions: FakeSessions, store: FakeTaskStore) -> AppState:
    """AppState wired with in-memory fakes (no network)."""
    return AppState(settings=settings, auth=sessions, store=store)
