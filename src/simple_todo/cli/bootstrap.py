# src/simple_todo/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires Supabase auth + task store into AppState,
- restores a saved session and opens the task engine for it.
"""

from __future__ import annotations

import logging

from ..auth.session import SupabaseAuth
from ..config import get_settings
from ..core.errors import TodoError
from ..core.state import AppState, close_task_session, open_task_session
from ..tasks.task_store import SupabaseTaskStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.session_path.parent.mkdir(parents=True, exist_ok=True)


def create_initial_state(*, settings=None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    session_path = settings.session_path if settings.persist_session else None
    auth = SupabaseAuth(settings, session_path=session_path)
    store = SupabaseTaskStore(settings, auth)

    return AppState(settings=settings, auth=auth, store=store)


async def resume_session(state: AppState) -> bool:
    """Reopen the task engine if a saved session is still valid or can be renewed."""
    auth = state.auth
    if not isinstance(auth, SupabaseAuth) or await auth.restore() is None:
        return False
    await open_task_session(state)
    return True


async def shutdown(state: AppState) -> None:
    """Close HTTP clients (no exceptions should escape)."""
    close_task_session(state)
    for closable in (state.store, state.auth):
        aclose = getattr(closable, "aclose", None)
        if aclose is None:
            continue
        try:
            await aclose()
        except (OSError, TodoError):
            logger.debug("Client close failed.", exc_info=True)
