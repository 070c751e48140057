# src/simple_todo/core/state.py

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from ..tasks.task_engine import TaskStateEngine
from .ports import SessionProvider, TaskRepo

logger = logging.getLogger(__name__)


@dataclass
class AppState:
    """
    Everything a front-end needs, owned in one place.

    `engine` exists only while a user is signed in: it is created by
    open_task_session() and dropped by close_task_session(), so task data
    never outlives the session it was loaded for.
    """

    settings: Any
    auth: SessionProvider
    store: TaskRepo

    engine: TaskStateEngine | None = None
    # Ids in the order they were last printed, so commands can use "/done 2".
    listing: list[Any] = field(default_factory=list)


async def open_task_session(state: AppState) -> TaskStateEngine:
    """Create a fresh engine for the current session and load its tasks."""
    engine = TaskStateEngine(state.store)
    state.engine = engine
    state.listing = []
    await engine.initialize()
    return engine


def close_task_session(state: AppState) -> None:
    if state.engine is not None:
        logger.debug("Discarding task engine (%d tasks)", len(state.engine.tasks))
    state.engine = None
    state.listing = []
