# src/simple_todo/core/ports.py

"""
Ports (interfaces) used by the core.

The task engine depends on Protocols instead of concrete implementations.
This keeps the remote store and the identity provider swappable and makes
testing easier (see tests/fakes.py).
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Protocol

from ..auth.models import Session
from ..tasks.task_models import Task


class SessionProvider(Protocol):
    """
    Session boundary: supplies the signed-in identity, or None.

    The core never acquires or refreshes credentials itself; it only checks
    that a session is present before talking to the remote store.
    """

    def current_session(self) -> Session | None: ...


class TaskRepo(Protocol):
    """Remote task collection, keyed by record id."""

    async def list_all(self) -> list[Task]: ...

    async def create(self, text: str) -> Task: ...

    async def set_completion(
            self,
            task_id: Any,
            completed: bool,
            *,
            completed_at: datetime | None = None,
    ) -> None: ...

    async def remove(self, task_id: Any) -> None: ...
