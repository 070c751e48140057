# src/simple_todo/core/errors.py

"""
Error taxonomy shared by the store adapter, auth and the task engine.

Empty-text submissions are not errors: the engine ignores them silently.
"""

from __future__ import annotations


class TodoError(RuntimeError):
    """Base class for every failure the app surfaces to the user."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class UnauthorizedError(TodoError):
    """A remote operation was attempted without a signed-in session."""

    def __init__(self, message: str = "You must sign in first.") -> None:
        super().__init__(message)


class RemoteError(TodoError):
    """Any failure reported by (or while talking to) the remote task store."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class AuthError(TodoError):
    """Sign-in / sign-up was rejected."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
