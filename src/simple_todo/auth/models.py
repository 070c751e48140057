# src/simple_todo/auth/models.py

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class Session:
    """Signed-in identity as returned by Supabase auth."""

    access_token: str
    user_id: str
    email: str | None = None
    refresh_token: str | None = None
    expires_at: float | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Session:
        access_token = data.get("access_token")
        user_id = data.get("user_id")
        if not access_token or not user_id:
            raise ValueError("session data is missing access_token/user_id")
        expires_at = data.get("expires_at")
        return cls(
            access_token=str(access_token),
            user_id=str(user_id),
            email=data.get("email"),
            refresh_token=data.get("refresh_token"),
            expires_at=float(expires_at) if expires_at is not None else None,
        )
