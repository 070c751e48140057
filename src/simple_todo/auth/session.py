# src/simple_todo/auth/session.py

"""
Supabase auth (GoTrue) sign-in / sign-up and the local session file.

Users pick a plain username; it is mapped to an e-mail address under a fixed
domain because Supabase password auth is e-mail based.

Why we persist session.json:
- It lets the CLI reuse the access token across restarts without signing in again.
- The file holds a bearer token: it lives under the gitignored data dir with 0600 permissions.
"""

from __future__ import annotations

import contextlib
import json
import logging
import os
import time
from pathlib import Path
from typing import Any

import httpx

from ..core.errors import AuthError
from ..core.http import create_async_client, error_message
from .models import Session

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


def username_to_email(username: str, domain: str = "simpletodo.app") -> str:
    name = (username or "").strip().lower()
    if not name:
        raise AuthError("Username is required.")
    return f"{name}@{domain}"


def _is_expired(session: Session) -> bool:
    return session.expires_at is not None and session.expires_at <= time.time()


def load_session(path: Path) -> Session | None:
    if not path.exists():
        return None
    try:
        data = json.loads(path.read_text("utf-8"))
        if not isinstance(data, dict):
            raise ValueError("Expected JSON object")
        return Session.from_dict(data)
    except (OSError, ValueError):
        logger.warning("Ignoring unreadable session file %s", path, exc_info=True)
        return None


def save_session(path: Path, session: Session) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(".tmp")
    tmp.write_text(json.dumps(session.to_dict(), ensure_ascii=False), "utf-8")
    os.replace(tmp, path)
    with contextlib.suppress(OSError):
        os.chmod(path, 0o600)


def clear_session(path: Path) -> None:
    with contextlib.suppress(FileNotFoundError):
        path.unlink()


class SupabaseAuth:
    """
    Session provider backed by Supabase auth.

    Holds at most one session. `current_session()` is what the task store
    consults before every request.
    """

    def __init__(
        self,
        settings,
        *,
        client: httpx.AsyncClient | None = None,
        session_path: Path | None = None,
    ) -> None:
        self._base_url = str(getattr(settings, "supabase_url", "") or "").rstrip("/")
        self._api_key = getattr(settings, "supabase_anon_key", None)
        self._email_domain = str(getattr(settings, "email_domain", "simpletodo.app"))
        self._session_path = session_path
        self._owns_client = client is None
        self._client = client or create_async_client(
            float(getattr(settings, "http_timeout_seconds", 10.0))
        )
        self._session: Session | None = None

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    # ---- SessionProvider ----

    def current_session(self) -> Session | None:
        """The session, or None when signed out or past expires_at.

        An expired session is kept so refresh() can still use its refresh token.
        """
        session = self._session
        if session is None or _is_expired(session):
            return None
        return session

    @property
    def signed_in(self) -> bool:
        return self.current_session() is not None

    @property
    def can_refresh(self) -> bool:
        return self._session is not None and bool(self._session.refresh_token)

    # ---- persistence ----

    async def restore(self) -> Session | None:
        """
        Load the saved session; renew it first if it has expired.

        A session that is expired and cannot be renewed is deleted from disk.
        """
        if self._session_path is None:
            return None
        session = load_session(self._session_path)
        if session is None:
            return None

        self._session = session
        if not _is_expired(session):
            logger.info("Session restored for %s", session.email or session.user_id)
            return session

        if session.refresh_token:
            try:
                return await self.refresh()
            except AuthError as e:
                logger.info("Saved session could not be renewed: %s", e.message)

        self._forget()
        return None

    def _remember(self, session: Session) -> None:
        self._session = session
        if self._session_path is not None:
            try:
                save_session(self._session_path, session)
            except OSError:
                logger.exception("Failed to save session to %s", self._session_path)

    def _forget(self) -> None:
        self._session = None
        if self._session_path is not None:
            clear_session(self._session_path)

    # ---- low-level helpers ----

    def _url(self, path: str) -> str:
        if not self._base_url:
            raise AuthError("Auth is not configured. Set SIMPLETODO_SUPABASE_URL in your .env.")
        return f"{self._base_url}/auth/v1/{path}"

    def _headers(self, access_token: str | None = None) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self._api_key:
            headers["apikey"] = str(self._api_key)
        bearer = access_token or self._api_key
        if bearer:
            headers["Authorization"] = f"Bearer {bearer}"
        return headers

    async def _post(self, path: str, payload: dict[str, Any] | None, *, access_token: str | None = None) -> Any:
        url = self._url(path)
        try:
            resp = await self._client.post(url, json=payload, headers=self._headers(access_token))
        except httpx.HTTPError as e:
            raise AuthError(f"Network error while contacting auth ({e.__class__.__name__}).") from e

        if resp.is_error:
            raise AuthError(error_message(resp, default="Authentication failed."), status_code=resp.status_code)

        if not resp.content:
            return None
        try:
            return resp.json()
        except ValueError as e:
            raise AuthError("Auth returned invalid JSON.", status_code=resp.status_code) from e

    @staticmethod
    def _session_from_payload(data: Any) -> Session | None:
        """Build a Session from a GoTrue token response (None if it has no token)."""
        if not isinstance(data, dict):
            return None
        access_token = data.get("access_token")
        if not access_token:
            return None

        user = data.get("user") if isinstance(data.get("user"), dict) else {}
        expires_at = data.get("expires_at")
        if expires_at is None and data.get("expires_in") is not None:
            expires_at = time.time() + float(data["expires_in"])

        user_id = user.get("id") or data.get("user_id")
        if not user_id:
            return None

        return Session(
            access_token=str(access_token),
            user_id=str(user_id),
            email=user.get("email"),
            refresh_token=data.get("refresh_token"),
            expires_at=float(expires_at) if expires_at is not None else None,
        )

    def _credentials(self, username: str, password: str) -> dict[str, str]:
        email = username_to_email(username, self._email_domain)
        if len(password or "") < MIN_PASSWORD_LENGTH:
            raise AuthError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters.")
        return {"email": email, "password": password}

    # ---- public API ----

    async def sign_in(self, username: str, password: str) -> Session:
        creds = self._credentials(username, password)
        data = await self._post("token?grant_type=password", creds)
        session = self._session_from_payload(data)
        if session is None:
            raise AuthError("Sign-in did not return a session.")
        self._remember(session)
        logger.info("Signed in as %s", creds["email"])
        return session

    async def sign_up(self, username: str, password: str) -> Session | None:
        """
        Create an account.

        Returns the new session, or None when the project requires e-mail
        confirmation before the first sign-in.
        """
        creds = self._credentials(username, password)
        data = await self._post("signup", creds)
        session = self._session_from_payload(data)
        if session is None:
            logger.info("Signed up %s (confirmation required)", creds["email"])
            return None
        self._remember(session)
        logger.info("Signed up and signed in as %s", creds["email"])
        return session

    async def refresh(self) -> Session:
        """
        Trade the refresh token for a new access token and save the result.

        Raises AuthError when there is nothing to refresh or the server refuses.
        """
        old = self._session
        if old is None or not old.refresh_token:
            raise AuthError("Session expired. Sign in again.")

        data = await self._post("token?grant_type=refresh_token", {"refresh_token": old.refresh_token})
        if isinstance(data, dict) and not isinstance(data.get("user"), dict):
            data = {**data, "user": {"id": old.user_id, "email": old.email}}
        session = self._session_from_payload(data)
        if session is None:
            raise AuthError("Refresh did not return a session.")
        self._remember(session)
        logger.info("Session renewed for %s", session.email or session.user_id)
        return session

    async def sign_out(self) -> None:
        """Forget the session locally; revoking it remotely is best-effort."""
        session = self._session
        self._forget()
        if session is None:
            return
        try:
            await self._post("logout", None, access_token=session.access_token)
        except AuthError as e:
            logger.info("Remote sign-out failed: %s", e.message)
        logger.info("Signed out %s", session.email or session.user_id)
