# src/simple_todo/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- No secrets required at import time (the store/auth complain only when used).
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

ENV_PREFIX = "SIMPLETODO"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _load_dotenv_if_available() -> None:
    """Load .env locally if python-dotenv is installed. Safe no-op otherwise."""
    try:
        from dotenv import load_dotenv  # type: ignore
    except Exception:
        return
    load_dotenv(override=False)


_load_dotenv_if_available()


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _first_env(*names: str, default: str | None = None) -> str | None:
    for n in names:
        v = os.getenv(n)
        if v is not None and v.strip() != "":
            return v
    return default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Supabase ----
    supabase_url: str
    supabase_anon_key: Optional[str]
    todos_table: str
    email_domain: str
    http_timeout_seconds: float

    # ---- Local data paths (ignored by git) ----
    data_dir: Path
    session_path: Path
    persist_session: bool

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "Simple Todo")
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        supabase_url = (_first_env(_k("SUPABASE_URL"), "SUPABASE_URL", default="") or "").strip()
        supabase_anon_key = _first_env(_k("SUPABASE_ANON_KEY"), "SUPABASE_ANON_KEY", default=None)
        todos_table = _env(_k("TODOS_TABLE"), "todos").strip() or "todos"
        # Usernames are turned into e-mail addresses under this domain for Supabase auth.
        email_domain = _env(_k("EMAIL_DOMAIN"), "simpletodo.app").strip() or "simpletodo.app"
        http_timeout_seconds = _env_float(_k("HTTP_TIMEOUT_SECONDS"), 10.0)

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/simple_todo"))
        session_path = _env_path(_k("SESSION_PATH"), data_dir / "session.json")
        persist_session = _env_bool(_k("PERSIST_SESSION"), True)

        return Settings(
            app_name=app_name,
            log_level=log_level,
            supabase_url=supabase_url.rstrip("/"),
            supabase_anon_key=supabase_anon_key,
            todos_table=todos_table,
            email_domain=email_domain,
            http_timeout_seconds=max(1.0, http_timeout_seconds),
            data_dir=data_dir,
            session_path=session_path,
            persist_session=persist_session,
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
