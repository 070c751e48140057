# src/simple_todo/core/http.py

"""Small helpers shared by the Supabase REST clients (tasks + auth)."""

from __future__ import annotations

from typing import Any

import httpx

# Keys used by PostgREST / GoTrue error bodies, in order of preference.
_MESSAGE_KEYS = ("message", "msg", "error_description", "error", "hint", "details")


def make_timeout(seconds: float) -> httpx.Timeout:
    seconds = max(1.0, float(seconds))
    return httpx.Timeout(seconds, connect=min(5.0, seconds))


def create_async_client(timeout_seconds: float) -> httpx.AsyncClient:
    return httpx.AsyncClient(timeout=make_timeout(timeout_seconds))


def error_message(resp: httpx.Response, default: str = "Request failed.") -> str:
    """Pull a human-readable message out of an error response."""
    try:
        body: Any = resp.json()
    except ValueError:
        body = None

    if isinstance(body, dict):
        for key in _MESSAGE_KEYS:
            val = body.get(key)
            if isinstance(val, str) and val.strip():
                return val.strip()

    text = (resp.text or "").strip()
    if text:
        return text[:300]
    return f"{default} (HTTP {resp.status_code})"
