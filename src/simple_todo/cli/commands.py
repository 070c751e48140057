# src/simple_todo/cli/commands.py

from __future__ import annotations

import contextlib
import inspect
import logging
from collections.abc import Awaitable, Callable
from datetime import datetime
from typing import cast

from ..auth.session import SupabaseAuth
from ..core.errors import AuthError, UnauthorizedError
from ..core.state import AppState, close_task_session, open_task_session
from ..tasks.task_engine import TaskStateEngine
from ..tasks.task_models import Task

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[AppState, list[str]], Awaitable[str]]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], Awaitable[str]]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)

SIGN_IN_HINT = "You must sign in first. Use /signin <username> <password> (or /signup)."


class CommandRegistry:
    """Simple slash-command registry used by the console connector (/help, /add, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}
        self._raw: set[str] = set()

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
        *,
        raw: bool = False,
    ) -> None:
        """raw=True: the handler gets the rest of the line as one untouched argument."""
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler
        if raw:
            self._raw.update([key, *(a.lower() for a in aliases)])

    async def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]
        if name in self._raw:
            rest = line[1:].lstrip()[len(parts[0]):].lstrip()
            args = [rest] if rest else []

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except (TypeError, ValueError):
            nparams = 3

        if nparams >= 3:
            h3 = cast(CommandHandler3, handler)
            return await h3(state, args, emit)

        h2 = cast(CommandHandler2, handler)
        return await h2(state, args)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        lines.append("Any line that is not a command is added as a new task.")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- rendering ----


def _section(title: str, items: tuple[Task, ...], empty: str, listing: list) -> list[str]:
    lines = [title]
    if not items:
        lines.append(f"  {empty}")
        return lines
    for task in items:
        listing.append(task.id)
        mark = "x" if task.completed else " "
        lines.append(f"  {len(listing)}. [{mark}] {task.text}")
    return lines


def render_tasks(state: AppState, now: datetime | None = None) -> str:
    """Render the three buckets and remember the printed order in state.listing."""
    engine = state.engine
    if engine is None:
        return SIGN_IN_HINT
    if engine.loading:
        return "Loading..."

    buckets = engine.get_buckets(now)
    listing: list = []

    lines = _section("Today's Tasks", buckets.today_open, "No tasks for today. Add one above!", listing)
    lines.append("")
    lines += _section("Completed Today", buckets.today_completed, "No completed tasks today yet.", listing)
    if buckets.past_completed:
        lines.append("")
        lines += _section("Previously Completed", buckets.past_completed, "", listing)

    stale_open = sum(1 for t in buckets.hidden if not t.completed)
    if stale_open:
        lines.append("")
        lines.append(f"({stale_open} open task(s) from earlier days are not shown.)")

    done, total = engine.completion_summary()
    if total:
        lines.append("")
        lines.append(f"{done} of {total} tasks completed")

    if engine.last_error is not None:
        lines.append("")
        lines.append(f"Error: {engine.last_error.message}")

    state.listing = listing
    return "\n".join(lines)


# ---- helpers ----


def _resolve_task_id(state: AppState, args: list[str]) -> tuple[object | None, str | None]:
    if not args:
        return None, "Give the task number shown by /list."
    try:
        n = int(args[0])
    except ValueError:
        return None, f"Not a task number: {args[0]}"
    if n < 1 or n > len(state.listing):
        return None, f"No task number {n}. Use /list to see the numbers."
    return state.listing[n - 1], None


async def _renew_session(state: AppState) -> bool:
    auth = state.auth
    if not isinstance(auth, SupabaseAuth) or not auth.can_refresh:
        return False
    try:
        await auth.refresh()
    except AuthError as e:
        logger.info("Session renewal failed: %s", e.message)
        return False
    return True


async def _run(state: AppState, engine: TaskStateEngine, op: Callable[[], Awaitable[object]]) -> str:
    """Run one engine operation; on UnauthorizedError renew the session and retry once."""
    await op()
    if isinstance(engine.last_error, UnauthorizedError) and await _renew_session(state):
        await op()
    return render_tasks(state)


# ---- commands ----


async def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


async def cmd_status(state: AppState, args: list[str]) -> str:
    session = state.auth.current_session()
    who = (session.email or session.user_id) if session is not None else "not signed in"
    url = getattr(state.settings, "supabase_url", "") or "<unset>"
    lines = ["Status:", f"  User: {who}", f"  Supabase: {url}"]
    if state.engine is not None:
        done, total = state.engine.completion_summary()
        lines.append(f"  Tasks: {total} ({done} completed)")
    return "\n".join(lines)


async def cmd_list(state: AppState, args: list[str]) -> str:
    if state.engine is None:
        return SIGN_IN_HINT
    return render_tasks(state)


async def cmd_refresh(state: AppState, args: list[str]) -> str:
    engine = state.engine
    if engine is None:
        return SIGN_IN_HINT
    return await _run(state, engine, engine.initialize)


async def cmd_add(state: AppState, args: list[str]) -> str:
    """
    /add <text>  -> the text is taken exactly as typed (args holds the raw rest of the line)
    """
    engine = state.engine
    if engine is None:
        return SIGN_IN_HINT
    text = args[0] if args else ""
    if not text.strip():
        return "Usage: /add <task text>"
    return await _run(state, engine, lambda: engine.add_task(text))


async def cmd_done(state: AppState, args: list[str]) -> str:
    """
    /done N  -> toggle task N (complete / re-open)
    """
    engine = state.engine
    if engine is None:
        return SIGN_IN_HINT
    task_id, problem = _resolve_task_id(state, args)
    if problem:
        return problem
    return await _run(state, engine, lambda: engine.toggle_task(task_id))


async def cmd_rm(state: AppState, args: list[str]) -> str:
    engine = state.engine
    if engine is None:
        return SIGN_IN_HINT
    task_id, problem = _resolve_task_id(state, args)
    if problem:
        return problem
    return await _run(state, engine, lambda: engine.remove_task(task_id))


async def _authenticate(
    state: AppState,
    args: list[str],
    emit: CommandEmitter | None,
    *,
    sign_up: bool,
) -> str:
    usage = "/signup <username> <password>" if sign_up else "/signin <username> <password>"
    if len(args) != 2:
        return f"Usage: {usage}"

    auth = state.auth
    if not isinstance(auth, SupabaseAuth):
        return "Sign-in is not available in this setup."

    if emit:
        with contextlib.suppress(Exception):
            emit("Please wait...")

    username, password = args
    try:
        if sign_up:
            session = await auth.sign_up(username, password)
            if session is None:
                return "Account created. Confirm your e-mail, then /signin."
        else:
            await auth.sign_in(username, password)
    except AuthError as e:
        logger.debug("Authentication failed for %s", username)
        return f"Error: {e.message}"

    await open_task_session(state)
    return render_tasks(state)


async def cmd_signin(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    return await _authenticate(state, args, emit, sign_up=False)


async def cmd_signup(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    return await _authenticate(state, args, emit, sign_up=True)


async def cmd_signout(state: AppState, args: list[str]) -> str:
    close_task_session(state)
    auth = state.auth
    if isinstance(auth, SupabaseAuth):
        await auth.sign_out()
    return "Signed out."


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("status", cmd_status, help_text="Show who is signed in and task totals.")
registry.register("list", cmd_list, help_text="Show today's, completed and past tasks.", aliases=["ls", "l"])
registry.register("refresh", cmd_refresh, help_text="Reload tasks from the server.")
registry.register("add", cmd_add, help_text="Add a task: /add <text>.", aliases=["a"], raw=True)
registry.register("done", cmd_done, help_text="Complete / re-open task N: /done N.", aliases=["toggle", "x"])
registry.register("rm", cmd_rm, help_text="Delete task N: /rm N.", aliases=["del", "delete"])
registry.register("signin", cmd_signin, help_text="Sign in: /signin <username> <password>.", aliases=["login"])
registry.register("signup", cmd_signup, help_text="Create an account: /signup <username> <password>.")
registry.register("signout", cmd_signout, help_text="Sign out and forget the local session.", aliases=["logout"])
