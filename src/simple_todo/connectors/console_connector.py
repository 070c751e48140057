# src/simple_todo/connectors/console_connector.py

from __future__ import annotations

import asyncio
import logging
from datetime import datetime

from ..cli.commands import SIGN_IN_HINT, cmd_add, render_tasks
from ..cli.commands import registry as command_registry
from ..core.state import AppState

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}")


async def _read_line(prompt: str) -> str:
    # input() blocks; keep the event loop free while waiting for the user.
    return await asyncio.to_thread(input, prompt)


async def handle_line(state: AppState, line: str) -> str | None:
    """
    One console submission: a /command, or a new task when it is plain text.

    Returns the text to print (None for blank input).
    """
    line = line.strip()
    if not line:
        return None

    def emit(text: str) -> None:
        print(f"[{_ts_local()}] {text}", flush=True)

    reply = await command_registry.handle(state, line, emit=emit)
    if reply is not None:
        return reply

    return await cmd_add(state, [line])


async def run_console_loop(state: AppState) -> None:
    app_name = str(getattr(getattr(state, "settings", None), "app_name", "Simple Todo"))
    logger.info("Console connector started.")
    _print_ts(f"[{app_name}] Type a task to add it. Use /help for commands. Use /exit to quit.\n")

    if state.engine is not None:
        print(render_tasks(state) + "\n")
    else:
        print(SIGN_IN_HINT + "\n")

    while True:
        try:
            user_input = (await _read_line("> ")).strip()
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            print()
            break

        if user_input.lower() in ("/exit", "/quit"):
            logger.info("Console exit command received.")
            break

        try:
            reply = await handle_line(state, user_input)
        except Exception:
            logger.exception("Command handler crashed.")
            reply = "Internal error while handling a command."

        if reply is not None:
            print(reply + "\n")

    logger.info("Console connector finished.")
