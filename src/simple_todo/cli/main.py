# src/simple_todo/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, resumes a saved session if there is one,
then runs the console REPL on the asyncio event loop.
"""

from __future__ import annotations

import asyncio
import logging

from ..cli.bootstrap import create_initial_state, resume_session, shutdown
from ..config import get_settings
from ..connectors.console_connector import run_console_loop
from ..logging_setup import setup_logging

logger = logging.getLogger(__name__)


async def _run(settings) -> None:
    # IMPORTANT: reuse same settings object
    state = create_initial_state(settings=settings)
    try:
        if await resume_session(state):
            logger.info("Resumed saved session.")
        await run_console_loop(state)
    finally:
        await shutdown(state)


def main() -> None:
    settings = get_settings()

    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)

    log_dir = getattr(settings, "data_dir", ".local/simple_todo")
    setup_logging(log_dir=log_dir, console_level=console_level)

    logger.info("Starting %s...", getattr(settings, "app_name", "Simple Todo"))

    try:
        asyncio.run(_run(settings))
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down...")
    logger.info("Bye.")


if __name__ == "__main__":
    main()
