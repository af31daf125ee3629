# src/tasktrack/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, mounts the dashboard and runs the
console REPL on the asyncio event loop.
"""

from __future__ import annotations

import asyncio
import logging

from ..cli.bootstrap import create_initial_state
from ..config import get_settings
from ..connectors.console_connector import AddressBar, ConsoleNotifier, run_console_loop
from ..core.state import AppState
from ..logging_setup import setup_logging

logger = logging.getLogger(__name__)


async def _shutdown(state: AppState) -> None:
    """Best-effort shutdown (no exceptions should escape)."""
    try:
        await state.dashboard.aclose()
    except Exception:
        logger.exception("Dashboard shutdown failed.")

    try:
        await state.api.aclose()
    except Exception:
        logger.debug("API client close failed.", exc_info=True)


async def _run(settings) -> None:
    state = create_initial_state(notifier=ConsoleNotifier(), sink=AddressBar(), settings=settings)
    try:
        await state.dashboard.mount()
        await run_console_loop(state)
    finally:
        await _shutdown(state)


def main() -> None:
    settings = get_settings()

    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)
    setup_logging(log_dir=settings.data_dir, console_level=console_level)

    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    logger.info("Starting %s...", settings.app_name)
    try:
        asyncio.run(_run(settings))
    except KeyboardInterrupt:
        logger.info("Interrupted.")
    logger.info("Bye.")


if __name__ == "__main__":
    main()
