# src/tasktrack/logging_setup.py

from __future__ import annotations

import logging
import sys
from pathlib import Path

# Modules that log once per fetch; too chatty for the REPL below WARNING.
_PER_FETCH_LOGGERS = ("tasktrack.tasks.fetch_scheduler", "tasktrack.tasks.reconciler")


class _ConsoleNoiseFilter(logging.Filter):
    """Console-only filter: the task list and the prompt share stderr/stdout."""

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name

        if name.startswith("tasktrack."):
            if name in _PER_FETCH_LOGGERS:
                return record.levelno >= logging.WARNING
            return True

        # httpx logs one INFO line per request; py.warnings and the rest only matter on errors.
        return record.levelno >= logging.ERROR


def setup_logging(
    *,
    log_dir: str | Path = ".local/tasktrack",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
) -> None:
    """
    Route logs to a filtered stderr handler and to <log_dir>/tasktrack.log.

    The file keeps every record down to `file_level`, including the stale-result
    drops and debounce firings hidden from the console. Replaces any handlers
    already on the root logger.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for handler in list(root.handlers):
        root.removeHandler(handler)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(fmt)
    console.addFilter(_ConsoleNoiseFilter())
    root.addHandler(console)

    logfile = logging.FileHandler(str(log_dir / "tasktrack.log"), encoding="utf-8")
    logfile.setLevel(file_level)
    logfile.setFormatter(fmt)
    root.addHandler(logfile)

    logging.captureWarnings(True)
