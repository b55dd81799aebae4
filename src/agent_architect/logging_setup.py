# src/agent_architect/logging_setup.py

from __future__ import annotations

import logging
import sys
from pathlib import Path


# Loggers whose INFO lines the console already reports in its own words
# (console_step_listener prints task results and "(artifact recorded)").
# LLM model fallback details stay in the log file only.
_QUIET_PREFIXES = (
    "agent_architect.tasks.",
    "agent_architect.artifacts.",
    "agent_architect.llm.",
)


class _ConsoleNoiseFilter(logging.Filter):
    """
    Keep the interactive console readable while a plan runs in the background:
    - plan, editor and command logs pass through
    - scheduler/artifact/LLM chatter only at WARNING+ (stall diagnostics and
      task failures still show)
    - Python warnings and third-party libraries only at ERROR+
    """

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name

        if name.startswith("agent_architect."):
            if name.startswith(_QUIET_PREFIXES):
                return record.levelno >= logging.WARNING
            return True

        return record.levelno >= logging.ERROR


def setup_logging(
    *,
    log_dir: str | Path = ".local/architect",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
) -> None:
    """
    Configure logging with:
    - Console handler: readable + filtered for interactive use
    - File handler: full logs for debugging

    Call this ONCE, very early (before first logger.info).
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "architect.log"

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)

    # Remove any pre-existing handlers to avoid duplicates.
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    ch = logging.StreamHandler(sys.stderr)
    ch.setLevel(console_level)
    ch.setFormatter(fmt)
    ch.addFilter(_ConsoleNoiseFilter())
    root.addHandler(ch)

    fh = logging.FileHandler(str(log_file), encoding="utf-8")
    fh.setLevel(file_level)
    fh.setFormatter(fmt)
    root.addHandler(fh)

    # Route warnings.warn(...) into logging as 'py.warnings'
    logging.captureWarnings(True)
