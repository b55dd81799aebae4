# src/agent_architect/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState (replaying persisted artifacts), starts
the scheduler thread, then runs the console REPL in the main thread.
"""

from __future__ import annotations

import logging

from ..cli.bootstrap import create_initial_state
from ..config import get_settings
from ..connectors.console_connector import console_step_listener, run_console_loop
from ..logging_setup import setup_logging
from ..tasks.scheduler import start_scheduler_in_background

logger = logging.getLogger(__name__)


def main() -> None:
    settings = get_settings()

    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)

    setup_logging(log_dir=settings.data_dir, console_level=console_level)

    # keep noisy libs readable
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("openai").setLevel(logging.WARNING)

    logger.info("Starting %s...", settings.app_name)

    state = create_initial_state(settings=settings, listener=console_step_listener)
    state.runner = start_scheduler_in_background(state.scheduler)

    try:
        run_console_loop(state)
    finally:
        if state.runner is not None:
            state.runner.stop()
            state.runner.join(timeout=10.0)
        logger.info("Bye.")


if __name__ == "__main__":
    main()
