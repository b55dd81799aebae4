# src/agent_architect/connectors/console_connector.py

from __future__ import annotations

import logging
from datetime import datetime

from ..cli.bootstrap import AppState
from ..cli.commands import registry as command_registry
from ..llm.client import friendly_llm_error_message
from ..plans.models import Task
from ..tasks.scheduler import StepOutcome

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}", flush=True)


def console_step_listener(outcome: StepOutcome, task: Task | None) -> None:
    """Print scheduler progress; called from the scheduler thread."""
    if outcome == StepOutcome.COMPLETED and task is not None:
        _print_ts(f"[RUN] {task.id} completed." + (" (artifact recorded)" if task.artifact_id else ""))
    elif outcome == StepOutcome.FAILED and task is not None:
        _print_ts(f"[RUN] {task.id} failed: {task.error}. Plan paused; /run to resume.")
    elif outcome == StepOutcome.FINISHED:
        _print_ts("[RUN] All tasks completed. Use /files or /export.")
    elif outcome == StepOutcome.PAUSED:
        _print_ts("[RUN] No runnable tasks left and some failed. Plan paused.")


def run_console_loop(state: AppState) -> None:
    logger.info("Console connector started (offline=%s).", state.offline)
    _print_ts("[CONSOLE] Use /plan <goal> to start, /help for commands, /exit to quit.\n")

    def emit(text: str) -> None:
        # Immediate user-visible feedback for long operations (e.g. planning)
        _print_ts(text)

    while True:
        try:
            user_input = input(">>> ").strip()
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            print()
            break

        if not user_input:
            continue

        if user_input.lower() in ("/exit", "/quit"):
            logger.info("Console exit command received.")
            break

        try:
            cmd_response = command_registry.handle(state, user_input, emit=emit)
        except RuntimeError as e:
            # LLM configuration/network failures surface as RuntimeError.
            cmd_response = f"[LLM] {friendly_llm_error_message(e)}"
        except Exception:
            logger.exception("Command handler crashed.")
            cmd_response = "Internal error while handling a command."

        if cmd_response is None:
            cmd_response = "Commands start with '/'. Use /plan <goal> to describe what to build."

        _print_ts(cmd_response)

    logger.info("Console connector finished.")
