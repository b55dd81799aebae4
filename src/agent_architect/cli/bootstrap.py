# src/agent_architect/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires concrete implementations (LLM, planner, executor, artifact repo)
  into a Session and an AppState.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Coroutine
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, TypeVar

from ..artifacts.sqlite_repo import SQLiteArtifactRepo
from ..artifacts.store import ArtifactStore
from ..config import get_settings
from ..core.ports import LLMClient, Planner, TaskExecutor
from ..core.state import Session
from ..llm.agents import LLMPlanner, LLMTaskExecutor
from ..llm.client import OpenRouterLLMClient
from ..llm.offline import OfflineLLMClient
from ..plans.editor import PlanEditor
from ..plans.models import File
from ..tasks.scheduler import PlanScheduler, SchedulerRunner, StepListener

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class AppState:
    settings: object

    session: Session
    planner: Planner
    executor: TaskExecutor
    scheduler: PlanScheduler
    editor: PlanEditor

    offline: bool = False
    runner: SchedulerRunner | None = None
    # Files attached with /attach, consumed by the next /plan.
    pending_files: list[File] = field(default_factory=list)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.artifacts_db_path.parent.mkdir(parents=True, exist_ok=True)
    settings.export_dir.mkdir(parents=True, exist_ok=True)


def _make_llm(settings) -> tuple[LLMClient, bool]:
    if getattr(settings, "offline", False):
        return OfflineLLMClient(), True
    try:
        return OpenRouterLLMClient(settings), False
    except RuntimeError as e:
        # Fallback for demos / local runs without external services.
        logger.warning("LLM unavailable (%s); using offline demo client.", e)
        return OfflineLLMClient(), True


def create_initial_state(*, settings=None, listener: StepListener | None = None) -> AppState:
    """
    Create AppState from the provided settings and replay persisted artifacts.

    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    llm, offline = _make_llm(settings)
    session = Session(artifacts=ArtifactStore(SQLiteArtifactRepo(settings.artifacts_db_path)))
    session.artifacts.load()

    executor = LLMTaskExecutor(llm)
    scheduler = PlanScheduler(
        session,
        executor,
        step_delay_seconds=getattr(settings, "step_delay_seconds", 1.0),
        listener=listener,
    )

    return AppState(
        settings=settings,
        session=session,
        planner=LLMPlanner(llm),
        executor=executor,
        scheduler=scheduler,
        editor=PlanEditor(session),
        offline=offline,
    )


def run_async(state: AppState, coro: Coroutine[Any, Any, T], *, timeout: float | None = None) -> T:
    """
    Run a coroutine from the (blocking) console thread.

    When the scheduler thread is up, the coroutine runs on its loop so it
    never races the scheduler; otherwise a private loop is used.
    """
    if state.runner is not None:
        fut = asyncio.run_coroutine_threadsafe(coro, state.runner.loop)
        return fut.result(timeout=timeout)
    return asyncio.run(coro)


def read_local_file(path: str | Path, *, base: str | Path | None = None) -> File:
    """Read a local text file into a File; the artifact path is relative to `base` (or the file name)."""
    p = Path(path).expanduser()
    content = p.read_text("utf-8")
    if base is not None:
        try:
            rel = p.resolve().relative_to(Path(base).resolve()).as_posix()
        except ValueError:
            rel = p.name
    else:
        rel = p.name
    return File(path=rel, content=content)
