# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from agent_architect.artifacts.store import ArtifactStore
from agent_architect.cli.bootstrap import AppState
from agent_architect.core.state import Session
from agent_architect.llm.agents import LLMPlanner, LLMTaskExecutor
from agent_architect.plans.editor import PlanEditor
from agent_architect.tasks.scheduler import PlanScheduler

from .fakes import FakeLLMClient, MemoryArtifactRepo


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and core modules.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="architect-test",
        log_level="DEBUG",
        step_delay_seconds=0.0,
        offline=True,
        data_dir=tmp_path,
        artifacts_db_path=tmp_path / "artifacts.sqlite3",
        export_dir=tmp_path / "exports",
    )


@pytest.fixture()
def repo() -> MemoryArtifactRepo:
    return MemoryArtifactRepo()


@pytest.fixture()
def session(repo: MemoryArtifactRepo) -> Session:
    return Session(artifacts=ArtifactStore(repo))


@pytest.fixture()
def state(settings: SimpleNamespace, session: Session) -> AppState:
    """
    AppState wired with deterministic fakes and no scheduler thread.
    """
    llm = FakeLLMClient()
    executor = LLMTaskExecutor(llm)
    return AppState(
        settings=settings,
        session=session,
        planner=LLMPlanner(llm),
        executor=executor,
        scheduler=PlanScheduler(session, executor, step_delay_seconds=0.0),
        editor=PlanEditor(session),
        offline=True,
    )
