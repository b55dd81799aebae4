# tests/test_commands.py

from __future__ import annotations

import json
import zipfile
from pathlib import Path

import pytest

from agent_architect.cli.bootstrap import AppState
from agent_architect.cli.commands import registry
from agent_architect.plans.models import ExecutionState, File, TaskStatus

from .fakes import make_plan

PLAN_TEXT = json.dumps(
    {
        "high_level_goal": "Ship a CLI",
        "reasoning": "two steps",
        "roles": [{"title": "Dev", "purpose": "write code"}],
        "tasks": [
            {"id": "setup", "description": "init repo", "role": "Dev", "deps": []},
            {"id": "impl", "description": "write it", "role": "Dev", "deps": ["setup"]},
        ],
    }
)


def test_registry_ignores_plain_text_and_rejects_unknown(state: AppState) -> None:
    assert registry.handle(state, "hello there") is None
    assert "Empty command" in (registry.handle(state, "/") or "")
    assert "Unknown command: /nope" in (registry.handle(state, "/nope") or "")

    help_text = registry.handle(state, "/?") or ""
    assert "/run" in help_text
    assert "/export" in help_text


def test_status_without_plan(state: AppState) -> None:
    reply = registry.handle(state, "/status") or ""
    assert "Execution: idle" in reply
    assert "Plan: none" in reply


def test_plan_command_generates_plan_and_consumes_attachments(
    state: AppState, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.chdir(tmp_path)
    (tmp_path / "notes.md").write_text("context", encoding="utf-8")
    llm = state.planner._llm  # type: ignore[attr-defined]
    llm.next_text = PLAN_TEXT

    assert "Attached 1 file(s): notes.md" == registry.handle(state, "/attach notes.md")

    emitted: list[str] = []
    reply = registry.handle(state, "/plan Ship a CLI", emitted.append) or ""

    assert reply.startswith("Plan ready: 1 roles, 2 tasks.")
    assert emitted and emitted[0].startswith("[PLAN]")
    assert state.pending_files == []
    snap = state.session.artifacts.snapshot()
    assert len(snap) == 1 and snap[0].files == (File("notes.md", "context"),)

    shown = registry.handle(state, "/plan") or ""
    assert "Goal: Ship a CLI" in shown
    assert "impl (Dev) deps=[setup] write it" in shown


def test_commands_that_need_a_plan_report_it(state: AppState) -> None:
    assert registry.handle(state, "/tasks") == "Error: No plan loaded. Use /plan <goal> first."
    assert (registry.handle(state, "/run") or "").startswith("Error: No plan loaded")


def test_add_edit_dep_and_delete_through_commands(state: AppState) -> None:
    state.session.replace_plan(make_plan(("a", [])))

    assert registry.handle(state, "/add b Dev a write the docs") == "Task added: b"
    assert registry.handle(state, "/edit b write better docs") == "Task updated: b"
    assert registry.handle(state, "/dep b a") == "b no longer depends on a"
    assert registry.handle(state, "/role QA | test things") == "Role added: QA"

    tasks = registry.handle(state, "/tasks") or ""
    assert "[ ] [a] do a (Dev)" in tasks
    assert "[ ] [b] write better docs (Dev)" in tasks

    assert registry.handle(state, "/rm b") == "Task deleted: b"
    assert registry.handle(state, "/rm b") == "Unknown id: b"
    assert (registry.handle(state, "/add a Dev - dup") or "").startswith("Error:")


def test_edits_are_refused_while_running(state: AppState) -> None:
    state.session.replace_plan(make_plan(("a", [])))
    state.session.execution_state = ExecutionState.RUNNING

    reply = registry.handle(state, "/add b Dev - nope") or ""
    assert reply.startswith("Error:")
    assert [t.id for t in state.session.plan.tasks] == ["a"]  # type: ignore[union-attr]


def test_status_lists_blocked_tasks(state: AppState) -> None:
    plan = make_plan(("a", []), ("b", ["ghost"]))
    state.session.replace_plan(plan)
    plan.tasks[0].status = TaskStatus.COMPLETED

    reply = registry.handle(state, "/status") or ""
    assert "Progress: 50% of 2 tasks" in reply
    assert "b: missing dependency: ghost" in reply


def test_run_without_runner_and_pause_when_idle(state: AppState) -> None:
    state.session.replace_plan(make_plan(("a", [])))
    assert registry.handle(state, "/run") == "Scheduler is not running in this process."
    assert registry.handle(state, "/pause") == "Nothing to pause (state: idle)."


def test_files_show_history_and_export(state: AppState, tmp_path: Path) -> None:
    assert registry.handle(state, "/files") == "No artifacts generated yet."

    store = state.session.artifacts
    store.create("t1", [File("src/app.py", "v1"), File("README.md", "r")])
    store.create("t2", [File("src/app.py", "v2")])

    combined = registry.handle(state, "/files") or ""
    assert combined.startswith("Project (latest versions):")
    assert "src/" in combined and "app.py" in combined

    grouped = registry.handle(state, "/files grouped") or ""
    assert "Task: t1" in grouped and "Task: t2" in grouped
    assert (registry.handle(state, "/files sideways") or "").startswith("Error:")

    assert registry.handle(state, "/show src/app.py") == "src/app.py (from task t2):\nv2"
    assert registry.handle(state, "/show missing.txt") == "Unknown id: missing.txt"
    history = registry.handle(state, "/history src/app.py") or ""
    assert "1. task=t1" in history and "2. task=t2" in history

    dest = tmp_path / "out.zip"
    assert registry.handle(state, f"/export combined {dest}") == f"Exported combined archive to {dest}"
    with zipfile.ZipFile(dest) as zf:
        assert sorted(zf.namelist()) == ["README.md", "src/app.py"]
        assert zf.read("src/app.py") == b"v2"

    reply = registry.handle(state, "/export grouped") or ""
    assert reply.endswith("Project_Artifacts.zip")
    assert (tmp_path / "exports" / "Project_Artifacts.zip").exists()


def test_task_and_show_resolve_artifacts_from_the_store(state: AppState) -> None:
    plan = make_plan(("a", []))
    state.session.replace_plan(plan)
    art = state.session.artifacts.create("a", [File("src/app.py", "v1"), File("notes.md", "n")])
    plan.tasks[0].status = TaskStatus.COMPLETED
    plan.tasks[0].artifact_id = art.id

    detail = registry.handle(state, "/task a") or ""
    assert f"Artifact: {art.id} (src/app.py, notes.md)" in detail

    assert registry.handle(state, "/show ./src//app.py") == "src/app.py (from task a):\nv1"
    assert registry.handle(state, "/show src") == "Unknown id: src"
    assert "1. task=a" in (registry.handle(state, "/history ./notes.md") or "")
