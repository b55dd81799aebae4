# tests/test_models_and_agents.py

from __future__ import annotations

import json

import pytest

from agent_architect.core.errors import ExecutorError, PlanningError, PlanValidationError
from agent_architect.llm.agents import (
    LLMPlanner,
    LLMTaskExecutor,
    build_task_prompt,
    parse_agent_output,
    parse_plan,
)
from agent_architect.llm.offline import OfflineLLMClient
from agent_architect.plans.models import Artifact, File, Plan, Role, Task, TaskStatus

from .fakes import FakeLLMClient

PLAN_JSON = {
    "high_level_goal": "Ship a CLI",
    "reasoning": "small steps",
    "roles": [{"title": "Dev", "purpose": "write code"}],
    "tasks": [
        {"id": "setup", "description": "init repo", "role": "Dev", "deps": [], "status": "completed"},
        {"id": "impl", "description": "write it", "role": "Dev", "agent": "coder", "deps": ["setup", "impl", "setup"]},
    ],
    "team": {"notes": "be brief"},
}


def test_plan_from_dict_forces_pending_and_cleans_deps() -> None:
    plan = Plan.from_dict(PLAN_JSON)

    assert plan.goal == "Ship a CLI"
    assert plan.team_notes == "be brief"
    assert [t.status for t in plan.tasks] == [TaskStatus.PENDING, TaskStatus.PENDING]
    impl = plan.get_task("impl")
    assert impl is not None
    assert impl.deps == ["setup"]
    assert impl.agent_hint == "coder"


def test_plan_rejects_duplicate_task_ids_and_roles() -> None:
    dup_tasks = dict(PLAN_JSON, tasks=[PLAN_JSON["tasks"][0], PLAN_JSON["tasks"][0]])
    with pytest.raises(PlanValidationError):
        Plan.from_dict(dup_tasks)

    dup_roles = dict(PLAN_JSON, roles=[{"title": "Dev", "purpose": "a"}, {"title": "Dev", "purpose": "b"}])
    with pytest.raises(PlanValidationError):
        Plan.from_dict(dup_roles)


def test_task_rejects_self_dependency() -> None:
    with pytest.raises(PlanValidationError):
        Task(id="a", description="d", role_title="Dev", deps=["a"])


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("a/b.txt", "a/b.txt"),
        ("./a/b.txt", "a/b.txt"),
        ("a//b.txt", "a/b.txt"),
        ("/a/b.txt", "a/b.txt"),
        ("a\\b.txt", "a/b.txt"),
        ("a/./c/../b.txt", "a/b.txt"),
    ],
)
def test_file_paths_are_canonical_on_construction(raw: str, expected: str) -> None:
    assert File(raw, "c").path == expected
    assert File.from_dict({"path": raw, "content": "c"}) == File(expected, "c")


@pytest.mark.parametrize("raw", ["", "   ", ".", "./"])
def test_file_rejects_empty_paths(raw: str) -> None:
    with pytest.raises(ValueError):
        File(raw, "c")


def test_parse_plan_accepts_fenced_json_and_fills_goal() -> None:
    payload = dict(PLAN_JSON)
    payload.pop("high_level_goal")
    text = "```json\n" + json.dumps(payload) + "\n```"

    plan = parse_plan(text, "fallback goal")
    assert plan.goal == "fallback goal"
    assert len(plan.tasks) == 2


def test_parse_plan_errors() -> None:
    with pytest.raises(PlanningError, match="No response"):
        parse_plan("", "g")
    with pytest.raises(PlanningError, match="invalid JSON"):
        parse_plan("not json", "g")
    with pytest.raises(PlanningError, match="invalid plan"):
        parse_plan(json.dumps(dict(PLAN_JSON, roles=[{"title": ""}])), "g")


def test_parse_agent_output_with_and_without_files() -> None:
    text = json.dumps(
        {
            "reasoning": "thought",
            "output": "did it",
            "artifact": {"files": [{"path": "./src/app.py", "content": "x = 1"}]},
        }
    )
    result = parse_agent_output(text)
    assert result.output == "did it"
    assert result.reasoning == "thought"
    assert result.files == (File("src/app.py", "x = 1"),)

    bare = parse_agent_output('{"output": "summary only", "artifact": null}')
    assert bare.files == ()


@pytest.mark.parametrize(
    "text",
    ["", "garbage", '{"reasoning": "no output"}', '{"output": "x", "artifact": {"files": "nope"}}'],
)
def test_parse_agent_output_rejects_bad_shapes(text: str) -> None:
    with pytest.raises(ExecutorError):
        parse_agent_output(text)


def test_task_prompt_includes_role_goal_and_context() -> None:
    task = Task(id="impl", description="write it", role_title="Dev")
    role = Role(title="Dev", purpose="write code")
    ctx = [Artifact(id="a1", task_id="setup", files=(File("README.md", "hello"),), created_at=1.0)]

    prompt = build_task_prompt(task, role, "Ship a CLI", ctx)
    assert "GOAL: Ship a CLI" in prompt
    assert "ID: impl" in prompt
    assert "YOUR ROLE: Dev" in prompt
    assert "--- ARTIFACT FROM TASK: setup ---" in prompt
    assert "FILE: README.md" in prompt

    assert "No previous context." in build_task_prompt(task, role, "g", [])


@pytest.mark.asyncio
async def test_llm_planner_and_executor_use_client() -> None:
    llm = FakeLLMClient(next_text=json.dumps(PLAN_JSON))
    plan = await LLMPlanner(llm).plan("Ship a CLI", [File("notes.txt", "ctx")])
    assert [t.id for t in plan.tasks] == ["setup", "impl"]
    assert "START FILE: notes.txt" in llm.calls[0][0][0]["content"]

    llm.next_text = '{"output": "ok"}'
    result = await LLMTaskExecutor(llm).execute(plan.tasks[0], plan.roles[0], plan.goal, [])
    assert result.output == "ok"


@pytest.mark.asyncio
async def test_offline_client_drives_a_full_plan() -> None:
    llm = OfflineLLMClient()
    plan = await LLMPlanner(llm).plan("demo app", [])
    assert plan.goal == "demo app"
    assert [t.id for t in plan.tasks] == ["outline", "write_readme"]

    result = await LLMTaskExecutor(llm).execute(plan.tasks[1], plan.roles[1], plan.goal, [])
    assert result.files[0].path == "README.md"
