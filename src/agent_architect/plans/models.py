# src/agent_architect/plans/models.py

from __future__ import annotations

import posixpath
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from ..core.errors import PlanValidationError

INITIAL_CONTEXT_TASK_ID = "initial-context"


class TaskStatus(StrEnum):
    """
    Task lifecycle status.

    pending -> running -> completed | failed. Only the scheduler moves a task
    out of pending (see plans/transitions.py).
    """

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class ExecutionState(StrEnum):
    """Plan-level execution state (distinct from individual task status)."""

    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    FINISHED = "finished"
    # Reserved for whole-plan failure; task failures only pause.
    FAILED = "failed"


@dataclass(slots=True, frozen=True)
class Role:
    title: str
    purpose: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Role:
        title = str(data.get("title") or "").strip()
        if not title:
            raise PlanValidationError("role title is required")
        return cls(title=title, purpose=str(data.get("purpose") or "").strip())


def normalize_path(raw: str) -> str:
    """
    Canonical artifact path: slash-delimited, relative, no `.` or empty segments.

    "./a//b.txt", "/a/b.txt" and "a\\b.txt" all become "a/b.txt". Returns ""
    when nothing is left.
    """
    raw = (raw or "").strip().replace("\\", "/")
    if not raw:
        return ""
    path = posixpath.normpath(raw).lstrip("/")
    return "" if path == "." else path


@dataclass(slots=True, frozen=True)
class File:
    """A single text file; `path` is canonicalized on construction (see normalize_path)."""

    path: str
    content: str

    def __post_init__(self) -> None:
        path = normalize_path(self.path)
        if not path:
            raise ValueError("file path is required")
        if path != self.path:
            object.__setattr__(self, "path", path)

    def to_dict(self) -> dict[str, str]:
        return {"path": self.path, "content": self.content}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> File:
        return cls(path=str(data.get("path") or ""), content=str(data.get("content") or ""))


def normalize_deps(task_id: str, deps: Any) -> list[str]:
    """Ordered, de-duplicated dependency ids without the task's own id."""
    out: list[str] = []
    for dep in deps or []:
        dep_id = str(dep).strip()
        if not dep_id or dep_id == task_id or dep_id in out:
            continue
        out.append(dep_id)
    return out


@dataclass(slots=True)
class Task:
    id: str
    description: str
    role_title: str
    deps: list[str] = field(default_factory=list)
    agent_hint: str | None = None

    status: TaskStatus = TaskStatus.PENDING
    output: str | None = None
    artifact_id: str | None = None
    error: str | None = None

    def __post_init__(self) -> None:
        if not self.id or not self.id.strip():
            raise PlanValidationError("task id is required")
        if self.id in self.deps:
            raise PlanValidationError(f"task {self.id!r} cannot depend on itself")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Task:
        task_id = str(data.get("id") or "").strip()
        agent = data.get("agent")
        return cls(
            id=task_id,
            description=str(data.get("description") or "").strip(),
            role_title=str(data.get("role") or "").strip(),
            deps=normalize_deps(task_id, data.get("deps")),
            agent_hint=str(agent).strip() if agent else None,
        )


@dataclass(slots=True)
class Plan:
    goal: str
    reasoning: str
    roles: list[Role] = field(default_factory=list)
    tasks: list[Task] = field(default_factory=list)
    team_notes: str | None = None

    def __post_init__(self) -> None:
        seen_tasks: set[str] = set()
        for t in self.tasks:
            if t.id in seen_tasks:
                raise PlanValidationError(f"duplicate task id: {t.id}")
            seen_tasks.add(t.id)
        seen_roles: set[str] = set()
        for r in self.roles:
            if r.title in seen_roles:
                raise PlanValidationError(f"duplicate role title: {r.title}")
            seen_roles.add(r.title)

    def get_task(self, task_id: str) -> Task | None:
        for t in self.tasks:
            if t.id == task_id:
                return t
        return None

    def get_role(self, title: str) -> Role | None:
        for r in self.roles:
            if r.title == title:
                return r
        return None

    def progress(self) -> float:
        """Completed fraction in [0, 1]; an empty plan counts as done."""
        if not self.tasks:
            return 1.0
        done = sum(1 for t in self.tasks if t.status == TaskStatus.COMPLETED)
        return done / len(self.tasks)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Plan:
        """
        Build a fresh plan from planner output.

        Every task starts pending regardless of what the payload says.
        """
        if not isinstance(data, dict):
            raise PlanValidationError("plan payload must be an object")

        roles_raw = data.get("roles") or []
        tasks_raw = data.get("tasks") or []
        if not isinstance(roles_raw, list) or not isinstance(tasks_raw, list):
            raise PlanValidationError("plan roles/tasks must be lists")

        team = data.get("team")
        notes = team.get("notes") if isinstance(team, dict) else None

        return cls(
            goal=str(data.get("high_level_goal") or data.get("goal") or "").strip(),
            reasoning=str(data.get("reasoning") or "").strip(),
            roles=[Role.from_dict(r) for r in roles_raw if isinstance(r, dict)],
            tasks=[Task.from_dict(t) for t in tasks_raw if isinstance(t, dict)],
            team_notes=str(notes).strip() if notes else None,
        )


@dataclass(slots=True, frozen=True)
class Artifact:
    """Immutable bundle of files produced by one task."""

    id: str
    task_id: str
    files: tuple[File, ...]
    created_at: float


@dataclass(slots=True, frozen=True)
class AgentOutput:
    """What an executor returns for one task."""

    output: str
    files: tuple[File, ...] = ()
    reasoning: str | None = None
