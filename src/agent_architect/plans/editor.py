# src/agent_architect/plans/editor.py

"""
Structural edits to the live plan (used by editing surfaces, never by the scheduler).

There is deliberately no way to set `status` here; the scheduler owns that
through plans/transitions.py. Edits are refused while the plan is running.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from ..core.errors import PlanLockedError, PlanValidationError
from .models import ExecutionState, Plan, Role, Task, normalize_deps

if TYPE_CHECKING:
    from ..core.state import Session

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = frozenset({"description", "role_title", "agent_hint", "deps"})


class PlanEditor:
    def __init__(self, session: Session) -> None:
        self._session = session

    def _plan(self) -> Plan:
        if self._session.execution_state == ExecutionState.RUNNING:
            raise PlanLockedError("plan is running; pause it before editing")
        if self._session.in_flight is not None:
            raise PlanLockedError(f"task {self._session.in_flight} is still in flight")
        plan = self._session.plan
        if plan is None:
            raise PlanValidationError("no plan loaded")
        return plan

    def add_task(
        self,
        *,
        task_id: str,
        description: str,
        role_title: str,
        deps: list[str] | None = None,
        agent_hint: str | None = None,
    ) -> Task:
        plan = self._plan()
        task_id = (task_id or "").strip()
        if not task_id:
            raise PlanValidationError("task id is required")
        if not description or not description.strip():
            raise PlanValidationError("description is required")
        if not role_title or not role_title.strip():
            raise PlanValidationError("role is required")
        if plan.get_task(task_id) is not None:
            raise PlanValidationError(f"duplicate task id: {task_id}")
        if deps and task_id in deps:
            raise PlanValidationError(f"task {task_id!r} cannot depend on itself")

        task = Task(
            id=task_id,
            description=description.strip(),
            role_title=role_title.strip(),
            deps=normalize_deps(task_id, deps),
            agent_hint=(agent_hint or "").strip() or None,
        )
        plan.tasks.append(task)
        logger.info("Task added id=%s role=%s deps=%s", task.id, task.role_title, task.deps)
        return task

    def delete_task(self, task_id: str) -> None:
        """
        Remove a task. Dependents keep the dangling id and so stay blocked
        until someone edits their deps.
        """
        plan = self._plan()
        task = plan.get_task(task_id)
        if task is None:
            raise KeyError(task_id)
        plan.tasks.remove(task)
        logger.info("Task deleted id=%s", task_id)

    def edit_task(self, task_id: str, **fields: Any) -> Task:
        plan = self._plan()
        unknown = set(fields) - EDITABLE_FIELDS
        if unknown:
            raise TypeError(f"not editable: {', '.join(sorted(unknown))}")

        task = plan.get_task(task_id)
        if task is None:
            raise KeyError(task_id)

        if "deps" in fields:
            deps = list(fields["deps"] or [])
            if task_id in deps:
                raise PlanValidationError(f"task {task_id!r} cannot depend on itself")
            task.deps = normalize_deps(task_id, deps)
        if "description" in fields:
            task.description = str(fields["description"] or "").strip()
        if "role_title" in fields:
            task.role_title = str(fields["role_title"] or "").strip()
        if "agent_hint" in fields:
            task.agent_hint = (fields["agent_hint"] or "").strip() or None

        logger.debug("Task edited id=%s fields=%s", task_id, sorted(fields))
        return task

    def toggle_dep(self, task_id: str, dep_id: str) -> bool:
        """Add `dep_id` to the task's deps, or remove it if present. Returns True if added."""
        plan = self._plan()
        task = plan.get_task(task_id)
        if task is None:
            raise KeyError(task_id)
        if dep_id in task.deps:
            self.edit_task(task_id, deps=[d for d in task.deps if d != dep_id])
            return False
        self.edit_task(task_id, deps=[*task.deps, dep_id])
        return True

    def add_role(self, *, title: str, purpose: str) -> Role:
        plan = self._plan()
        title = (title or "").strip()
        purpose = (purpose or "").strip()
        if not title or not purpose:
            raise PlanValidationError("role title and purpose are required")
        if plan.get_role(title) is not None:
            raise PlanValidationError(f"duplicate role title: {title}")
        role = Role(title=title, purpose=purpose)
        plan.roles.append(role)
        logger.info("Role added title=%s", title)
        return role
