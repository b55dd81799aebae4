# src/agent_architect/plans/transitions.py

"""
Task status transitions.

Only the scheduler imports this module. Editing surfaces go through
plans/editor.py, which has no way to touch `status`.
"""

from __future__ import annotations

import logging

from ..core.errors import InvalidTransitionError
from .models import Task, TaskStatus

logger = logging.getLogger(__name__)


def _require(task: Task, expected: TaskStatus, target: TaskStatus) -> None:
    if task.status != expected:
        raise InvalidTransitionError(
            f"task {task.id}: cannot move {task.status.value} -> {target.value}"
        )


def mark_running(task: Task) -> None:
    _require(task, TaskStatus.PENDING, TaskStatus.RUNNING)
    task.status = TaskStatus.RUNNING
    task.error = None
    logger.debug("Task %s -> running", task.id)


def mark_completed(task: Task, *, output: str | None, artifact_id: str | None) -> None:
    _require(task, TaskStatus.RUNNING, TaskStatus.COMPLETED)
    task.status = TaskStatus.COMPLETED
    task.output = output
    task.artifact_id = artifact_id
    logger.debug("Task %s -> completed artifact=%s", task.id, artifact_id)


def mark_failed(task: Task, *, error: str) -> None:
    _require(task, TaskStatus.RUNNING, TaskStatus.FAILED)
    task.status = TaskStatus.FAILED
    task.error = error
    logger.debug("Task %s -> failed: %s", task.id, error)
