# src/agent_architect/core/state.py

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from ..artifacts.store import ArtifactStore
from ..plans.models import INITIAL_CONTEXT_TASK_ID, ExecutionState, File, Plan
from .errors import PlanLockedError, PlanningError
from .ports import Planner

logger = logging.getLogger(__name__)


@dataclass
class Session:
    """
    One working session: the live plan, its artifact history and the
    plan-level execution state.

    Passed explicitly to the scheduler and editor; nothing reads it ambiently,
    so several sessions can coexist (e.g. in tests).
    """

    artifacts: ArtifactStore = field(default_factory=ArtifactStore)
    plan: Plan | None = None

    execution_state: ExecutionState = ExecutionState.IDLE
    # Id of the task currently awaiting the executor, if any.
    in_flight: str | None = None

    def replace_plan(self, plan: Plan, initial_files: Sequence[File] = ()) -> None:
        """
        Install a new plan. Artifacts are cleared first so nothing from a
        previous goal leaks into the new plan's context.
        """
        if self.execution_state == ExecutionState.RUNNING or self.in_flight is not None:
            raise PlanLockedError("cannot replace the plan while it is running")

        self.artifacts.clear()
        self.plan = plan
        self.execution_state = ExecutionState.IDLE
        self.in_flight = None

        if initial_files:
            self.artifacts.create(INITIAL_CONTEXT_TASK_ID, initial_files)

        logger.info(
            "Plan installed goal=%r roles=%d tasks=%d initial_files=%d",
            plan.goal,
            len(plan.roles),
            len(plan.tasks),
            len(initial_files),
        )

    async def generate_plan(
        self,
        planner: Planner,
        goal: str,
        initial_files: Sequence[File] = (),
    ) -> Plan:
        """
        Run the planner and install its plan. On failure the current plan and
        artifacts are left untouched and PlanningError propagates.
        """
        goal = (goal or "").strip()
        if not goal:
            raise PlanningError("goal is required")
        if self.execution_state == ExecutionState.RUNNING or self.in_flight is not None:
            raise PlanLockedError("cannot plan while the current plan is running")

        try:
            plan = await planner.plan(goal, list(initial_files))
        except PlanningError:
            raise
        except Exception as e:
            raise PlanningError(str(e) or "Failed to generate plan.") from e

        self.replace_plan(plan, initial_files)
        return plan
