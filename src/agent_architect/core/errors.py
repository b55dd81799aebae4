# src/agent_architect/core/errors.py

from __future__ import annotations


class ArchitectError(RuntimeError):
    """Base class for errors raised by the plan/execution core."""


class PlanningError(ArchitectError):
    """The planner failed; the current plan and artifacts are left untouched."""


class PlanValidationError(ArchitectError, ValueError):
    """A plan or task violates a structural invariant (duplicate id, self-dependency...)."""


class PlanLockedError(ArchitectError):
    """Structural edits are refused while the scheduler is running."""


class InvalidTransitionError(ArchitectError):
    """A task status transition was requested from an illegal source status."""


class RoleResolutionError(ArchitectError):
    """A task references a role title that is not defined in the plan."""


class ExecutorError(ArchitectError):
    """The executor failed or returned something that is not an AgentOutput."""


class DuplicateArtifactError(ArchitectError):
    pass
