# src/agent_architect/core/ports.py

"""
Ports (interfaces) used by the core.

The core depends on Protocols instead of concrete implementations.
This keeps planners/executors/storage/LLM providers swappable and makes testing easier.
"""

from __future__ import annotations

from collections.abc import Awaitable, Iterable, Sequence
from typing import Protocol

from ..plans.models import AgentOutput, Artifact, File, Plan, Role, Task

ChatMessage = dict[str, str]
# OpenAI-style chat messages: {"role": "...", "content": "..."}.


class LLMClient(Protocol):
    """Streaming chat completion client (OpenAI/OpenRouter-compatible)."""
    def stream_chat(self, messages: list[ChatMessage], system_prompt: str) -> Iterable[str]: ...


class TaskExecutor(Protocol):
    """
    Performs the actual work of one task.

    May raise; the scheduler turns any exception into a failed task
    and uses str(exc) as the task error.
    """

    def execute(
            self,
            task: Task,
            role: Role,
            goal: str,
            context: Sequence[Artifact],
    ) -> Awaitable[AgentOutput]: ...


class Planner(Protocol):
    """Turns a goal (+ optional context files) into a Plan with every task pending."""

    def plan(self, goal: str, initial_files: Sequence[File]) -> Awaitable[Plan]: ...


class ArtifactRepo(Protocol):
    """Durable artifact storage; must replay artifacts in original creation order."""

    def save_artifact(self, artifact: Artifact) -> None: ...
    def get_all_artifacts(self) -> list[Artifact]: ...
    def clear_artifacts(self) -> None: ...
