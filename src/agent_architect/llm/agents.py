# src/agent_architect/llm/agents.py

"""
LLM-backed planner and task executor.

Both ask the model for a single JSON object and parse it into the core types.
The streaming client is blocking, so completions run in a worker thread.
"""

from __future__ import annotations

import asyncio
import json
import logging
import re
from collections.abc import Sequence
from typing import Any

from ..core.errors import ExecutorError, PlanningError, PlanValidationError
from ..core.ports import ChatMessage, LLMClient
from ..plans.models import AgentOutput, Artifact, File, Plan, Role, Task

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"^\s*```(?:json)?\s*(.*?)\s*```\s*$", re.DOTALL)

PLANNER_SYSTEM_PROMPT = """You are an expert Project Manager and System Architect.
Your goal is to break down a high-level objective into a step-by-step execution plan.

The plan must:
1. Define specialized Roles with titles and purposes.
2. Define specific Tasks, assigning them to Roles (and optionally specific Agents).
3. Ensure Tasks have logical dependencies (topological sort).
4. Provide reasoning for the plan structure.

Task IDs should be short, snake_case strings like 'init_setup', 'research_topic'.

Respond with ONE JSON object and nothing else:
{
  "high_level_goal": string,
  "reasoning": string,
  "roles": [{"title": string, "purpose": string}],
  "tasks": [{"id": string, "description": string, "role": string (one of the role titles),
             "agent": string or null, "deps": [task ids that must complete first]}],
  "team": {"notes": string} or null
}"""

EXECUTOR_SYSTEM_PROMPT = """You are a specialist agent executing one task of a larger plan.
Respond with ONE JSON object and nothing else:
{
  "reasoning": string (your thought process),
  "output": string (a summary of your work),
  "artifact": {"files": [{"path": string, "content": string}]} or null
}
Only include "artifact" if you created code or files. Paths are relative and use '/'."""


def _strip_fences(text: str) -> str:
    m = _FENCE_RE.match(text)
    return m.group(1) if m else text.strip()


def _loads_object(text: str) -> dict[str, Any] | None:
    try:
        data = json.loads(_strip_fences(text))
    except json.JSONDecodeError:
        return None
    return data if isinstance(data, dict) else None


def _complete(llm: LLMClient, messages: list[ChatMessage], system_prompt: str) -> str:
    return "".join(piece for piece in llm.stream_chat(messages, system_prompt) if piece)


def format_context(artifacts: Sequence[Artifact]) -> str:
    """Flatten previous artifacts into prompt text (all files, creation order)."""
    blocks: list[str] = []
    for a in artifacts:
        files = "\n\n".join(f"FILE: {f.path}\nCONTENT:\n{f.content}" for f in a.files)
        blocks.append(f"--- ARTIFACT FROM TASK: {a.task_id} ---\n{files}\n--- END ARTIFACT ---")
    return "\n\n".join(blocks)


def build_plan_prompt(goal: str, initial_files: Sequence[File]) -> str:
    prompt = f"The goal is: {goal}"
    if initial_files:
        prompt += "\n\nINITIAL CONTEXT FILES PROVIDED BY USER:\n"
        for f in initial_files:
            prompt += f"\n--- START FILE: {f.path} ---\n{f.content}\n--- END FILE ---\n"
        prompt += (
            "\nUse these files to understand the requirements, existing code, "
            "or data structures when creating the plan."
        )
    return prompt


def build_task_prompt(task: Task, role: Role, goal: str, context: Sequence[Artifact]) -> str:
    context_str = format_context(context)
    return (
        f"GOAL: {goal}\n\n"
        "CURRENT TASK:\n"
        f"ID: {task.id}\n"
        f"Description: {task.description}\n\n"
        f"YOUR ROLE: {role.title}\n"
        f"PURPOSE: {role.purpose}\n\n"
        "PREVIOUS CONTEXT:\n"
        f"{context_str if context_str else 'No previous context.'}\n\n"
        "INSTRUCTIONS:\n"
        "Execute the task. Return a structured JSON response.\n"
        "1. 'reasoning': Explain your thought process.\n"
        "2. 'output': A summary of your work.\n"
        "3. 'artifact': (Optional) If you created code or files, provide them here "
        "as a list of files with 'path' and 'content'."
    )


def parse_plan(text: str, goal: str) -> Plan:
    if not text or not text.strip():
        raise PlanningError("No response from planner")
    data = _loads_object(text)
    if data is None:
        logger.error("Failed to parse planner output: %.500s", text)
        raise PlanningError("Planner produced invalid JSON")
    if not data.get("high_level_goal"):
        data["high_level_goal"] = goal
    try:
        return Plan.from_dict(data)
    except PlanValidationError as e:
        raise PlanningError(f"Planner produced an invalid plan: {e}") from e


def parse_agent_output(text: str) -> AgentOutput:
    if not text or not text.strip():
        raise ExecutorError("No response from Agent")
    data = _loads_object(text)
    if data is None or not isinstance(data.get("output"), str):
        logger.error("Failed to parse agent output: %.500s", text)
        raise ExecutorError("Agent produced invalid JSON")

    files: list[File] = []
    artifact = data.get("artifact")
    if isinstance(artifact, dict):
        raw_files = artifact.get("files") or []
        if not isinstance(raw_files, list):
            raise ExecutorError("Agent produced invalid JSON")
        for item in raw_files:
            if not isinstance(item, dict):
                raise ExecutorError("Agent produced invalid JSON")
            try:
                files.append(File.from_dict(item))
            except ValueError as e:
                raise ExecutorError(f"Agent produced an invalid file: {e}") from e

    reasoning = data.get("reasoning")
    return AgentOutput(
        output=data["output"],
        files=tuple(files),
        reasoning=reasoning if isinstance(reasoning, str) else None,
    )


class LLMPlanner:
    def __init__(self, llm: LLMClient) -> None:
        self._llm = llm

    async def plan(self, goal: str, initial_files: Sequence[File]) -> Plan:
        messages: list[ChatMessage] = [{"role": "user", "content": build_plan_prompt(goal, initial_files)}]
        logger.info("Planning goal=%r files=%d", goal, len(initial_files))
        text = await asyncio.to_thread(_complete, self._llm, messages, PLANNER_SYSTEM_PROMPT)
        return parse_plan(text, goal)


class LLMTaskExecutor:
    def __init__(self, llm: LLMClient) -> None:
        self._llm = llm

    async def execute(self, task: Task, role: Role, goal: str, context: Sequence[Artifact]) -> AgentOutput:
        messages: list[ChatMessage] = [{"role": "user", "content": build_task_prompt(task, role, goal, context)}]
        text = await asyncio.to_thread(_complete, self._llm, messages, EXECUTOR_SYSTEM_PROMPT)
        return parse_agent_output(text)
