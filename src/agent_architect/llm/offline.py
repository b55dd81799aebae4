# src/agent_architect/llm/offline.py

from __future__ import annotations

import json
import re
from collections.abc import Iterable

from ..core.ports import ChatMessage

_GOAL_RE = re.compile(r"The goal is:\s*(.+)")
_TASK_ID_RE = re.compile(r"^ID:\s*(\S+)", re.MULTILINE)
_DESC_RE = re.compile(r"^Description:\s*(.+)$", re.MULTILINE)


class OfflineLLMClient:
    """
    Offline deterministic LLM client used for demos when no external API is configured.

    Behavior:
    - Planner prompts -> a two-task plan (outline, then write README)
    - Task prompts    -> a short summary plus one markdown file per task
    """

    def stream_chat(self, messages: list[ChatMessage], system_prompt: str) -> Iterable[str]:
        user_text = ""
        for m in reversed(messages):
            if m["role"] == "user":
                user_text = m["content"]
                break

        if "Project Manager" in (system_prompt or ""):
            m = _GOAL_RE.search(user_text)
            goal = m.group(1).strip() if m else "offline demo"
            yield json.dumps(
                {
                    "high_level_goal": goal,
                    "reasoning": "Offline demo mode: no external LLM is configured.",
                    "roles": [
                        {"title": "Architect", "purpose": "Outline the solution."},
                        {"title": "Writer", "purpose": "Document the result."},
                    ],
                    "tasks": [
                        {"id": "outline", "description": f"Outline: {goal}", "role": "Architect", "deps": []},
                        {"id": "write_readme", "description": "Write the README", "role": "Writer", "deps": ["outline"]},
                    ],
                }
            )
            return

        tid = _TASK_ID_RE.search(user_text)
        desc = _DESC_RE.search(user_text)
        task_id = tid.group(1) if tid else "task"
        description = desc.group(1).strip() if desc else ""
        path = "README.md" if task_id == "write_readme" else f"docs/{task_id}.md"

        yield json.dumps(
            {
                "reasoning": "Offline demo mode.",
                "output": f"Offline demo: completed {task_id}.",
                "artifact": {"files": [{"path": path, "content": f"# {task_id}\n\n{description}\n"}]},
            }
        )
