# src/agent_architect/cli/commands.py

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable
from pathlib import Path
from typing import cast

from ..artifacts.export import ViewMode, export_zip
from ..artifacts.tree import FileNode, combined_view, file_history, grouped_view, render_tree
from ..core.errors import ArchitectError
from ..plans.models import ExecutionState, TaskStatus, normalize_path
from ..plans.resolver import blocked_tasks
from .bootstrap import AppState, read_local_file, run_async

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[AppState, list[str]], str]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], str]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)

_STATUS_MARK = {
    TaskStatus.PENDING: "[ ]",
    TaskStatus.RUNNING: "[~]",
    TaskStatus.COMPLETED: "[x]",
    TaskStatus.FAILED: "[!]",
}


class CommandRegistry:
    """Simple slash-command registry used by the console connector (/help, /run, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.

        Errors from the core (ArchitectError, KeyError on unknown ids, bad
        input) are turned into a reply instead of escaping.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except (TypeError, ValueError):
            nparams = 3

        try:
            if nparams >= 3:
                h3 = cast(CommandHandler3, handler)
                return h3(state, args, emit)
            h2 = cast(CommandHandler2, handler)
            return h2(state, args)
        except ArchitectError as e:
            return f"Error: {e}"
        except KeyError as e:
            return f"Unknown id: {e.args[0] if e.args else e}"
        except (TypeError, ValueError, OSError) as e:
            return f"Error: {e}"

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


def _require_plan(state: AppState):
    plan = state.session.plan
    if plan is None:
        raise ArchitectError("No plan loaded. Use /plan <goal> first.")
    return plan


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_status(state: AppState, args: list[str]) -> str:
    session = state.session
    lines = [
        "Status:",
        f"  Execution: {session.execution_state.value}",
        f"  LLM: {'offline demo' if state.offline else 'online'}",
        f"  Artifacts: {len(session.artifacts)}",
    ]
    plan = session.plan
    if plan is None:
        lines.append("  Plan: none")
        return "\n".join(lines)

    lines.append(f"  Goal: {plan.goal}")
    lines.append(f"  Progress: {round(plan.progress() * 100)}% of {len(plan.tasks)} tasks")
    if session.in_flight:
        lines.append(f"  In flight: {session.in_flight}")
    blocked = blocked_tasks(plan)
    if blocked:
        lines.append("  Blocked:")
        for task_id, reason in blocked.items():
            lines.append(f"    {task_id}: {reason}")
    return "\n".join(lines)


def cmd_attach(state: AppState, args: list[str]) -> str:
    """/attach <path> [<path> ...] -> add local files as context for the next /plan"""
    if not args:
        if not state.pending_files:
            return "No files attached. Usage: /attach <path> [...]"
        return "Attached: " + ", ".join(f.path for f in state.pending_files)
    added = [read_local_file(p, base=Path.cwd()) for p in args]
    state.pending_files.extend(added)
    return f"Attached {len(added)} file(s): " + ", ".join(f.path for f in added)


def cmd_plan(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """
    /plan        -> show the current plan
    /plan <goal> -> generate a new plan (clears artifacts)
    """
    if not args:
        plan = _require_plan(state)
        lines = [f"Goal: {plan.goal}", f"Reasoning: {plan.reasoning}", "Roles:"]
        lines += [f"  {r.title}: {r.purpose}" for r in plan.roles]
        if plan.team_notes:
            lines.append(f"Team notes: {plan.team_notes}")
        lines.append("Tasks:")
        lines += [
            f"  {t.id} ({t.role_title}) deps=[{', '.join(t.deps)}] {t.description}" for t in plan.tasks
        ]
        return "\n".join(lines)

    goal = " ".join(args)
    if emit:
        emit("[PLAN] Generating plan... (this may take a while)")

    files = list(state.pending_files)
    plan = run_async(state, state.session.generate_plan(state.planner, goal, files))
    state.pending_files.clear()
    return (
        f"Plan ready: {len(plan.roles)} roles, {len(plan.tasks)} tasks. "
        "Use /tasks to review and /run to execute."
    )


def cmd_tasks(state: AppState, args: list[str]) -> str:
    plan = _require_plan(state)
    if not plan.tasks:
        return "No tasks in plan."
    lines = []
    for t in plan.tasks:
        agent = f" <{t.agent_hint}>" if t.agent_hint else ""
        lines.append(f"{_STATUS_MARK[t.status]} [{t.id}] {t.description} ({t.role_title}){agent}")
        if t.error:
            lines.append(f"      Error: {t.error}")
    return "\n".join(lines)


def cmd_task(state: AppState, args: list[str]) -> str:
    """/task <id> -> task details incl. output"""
    if not args:
        return "Usage: /task <id>"
    plan = _require_plan(state)
    t = plan.get_task(args[0])
    if t is None:
        raise KeyError(args[0])
    lines = [
        f"[{t.id}] {t.status.value}",
        f"  Role: {t.role_title}",
        f"  Deps: {', '.join(t.deps) or '-'}",
        f"  Description: {t.description}",
    ]
    if t.output:
        lines.append(f"  Output:\n{t.output}")
    if t.artifact_id:
        artifact = state.session.artifacts.get(t.artifact_id)
        paths = ", ".join(f.path for f in artifact.files) if artifact else "missing"
        lines.append(f"  Artifact: {t.artifact_id} ({paths})")
    if t.error:
        lines.append(f"  Error: {t.error}")
    return "\n".join(lines)


def cmd_run(state: AppState, args: list[str]) -> str:
    _require_plan(state)
    if state.session.execution_state == ExecutionState.FINISHED:
        return "Plan already finished. Use /files to browse artifacts."
    if state.runner is None:
        return "Scheduler is not running in this process."
    verb = "Starting" if state.session.execution_state == ExecutionState.IDLE else "Resuming"
    state.runner.kick()
    return f"{verb} execution."


def cmd_pause(state: AppState, args: list[str]) -> str:
    if state.session.execution_state != ExecutionState.RUNNING:
        return f"Nothing to pause (state: {state.session.execution_state.value})."
    if state.runner is not None:
        state.runner.pause()
    else:
        state.scheduler.pause()
    in_flight = state.session.in_flight
    if in_flight:
        return f"Pausing after the in-flight task ({in_flight}) finishes."
    return "Paused."


def cmd_add(state: AppState, args: list[str]) -> str:
    """/add <id> <role> <dep1,dep2|-> <description...>"""
    if len(args) < 4:
        return "Usage: /add <id> <role> <dep1,dep2|-> <description...>"
    task_id, role, deps_raw = args[0], args[1], args[2]
    deps = [] if deps_raw == "-" else [d for d in deps_raw.split(",") if d]
    task = state.editor.add_task(task_id=task_id, role_title=role, deps=deps, description=" ".join(args[3:]))
    return f"Task added: {task.id}"


def cmd_delete(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /delete <id>"
    state.editor.delete_task(args[0])
    return f"Task deleted: {args[0]}"


def cmd_edit(state: AppState, args: list[str]) -> str:
    """/edit <id> <description...>"""
    if len(args) < 2:
        return "Usage: /edit <id> <description...>"
    state.editor.edit_task(args[0], description=" ".join(args[1:]))
    return f"Task updated: {args[0]}"


def cmd_dep(state: AppState, args: list[str]) -> str:
    """/dep <task> <dep> -> toggle dependency"""
    if len(args) != 2:
        return "Usage: /dep <task> <dep>"
    added = state.editor.toggle_dep(args[0], args[1])
    return f"{args[0]} {'now depends on' if added else 'no longer depends on'} {args[1]}"


def cmd_role(state: AppState, args: list[str]) -> str:
    """/role <title> | <purpose>"""
    raw = " ".join(args)
    title, sep, purpose = raw.partition("|")
    if not sep:
        return "Usage: /role <title> | <purpose>"
    role = state.editor.add_role(title=title, purpose=purpose)
    return f"Role added: {role.title}"


def cmd_files(state: AppState, args: list[str]) -> str:
    """/files [grouped|combined]"""
    artifacts = state.session.artifacts.snapshot()
    if not artifacts:
        return "No artifacts generated yet."
    mode = ViewMode(args[0].lower()) if args else ViewMode.COMBINED
    if mode == ViewMode.COMBINED:
        return "Project (latest versions):\n" + render_tree(combined_view(artifacts), indent="  ")

    blocks = []
    for group in grouped_view(artifacts):
        blocks.append(f"{group.label} ({group.artifact_id[:8]})\n" + render_tree(group.root))
    return "\n\n".join(blocks)


def cmd_show(state: AppState, args: list[str]) -> str:
    """/show <path> -> latest content of a file"""
    if not args:
        return "Usage: /show <path>"
    store = state.session.artifacts
    node = combined_view(store.snapshot()).find(normalize_path(args[0]))
    if not isinstance(node, FileNode):
        raise KeyError(args[0])
    artifact = store.get(node.artifact_id)
    task_id = artifact.task_id if artifact else "?"
    return f"{node.path} (from task {task_id}):\n{node.content}"


def cmd_history(state: AppState, args: list[str]) -> str:
    """/history <path> -> every version of a file, oldest first"""
    if not args:
        return "Usage: /history <path>"
    versions = file_history(state.session.artifacts.snapshot(), normalize_path(args[0]))
    if not versions:
        raise KeyError(args[0])
    lines = [f"Versions of {args[0]}:"]
    for i, v in enumerate(versions, start=1):
        lines.append(f"{i}. task={v.task_id} artifact={v.artifact_id[:8]} ({len(v.content)} chars)")
    return "\n".join(lines)


def cmd_export(state: AppState, args: list[str]) -> str:
    """/export grouped|combined [dest.zip]"""
    if not args:
        return "Usage: /export grouped|combined [dest.zip]"
    artifacts = state.session.artifacts.snapshot()
    if not artifacts:
        return "No artifacts generated yet."
    mode = ViewMode(args[0].lower())
    if len(args) > 1:
        dest = Path(args[1])
    else:
        name = "Project_Artifacts.zip" if mode == ViewMode.GROUPED else "Project.zip"
        dest = Path(getattr(state.settings, "export_dir", ".")) / name
    out = export_zip(artifacts, mode, dest)
    return f"Exported {mode.value} archive to {out}"


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("status", cmd_status, help_text="Show execution state, progress and blocked tasks.")
registry.register("attach", cmd_attach, help_text="Attach local files as context for the next plan.")
registry.register("plan", cmd_plan, help_text="Show the plan, or /plan <goal> to generate a new one.")
registry.register("tasks", cmd_tasks, help_text="List tasks with their status.")
registry.register("task", cmd_task, help_text="Show one task: /task <id>.")
registry.register("run", cmd_run, help_text="Start or resume execution.", aliases=["resume", "start"])
registry.register("pause", cmd_pause, help_text="Pause before the next task.")
registry.register("add", cmd_add, help_text="Add a task: /add <id> <role> <deps|-> <description>.")
registry.register("delete", cmd_delete, help_text="Delete a task: /delete <id>.", aliases=["rm"])
registry.register("edit", cmd_edit, help_text="Change a task description: /edit <id> <text>.")
registry.register("dep", cmd_dep, help_text="Toggle a dependency: /dep <task> <dep>.")
registry.register("role", cmd_role, help_text="Add a role: /role <title> | <purpose>.")
registry.register("files", cmd_files, help_text="Browse artifacts: /files [grouped|combined].")
registry.register("show", cmd_show, help_text="Show the latest version of a file: /show <path>.")
registry.register("history", cmd_history, help_text="List every version of a file: /history <path>.")
registry.register("export", cmd_export, help_text="Export a ZIP: /export grouped|combined [dest].")
