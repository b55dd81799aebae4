# src/agent_architect/plans/resolver.py

"""
Dependency readiness.

Everything here is a pure function of task statuses and the deps topology:
no side effects, safe to call repeatedly.
"""

from __future__ import annotations

from collections.abc import Sequence

from .models import Plan, Task, TaskStatus


def is_ready(task: Task, all_tasks: Sequence[Task]) -> bool:
    """
    A task is ready when it is pending and every dependency resolves to a
    completed task. A dependency id that matches no task is never satisfied.
    """
    if task.status != TaskStatus.PENDING:
        return False
    if not task.deps:
        return True

    by_id = {t.id: t for t in all_tasks}
    for dep_id in task.deps:
        dep = by_id.get(dep_id)
        if dep is None or dep.status != TaskStatus.COMPLETED:
            return False
    return True


def next_ready_task(plan: Plan) -> Task | None:
    """First ready task in declared plan order (deliberately not a priority queue)."""
    for task in plan.tasks:
        if is_ready(task, plan.tasks):
            return task
    return None


def all_completed(plan: Plan) -> bool:
    return all(t.status == TaskStatus.COMPLETED for t in plan.tasks)


def any_failed(plan: Plan) -> bool:
    return any(t.status == TaskStatus.FAILED for t in plan.tasks)


def _cycle_members(plan: Plan) -> set[str]:
    """Ids of tasks that sit on a dependency cycle (iterative DFS, declared order)."""
    by_id = {t.id: t for t in plan.tasks}
    white, grey, black = 0, 1, 2
    color = {tid: white for tid in by_id}
    on_cycle: set[str] = set()

    for root in by_id:
        if color[root] != white:
            continue
        stack: list[tuple[str, int]] = [(root, 0)]
        path: list[str] = [root]
        color[root] = grey
        while stack:
            node, idx = stack[-1]
            deps = [d for d in by_id[node].deps if d in by_id]
            if idx < len(deps):
                stack[-1] = (node, idx + 1)
                nxt = deps[idx]
                if color[nxt] == white:
                    color[nxt] = grey
                    stack.append((nxt, 0))
                    path.append(nxt)
                elif color[nxt] == grey:
                    on_cycle.update(path[path.index(nxt):])
            else:
                color[node] = black
                stack.pop()
                path.pop()
    return on_cycle


def blocked_tasks(plan: Plan) -> dict[str, str]:
    """
    Pending tasks that can never become ready, mapped to a short reason.

    Reasons:
    - "missing dependency: <id>"     dep id matches no task
    - "dependency cycle"             task sits on a cycle
    - "blocked by <id>"              a dep is failed or itself blocked

    Diagnostics only; the scheduler never changes state based on this.
    """
    by_id = {t.id: t for t in plan.tasks}
    reasons: dict[str, str] = {}

    for t in plan.tasks:
        if t.status != TaskStatus.PENDING:
            continue
        missing = [d for d in t.deps if d not in by_id]
        if missing:
            reasons[t.id] = f"missing dependency: {missing[0]}"

    for tid in _cycle_members(plan):
        if by_id[tid].status == TaskStatus.PENDING and tid not in reasons:
            reasons[tid] = "dependency cycle"

    # Propagate to dependents until nothing changes.
    changed = True
    while changed:
        changed = False
        for t in plan.tasks:
            if t.status != TaskStatus.PENDING or t.id in reasons:
                continue
            for dep_id in t.deps:
                dep = by_id.get(dep_id)
                if dep is None:
                    continue
                if dep.status == TaskStatus.FAILED or dep_id in reasons:
                    reasons[t.id] = f"blocked by {dep_id}"
                    changed = True
                    break

    return reasons
