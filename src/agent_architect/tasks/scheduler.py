# src/agent_architect/tasks/scheduler.py

"""
Plan scheduler.

A small stepping loop that:
- picks the first ready task in declared plan order,
- marks it running and awaits the injected executor,
- records the produced artifact (if any) and completes the task,
- on any failure marks the task failed and pauses the plan.

At most one task is in flight at a time; nothing here needs a lock because
every mutation happens between awaits on a single event loop.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum

from ..core.errors import ExecutorError, PlanValidationError, RoleResolutionError
from ..core.ports import TaskExecutor
from ..core.state import Session
from ..plans.models import AgentOutput, ExecutionState, Plan, Task
from ..plans.resolver import all_completed, any_failed, blocked_tasks, next_ready_task
from ..plans.transitions import mark_completed, mark_failed, mark_running

logger = logging.getLogger(__name__)


class StepOutcome(StrEnum):
    COMPLETED = "completed"  # a task ran and completed
    FAILED = "failed"  # a task ran and failed; plan paused
    FINISHED = "finished"  # every task completed
    PAUSED = "paused"  # nothing ready and something failed
    STALLED = "stalled"  # nothing ready, nothing failed, not done
    SKIPPED = "skipped"  # not running, no plan, or a task already in flight


StepListener = Callable[[StepOutcome, Task | None], None]


class PlanScheduler:
    def __init__(
            self,
            session: Session,
            executor: TaskExecutor,
            *,
            step_delay_seconds: float = 1.0,
            listener: StepListener | None = None,
    ) -> None:
        self._session = session
        self._executor = executor
        self._delay = max(0.0, float(step_delay_seconds))
        self._listener = listener
        self._last_stall: tuple[str, ...] | None = None

    @property
    def session(self) -> Session:
        return self._session

    @property
    def state(self) -> ExecutionState:
        return self._session.execution_state

    def _set_state(self, new_state: ExecutionState) -> None:
        old = self._session.execution_state
        if old == new_state:
            return
        self._session.execution_state = new_state
        logger.info("Plan state %s -> %s", old.value, new_state.value)

    # ---- commands ----

    def start(self) -> None:
        """Start or resume dispatching. A finished plan stays finished."""
        if self._session.plan is None:
            raise PlanValidationError("no plan loaded")
        if self.state == ExecutionState.FINISHED:
            return
        self._last_stall = None
        self._set_state(ExecutionState.RUNNING)

    resume = start

    def pause(self) -> None:
        """Stop starting new steps. Cannot interrupt a task already in flight."""
        if self.state == ExecutionState.RUNNING:
            self._set_state(ExecutionState.PAUSED)

    # ---- stepping ----

    def _notify(self, outcome: StepOutcome, task: Task | None) -> None:
        if self._listener is None:
            return
        try:
            self._listener(outcome, task)
        except Exception:
            logger.exception("step listener failed outcome=%s", outcome.value)

    def _log_stall(self, plan: Plan) -> None:
        blocked = blocked_tasks(plan)
        signature = tuple(sorted(f"{k}:{v}" for k, v in blocked.items()))
        if signature == self._last_stall:
            return
        self._last_stall = signature
        if blocked:
            for task_id, reason in blocked.items():
                logger.warning("Task %s can never run (%s)", task_id, reason)
        else:
            logger.info("No task ready yet; waiting.")

    async def step(self) -> StepOutcome:
        """One iteration of the loop (see module docstring)."""
        plan = self._session.plan
        if plan is None or self.state != ExecutionState.RUNNING or self._session.in_flight is not None:
            return StepOutcome.SKIPPED

        task = next_ready_task(plan)
        if task is None:
            if all_completed(plan):
                self._set_state(ExecutionState.FINISHED)
                outcome = StepOutcome.FINISHED
            elif any_failed(plan):
                self._set_state(ExecutionState.PAUSED)
                outcome = StepOutcome.PAUSED
            else:
                self._log_stall(plan)
                outcome = StepOutcome.STALLED
            self._notify(outcome, None)
            return outcome

        # Mark running before the first await so no observer ever sees two running tasks.
        mark_running(task)
        self._session.in_flight = task.id
        self._last_stall = None
        logger.info("Task %s -> running (role=%s)", task.id, task.role_title)

        try:
            role = plan.get_role(task.role_title)
            if role is None:
                raise RoleResolutionError(f"Role {task.role_title} not found in plan")

            result = await self._executor.execute(task, role, plan.goal, self._session.artifacts.snapshot())
            if not isinstance(result, AgentOutput):
                raise ExecutorError("Agent produced an invalid result")

            artifact_id = None
            if result.files:
                artifact = self._session.artifacts.create(task.id, result.files)
                artifact_id = artifact.id

            mark_completed(task, output=result.output, artifact_id=artifact_id)
            logger.info("Task %s -> completed (artifact=%s)", task.id, artifact_id)
            outcome = StepOutcome.COMPLETED

        except asyncio.CancelledError:
            mark_failed(task, error="cancelled")
            self._set_state(ExecutionState.PAUSED)
            raise

        except Exception as e:
            logger.exception("Task %s failed", task.id)
            mark_failed(task, error=str(e) or e.__class__.__name__)
            self._set_state(ExecutionState.PAUSED)
            outcome = StepOutcome.FAILED

        finally:
            self._session.in_flight = None

        self._notify(outcome, task)
        return outcome

    async def run(self, *, stop_on_stall: bool = False) -> ExecutionState:
        """
        Step repeatedly while the plan is running, sleeping `step_delay_seconds`
        after each step. Returns the state the loop stopped in.

        A stall keeps the loop polling (a pause or an edit can unblock it)
        unless stop_on_stall is set.
        """
        while self.state == ExecutionState.RUNNING:
            outcome = await self.step()
            if outcome == StepOutcome.STALLED and stop_on_stall:
                break
            if self.state != ExecutionState.RUNNING:
                break
            await asyncio.sleep(self._delay)
        return self.state


@dataclass(slots=True)
class SchedulerRunner:
    """
    Runs a PlanScheduler on its own event loop in a background thread,
    so the blocking console REPL can keep reading commands.
    """

    scheduler: PlanScheduler
    thread: threading.Thread
    loop: asyncio.AbstractEventLoop
    current: asyncio.Future | None = None

    def kick(self) -> None:
        """Start/resume the plan and make sure a run() is active."""
        fut = asyncio.run_coroutine_threadsafe(self._kick(), self.loop)
        fut.result(timeout=5.0)

    async def _kick(self) -> None:
        self.scheduler.start()
        if self.current is None or self.current.done():
            self.current = asyncio.ensure_future(self.scheduler.run())

    def pause(self) -> None:
        try:
            self.loop.call_soon_threadsafe(self.scheduler.pause)
        except RuntimeError:
            logger.debug("Scheduler loop already closed; pause ignored.", exc_info=True)

    async def _cancel_current(self) -> None:
        if self.current is None or self.current.done():
            return
        self.current.cancel()
        # Let the in-flight step record the cancellation before the loop stops.
        with contextlib.suppress(asyncio.CancelledError):
            await self.current

    def stop(self, timeout: float = 5.0) -> None:
        """Pause, cancel an in-flight task (it ends up failed), then stop the loop."""
        self.pause()
        try:
            fut = asyncio.run_coroutine_threadsafe(self._cancel_current(), self.loop)
            fut.result(timeout=timeout)
        except RuntimeError:
            logger.debug("Scheduler loop already closed.", exc_info=True)
            return
        except TimeoutError:
            logger.warning("In-flight task did not stop within %.1fs.", timeout)

        try:
            self.loop.call_soon_threadsafe(self.loop.stop)
        except RuntimeError:
            logger.debug("Scheduler loop already closed.", exc_info=True)

    def join(self, timeout: float | None = None) -> None:
        self.thread.join(timeout=timeout)


def start_scheduler_in_background(scheduler: PlanScheduler) -> SchedulerRunner | None:
    """
    Start a dedicated event loop thread for the scheduler.

    Why a thread:
    - console REPL is blocking (input()).
    - the scheduler is async and wants its own event loop.
    """
    ready = threading.Event()
    holder: dict[str, object] = {}

    def runner() -> None:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        holder["loop"] = loop
        ready.set()
        try:
            loop.run_forever()
        finally:
            with contextlib.suppress(Exception):
                loop.run_until_complete(loop.shutdown_asyncgens())
            with contextlib.suppress(Exception):
                loop.close()

    t = threading.Thread(target=runner, name="plan-scheduler", daemon=True)
    t.start()

    ready.wait(timeout=5.0)
    loop = holder.get("loop")
    if not isinstance(loop, asyncio.AbstractEventLoop):
        logger.error("Scheduler thread did not initialize properly.")
        return None

    logger.info("Scheduler background thread started.")
    return SchedulerRunner(scheduler=scheduler, thread=t, loop=loop)
