"""In-flight task tracking and the shutdown barrier."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable

from moex_securities.securities.models import TaskOutcome, TaskState

logger = logging.getLogger(__name__)

_STAGE_ORDER = (
    TaskState.SUBMITTED,
    TaskState.FETCHING,
    TaskState.FILTERING,
    TaskState.PERSISTING,
)


class RegistryClosedError(RuntimeError):
    """Raised when a task is submitted after ``await_all`` was called."""


class QueryTask:
    """Handle for one query's pipeline execution."""

    def __init__(self, query: str) -> None:
        self.query = query
        self._lock = threading.Lock()
        self._state = TaskState.SUBMITTED
        self._outcome: TaskOutcome | None = None
        self._finished = threading.Event()
        self._callbacks: list[Callable[[QueryTask], None]] = []

    def __repr__(self) -> str:
        return f"QueryTask(query={self.query!r}, state={self._state.value})"

    @property
    def state(self) -> TaskState:
        with self._lock:
            return self._state

    @property
    def outcome(self) -> TaskOutcome | None:
        with self._lock:
            return self._outcome

    def done(self) -> bool:
        return self._finished.is_set()

    def advance(self, state: TaskState) -> None:
        """Move to a later non-terminal stage."""

        if state.is_terminal:
            raise ValueError(f"Use finish() to enter terminal state {state.value!r}")
        with self._lock:
            current = self._state
            if current.is_terminal or _STAGE_ORDER.index(state) <= _STAGE_ORDER.index(current):
                raise RuntimeError(
                    f"Task {self.query!r} cannot move from {self._state.value} to {state.value}",
                )
            self._state = state

    def finish(self, outcome: TaskOutcome) -> None:
        if not outcome.state.is_terminal:
            raise ValueError(f"Outcome state {outcome.state.value!r} is not terminal")
        with self._lock:
            if self._state.is_terminal:
                raise RuntimeError(f"Task {self.query!r} already finished")
            self._state = outcome.state
            self._outcome = outcome
            callbacks, self._callbacks = self._callbacks, []
        self._finished.set()
        for callback in callbacks:
            callback(self)

    def add_done_callback(self, callback: Callable[[QueryTask], None]) -> None:
        """Run ``callback`` once the task is terminal; immediately if it already is."""

        with self._lock:
            if not self._state.is_terminal:
                self._callbacks.append(callback)
                return
        callback(self)

    def wait(self, timeout: float | None = None) -> bool:
        return self._finished.wait(timeout)


class WaitGroup:
    """Counter that ``wait`` blocks on until it drops back to zero."""

    def __init__(self) -> None:
        self._condition = threading.Condition()
        self._count = 0

    @property
    def count(self) -> int:
        with self._condition:
            return self._count

    def add(self, delta: int = 1) -> None:
        with self._condition:
            if self._count + delta < 0:
                raise ValueError("WaitGroup counter cannot go negative")
            self._count += delta
            if self._count == 0:
                self._condition.notify_all()

    def done(self) -> None:
        self.add(-1)

    def wait(self, timeout: float | None = None) -> bool:
        with self._condition:
            return self._condition.wait_for(lambda: self._count == 0, timeout)


class TaskRegistry:
    """Thread-safe collection of task handles.

    Finished handles are pruned only as a side effect of ``submit``; with no
    further submissions they stay until shutdown. ``await_all`` waits on a
    counter that each submission increments and each finished task decrements,
    so tasks removed by pruning are still accounted for.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._tasks: list[QueryTask] = []
        self._pending = WaitGroup()
        self._closed = False

    def __len__(self) -> int:
        with self._lock:
            return len(self._tasks)

    @property
    def closed(self) -> bool:
        with self._lock:
            return self._closed

    @property
    def pending(self) -> int:
        return self._pending.count

    def submit(self, task: QueryTask) -> None:
        with self._lock:
            if self._closed:
                raise RegistryClosedError(
                    f"Cannot submit {task.query!r}: registry is shutting down",
                )
            self._tasks.append(task)
            self._pending.add()
        task.add_done_callback(self._on_task_done)
        self.prune()

    def prune(self) -> int:
        """Drop handles of finished tasks; return how many were removed."""

        with self._lock:
            active = [task for task in self._tasks if not task.done()]
            removed = len(self._tasks) - len(active)
            self._tasks = active
        if removed:
            logger.debug("Pruned %d finished task(s)", removed)
        return removed

    def snapshot(self) -> list[QueryTask]:
        with self._lock:
            return list(self._tasks)

    def await_all(self, timeout: float | None = None) -> bool:
        """Close the registry and block until every submitted task is terminal.

        Returns False only when ``timeout`` elapsed first.
        """

        with self._lock:
            self._closed = True
        logger.info("Waiting for %d pending task(s)", self._pending.count)
        return self._pending.wait(timeout)

    def _on_task_done(self, _task: QueryTask) -> None:
        self._pending.done()
