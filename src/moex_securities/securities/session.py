"""Query session: thread pool, registry, and outcome accounting."""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable, Iterator
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path

from moex_securities.securities.models import OutputDirectoryError, TaskState
from moex_securities.securities.pipeline import QueryPipeline
from moex_securities.securities.registry import QueryTask, TaskRegistry

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class SessionSummary:
    """Outcome counters for one session."""

    submitted: int = 0
    completed: int = 0
    empty: int = 0
    failed: int = 0

    @property
    def finished(self) -> int:
        return self.completed + self.empty + self.failed

    def as_line(self) -> str:
        return (
            f"Session finished: submitted={self.submitted} completed={self.completed} "
            f"empty={self.empty} failed={self.failed}"
        )


def ensure_output_dir(path: Path) -> Path:
    """Create the output directory (with parents) if it does not exist."""

    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise OutputDirectoryError(f"Failed to create directory {path}: {exc}") from exc
    return path


def read_queries(lines: Iterable[str], *, exit_command: str) -> Iterator[str]:
    """Yield trimmed non-blank lines until the exit command (case-insensitive)."""

    sentinel = exit_command.casefold()
    for line in lines:
        query = line.strip()
        if query.casefold() == sentinel:
            return
        if query:
            yield query


class SearchSession:
    """Schedules one pipeline run per query and waits for all of them on shutdown."""

    def __init__(
        self,
        *,
        pipeline: QueryPipeline,
        max_workers: int,
        registry: TaskRegistry | None = None,
    ) -> None:
        self.pipeline = pipeline
        self.registry = registry or TaskRegistry()
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix="moex-query",
        )
        self._summary = SessionSummary()
        self._summary_lock = threading.Lock()

    def submit(self, query: str) -> QueryTask:
        task = QueryTask(query)
        # Counted before the registry sees it so the summary is final once await_all returns.
        task.add_done_callback(self._record)
        self.registry.submit(task)
        with self._summary_lock:
            self._summary.submitted += 1
        self._executor.submit(self.pipeline.execute, task)
        return task

    def shutdown(self, timeout: float | None = None) -> SessionSummary:
        """Stop accepting queries and wait for every submitted task to finish."""

        finished = self.registry.await_all(timeout)
        self._executor.shutdown(wait=finished)
        return self.summary

    @property
    def summary(self) -> SessionSummary:
        with self._summary_lock:
            return SessionSummary(
                submitted=self._summary.submitted,
                completed=self._summary.completed,
                empty=self._summary.empty,
                failed=self._summary.failed,
            )

    def __enter__(self) -> SearchSession:
        return self

    def __exit__(self, *_: object) -> None:
        if not self.registry.closed:
            self.shutdown()

    def _record(self, task: QueryTask) -> None:
        outcome = task.outcome
        with self._summary_lock:
            if outcome is None or outcome.state == TaskState.FAILED:
                self._summary.failed += 1
            elif outcome.is_empty:
                self._summary.empty += 1
            else:
                self._summary.completed += 1
