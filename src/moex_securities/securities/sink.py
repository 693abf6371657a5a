"""Progress notices emitted by query tasks."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Protocol

import rich_click as click

from moex_securities.securities.models import TaskOutcome


class ProgressSink(Protocol):
    """Receives one ``started`` and exactly one terminal event per task."""

    def started(self, query: str) -> None:
        raise NotImplementedError

    def completed(self, outcome: TaskOutcome) -> None:
        raise NotImplementedError

    def empty(self, outcome: TaskOutcome) -> None:
        raise NotImplementedError

    def failed(self, outcome: TaskOutcome) -> None:
        raise NotImplementedError

    def notice(self, message: str) -> None:
        raise NotImplementedError


class EchoProgressSink:
    """Print progress lines to the terminal; failures go to stderr."""

    def __init__(self) -> None:
        # click.echo is not atomic across threads; keep lines intact.
        self._lock = threading.Lock()

    def started(self, query: str) -> None:
        self._echo(f"Download started: {query}")

    def completed(self, outcome: TaskOutcome) -> None:
        self._echo(
            f"Download finished: {outcome.query} "
            f"(rows={outcome.rows_written} file={outcome.path})",
        )

    def empty(self, outcome: TaskOutcome) -> None:
        self._echo(f"No traded securities found for: {outcome.query}")

    def failed(self, outcome: TaskOutcome) -> None:
        self._echo(f"Failed to process '{outcome.query}': {outcome.error}", err=True)

    def notice(self, message: str) -> None:
        self._echo(message)

    def _echo(self, line: str, *, err: bool = False) -> None:
        with self._lock:
            click.echo(line, err=err)


@dataclass(slots=True)
class RecordingProgressSink:
    """Collect events in memory as ``(kind, query_or_message)`` pairs."""

    events: list[tuple[str, str]] = field(default_factory=list)
    outcomes: list[TaskOutcome] = field(default_factory=list)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def started(self, query: str) -> None:
        self._record("started", query)

    def completed(self, outcome: TaskOutcome) -> None:
        self._record("completed", outcome.query, outcome)

    def empty(self, outcome: TaskOutcome) -> None:
        self._record("empty", outcome.query, outcome)

    def failed(self, outcome: TaskOutcome) -> None:
        self._record("failed", outcome.query, outcome)

    def notice(self, message: str) -> None:
        self._record("notice", message)

    def kinds_for(self, query: str) -> list[str]:
        with self._lock:
            return [kind for kind, subject in self.events if subject == query and kind != "notice"]

    def _record(self, kind: str, subject: str, outcome: TaskOutcome | None = None) -> None:
        with self._lock:
            self.events.append((kind, subject))
            if outcome is not None:
                self.outcomes.append(outcome)
