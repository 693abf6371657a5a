"""Fetch -> filter -> persist chain run once per query."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from functools import partial
from pathlib import Path
from typing import Any

from moex_securities.http.fetcher import HttpFetcher, build_search_url
from moex_securities.securities.models import (
    Err,
    FetchError,
    Ok,
    OutputRow,
    SecuritiesError,
    TaskOutcome,
    TaskState,
    WriteReport,
)
from moex_securities.securities.parser import parse_securities
from moex_securities.securities.registry import QueryTask
from moex_securities.securities.sink import ProgressSink
from moex_securities.securities.writer import write_securities_csv

logger = logging.getLogger(__name__)

Stage = Callable[[Any], "Ok[Any] | Err"]


@dataclass(slots=True)
class PipelineTarget:
    """Where requests go and where artifacts land."""

    base_url: str
    output_dir: Path
    extension: str = "csv"
    query_param: str = "q"


class QueryPipeline:
    """Runs the stages for one task and reports its outcome.

    ``execute`` never raises: every failure ends the task in ``FAILED`` and is
    routed to the progress sink, so sibling tasks and the registry are never
    affected.
    """

    def __init__(
        self,
        *,
        fetcher: HttpFetcher,
        target: PipelineTarget,
        sink: ProgressSink,
    ) -> None:
        self.fetcher = fetcher
        self.target = target
        self.sink = sink

    def fetch(self, query: str) -> Ok[str] | Err:
        url = build_search_url(self.target.base_url, query, param=self.target.query_param)
        result = self.fetcher.fetch(url)
        if not result.is_success:
            return Err(
                FetchError(
                    f"Request failed: {result.error or 'unknown error'}",
                    status_code=result.status_code,
                ),
            )
        return Ok(result.content)

    def filter(self, body: str) -> Ok[list[OutputRow]] | Err:
        try:
            return Ok(parse_securities(body))
        except SecuritiesError as exc:
            return Err(exc)

    def persist(self, rows: Sequence[OutputRow], *, target_name: str) -> Ok[WriteReport] | Err:
        try:
            return Ok(
                write_securities_csv(
                    rows,
                    target_name=target_name,
                    output_dir=self.target.output_dir,
                    extension=self.target.extension,
                ),
            )
        except SecuritiesError as exc:
            return Err(exc)

    def execute(self, task: QueryTask) -> TaskOutcome:
        try:
            self.sink.started(task.query)
            outcome = self._run_stages(task)
        except Exception as exc:  # noqa: BLE001
            logger.exception("Unexpected error while processing %r", task.query)
            outcome = TaskOutcome(
                query=task.query,
                state=TaskState.FAILED,
                error=SecuritiesError(f"Unexpected error: {exc}", code="internal_error"),
            )
        try:
            self._report(outcome)
        finally:
            task.finish(outcome)
        return outcome

    def _run_stages(self, task: QueryTask) -> TaskOutcome:
        stages: tuple[tuple[TaskState, Stage], ...] = (
            (TaskState.FETCHING, self.fetch),
            (TaskState.FILTERING, self.filter),
            (TaskState.PERSISTING, partial(self.persist, target_name=task.query)),
        )
        value: Any = task.query
        for state, stage in stages:
            task.advance(state)
            result = stage(value)
            if isinstance(result, Err):
                logger.warning(
                    "Task %r failed while %s: %s",
                    task.query,
                    state.value,
                    result.error,
                )
                return TaskOutcome(query=task.query, state=TaskState.FAILED, error=result.error)
            value = result.value

        report: WriteReport = value
        return TaskOutcome(
            query=task.query,
            state=TaskState.COMPLETED,
            rows_written=report.rows_written,
            path=report.path,
        )

    def _report(self, outcome: TaskOutcome) -> None:
        if outcome.state == TaskState.FAILED:
            self.sink.failed(outcome)
        elif outcome.is_empty:
            self.sink.empty(outcome)
        else:
            self.sink.completed(outcome)
