"""Controllers for securities search CLI commands."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path

from moex_securities.config import Settings
from moex_securities.http.fetcher import HttpFetcher
from moex_securities.securities.pipeline import PipelineTarget, QueryPipeline
from moex_securities.securities.session import (
    SearchSession,
    SessionSummary,
    ensure_output_dir,
    read_queries,
)
from moex_securities.securities.sink import ProgressSink

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class SearchCommand:
    """CLI inputs for the interactive search command."""

    output_dir: Path | None
    max_workers: int | None


@dataclass(slots=True)
class FetchCommand:
    """CLI inputs for the batch fetch command."""

    output_dir: Path | None
    max_workers: int | None
    queries: tuple[str, ...]


class SecuritiesCliController:
    """Coordinates search session execution.

    The output directory is created before any query is accepted; a failure
    there raises ``OutputDirectoryError`` and no session is started.
    """

    def search(
        self,
        command: SearchCommand,
        *,
        lines: Iterable[str],
        sink: ProgressSink,
    ) -> SessionSummary:
        settings = _settings(command.output_dir, command.max_workers)
        ensure_output_dir(settings.output.output_dir)
        sink.notice(
            "Enter a search query (for example: Gazprom) "
            f"or {settings.session.exit_command} to quit:",
        )
        with _session(settings, sink) as session:
            for query in read_queries(lines, exit_command=settings.session.exit_command):
                session.submit(query)
            sink.notice("Waiting for active downloads to finish...")
            summary = session.shutdown()
        sink.notice(summary.as_line())
        return summary

    def fetch(self, command: FetchCommand, *, sink: ProgressSink) -> SessionSummary:
        settings = _settings(command.output_dir, command.max_workers)
        ensure_output_dir(settings.output.output_dir)
        with _session(settings, sink) as session:
            for raw_query in command.queries:
                query = raw_query.strip()
                if query:
                    session.submit(query)
            summary = session.shutdown()
        sink.notice(summary.as_line())
        return summary


def _settings(output_dir: Path | None, max_workers: int | None) -> Settings:
    settings = Settings.from_env(output_dir=output_dir, max_workers=max_workers)
    settings.validate()
    return settings


@contextmanager
def _session(settings: Settings, sink: ProgressSink) -> Iterator[SearchSession]:
    with HttpFetcher(
        timeout_seconds=settings.fetch.request_timeout_seconds,
        user_agent=settings.fetch.user_agent,
    ) as fetcher:
        pipeline = QueryPipeline(
            fetcher=fetcher,
            target=PipelineTarget(
                base_url=settings.fetch.base_url,
                output_dir=settings.output.output_dir,
                extension=settings.output.extension,
                query_param=settings.fetch.query_param,
            ),
            sink=sink,
        )
        logger.info("Saving results to %s", settings.output.output_dir)
        with SearchSession(pipeline=pipeline, max_workers=settings.session.max_workers) as session:
            yield session
