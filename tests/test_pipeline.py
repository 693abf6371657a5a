from __future__ import annotations

from pathlib import Path

import allure
import httpx

from conftest import EMPTY_BODY, SAMPLE_BODY, make_fetcher
from moex_securities.securities.models import (
    FetchError,
    MalformedResponseError,
    SecuritiesError,
    TaskState,
)
from moex_securities.securities.pipeline import PipelineTarget, QueryPipeline
from moex_securities.securities.registry import QueryTask
from moex_securities.securities.sink import RecordingProgressSink

pytestmark = [
    allure.epic("Securities Search"),
    allure.feature("Task Pipeline"),
]


def _pipeline(handler, output_dir: Path) -> tuple[QueryPipeline, RecordingProgressSink]:
    sink = RecordingProgressSink()
    pipeline = QueryPipeline(
        fetcher=make_fetcher(handler),
        target=PipelineTarget(
            base_url="https://iss.example/securities.json",
            output_dir=output_dir,
        ),
        sink=sink,
    )
    return pipeline, sink


def _body_handler(body: str, status: int = 200):
    def _handler(_request: httpx.Request) -> httpx.Response:
        return httpx.Response(status, text=body)

    return _handler


def test_successful_task_writes_artifact(tmp_path: Path) -> None:
    pipeline, sink = _pipeline(_body_handler(SAMPLE_BODY), tmp_path)
    task = QueryTask("Yandex")

    outcome = pipeline.execute(task)

    assert outcome.state == TaskState.COMPLETED
    assert outcome.rows_written == 1
    assert outcome.path == tmp_path / "Yandex.csv"
    assert task.done()
    assert task.outcome == outcome
    lines = (tmp_path / "Yandex.csv").read_text(encoding="utf-8-sig").splitlines()
    assert lines[0].startswith("secid;shortname")
    assert lines[1].startswith("YNDX;Yandex")
    assert sink.kinds_for("Yandex") == ["started", "completed"]


def test_query_is_sent_as_single_encoded_parameter(tmp_path: Path) -> None:
    seen: list[httpx.Request] = []

    def _handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, text=EMPTY_BODY)

    pipeline, _ = _pipeline(_handler, tmp_path)
    pipeline.execute(QueryTask("Газпром & Co"))

    assert len(seen) == 1
    assert seen[0].url.path == "/securities.json"
    assert dict(seen[0].url.params) == {"q": "Газпром & Co"}


def test_no_traded_securities_is_reported_as_empty(tmp_path: Path) -> None:
    pipeline, sink = _pipeline(_body_handler(EMPTY_BODY), tmp_path)

    outcome = pipeline.execute(QueryTask("Nothing"))

    assert outcome.state == TaskState.COMPLETED
    assert outcome.is_empty
    assert list(tmp_path.iterdir()) == []
    assert sink.kinds_for("Nothing") == ["started", "empty"]


def test_fetch_failure_skips_remaining_stages(tmp_path: Path) -> None:
    pipeline, sink = _pipeline(_body_handler("oops", status=500), tmp_path)
    task = QueryTask("Broken")

    outcome = pipeline.execute(task)

    assert outcome.state == TaskState.FAILED
    assert isinstance(outcome.error, FetchError)
    assert outcome.error.status_code == 500
    assert list(tmp_path.iterdir()) == []
    assert sink.kinds_for("Broken") == ["started", "failed"]


def test_malformed_response_fails_without_artifact(tmp_path: Path) -> None:
    pipeline, sink = _pipeline(_body_handler('{"securities": {}}'), tmp_path)

    outcome = pipeline.execute(QueryTask("Weird"))

    assert outcome.state == TaskState.FAILED
    assert isinstance(outcome.error, MalformedResponseError)
    assert list(tmp_path.iterdir()) == []
    assert sink.kinds_for("Weird") == ["started", "failed"]


def test_write_failure_is_contained(tmp_path: Path) -> None:
    pipeline, sink = _pipeline(_body_handler(SAMPLE_BODY), tmp_path / "missing")

    outcome = pipeline.execute(QueryTask("Yandex"))

    assert outcome.state == TaskState.FAILED
    assert "Yandex" in str(outcome.error)
    assert sink.kinds_for("Yandex") == ["started", "failed"]


def test_unexpected_exception_still_finishes_task(tmp_path: Path, monkeypatch) -> None:
    pipeline, sink = _pipeline(_body_handler(SAMPLE_BODY), tmp_path)

    def _boom(_body: str):
        raise KeyError("bug")

    monkeypatch.setattr(pipeline, "filter", _boom)
    task = QueryTask("Bug")

    outcome = pipeline.execute(task)

    assert task.done()
    assert outcome.state == TaskState.FAILED
    assert isinstance(outcome.error, SecuritiesError)
    assert outcome.error.code == "internal_error"
    assert sink.kinds_for("Bug") == ["started", "failed"]
