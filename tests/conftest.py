"""Shared test fixtures."""

from __future__ import annotations

import json
from collections.abc import Callable

import httpx
import pytest

from moex_securities.http.fetcher import HttpFetcher

ALL_COLUMNS = [
    "secid",
    "shortname",
    "regnumber",
    "name",
    "emitent_title",
    "emitent_inn",
    "emitent_okpo",
    "is_traded",
]

SAMPLE_BODY = json.dumps(
    {
        "securities": {
            "columns": ALL_COLUMNS,
            "data": [
                ["YNDX", "Yandex", "1-01", "Yandex N.V.", "Yandex LLC", "12345", "67890", 1],
                ["TRASH", "BadPaper", "0-00", "Not Traded", "Unknown", "000", "111", 0],
            ],
        },
    },
)

EMPTY_BODY = json.dumps({"securities": {"columns": [], "data": []}})

Handler = Callable[[httpx.Request], httpx.Response]


def make_fetcher(handler: Handler) -> HttpFetcher:
    return HttpFetcher(transport=httpx.MockTransport(handler))


def fetcher_factory(handler: Handler) -> Callable[..., HttpFetcher]:
    """Drop-in replacement for the HttpFetcher class that never touches the network."""

    def _factory(**kwargs: object) -> HttpFetcher:
        return HttpFetcher(transport=httpx.MockTransport(handler), **kwargs)

    return _factory


@pytest.fixture()
def sample_handler() -> Handler:
    def _handler(_request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text=SAMPLE_BODY)

    return _handler


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch, tmp_path):
    for name in (
        "MOEX_SECURITIES_BASE_URL",
        "MOEX_SECURITIES_OUTPUT_DIR",
        "MOEX_SECURITIES_EXTENSION",
        "MOEX_SECURITIES_EXIT_COMMAND",
        "MOEX_SECURITIES_MAX_WORKERS",
        "MOEX_SECURITIES_REQUEST_TIMEOUT_SECONDS",
        "MOEX_SECURITIES_USER_AGENT",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
