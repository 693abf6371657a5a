from __future__ import annotations

from pathlib import Path

import allure
import pytest

from moex_securities.config import (
    DEFAULT_BASE_URL,
    FetchSettings,
    OutputSettings,
    SessionSettings,
    Settings,
)

pytestmark = [
    allure.epic("Securities Search"),
    allure.feature("Configuration"),
]


def test_defaults_point_to_moex_and_home_directory(tmp_path: Path) -> None:
    settings = Settings.from_env()

    assert settings.fetch.base_url == DEFAULT_BASE_URL
    assert settings.output.output_dir == tmp_path / "home" / "MOEX securities"
    assert settings.output.extension == "csv"
    assert settings.session.exit_command == "/exit"
    assert settings.session.max_workers == 8
    settings.validate()


def test_environment_overrides(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv("MOEX_SECURITIES_BASE_URL", "http://localhost:8080/search.json")
    monkeypatch.setenv("MOEX_SECURITIES_OUTPUT_DIR", str(tmp_path / "out"))
    monkeypatch.setenv("MOEX_SECURITIES_EXTENSION", ".txt")
    monkeypatch.setenv("MOEX_SECURITIES_EXIT_COMMAND", " quit ")
    monkeypatch.setenv("MOEX_SECURITIES_MAX_WORKERS", "2")
    monkeypatch.setenv("MOEX_SECURITIES_REQUEST_TIMEOUT_SECONDS", "5")

    settings = Settings.from_env()

    assert settings.fetch.base_url == "http://localhost:8080/search.json"
    assert settings.fetch.request_timeout_seconds == 5.0
    assert settings.output.output_dir == tmp_path / "out"
    assert settings.output.extension == "txt"
    assert settings.session.exit_command == "quit"
    assert settings.session.max_workers == 2


def test_explicit_arguments_win_over_environment(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv("MOEX_SECURITIES_OUTPUT_DIR", str(tmp_path / "env"))
    monkeypatch.setenv("MOEX_SECURITIES_MAX_WORKERS", "2")

    settings = Settings.from_env(output_dir=tmp_path / "cli", max_workers=5)

    assert settings.output.output_dir == tmp_path / "cli"
    assert settings.session.max_workers == 5


@pytest.mark.parametrize(
    ("settings", "match"),
    [
        (Settings(fetch=FetchSettings(base_url="ftp://example.com/x")), "BASE_URL"),
        (Settings(fetch=FetchSettings(request_timeout_seconds=0)), "TIMEOUT"),
        (Settings(output=OutputSettings(extension="")), "EXTENSION"),
        (Settings(session=SessionSettings(exit_command="")), "EXIT_COMMAND"),
        (Settings(session=SessionSettings(max_workers=0)), "MAX_WORKERS"),
    ],
)
def test_validate_rejects_unusable_settings(settings: Settings, match: str) -> None:
    with pytest.raises(ValueError, match=match):
        settings.validate()
