"""Runtime configuration for securities search sessions."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from urllib.parse import urlparse

DEFAULT_BASE_URL = "https://iss.moex.com/iss/securities.json"
DEFAULT_OUTPUT_DIR_NAME = "MOEX securities"


@dataclass(slots=True)
class FetchSettings:
    """Outbound request settings."""

    base_url: str = DEFAULT_BASE_URL
    query_param: str = "q"
    request_timeout_seconds: float = 30.0
    user_agent: str = "moex-securities/1.0"


@dataclass(slots=True)
class OutputSettings:
    """Artifact placement settings."""

    output_dir: Path = field(default_factory=lambda: Path.home() / DEFAULT_OUTPUT_DIR_NAME)
    extension: str = "csv"


@dataclass(slots=True)
class SessionSettings:
    """Interactive session settings."""

    exit_command: str = "/exit"
    max_workers: int = 8


@dataclass(slots=True)
class Settings:
    """Application settings grouped by concern."""

    fetch: FetchSettings = field(default_factory=FetchSettings)
    output: OutputSettings = field(default_factory=OutputSettings)
    session: SessionSettings = field(default_factory=SessionSettings)

    @classmethod
    def from_env(
        cls,
        output_dir: Path | None = None,
        max_workers: int | None = None,
    ) -> Settings:
        """Load settings from environment; explicit arguments take precedence."""

        env_output_dir = os.getenv("MOEX_SECURITIES_OUTPUT_DIR")
        return cls(
            fetch=FetchSettings(
                base_url=os.getenv("MOEX_SECURITIES_BASE_URL", DEFAULT_BASE_URL),
                request_timeout_seconds=float(
                    os.getenv("MOEX_SECURITIES_REQUEST_TIMEOUT_SECONDS", "30.0"),
                ),
                user_agent=os.getenv("MOEX_SECURITIES_USER_AGENT", "moex-securities/1.0"),
            ),
            output=OutputSettings(
                output_dir=output_dir
                or (
                    Path(env_output_dir).expanduser()
                    if env_output_dir
                    else Path.home() / DEFAULT_OUTPUT_DIR_NAME
                ),
                extension=os.getenv("MOEX_SECURITIES_EXTENSION", "csv").strip().lstrip("."),
            ),
            session=SessionSettings(
                exit_command=os.getenv("MOEX_SECURITIES_EXIT_COMMAND", "/exit").strip(),
                max_workers=max_workers
                or int(os.getenv("MOEX_SECURITIES_MAX_WORKERS", "8")),
            ),
        )

    def validate(self) -> None:
        """Raise configuration error if any setting is unusable."""

        parsed = urlparse(self.fetch.base_url)
        if parsed.scheme not in {"http", "https"} or not parsed.netloc:
            raise ValueError(
                "Invalid MOEX_SECURITIES_BASE_URL: "
                f"{self.fetch.base_url!r}. "
                "Expected an absolute URL with http:// or https:// scheme.",
            )
        if self.fetch.request_timeout_seconds <= 0:
            raise ValueError("MOEX_SECURITIES_REQUEST_TIMEOUT_SECONDS must be > 0.")
        if not self.output.extension:
            raise ValueError("MOEX_SECURITIES_EXTENSION must not be empty.")
        if not self.session.exit_command:
            raise ValueError("MOEX_SECURITIES_EXIT_COMMAND must not be empty.")
        if self.session.max_workers <= 0:
            raise ValueError("MOEX_SECURITIES_MAX_WORKERS must be a positive integer.")
