"""Domain models for the securities search pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Generic, TypeAlias, TypeVar

T = TypeVar("T")

TARGET_COLUMNS: tuple[str, ...] = (
    "secid",
    "shortname",
    "regnumber",
    "name",
    "emitent_title",
    "emitent_inn",
    "emitent_okpo",
)
TRADED_COLUMN = "is_traded"

OutputRow: TypeAlias = tuple[str, ...]


class TaskState(str, Enum):
    """Lifecycle states for one query task."""

    SUBMITTED = "submitted"
    FETCHING = "fetching"
    FILTERING = "filtering"
    PERSISTING = "persisting"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in {TaskState.COMPLETED, TaskState.FAILED}


@dataclass(slots=True)
class SecuritiesError(Exception):
    """Base pipeline error."""

    message: str
    code: str = "securities_error"

    def __str__(self) -> str:
        return self.message


@dataclass(slots=True)
class FetchError(SecuritiesError):
    """Transport failure or non-success HTTP status."""

    code: str = "fetch_failed"
    status_code: int = 0


@dataclass(slots=True)
class MalformedResponseError(SecuritiesError):
    """Response text is not JSON or lacks the expected tabular section."""

    code: str = "malformed_response"


@dataclass(slots=True)
class ArtifactWriteError(SecuritiesError):
    """I/O failure while writing one CSV artifact."""

    code: str = "write_failed"
    target_name: str = ""


@dataclass(slots=True)
class OutputDirectoryError(SecuritiesError):
    """Output directory could not be created at startup."""

    code: str = "output_dir_failed"


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """Successful stage result."""

    value: T


@dataclass(frozen=True, slots=True)
class Err:
    """Failed stage result carrying the reason."""

    error: SecuritiesError


@dataclass(frozen=True, slots=True)
class WriteReport:
    """Outcome of the persist stage; ``path`` is None when nothing was written."""

    target_name: str
    rows_written: int
    path: Path | None


@dataclass(frozen=True, slots=True)
class TaskOutcome:
    """Terminal result of one query task."""

    query: str
    state: TaskState
    rows_written: int = 0
    path: Path | None = None
    error: SecuritiesError | None = None

    @property
    def is_empty(self) -> bool:
        return self.state == TaskState.COMPLETED and self.path is None
