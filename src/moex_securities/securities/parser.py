"""Filter the ISS securities response down to traded securities."""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence

from moex_securities.securities.models import (
    TARGET_COLUMNS,
    TRADED_COLUMN,
    MalformedResponseError,
    OutputRow,
)

SECTION_NAME = "securities"
NOT_FOUND = -1


class ColumnIndex:
    """Column name -> position lookup for one response section."""

    def __init__(self, columns: Sequence[object]) -> None:
        # Duplicate names resolve to the last occurrence.
        self._positions = {str(name): position for position, name in enumerate(columns)}

    def __contains__(self, name: object) -> bool:
        return name in self._positions

    def __len__(self) -> int:
        return len(self._positions)

    def get(self, name: str) -> int:
        return self._positions.get(name, NOT_FOUND)

    def resolve(self, names: Sequence[str]) -> tuple[int, ...]:
        return tuple(self.get(name) for name in names)


def parse_securities(body: str) -> list[OutputRow]:
    """Parse the response body and return one row per traded security.

    Rows keep the source order. A response without the ``is_traded`` column
    yields no rows. Any structural problem raises ``MalformedResponseError``
    and nothing is returned, even if some rows were already converted.
    """

    try:
        document = json.loads(body)
    except (TypeError, ValueError) as exc:
        raise MalformedResponseError(f"Response is not valid JSON: {exc}") from exc

    section = document.get(SECTION_NAME) if isinstance(document, Mapping) else None
    if not isinstance(section, Mapping):
        raise MalformedResponseError(f"Response has no {SECTION_NAME!r} section")
    columns = section.get("columns")
    data = section.get("data")
    if not isinstance(columns, list) or not isinstance(data, list):
        raise MalformedResponseError(
            f"Response section {SECTION_NAME!r} must contain 'columns' and 'data' arrays",
        )

    index = ColumnIndex(columns)
    traded_position = index.get(TRADED_COLUMN)
    if traded_position == NOT_FOUND:
        return []
    target_positions = index.resolve(TARGET_COLUMNS)

    rows: list[OutputRow] = []
    for row_number, row in enumerate(data):
        if not isinstance(row, list):
            raise MalformedResponseError(f"Data row {row_number} is not an array")
        if not _is_traded(_cell(row, traded_position, row_number)):
            continue
        rows.append(
            tuple(
                "" if position == NOT_FOUND else _render(_cell(row, position, row_number))
                for position in target_positions
            ),
        )
    return rows


def _cell(row: list[object], position: int, row_number: int) -> object:
    if position >= len(row):
        raise MalformedResponseError(
            f"Data row {row_number} has {len(row)} values, expected at least {position + 1}",
        )
    return row[position]


def _is_traded(value: object) -> bool:
    if isinstance(value, bool):
        return False
    return isinstance(value, int | float) and value == 1


def _render(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int | float):
        return str(value)
    return json.dumps(value, ensure_ascii=False)
