"""Controllers for filesystem CLI commands."""

from __future__ import annotations

from pathlib import Path

from moex_securities.filesystem.comparison import path_difference
from moex_securities.filesystem.depth import NOT_A_DIRECTORY, max_directory_depth


class FilesystemCliController:
    """Formats filesystem helper results for the CLI."""

    def depth(self, path: Path) -> list[str]:
        try:
            depth = max_directory_depth(path)
        except OSError as exc:
            return [f"Error walking the file tree: {exc}"]
        if depth == NOT_A_DIRECTORY:
            return ["This is not a directory"]
        return [f"Max depth: {depth}"]

    def compare(self, first: Path, second: Path) -> list[str]:
        statuses = path_difference(first, second)
        return [f"{first} vs {second}: " + ", ".join(status.name for status in statuses)]
