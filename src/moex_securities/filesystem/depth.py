"""Maximum sub-directory nesting depth."""

from __future__ import annotations

import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)

NOT_A_DIRECTORY = -1


def max_directory_depth(path: Path) -> int:
    """Return the deepest sub-directory level below ``path``.

    An empty directory, or one that holds only files, has depth 0. Returns
    ``NOT_A_DIRECTORY`` when ``path`` is missing or is not a directory.
    Unreadable sub-directories are logged and skipped; symlinks are not followed.
    """

    if not path.is_dir():
        return NOT_A_DIRECTORY

    def _on_error(error: OSError) -> None:
        logger.warning("Access denied: %s", error.filename)

    deepest = 0
    for dirpath, _dirnames, _filenames in os.walk(path, onerror=_on_error):
        depth = len(Path(dirpath).relative_to(path).parts)
        deepest = max(deepest, depth)
    return deepest
