"""Pairwise relationship checks between two filesystem paths."""

from __future__ import annotations

import os
from enum import Enum
from pathlib import Path


class PathStatus(str, Enum):
    """Relationships that can hold between two paths."""

    NOT_EXISTS = "not_exists"
    SAME_FILE = "same_file"
    BIGGER_FILE = "bigger_file"
    SMALLER_FILE = "smaller_file"
    SAME_SIZE_FILE = "same_size_file"
    SAME_DIRECTORY = "same_directory"
    SAME_ABSOLUTE_NAME_DEPTH = "same_absolute_name_depth"
    SAME_PREFIX = "same_prefix"
    SAME_ROOT = "same_root"
    SUBPATH = "subpath"
    PARENT_PATH = "parent_path"


def path_difference(first: Path, second: Path) -> list[PathStatus]:
    """Return every status that applies to the pair.

    When either path is missing the result is ``[NOT_EXISTS]`` and nothing
    else is checked.
    """

    if is_not_exists(first, second):
        return [PathStatus.NOT_EXISTS]

    statuses: list[PathStatus] = []
    if is_same_file(first, second):
        statuses.append(PathStatus.SAME_FILE)
    if is_same_directory(first, second):
        statuses.append(PathStatus.SAME_DIRECTORY)
    if first.is_file() and second.is_file():
        if is_bigger_file(first, second):
            statuses.append(PathStatus.BIGGER_FILE)
        elif is_smaller_file(first, second):
            statuses.append(PathStatus.SMALLER_FILE)
        else:
            statuses.append(PathStatus.SAME_SIZE_FILE)
    if is_same_absolute_name_depth(first, second):
        statuses.append(PathStatus.SAME_ABSOLUTE_NAME_DEPTH)
    if is_same_prefix(first, second):
        statuses.append(PathStatus.SAME_PREFIX)
    if is_same_root(first, second):
        statuses.append(PathStatus.SAME_ROOT)
    if is_subpath(first, second):
        statuses.append(PathStatus.SUBPATH)
    elif is_parent_path(first, second):
        statuses.append(PathStatus.PARENT_PATH)
    return statuses


def is_not_exists(first: Path, second: Path) -> bool:
    return not first.exists() or not second.exists()


def is_same_file(first: Path, second: Path) -> bool:
    return not is_not_exists(first, second) and os.path.samefile(first, second)


def is_bigger_file(first: Path, second: Path) -> bool:
    return not is_not_exists(first, second) and first.stat().st_size > second.stat().st_size


def is_smaller_file(first: Path, second: Path) -> bool:
    return not is_not_exists(first, second) and first.stat().st_size < second.stat().st_size


def is_same_size_file(first: Path, second: Path) -> bool:
    return not is_not_exists(first, second) and first.stat().st_size == second.stat().st_size


def is_same_directory(first: Path, second: Path) -> bool:
    """Both paths live directly in the same parent directory."""

    if is_not_exists(first, second):
        return False
    first_norm, second_norm = _normalized(first), _normalized(second)
    if first_norm == first_norm.parent or second_norm == second_norm.parent:
        return False
    try:
        return os.path.samefile(first_norm.parent, second_norm.parent)
    except OSError:
        return first_norm.parent == second_norm.parent


def is_same_absolute_name_depth(first: Path, second: Path) -> bool:
    if is_not_exists(first, second):
        return False
    return len(_names(first.absolute())) == len(_names(second.absolute()))


def is_same_prefix(first: Path, second: Path) -> bool:
    """First component after the root matches."""

    if is_not_exists(first, second):
        return False
    first_names, second_names = _names(first.absolute()), _names(second.absolute())
    if not first_names or not second_names:
        return False
    return first_names[0] == second_names[0]


def is_same_root(first: Path, second: Path) -> bool:
    if is_not_exists(first, second):
        return False
    first_root, second_root = first.absolute().anchor, second.absolute().anchor
    return bool(first_root) and first_root == second_root


def is_subpath(first: Path, second: Path) -> bool:
    """``second`` lies strictly inside ``first``."""

    if is_not_exists(first, second):
        return False
    first_norm, second_norm = _normalized(first), _normalized(second)
    return first_norm != second_norm and second_norm.is_relative_to(first_norm)


def is_parent_path(first: Path, second: Path) -> bool:
    """``first`` lies strictly inside ``second``."""

    return is_subpath(second, first)


def _normalized(path: Path) -> Path:
    return Path(os.path.abspath(path))


def _names(path: Path) -> tuple[str, ...]:
    return path.parts[1:] if path.anchor else path.parts
