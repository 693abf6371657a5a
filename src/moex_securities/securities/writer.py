"""CSV artifact writer for filtered securities."""

from __future__ import annotations

import csv
import io
import logging
import os
import uuid
from collections.abc import Sequence
from pathlib import Path

from moex_securities.securities.models import (
    TARGET_COLUMNS,
    ArtifactWriteError,
    OutputRow,
    WriteReport,
)

logger = logging.getLogger(__name__)

DELIMITER = ";"
ESCAPE_CHAR = '"'
LINE_END = "\n"
ENCODING = "utf-8-sig"


def artifact_path(output_dir: Path, target_name: str, extension: str = "csv") -> Path:
    return output_dir / f"{target_name}.{extension}"


def render_csv(rows: Sequence[OutputRow], header: Sequence[str] = TARGET_COLUMNS) -> str:
    """Render header and rows as unquoted ``;``-separated lines.

    Fields are never wrapped in quotes. A ``"``, ``;`` or line break inside a
    field is prefixed with ``"`` instead, so ``ПАО "Газпром"`` is written as
    ``ПАО ""Газпром""`` and ``a;b`` as ``a";b``.
    """

    buffer = io.StringIO()
    writer = csv.writer(
        buffer,
        delimiter=DELIMITER,
        quoting=csv.QUOTE_NONE,
        quotechar=None,
        escapechar=ESCAPE_CHAR,
        lineterminator=LINE_END,
    )
    writer.writerow(header)
    writer.writerows(rows)
    return buffer.getvalue()


def write_securities_csv(
    rows: Sequence[OutputRow],
    *,
    target_name: str,
    output_dir: Path,
    extension: str = "csv",
) -> WriteReport:
    """Write rows to ``<output_dir>/<target_name>.<extension>``.

    Nothing is written for an empty row sequence. The file is written to a
    temporary sibling first and moved into place, so an existing artifact is
    either fully replaced or left untouched. The temporary file is created
    with the process umask, like any regular file.
    """

    if not rows:
        return WriteReport(target_name=target_name, rows_written=0, path=None)

    path = artifact_path(output_dir, target_name, extension)
    payload = render_csv(rows)
    tmp_path = output_dir / f".tmp-{uuid.uuid4().hex}.{extension}"
    try:
        with tmp_path.open("x", encoding=ENCODING, newline="") as handle:
            handle.write(payload)
        os.replace(tmp_path, path)
    except (OSError, ValueError) as exc:
        raise ArtifactWriteError(
            f"Failed to write file {target_name}: {exc}",
            target_name=target_name,
        ) from exc
    finally:
        tmp_path.unlink(missing_ok=True)

    logger.debug("Wrote %d rows to %s", len(rows), path)
    return WriteReport(target_name=target_name, rows_written=len(rows), path=path)
