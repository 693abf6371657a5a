"""CLI entrypoint for moex-securities."""

import logging
from pathlib import Path

import rich_click as click

from moex_securities import __version__
from moex_securities.filesystem.controllers import FilesystemCliController
from moex_securities.securities.controllers import (
    FetchCommand,
    SearchCommand,
    SecuritiesCliController,
)
from moex_securities.securities.models import OutputDirectoryError
from moex_securities.securities.sink import EchoProgressSink

click.rich_click.USE_MARKDOWN = True
SECURITIES_CONTROLLER = SecuritiesCliController()
FILESYSTEM_CONTROLLER = FilesystemCliController()

_output_dir_option = click.option(
    "--output-dir",
    type=click.Path(path_type=Path, file_okay=False),
    default=None,
    help="Directory for CSV files. Defaults to `~/MOEX securities`.",
)
_max_workers_option = click.option(
    "--max-workers",
    type=click.IntRange(min=1, max=64),
    default=None,
    help="Worker threads for concurrent queries (env MOEX_SECURITIES_MAX_WORKERS, default 8).",
)


@click.group()
@click.version_option(version=__version__, prog_name="moex-securities")
@click.option("--verbose", "-v", is_flag=True, help="Log debug details to stderr.")
def moex_securities(verbose: bool) -> None:
    """Search MOEX securities and save traded ones to CSV."""

    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(levelname)s %(threadName)s %(name)s: %(message)s",
        )


@moex_securities.command("search")
@_output_dir_option
@_max_workers_option
def search(output_dir: Path | None, max_workers: int | None) -> None:
    """Read queries from stdin, one per line, until the exit command."""

    try:
        SECURITIES_CONTROLLER.search(
            SearchCommand(output_dir=output_dir, max_workers=max_workers),
            lines=click.get_text_stream("stdin"),
            sink=EchoProgressSink(),
        )
    except (OutputDirectoryError, ValueError) as exc:
        raise click.ClickException(str(exc)) from exc


@moex_securities.command("fetch")
@_output_dir_option
@_max_workers_option
@click.argument("queries", nargs=-1, required=True)
def fetch(output_dir: Path | None, max_workers: int | None, queries: tuple[str, ...]) -> None:
    """Run one download per QUERY concurrently and wait for all of them."""

    try:
        summary = SECURITIES_CONTROLLER.fetch(
            FetchCommand(output_dir=output_dir, max_workers=max_workers, queries=queries),
            sink=EchoProgressSink(),
        )
    except (OutputDirectoryError, ValueError) as exc:
        raise click.ClickException(str(exc)) from exc
    if summary.failed:
        raise click.ClickException(f"{summary.failed} of {summary.submitted} queries failed.")


@moex_securities.command("depth")
@click.argument("path", type=click.Path(path_type=Path))
def depth(path: Path) -> None:
    """Print the maximum sub-directory nesting depth of PATH."""

    _emit_lines(FILESYSTEM_CONTROLLER.depth(path))


@moex_securities.command("compare-paths")
@click.argument("first", type=click.Path(path_type=Path))
@click.argument("second", type=click.Path(path_type=Path))
def compare_paths(first: Path, second: Path) -> None:
    """List the relationships between FIRST and SECOND."""

    _emit_lines(FILESYSTEM_CONTROLLER.compare(first, second))


def _emit_lines(lines: list[str]) -> None:
    for line in lines:
        click.echo(line)


if __name__ == "__main__":  # pragma: no cover
    moex_securities()
