"""Command line entry point."""

from __future__ import annotations

import logging

import click
from rich.console import Console
from rich.logging import RichHandler

from release_keeper import __version__


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False, rich_tracebacks=True)],
        force=True,
    )


@click.group()
@click.version_option(__version__, prog_name="release-keeper")
@click.option("-v", "--verbose", is_flag=True, help="Show debug logging.")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """release-keeper - Release pull requests from conventional commits.

    Reads the history since each package's last release, works out the
    next versions and renders the release pull request.
    """
    _configure_logging(verbose)
    ctx.obj = {"console": Console(), "err_console": Console(stderr=True)}


@cli.command("release-pr")
@click.option("--path", "-p", type=click.Path(exists=True, file_okay=False), help="Project directory.")
@click.option("--execute", is_flag=True, help="Write version files, changelogs and the manifest.")
@click.option("--body-file", type=click.Path(dir_okay=False), help="Write the pull request body to a file.")
@click.pass_context
def release_pr(ctx: click.Context, path: str | None, execute: bool, body_file: str | None) -> None:
    """Plan the next release and render its pull request."""
    from release_keeper.cli.commands.release_pr import run_release_pr

    run_release_pr(path, execute, body_file, ctx.obj["console"], ctx.obj["err_console"])


@cli.command("next-version")
@click.option("--path", "-p", type=click.Path(exists=True, file_okay=False), help="Project directory.")
@click.pass_context
def next_version(ctx: click.Context, path: str | None) -> None:
    """Show the next version of every package with pending changes."""
    from release_keeper.cli.commands.next_version import run_next_version

    run_next_version(path, ctx.obj["console"], ctx.obj["err_console"])


@cli.command("parse-body")
@click.argument("file", type=click.Path(dir_okay=False))
@click.option("--notes", "show_notes", is_flag=True, help="Also print release notes.")
@click.pass_context
def parse_body(ctx: click.Context, file: str, show_notes: bool) -> None:
    """Decode a release pull request body."""
    from release_keeper.cli.commands.parse_body import run_parse_body

    run_parse_body(file, show_notes, ctx.obj["console"], ctx.obj["err_console"])


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
