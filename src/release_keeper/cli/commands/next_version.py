"""Implementation of the 'next-version' command."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.table import Table

from release_keeper.cli.commands.common import plan_project

if TYPE_CHECKING:
    from rich.console import Console


def run_next_version(path: str | None, console: Console, err_console: Console) -> None:
    """Print the version each package would be released as.

    Args:
        path: Optional path to project directory
        console: Console for standard output
        err_console: Console for error output
    """
    plan = plan_project(path, err_console)
    if not plan.candidates:
        console.print("[yellow]No releasable changes found.[/]")
        return

    table = Table(title="Pending releases")
    table.add_column("Package", style="cyan", no_wrap=True)
    table.add_column("Component")
    table.add_column("Current")
    table.add_column("Next", style="green")
    table.add_column("Bump")
    table.add_column("Tag", style="dim")
    for candidate in plan.candidates:
        table.add_row(
            candidate.path,
            candidate.component or "-",
            str(candidate.previous_version or "-"),
            str(candidate.version),
            str(candidate.bump),
            str(candidate.tag),
        )
    console.print(table)
