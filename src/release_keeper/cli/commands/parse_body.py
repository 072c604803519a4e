"""Implementation of the 'parse-body' command.

Decodes a release pull request body (as written by release-pr) back into
its per-component releases.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from rich.table import Table

from release_keeper.core.pull_request_body import PullRequestBody

if TYPE_CHECKING:
    from rich.console import Console


def run_parse_body(file: str, show_notes: bool, console: Console, err_console: Console) -> None:
    """Run the parse-body command.

    Args:
        file: Path to a file holding the pull request body
        show_notes: Also print the notes of each release
        console: Console for standard output
        err_console: Console for error output
    """
    try:
        text = Path(file).read_text()
    except OSError as e:
        err_console.print(f"[red]Error reading {file}:[/] {e}")
        raise SystemExit(1) from e

    body = PullRequestBody.parse(text)
    if body is None:
        err_console.print(f"[red]Error:[/] No release notes found in {file}")
        raise SystemExit(1)

    table = Table(title="Releases")
    table.add_column("Component", style="cyan")
    table.add_column("Version", style="green")
    for release in body.release_data:
        table.add_row(release.component or "-", str(release.version or "-"))
    console.print(table)

    if show_notes:
        for release in body.release_data:
            console.print(f"\n[bold]{release.title}[/]")
            console.print(release.notes, markup=False, highlight=False)
