"""Implementation of the 'release-pr' command.

The release-pr command plans the next release of every package and
renders the release pull request. With ``--execute`` it also writes
version files, changelogs and the manifest into the working tree.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from rich.panel import Panel

from release_keeper.cli.commands.common import plan_project
from release_keeper.config import write_manifest
from release_keeper.core.release import build_release_pull_request, updated_manifest
from release_keeper.core.strategy import apply_file_updates
from release_keeper.exceptions import ProjectError

if TYPE_CHECKING:
    from rich.console import Console

    from release_keeper.cli.commands.common import ProjectPlan
    from release_keeper.core.release import ReleasePullRequest


def run_release_pr(
    path: str | None,
    execute: bool,
    body_file: str | None,
    console: Console,
    err_console: Console,
) -> None:
    """Run the release-pr command.

    Args:
        path: Optional path to project directory
        execute: Whether to actually apply changes
        body_file: Where to write the pull request body
        console: Console for standard output
        err_console: Console for error output
    """
    plan = plan_project(path, err_console, require_clean=execute)
    pull_request = build_release_pull_request(plan.candidates, plan.config)
    if pull_request is None:
        console.print("[yellow]No releasable changes found. Nothing to do.[/]")
        return

    mode_str = "[green]EXECUTING[/]" if execute else "[yellow]DRY-RUN[/]"
    console.print(f"\n{mode_str} - {len(plan.candidates)} release(s) pending\n")
    for candidate in plan.candidates:
        previous = candidate.previous_version or "unreleased"
        console.print(
            f"  {candidate.path}: [cyan]{previous}[/] -> [green]{candidate.version}[/] ({candidate.bump})"
        )
    console.print()
    _print_pull_request(pull_request, console)

    if body_file:
        Path(body_file).write_text(str(pull_request.body))
        console.print(f"  [green]✓[/] Wrote pull request body to {body_file}")

    if not execute:
        files = "\n".join(f"  • [cyan]{update}[/]" for update in _planned_files(plan))
        console.print(
            Panel(
                f"[bold]Would make the following changes:[/]\n\n{files}\n"
                f"  • [cyan]{plan.config.manifest_path}[/]",
                title="[yellow]Dry Run Preview[/]",
                border_style="yellow",
            )
        )
        console.print("\n[dim]Run with [cyan]--execute[/] to apply these changes.[/]")
        return

    _apply(plan, console, err_console)
    console.print(
        Panel(
            f"[green]Prepared {pull_request.title}![/]\n\n"
            "Next steps:\n"
            "  1. Review the changes\n"
            f"  2. Commit them to branch [cyan]{pull_request.head_branch}[/]\n"
            f"  3. Open a pull request against [cyan]{pull_request.base_branch}[/]",
            title="[green]Release Prepared[/]",
            border_style="green",
        )
    )


def _print_pull_request(pull_request: ReleasePullRequest, console: Console) -> None:
    console.print(f"[bold]Title:[/] {pull_request.title}", markup=True, highlight=False)
    console.print(f"[bold]Branch:[/] {pull_request.head_branch} -> {pull_request.base_branch}")
    if pull_request.labels:
        console.print(f"[bold]Labels:[/] {', '.join(pull_request.labels)}", highlight=False)
    console.print()
    console.print(str(pull_request.body), markup=False, highlight=False)


def _planned_files(plan: ProjectPlan) -> list[str]:
    files: list[str] = []
    packages = {package.path: package for package in plan.config.effective_packages}
    for candidate in plan.candidates:
        for update in candidate.file_updates(plan.config, packages[candidate.path]):
            files.append(str(update.path))
    return files


def _apply(plan: ProjectPlan, console: Console, err_console: Console) -> None:
    packages = {package.path: package for package in plan.config.effective_packages}
    for candidate in plan.candidates:
        updates = candidate.file_updates(plan.config, packages[candidate.path])
        try:
            written = apply_file_updates(plan.repo.path, updates, candidate.version, candidate.notes)
        except ProjectError as e:
            err_console.print(f"[red]Error updating {candidate.path}:[/] {e}")
            raise SystemExit(1) from e
        for target in written:
            console.print(f"  [green]✓[/] Updated {target.relative_to(plan.repo.path)}")

    write_manifest(plan.manifest_path, updated_manifest(plan.manifest, plan.candidates))
    console.print(f"  [green]✓[/] Updated {plan.config.manifest_path}")
