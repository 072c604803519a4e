"""Shared setup for commands that plan releases from a repository."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from release_keeper.config import load_config, load_manifest
from release_keeper.core.release import package_component, plan_releases, release_tag
from release_keeper.exceptions import ConfigError, GitError
from release_keeper.vcs import GitRepository

if TYPE_CHECKING:
    from rich.console import Console

    from release_keeper.config import ReleaseKeeperConfig
    from release_keeper.core.release import ReleaseCandidate
    from release_keeper.core.version import Version
    from release_keeper.vcs import Commit

logger = logging.getLogger(__name__)


@dataclass
class ProjectPlan:
    config: ReleaseKeeperConfig
    repo: GitRepository
    manifest_path: Path
    manifest: dict[str, Version]
    candidates: list[ReleaseCandidate]


def _release_shas(
    repo: GitRepository,
    config: ReleaseKeeperConfig,
    manifest: dict[str, Version],
) -> dict[str, str]:
    """Resolve each package's last release tag to its commit."""
    shas: dict[str, str] = {}
    for package in config.effective_packages:
        version = manifest.get(package.path)
        if version is None:
            continue
        component = package_component(package, config, repo.path)
        tag = str(release_tag(version, component, package, config))
        sha = repo.resolve_ref(tag)
        if sha is None:
            logger.warning("Release tag %s of %s not found, using full history", tag, package.path)
            continue
        shas[package.path] = sha
    return shas


def _read_commits(
    repo: GitRepository,
    config: ReleaseKeeperConfig,
    release_shas: dict[str, str],
) -> list[Commit]:
    packages = config.effective_packages
    if len(packages) == 1 and packages[0].path in release_shas:
        return repo.get_commits_since(release_shas[packages[0].path])
    return repo.get_commits_since(None)


def plan_project(
    path: str | None,
    err_console: Console,
    *,
    require_clean: bool = False,
) -> ProjectPlan:
    """Load configuration, manifest and history, and plan releases.

    Errors are reported on ``err_console`` and end the command.

    Args:
        path: Optional path to project directory
        err_console: Console for error output
        require_clean: Refuse a dirty work tree unless allow_dirty is set
    """
    project_path = Path(path) if path else Path.cwd()

    try:
        config = load_config(project_path)
    except ConfigError as e:
        err_console.print(f"[red]Error loading config:[/] {e}")
        raise SystemExit(1) from e

    try:
        repo = GitRepository(project_path)
        if require_clean and not config.allow_dirty and repo.is_dirty():
            err_console.print(
                "[red]Error:[/] Repository has uncommitted changes.\n"
                "Commit or stash them, or use [cyan]allow_dirty = true[/] in config."
            )
            raise SystemExit(1)

        manifest_path = repo.path / config.manifest_path
        manifest = load_manifest(manifest_path)
        release_shas = _release_shas(repo, config, manifest)
        commits = _read_commits(repo, config, release_shas)
    except (ConfigError, GitError) as e:
        err_console.print(f"[red]Error:[/] {e}")
        raise SystemExit(1) from e

    logger.info("Read %d commits from %s", len(commits), repo.path)
    candidates = plan_releases(commits, config, manifest, release_shas=release_shas, root=repo.path)
    return ProjectPlan(
        config=config,
        repo=repo,
        manifest_path=manifest_path,
        manifest=manifest,
        candidates=candidates,
    )
