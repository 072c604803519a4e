"""Release planning.

Turns raw commits into release candidates (one per package that has
something to release) and candidates into a release pull request. No
I/O happens here except reading a Python package's project name when its
component has to be derived.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from release_keeper.core.branch_name import BranchName
from release_keeper.core.changelog import generate_changelog
from release_keeper.core.commit_split import CommitSplit
from release_keeper.core.commits import (
    BREAKING_CHANGE_NOTE,
    RELEASE_AS_NOTE,
    calculate_bump,
    get_release_as,
    parse_commits,
)
from release_keeper.core.pull_request_body import PullRequestBody, ReleaseData
from release_keeper.core.pull_request_title import PullRequestTitle
from release_keeper.core.strategy import ReleaseType, build_file_updates, default_component
from release_keeper.core.tag_name import TagName
from release_keeper.core.version import BumpType, Version

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime
    from pathlib import Path

    from release_keeper.config.models import ChangelogConfig, PackageConfig, ReleaseKeeperConfig
    from release_keeper.core.commits import ConventionalCommit
    from release_keeper.core.strategy import FileUpdate
    from release_keeper.vcs.git import Commit

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReleaseCandidate:
    """A pending release of one package."""

    path: str
    component: str | None
    release_type: ReleaseType
    previous_version: Version | None
    version: Version
    bump: BumpType
    tag: TagName
    notes: str
    commits: tuple[ConventionalCommit, ...]

    @property
    def release_data(self) -> ReleaseData:
        return ReleaseData(component=self.component, version=self.version, notes=self.notes.strip())

    def file_updates(self, config: ReleaseKeeperConfig, package: PackageConfig) -> list[FileUpdate]:
        return build_file_updates(
            self.release_type,
            self.path,
            changelog_path=config.changelog_path_for(package) if config.changelog.enabled else None,
            version_files=package.version_files,
        )


@dataclass(frozen=True)
class ReleasePullRequest:
    title: PullRequestTitle
    head_branch: BranchName
    base_branch: str
    body: PullRequestBody
    labels: tuple[str, ...] = ()


def is_release_due(commits: Sequence[ConventionalCommit], config: ChangelogConfig) -> bool:
    """Whether commits contain anything worth releasing.

    Breaking changes, Release-As notes and commits of a type with a
    visible changelog section are releasable; the rest (docs, chores,
    ...) are not.
    """
    for commit in commits:
        section = config.section_for(commit.type)
        if section is not None and not section.hidden:
            return True
        if any(note.title in (BREAKING_CHANGE_NOTE, RELEASE_AS_NOTE) for note in commit.notes):
            return True
    return False


def next_version(
    previous: Version | None,
    commits: Sequence[ConventionalCommit],
    config: ReleaseKeeperConfig,
    package: PackageConfig | None = None,
) -> tuple[Version, BumpType]:
    """Compute the version to release.

    A ``Release-As`` note (or ``version.release_as``) wins. Without a
    previous release the initial version is used. Otherwise the previous
    version is bumped according to the commits. A configured pre-release
    suffix is applied last.
    """
    bump = calculate_bump(commits, config.commits, current_version=previous, policy=config.version)

    release_as = get_release_as(commits)
    if release_as is None and config.version.release_as:
        release_as = Version.parse(config.version.release_as)
    if release_as is not None:
        logger.debug("Release-As forces version %s", release_as)
        return release_as, bump

    if previous is None:
        initial = (package.initial_version if package else None) or config.version.initial_version
        version = Version.parse(initial)
    else:
        version = previous.bump(bump)

    if config.version.pre_release:
        version = version.with_prerelease(config.version.pre_release)
    return version, bump


def package_component(package: PackageConfig, config: ReleaseKeeperConfig, root: Path | None = None) -> str | None:
    """Configured component of a package, or the release type's default."""
    return package.component or default_component(config.release_type_for(package), package.path, root)


def release_tag(
    version: Version,
    component: str | None,
    package: PackageConfig,
    config: ReleaseKeeperConfig,
) -> TagName:
    return TagName(
        version=version,
        component=None if package.is_root else component,
        separator=config.version.tag_separator,
        include_v=config.version.tag_prefix == "v",
    )


def plan_release(
    commits: Sequence[Commit],
    package: PackageConfig,
    config: ReleaseKeeperConfig,
    previous_version: Version | None,
    *,
    root: Path | None = None,
    date: datetime | None = None,
) -> ReleaseCandidate | None:
    """Plan the release of one package.

    Args:
        commits: Raw commits since the package's last release, newest first
        package: Package being released
        config: Project configuration
        previous_version: Version of the last release, None if never released
        root: Repository root, used to derive component names
        date: Release date for the notes

    Returns:
        A candidate, or None when no release is due
    """
    conventional = parse_commits(commits, config.commits)
    if not is_release_due(conventional, config.changelog) and not config.version.release_as:
        logger.info("No releasable commits for %s", package.path)
        return None

    version, bump = next_version(previous_version, conventional, config, package)
    if previous_version is not None and version.compare(previous_version) <= 0:
        logger.warning(
            "Next version %s of %s is not above %s, skipping", version, package.path, previous_version
        )
        return None

    release_type = config.release_type_for(package)
    component = package_component(package, config, root)
    tag = release_tag(version, component, package, config)
    previous_tag = release_tag(previous_version, component, package, config) if previous_version else None

    notes = generate_changelog(
        conventional,
        version,
        config=config.changelog,
        github=config.github,
        previous_tag=str(previous_tag) if previous_tag else None,
        current_tag=str(tag),
        date=date,
    )
    logger.info("Planned %s %s -> %s (%s)", package.path, previous_version, version, bump)
    return ReleaseCandidate(
        path=package.path,
        component=component,
        release_type=release_type,
        previous_version=previous_version,
        version=version,
        bump=bump,
        tag=tag,
        notes=notes,
        commits=tuple(conventional),
    )


def _since_release(commits: Sequence[Commit], release_sha: str | None) -> list[Commit]:
    """Commits newer than the release commit ``release_sha`` (exclusive)."""
    if release_sha is None:
        return list(commits)
    newer: list[Commit] = []
    for commit in commits:
        if commit.sha == release_sha:
            break
        newer.append(commit)
    return newer


def plan_releases(
    commits: Sequence[Commit],
    config: ReleaseKeeperConfig,
    manifest: dict[str, Version],
    *,
    release_shas: dict[str, str] | None = None,
    root: Path | None = None,
    date: datetime | None = None,
) -> list[ReleaseCandidate]:
    """Plan releases for every configured package.

    Each package's commits are cut at its last release commit, then
    split between packages by path. The root package (``.``) receives
    all of its commits.

    Args:
        commits: Raw commits since the oldest last release, newest first
        config: Project configuration
        manifest: Last released version per package path
        release_shas: Commit of the last release per package path
        root: Repository root, used to derive component names
        date: Release date for the notes
    """
    packages = config.effective_packages
    release_shas = release_shas or {}
    splitter = CommitSplit(
        [package.path for package in packages if not package.is_root],
        include_empty=config.pull_request.include_empty_commits,
    )

    candidates = []
    for package in packages:
        unreleased = _since_release(commits, release_shas.get(package.path))
        package_commits = unreleased if package.is_root else splitter.split(unreleased).get(package.path, [])
        if not package_commits:
            logger.debug("No commits for %s", package.path)
            continue
        candidate = plan_release(
            package_commits, package, config, manifest.get(package.path), root=root, date=date
        )
        if candidate is not None:
            candidates.append(candidate)
    return candidates


def build_release_pull_request(
    candidates: Sequence[ReleaseCandidate],
    config: ReleaseKeeperConfig,
) -> ReleasePullRequest | None:
    """Group release candidates into one pull request."""
    if not candidates:
        return None

    branch = config.default_branch
    pr_config = config.pull_request
    if len(candidates) == 1:
        candidate = candidates[0]
        title = PullRequestTitle(
            component=candidate.component,
            target_branch=branch,
            version=candidate.version,
            pattern=pr_config.title_pattern,
        )
        head = (
            BranchName.of_component_target_branch(candidate.component, branch)
            if candidate.component and config.is_monorepo
            else BranchName.of_target_branch(branch)
        )
    else:
        title = PullRequestTitle.of_target_branch(branch, pr_config.grouped_title_pattern)
        head = BranchName.of_target_branch(branch)

    body = PullRequestBody(
        [candidate.release_data for candidate in candidates],
        header=pr_config.header,
        footer=pr_config.footer,
        use_components=True if pr_config.always_use_components else None,
    )
    return ReleasePullRequest(
        title=title,
        head_branch=head,
        base_branch=branch,
        body=body,
        labels=tuple(pr_config.labels),
    )


def updated_manifest(manifest: dict[str, Version], candidates: Sequence[ReleaseCandidate]) -> dict[str, Version]:
    """Manifest after the candidates are released."""
    result = dict(manifest)
    for candidate in candidates:
        result[candidate.path] = candidate.version
    return result
