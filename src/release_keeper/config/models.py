"""Configuration models.

All configuration lives under ``[tool.release-keeper]`` in pyproject.toml
and is validated with pydantic. Every field has a default, so an empty
section (or none at all) yields a working configuration.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

from release_keeper.core.pull_request_body import DEFAULT_FOOTER, DEFAULT_HEADER
from release_keeper.core.pull_request_title import (
    DEFAULT_GROUPED_TITLE_PATTERN,
    DEFAULT_TITLE_PATTERN,
    unknown_placeholders,
)
from release_keeper.core.strategy import ReleaseType
from release_keeper.core.version import Version
from release_keeper.exceptions import InvalidVersionError


def _check_version(value: str | None) -> str | None:
    if value is not None:
        try:
            Version.parse(value)
        except InvalidVersionError as e:
            raise ValueError(str(e)) from e
    return value


def _check_title_pattern(value: str) -> str:
    if unknown := unknown_placeholders(value):
        raise ValueError(f"Unknown title placeholders: {', '.join(unknown)}")
    return value


class _Model(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)


class ChangelogSection(_Model):
    """Maps a commit type to a changelog heading."""

    type: str
    section: str
    hidden: bool = False


DEFAULT_CHANGELOG_SECTIONS: tuple[ChangelogSection, ...] = (
    ChangelogSection(type="feat", section="Features"),
    ChangelogSection(type="fix", section="Bug Fixes"),
    ChangelogSection(type="perf", section="Performance Improvements"),
    ChangelogSection(type="revert", section="Reverts"),
    ChangelogSection(type="deps", section="Dependencies"),
    ChangelogSection(type="docs", section="Documentation", hidden=True),
    ChangelogSection(type="style", section="Styles", hidden=True),
    ChangelogSection(type="chore", section="Miscellaneous Chores", hidden=True),
    ChangelogSection(type="refactor", section="Code Refactoring", hidden=True),
    ChangelogSection(type="test", section="Tests", hidden=True),
    ChangelogSection(type="build", section="Build System", hidden=True),
    ChangelogSection(type="ci", section="Continuous Integration", hidden=True),
)


class CommitsConfig(_Model):
    """How commits are interpreted."""

    types_major: list[str] = Field(default_factory=list)
    types_minor: list[str] = Field(default_factory=lambda: ["feat"])
    scope_regex: str | None = None
    skip_release_patterns: list[str] = Field(
        default_factory=lambda: ["[skip release]", "[release skip]", "[no release]"]
    )


class ChangelogConfig(_Model):
    enabled: bool = True
    path: Path = Path("CHANGELOG.md")
    sections: list[ChangelogSection] = Field(
        default_factory=lambda: list(DEFAULT_CHANGELOG_SECTIONS)
    )
    include_sha: bool = True

    def section_for(self, commit_type: str) -> ChangelogSection | None:
        for section in self.sections:
            if section.type == commit_type:
                return section
        return None


class VersionConfig(_Model):
    """Version and tag policy.

    ``bump_minor_pre_major`` makes breaking changes below 1.0.0 bump the
    minor version. ``bump_patch_for_minor_pre_major`` makes features
    below 1.0.0 bump the patch version.
    """

    initial_version: str = "1.0.0"
    tag_prefix: str = "v"
    tag_separator: str = "-"
    pre_release: str | None = None
    release_as: str | None = None
    bump_minor_pre_major: bool = True
    bump_patch_for_minor_pre_major: bool = False

    _validate_versions = field_validator("initial_version", "release_as")(_check_version)

    @field_validator("tag_separator")
    @classmethod
    def _check_separator(cls, value: str) -> str:
        if value not in ("-", "/"):
            raise ValueError("tag_separator must be '-' or '/'")
        return value

    @field_validator("tag_prefix")
    @classmethod
    def _check_prefix(cls, value: str) -> str:
        if value not in ("", "v"):
            raise ValueError("tag_prefix must be 'v' or empty")
        return value


class GitHubConfig(_Model):
    """Repository coordinates, used for links in release notes."""

    owner: str | None = None
    repo: str | None = None
    host: str = "https://github.com"

    @property
    def repository_url(self) -> str | None:
        if self.owner and self.repo:
            return f"{self.host.rstrip('/')}/{self.owner}/{self.repo}"
        return None


class PullRequestConfig(_Model):
    header: str = DEFAULT_HEADER
    footer: str = DEFAULT_FOOTER
    title_pattern: str = DEFAULT_TITLE_PATTERN
    grouped_title_pattern: str = DEFAULT_GROUPED_TITLE_PATTERN
    always_use_components: bool = False
    include_empty_commits: bool = False
    labels: list[str] = Field(default_factory=lambda: ["autorelease: pending"])

    _validate_patterns = field_validator("title_pattern", "grouped_title_pattern")(_check_title_pattern)


class PackageConfig(_Model):
    """One releasable component of the repository."""

    path: str = "."
    component: str | None = None
    release_type: ReleaseType | None = None
    initial_version: str | None = None
    changelog_path: Path | None = None
    version_files: list[str] = Field(default_factory=list)

    _validate_initial_version = field_validator("initial_version")(_check_version)

    @field_validator("path")
    @classmethod
    def _normalize_path(cls, value: str) -> str:
        value = value.strip()
        while value.startswith("./"):
            value = value[2:]
        value = value.rstrip("/")
        return value or "."

    @property
    def is_root(self) -> bool:
        return self.path == "."


class ReleaseKeeperConfig(_Model):
    """Top-level configuration."""

    default_branch: str = "main"
    allow_dirty: bool = False
    release_type: ReleaseType = ReleaseType.SIMPLE
    manifest_path: Path = Path(".release-keeper-manifest.json")
    commits: CommitsConfig = Field(default_factory=CommitsConfig)
    changelog: ChangelogConfig = Field(default_factory=ChangelogConfig)
    version: VersionConfig = Field(default_factory=VersionConfig)
    github: GitHubConfig = Field(default_factory=GitHubConfig)
    pull_request: PullRequestConfig = Field(default_factory=PullRequestConfig)
    packages: list[PackageConfig] = Field(default_factory=list)

    @property
    def is_monorepo(self) -> bool:
        return any(not package.is_root for package in self.packages)

    @property
    def effective_packages(self) -> list[PackageConfig]:
        """Configured packages, or the repository root as a single package."""
        return self.packages or [PackageConfig()]

    def release_type_for(self, package: PackageConfig) -> ReleaseType:
        return package.release_type or self.release_type

    def changelog_path_for(self, package: PackageConfig) -> Path:
        if package.changelog_path is not None:
            return package.changelog_path
        if package.is_root:
            return self.changelog.path
        return Path(package.path) / self.changelog.path
