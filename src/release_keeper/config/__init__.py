"""Configuration management for release-keeper."""

from __future__ import annotations

from release_keeper.config.loader import load_config
from release_keeper.config.manifest import load_manifest, write_manifest
from release_keeper.config.models import (
    ChangelogConfig,
    ChangelogSection,
    CommitsConfig,
    GitHubConfig,
    PackageConfig,
    PullRequestConfig,
    ReleaseKeeperConfig,
    VersionConfig,
)

__all__ = [
    "ChangelogConfig",
    "ChangelogSection",
    "CommitsConfig",
    "GitHubConfig",
    "PackageConfig",
    "PullRequestConfig",
    "ReleaseKeeperConfig",
    "VersionConfig",
    "load_config",
    "load_manifest",
    "write_manifest",
]
