"""Exception hierarchy for release-keeper.

Every error raised on purpose by this package derives from
:class:`ReleaseKeeperError`, so callers can catch a single type.

Parsers for tag names, branch names, pull request titles and bodies do
not raise: they return ``None`` for input they do not recognize.
"""

from __future__ import annotations


class ReleaseKeeperError(Exception):
    """Base class for all release-keeper errors."""


# Configuration


class ConfigError(ReleaseKeeperError):
    """Configuration could not be loaded."""


class ConfigNotFoundError(ConfigError):
    """No pyproject.toml (or manifest file) where one was expected."""


class ConfigValidationError(ConfigError):
    """Configuration was found but is invalid."""


# Versions


class VersionError(ReleaseKeeperError):
    """Base class for version handling errors."""


class InvalidVersionError(VersionError):
    """A string is not a valid MAJOR.MINOR.PATCH[-pre][+build] version."""

    def __init__(self, value: str) -> None:
        self.value = value
        super().__init__(f"Invalid version: {value!r}")


# Project files


class ProjectError(ReleaseKeeperError):
    """A project file could not be read or updated."""


class VersionNotFoundError(ProjectError):
    """A project file does not contain a recognizable version field."""


# Git


class GitError(ReleaseKeeperError):
    """A git command failed."""

    def __init__(self, message: str, stderr: str | None = None) -> None:
        self.stderr = stderr
        if stderr:
            message = f"{message}: {stderr.strip()}"
        super().__init__(message)
