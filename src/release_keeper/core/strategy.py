"""Release types.

A release type decides two things for a package: its default component
name and which files change when a new version is released. The set of
release types is closed; the one to use is picked from configuration.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from release_keeper.core.version import Version

logger = logging.getLogger(__name__)


class ReleaseType(StrEnum):
    SIMPLE = "simple"
    PYTHON = "python"


class UpdateKind(StrEnum):
    CHANGELOG = "changelog"
    VERSION_TXT = "version.txt"
    PYPROJECT = "pyproject"
    VERSION_FILE = "version-file"


@dataclass(frozen=True)
class FileUpdate:
    """A file to rewrite for a release.

    Attributes:
        path: Path relative to the repository root
        kind: How the file is updated
        create: Whether the file is created when missing
    """

    path: Path
    kind: UpdateKind
    create: bool = False


def _package_dir(package_path: str) -> Path:
    return Path() if package_path == "." else Path(package_path)


def default_component(
    release_type: ReleaseType,
    package_path: str,
    root: Path | None = None,
) -> str | None:
    """Component name used in tags and titles when none is configured.

    The repository root has no component for simple releases. Python
    packages use the ``[project].name`` of their pyproject.toml when it
    can be read.
    """
    if release_type == ReleaseType.PYTHON and root is not None:
        from release_keeper.config.loader import get_project_name
        from release_keeper.exceptions import ConfigError

        try:
            return get_project_name(root / _package_dir(package_path))
        except ConfigError:
            logger.debug("No project name found for %s", package_path)
    if package_path == ".":
        return None
    return PurePosixPath(package_path).name


def build_file_updates(
    release_type: ReleaseType,
    package_path: str,
    *,
    changelog_path: Path | None,
    version_files: list[str] | tuple[str, ...] = (),
) -> list[FileUpdate]:
    """List the files a release of this package rewrites."""
    base = _package_dir(package_path)
    updates: list[FileUpdate] = []
    if changelog_path is not None:
        updates.append(FileUpdate(changelog_path, UpdateKind.CHANGELOG, create=True))
    if release_type == ReleaseType.SIMPLE:
        updates.append(FileUpdate(base / "version.txt", UpdateKind.VERSION_TXT, create=True))
    elif release_type == ReleaseType.PYTHON:
        updates.append(FileUpdate(base / "pyproject.toml", UpdateKind.PYPROJECT))
    updates.extend(FileUpdate(base / name, UpdateKind.VERSION_FILE) for name in version_files)
    return updates


def apply_file_updates(
    root: Path,
    updates: list[FileUpdate],
    version: Version,
    changelog_entry: str,
) -> list[Path]:
    """Write a release into the working tree.

    Returns:
        Paths that were written

    Raises:
        ProjectError: If a required file is missing or has no version field
    """
    from release_keeper.core.changelog import prepend_changelog
    from release_keeper.exceptions import ProjectError
    from release_keeper.project.pyproject import (
        get_pyproject_version,
        update_pyproject_version,
        update_version_file,
    )

    written: list[Path] = []
    for update in updates:
        target = root / update.path
        if not target.exists() and not update.create:
            raise ProjectError(f"File not found: {update.path}")

        if update.kind == UpdateKind.CHANGELOG:
            existing = target.read_text() if target.exists() else ""
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(prepend_changelog(existing, changelog_entry))
        elif update.kind == UpdateKind.VERSION_TXT:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(f"{version}\n")
        elif update.kind == UpdateKind.PYPROJECT:
            # A first release may already carry the version
            if get_pyproject_version(target) == str(version):
                logger.debug("%s already at %s", update.path, version)
                continue
            update_pyproject_version(target, str(version))
        else:
            update_version_file(target, str(version))

        logger.debug("Updated %s (%s)", update.path, update.kind)
        written.append(target)
    return written
