"""pyproject.toml version manipulation.

Versions are rewritten with targeted regex replacement so formatting and
comments in the file survive a release.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from release_keeper.config.loader import find_pyproject_toml
from release_keeper.exceptions import ProjectError, VersionNotFoundError

if TYPE_CHECKING:
    from pathlib import Path

VERSION_SECTIONS = (r"project", r"tool\.poetry")
VERSION_ASSIGNMENT = r'^(version\s*=\s*)["\'][^"\']+["\']'

DEFAULT_VERSION_FILE_PATTERNS = (
    r'^__version__\s*=\s*["\']([^"\']+)["\']',
    r'^VERSION\s*=\s*["\']([^"\']+)["\']',
    r'^version\s*=\s*["\']([^"\']+)["\']',
)


def _resolve(path: Path | None) -> Path:
    if path is None:
        return find_pyproject_toml()
    if path.is_dir():
        return find_pyproject_toml(path)
    return path


def _section(content: str, name: str) -> re.Match[str] | None:
    return re.search(rf"^\[{name}\].*?(?=^\[|\Z)", content, re.MULTILINE | re.DOTALL)


def get_pyproject_version(path: Path | None = None) -> str:
    """Get the version from pyproject.toml.

    Args:
        path: pyproject.toml, or a directory to search upwards from

    Returns:
        The raw version string

    Raises:
        VersionNotFoundError: If version cannot be found
    """
    pyproject_path = _resolve(path)
    content = pyproject_path.read_text()

    for name in VERSION_SECTIONS:
        section = _section(content, name)
        if section is None:
            continue
        match = re.search(r'^version\s*=\s*["\']([^"\']+)["\']', section.group(0), re.MULTILINE)
        if match:
            return match.group(1)

    raise VersionNotFoundError(f"No [project] or [tool.poetry] version in {pyproject_path}")


def update_pyproject_version(path: Path | None, new_version: str) -> Path:
    """Update the version in pyproject.toml.

    Args:
        path: pyproject.toml, or the directory holding it
        new_version: Version to write

    Returns:
        Path to the updated pyproject.toml

    Raises:
        VersionNotFoundError: If version cannot be found
        ProjectError: If the version is already ``new_version``
    """
    pyproject_path = _resolve(path)
    content = pyproject_path.read_text()

    for name in VERSION_SECTIONS:
        section = _section(content, name)
        if section is None:
            continue
        replaced, count = re.subn(
            VERSION_ASSIGNMENT,
            rf'\g<1>"{new_version}"',
            section.group(0),
            count=1,
            flags=re.MULTILINE,
        )
        if count == 0:
            continue
        if replaced == section.group(0):
            raise ProjectError(
                f"{pyproject_path} left unchanged, it may already be {new_version}."
            )
        pyproject_path.write_text(content[: section.start()] + replaced + content[section.end() :])
        return pyproject_path

    raise VersionNotFoundError(f"No static version to rewrite in {pyproject_path}")


def get_version_from_file(file_path: Path, pattern: str | None = None) -> str:
    """Read a version from a Python file such as ``__init__.py``.

    Args:
        file_path: File holding the version
        pattern: Regex with one capture group for the version.
            Defaults to ``__version__``, ``VERSION`` or ``version`` assignments.

    Raises:
        VersionNotFoundError: If no pattern matches
        ProjectError: If the file doesn't exist
    """
    if not file_path.is_file():
        raise ProjectError(f"Missing version file: {file_path}")

    content = file_path.read_text()
    for pat in [pattern] if pattern else DEFAULT_VERSION_FILE_PATTERNS:
        match = re.search(pat, content, re.MULTILINE)
        if match:
            return match.group(1)

    raise VersionNotFoundError(f"No version assignment matched in {file_path}")


def update_version_file(file_path: Path, new_version: str, pattern: str | None = None) -> None:
    """Update the ``__version__`` assignment in a Python file.

    Args:
        file_path: File holding the version
        new_version: Version to write
        pattern: Regex whose first group is kept in front of the new version

    Raises:
        VersionNotFoundError: If the pattern is not found
        ProjectError: If the file doesn't exist
    """
    if not file_path.is_file():
        raise ProjectError(f"Missing version file: {file_path}")

    new_content, count = re.subn(
        pattern or r'^(__version__\s*=\s*)["\'][^"\']+["\']',
        rf'\g<1>"{new_version}"',
        file_path.read_text(),
        count=1,
        flags=re.MULTILINE,
    )
    if count == 0:
        raise VersionNotFoundError(f"No version assignment matched in {file_path}")

    file_path.write_text(new_content)
