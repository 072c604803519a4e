"""Project file manipulation."""

from __future__ import annotations

from release_keeper.project.pyproject import (
    get_pyproject_version,
    get_version_from_file,
    update_pyproject_version,
    update_version_file,
)

__all__ = [
    "get_pyproject_version",
    "get_version_from_file",
    "update_pyproject_version",
    "update_version_file",
]
