"""Configuration loading from pyproject.toml."""

from __future__ import annotations

import logging
import tomllib
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from release_keeper.config.models import ReleaseKeeperConfig
from release_keeper.exceptions import ConfigNotFoundError, ConfigValidationError

logger = logging.getLogger(__name__)

TOOL_NAME = "release-keeper"


def find_pyproject_toml(start: Path | None = None) -> Path:
    """Find pyproject.toml in ``start`` or one of its parents.

    Raises:
        ConfigNotFoundError: If no pyproject.toml is found
    """
    current = (start or Path.cwd()).resolve()
    for directory in (current, *current.parents):
        candidate = directory / "pyproject.toml"
        if candidate.is_file():
            return candidate
    raise ConfigNotFoundError(f"No pyproject.toml found in {current} or its parents")


def load_pyproject_toml(path: Path) -> dict[str, Any]:
    """Read and decode a pyproject.toml file.

    Raises:
        ConfigNotFoundError: If the file does not exist
        ConfigValidationError: If the file is not valid TOML
    """
    if not path.is_file():
        raise ConfigNotFoundError(f"File not found: {path}")
    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigValidationError(f"Invalid TOML in {path}: {e}") from e


def extract_release_keeper_config(pyproject: dict[str, Any]) -> dict[str, Any]:
    """Return the ``[tool.release-keeper]`` table, or an empty dict."""
    return pyproject.get("tool", {}).get(TOOL_NAME, {})


def load_config(path: Path | None = None) -> ReleaseKeeperConfig:
    """Load configuration for the project containing ``path``.

    Raises:
        ConfigNotFoundError: If no pyproject.toml is found
        ConfigValidationError: If the configuration is invalid
    """
    pyproject_path = find_pyproject_toml(path)
    data = extract_release_keeper_config(load_pyproject_toml(pyproject_path))
    if not data:
        logger.debug("No [tool.%s] section in %s, using defaults", TOOL_NAME, pyproject_path)
    try:
        return ReleaseKeeperConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigValidationError(f"Invalid configuration in {pyproject_path}:\n{e}") from e


def _project_table(path: Path | None) -> tuple[Path, dict[str, Any]]:
    pyproject_path = find_pyproject_toml(path)
    return pyproject_path, load_pyproject_toml(pyproject_path).get("project", {})


def get_project_name(path: Path | None = None) -> str:
    """Return ``[project].name``.

    Raises:
        ConfigValidationError: If the name is missing
    """
    pyproject_path, project = _project_table(path)
    name = project.get("name")
    if not name:
        raise ConfigValidationError(f"No [project].name in {pyproject_path}")
    return name
