"""Version manifest.

The manifest is a JSON object mapping package paths to the version of
their last release::

    {".": "1.4.0", "packages/core": "0.3.1"}
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

from release_keeper.core.commit_split import normalize_path
from release_keeper.core.version import Version
from release_keeper.exceptions import ConfigValidationError, InvalidVersionError

if TYPE_CHECKING:
    from pathlib import Path


def load_manifest(path: Path) -> dict[str, Version]:
    """Read a manifest file. A missing file is an empty manifest.

    Raises:
        ConfigValidationError: If the file is not a JSON object of versions
    """
    if not path.is_file():
        return {}
    try:
        data = json.loads(path.read_text())
    except json.JSONDecodeError as e:
        raise ConfigValidationError(f"Invalid JSON in {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigValidationError(f"{path} must contain a JSON object")

    manifest: dict[str, Version] = {}
    for package_path, version in data.items():
        try:
            manifest[normalize_path(package_path)] = Version.parse(str(version))
        except InvalidVersionError as e:
            raise ConfigValidationError(f"{path}: {package_path}: {e}") from e
    return manifest


def dump_manifest(manifest: dict[str, Version]) -> str:
    return json.dumps({path: str(version) for path, version in sorted(manifest.items())}, indent=2) + "\n"


def write_manifest(path: Path, manifest: dict[str, Version]) -> None:
    path.write_text(dump_manifest(manifest))
