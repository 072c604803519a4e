"""Release tag names.

A tag is ``[<component><separator>][v]<version>`` with the separator
being ``-`` or ``/``, for example ``v1.2.3``, ``storage-v1.2.3`` or
``storage/1.2.3``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from release_keeper.core.version import Version
from release_keeper.exceptions import InvalidVersionError

DEFAULT_SEPARATOR = "-"

SEPARATOR_PATTERN = re.compile(r"[-/]")
VERSION_PART_PATTERN = re.compile(r"(?P<v>v)?(?P<version>\d+\.\d+\.\d+.*)")


@dataclass(frozen=True)
class TagName:
    version: Version
    component: str | None = None
    separator: str = DEFAULT_SEPARATOR
    include_v: bool = True

    @classmethod
    def parse(cls, text: str) -> TagName | None:
        """Parse a tag name, returning None when it is not a release tag.

        The leftmost split that leaves a valid version wins, so a
        pre-release such as ``rc-2.0.0`` stays part of the version.
        """
        text = text.strip()
        splits: list[tuple[str | None, str, str]] = [(None, DEFAULT_SEPARATOR, text)]
        splits.extend(
            (text[: sep.start()], sep.group(), text[sep.end() :])
            for sep in SEPARATOR_PATTERN.finditer(text)
            if sep.start() > 0
        )
        for component, separator, rest in splits:
            match = VERSION_PART_PATTERN.fullmatch(rest)
            if not match:
                continue
            try:
                version = Version.parse(match.group("version"))
            except InvalidVersionError:
                continue
            return cls(
                version=version,
                component=component,
                separator=separator,
                include_v=match.group("v") is not None,
            )
        return None

    def __str__(self) -> str:
        prefix = "v" if self.include_v else ""
        if self.component:
            return f"{self.component}{self.separator}{prefix}{self.version}"
        return f"{prefix}{self.version}"
