"""Release branch names.

Three formats are recognized, tried in this order:

``AUTORELEASE``
    ``release[-<component>]-v<version>``
``V12``
    ``release-please/branches/<target>[/components/<component>]``
``DEFAULT``
    ``release-please--branches--<target>[--components--<component>]``

New branches are always created in the ``DEFAULT`` format (or
``AUTORELEASE`` when they carry a version). The target branch of the
``DEFAULT`` format may contain ``/`` and dots, and may itself look like a
version (``v3.3.9``); it is never interpreted as one.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import StrEnum

from release_keeper.core.version import Version
from release_keeper.exceptions import InvalidVersionError

BRANCH_PREFIX = "release-please"

AUTORELEASE_PREFIX = "release-"
AUTORELEASE_COMPONENT = re.compile(r"[\w.-]+")
AUTORELEASE_VERSION_START = re.compile(r"-v(?=\d)")
V12_PATTERN = re.compile(
    rf"^{BRANCH_PREFIX}/branches/(?P<branch>[^/]+)(?:/components/(?P<component>.+))?$"
)
DEFAULT_PATTERN = re.compile(
    rf"^{BRANCH_PREFIX}--branches--(?P<branch>.+?)(?:--components--(?P<component>.+))?$"
)


class BranchStyle(StrEnum):
    AUTORELEASE = "autorelease"
    V12 = "v12"
    DEFAULT = "default"


@dataclass(frozen=True)
class BranchName:
    """A parsed release branch name.

    ``AUTORELEASE`` branches carry a version; the other styles carry a
    target branch. All styles may carry a component.
    """

    style: BranchStyle
    version: Version | None = None
    component: str | None = None
    target_branch: str | None = None

    @classmethod
    def parse(cls, text: str) -> BranchName | None:
        """Parse a branch name, returning None when no format matches."""
        if not text.startswith(BRANCH_PREFIX):
            return cls._parse_autorelease(text)

        for style, pattern in ((BranchStyle.V12, V12_PATTERN), (BranchStyle.DEFAULT, DEFAULT_PATTERN)):
            match = pattern.match(text)
            if match:
                return cls(
                    style=style,
                    target_branch=match.group("branch"),
                    component=match.group("component"),
                )
        return None

    @classmethod
    def _parse_autorelease(cls, text: str) -> BranchName | None:
        if not text.startswith(AUTORELEASE_PREFIX):
            return None
        # Components may contain "-v<digit>" too: take the leftmost split
        # whose remainder is a valid version.
        for match in AUTORELEASE_VERSION_START.finditer(text, len(AUTORELEASE_PREFIX) - 1):
            component = text[len(AUTORELEASE_PREFIX) : match.start()]
            if component and not AUTORELEASE_COMPONENT.fullmatch(component):
                continue
            try:
                version = Version.parse(text[match.end() :])
            except InvalidVersionError:
                continue
            return cls(style=BranchStyle.AUTORELEASE, version=version, component=component or None)
        return None

    @classmethod
    def of_version(cls, version: Version) -> BranchName:
        return cls(style=BranchStyle.AUTORELEASE, version=version)

    @classmethod
    def of_component_version(cls, component: str, version: Version) -> BranchName:
        return cls(style=BranchStyle.AUTORELEASE, version=version, component=component)

    @classmethod
    def of_target_branch(cls, target_branch: str) -> BranchName:
        return cls(style=BranchStyle.DEFAULT, target_branch=target_branch)

    @classmethod
    def of_component_target_branch(cls, component: str, target_branch: str) -> BranchName:
        return cls(style=BranchStyle.DEFAULT, target_branch=target_branch, component=component)

    def __str__(self) -> str:
        if self.style == BranchStyle.AUTORELEASE:
            if self.component:
                return f"release-{self.component}-v{self.version}"
            return f"release-v{self.version}"
        if self.style == BranchStyle.V12:
            name = f"{BRANCH_PREFIX}/branches/{self.target_branch}"
            return f"{name}/components/{self.component}" if self.component else name
        name = f"{BRANCH_PREFIX}--branches--{self.target_branch}"
        return f"{name}--components--{self.component}" if self.component else name
