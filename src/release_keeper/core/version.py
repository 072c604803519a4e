"""Semantic version model.

Versions have the form ``MAJOR.MINOR.PATCH[-preRelease][+build]``.
Numeric parts have no leading zeros, so rendering is the exact inverse
of parsing.
The pre-release part is kept as one opaque string: ``1.2.3-beta-sp.1-SNAPSHOT``
has ``pre_release == "beta-sp.1-SNAPSHOT"``. It is only split into dot
identifiers when two pre-releases have to be ordered.

Ordering follows semver precedence:

- major, minor and patch compare numerically
- a release is greater than any pre-release of the same core version
- pre-releases compare identifier by identifier
- build metadata never affects ordering
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from enum import StrEnum

from release_keeper.exceptions import InvalidVersionError

VERSION_PATTERN = re.compile(
    r"(?P<major>0|[1-9]\d*)\.(?P<minor>0|[1-9]\d*)\.(?P<patch>0|[1-9]\d*)"
    r"(?:-(?P<pre_release>[^+\s]+))?"
    r"(?:\+(?P<build>[0-9A-Za-z][0-9A-Za-z.-]*))?"
)


class BumpType(StrEnum):
    """Kind of version increment."""

    MAJOR = "major"
    MINOR = "minor"
    PATCH = "patch"
    NONE = "none"


# Lower index wins.
BUMP_PRECEDENCE: tuple[BumpType, ...] = (
    BumpType.MAJOR,
    BumpType.MINOR,
    BumpType.PATCH,
    BumpType.NONE,
)


def max_bump(a: BumpType, b: BumpType) -> BumpType:
    """Return the stronger of two bump types."""
    return BUMP_PRECEDENCE[min(BUMP_PRECEDENCE.index(a), BUMP_PRECEDENCE.index(b))]


def _compare_identifiers(a: str, b: str) -> int:
    a_numeric = a.isdigit()
    b_numeric = b.isdigit()
    if a_numeric and b_numeric:
        left, right = int(a), int(b)
        return (left > right) - (left < right)
    if a_numeric:
        return -1
    if b_numeric:
        return 1
    return (a > b) - (a < b)


def _compare_pre_release(a: str, b: str) -> int:
    a_parts = a.split(".")
    b_parts = b.split(".")
    for left, right in zip(a_parts, b_parts, strict=False):
        result = _compare_identifiers(left, right)
        if result:
            return result
    return (len(a_parts) > len(b_parts)) - (len(a_parts) < len(b_parts))


@dataclass(frozen=True)
class Version:
    """An immutable semantic version.

    Equality is structural (build metadata included) so that parsing and
    rendering round-trip exactly. Ordering uses :meth:`compare`, which
    ignores build metadata.

    Attributes:
        major: Major version number
        minor: Minor version number
        patch: Patch version number
        pre_release: Opaque pre-release string (without the leading ``-``)
        build: Build metadata (without the leading ``+``)
    """

    major: int
    minor: int
    patch: int
    pre_release: str | None = None
    build: str | None = None

    def __post_init__(self) -> None:
        for part in (self.major, self.minor, self.patch):
            if part < 0:
                raise InvalidVersionError(str(self))

    @classmethod
    def parse(cls, text: str) -> Version:
        """Parse a version string.

        Args:
            text: Version string such as ``1.2.3`` or ``1.2.3-beta.1+456``

        Returns:
            Parsed Version

        Raises:
            InvalidVersionError: If the string is not a valid version
        """
        match = VERSION_PATTERN.fullmatch(text.strip())
        if not match:
            raise InvalidVersionError(text)
        return cls(
            major=int(match.group("major")),
            minor=int(match.group("minor")),
            patch=int(match.group("patch")),
            pre_release=match.group("pre_release"),
            build=match.group("build"),
        )

    def __str__(self) -> str:
        result = f"{self.major}.{self.minor}.{self.patch}"
        if self.pre_release:
            result += f"-{self.pre_release}"
        if self.build:
            result += f"+{self.build}"
        return result

    def compare(self, other: Version) -> int:
        """Compare by semver precedence.

        Returns:
            -1, 0 or 1
        """
        core = (self.major, self.minor, self.patch)
        other_core = (other.major, other.minor, other.patch)
        if core != other_core:
            return -1 if core < other_core else 1
        if self.pre_release == other.pre_release:
            return 0
        if self.pre_release is None:
            return 1
        if other.pre_release is None:
            return -1
        return _compare_pre_release(self.pre_release, other.pre_release)

    def __lt__(self, other: Version) -> bool:
        return self.compare(other) < 0

    def __le__(self, other: Version) -> bool:
        return self.compare(other) <= 0

    def __gt__(self, other: Version) -> bool:
        return self.compare(other) > 0

    def __ge__(self, other: Version) -> bool:
        return self.compare(other) >= 0

    @property
    def is_prerelease(self) -> bool:
        return self.pre_release is not None

    def bump(self, bump_type: BumpType) -> Version:
        """Return the next version for a bump type.

        Pre-release and build metadata are dropped. ``NONE`` returns
        the version unchanged.
        """
        if bump_type == BumpType.MAJOR:
            return Version(self.major + 1, 0, 0)
        if bump_type == BumpType.MINOR:
            return Version(self.major, self.minor + 1, 0)
        if bump_type == BumpType.PATCH:
            return Version(self.major, self.minor, self.patch + 1)
        return self

    def with_prerelease(self, pre_release: str | None) -> Version:
        """Return a copy with a different pre-release string."""
        return replace(self, pre_release=pre_release or None, build=None)


def parse_version(text: str) -> Version:
    """Parse a version string. See :meth:`Version.parse`."""
    return Version.parse(text)
