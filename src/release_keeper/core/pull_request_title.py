"""Release pull request titles.

Titles are rendered from a :class:`string.Template` pattern with the
placeholders ``${scope}``, ``${component}``, ``${version}`` and
``${branch}``, and parsed back with a regular expression built from the
same pattern.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from string import Template

from release_keeper.core.version import Version
from release_keeper.exceptions import InvalidVersionError

DEFAULT_TITLE_PATTERN = "chore${scope}: release${component} ${version}"
DEFAULT_GROUPED_TITLE_PATTERN = "chore: release ${branch}"

_PLACEHOLDER_PATTERNS = {
    "scope": r"(?:\((?P<branch>[\w./-]+)\))?",
    "component": r"(?: (?P<component>@?[\w./-]+))?",
    "version": r"v?(?P<version>\d\S*)",
    "branch": r"(?P<branch>[\w./-]+)?",
}

PLACEHOLDER_PATTERN = re.compile(r"\$\{(\w+)\}")


def unknown_placeholders(pattern: str) -> list[str]:
    """Placeholders in ``pattern`` that titles cannot fill."""
    return [name for name in PLACEHOLDER_PATTERN.findall(pattern) if name not in _PLACEHOLDER_PATTERNS]


def _match_pattern(pattern: str) -> re.Pattern[str]:
    regex = ""
    has_branch_group = False
    for literal, name in re.findall(r"(.*?)(?:\$\{(\w+)\}|$)", pattern, re.DOTALL):
        regex += re.escape(literal)
        if not name:
            continue
        placeholder = _PLACEHOLDER_PATTERNS.get(name)
        if placeholder is None:
            # Rendering leaves unknown placeholders as they are
            regex += re.escape(f"${{{name}}}")
            continue
        if "?P<branch>" in placeholder:
            # a group name may appear only once
            if has_branch_group:
                placeholder = placeholder.replace("?P<branch>", "?:")
            has_branch_group = True
        regex += placeholder
    return re.compile(f"^{regex}$")


@dataclass(frozen=True)
class PullRequestTitle:
    component: str | None = None
    target_branch: str | None = None
    version: Version | None = None
    pattern: str = DEFAULT_TITLE_PATTERN

    @classmethod
    def of_target_branch(cls, target_branch: str, pattern: str = DEFAULT_GROUPED_TITLE_PATTERN) -> PullRequestTitle:
        return cls(target_branch=target_branch, pattern=pattern)

    @classmethod
    def of_version(cls, version: Version, pattern: str = DEFAULT_TITLE_PATTERN) -> PullRequestTitle:
        return cls(version=version, pattern=pattern)

    @classmethod
    def of_component_version(
        cls, component: str, version: Version, pattern: str = DEFAULT_TITLE_PATTERN
    ) -> PullRequestTitle:
        return cls(component=component, version=version, pattern=pattern)

    @classmethod
    def of_target_branch_version(
        cls, target_branch: str, version: Version, pattern: str = DEFAULT_TITLE_PATTERN
    ) -> PullRequestTitle:
        return cls(target_branch=target_branch, version=version, pattern=pattern)

    @classmethod
    def parse(cls, title: str, pattern: str = DEFAULT_TITLE_PATTERN) -> PullRequestTitle | None:
        """Parse a title against a pattern, returning None when it does not match."""
        match = _match_pattern(pattern).match(title.strip())
        if not match:
            return None
        groups = match.groupdict()
        version = None
        if groups.get("version"):
            try:
                version = Version.parse(groups["version"])
            except InvalidVersionError:
                return None
        return cls(
            component=groups.get("component"),
            target_branch=groups.get("branch"),
            version=version,
            pattern=pattern,
        )

    def __str__(self) -> str:
        return (
            Template(self.pattern)
            .safe_substitute(
                scope=f"({self.target_branch})" if self.target_branch else "",
                component=f" {self.component}" if self.component else "",
                version=str(self.version) if self.version else "",
                branch=self.target_branch or "",
            )
            .strip()
        )
