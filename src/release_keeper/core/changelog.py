"""Release notes generation.

Release notes are rendered from parsed conventional commits: a version
heading, breaking changes first, then one section per visible commit
type. The same Markdown is used for the changelog file and for the
release pull request body.
"""

from __future__ import annotations

import html
import re
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from release_keeper.core.commits import BREAKING_CHANGE_NOTE

if TYPE_CHECKING:
    from collections.abc import Sequence

    from release_keeper.config.models import ChangelogConfig, GitHubConfig
    from release_keeper.core.commits import ConventionalCommit, Reference
    from release_keeper.core.version import Version

CHANGELOG_TITLE = "# Changelog"
BREAKING_CHANGES_HEADING = "### ⚠ BREAKING CHANGES"


def _issue_link(reference: Reference, repository_url: str | None) -> str:
    label = f"{reference.repository or ''}#{reference.issue}"
    if reference.repository:
        host = repository_url.rsplit("/", 2)[0] if repository_url else "https://github.com"
        return f"[{label}]({host}/{reference.repository}/issues/{reference.issue})"
    if repository_url:
        return f"[{label}]({repository_url}/issues/{reference.issue})"
    return label


def _link_issues(text: str, repository_url: str | None) -> str:
    """Turn ``(#123)`` in note text into an issue link."""
    if not repository_url:
        return text
    return re.sub(r"\(#(\d+)\)", rf"([#\1]({repository_url}/issues/\1))", text)


def _format_entry(
    commit: ConventionalCommit,
    *,
    repository_url: str | None,
    include_sha: bool,
) -> str:
    scope = f"**{commit.scope}:** " if commit.scope else ""
    line = f"* {scope}{html.escape(commit.bare_message, quote=False)}"

    closes = [ref for ref in commit.references if ref.action]
    if closes:
        line += ", closes " + " ".join(_issue_link(ref, repository_url) for ref in closes)
    if include_sha:
        short = commit.sha[:7]
        if repository_url:
            line += f" ([{short}]({repository_url}/commit/{commit.sha}))"
        else:
            line += f" ({short})"
    return line


def _version_heading(
    version: Version,
    *,
    repository_url: str | None,
    previous_tag: str | None,
    current_tag: str | None,
    date: datetime,
) -> str:
    # Patch releases get a smaller heading
    level = "###" if version.patch else "##"
    day = date.strftime("%Y-%m-%d")
    if repository_url and previous_tag and current_tag:
        return f"{level} [{version}]({repository_url}/compare/{previous_tag}...{current_tag}) ({day})"
    return f"{level} {version} ({day})"


def generate_changelog(
    commits: Sequence[ConventionalCommit],
    version: Version,
    *,
    config: ChangelogConfig,
    github: GitHubConfig | None = None,
    previous_tag: str | None = None,
    current_tag: str | None = None,
    date: datetime | None = None,
) -> str:
    """Render release notes for a version.

    Args:
        commits: Conventional commits included in the release
        version: Version being released
        config: Changelog sections and options
        github: Repository coordinates for links
        previous_tag: Tag of the previous release, for the compare link
        current_tag: Tag of this release, for the compare link
        date: Release date (defaults to today, UTC)

    Returns:
        Markdown release notes
    """
    repository_url = github.repository_url if github else None
    lines = [
        _version_heading(
            version,
            repository_url=repository_url,
            previous_tag=previous_tag,
            current_tag=current_tag,
            date=date or datetime.now(UTC),
        ),
        "",
    ]

    breaking = [
        (commit, note)
        for commit in commits
        for note in commit.notes
        if note.title == BREAKING_CHANGE_NOTE
    ]
    if breaking:
        lines.extend([BREAKING_CHANGES_HEADING, ""])
        for commit, note in breaking:
            scope = f"**{commit.scope}:** " if commit.scope else ""
            lines.append(f"* {scope}{_link_issues(note.text, repository_url)}")
        lines.append("")

    for section in config.sections:
        if section.hidden:
            continue
        entries = [c for c in commits if c.type == section.type]
        if not entries:
            continue
        lines.extend([f"### {section.section}", ""])
        seen: set[str] = set()
        for commit in entries:
            entry = _format_entry(commit, repository_url=repository_url, include_sha=config.include_sha)
            if entry not in seen:
                seen.add(entry)
                lines.append(entry)
        lines.append("")

    return "\n".join(lines).rstrip() + "\n"


def prepend_changelog(existing: str, entry: str) -> str:
    """Insert a release entry at the top of a changelog file's content.

    The ``# Changelog`` title stays first; it is added when missing.
    """
    body = existing.strip()
    if body.startswith(CHANGELOG_TITLE):
        body = body[len(CHANGELOG_TITLE) :].strip()
    parts = [CHANGELOG_TITLE, entry.strip()]
    if body:
        parts.append(body)
    return "\n\n".join(parts) + "\n"
