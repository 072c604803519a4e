"""Conventional commit parsing.

Turns raw commits into :class:`ConventionalCommit` records. A single raw
commit can produce several records:

- a ``BEGIN_COMMIT_OVERRIDE`` / ``END_COMMIT_OVERRIDE`` block in the pull
  request body replaces the commit message entirely
- ``BEGIN_NESTED_COMMIT`` / ``END_NESTED_COMMIT`` blocks are parsed as
  separate messages
- a body paragraph that starts with its own ``type(scope): subject``
  header is split off as a separate record (meta-commits)

Messages without a conventional header produce no record. Parsing never
raises.

The body of each fragment is handled by a line classifier and a small
state machine (:class:`_BodyScanner`) that collects ``BREAKING CHANGE``
and ``Release-As`` notes.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import TYPE_CHECKING

from release_keeper.core.version import BumpType, Version, max_bump
from release_keeper.exceptions import InvalidVersionError

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from release_keeper.config.models import CommitsConfig, VersionConfig
    from release_keeper.vcs.git import Commit, PullRequestInfo

logger = logging.getLogger(__name__)

BREAKING_CHANGE_NOTE = "BREAKING CHANGE"
RELEASE_AS_NOTE = "RELEASE AS"

OVERRIDE_BEGIN = "BEGIN_COMMIT_OVERRIDE"
OVERRIDE_END = "END_COMMIT_OVERRIDE"
NESTED_BEGIN = "BEGIN_NESTED_COMMIT"
NESTED_END = "END_NESTED_COMMIT"

HEADER_PATTERN = re.compile(
    r"^(?P<type>[A-Za-z][A-Za-z0-9]*)"
    r"(?:\((?P<scope>[^()\r\n]*)\))?"
    r"(?P<breaking>!)?"
    r":[ \t]+(?P<subject>\S.*)$"
)
# Headers found inside a body must be lowercase and flush left
EMBEDDED_HEADER_PATTERN = re.compile(r"^[a-z][a-z0-9]*(?:\([^()\r\n]*\))?!?:[ \t]+\S")
BREAKING_PATTERN = re.compile(r"^BREAKING[ -]CHANGE:[ \t]*(?P<text>.*)$")
RELEASE_AS_PATTERN = re.compile(r"^release-as:[ \t]*(?P<text>\S.*)$", re.IGNORECASE)
TRAILER_PATTERN = re.compile(r"^[A-Za-z][\w-]*(?::[ \t]+\S| #\d)")
LIST_ITEM_PATTERN = re.compile(r"^(?:[-*+]|\d+[.)])\s")

ACTION_REFERENCE_PATTERN = re.compile(
    r"\b(?P<action>close[sd]?|fix(?:e[sd])?|resolve[sd]?)\b:?[ \t]+"
    r"(?P<refs>(?:[\w.-]+/[\w.-]+)?#\d+(?:[ \t]*,[ \t]*(?:and[ \t]+)?(?:[\w.-]+/[\w.-]+)?#\d+)*)",
    re.IGNORECASE,
)
ISSUE_PATTERN = re.compile(r"(?<![\w&])(?:(?P<repository>[\w.-]+/[\w.-]+))?#(?P<issue>\d+)\b")


@dataclass(frozen=True)
class Note:
    """A footer-derived annotation such as a breaking change description."""

    title: str
    text: str


@dataclass(frozen=True)
class Reference:
    """An issue reference such as ``Fixes #123``."""

    prefix: str
    issue: str
    action: str | None = None
    repository: str | None = None


@dataclass(frozen=True)
class ConventionalCommit:
    """One semantic message extracted from a raw commit.

    Attributes:
        sha: Hash of the raw commit
        type: Lowercased commit type (``feat``, ``fix``, ...)
        scope: Scope as written, or None
        bare_message: Subject line after the ``type(scope)!:`` prefix
        breaking: Whether this is a breaking change
        notes: Breaking change and Release-As notes
        references: Issue references found in the body
        message: Lines of this semantic message, header first
        files: Files touched by the raw commit
        pull_request: Pull request of the raw commit
    """

    sha: str
    type: str
    bare_message: str
    scope: str | None = None
    breaking: bool = False
    notes: tuple[Note, ...] = ()
    references: tuple[Reference, ...] = ()
    message: tuple[str, ...] = ()
    files: tuple[str, ...] = field(default_factory=tuple)
    pull_request: PullRequestInfo | None = None

    @property
    def scope_key(self) -> str | None:
        """Scope lowercased with non-alphanumeric characters removed."""
        if self.scope is None:
            return None
        return re.sub(r"[^a-z0-9]", "", self.scope.lower()) or None

    @property
    def header(self) -> str:
        return self.message[0] if self.message else ""

    def notes_titled(self, title: str) -> list[Note]:
        return [note for note in self.notes if note.title == title]


# ---------------------------------------------------------------------------
# Message preprocessing
# ---------------------------------------------------------------------------


def _override_message(commit: Commit) -> str:
    """Commit message, replaced by a pull request override block if present."""
    pull_request = commit.pull_request
    if pull_request is not None and OVERRIDE_BEGIN in pull_request.body:
        block = pull_request.body.split(OVERRIDE_BEGIN, 1)[1]
        block = block.split(OVERRIDE_END, 1)[0].strip()
        if block:
            return block
    return commit.message


def _split_nested(message: str) -> list[str]:
    """Cut ``BEGIN_NESTED_COMMIT`` blocks out of a message.

    The main message (everything outside the blocks) comes first.
    """
    parts = message.split(NESTED_BEGIN)
    main = [parts[0]]
    nested: list[str] = []
    for part in parts[1:]:
        inner, _, rest = part.partition(NESTED_END)
        nested.append(inner)
        main.append(rest)
    return ["".join(main), *nested]


def _split_fragments(lines: list[str]) -> list[list[str]]:
    """Split a message into independent semantic messages.

    The first non-blank line is the primary header. A later paragraph
    starting with an embedded header opens a new fragment, and so does
    each further embedded header line within such a paragraph.

    Returns:
        Fragments in output order: secondary fragments as they appear,
        then the primary one
    """
    start = next((i for i, line in enumerate(lines) if line.strip()), None)
    if start is None:
        return []

    primary = [lines[start]]
    secondary: list[list[str]] = []
    current = primary
    previous_blank = False
    in_secondary_paragraph = False

    for line in lines[start + 1 :]:
        if not line.strip():
            current.append(line)
            previous_blank = True
            in_secondary_paragraph = False
            continue
        if EMBEDDED_HEADER_PATTERN.match(line) and (previous_blank or in_secondary_paragraph):
            current = [line]
            secondary.append(current)
            in_secondary_paragraph = True
        else:
            current.append(line)
        previous_blank = False

    fragments = [*secondary, primary]
    for fragment in fragments:
        while fragment and not fragment[-1].strip():
            fragment.pop()
    return fragments


# ---------------------------------------------------------------------------
# Body scanning
# ---------------------------------------------------------------------------


class _LineKind(Enum):
    BLANK = auto()
    BREAKING = auto()
    RELEASE_AS = auto()
    TRAILER = auto()
    CONTINUATION = auto()
    TEXT = auto()


def _classify(line: str) -> tuple[_LineKind, str]:
    """Classify a body line, returning its kind and payload."""
    if not line.strip():
        return _LineKind.BLANK, ""
    if match := BREAKING_PATTERN.match(line):
        return _LineKind.BREAKING, match.group("text").strip()
    if match := RELEASE_AS_PATTERN.match(line):
        return _LineKind.RELEASE_AS, match.group("text").strip()
    if TRAILER_PATTERN.match(line):
        return _LineKind.TRAILER, line.strip()
    if line[0].isspace() or LIST_ITEM_PATTERN.match(line):
        return _LineKind.CONTINUATION, line.rstrip()
    return _LineKind.TEXT, line.strip()


class _BodyScanner:
    """Collects notes from the body lines of one fragment.

    While a breaking change note is open:

    - text and continuation lines extend it
    - a trailer, Release-As or new BREAKING CHANGE line closes it
    - one blank line followed by a continuation (indented or list item)
      keeps it open; followed by anything else it closes
    - two blank lines in a row close it
    """

    def __init__(self) -> None:
        self.notes: list[Note] = []
        self._breaking: list[str] | None = None
        self._blank_run = 0

    def _close(self) -> None:
        if self._breaking is not None:
            text = "\n".join(self._breaking).strip()
            self.notes.append(Note(BREAKING_CHANGE_NOTE, text))
        self._breaking = None
        self._blank_run = 0

    def _extend(self, kind: _LineKind, text: str) -> bool:
        """Try to add a line to the open note. Returns True if consumed."""
        assert self._breaking is not None
        if kind == _LineKind.BLANK:
            self._blank_run += 1
            if self._blank_run >= 2:
                self._close()
            return True
        if kind in (_LineKind.BREAKING, _LineKind.RELEASE_AS, _LineKind.TRAILER):
            self._close()
            return False
        if self._blank_run == 1:
            if kind != _LineKind.CONTINUATION:
                self._close()
                return False
            self._breaking.append("")
        self._breaking.append(text)
        self._blank_run = 0
        return True

    def feed(self, line: str) -> None:
        kind, text = _classify(line)
        if self._breaking is not None and self._extend(kind, text):
            return
        if kind == _LineKind.BREAKING:
            self._breaking = [text] if text else []
            self._blank_run = 0
        elif kind == _LineKind.RELEASE_AS:
            self.notes.append(Note(RELEASE_AS_NOTE, text))

    def finish(self) -> list[Note]:
        self._close()
        return self.notes


def _extract_references(lines: Iterable[str]) -> list[Reference]:
    references: list[Reference] = []
    for line in lines:
        claimed: list[tuple[int, int]] = []
        for match in ACTION_REFERENCE_PATTERN.finditer(line):
            claimed.append(match.span("refs"))
            for issue in ISSUE_PATTERN.finditer(match.group("refs")):
                references.append(
                    Reference(
                        prefix="#",
                        issue=issue.group("issue"),
                        action=match.group("action"),
                        repository=issue.group("repository"),
                    )
                )
        for issue in ISSUE_PATTERN.finditer(line):
            if any(start <= issue.start() < end for start, end in claimed):
                continue
            references.append(
                Reference(prefix="#", issue=issue.group("issue"), repository=issue.group("repository"))
            )
    return references


def _parse_fragment(lines: list[str], commit: Commit) -> ConventionalCommit | None:
    header = HEADER_PATTERN.match(lines[0].strip())
    if header is None:
        return None

    body = lines[1:]
    scanner = _BodyScanner()
    for line in body:
        scanner.feed(line)
    notes = scanner.finish()

    subject = header.group("subject").strip()
    if header.group("breaking") and not any(n.title == BREAKING_CHANGE_NOTE for n in notes):
        notes.insert(0, Note(BREAKING_CHANGE_NOTE, subject))

    scope = (header.group("scope") or "").strip()
    return ConventionalCommit(
        sha=commit.sha,
        type=header.group("type").lower(),
        scope=scope or None,
        bare_message=subject,
        breaking=any(note.title == BREAKING_CHANGE_NOTE for note in notes),
        notes=tuple(notes),
        references=tuple(_extract_references(body)),
        message=tuple(lines),
        files=tuple(commit.files),
        pull_request=commit.pull_request,
    )


def parse_conventional_commits(commits: Iterable[Commit]) -> list[ConventionalCommit]:
    """Parse raw commits into conventional commit records.

    Args:
        commits: Raw commits, in any order (output preserves it)

    Returns:
        Parsed records; commits without a conventional header are dropped
    """
    parsed: list[ConventionalCommit] = []
    for commit in commits:
        message = _override_message(commit).replace("\r\n", "\n")
        found = 0
        for part in _split_nested(message):
            for fragment in _split_fragments(part.split("\n")):
                conventional = _parse_fragment(fragment, commit)
                if conventional is not None:
                    parsed.append(conventional)
                    found += 1
        if not found:
            logger.debug("Not a conventional commit: %s %s", commit.sha[:7], commit.subject)
    return parsed


# ---------------------------------------------------------------------------
# Filtering and analysis
# ---------------------------------------------------------------------------


def filter_skip_release_commits(commits: Sequence[Commit], patterns: Sequence[str]) -> list[Commit]:
    """Drop commits whose message contains a skip marker (case-insensitive)."""
    if not patterns:
        return list(commits)
    lowered = [pattern.lower() for pattern in patterns]
    return [c for c in commits if not any(p in c.message.lower() for p in lowered)]


def filter_by_scope(commits: Sequence[ConventionalCommit], scope_regex: str) -> list[ConventionalCommit]:
    """Keep commits whose scope key matches a regular expression."""
    pattern = re.compile(scope_regex)
    return [c for c in commits if c.scope_key is not None and pattern.search(c.scope_key)]


def parse_commits(commits: Sequence[Commit], config: CommitsConfig) -> list[ConventionalCommit]:
    """Filter skip-marked commits, parse, then apply the scope filter."""
    kept = filter_skip_release_commits(commits, config.skip_release_patterns)
    parsed = parse_conventional_commits(kept)
    if config.scope_regex:
        parsed = filter_by_scope(parsed, config.scope_regex)
    return parsed


def calculate_bump(
    commits: Sequence[ConventionalCommit],
    config: CommitsConfig | None = None,
    *,
    current_version: Version | None = None,
    policy: VersionConfig | None = None,
) -> BumpType:
    """Compute the version bump for a set of commits.

    Breaking changes (or ``types_major``) bump major, ``types_minor``
    bump minor, anything else bumps patch. Below 1.0.0 the pre-major
    policy of ``policy`` applies.

    Args:
        commits: Commits since the last release
        config: Commit type mapping (defaults apply when None)
        current_version: Version being bumped, for the pre-major policy
        policy: Version policy (defaults apply when None)

    Returns:
        BumpType.NONE for no commits, otherwise the strongest bump
    """
    if not commits:
        return BumpType.NONE

    if config is None or policy is None:
        from release_keeper.config.models import CommitsConfig, VersionConfig

        config = config or CommitsConfig()
        policy = policy or VersionConfig()

    bump = BumpType.PATCH
    for commit in commits:
        if commit.breaking or commit.type in config.types_major:
            bump = BumpType.MAJOR
            break
        if commit.type in config.types_minor:
            bump = max_bump(bump, BumpType.MINOR)

    if current_version is not None and current_version.major < 1:
        if bump == BumpType.MAJOR and policy.bump_minor_pre_major:
            bump = BumpType.MINOR
        elif bump == BumpType.MINOR and policy.bump_patch_for_minor_pre_major:
            bump = BumpType.PATCH

    logger.debug("Calculated %s bump from %d commits", bump, len(commits))
    return bump


def get_release_as(commits: Sequence[ConventionalCommit]) -> Version | None:
    """Version requested by the first valid ``Release-As`` note."""
    for commit in commits:
        for note in commit.notes_titled(RELEASE_AS_NOTE):
            try:
                return Version.parse(note.text.removeprefix("v"))
            except InvalidVersionError:
                logger.warning("Ignoring invalid Release-As %r in %s", note.text, commit.sha[:7])
    return None


def group_commits_by_type(commits: Sequence[ConventionalCommit]) -> dict[str, list[ConventionalCommit]]:
    grouped: dict[str, list[ConventionalCommit]] = {}
    for commit in commits:
        grouped.setdefault(commit.type, []).append(commit)
    return grouped


def get_breaking_changes(commits: Sequence[ConventionalCommit]) -> list[ConventionalCommit]:
    return [commit for commit in commits if commit.breaking]


def format_commit_for_changelog(
    commit: ConventionalCommit,
    *,
    include_scope: bool = True,
    include_sha: bool = False,
) -> str:
    """Format a commit as a changelog bullet."""
    parts = ["*"]
    if include_scope and commit.scope:
        parts.append(f"**{commit.scope}:**")
    if commit.breaking:
        parts.append("[BREAKING]")
    parts.append(commit.bare_message)
    if include_sha:
        parts.append(f"({commit.sha[:7]})")
    return " ".join(parts)
