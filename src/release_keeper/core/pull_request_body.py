"""Release pull request bodies.

A release pull request body is Markdown meant for humans that also
records, exactly, which components are released at which versions::

    <header>
    ---


    <!-- release-keeper:entry {"component": "pkg1", "version": "1.2.3", "titled": true} -->
    ## pkg1 1.2.3

    <notes>

    <!-- release-keeper:end -->

    ---
    <footer>

The HTML comments are invisible once rendered, so the JSON they carry is
the authoritative record; headings are only for readers. Bodies written
before these markers existed are still understood through heading-based
heuristics (see :meth:`PullRequestBody.parse`).
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass

from release_keeper.core.version import Version
from release_keeper.exceptions import InvalidVersionError

logger = logging.getLogger(__name__)

DEFAULT_HEADER = ":robot: I have created a release *beep* *boop*"
DEFAULT_FOOTER = "This PR was generated with release-keeper."
NOTES_DELIMITER = "---"
ENTRY_MARKER_PATTERN = re.compile(r"^<!-- release-keeper:entry (?P<data>\{.*\}) -->$", re.MULTILINE)
END_MARKER = "<!-- release-keeper:end -->"

# <details><summary>component: 1.2.3</summary> ... </details>
DETAILS_PATTERN = re.compile(
    r"<details[^>]*>\s*<summary>(?P<summary>.*?)</summary>(?P<notes>.*?)</details>",
    re.DOTALL | re.IGNORECASE,
)
SUMMARY_PATTERN = re.compile(r"^(?P<component>.*[^:]):? v?(?P<version>\d+\.\d+\.\d+\S*)$")
COMPONENTLESS_SUMMARY_PATTERN = re.compile(r"^v?(?P<version>\d+\.\d+\.\d+\S*)$")
# ## component 1.2.3 / ## component: v1.2.3 / ## 1.2.3
COMPONENT_HEADING_PATTERN = re.compile(
    r"^## (?:(?P<component>[^\s\[\]()]+?):?[ \t]+)?v?(?P<version>\d+\.\d+\.\d+[^\s\]]*)[ \t]*$",
    re.MULTILINE,
)
# ## [1.2.3](https://...) (2021-01-01) / ### 1.2.3
VERSION_HEADING_PATTERN = re.compile(r"^#{2,} \[?v?(?P<version>\d+\.\d+\.\d+[^\]\s]*)\]?", re.MULTILINE)


@dataclass(frozen=True)
class ReleaseData:
    """One pending release recorded in a pull request body."""

    component: str | None = None
    version: Version | None = None
    notes: str = ""

    @property
    def title(self) -> str:
        parts = [part for part in (self.component, self.version and str(self.version)) if part]
        return " ".join(parts) or "Release"


def _parse_version(text: str) -> Version | None:
    try:
        return Version.parse(text)
    except InvalidVersionError:
        logger.warning("Ignoring release entry with invalid version %r", text)
        return None


class PullRequestBody:
    """A release pull request body.

    Args:
        release_data: Releases in the pull request, primary first
        header: Text above the first ``---`` line
        footer: Text below the last ``---`` line
        use_components: Render a heading per entry. Defaults to True
            when there is more than one entry.
    """

    def __init__(
        self,
        release_data: list[ReleaseData],
        *,
        header: str = DEFAULT_HEADER,
        footer: str = DEFAULT_FOOTER,
        use_components: bool | None = None,
    ) -> None:
        self.release_data = list(release_data)
        self.header = header
        self.footer = footer
        self.use_components = len(self.release_data) > 1 if use_components is None else use_components

    def __repr__(self) -> str:
        return f"PullRequestBody(release_data={self.release_data!r})"

    def _render_entry(self, release: ReleaseData) -> str:
        data = {
            "component": release.component,
            "version": str(release.version) if release.version else None,
            "titled": self.use_components,
        }
        marker = f"<!-- release-keeper:entry {json.dumps(data)} -->"
        if self.use_components:
            return f"{marker}\n## {release.title}\n\n{release.notes}"
        return f"{marker}\n{release.notes}"

    def notes(self) -> str:
        entries = "\n\n".join(self._render_entry(release) for release in self.release_data)
        return f"{entries}\n\n{END_MARKER}"

    def __str__(self) -> str:
        return f"{self.header}\n{NOTES_DELIMITER}\n\n\n{self.notes()}\n\n{NOTES_DELIMITER}\n{self.footer}"

    to_string = __str__

    @classmethod
    def parse(cls, body: str) -> PullRequestBody | None:
        """Parse a pull request body.

        Bodies with markers are read exactly, and the header and footer
        are bounded by the marked region so they may contain ``---``
        lines themselves. Older bodies fall back to, in order:
        ``<details>`` blocks, ``## component version`` headings, and
        finally a single componentless release whose version comes from
        the first version heading.

        Returns:
            The parsed body, or None when it holds no release information
        """
        body = body.replace("\r\n", "\n")
        marked = _split_marked_body(body)
        if marked is not None:
            header, content, footer = marked
            release_data, titled = _extract_marked_releases(content)
            if not release_data and ENTRY_MARKER_PATTERN.search(content):
                return None
            return cls(release_data, header=header, footer=footer, use_components=titled)

        parts = _split_body(body)
        if parts is None:
            return None
        header, content, footer = parts

        use_components = None
        if ENTRY_MARKER_PATTERN.search(content):
            release_data, use_components = _extract_marked_releases(content)
        else:
            release_data = (
                _extract_details_releases(content)
                or _extract_heading_releases(content)
                or _extract_single_release(content)
            )
        if not release_data:
            return None
        return cls(release_data, header=header, footer=footer, use_components=use_components)


def _split_marked_body(body: str) -> tuple[str, str, str] | None:
    """Split around the region from the first entry marker to the end marker."""
    end = body.find(END_MARKER)
    if end == -1:
        return None
    first_entry = ENTRY_MARKER_PATTERN.search(body, 0, end)
    start = first_entry.start() if first_entry else end
    end += len(END_MARKER)

    head = body[:start].split("\n")
    tail = body[end:].split("\n")
    if NOTES_DELIMITER not in head or NOTES_DELIMITER not in tail:
        return None
    cut = len(head) - 1 - head[::-1].index(NOTES_DELIMITER)
    header = "\n".join(head[:cut]).strip()
    footer = "\n".join(tail[tail.index(NOTES_DELIMITER) + 1 :]).strip()
    return header, body[start:end], footer


def _split_body(body: str) -> tuple[str, str, str] | None:
    lines = body.replace("\r\n", "\n").strip().split("\n")
    try:
        first = lines.index(NOTES_DELIMITER)
    except ValueError:
        return None
    last = len(lines) - 1 - lines[::-1].index(NOTES_DELIMITER)
    if last == first:
        last = len(lines)
    header = "\n".join(lines[:first]).strip()
    content = "\n".join(lines[first + 1 : last])
    footer = "\n".join(lines[last + 1 :]).strip()
    return header, content, footer


def _extract_marked_releases(content: str) -> tuple[list[ReleaseData], bool]:
    """Read entries between markers. Also reports whether headings were rendered."""
    content = content.split(END_MARKER, 1)[0]
    markers = list(ENTRY_MARKER_PATTERN.finditer(content))
    release_data = []
    titled = False
    for index, marker in enumerate(markers):
        end = markers[index + 1].start() if index + 1 < len(markers) else len(content)
        try:
            data = json.loads(marker.group("data"))
        except json.JSONDecodeError:
            logger.warning("Ignoring malformed release entry marker: %s", marker.group(0))
            continue
        notes = content[marker.end() : end].strip("\n")
        if data.get("titled"):
            # Drop the heading line rendered for readers
            notes = notes.partition("\n")[2]
            titled = True
        version = _parse_version(data["version"]) if data.get("version") else None
        release_data.append(
            ReleaseData(component=data.get("component"), version=version, notes=notes.strip())
        )
    return release_data, titled


def _extract_details_releases(content: str) -> list[ReleaseData]:
    release_data = []
    for match in DETAILS_PATTERN.finditer(content):
        summary = match.group("summary").strip()
        notes = match.group("notes").strip()
        if not summary:
            logger.warning("Found release details without a summary")
            continue
        if componentless := COMPONENTLESS_SUMMARY_PATTERN.match(summary):
            version = _parse_version(componentless.group("version"))
            component = None
        elif summarized := SUMMARY_PATTERN.match(summary):
            version = _parse_version(summarized.group("version"))
            component = summarized.group("component").strip()
        else:
            logger.warning("Could not parse release summary %r", summary)
            continue
        if version is not None:
            release_data.append(ReleaseData(component=component, version=version, notes=notes))
    return release_data


def _extract_heading_releases(content: str) -> list[ReleaseData]:
    headings = list(COMPONENT_HEADING_PATTERN.finditer(content))
    release_data = []
    for index, heading in enumerate(headings):
        end = headings[index + 1].start() if index + 1 < len(headings) else len(content)
        version = _parse_version(heading.group("version"))
        if version is None:
            continue
        release_data.append(
            ReleaseData(
                component=heading.group("component"),
                version=version,
                notes=content[heading.end() : end].strip(),
            )
        )
    return release_data


def _extract_single_release(content: str) -> list[ReleaseData]:
    notes = content.strip()
    if not notes:
        return []
    match = VERSION_HEADING_PATTERN.search(notes)
    version = _parse_version(match.group("version")) if match else None
    return [ReleaseData(version=version, notes=notes)]
