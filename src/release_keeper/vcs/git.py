"""Local git access.

:class:`Commit` and :class:`PullRequestInfo` are the raw inputs of the
release pipeline. :class:`GitRepository` produces commits from a local
clone by shelling out to ``git``; anything that talks to a remote
code-hosting API builds the same records itself.
"""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from release_keeper.exceptions import GitError

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

logger = logging.getLogger(__name__)

# Separators unlikely to appear in commit messages
_RECORD_SEP = "\x1e"
_FIELD_SEP = "\x1f"


@dataclass(frozen=True)
class PullRequestInfo:
    """Metadata of the pull request a commit was merged through."""

    number: int
    title: str = ""
    body: str = ""
    head_branch: str = ""
    base_branch: str = ""
    labels: tuple[str, ...] = ()
    files: tuple[str, ...] = ()


@dataclass(frozen=True)
class Commit:
    """A raw commit.

    Attributes:
        sha: Commit hash
        message: Full commit message
        files: Paths touched by the commit, ``/`` separated
        pull_request: Associated pull request, if known
    """

    sha: str
    message: str
    files: tuple[str, ...] = field(default_factory=tuple)
    pull_request: PullRequestInfo | None = None

    @property
    def subject(self) -> str:
        return self.message.split("\n", 1)[0]


class GitRepository:
    """Thin wrapper around the ``git`` command line."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path).resolve()
        if not (self.path / ".git").exists():
            # Allow running from a subdirectory of the work tree
            try:
                top = self._run("rev-parse", "--show-toplevel")
            except GitError as e:
                raise GitError(f"Not a git repository: {self.path}") from e
            self.path = Path(top)

    def _run(self, *args: str) -> str:
        try:
            result = subprocess.run(
                ["git", *args],
                capture_output=True,
                text=True,
                check=True,
                cwd=self.path,
            )
        except FileNotFoundError as e:
            raise GitError("git executable not found") from e
        except subprocess.CalledProcessError as e:
            raise GitError(f"git {args[0]} failed", stderr=e.stderr) from e
        return result.stdout.strip()

    def is_dirty(self) -> bool:
        return bool(self._run("status", "--porcelain"))

    def list_tags(self, pattern: str | None = None) -> list[str]:
        """List tags, newest first by creation date."""
        args = ["tag", "--list", "--sort=-creatordate"]
        if pattern:
            args.append(pattern)
        output = self._run(*args)
        return [line for line in output.splitlines() if line]

    def get_latest_tag(self, pattern: str | None = None) -> str | None:
        tags = self.list_tags(pattern)
        return tags[0] if tags else None

    def resolve_ref(self, ref: str) -> str | None:
        """Commit hash of ``ref``, or None if it does not exist."""
        try:
            return self._run("rev-parse", "--verify", "--quiet", f"{ref}^{{commit}}")
        except GitError:
            return None

    def iter_commits(
        self,
        ref: str = "HEAD",
        *,
        stop: Callable[[Commit], bool] | None = None,
        max_count: int | None = None,
    ) -> Iterator[Commit]:
        """Yield commits reachable from ``ref``, newest first.

        Args:
            ref: Revision or range to walk
            stop: Called for every commit; iteration ends (exclusive)
                at the first commit for which it returns True
            max_count: Upper bound on commits read from git
        """
        args = [
            "log",
            f"--format={_RECORD_SEP}%H{_FIELD_SEP}%B{_FIELD_SEP}",
            "--name-only",
        ]
        if max_count is not None:
            args.append(f"--max-count={max_count}")
        args.append(ref)
        output = self._run(*args)

        for record in output.split(_RECORD_SEP):
            if not record.strip():
                continue
            sha, message, files_blob = record.split(_FIELD_SEP, 2)
            files = tuple(line for line in files_blob.splitlines() if line.strip())
            commit = Commit(sha=sha.strip(), message=message.strip(), files=files)
            if stop is not None and stop(commit):
                logger.debug("Stopping commit walk at %s", commit.sha)
                return
            yield commit

    def get_commits_since(self, ref: str | None, head: str = "HEAD") -> list[Commit]:
        """Commits after ``ref`` up to ``head``, newest first.

        With no ``ref`` the whole history of ``head`` is returned.
        """
        revision = f"{ref}..{head}" if ref else head
        return list(self.iter_commits(revision))
