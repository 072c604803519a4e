"""Split commits between the packages of a monorepo."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from release_keeper.vcs.git import Commit

ROOT_PROJECT_PATH = "."


def normalize_path(path: str) -> str:
    path = path.strip()
    while path.startswith("./"):
        path = path[2:]
    return path.rstrip("/") or ROOT_PROJECT_PATH


class CommitSplit:
    """Assign commits to packages by the files they touch.

    Each file belongs to the package with the longest matching path
    prefix. Without package paths, a file belongs to its top-level
    directory. Files at the repository root belong to no package, and
    the root package path ``.`` is ignored (it receives every commit
    anyway).

    Args:
        package_paths: Package directories, relative to the repository root
        include_empty: Also assign commits that touch no files. They go
            to every package path, or, without package paths, to every
            package seen so far.
    """

    def __init__(
        self,
        package_paths: Iterable[str] | None = None,
        include_empty: bool = False,
    ) -> None:
        self.include_empty = include_empty
        self.package_paths: list[str] | None = None
        if package_paths is not None:
            paths = {normalize_path(path) for path in package_paths}
            paths.discard(ROOT_PROJECT_PATH)
            self.package_paths = sorted(paths, key=lambda p: (-len(p), p))

    def _owner(self, file: str) -> str | None:
        if "/" not in file:
            return None
        if self.package_paths is None:
            return file.split("/", 1)[0]
        return next((p for p in self.package_paths if file.startswith(f"{p}/")), None)

    def split(self, commits: Iterable[Commit]) -> dict[str, list[Commit]]:
        """Group commits by owning package, preserving commit order."""
        split_commits: dict[str, list[Commit]] = {}
        for commit in commits:
            if not commit.files:
                if self.include_empty:
                    targets = self.package_paths if self.package_paths is not None else list(split_commits)
                    for path in targets:
                        split_commits.setdefault(path, []).append(commit)
                continue

            seen: set[str] = set()
            for file in commit.files:
                owner = self._owner(file)
                if owner is None or owner in seen:
                    continue
                seen.add(owner)
                split_commits.setdefault(owner, []).append(commit)
        return split_commits
