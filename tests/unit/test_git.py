"""Tests for the local git reader."""

from __future__ import annotations

from typing import TYPE_CHECKING
from unittest.mock import patch

import pytest

from release_keeper.exceptions import GitError
from release_keeper.vcs.git import Commit, GitRepository

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path


class TestCommit:
    """Tests for Commit."""

    def test_subject(self):
        assert Commit(sha="1", message="feat: x\n\nbody").subject == "feat: x"


class TestGitRepository:
    """Tests for GitRepository against a real repository."""

    def test_not_a_repository(self, tmp_path: Path):
        with pytest.raises(GitError, match="Not a git repository"):
            GitRepository(tmp_path)

    def test_subdirectory_resolves_to_top(self, temp_git_repo: Path):
        subdir = temp_git_repo / "src"
        subdir.mkdir()

        assert GitRepository(subdir).path == temp_git_repo.resolve()

    def test_iter_commits(self, temp_git_repo: Path, git_commit: Callable[..., str]):
        """Commits come newest first with messages and files."""
        first = git_commit("feat: first\n\nwith a body", {"a/one.py": "1"})
        second = git_commit("fix: second", {"b/two.py": "2", "README.md": "hi"})
        third = git_commit("chore: empty")

        commits = list(GitRepository(temp_git_repo).iter_commits())

        assert [c.sha for c in commits] == [third, second, first]
        assert commits[2].message == "feat: first\n\nwith a body"
        assert set(commits[1].files) == {"b/two.py", "README.md"}
        assert commits[0].files == ()

    def test_iter_commits_stop(self, temp_git_repo: Path, git_commit: Callable[..., str]):
        git_commit("feat: one")
        stop_at = git_commit("feat: two")
        newest = git_commit("feat: three")

        commits = list(GitRepository(temp_git_repo).iter_commits(stop=lambda c: c.sha == stop_at))

        assert [c.sha for c in commits] == [newest]

    def test_get_commits_since_tag(
        self,
        temp_git_repo: Path,
        git_commit: Callable[..., str],
        git_tag: Callable[[str], None],
    ):
        git_commit("feat: released")
        git_tag("v1.0.0")
        unreleased = git_commit("fix: unreleased")

        repo = GitRepository(temp_git_repo)

        assert [c.sha for c in repo.get_commits_since("v1.0.0")] == [unreleased]
        assert len(repo.get_commits_since(None)) == 2

    def test_tags(self, temp_git_repo: Path, git_commit: Callable[..., str], git_tag: Callable[[str], None]):
        git_commit("feat: one")
        git_tag("v1.0.0")
        git_tag("storage-v0.1.0")

        repo = GitRepository(temp_git_repo)

        assert set(repo.list_tags()) == {"v1.0.0", "storage-v0.1.0"}
        assert repo.list_tags("storage-*") == ["storage-v0.1.0"]
        assert repo.get_latest_tag("v*") == "v1.0.0"
        assert repo.get_latest_tag("missing-*") is None

    def test_resolve_ref(self, temp_git_repo: Path, git_commit: Callable[..., str], git_tag: Callable[[str], None]):
        sha = git_commit("feat: one")
        git_tag("v1.0.0")

        repo = GitRepository(temp_git_repo)

        assert repo.resolve_ref("v1.0.0") == sha
        assert repo.resolve_ref("v9.9.9") is None

    def test_is_dirty(self, temp_git_repo_with_pyproject: Path):
        repo = GitRepository(temp_git_repo_with_pyproject)
        assert not repo.is_dirty()

        (temp_git_repo_with_pyproject / "new.txt").write_text("x")

        assert repo.is_dirty()

    def test_git_command_failure(self, temp_git_repo: Path):
        """Errors from git carry its stderr."""
        with pytest.raises(GitError) as exc_info:
            GitRepository(temp_git_repo).get_commits_since(None)

        assert exc_info.value.stderr

    def test_git_not_installed(self, temp_git_repo: Path):
        repo = GitRepository(temp_git_repo)

        with (
            patch("release_keeper.vcs.git.subprocess.run", side_effect=FileNotFoundError),
            pytest.raises(GitError, match="git executable not found"),
        ):
            repo.is_dirty()
