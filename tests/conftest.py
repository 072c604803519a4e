"""Shared test fixtures."""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import TYPE_CHECKING

import pytest

from release_keeper.vcs.git import Commit

if TYPE_CHECKING:
    from collections.abc import Callable

FIXTURES_DIR = Path(__file__).parent / "fixtures"

PYPROJECT = """\
[project]
name = "test-project"
version = "1.0.0"

[tool.release-keeper]
default_branch = "main"
release_type = "python"
"""


def _git(path: Path, *args: str) -> str:
    result = subprocess.run(
        ["git", *args],
        cwd=path,
        capture_output=True,
        text=True,
        check=True,
    )
    return result.stdout.strip()


@pytest.fixture
def fixtures_dir() -> Path:
    return FIXTURES_DIR


@pytest.fixture
def feat_commit() -> Commit:
    return Commit(sha="a1b2c3d4e5f6", message="feat(api): add search endpoint", files=("src/api.py",))


@pytest.fixture
def fix_commit() -> Commit:
    return Commit(sha="b2c3d4e5f6a1", message="fix: handle empty response\n\nFixes #42", files=("src/client.py",))


@pytest.fixture
def breaking_commit() -> Commit:
    return Commit(
        sha="c3d4e5f6a1b2",
        message="feat!: drop python 3.10\n\nBREAKING CHANGE: python 3.11 is now required",
        files=("pyproject.toml",),
    )


@pytest.fixture
def sample_commits(feat_commit: Commit, fix_commit: Commit) -> list[Commit]:
    """Newest first, like git log."""
    return [
        feat_commit,
        Commit(sha="d4e5f6a1b2c3", message="docs: update readme", files=("README.md",)),
        fix_commit,
        Commit(sha="e5f6a1b2c3d4", message="Merge branch 'main'"),
    ]


@pytest.fixture
def temp_git_repo(tmp_path: Path) -> Path:
    """An empty git repository with a committer configured."""
    _git(tmp_path, "init", "-b", "main")
    _git(tmp_path, "config", "user.name", "Test")
    _git(tmp_path, "config", "user.email", "test@example.com")
    _git(tmp_path, "config", "commit.gpgsign", "false")
    return tmp_path


@pytest.fixture
def git_commit(temp_git_repo: Path) -> Callable[..., str]:
    """Write files and commit them. Returns the new commit hash."""

    def commit(message: str, files: dict[str, str] | None = None) -> str:
        for name, content in (files or {}).items():
            target = temp_git_repo / name
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content)
        _git(temp_git_repo, "add", "--all")
        _git(temp_git_repo, "commit", "--allow-empty", "-m", message)
        return _git(temp_git_repo, "rev-parse", "HEAD")

    return commit


@pytest.fixture
def git_tag(temp_git_repo: Path) -> Callable[[str], None]:
    def tag(name: str) -> None:
        _git(temp_git_repo, "tag", name)

    return tag


@pytest.fixture
def temp_git_repo_with_pyproject(temp_git_repo: Path, git_commit: Callable[..., str]) -> Path:
    """A git repository whose first commit adds a pyproject.toml."""
    git_commit("chore: initial commit", {"pyproject.toml": PYPROJECT})
    return temp_git_repo
