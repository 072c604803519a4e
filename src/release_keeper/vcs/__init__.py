"""Version control access."""

from __future__ import annotations

from release_keeper.vcs.git import Commit, GitRepository, PullRequestInfo

__all__ = ["Commit", "GitRepository", "PullRequestInfo"]
