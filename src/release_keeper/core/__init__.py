"""Core business logic for release-keeper.

This module contains the fundamental building blocks:
- Semantic version parsing and bumping
- Conventional commit parsing
- Tag, branch, title and pull request body codecs
- Commit splitting between packages
- Release planning
"""

from __future__ import annotations

from release_keeper.core.branch_name import BranchName
from release_keeper.core.commit_split import CommitSplit
from release_keeper.core.commits import (
    ConventionalCommit,
    Note,
    Reference,
    calculate_bump,
    parse_commits,
    parse_conventional_commits,
)
from release_keeper.core.pull_request_body import PullRequestBody, ReleaseData
from release_keeper.core.pull_request_title import PullRequestTitle
from release_keeper.core.release import (
    ReleaseCandidate,
    ReleasePullRequest,
    build_release_pull_request,
    plan_releases,
)
from release_keeper.core.tag_name import TagName
from release_keeper.core.version import BumpType, Version, parse_version

__all__ = [
    # Codecs
    "BranchName",
    # Version
    "BumpType",
    # Split
    "CommitSplit",
    # Commits
    "ConventionalCommit",
    "Note",
    "PullRequestBody",
    "PullRequestTitle",
    "Reference",
    # Release
    "ReleaseCandidate",
    "ReleaseData",
    "ReleasePullRequest",
    "TagName",
    "Version",
    "build_release_pull_request",
    "calculate_bump",
    "parse_commits",
    "parse_conventional_commits",
    "parse_version",
    "plan_releases",
]
