"""Tests for release pull request titles."""

from __future__ import annotations

from release_keeper.core.pull_request_title import DEFAULT_GROUPED_TITLE_PATTERN, PullRequestTitle
from release_keeper.core.version import Version


class TestPullRequestTitleStr:
    """Tests for rendering titles."""

    def test_of_version(self):
        assert str(PullRequestTitle.of_version(Version(1, 2, 3))) == "chore: release 1.2.3"

    def test_of_component_version(self):
        title = PullRequestTitle.of_component_version("storage", Version(1, 2, 3))
        assert str(title) == "chore: release storage 1.2.3"

    def test_of_target_branch_version(self):
        title = PullRequestTitle.of_target_branch_version("main", Version(1, 2, 3))
        assert str(title) == "chore(main): release 1.2.3"

    def test_of_target_branch_grouped(self):
        """Grouped pull requests name the branch, not a version."""
        assert str(PullRequestTitle.of_target_branch("main")) == "chore: release main"

    def test_custom_pattern(self):
        title = PullRequestTitle.of_version(Version(2, 0, 0), pattern="release: v${version}")
        assert str(title) == "release: v2.0.0"


class TestPullRequestTitleParse:
    """Tests for PullRequestTitle.parse()."""

    def test_parse_with_branch(self):
        title = PullRequestTitle.parse("chore(main): release 1.2.3")

        assert title is not None
        assert title.target_branch == "main"
        assert title.component is None
        assert title.version == Version(1, 2, 3)

    def test_parse_with_component(self):
        title = PullRequestTitle.parse("chore(main): release storage 1.2.3-beta")

        assert title is not None
        assert title.component == "storage"
        assert title.version == Version.parse("1.2.3-beta")

    def test_parse_with_v_prefix(self):
        title = PullRequestTitle.parse("chore: release v1.2.3")

        assert title is not None
        assert title.version == Version(1, 2, 3)

    def test_parse_grouped(self):
        title = PullRequestTitle.parse("chore: release main", DEFAULT_GROUPED_TITLE_PATTERN)

        assert title is not None
        assert title.target_branch == "main"
        assert title.version is None

    def test_parse_custom_pattern(self):
        pattern = "chore${scope}: 🔖 release${component} ${version}"
        title = PullRequestTitle.parse("chore(main): 🔖 release 3.0.0", pattern)

        assert title is not None
        assert title.version == Version(3, 0, 0)

    def test_parse_unrelated_returns_none(self):
        assert PullRequestTitle.parse("fix: something else") is None
        assert PullRequestTitle.parse("chore: release notes") is None

    def test_round_trip(self):
        title = PullRequestTitle(component="storage", target_branch="main", version=Version(1, 2, 3))

        assert PullRequestTitle.parse(str(title)) == title

    def test_unknown_placeholder_does_not_raise(self):
        assert PullRequestTitle.parse("chore: release x", "chore: release ${foo}") is None

    def test_unknown_placeholder_kept_literally(self):
        """Unknown placeholders render unchanged, so they parse as literal text."""
        pattern = "chore: release ${foo} ${version}"
        title = PullRequestTitle.of_version(Version(1, 2, 3), pattern=pattern)

        assert str(title) == "chore: release ${foo} 1.2.3"
        assert PullRequestTitle.parse(str(title), pattern) == title
