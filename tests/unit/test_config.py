"""Tests for configuration loading and models."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from release_keeper.config.loader import (
    extract_release_keeper_config,
    find_pyproject_toml,
    get_project_name,
    load_config,
    load_pyproject_toml,
)
from release_keeper.config.manifest import dump_manifest, load_manifest, write_manifest
from release_keeper.config.models import (
    ChangelogConfig,
    CommitsConfig,
    GitHubConfig,
    PackageConfig,
    PullRequestConfig,
    ReleaseKeeperConfig,
    VersionConfig,
)
from release_keeper.core.strategy import ReleaseType
from release_keeper.core.version import Version
from release_keeper.exceptions import ConfigNotFoundError, ConfigValidationError


class TestReleaseKeeperConfig:
    """Tests for ReleaseKeeperConfig defaults and helpers."""

    def test_defaults(self):
        """Every field has a working default."""
        config = ReleaseKeeperConfig()

        assert config.default_branch == "main"
        assert config.release_type == ReleaseType.SIMPLE
        assert config.manifest_path == Path(".release-keeper-manifest.json")
        assert not config.is_monorepo

    def test_effective_packages_default_to_root(self):
        packages = ReleaseKeeperConfig().effective_packages

        assert len(packages) == 1
        assert packages[0].is_root

    def test_monorepo(self):
        config = ReleaseKeeperConfig(packages=[PackageConfig(path="packages/a")])

        assert config.is_monorepo

    def test_release_type_for(self):
        config = ReleaseKeeperConfig(release_type=ReleaseType.PYTHON)

        assert config.release_type_for(PackageConfig()) == ReleaseType.PYTHON
        assert config.release_type_for(PackageConfig(release_type=ReleaseType.SIMPLE)) == ReleaseType.SIMPLE

    def test_changelog_path_for(self):
        config = ReleaseKeeperConfig()

        assert config.changelog_path_for(PackageConfig()) == Path("CHANGELOG.md")
        assert config.changelog_path_for(PackageConfig(path="packages/a")) == Path("packages/a/CHANGELOG.md")
        assert config.changelog_path_for(PackageConfig(changelog_path=Path("docs/CHANGES.md"))) == Path(
            "docs/CHANGES.md"
        )

    def test_unknown_keys_rejected(self):
        with pytest.raises(ValueError, match="not_a_field"):
            ReleaseKeeperConfig.model_validate({"not_a_field": True})


class TestCommitsConfig:
    """Tests for CommitsConfig."""

    def test_defaults(self):
        config = CommitsConfig()

        assert config.types_minor == ["feat"]
        assert config.types_major == []
        assert "[skip release]" in config.skip_release_patterns


class TestChangelogConfig:
    """Tests for ChangelogConfig."""

    def test_section_for(self):
        config = ChangelogConfig()

        section = config.section_for("fix")
        assert section is not None
        assert section.section == "Bug Fixes"
        assert config.section_for("chore").hidden
        assert config.section_for("unknown") is None


class TestVersionConfig:
    """Tests for VersionConfig validation."""

    def test_invalid_initial_version(self):
        with pytest.raises(ValueError, match="Invalid version"):
            VersionConfig(initial_version="one")

    def test_invalid_separator(self):
        with pytest.raises(ValueError, match="tag_separator"):
            VersionConfig(tag_separator="_")

    def test_invalid_prefix(self):
        with pytest.raises(ValueError, match="tag_prefix"):
            VersionConfig(tag_prefix="release-")


class TestGitHubConfig:
    """Tests for GitHubConfig.repository_url."""

    def test_repository_url(self):
        config = GitHubConfig(owner="acme", repo="widgets", host="https://git.example.com/")

        assert config.repository_url == "https://git.example.com/acme/widgets"

    def test_repository_url_incomplete(self):
        assert GitHubConfig(owner="acme").repository_url is None


class TestPackageConfig:
    """Tests for PackageConfig validation."""

    @pytest.mark.parametrize(
        ("path", "expected"),
        [("./packages/a/", "packages/a"), ("", "."), ("./", "."), ("lib", "lib")],
    )
    def test_path_normalized(self, path: str, expected: str):
        assert PackageConfig(path=path).path == expected

    def test_invalid_initial_version(self):
        with pytest.raises(ValueError, match="Invalid version"):
            PackageConfig(path="lib", initial_version="0.1")

    def test_valid_initial_version(self):
        assert PackageConfig(path="lib", initial_version="0.1.0").initial_version == "0.1.0"


class TestPullRequestConfig:
    """Tests for PullRequestConfig title patterns."""

    def test_defaults_are_valid(self):
        config = PullRequestConfig()

        assert "${version}" in config.title_pattern
        assert "${branch}" in config.grouped_title_pattern

    @pytest.mark.parametrize("field", ["title_pattern", "grouped_title_pattern"])
    def test_unknown_placeholder_rejected(self, field: str):
        with pytest.raises(ValueError, match="Unknown title placeholders: foo"):
            PullRequestConfig(**{field: "chore: release ${foo}"})


class TestLoadPyprojectToml:
    """Tests for load_pyproject_toml()."""

    def test_load_valid_toml(self, temp_git_repo_with_pyproject: Path):
        """Load a valid pyproject.toml."""
        data = load_pyproject_toml(temp_git_repo_with_pyproject / "pyproject.toml")

        assert data["project"]["name"] == "test-project"

    def test_load_nonexistent_raises(self, tmp_path: Path):
        """Loading nonexistent file raises ConfigNotFoundError."""
        with pytest.raises(ConfigNotFoundError):
            load_pyproject_toml(tmp_path / "nonexistent.toml")

    def test_invalid_toml_raises(self, tmp_path: Path):
        path = tmp_path / "pyproject.toml"
        path.write_text("[project\nname =")

        with pytest.raises(ConfigValidationError):
            load_pyproject_toml(path)


class TestFindPyprojectToml:
    """Tests for find_pyproject_toml()."""

    def test_find_in_current_dir(self, temp_git_repo_with_pyproject: Path):
        found = find_pyproject_toml(temp_git_repo_with_pyproject)
        assert found.name == "pyproject.toml"

    def test_find_in_parent_dir(self, temp_git_repo_with_pyproject: Path):
        """Find pyproject.toml in parent directory."""
        subdir = temp_git_repo_with_pyproject / "src" / "package"
        subdir.mkdir(parents=True)

        assert find_pyproject_toml(subdir) == (temp_git_repo_with_pyproject / "pyproject.toml").resolve()

    def test_not_found_raises(self, tmp_path: Path):
        with pytest.raises(ConfigNotFoundError):
            find_pyproject_toml(tmp_path)


class TestExtractReleaseKeeperConfig:
    """Tests for extract_release_keeper_config()."""

    def test_extract_existing_config(self):
        pyproject = {"tool": {"release-keeper": {"default_branch": "develop"}}}

        assert extract_release_keeper_config(pyproject) == {"default_branch": "develop"}

    def test_extract_missing_config(self):
        assert extract_release_keeper_config({"project": {"name": "test"}}) == {}


class TestLoadConfig:
    """Tests for load_config()."""

    def test_load_with_config(self, temp_git_repo_with_pyproject: Path):
        config = load_config(temp_git_repo_with_pyproject)

        assert isinstance(config, ReleaseKeeperConfig)
        assert config.release_type == ReleaseType.PYTHON

    def test_load_defaults_when_no_config(self, tmp_path: Path):
        (tmp_path / "pyproject.toml").write_text('[project]\nname = "test"\nversion = "1.0.0"\n')

        assert load_config(tmp_path) == ReleaseKeeperConfig()

    def test_load_packages(self, tmp_path: Path):
        (tmp_path / "pyproject.toml").write_text(
            """\
[tool.release-keeper]
[[tool.release-keeper.packages]]
path = "packages/a"
component = "alpha"

[[tool.release-keeper.packages]]
path = "packages/b"
release_type = "python"
"""
        )

        config = load_config(tmp_path)

        assert [p.path for p in config.packages] == ["packages/a", "packages/b"]
        assert config.packages[0].component == "alpha"
        assert config.packages[1].release_type == ReleaseType.PYTHON

    def test_invalid_config_raises(self, tmp_path: Path):
        (tmp_path / "pyproject.toml").write_text('[tool.release-keeper]\nrelease_type = "cobol"\n')

        with pytest.raises(ConfigValidationError, match="Invalid configuration"):
            load_config(tmp_path)

    def test_invalid_package_initial_version_raises(self, tmp_path: Path):
        """Bad package versions fail at load time, not during planning."""
        (tmp_path / "pyproject.toml").write_text(
            '[tool.release-keeper]\n[[tool.release-keeper.packages]]\npath = "lib"\ninitial_version = "v1"\n'
        )

        with pytest.raises(ConfigValidationError, match="Invalid configuration"):
            load_config(tmp_path)


class TestGetProjectInfo:
    """Tests for get_project_name()."""

    def test_get_project_name(self, temp_git_repo_with_pyproject: Path):
        assert get_project_name(temp_git_repo_with_pyproject) == "test-project"

    def test_missing_name_raises(self, tmp_path: Path):
        (tmp_path / "pyproject.toml").write_text("[project]\nversion = '1.0.0'\n")

        with pytest.raises(ConfigValidationError):
            get_project_name(tmp_path)


class TestManifest:
    """Tests for the version manifest."""

    def test_missing_file_is_empty(self, tmp_path: Path):
        assert load_manifest(tmp_path / "manifest.json") == {}

    def test_load(self, tmp_path: Path):
        path = tmp_path / "manifest.json"
        path.write_text(json.dumps({".": "1.2.3", "./packages/a/": "0.1.0-beta"}))

        assert load_manifest(path) == {".": Version(1, 2, 3), "packages/a": Version.parse("0.1.0-beta")}

    def test_write_then_load(self, tmp_path: Path):
        path = tmp_path / "manifest.json"
        manifest = {"packages/b": Version(2, 0, 0), ".": Version(1, 0, 0)}

        write_manifest(path, manifest)

        assert load_manifest(path) == manifest
        assert path.read_text() == dump_manifest(manifest)
        assert list(json.loads(path.read_text())) == [".", "packages/b"]

    def test_invalid_json(self, tmp_path: Path):
        path = tmp_path / "manifest.json"
        path.write_text("{not json")

        with pytest.raises(ConfigValidationError):
            load_manifest(path)

    def test_not_an_object(self, tmp_path: Path):
        path = tmp_path / "manifest.json"
        path.write_text("[]")

        with pytest.raises(ConfigValidationError):
            load_manifest(path)

    def test_invalid_version(self, tmp_path: Path):
        path = tmp_path / "manifest.json"
        path.write_text('{".": "latest"}')

        with pytest.raises(ConfigValidationError, match="latest"):
            load_manifest(path)
