"""Unit tests for git remote parsing and discovery.

Covers GitUrlParser (SSH, ssh:// and HTTPS forms, nested GitLab groups,
host-to-provider mapping) and GitDiscovery / detect_remote with a mocked
``git.Repo``.
"""

from pathlib import Path
from unittest.mock import Mock, patch

import pytest
from git.exc import InvalidGitRepositoryError

from ideae.enums import ProviderKind
from ideae.exceptions import GitDiscoveryError
from ideae.git.discovery import DetectedRemote, GitDiscovery, detect_remote
from ideae.git.parser import GitUrlParser


def make_remote(name: str, url: str) -> Mock:
    remote = Mock()
    remote.name = name
    remote.url = url
    return remote


class TestGitUrlParser:
    """Tests for URL parsing."""

    def test_scp_style_ssh(self) -> None:
        parser = GitUrlParser("git@github.com:owner/repo.git")

        assert parser.url_type == "ssh"
        assert parser.host == "github.com"
        assert parser.full_name == "owner/repo"
        assert parser.provider == ProviderKind.GITHUB

    def test_ssh_url_with_port(self) -> None:
        parser = GitUrlParser("ssh://git@gitlab.com:2222/group/project.git")

        assert parser.url_type == "ssh"
        assert parser.full_name == "group/project"
        assert parser.provider == ProviderKind.GITLAB

    def test_https(self) -> None:
        parser = GitUrlParser("https://github.com/owner/repo")

        assert parser.url_type == "https"
        assert parser.full_name == "owner/repo"

    def test_https_with_credentials_and_trailing_slash(self) -> None:
        parser = GitUrlParser("https://token@GitHub.com/owner/repo.git/")

        assert parser.host == "github.com"
        assert parser.full_name == "owner/repo"

    def test_nested_gitlab_groups_are_kept(self) -> None:
        parser = GitUrlParser("git@gitlab.com:group/subgroup/project.git")

        assert parser.full_name == "group/subgroup/project"

    def test_unknown_host(self) -> None:
        assert GitUrlParser("https://git.example.com/team/app.git").provider is None

    @pytest.mark.parametrize("url", ["not a url", "ftp://github.com/owner/repo", "https://github.com/repo-only"])
    def test_invalid_urls(self, url: str) -> None:
        with pytest.raises(GitDiscoveryError) as exc_info:
            GitUrlParser(url)
        assert "Hint:" in str(exc_info.value)


class TestGitDiscovery:
    """Tests for GitDiscovery with a mocked repository."""

    @patch("ideae.git.discovery.git.Repo")
    def test_prefers_origin(self, mock_repo_class: Mock) -> None:
        mock_repo_class.return_value.remotes = [
            make_remote("upstream", "git@github.com:upstream/repo.git"),
            make_remote("origin", "git@github.com:me/repo.git"),
        ]

        assert GitDiscovery("/work").remote_url() == "git@github.com:me/repo.git"

    @patch("ideae.git.discovery.git.Repo")
    def test_falls_back_to_upstream_then_first(self, mock_repo_class: Mock) -> None:
        mock_repo_class.return_value.remotes = [
            make_remote("fork", "git@github.com:fork/repo.git"),
            make_remote("upstream", "git@github.com:upstream/repo.git"),
        ]
        assert GitDiscovery("/work").remote_url() == "git@github.com:upstream/repo.git"

        mock_repo_class.return_value.remotes = [make_remote("fork", "git@github.com:fork/repo.git")]
        assert GitDiscovery("/work").remote_url() == "git@github.com:fork/repo.git"

    @patch("ideae.git.discovery.git.Repo")
    def test_no_remotes(self, mock_repo_class: Mock) -> None:
        mock_repo_class.return_value.remotes = []

        with pytest.raises(GitDiscoveryError, match="No Git remotes"):
            GitDiscovery("/work").remote_url()

    @patch("ideae.git.discovery.git.Repo")
    def test_not_a_repository(self, mock_repo_class: Mock) -> None:
        mock_repo_class.side_effect = InvalidGitRepositoryError("/work")

        with pytest.raises(GitDiscoveryError, match="Not a Git repository"):
            GitDiscovery("/work").remote_url()

    @patch("ideae.git.discovery.git.Repo")
    def test_searches_parent_directories(self, mock_repo_class: Mock) -> None:
        mock_repo_class.return_value.remotes = [make_remote("origin", "git@github.com:o/r.git")]

        GitDiscovery("/work/sub").remote_url()

        assert mock_repo_class.call_args.kwargs["search_parent_directories"] is True

    @patch("ideae.git.discovery.git.Repo")
    def test_detect(self, mock_repo_class: Mock) -> None:
        mock_repo_class.return_value.remotes = [make_remote("origin", "https://gitlab.com/g/s/p.git")]

        assert GitDiscovery("/work").detect() == DetectedRemote(provider=ProviderKind.GITLAB, repo="g/s/p")

    @patch("ideae.git.discovery.git.Repo")
    def test_detect_unsupported_host(self, mock_repo_class: Mock) -> None:
        mock_repo_class.return_value.remotes = [make_remote("origin", "https://gitea.local/o/r.git")]

        assert GitDiscovery("/work").detect() is None


class TestDetectRemote:
    def test_outside_repository_returns_none(self, tmp_path: Path) -> None:
        with patch("ideae.git.discovery.git.Repo", side_effect=InvalidGitRepositoryError(str(tmp_path))):
            assert detect_remote(tmp_path) is None

    @patch("ideae.git.discovery.git.Repo")
    def test_detects_github(self, mock_repo_class: Mock) -> None:
        mock_repo_class.return_value.remotes = [make_remote("origin", "git@github.com:owner/repo.git")]

        assert detect_remote("/work") == DetectedRemote(provider=ProviderKind.GITHUB, repo="owner/repo")
