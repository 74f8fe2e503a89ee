"""Git remote discovery.

Reads the repository's preferred remote through GitPython and tells which
tracker the project lives on, so ideae can pick a provider without any
configuration.

Example:
    >>> remote = detect_remote(".")
    >>> remote
    DetectedRemote(provider=<ProviderKind.GITHUB: 'github'>, repo='owner/repo')
"""

from dataclasses import dataclass
from pathlib import Path

import git
import structlog
from git.exc import InvalidGitRepositoryError, NoSuchPathError

from ideae.enums import ProviderKind
from ideae.exceptions import GitDiscoveryError
from ideae.git.parser import GitUrlParser

log = structlog.get_logger(__name__)


@dataclass(frozen=True)
class DetectedRemote:
    provider: ProviderKind
    repo: str


class GitDiscovery:
    """Discovers remote configuration of a local repository.

    The ``git.Repo`` object is opened lazily and cached.

    Attributes:
        repo_path: Resolved path inside the repository
        PREFERRED_REMOTES: Remote names tried in order
    """

    PREFERRED_REMOTES = ["origin", "upstream"]

    def __init__(self, repo_path: str | Path = ".") -> None:
        self.repo_path = Path(repo_path).resolve()
        self._repo: git.Repo | None = None

    def _get_repo(self) -> git.Repo:
        if self._repo is None:
            try:
                self._repo = git.Repo(self.repo_path, search_parent_directories=True)
            except (InvalidGitRepositoryError, NoSuchPathError) as e:
                raise GitDiscoveryError(
                    f"Not a Git repository: {self.repo_path}",
                    hint="Run 'git init' or navigate to a Git repository directory.",
                ) from e
        return self._repo

    def remote_url(self) -> str:
        """URL of the preferred remote.

        Raises:
            GitDiscoveryError: If the path is not a repository or has no remotes
        """
        remotes = {remote.name: remote for remote in self._get_repo().remotes}
        if not remotes:
            raise GitDiscoveryError(
                "No Git remotes configured in this repository",
                hint="Add a remote with: git remote add origin <url>",
            )

        for name in self.PREFERRED_REMOTES:
            if name in remotes:
                return remotes[name].url
        return next(iter(remotes.values())).url

    def detect(self) -> DetectedRemote | None:
        """Detect the hosting tracker.

        Returns:
            The provider kind and repository path, or None when the remote
            is not on a supported tracker

        Raises:
            GitDiscoveryError: If the remote cannot be read or parsed
        """
        parser = GitUrlParser(self.remote_url())
        if parser.provider is None:
            log.info("remote_host_unsupported", host=parser.host)
            return None
        return DetectedRemote(provider=parser.provider, repo=parser.full_name)


def detect_remote(repo_path: str | Path = ".") -> DetectedRemote | None:
    """Detect the hosting tracker, returning None on any discovery problem."""
    try:
        return GitDiscovery(repo_path).detect()
    except GitDiscoveryError as e:
        log.info("remote_detection_skipped", reason=e.message)
        return None
