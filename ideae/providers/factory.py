"""Factory functions for remote providers.

Picks the provider from explicit configuration, falling back to the git
remote of the working directory when configured as ``auto``.

Example:
    >>> provider = resolve_provider(settings, cwd=Path.cwd())
    >>> provider
    GitHubCliProvider(repo='owner/repo')
"""

from pathlib import Path

import structlog

from ideae.config.settings import IdeaeSettings
from ideae.enums import ProviderKind
from ideae.exceptions import ConfigurationError, ProviderNotSupportedError
from ideae.git.discovery import detect_remote
from ideae.providers.agents import AgentTaskProvider
from ideae.providers.base import DEFAULT_LIST_LIMIT, IssueProvider
from ideae.providers.github_cli import GitHubCliProvider
from ideae.providers.gitlab_cli import GitLabCliProvider

log = structlog.get_logger(__name__)


def create_provider(kind: ProviderKind, repo: str, list_limit: int = DEFAULT_LIST_LIMIT) -> IssueProvider:
    """Build the issue provider for ``kind``."""
    if kind == ProviderKind.GITHUB:
        return GitHubCliProvider(repo, list_limit=list_limit)
    return GitLabCliProvider(repo, list_limit=list_limit)


def create_agent_provider(kind: ProviderKind, repo: str) -> AgentTaskProvider:
    """Build the agent task provider for ``kind``.

    Raises:
        ProviderNotSupportedError: For trackers without agent tasks
    """
    if kind == ProviderKind.GITHUB:
        return AgentTaskProvider(repo)
    raise ProviderNotSupportedError("Agent tasks are only supported on GitHub")


def resolve_remote(settings: IdeaeSettings, cwd: Path) -> tuple[ProviderKind, str] | None:
    """Work out which tracker and repository to mirror to.

    Returns:
        (kind, repo), or None when running local-only

    Raises:
        ConfigurationError: If an explicit provider is configured but no
            repository can be determined
    """
    if settings.provider == "none":
        return None

    detected = detect_remote(cwd)

    if settings.provider == "auto":
        if detected is None:
            log.info("provider_not_detected", cwd=str(cwd))
            return None
        return detected.provider, settings.repository or detected.repo

    kind = ProviderKind(settings.provider)
    repo = settings.repository or (detected.repo if detected is not None else None)
    if not repo:
        raise ConfigurationError(f"provider is '{kind.value}' but no repository is configured or detectable")
    return kind, repo


def resolve_provider(settings: IdeaeSettings, cwd: Path) -> IssueProvider | None:
    """Build the configured issue provider, or None for local-only mode."""
    remote = resolve_remote(settings, cwd)
    if remote is None:
        return None
    kind, repo = remote
    provider = create_provider(kind, repo, list_limit=settings.issue_list_limit)
    log.debug("provider_resolved", provider=kind.value, repo=repo)
    return provider
