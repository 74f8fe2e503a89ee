"""Remote tracker providers.

Each provider wraps one external command-line tool and maps its output onto
the domain models. The reconciler only ever talks to the ``IssueProvider``
contract, so it works the same against every backend.

Key Components:
    - IssueProvider: abstract contract (list/create/close/reopen/comments)
    - GitHubCliProvider: GitHub via ``gh``
    - GitLabCliProvider: GitLab via ``glab``
    - AgentTaskProvider: GitHub coding-agent tasks via ``gh agent-task``

Example:
    >>> from ideae.providers import create_provider
    >>> provider = create_provider(ProviderKind.GITHUB, "owner/repo")
    >>> issues = await provider.list_remote()
"""

from ideae.providers.agents import AgentTaskProvider
from ideae.providers.base import IssueProvider
from ideae.providers.factory import create_agent_provider, create_provider, resolve_provider
from ideae.providers.github_cli import GitHubCliProvider
from ideae.providers.gitlab_cli import GitLabCliProvider

__all__ = [
    "AgentTaskProvider",
    "GitHubCliProvider",
    "GitLabCliProvider",
    "IssueProvider",
    "create_agent_provider",
    "create_provider",
    "resolve_provider",
]
