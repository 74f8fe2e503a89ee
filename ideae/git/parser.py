"""Git URL parsing utilities.

Parses remote URLs in SSH and HTTPS form and tells which issue tracker, if
any, hosts the repository.

Supported URL formats:
    SSH:
        - git@github.com:owner/repo.git
        - git@gitlab.com:group/subgroup/project
        - ssh://git@github.com/owner/repo.git

    HTTPS:
        - https://github.com/owner/repo.git
        - https://gitlab.com/group/project

Example:
    >>> parser = GitUrlParser("git@github.com:owner/repo.git")
    >>> parser.full_name
    'owner/repo'
    >>> parser.provider
    <ProviderKind.GITHUB: 'github'>
"""

import re
from typing import Literal

from ideae.enums import ProviderKind
from ideae.exceptions import GitDiscoveryError

KNOWN_HOSTS: dict[str, ProviderKind] = {
    "github.com": ProviderKind.GITHUB,
    "gitlab.com": ProviderKind.GITLAB,
}


class GitUrlParser:
    """Parser for Git remote URLs.

    Unlike owner/repo splitting, the full repository path is kept because
    GitLab projects may live in nested groups (``group/subgroup/project``)
    and ``glab --repo`` expects that full path.

    Attributes:
        url: Original URL that was parsed
        url_type: 'ssh' or 'https'
        host: Hostname of the Git server
        full_name: Repository path without the ``.git`` suffix
    """

    # git@host:path or user@host:path
    SSH_PATTERN = re.compile(r"^(?P<user>\w+)@(?P<host>[a-zA-Z0-9._-]+):(?P<path>.+?)(?:\.git)?/?$")

    # ssh://git@host[:port]/path
    SSH_URL_PATTERN = re.compile(r"^ssh://(?:\w+@)?(?P<host>[a-zA-Z0-9._-]+)(?::\d+)?/(?P<path>.+?)(?:\.git)?/?$")

    # https://host[:port]/path or http://host/path
    HTTPS_PATTERN = re.compile(r"^https?://(?:[^@/]+@)?(?P<host>[a-zA-Z0-9._-]+)(?::\d+)?/(?P<path>.+?)(?:\.git)?/?$")

    def __init__(self, url: str) -> None:
        """Parse ``url`` immediately.

        Raises:
            GitDiscoveryError: If the URL is neither SSH nor HTTPS, or has no
                owner/repo path
        """
        self.url = url.strip()
        self.url_type: Literal["ssh", "https"]

        for url_type, pattern in (
            ("ssh", self.SSH_PATTERN),
            ("ssh", self.SSH_URL_PATTERN),
            ("https", self.HTTPS_PATTERN),
        ):
            match = pattern.match(self.url)
            if match:
                self.url_type = url_type  # type: ignore[assignment]
                self.host = match.group("host").lower()
                self.full_name = match.group("path").strip("/")
                break
        else:
            raise GitDiscoveryError(
                f"Invalid Git URL '{self.url}'",
                hint="Must be SSH (git@host:path) or HTTPS (https://host/path)",
            )

        if "/" not in self.full_name:
            raise GitDiscoveryError(f"Invalid Git URL '{self.url}'", hint="Path must contain owner/repo")

    @property
    def provider(self) -> ProviderKind | None:
        """Tracker hosting this repository, or None for unknown hosts."""
        return KNOWN_HOSTS.get(self.host)
