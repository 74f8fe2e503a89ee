"""Enumerations shared across ideae."""

from enum import Enum


class ProviderKind(str, Enum):
    """Remote issue trackers ideae can mirror to.

    Each kind is driven by its own command-line tool and owns an id prefix
    used when a remote issue is imported into the local store, so ids never
    collide across providers sharing one store.
    """

    GITHUB = "github"
    GITLAB = "gitlab"

    def __str__(self) -> str:
        return self.value

    @property
    def cli(self) -> str:
        """Name of the external CLI that talks to this tracker."""
        return "gh" if self == ProviderKind.GITHUB else "glab"

    @property
    def id_prefix(self) -> str:
        """Prefix for ids synthesized from remote issue numbers."""
        return "gh" if self == ProviderKind.GITHUB else "gl"

    def local_id(self, number: int) -> str:
        """Synthesize the local id of an imported remote issue."""
        return f"{self.id_prefix}-{number}"


class IssueStatus(str, Enum):
    """Two-state issue status; every provider vocabulary is folded into these."""

    OPEN = "open"
    CLOSED = "closed"

    def __str__(self) -> str:
        return self.value

    def toggled(self) -> "IssueStatus":
        return IssueStatus.CLOSED if self == IssueStatus.OPEN else IssueStatus.OPEN


class IssuePriority(str, Enum):
    """Issue priority. Always the default for now."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    def __str__(self) -> str:
        return self.value


class AgentTaskStatus(str, Enum):
    """Lifecycle of a coding-agent task backed by a pull request."""

    DRAFT = "draft"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"

    def __str__(self) -> str:
        return self.value
