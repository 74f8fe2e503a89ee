"""Core domain models for ideae.

Key Models:
    - Issue: locally tracked issue, optionally mirrored to a remote tracker
    - AgentTask: coding-agent session tied to a pull request
    - FileRef / LineRange: references from an issue to project files
    - RemoteIdentity: (provider, number) pair of a mirrored issue
    - Comment: remote issue comment (read-only, never persisted)
    - CommandResult: raw outcome of an external CLI call

Result values:
    - Ok / Err / Result: outcome of a remote mutating call

Example:
    >>> from ideae.models import Issue
    >>> issue = Issue.new("Add feature X")
    >>> issue.reference_token
    '#1f3a9c2e'
"""

from ideae.models.domain import (
    AgentTask,
    CommandResult,
    Comment,
    FileRef,
    Issue,
    LineRange,
    RemoteIdentity,
    utc_now,
)
from ideae.models.result import Err, Ok, Result

__all__ = [
    "AgentTask",
    "CommandResult",
    "Comment",
    "Err",
    "FileRef",
    "Issue",
    "LineRange",
    "Ok",
    "RemoteIdentity",
    "Result",
    "utc_now",
]
