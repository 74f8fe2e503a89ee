"""
Domain models for ideae.

Persisted records (``Issue`` and ``AgentTask``) are Pydantic models so a
whole backing file can be validated in one pass and dumped back to JSON with
stable, ISO-formatted timestamps. Transient values fetched from the remote
tracker (``Comment``) or produced by the CLI layer (``CommandResult``) are
plain dataclasses.

Example:
    Creating a local issue::

        issue = Issue.new("Fix login bug", body="SSO users cannot log in")
        issue.display_id        # 'a1b2c3d4'
        issue.reference_token   # '#a1b2c3d4'

    An issue imported from GitHub::

        issue = Issue(
            id="gh-42",
            title="Fix login bug",
            remote=RemoteIdentity(provider=ProviderKind.GITHUB, number=42),
        )
        issue.display_id        # '42'
"""

import uuid
from dataclasses import dataclass
from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ideae.enums import AgentTaskStatus, IssuePriority, IssueStatus, ProviderKind

SHORT_ID_LENGTH = 8


def utc_now() -> datetime:
    return datetime.now(UTC)


def _ensure_aware(value: datetime | None) -> datetime | None:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


class LineRange(BaseModel):
    """Inclusive, 1-based line range inside a referenced file."""

    start: int = Field(..., ge=1)
    end: int | None = Field(default=None, ge=1)

    def __str__(self) -> str:
        if self.end is None:
            return str(self.start)
        return f"{self.start}-{self.end}"


class FileRef(BaseModel):
    """Reference from an issue to a project file, optionally narrowed to lines."""

    path: str
    lines: LineRange | None = None

    def __str__(self) -> str:
        if self.lines is None:
            return self.path
        return f"{self.path}#{self.lines}"


class RemoteIdentity(BaseModel):
    """Identity of an issue's counterpart on a remote tracker.

    Two records in one store may never share the same ``(provider, number)``
    pair; the store enforces this on every add and update.
    """

    model_config = ConfigDict(frozen=True)

    provider: ProviderKind
    number: int = Field(..., ge=1)

    @property
    def key(self) -> tuple[ProviderKind, int]:
        return (self.provider, self.number)


class Issue(BaseModel):
    """A locally tracked issue, optionally mirrored to a remote tracker.

    ``updated_at`` belongs to the store: callers never set it on updates, the
    store stamps it on every mutation and keeps it at or after ``created_at``.
    """

    id: str = Field(..., min_length=1)
    title: str
    body: str = ""
    status: IssueStatus = IssueStatus.OPEN
    priority: IssuePriority = IssuePriority.MEDIUM
    labels: list[str] = Field(default_factory=list)
    files: list[FileRef] = Field(default_factory=list)
    remote: RemoteIdentity | None = None
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @field_validator("labels")
    @classmethod
    def dedupe_labels(cls, v: list[str]) -> list[str]:
        """Labels behave like an ordered set."""
        return list(dict.fromkeys(v))

    @field_validator("created_at", "updated_at")
    @classmethod
    def timestamps_are_aware(cls, v: datetime) -> datetime:
        return _ensure_aware(v)

    @model_validator(mode="after")
    def updated_not_before_created(self) -> "Issue":
        if self.updated_at < self.created_at:
            self.updated_at = self.created_at
        return self

    @classmethod
    def new(
        cls,
        title: str,
        body: str = "",
        labels: list[str] | None = None,
        files: list[FileRef] | None = None,
    ) -> "Issue":
        """Build a fresh local issue with a generated short id."""
        now = utc_now()
        return cls(
            id=uuid.uuid4().hex[:SHORT_ID_LENGTH],
            title=title,
            body=body,
            labels=labels or [],
            files=files or [],
            created_at=now,
            updated_at=now,
        )

    @property
    def remote_number(self) -> int | None:
        return self.remote.number if self.remote else None

    @property
    def display_id(self) -> str:
        """Remote number when mirrored, otherwise the first 8 characters of the id.

        The same rule produces suggestion labels and inserted reference
        tokens, so an accepted suggestion always matches a later lookup.
        """
        if self.remote is not None:
            return str(self.remote.number)
        return self.id[:SHORT_ID_LENGTH]

    @property
    def reference_token(self) -> str:
        return f"#{self.display_id}"

    def is_linked_to(self, provider: ProviderKind) -> bool:
        return self.remote is not None and self.remote.provider == provider


class AgentTask(BaseModel):
    """A coding-agent session working on a pull request.

    Shares the store lifecycle of ``Issue`` but lives in its own collection.
    ``id`` is the agent session identifier.
    """

    id: str = Field(..., min_length=1)
    title: str
    pull_request_number: int | None = None
    repository: str
    status: AgentTaskStatus = AgentTaskStatus.IN_PROGRESS
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime | None = None

    @field_validator("created_at", "updated_at")
    @classmethod
    def timestamps_are_aware(cls, v: datetime | None) -> datetime | None:
        return _ensure_aware(v)

    @property
    def is_active(self) -> bool:
        return self.status in (AgentTaskStatus.DRAFT, AgentTaskStatus.IN_PROGRESS)


@dataclass
class Comment:
    """A comment on a remote issue. Fetched on demand, never persisted."""

    id: str
    author: str
    body: str
    created_at: datetime


@dataclass
class CommandResult:
    """Raw outcome of one external CLI invocation."""

    stdout: str
    stderr: str
    code: int

    @property
    def ok(self) -> bool:
        return self.code == 0
