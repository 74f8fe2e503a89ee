"""Tests for ideae.models and ideae.enums."""

from datetime import UTC, datetime, timedelta

import pytest
from pydantic import ValidationError

from ideae.enums import AgentTaskStatus, IssueStatus, ProviderKind
from ideae.exceptions import RemoteOperationError
from ideae.models.domain import AgentTask, CommandResult, FileRef, Issue, LineRange, RemoteIdentity
from ideae.models.result import Err, Ok


class TestProviderKind:
    def test_cli_names(self) -> None:
        assert ProviderKind.GITHUB.cli == "gh"
        assert ProviderKind.GITLAB.cli == "glab"

    def test_local_ids_use_provider_prefix(self) -> None:
        assert ProviderKind.GITHUB.local_id(42) == "gh-42"
        assert ProviderKind.GITLAB.local_id(42) == "gl-42"


class TestIssueStatus:
    def test_toggled(self) -> None:
        assert IssueStatus.OPEN.toggled() == IssueStatus.CLOSED
        assert IssueStatus.CLOSED.toggled() == IssueStatus.OPEN

    def test_str_is_value(self) -> None:
        assert str(IssueStatus.CLOSED) == "closed"


class TestIssue:
    def test_new_generates_short_hex_id(self) -> None:
        issue = Issue.new("Fix bug")

        assert len(issue.id) == 8
        int(issue.id, 16)
        assert issue.status == IssueStatus.OPEN
        assert issue.body == ""
        assert issue.remote is None
        assert issue.created_at == issue.updated_at

    def test_new_ids_are_unique(self) -> None:
        ids = {Issue.new("x").id for _ in range(50)}
        assert len(ids) == 50

    def test_display_id_for_local_issue_truncates(self) -> None:
        issue = Issue(id="a1b2c3d4e5f6a7b8", title="Local")

        assert issue.display_id == "a1b2c3d4"
        assert issue.reference_token == "#a1b2c3d4"

    def test_display_id_prefers_remote_number(self) -> None:
        issue = Issue(id="gh-42", title="Remote", remote=RemoteIdentity(provider=ProviderKind.GITHUB, number=42))

        assert issue.display_id == "42"
        assert issue.reference_token == "#42"
        assert issue.remote_number == 42

    def test_is_linked_to(self) -> None:
        issue = Issue(id="gl-7", title="x", remote=RemoteIdentity(provider=ProviderKind.GITLAB, number=7))

        assert issue.is_linked_to(ProviderKind.GITLAB)
        assert not issue.is_linked_to(ProviderKind.GITHUB)

    def test_labels_are_deduplicated_in_order(self) -> None:
        issue = Issue(id="x", title="x", labels=["bug", "ui", "bug"])
        assert issue.labels == ["bug", "ui"]

    def test_updated_at_never_before_created_at(self) -> None:
        created = datetime(2026, 3, 1, tzinfo=UTC)
        issue = Issue(id="x", title="x", created_at=created, updated_at=created - timedelta(days=1))

        assert issue.updated_at == created

    def test_naive_timestamps_become_utc(self) -> None:
        issue = Issue(id="x", title="x", created_at=datetime(2026, 3, 1), updated_at=datetime(2026, 3, 1))
        assert issue.created_at.tzinfo is not None

    def test_empty_id_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Issue(id="", title="x")

    def test_json_uses_snake_case_and_iso_timestamps(self) -> None:
        issue = Issue(
            id="gh-1",
            title="x",
            remote=RemoteIdentity(provider=ProviderKind.GITHUB, number=1),
            created_at=datetime(2026, 1, 1, tzinfo=UTC),
            updated_at=datetime(2026, 1, 1, tzinfo=UTC),
        )
        data = issue.model_dump(mode="json")

        assert data["remote"] == {"provider": "github", "number": 1}
        assert data["created_at"].startswith("2026-01-01T00:00:00")
        assert "updated_at" in data


class TestRemoteIdentity:
    def test_number_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            RemoteIdentity(provider=ProviderKind.GITHUB, number=0)

    def test_is_frozen(self) -> None:
        identity = RemoteIdentity(provider=ProviderKind.GITHUB, number=3)
        with pytest.raises(ValidationError):
            identity.number = 4  # type: ignore[misc]

    def test_key(self) -> None:
        assert RemoteIdentity(provider=ProviderKind.GITLAB, number=3).key == (ProviderKind.GITLAB, 3)


class TestFileRef:
    def test_str_without_lines(self) -> None:
        assert str(FileRef(path="src/app.py")) == "src/app.py"

    def test_str_with_range(self) -> None:
        assert str(FileRef(path="src/app.py", lines=LineRange(start=10, end=25))) == "src/app.py#10-25"

    def test_str_with_single_line(self) -> None:
        assert str(FileRef(path="a.py", lines=LineRange(start=3))) == "a.py#3"


class TestAgentTask:
    def test_is_active(self) -> None:
        task = AgentTask(id="s1", title="t", repository="o/r", status=AgentTaskStatus.DRAFT)
        assert task.is_active
        assert not task.model_copy(update={"status": AgentTaskStatus.FAILED}).is_active

    def test_defaults(self) -> None:
        task = AgentTask(id="s1", title="t", repository="o/r")

        assert task.status == AgentTaskStatus.IN_PROGRESS
        assert task.pull_request_number is None
        assert task.updated_at is None


class TestCommandResult:
    def test_ok_only_on_zero_exit(self) -> None:
        assert CommandResult(stdout="", stderr="", code=0).ok
        assert not CommandResult(stdout="", stderr="boom", code=1).ok


class TestResult:
    def test_ok_unwrap(self) -> None:
        assert Ok(5).unwrap() == 5
        assert Ok(5).ok

    def test_err_unwrap_raises_carried_error(self) -> None:
        error = RemoteOperationError("gh issue close failed", stderr="not found\n", returncode=1)
        result = Err(error)

        assert not result.ok
        with pytest.raises(RemoteOperationError) as exc_info:
            result.unwrap()
        assert exc_info.value.message == "gh issue close failed: not found"
        assert exc_info.value.returncode == 1
