"""Pytest configuration and shared fixtures."""

from datetime import UTC, datetime
from pathlib import Path
from unittest.mock import AsyncMock

import pytest
import structlog

from ideae.enums import IssueStatus, ProviderKind
from ideae.models.domain import Issue, RemoteIdentity
from ideae.models.result import Ok
from ideae.providers.base import IssueProvider
from ideae.store.agents import AgentTaskStore
from ideae.store.issues import IssueStore


@pytest.fixture(autouse=True)
def reset_structlog():
    """Undo configure_logging calls made by CLI tests."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    """Data directory that does not exist yet."""
    return tmp_path / ".ideae"


@pytest.fixture
def issue_store(data_dir: Path) -> IssueStore:
    """Empty issue store backed by a temp directory."""
    return IssueStore(data_dir)


@pytest.fixture
def agent_store(data_dir: Path) -> AgentTaskStore:
    """Empty agent task store backed by a temp directory."""
    return AgentTaskStore(data_dir)


@pytest.fixture
def local_issue() -> Issue:
    """Local-only issue."""
    return Issue(
        id="a1b2c3d4e5f6",
        title="Fix login redirect",
        body="Users land on /home instead of the page they came from.",
        created_at=datetime(2026, 1, 10, 9, 0, tzinfo=UTC),
        updated_at=datetime(2026, 1, 10, 9, 0, tzinfo=UTC),
    )


@pytest.fixture
def make_remote_issue():
    """Factory for issues as returned by the GitHub provider's list_remote."""

    def factory(number: int, title: str = "Remote issue", status: IssueStatus = IssueStatus.OPEN) -> Issue:
        return Issue(
            id=ProviderKind.GITHUB.local_id(number),
            title=title,
            status=status,
            remote=RemoteIdentity(provider=ProviderKind.GITHUB, number=number),
            created_at=datetime(2026, 1, 1, tzinfo=UTC),
            updated_at=datetime(2026, 1, 2, tzinfo=UTC),
        )

    return factory


@pytest.fixture
def mock_provider() -> AsyncMock:
    """GitHub-flavoured provider double with succeeding mutations."""
    provider = AsyncMock(spec=IssueProvider)
    provider.kind = ProviderKind.GITHUB
    provider.list_remote.return_value = []
    provider.fetch_comments.return_value = []
    provider.create_remote.return_value = Ok(42)
    provider.close_remote.return_value = Ok(None)
    provider.reopen_remote.return_value = Ok(None)
    return provider
