"""Tests for ideae.engine.agent_tasks."""

import json
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from ideae.engine.agent_tasks import AgentTaskService, AgentTaskTab
from ideae.enums import AgentTaskStatus
from ideae.exceptions import InvalidInputError, ProviderNotSupportedError, RemoteOperationError
from ideae.models.domain import AgentTask
from ideae.models.result import Err, Ok
from ideae.providers.agents import AgentTaskProvider
from ideae.store.agents import AgentTaskStore


def task(task_id: str, status: AgentTaskStatus = AgentTaskStatus.IN_PROGRESS, title: str = "task") -> AgentTask:
    return AgentTask(id=task_id, title=title, pull_request_number=1, repository="owner/repo", status=status)


@pytest.fixture
def agent_provider() -> AsyncMock:
    provider = AsyncMock(spec=AgentTaskProvider)
    provider.list_tasks.return_value = []
    return provider


class TestRefresh:
    @pytest.mark.asyncio
    async def test_adds_new_and_updates_known(
        self, agent_store: AgentTaskStore, agent_provider: AsyncMock, data_dir: Path
    ) -> None:
        agent_store.add(task("pr-1", AgentTaskStatus.IN_PROGRESS, "Old title"))
        agent_provider.list_tasks.return_value = [
            task("pr-1", AgentTaskStatus.COMPLETED, "New title"),
            task("pr-2"),
        ]
        service = AgentTaskService(agent_store, agent_provider, list_limit=15)

        report = await service.refresh()

        agent_provider.list_tasks.assert_awaited_once_with(15)
        assert [t.id for t in report.added] == ["pr-2"]
        assert [t.id for t in report.updated] == ["pr-1"]
        assert agent_store.get("pr-1").status == AgentTaskStatus.COMPLETED
        assert agent_store.get("pr-1").title == "New title"
        assert agent_store.get("pr-1").updated_at is not None
        saved = json.loads((data_dir / "agent-tasks.json").read_text())
        assert [t["id"] for t in saved] == ["pr-1", "pr-2"]

    @pytest.mark.asyncio
    async def test_unchanged_listing_does_not_save(
        self, agent_store: AgentTaskStore, agent_provider: AsyncMock, data_dir: Path
    ) -> None:
        agent_store.add(task("pr-1"))
        agent_provider.list_tasks.return_value = [task("pr-1")]

        report = await AgentTaskService(agent_store, agent_provider).refresh()

        assert report.added == [] and report.updated == []
        assert not (data_dir / "agent-tasks.json").exists()

    @pytest.mark.asyncio
    async def test_failure_is_swallowed(self, agent_store: AgentTaskStore, agent_provider: AsyncMock) -> None:
        agent_provider.list_tasks.side_effect = RuntimeError("boom")

        report = await AgentTaskService(agent_store, agent_provider).refresh()

        assert report.error == "boom"

    @pytest.mark.asyncio
    async def test_without_provider(self, agent_store: AgentTaskStore) -> None:
        report = await AgentTaskService(agent_store, None).refresh()
        assert report.added == []


class TestCreateTask:
    @pytest.mark.asyncio
    async def test_records_created_task(self, agent_store: AgentTaskStore, agent_provider: AsyncMock) -> None:
        agent_provider.create_task.return_value = Ok(task("abc-123", title="Fix flaky test"))

        created = await AgentTaskService(agent_store, agent_provider).create_task("Fix flaky test", issue_number=4)

        agent_provider.create_task.assert_awaited_once_with("Fix flaky test", 4)
        assert created.id == "abc-123"
        assert agent_store.get("abc-123") is not None

    @pytest.mark.asyncio
    async def test_remote_failure_raises(self, agent_store: AgentTaskStore, agent_provider: AsyncMock) -> None:
        agent_provider.create_task.return_value = Err(RemoteOperationError("gh agent-task create failed"))

        with pytest.raises(RemoteOperationError):
            await AgentTaskService(agent_store, agent_provider).create_task("Do it")

        assert len(agent_store) == 0

    @pytest.mark.asyncio
    async def test_requires_provider(self, agent_store: AgentTaskStore) -> None:
        with pytest.raises(ProviderNotSupportedError):
            await AgentTaskService(agent_store, None).create_task("Do it")

    @pytest.mark.asyncio
    async def test_requires_description(self, agent_store: AgentTaskStore, agent_provider: AsyncMock) -> None:
        with pytest.raises(InvalidInputError):
            await AgentTaskService(agent_store, agent_provider).create_task("  ")


class TestFilterAndView:
    @pytest.fixture
    def service(self, agent_store: AgentTaskStore, agent_provider: AsyncMock) -> AgentTaskService:
        agent_store.add(task("d", AgentTaskStatus.DRAFT))
        agent_store.add(task("p", AgentTaskStatus.IN_PROGRESS))
        agent_store.add(task("c", AgentTaskStatus.COMPLETED))
        agent_store.add(task("f", AgentTaskStatus.FAILED))
        return AgentTaskService(agent_store, agent_provider)

    @pytest.mark.parametrize(
        ("tab", "expected"),
        [
            (AgentTaskTab.ALL, ["d", "p", "c", "f"]),
            (AgentTaskTab.IN_PROGRESS, ["d", "p"]),
            ("completed", ["c"]),
            ("failed", ["f"]),
        ],
    )
    def test_filter_tasks(self, service: AgentTaskService, tab, expected: list[str]) -> None:
        assert [t.id for t in service.filter_tasks(tab)] == expected

    @pytest.mark.asyncio
    async def test_view_log(self, service: AgentTaskService, agent_provider: AsyncMock) -> None:
        agent_provider.view_task.return_value = Ok("log output")

        assert await service.view_log("abc") == "log output"

    @pytest.mark.asyncio
    async def test_view_log_failure(self, service: AgentTaskService, agent_provider: AsyncMock) -> None:
        agent_provider.view_task.return_value = Err(RemoteOperationError("gh agent-task view failed"))

        with pytest.raises(RemoteOperationError):
            await service.view_log("abc")
