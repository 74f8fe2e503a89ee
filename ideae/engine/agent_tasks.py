"""Coding-agent task workflow on top of the agent task store."""

from dataclasses import dataclass, field
from enum import Enum

import structlog

from ideae.enums import AgentTaskStatus
from ideae.exceptions import InvalidInputError, ProviderNotSupportedError
from ideae.models.domain import AgentTask
from ideae.models.result import Err
from ideae.providers.agents import DEFAULT_AGENT_LIST_LIMIT, AgentTaskProvider
from ideae.store.agents import AgentTaskStore

log = structlog.get_logger(__name__)


class AgentTaskTab(str, Enum):
    """Views over the task list."""

    ALL = "all"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"

    def __str__(self) -> str:
        return self.value


TAB_STATUSES: dict[AgentTaskTab, tuple[AgentTaskStatus, ...]] = {
    AgentTaskTab.IN_PROGRESS: (AgentTaskStatus.DRAFT, AgentTaskStatus.IN_PROGRESS),
    AgentTaskTab.COMPLETED: (AgentTaskStatus.COMPLETED,),
    AgentTaskTab.FAILED: (AgentTaskStatus.FAILED,),
}


@dataclass
class RefreshReport:
    added: list[AgentTask] = field(default_factory=list)
    updated: list[AgentTask] = field(default_factory=list)
    error: str | None = None


class AgentTaskService:
    """Keep the local agent task store in step with ``gh agent-task``.

    Attributes:
        store: Local agent task store, already loaded
        provider: Agent provider, or None when the remote is not GitHub
        list_limit: Tasks fetched per refresh
    """

    def __init__(
        self,
        store: AgentTaskStore,
        provider: AgentTaskProvider | None = None,
        list_limit: int = DEFAULT_AGENT_LIST_LIMIT,
    ) -> None:
        self.store = store
        self.provider = provider
        self.list_limit = list_limit

    def _require_provider(self) -> AgentTaskProvider:
        if self.provider is None:
            raise ProviderNotSupportedError("Agent tasks need a GitHub remote")
        return self.provider

    async def refresh(self) -> RefreshReport:
        """Merge the remote task list into the store.

        New tasks are appended; known tasks get their status and title
        refreshed. Saves at most once and never raises.
        """
        report = RefreshReport()
        if self.provider is None:
            return report

        try:
            for task in await self.provider.list_tasks(self.list_limit):
                existing = self.store.get(task.id)
                if existing is None:
                    self.store.add(task)
                    report.added.append(task)
                elif existing.status != task.status or existing.title != task.title:
                    updated = self.store.update(task.id, {"status": task.status, "title": task.title})
                    if updated is not None:
                        report.updated.append(updated)

            if report.added or report.updated:
                await self.store.save()
        except Exception as e:
            log.warning("agent_refresh_failed", error=str(e), exc_info=True)
            report.error = str(e)
            return report

        log.info("agent_refresh_completed", added=len(report.added), updated=len(report.updated))
        return report

    async def create_task(self, description: str, issue_number: int | None = None) -> AgentTask:
        """Start an agent task and record it locally.

        Raises:
            InvalidInputError: If the description is empty
            ProviderNotSupportedError: If no GitHub remote is configured
            RemoteOperationError: If ``gh agent-task create`` fails
            PersistenceError: If the local save fails
        """
        description = description.strip()
        if not description:
            raise InvalidInputError("Task description is required")

        provider = self._require_provider()
        result = await provider.create_task(description, issue_number)
        if isinstance(result, Err):
            log.warning("agent_create_failed", error=result.error.message)
            raise result.error

        task = result.value
        if task.id in self.store:
            task = self.store.update(task.id, {"status": task.status, "title": task.title}) or task
        else:
            self.store.add(task)
        await self.store.save()
        log.info("agent_task_created", task_id=task.id, pull_request=task.pull_request_number)
        return task

    def filter_tasks(self, tab: AgentTaskTab | str = AgentTaskTab.ALL) -> list[AgentTask]:
        tab = AgentTaskTab(tab)
        if tab == AgentTaskTab.ALL:
            return self.store.records
        statuses = TAB_STATUSES[tab]
        return [task for task in self.store if task.status in statuses]

    async def view_log(self, session_id: str) -> str:
        """Session log of one task.

        Raises:
            RemoteOperationError: If ``gh agent-task view`` fails
        """
        provider = self._require_provider()
        result = await provider.view_task(session_id)
        if isinstance(result, Err):
            raise result.error
        return result.value
