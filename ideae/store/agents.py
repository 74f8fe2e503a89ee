"""Agent task store."""

from ideae.models.domain import AgentTask
from ideae.store.base import JsonRecordStore

AGENT_TASKS_FILE = "agent-tasks.json"


class AgentTaskStore(JsonRecordStore[AgentTask]):
    """Agent task collection persisted to ``agent-tasks.json``."""

    record_type = AgentTask
    file_name = AGENT_TASKS_FILE

    def get_by_pr(self, pr_number: int) -> list[AgentTask]:
        """All tasks working on the given pull request, in store order."""
        return [task for task in self._records if task.pull_request_number == pr_number]
