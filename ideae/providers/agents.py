"""
Coding-agent tasks on GitHub, driven by ``gh agent-task``.

``gh agent-task list`` prints one tab-delimited line per task::

    Fix download button on plans page\t#3\towner/repo\tReady for review\t2026-02-14T10:14:01Z

and ``gh agent-task create`` prints the session URL::

    https://github.com/owner/repo/pull/123/agent-sessions/abc-123

GitLab has no equivalent, so only a GitHub implementation exists.
"""

import re

import structlog

from ideae.enums import AgentTaskStatus, ProviderKind
from ideae.exceptions import RemoteOperationError
from ideae.models.domain import AgentTask, utc_now
from ideae.models.result import Err, Ok, Result
from ideae.providers.base import parse_datetime
from ideae.utils.async_subprocess import run_command

log = structlog.get_logger(__name__)

DEFAULT_AGENT_LIST_LIMIT = 30

TASK_LINE_PATTERN = re.compile(r"^(.+?)\t#(\d+)\t(.+?)\t(.+?)\t(.+)$")
PR_NUMBER_PATTERN = re.compile(r"pull/(\d+)")
SESSION_ID_PATTERN = re.compile(r"agent-sessions/([a-zA-Z0-9-]+)")


def map_task_status(text: str) -> AgentTaskStatus:
    """Fold gh's human-readable task status into AgentTaskStatus."""
    if "Ready for review" in text or "Merged" in text:
        return AgentTaskStatus.COMPLETED
    if "Draft" in text:
        return AgentTaskStatus.DRAFT
    if "Closed" in text or "Failed" in text:
        return AgentTaskStatus.FAILED
    return AgentTaskStatus.IN_PROGRESS


class AgentTaskProvider:
    """GitHub Copilot agent tasks for one repository.

    Attributes:
        repo: Repository as "owner/repo"
    """

    kind = ProviderKind.GITHUB

    def __init__(self, repo: str) -> None:
        self.repo = repo

    async def _run(self, *args: str) -> tuple[str, str, int]:
        stdout, stderr, code = await run_command("gh", "agent-task", *args, "--repo", self.repo, check=False)
        return str(stdout), stderr, code

    async def list_tasks(self, limit: int = DEFAULT_AGENT_LIST_LIMIT) -> list[AgentTask]:
        """List agent tasks. Returns an empty list on any failure."""
        try:
            stdout, stderr, code = await self._run("list", "--limit", str(limit))
        except OSError as e:
            log.warning("agent_list_failed", error=str(e))
            return []

        if code != 0:
            log.warning("agent_list_failed", returncode=code, stderr=stderr.strip())
            return []

        return self.parse_task_list(stdout)

    def parse_task_list(self, output: str) -> list[AgentTask]:
        tasks: list[AgentTask] = []
        for line in output.strip().splitlines():
            if not line.strip():
                continue
            match = TASK_LINE_PATTERN.match(line)
            if not match:
                log.debug("agent_list_line_skipped", line=line)
                continue

            title, pr_number, repository, status, created_at = match.groups()
            try:
                created = parse_datetime(created_at.strip())
            except ValueError:
                created = utc_now()

            tasks.append(
                AgentTask(
                    id=f"pr-{pr_number}",
                    title=title or "Untitled task",
                    pull_request_number=int(pr_number),
                    repository=repository or self.repo,
                    status=map_task_status(status),
                    created_at=created,
                )
            )
        return tasks

    async def create_task(self, description: str, issue_number: int | None = None) -> Result[AgentTask]:
        """Start a new agent task, optionally pointing it at an issue.

        Returns:
            Ok(task) with the session id and pull request parsed from the CLI
            output, or Err carrying the CLI diagnostic
        """
        prompt = description
        if issue_number:
            prompt = f"{description}\n\nRelated issue: #{issue_number}"

        command = ["gh", "agent-task", "create", prompt, "--repo", self.repo]
        log.info("agent_create", repo=self.repo, issue_number=issue_number)
        try:
            stdout, stderr, code = await self._run("create", prompt)
        except OSError as e:
            return Err(RemoteOperationError("gh agent-task create failed", command=command, stderr=str(e)))

        if code != 0:
            return Err(
                RemoteOperationError("gh agent-task create failed", command=command, stderr=stderr, returncode=code)
            )

        pr_match = PR_NUMBER_PATTERN.search(stdout)
        pr_number = int(pr_match.group(1)) if pr_match else None
        session_match = SESSION_ID_PATTERN.search(stdout)
        if session_match:
            session_id = session_match.group(1)
        else:
            session_id = f"pr-{pr_number or int(utc_now().timestamp() * 1000)}"

        return Ok(
            AgentTask(
                id=session_id,
                title=description,
                pull_request_number=pr_number,
                repository=self.repo,
                status=AgentTaskStatus.IN_PROGRESS,
            )
        )

    async def view_task(self, session_id: str) -> Result[str]:
        """Fetch the log of one agent session."""
        command = ["gh", "agent-task", "view", session_id, "--repo", self.repo, "--log"]
        try:
            stdout, stderr, code = await run_command(*command, check=False)
        except OSError as e:
            return Err(RemoteOperationError("gh agent-task view failed", command=command, stderr=str(e)))

        if code != 0:
            return Err(
                RemoteOperationError("gh agent-task view failed", command=command, stderr=stderr, returncode=code)
            )
        return Ok(str(stdout))
