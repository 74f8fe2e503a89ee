"""
Remote provider contract.

A provider mirrors local issues to one remote tracker by shelling out to that
tracker's command-line tool (``gh`` for GitHub, ``glab`` for GitLab) and
mapping its output onto the domain models.

The contract splits operations by how failures are reported:

    Read path (never raises, degrades to "no data"):
        - list_remote() -> list[Issue]         ([] on any failure)
        - fetch_comments(number) -> list[Comment]   ([] on any failure)

    Mutating path (returns a Result, never raises for tool failures):
        - create_remote(title, body, labels) -> Result[int]
        - close_remote(number) -> Result[None]
        - reopen_remote(number) -> Result[None]

Implementations are responsible for:
    - folding the tracker's status vocabulary into open/closed
      (GitHub's "OPEN"/"CLOSED", GitLab's "opened"/"closed")
    - synthesizing local ids from remote numbers with a provider prefix
      ("gh-42", "gl-42") so ids never collide across providers
"""

import re
from abc import ABC, abstractmethod
from datetime import UTC, datetime
from typing import ClassVar

import structlog

from ideae.enums import ProviderKind
from ideae.exceptions import RemoteOperationError
from ideae.models.domain import CommandResult, Comment, Issue
from ideae.models.result import Err, Ok, Result
from ideae.utils.async_subprocess import run_command

log = structlog.get_logger(__name__)

DEFAULT_LIST_LIMIT = 50

ISSUE_URL_PATTERN = re.compile(r"/issues/(\d+)")


def parse_datetime(value: str | None) -> datetime:
    """Parse an ISO timestamp from CLI output, tolerating a trailing ``Z``."""
    if not value:
        return datetime.now(UTC)
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


class IssueProvider(ABC):
    """Abstract base class for CLI-backed issue tracker providers.

    Every command is run as ``<cli> <args...> --repo <repo>``. Close, reopen
    and create share one implementation because both CLIs accept the same
    verbs; listing and comments differ per tracker and are left to subclasses.

    Attributes:
        repo: Repository path on the tracker, e.g. "owner/repo" or
            "group/subgroup/project"
        list_limit: Maximum number of issues fetched by list_remote
    """

    kind: ClassVar[ProviderKind]
    body_flag: ClassVar[str] = "--body"

    def __init__(self, repo: str, list_limit: int = DEFAULT_LIST_LIMIT) -> None:
        self.repo = repo
        self.list_limit = list_limit

    @property
    def cli(self) -> str:
        return self.kind.cli

    def __repr__(self) -> str:
        return f"{type(self).__name__}(repo={self.repo!r})"

    def command_line(self, args: list[str]) -> list[str]:
        return [self.cli, *args, "--repo", self.repo]

    async def execute(self, args: list[str]) -> CommandResult:
        """Run the provider CLI with ``args`` and capture its output.

        Raises:
            OSError: If the CLI cannot be started (e.g. not installed)
        """
        stdout, stderr, code = await run_command(*self.command_line(args), check=False)
        return CommandResult(stdout=str(stdout), stderr=stderr, code=code)

    async def _mutate(self, args: list[str], action: str) -> Result[CommandResult]:
        command = self.command_line(args)
        try:
            result = await self.execute(args)
        except OSError as e:
            return Err(RemoteOperationError(f"{self.cli} {action} failed", command=command, stderr=str(e)))

        if not result.ok:
            return Err(
                RemoteOperationError(
                    f"{self.cli} {action} failed",
                    command=command,
                    stderr=result.stderr,
                    returncode=result.code,
                )
            )
        return Ok(result)

    async def _query(self, args: list[str], action: str) -> CommandResult | None:
        try:
            result = await self.execute(args)
        except OSError as e:
            log.warning("remote_query_failed", provider=self.kind.value, action=action, error=str(e))
            return None

        if not result.ok:
            log.warning(
                "remote_query_failed",
                provider=self.kind.value,
                action=action,
                returncode=result.code,
                stderr=result.stderr.strip(),
            )
            return None
        return result

    async def create_remote(self, title: str, body: str, labels: list[str]) -> Result[int]:
        """Create an issue on the tracker.

        Returns:
            Ok(number) with the tracker-assigned issue number, or Err when the
            CLI fails or prints no recognisable issue URL
        """
        log.info("remote_create", provider=self.kind.value, title=title)

        args = ["issue", "create", "--title", title, self.body_flag, body]
        for label in labels:
            args.extend(["--label", label])

        outcome = await self._mutate(args, "issue create")
        if isinstance(outcome, Err):
            return outcome

        match = ISSUE_URL_PATTERN.search(outcome.value.stdout)
        if not match:
            return Err(
                RemoteOperationError(
                    f"{self.cli} issue create returned no issue number",
                    command=self.command_line(args),
                    stderr=outcome.value.stdout,
                    returncode=outcome.value.code,
                )
            )
        return Ok(int(match.group(1)))

    async def close_remote(self, number: int) -> Result[None]:
        log.info("remote_close", provider=self.kind.value, number=number)
        outcome = await self._mutate(["issue", "close", str(number)], "issue close")
        return outcome if isinstance(outcome, Err) else Ok(None)

    async def reopen_remote(self, number: int) -> Result[None]:
        log.info("remote_reopen", provider=self.kind.value, number=number)
        outcome = await self._mutate(["issue", "reopen", str(number)], "issue reopen")
        return outcome if isinstance(outcome, Err) else Ok(None)

    @abstractmethod
    async def list_remote(self) -> list[Issue]:
        """Fetch up to ``list_limit`` remote issues as local records.

        Returns:
            Issues carrying their remote identity and a synthesized id, or an
            empty list if anything goes wrong
        """
        pass

    @abstractmethod
    async def fetch_comments(self, number: int) -> list[Comment]:
        """Fetch the comments of one remote issue.

        Returns:
            Comments in tracker order, or an empty list if anything goes wrong
        """
        pass
