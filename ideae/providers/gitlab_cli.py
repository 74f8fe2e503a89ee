"""GitLab provider implementation using the ``glab`` CLI."""

import json
from typing import Any

import structlog
from pydantic import ValidationError

from ideae.enums import IssueStatus, ProviderKind
from ideae.models.domain import Comment, Issue, RemoteIdentity
from ideae.providers.base import IssueProvider, parse_datetime

log = structlog.get_logger(__name__)


class GitLabCliProvider(IssueProvider):
    """GitLab implementation driven by ``glab``.

    GitLab differences from GitHub:
    - Uses 'iid' (project-scoped number) for issue numbers
    - Uses 'description' instead of 'body', both in output and as the
      create flag
    - Uses 'opened'/'closed' states
    - Comments are 'notes', fetched through ``glab api``; system notes
      (label changes, assignments) are filtered out
    """

    kind = ProviderKind.GITLAB
    body_flag = "--description"

    async def list_remote(self) -> list[Issue]:
        log.info("remote_list", provider=self.kind.value, repo=self.repo)

        result = await self._query(
            ["issue", "list", "--output", "json", "--per-page", str(self.list_limit)],
            "issue list",
        )
        if result is None:
            return []

        try:
            items = json.loads(result.stdout)
            return [self._parse_issue(item) for item in items]
        except (ValueError, KeyError, TypeError, ValidationError) as e:
            log.warning("remote_list_unparsable", provider=self.kind.value, error=str(e))
            return []

    async def fetch_comments(self, number: int) -> list[Comment]:
        log.info("remote_comments", provider=self.kind.value, number=number)

        result = await self._query(
            ["api", f"/projects/:id/issues/{number}/notes", "--method", "GET"],
            "api notes",
        )
        if result is None:
            return []

        try:
            items = json.loads(result.stdout)
            return [self._parse_comment(note) for note in items if not note.get("system", False)]
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            log.warning("remote_comments_unparsable", provider=self.kind.value, error=str(e))
            return []

    def _parse_issue(self, data: dict[str, Any]) -> Issue:
        """Map one ``glab issue list`` item onto an Issue.

        - 'opened' -> IssueStatus.OPEN, anything else -> IssueStatus.CLOSED
        - 'iid' is the issue number, id is synthesized as 'gl-<iid>'
        """
        number = int(data["iid"])
        return Issue(
            id=self.kind.local_id(number),
            title=data["title"],
            body=data.get("description") or "",
            status=IssueStatus.OPEN if data["state"] == "opened" else IssueStatus.CLOSED,
            labels=list(data.get("labels") or []),
            remote=RemoteIdentity(provider=self.kind, number=number),
            created_at=parse_datetime(data.get("created_at")),
            updated_at=parse_datetime(data.get("updated_at")),
        )

    @staticmethod
    def _parse_comment(data: dict[str, Any]) -> Comment:
        author = data.get("author") or {}
        return Comment(
            id=str(data["id"]),
            author=author.get("username", "unknown"),
            body=data.get("body") or "",
            created_at=parse_datetime(data.get("created_at")),
        )
