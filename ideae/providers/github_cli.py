"""GitHub provider implementation using the ``gh`` CLI."""

import json
from typing import Any

import structlog
from pydantic import ValidationError

from ideae.enums import IssueStatus, ProviderKind
from ideae.models.domain import Comment, Issue, RemoteIdentity
from ideae.providers.base import IssueProvider, parse_datetime

log = structlog.get_logger(__name__)

LIST_FIELDS = "number,title,body,state,labels,createdAt,updatedAt"


class GitHubCliProvider(IssueProvider):
    """GitHub implementation driven by ``gh``.

    GitHub specifics:
    - ``gh issue list --json`` reports states as "OPEN"/"CLOSED"
    - labels are objects with a ``name`` key
    - comments come from ``gh issue view <n> --json comments``
    """

    kind = ProviderKind.GITHUB

    async def list_remote(self) -> list[Issue]:
        log.info("remote_list", provider=self.kind.value, repo=self.repo)

        result = await self._query(
            ["issue", "list", "--json", LIST_FIELDS, "--limit", str(self.list_limit)],
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

        result = await self._query(["issue", "view", str(number), "--json", "comments"], "issue view")
        if result is None:
            return []

        try:
            data = json.loads(result.stdout)
            return [self._parse_comment(c) for c in data["comments"]]
        except (ValueError, KeyError, TypeError) as e:
            log.warning("remote_comments_unparsable", provider=self.kind.value, error=str(e))
            return []

    def _parse_issue(self, data: dict[str, Any]) -> Issue:
        """Map one ``gh issue list`` item onto an Issue.

        - 'OPEN' -> IssueStatus.OPEN, anything else -> IssueStatus.CLOSED
        - id is synthesized as 'gh-<number>'
        """
        number = int(data["number"])
        return Issue(
            id=self.kind.local_id(number),
            title=data["title"],
            body=data.get("body") or "",
            status=IssueStatus.OPEN if data["state"] == "OPEN" else IssueStatus.CLOSED,
            labels=[label["name"] for label in data.get("labels") or []],
            remote=RemoteIdentity(provider=self.kind, number=number),
            created_at=parse_datetime(data.get("createdAt")),
            updated_at=parse_datetime(data.get("updatedAt")),
        )

    @staticmethod
    def _parse_comment(data: dict[str, Any]) -> Comment:
        author = data.get("author") or {}
        return Comment(
            id=str(data["id"]),
            author=author.get("login", "unknown"),
            body=data.get("body") or "",
            created_at=parse_datetime(data.get("createdAt")),
        )
