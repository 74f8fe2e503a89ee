"""
Issue board: the presentation-side view of the issue store.

The board subscribes to the store and re-renders from the snapshot carried
by each change event, so no store method is ever wrapped or replaced.

Example:
    >>> board = IssueBoard(store)
    >>> store.add(Issue.new("Fix bug"))
    >>> board.lines()
    ['[ ] #a1b2c3d4    Fix bug']
    >>> board.close()
"""

from collections import deque
from dataclasses import dataclass

from ideae.enums import IssueStatus
from ideae.models.domain import Issue
from ideae.store.base import StoreEvent
from ideae.store.issues import IssueStore

MAX_MESSAGES = 100
MAX_TITLE_LENGTH = 50
ID_COLUMN_WIDTH = 12


@dataclass(frozen=True)
class BoardStats:
    total: int
    open: int
    closed: int
    synced: int
    local: int


def format_issue_line(issue: Issue) -> str:
    mark = "[x]" if issue.status == IssueStatus.CLOSED else "[ ]"
    title = issue.title
    if len(title) > MAX_TITLE_LENGTH:
        title = title[:MAX_TITLE_LENGTH].rstrip() + "..."
    return f"{mark} {issue.reference_token.ljust(ID_COLUMN_WIDTH)} {title}"


class IssueBoard:
    """Live snapshot of the issue store plus a short message log.

    Attributes:
        version: Incremented on every store change, for cheap redraw checks
    """

    def __init__(self, store: IssueStore) -> None:
        self._issues: tuple[Issue, ...] = tuple(store.records)
        self._messages: deque[str] = deque(maxlen=MAX_MESSAGES)
        self.version = 0
        self._unsubscribe = store.subscribe(self._on_change)

    def _on_change(self, event: StoreEvent[Issue]) -> None:
        self._issues = event.snapshot
        self.version += 1

    @property
    def issues(self) -> list[Issue]:
        return list(self._issues)

    def stats(self) -> BoardStats:
        closed = sum(1 for issue in self._issues if issue.status == IssueStatus.CLOSED)
        synced = sum(1 for issue in self._issues if issue.remote is not None)
        total = len(self._issues)
        return BoardStats(total=total, open=total - closed, closed=closed, synced=synced, local=total - synced)

    def lines(self, status: IssueStatus | None = None) -> list[str]:
        return [format_issue_line(issue) for issue in self._issues if status is None or issue.status == status]

    def add_message(self, message: str) -> None:
        self._messages.append(message)

    @property
    def messages(self) -> list[str]:
        return list(self._messages)

    def close(self) -> None:
        """Stop following the store."""
        self._unsubscribe()
