"""
Inline ``#issue`` and ``@file`` suggestions for text fields.

The engine watches the end of the text being edited. A trailing ``#query``
offers matching issues; a trailing ``@query`` offers matching project files.

States::

    Idle ──update()──▶ Pending(kind, seq, field) ──lookup done──▶ Showing(...)
      ▲                                                              │
      └─────────────── accept() / cancel() / focus(other) ───────────┘

Lookups may finish out of order. Every ``update()`` bumps a sequence counter
and a lookup only publishes its result if the counter still holds the value
it captured; otherwise the result is dropped. ``cancel()`` and ``focus()``
bump the counter too, so a lookup still running when suggestions are
dismissed cannot bring them back.

Example:
    >>> engine = SuggestionEngine(store, GitFileLister(cwd))
    >>> await engine.update("check @sr", field="body")
    Showing(kind=<SuggestionKind.FILE: 'file'>, items=(...), selected_index=0, field='body')
    >>> engine.accept("check @sr", field="body")
    'check @src/app.ts '
"""

import re
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Union

import structlog

from ideae.enums import IssueStatus
from ideae.models.domain import Issue
from ideae.store.issues import IssueStore
from ideae.suggestions.files import DEFAULT_FILE_LIMIT, FileLister

log = structlog.get_logger(__name__)

DEFAULT_ISSUE_LIMIT = 10
DESCRIPTION_LENGTH = 50

TITLE_FIELD = "title"
BODY_FIELD = "body"

ISSUE_TRIGGER = re.compile(r"#(\w*)\Z", re.ASCII)
FILE_TRIGGER = re.compile(r"@([\w./-]*)\Z", re.ASCII)


class SuggestionKind(str, Enum):
    ISSUE = "issue"
    FILE = "file"

    def __str__(self) -> str:
        return self.value

    @property
    def sigil(self) -> str:
        return "#" if self == SuggestionKind.ISSUE else "@"

    @property
    def trigger(self) -> re.Pattern[str]:
        return ISSUE_TRIGGER if self == SuggestionKind.ISSUE else FILE_TRIGGER


@dataclass(frozen=True)
class Suggestion:
    """One entry of a suggestion list.

    Attributes:
        kind: Issue or file
        value: Text inserted after the sigil on accept
        label: Text shown in the list
        description: Secondary text (issue body preview)
    """

    kind: SuggestionKind
    value: str
    label: str
    description: str = ""

    @property
    def token(self) -> str:
        return f"{self.kind.sigil}{self.value} "

    @classmethod
    def for_issue(cls, issue: Issue) -> "Suggestion":
        mark = "[x]" if issue.status == IssueStatus.CLOSED else "[ ]"
        description = issue.body[:DESCRIPTION_LENGTH]
        if len(issue.body) > DESCRIPTION_LENGTH:
            description += "..."
        return cls(
            kind=SuggestionKind.ISSUE,
            value=issue.display_id,
            label=f"{mark} {issue.reference_token} {issue.title}",
            description=description,
        )

    @classmethod
    def for_file(cls, path: str) -> "Suggestion":
        return cls(kind=SuggestionKind.FILE, value=path, label=path)


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class Pending:
    kind: SuggestionKind
    seq: int
    field: str


@dataclass(frozen=True)
class Showing:
    kind: SuggestionKind
    items: tuple[Suggestion, ...]
    selected_index: int
    field: str

    @property
    def selected(self) -> Suggestion:
        return self.items[self.selected_index]


SuggestionState = Union[Idle, Pending, Showing]
SuggestionListener = Callable[[SuggestionState], None]

IDLE = Idle()


def match_issues(issues: list[Issue], query: str, limit: int = DEFAULT_ISSUE_LIMIT) -> list[Issue]:
    """Issues whose id, title, or remote number contains ``query``, in store order."""
    needle = query.lower()
    matches = [
        issue
        for issue in issues
        if needle in issue.id.lower()
        or needle in issue.title.lower()
        or (issue.remote_number is not None and needle in str(issue.remote_number))
    ]
    return matches[:limit]


class SuggestionEngine:
    """Suggestion state machine shared by the title and body fields.

    Attributes:
        store: Issue store queried for ``#`` suggestions
        file_lister: Source of paths for ``@`` suggestions
    """

    def __init__(
        self,
        store: IssueStore,
        file_lister: FileLister,
        issue_limit: int = DEFAULT_ISSUE_LIMIT,
        file_limit: int = DEFAULT_FILE_LIMIT,
    ) -> None:
        self.store = store
        self.file_lister = file_lister
        self.issue_limit = issue_limit
        self.file_limit = file_limit
        self._seq = 0
        self._state: SuggestionState = IDLE
        self._listeners: list[SuggestionListener] = []

    @property
    def state(self) -> SuggestionState:
        return self._state

    async def update(self, text: str, field: str = TITLE_FIELD) -> SuggestionState:
        """React to an edit of ``field`` whose full content is now ``text``."""
        self._seq += 1
        seq = self._seq

        issue_match = ISSUE_TRIGGER.search(text)
        if issue_match:
            self._set_state(Pending(SuggestionKind.ISSUE, seq, field))
            issues = match_issues(self.store.records, issue_match.group(1), self.issue_limit)
            items = [Suggestion.for_issue(issue) for issue in issues]
            return self._publish(seq, SuggestionKind.ISSUE, items, field)

        file_match = FILE_TRIGGER.search(text)
        if file_match:
            self._set_state(Pending(SuggestionKind.FILE, seq, field))
            try:
                paths = await self.file_lister.list_files(file_match.group(1))
            except Exception as e:
                log.debug("file_suggestions_failed", error=str(e))
                paths = []
            items = [Suggestion.for_file(path) for path in paths[: self.file_limit]]
            return self._publish(seq, SuggestionKind.FILE, items, field)

        self._set_state(IDLE)
        return self._state

    def _publish(self, seq: int, kind: SuggestionKind, items: list[Suggestion], field: str) -> SuggestionState:
        if seq != self._seq:
            log.debug("suggestions_discarded", kind=kind.value, seq=seq, current=self._seq)
            return self._state

        if not items:
            self._set_state(IDLE)
        else:
            self._set_state(Showing(kind=kind, items=tuple(items), selected_index=0, field=field))
        return self._state

    def move(self, delta: int) -> None:
        """Move the selection, wrapping around at either end."""
        state = self._state
        if not isinstance(state, Showing):
            return
        index = (state.selected_index + delta) % len(state.items)
        self._set_state(Showing(kind=state.kind, items=state.items, selected_index=index, field=state.field))

    def accept(self, text: str, field: str, index: int | None = None) -> str:
        """Insert the selected suggestion into ``text`` and dismiss the list.

        The trailing trigger (``#abc`` or ``@sr``) is replaced by the
        suggestion token; without one, the token is appended.

        Returns:
            The new text, or ``text`` unchanged when nothing is showing for
            ``field`` or ``index`` is out of range
        """
        state = self._state
        if not isinstance(state, Showing):
            return text

        self._dismiss()
        if state.field != field:
            log.debug("suggestion_field_mismatch", showing=state.field, accepted=field)
            return text

        idx = state.selected_index if index is None else index
        if idx < 0 or idx >= len(state.items):
            return text

        token = state.items[idx].token
        if state.kind.trigger.search(text):
            return state.kind.trigger.sub(lambda _: token, text, count=1)
        return text + token

    def cancel(self) -> None:
        self._dismiss()

    def focus(self, field: str) -> None:
        """Switch the active field. Suggestions of any other field are dismissed."""
        state = self._state
        if isinstance(state, (Pending, Showing)) and state.field != field:
            self._dismiss()

    def _dismiss(self) -> None:
        self._seq += 1
        self._set_state(IDLE)

    def subscribe(self, listener: SuggestionListener) -> Callable[[], None]:
        """Register a state-change listener. Returns the unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _set_state(self, state: SuggestionState) -> None:
        if state == self._state:
            return
        self._state = state
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception:
                log.error("suggestion_listener_failed", exc_info=True)
