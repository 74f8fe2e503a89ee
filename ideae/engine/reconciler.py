"""
Reconciliation between the local issue store and a remote tracker.

The local store is the durable truth; the remote tracker is an optional
mirror. Every mutation is applied and saved locally first, then mirrored
best-effort. A failed remote call downgrades the outcome instead of rolling
anything back.

Startup Sync:
    ``sync()`` imports remote issues whose ``(provider, number)`` identity is
    not yet present locally and saves once if anything was added. Running it
    repeatedly against an unchanged remote listing changes nothing. Edits made
    on the remote after an issue was imported are not pulled.

Outcomes:
    Mutating methods return an ``ActionOutcome``::

        synced    local change saved, remote mirrored
        local     local change saved, nothing to mirror
        degraded  local change saved, remote call failed

    ``PersistenceError`` is the only failure that propagates from a mutation.

Example:
    >>> reconciler = Reconciler(store, GitHubCliProvider("owner/repo"))
    >>> await reconciler.sync()
    SyncReport(added=[...], error=None)
    >>> outcome = await reconciler.create_issue("Fix bug")
    >>> outcome.message
    'Created todo #42 on github'
"""

from dataclasses import dataclass, field
from enum import Enum

import structlog

from ideae.enums import IssueStatus
from ideae.exceptions import (
    DuplicateRemoteIdentityError,
    InvalidInputError,
    RecordNotFoundError,
    RemoteOperationError,
)
from ideae.models.domain import Comment, FileRef, Issue, RemoteIdentity
from ideae.models.result import Err
from ideae.providers.base import IssueProvider
from ideae.references import extract_file_refs
from ideae.store.issues import IssueStore

log = structlog.get_logger(__name__)


class OutcomeStatus(str, Enum):
    SYNCED = "synced"
    LOCAL = "local"
    DEGRADED = "degraded"

    def __str__(self) -> str:
        return self.value


@dataclass
class ActionOutcome:
    """Result of one user-facing mutation.

    Attributes:
        issue: The record after the mutation (the removed record for removals)
        status: How far the change got
        message: One-line summary suitable for a status bar
        error: The remote failure behind a degraded outcome
    """

    issue: Issue
    status: OutcomeStatus
    message: str
    error: RemoteOperationError | None = None

    @property
    def degraded(self) -> bool:
        return self.status == OutcomeStatus.DEGRADED


@dataclass
class SyncReport:
    added: list[Issue] = field(default_factory=list)
    error: str | None = None


def merge_file_refs(existing: list[FileRef], extra: list[FileRef]) -> list[FileRef]:
    """Concatenate file references, dropping repeats of the same path and range."""
    seen: set[str] = set()
    merged: list[FileRef] = []
    for ref in [*existing, *extra]:
        if str(ref) not in seen:
            seen.add(str(ref))
            merged.append(ref)
    return merged


class Reconciler:
    """Apply issue mutations locally first and mirror them to the remote.

    Attributes:
        store: Local issue store, already loaded
        provider: Remote tracker, or None for local-only operation
    """

    def __init__(self, store: IssueStore, provider: IssueProvider | None = None) -> None:
        self.store = store
        self.provider = provider

    def resolve(self, ref: str) -> Issue:
        """Find an issue by ``#number``, id, or id prefix.

        Raises:
            RecordNotFoundError: If nothing matches
        """
        issue = self.store.find(ref)
        if issue is None:
            raise RecordNotFoundError(ref)
        return issue

    async def sync(self) -> SyncReport:
        """Import remote issues that are not yet tracked locally.

        Never raises: any failure is logged and reported in
        ``SyncReport.error`` so the caller can carry on offline.
        """
        report = SyncReport()
        if self.provider is None:
            return report

        kind = self.provider.kind
        try:
            known = self.store.remote_numbers(kind)
            remote_issues = await self.provider.list_remote()

            for issue in remote_issues:
                if issue.remote is None:
                    continue
                if issue.remote.number in known or issue.id in self.store:
                    continue
                self.store.add(issue)
                known.add(issue.remote.number)
                report.added.append(issue)

            if report.added:
                await self.store.save()
        except Exception as e:
            log.warning("sync_failed", provider=kind.value, error=str(e), exc_info=True)
            report.error = str(e)
            return report

        log.info("sync_completed", provider=kind.value, fetched=len(remote_issues), added=len(report.added))
        return report

    async def create_issue(
        self,
        title: str,
        body: str = "",
        labels: list[str] | None = None,
        files: list[FileRef] | None = None,
    ) -> ActionOutcome:
        """Create an issue locally, then on the remote tracker if one is configured.

        ``@path`` references in the body are recorded as the issue's files.

        Raises:
            InvalidInputError: If the title is empty
            PersistenceError: If the local save fails
        """
        title = title.strip()
        if not title:
            raise InvalidInputError("Title is required")

        _, body_refs = extract_file_refs(body)
        issue = Issue.new(title, body=body, labels=labels, files=merge_file_refs(files or [], body_refs))
        self.store.add(issue)
        await self.store.save()
        log.info("issue_created", issue_id=issue.id)

        if self.provider is None:
            return ActionOutcome(issue, OutcomeStatus.LOCAL, f"Created todo {issue.reference_token}")

        return await self._mirror_create(issue, verb="Created todo")

    async def update_issue(self, ref: str, title: str | None = None, body: str | None = None) -> ActionOutcome:
        """Edit title and/or body locally. Remote edits are not mirrored.

        A new body replaces the issue's files with the ``@`` references it contains.
        """
        issue = self.resolve(ref)

        patch: dict[str, object] = {}
        if title is not None:
            if not title.strip():
                raise InvalidInputError("Title is required")
            patch["title"] = title.strip()
        if body is not None:
            _, body_refs = extract_file_refs(body)
            patch["body"] = body
            patch["files"] = merge_file_refs([], body_refs)

        if not patch:
            return ActionOutcome(issue, OutcomeStatus.LOCAL, f"Nothing to update for {issue.reference_token}")

        updated = self.store.update(issue.id, patch)
        await self.store.save()
        assert updated is not None
        return ActionOutcome(updated, OutcomeStatus.LOCAL, f"Updated {updated.reference_token}")

    async def set_status(self, ref: str, status: IssueStatus) -> ActionOutcome:
        """Close or reopen an issue, mirroring to the remote when it is linked there."""
        issue = self.resolve(ref)
        verb = "Closed" if status == IssueStatus.CLOSED else "Reopened"

        if issue.status == status:
            return ActionOutcome(issue, OutcomeStatus.LOCAL, f"{issue.reference_token} is already {status}")

        updated = self.store.update(issue.id, {"status": status})
        await self.store.save()
        assert updated is not None
        log.info("issue_status_changed", issue_id=updated.id, status=status.value)

        if self.provider is None or not updated.is_linked_to(self.provider.kind):
            return ActionOutcome(updated, OutcomeStatus.LOCAL, f"{verb} {updated.reference_token}")

        number = updated.remote_number
        assert number is not None
        if status == IssueStatus.CLOSED:
            result = await self.provider.close_remote(number)
        else:
            result = await self.provider.reopen_remote(number)

        if isinstance(result, Err):
            log.warning("remote_status_failed", issue_id=updated.id, number=number, error=result.error.message)
            return ActionOutcome(
                updated, OutcomeStatus.DEGRADED, f"{verb} locally (remote sync failed)", error=result.error
            )

        return ActionOutcome(
            updated, OutcomeStatus.SYNCED, f"{verb} {updated.reference_token} on {self.provider.kind.value}"
        )

    async def toggle_status(self, ref: str) -> ActionOutcome:
        issue = self.resolve(ref)
        return await self.set_status(issue.id, issue.status.toggled())

    async def push_issue(self, ref: str) -> ActionOutcome:
        """Mirror a local-only issue to the configured remote tracker."""
        issue = self.resolve(ref)

        if self.provider is None:
            return ActionOutcome(issue, OutcomeStatus.LOCAL, "No remote provider configured")
        if issue.remote is not None:
            return ActionOutcome(
                issue, OutcomeStatus.LOCAL, f"{issue.reference_token} is already linked to {issue.remote.provider}"
            )

        return await self._mirror_create(issue, verb="Pushed")

    async def remove_issue(self, ref: str) -> ActionOutcome:
        """Delete an issue from the local store. The remote issue is left alone."""
        issue = self.resolve(ref)
        self.store.remove(issue.id)
        await self.store.save()
        log.info("issue_removed", issue_id=issue.id)
        return ActionOutcome(issue, OutcomeStatus.LOCAL, f"Removed {issue.reference_token}")

    async def fetch_comments(self, ref: str) -> list[Comment]:
        """Comments of a linked issue; empty for local-only issues or on failure."""
        issue = self.resolve(ref)
        if self.provider is None or not issue.is_linked_to(self.provider.kind):
            return []
        number = issue.remote_number
        assert number is not None
        return await self.provider.fetch_comments(number)

    async def _mirror_create(self, issue: Issue, verb: str) -> ActionOutcome:
        assert self.provider is not None
        kind = self.provider.kind

        result = await self.provider.create_remote(issue.title, issue.body, issue.labels)
        if isinstance(result, Err):
            log.warning("remote_create_failed", issue_id=issue.id, error=result.error.message)
            return ActionOutcome(
                issue,
                OutcomeStatus.DEGRADED,
                f"{verb} {issue.reference_token} (remote sync failed)",
                error=result.error,
            )

        number = result.value
        try:
            updated = self.store.update(issue.id, {"remote": RemoteIdentity(provider=kind, number=number)})
        except DuplicateRemoteIdentityError as e:
            log.warning("remote_identity_conflict", issue_id=issue.id, number=number, holder=e.holder_id)
            return ActionOutcome(
                issue,
                OutcomeStatus.DEGRADED,
                f"{verb} {issue.reference_token} (remote sync failed)",
                error=RemoteOperationError(e.message),
            )

        await self.store.save()
        assert updated is not None
        log.info("issue_mirrored", issue_id=issue.id, provider=kind.value, number=number)

        if issue.status == IssueStatus.CLOSED:
            closed = await self.provider.close_remote(number)
            if isinstance(closed, Err):
                log.warning("remote_close_failed", issue_id=issue.id, number=number, error=closed.error.message)

        return ActionOutcome(updated, OutcomeStatus.SYNCED, f"{verb} {updated.reference_token} on {kind.value}")
