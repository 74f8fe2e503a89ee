"""Issue store: the local source of truth for tracked issues."""

from ideae.enums import ProviderKind
from ideae.exceptions import DuplicateRemoteIdentityError
from ideae.models.domain import Issue
from ideae.store.base import JsonRecordStore

ISSUES_FILE = "issues.json"


class IssueStore(JsonRecordStore[Issue]):
    """Ordered issue collection persisted to ``issues.json``.

    On top of the base store contract, no two issues may carry the same
    ``(provider, number)`` remote identity.

    Example:
        >>> store = IssueStore(".ideae")
        >>> await store.load()
        >>> store.find("#42")
        Issue(id='gh-42', ...)
    """

    record_type = Issue
    file_name = ISSUES_FILE

    def remote_numbers(self, provider: ProviderKind) -> set[int]:
        """Remote numbers already linked for one provider."""
        return {
            issue.remote.number
            for issue in self._records
            if issue.remote is not None and issue.remote.provider == provider
        }

    def find(self, ref: str) -> Issue | None:
        """Resolve a user-supplied reference to an issue.

        Accepts the forms users see on screen: ``#42`` or ``42`` (remote
        number), a full id, or an unambiguous id prefix such as ``a1b2``.

        Returns:
            The matching issue, or None when nothing (or more than one issue)
            matches
        """
        token = ref.strip().removeprefix("#")
        if not token:
            return None

        exact = self.get(token)
        if exact is not None:
            return exact

        if token.isdigit():
            number = int(token)
            for issue in self._records:
                if issue.remote_number == number:
                    return issue

        prefixed = [issue for issue in self._records if issue.id.startswith(token)]
        if len(prefixed) == 1:
            return prefixed[0]
        return None

    def _check_record(self, record: Issue, exclude_id: str | None) -> None:
        if record.remote is None:
            return
        for other in self._records:
            if other.id == exclude_id or other.id == record.id:
                continue
            if other.remote is not None and other.remote.key == record.remote.key:
                raise DuplicateRemoteIdentityError(record.remote.provider.value, record.remote.number, other.id)
