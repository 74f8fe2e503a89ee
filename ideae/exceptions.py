"""Custom exception hierarchy for ideae.

Only two kinds of failure are meant to reach the user: persistence failures
(the backing file could not be written) and remote mutation failures (a
create/close/reopen call against the remote tracker failed). Everything on the
read path degrades to "no data" instead of raising.

Exception Hierarchy:
    IdeaeError (base)
    ├── ConfigurationError
    ├── InvalidInputError
    ├── StoreError
    │   ├── DuplicateIdError
    │   ├── DuplicateRemoteIdentityError
    │   ├── PersistenceError
    │   └── LoadCorruptionError
    ├── RecordNotFoundError
    ├── RemoteOperationError
    ├── ProviderNotSupportedError
    └── GitDiscoveryError

Example Usage:
    >>> from ideae.exceptions import PersistenceError
    >>> try:
    ...     await store.save()
    ... except PersistenceError as e:
    ...     click.echo(f"Error: {e.message}", err=True)
"""

from pathlib import Path


class IdeaeError(Exception):
    """Base exception for all ideae errors.

    Attributes:
        message: Human-readable error description
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ConfigurationError(IdeaeError):
    """Configuration file is missing, unreadable, or invalid."""

    pass


class InvalidInputError(IdeaeError):
    """User-supplied input was rejected, e.g. an empty title."""

    pass


class StoreError(IdeaeError):
    """Base class for record store errors."""

    pass


class DuplicateIdError(StoreError):
    """A record with the same id is already present in the store.

    Attributes:
        record_id: The conflicting id
    """

    def __init__(self, record_id: str) -> None:
        self.record_id = record_id
        super().__init__(f"Record already exists: {record_id}")


class DuplicateRemoteIdentityError(StoreError):
    """Another record already carries the same (provider, number) pair.

    Attributes:
        provider: Provider kind of the conflicting identity
        number: Remote issue number of the conflicting identity
        holder_id: Id of the record that already holds the identity
    """

    def __init__(self, provider: str, number: int, holder_id: str) -> None:
        self.provider = provider
        self.number = number
        self.holder_id = holder_id
        super().__init__(f"Remote issue {provider}#{number} is already linked to {holder_id}")


class PersistenceError(StoreError):
    """Writing the backing file failed.

    The in-memory collection is still correct when this is raised; only the
    file on disk is stale.

    Attributes:
        path: Backing file that could not be written
    """

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to save {path}: {reason}")


class LoadCorruptionError(StoreError):
    """Backing file could not be read or parsed.

    Raised internally while loading and recovered by the store, which resets
    to an empty collection.
    """

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot load {path}: {reason}")


class RecordNotFoundError(IdeaeError):
    """No record matches the given reference."""

    def __init__(self, ref: str) -> None:
        self.ref = ref
        super().__init__(f"No issue matches '{ref}'")


class RemoteOperationError(IdeaeError):
    """A mutating call against the remote tracker failed.

    Carries the diagnostic text produced by the external CLI so it can be
    shown or logged as-is.

    Attributes:
        message: Summary of what failed
        command: The command line that was executed, if any
        stderr: Diagnostic output of the external tool
        returncode: Exit code of the external tool, if it ran
    """

    def __init__(
        self,
        message: str,
        command: list[str] | None = None,
        stderr: str = "",
        returncode: int | None = None,
    ) -> None:
        self.command = command or []
        self.stderr = stderr
        self.returncode = returncode

        full_message = message
        if stderr.strip():
            full_message = f"{message}: {stderr.strip()}"

        super().__init__(full_message)
        self.message = full_message


class ProviderNotSupportedError(IdeaeError):
    """Requested capability is not available for this provider kind."""

    pass


class GitDiscoveryError(IdeaeError):
    """The git remote could not be inspected.

    Attributes:
        hint: Optional hint for resolution
    """

    def __init__(self, message: str, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint = hint

    def __str__(self) -> str:
        if self.hint:
            return f"{self.message}\n\nHint: {self.hint}"
        return self.message
