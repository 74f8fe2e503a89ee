"""Result values returned by remote mutating operations.

Remote calls are best-effort: a failure must never undo the local mutation
that preceded it. Instead of raising and relying on callers to suppress the
exception, providers return either ``Ok`` or ``Err`` and callers branch on the
variant explicitly::

    result = await provider.create_remote(title, body, [])
    if isinstance(result, Ok):
        store.update(issue.id, {"remote": ...})
    else:
        log.warning("remote_create_failed", error=result.error.message)

``unwrap()`` is available where raising is the desired behavior (for example
in CLI commands that have nothing to fall back to).
"""

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

from ideae.exceptions import RemoteOperationError

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Successful remote operation."""

    value: T

    @property
    def ok(self) -> bool:
        return True

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True)
class Err:
    """Failed remote operation, carrying the tool's diagnostic."""

    error: RemoteOperationError

    @property
    def ok(self) -> bool:
        return False

    def unwrap(self) -> None:
        raise self.error


Result = Union[Ok[T], Err]
