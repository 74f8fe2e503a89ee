"""
Ordered, JSON-backed record collections.

This module provides ``JsonRecordStore``, the shared implementation behind the
issue store and the agent task store. A store keeps an ordered in-memory list
of Pydantic records and mirrors it to a single backing file.

File Structure:
    Each store owns one file inside the data directory, holding a
    pretty-printed JSON array of records in insertion order::

        .ideae/
        ├── .gitkeep
        ├── issues.json
        └── agent-tasks.json

Durability:
    Mutations (``add``/``update``/``remove``) only touch memory. A change is
    durable once ``save()`` has returned. ``save()`` writes to a temporary
    file and renames it over the target, so a crash never leaves a
    half-written array behind. Concurrent writers in other processes are not
    coordinated: the last ``save()`` wins.

Change Notifications:
    Presentation code subscribes to a store instead of wrapping its methods::

        unsubscribe = store.subscribe(lambda event: refresh(event.snapshot))
        store.add(issue)    # listener receives StoreEvent(kind=ADDED, ...)
        unsubscribe()

Example:
    >>> store = IssueStore(".ideae")
    >>> await store.load()
    >>> store.add(Issue.new("Fix bug"))
    >>> await store.save()
"""

from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, ClassVar, Generic, TypeVar

import aiofiles
import structlog
from pydantic import BaseModel, TypeAdapter, ValidationError

from ideae.exceptions import DuplicateIdError, LoadCorruptionError, PersistenceError
from ideae.models.domain import utc_now

log = structlog.get_logger(__name__)

R = TypeVar("R", bound=BaseModel)

MARKER_FILE = ".gitkeep"


class StoreEventKind(str, Enum):
    ADDED = "added"
    UPDATED = "updated"
    REMOVED = "removed"
    LOADED = "loaded"


@dataclass(frozen=True)
class StoreEvent(Generic[R]):
    """Notification emitted after every in-memory change.

    Attributes:
        kind: What happened
        record_id: Affected record, None for LOADED
        snapshot: The full collection after the change, in store order
    """

    kind: StoreEventKind
    record_id: str | None
    snapshot: tuple[R, ...]


StoreListener = Callable[[StoreEvent[Any]], None]


class JsonRecordStore(Generic[R]):
    """Ordered collection of records backed by one JSON file.

    Subclasses set ``record_type`` and ``file_name`` and may override
    ``_check_record`` to enforce additional invariants.

    Attributes:
        data_dir: Directory holding the backing file
        path: Backing file path
    """

    record_type: ClassVar[type[BaseModel]]
    file_name: ClassVar[str]

    def __init__(self, data_dir: str | Path) -> None:
        self.data_dir = Path(data_dir)
        self.path = self.data_dir / self.file_name
        self._records: list[R] = []
        self._listeners: list[StoreListener] = []
        self._adapter: TypeAdapter[list[R]] = TypeAdapter(list[self.record_type])

    @property
    def records(self) -> list[R]:
        """Snapshot of the collection in store order."""
        return list(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[R]:
        return iter(list(self._records))

    def __contains__(self, record_id: object) -> bool:
        return self._index_of(record_id) is not None

    def _index_of(self, record_id: object) -> int | None:
        for idx, record in enumerate(self._records):
            if record.id == record_id:  # type: ignore[attr-defined]
                return idx
        return None

    def get(self, record_id: str) -> R | None:
        """Return the record with this id, or None. Never raises."""
        idx = self._index_of(record_id)
        return self._records[idx] if idx is not None else None

    def add(self, record: R) -> R:
        """Append a record to the end of the collection.

        Raises:
            DuplicateIdError: If a record with the same id is present
        """
        record_id = record.id  # type: ignore[attr-defined]
        if record_id in self:
            raise DuplicateIdError(record_id)
        self._check_record(record, exclude_id=None)

        self._records.append(record)
        log.debug("store_record_added", store=self.file_name, record_id=record_id)
        self._notify(StoreEventKind.ADDED, record_id)
        return record

    def update(self, record_id: str, patch: Mapping[str, Any]) -> R | None:
        """Shallow-merge ``patch`` over an existing record.

        Missing ids are a no-op and return None; callers that need to
        distinguish check existence first. ``updated_at`` is always stamped
        here and any value for it in ``patch`` is ignored.

        Returns:
            The updated record, or None if ``record_id`` is absent

        Raises:
            ValueError: If the patch changes ``id`` or names unknown fields
        """
        idx = self._index_of(record_id)
        if idx is None:
            return None

        unknown = set(patch) - set(self.record_type.model_fields)
        if unknown:
            raise ValueError(f"Unknown field(s) for {self.record_type.__name__}: {sorted(unknown)}")
        if "id" in patch and patch["id"] != record_id:
            raise ValueError("Record id is immutable")

        current = self._records[idx]
        merged_data = {**current.model_dump(), **patch}
        merged_data["updated_at"] = self._stamp(current)
        merged = self.record_type.model_validate(merged_data)
        self._check_record(merged, exclude_id=record_id)  # type: ignore[arg-type]

        self._records[idx] = merged  # type: ignore[assignment]
        log.debug("store_record_updated", store=self.file_name, record_id=record_id, fields=sorted(patch))
        self._notify(StoreEventKind.UPDATED, record_id)
        return merged  # type: ignore[return-value]

    def remove(self, record_id: str) -> bool:
        """Delete a record if present.

        Returns:
            True if a record was removed
        """
        idx = self._index_of(record_id)
        if idx is None:
            return False
        del self._records[idx]
        log.debug("store_record_removed", store=self.file_name, record_id=record_id)
        self._notify(StoreEventKind.REMOVED, record_id)
        return True

    async def save(self) -> None:
        """Write the full collection to the backing file, replacing it.

        Creates the data directory and its marker file on demand.

        Raises:
            PersistenceError: If any part of the write fails. The in-memory
                collection is left untouched.
        """
        tmp_path = self.path.with_suffix(".tmp")
        payload = self._adapter.dump_json(self._records, indent=2).decode("utf-8")

        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            marker = self.data_dir / MARKER_FILE
            if not marker.exists():
                marker.touch()

            async with aiofiles.open(tmp_path, "w", encoding="utf-8") as f:
                await f.write(payload)
            tmp_path.replace(self.path)
        except OSError as e:
            log.error("store_save_failed", path=str(self.path), error=str(e))
            raise PersistenceError(self.path, str(e)) from e

        log.debug("store_saved", path=str(self.path), count=len(self._records))

    async def load(self) -> None:
        """Read the backing file if it exists.

        An unreadable or unparsable file is treated as a fresh start: the
        collection is reset to empty and a warning is logged.
        """
        if not self.path.exists():
            log.debug("store_file_missing", path=str(self.path))
            return

        try:
            self._records = await self._read()
        except LoadCorruptionError as e:
            log.warning("store_load_corrupt", path=str(e.path), reason=e.reason)
            self._records = []

        log.debug("store_loaded", path=str(self.path), count=len(self._records))
        self._notify(StoreEventKind.LOADED, None)

    async def _read(self) -> list[R]:
        try:
            async with aiofiles.open(self.path, encoding="utf-8") as f:
                content = await f.read()
            return self._adapter.validate_json(content)
        except (OSError, UnicodeDecodeError, ValidationError) as e:
            raise LoadCorruptionError(self.path, str(e)) from e

    def subscribe(self, listener: StoreListener) -> Callable[[], None]:
        """Register a change listener.

        Returns:
            A callable that removes the listener again
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, kind: StoreEventKind, record_id: str | None) -> None:
        event: StoreEvent[R] = StoreEvent(kind=kind, record_id=record_id, snapshot=tuple(self._records))
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                # Listener failures never propagate into the mutation
                log.error("store_listener_failed", store=self.file_name, kind=kind.value, exc_info=True)

    def _check_record(self, record: R, exclude_id: str | None) -> None:
        """Hook for store-specific invariants. Raise to reject the record."""

    @staticmethod
    def _stamp(record: BaseModel) -> Any:
        created_at = getattr(record, "created_at", None)
        now = utc_now()
        if created_at is not None and created_at > now:
            return created_at
        return now
