"""
Repository pattern over the key-value store.

Each repository owns exactly one stored JSON document (one collection). It
loads it lazily, keeps an insertion-ordered {id: record} cache, and on every
write serializes the whole collection back. The cache is swapped only after
the store accepted the write, so a failed persist leaves memory untouched.

A collection that could not be read is never written: overwriting it with
the (empty) in-memory state would destroy the stored records.
"""
import logging
import threading
from contextlib import ExitStack, contextmanager
from typing import Callable, Dict, Generic, Iterable, List, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from clinic_records.core.errors import StorageError
from clinic_records.core.events import EventBus
from clinic_records.core.helpers import IdGenerator, SequentialIdGenerator
from clinic_records.core.storage import KeyValueStore
from clinic_records.models.base import StoredRecord

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=StoredRecord)


class EntityRepository(Generic[T]):
    model: Type[T] = None
    storage_key: str = None
    change_event: str = None
    # "list" -> [record, ...]    "mapping" -> {id: record}
    storage_shape = "list"

    def __init__(
        self,
        store: KeyValueStore,
        bus: EventBus,
        *,
        id_generator: Optional[IdGenerator] = None,
        reserved_ids: Iterable[str] = (),
        initial_data: Optional[Callable[[], Iterable[T]]] = None,
    ):
        self.store = store
        self.bus = bus
        self.id_generator = id_generator or SequentialIdGenerator()
        self.reserved_ids = frozenset(reserved_ids)
        self.initial_data = initial_data

        self._items: Dict[str, T] = {}
        self._initialized = False
        self._lock = threading.RLock()

    # ==================== LOADING ====================

    def initialize(self) -> bool:
        """Load the collection once. Later calls do nothing.

        Returns False when the stored collection could not be read. The
        repository then stays unloaded: reads see an empty collection, writes
        are refused, and the next call tries the store again.
        """
        with self._lock:
            if self._initialized:
                return True

            try:
                stored = self.store.load(self.storage_key)
            except StorageError as e:
                logger.error("Could not load %s; writes are blocked until it loads: %s", self.storage_key, e)
                return False

            if stored is None:
                items = self.items_from(self.initial_data() if self.initial_data else [])
                if items and not self.store.set(self.storage_key, self._dump(items)):
                    logger.error("Could not persist initial %s", self.storage_key)
            else:
                items = self._load(stored)

            self._items = items
            self._initialized = True
            logger.debug("Loaded %d record(s) from %s", len(items), self.storage_key)

        self.bus.emit(self.change_event)
        return True

    def reset(self):
        """Forget the cached collection; the next access reloads from the store."""
        with self._lock:
            self._items = {}
            self._initialized = False

    @property
    def lock(self):
        return self._lock

    def _load(self, stored) -> Dict[str, T]:
        if isinstance(stored, dict):
            raw_records = list(stored.values())
        elif isinstance(stored, list):
            raw_records = stored
        else:
            logger.warning("Ignoring %s: expected a list or mapping, got %s", self.storage_key, type(stored).__name__)
            return {}

        items: Dict[str, T] = {}
        for raw in raw_records:
            try:
                record = self.model.model_validate(raw)
            except ValidationError as e:
                logger.warning("Skipping unreadable record in %s: %s", self.storage_key, e.errors()[:1])
                continue
            items.setdefault(record.id, record)
        return items

    def _dump(self, items: Dict[str, T]):
        if self.storage_shape == "mapping":
            return {record_id: record.to_document() for record_id, record in items.items()}
        return [record.to_document() for record in items.values()]

    def items_from(self, records: Iterable) -> Dict[str, T]:
        """Validate raw documents (or models) into an {id: record} dict."""
        items: Dict[str, T] = {}
        for record in records:
            record = record if isinstance(record, self.model) else self.model.model_validate(record)
            items[record.id] = record
        return items

    # ==================== WRITE CYCLE ====================

    def snapshot(self) -> Optional[Dict[str, T]]:
        """Working copy of the cache for building the next collection state.

        None when the collection could not be loaded; callers must not write.
        """
        if not self.initialize():
            return None
        return dict(self._items)

    def adopt(self, items: Dict[str, T]):
        """Swap in an already-persisted collection and announce the change."""
        self._items = items
        self.bus.emit(self.change_event)

    def _commit(self, items: Dict[str, T]) -> bool:
        if not self.store.set(self.storage_key, self._dump(items)):
            logger.error("Error persisting %s; keeping previous state", self.storage_key)
            return False
        self.adopt(items)
        return True

    def fields_from(self, data) -> dict:
        """Normalize a model or a camel/snake keyed dict to attribute names."""
        if isinstance(data, BaseModel):
            data = data.model_dump()
        payload = {}
        for key, value in dict(data or {}).items():
            name = self.model.field_name_for(key)
            if name is not None:
                payload[name] = value
        return payload

    def new_id(self, items: Dict[str, T]) -> str:
        return self.id_generator.next_id(items.keys(), self.reserved_ids)

    # ==================== READ ====================

    def get_all(self) -> List[T]:
        """Copies of every record, in insertion order."""
        self.initialize()
        with self._lock:
            return [record.model_copy(deep=True) for record in self._items.values()]

    def get_by_id(self, record_id: str) -> Optional[T]:
        self.initialize()
        with self._lock:
            record = self._items.get(str(record_id))
            return record.model_copy(deep=True) if record else None

    def exists(self, record_id: str) -> bool:
        self.initialize()
        return str(record_id) in self._items

    def ids(self) -> List[str]:
        self.initialize()
        with self._lock:
            return list(self._items)

    def count(self) -> int:
        self.initialize()
        return len(self._items)

    # ==================== WRITE ====================

    def add(self, data) -> Optional[T]:
        """Create a record with a fresh ID.

        Raises pydantic.ValidationError (a ValueError) when the data is not a
        valid record. Returns None if the collection is unavailable or the
        store rejected the write.
        """
        with self._lock:
            items = self.snapshot()
            if items is None:
                return None
            payload = self.fields_from(data)
            payload["id"] = self.new_id(items)
            record = self.model.model_validate(payload)
            items[record.id] = record

            if not self._commit(items):
                return None
            return record.model_copy(deep=True)

    def update(self, record_id: str, data) -> Optional[T]:
        """Merge fields into an existing record. None if missing or not persisted."""
        with self._lock:
            items = self.snapshot()
            if items is None:
                return None
            current = items.get(str(record_id))
            if not current:
                return None

            merged = current.model_dump()
            merged.update(self.fields_from(data))
            merged["id"] = current.id
            record = self.model.model_validate(merged)
            items[record.id] = record

            if not self._commit(items):
                return None
            return record.model_copy(deep=True)

    def bulk_add(self, records: Iterable) -> Optional[List[T]]:
        """Insert many records with one persist and one change event.

        Records that carry an ID keep it (replacing any record with that ID);
        records without one get a fresh ID.
        """
        with self._lock:
            items = self.snapshot()
            if items is None:
                return None
            added = []
            for data in records:
                payload = self.fields_from(data)
                if not str(payload.get("id") or "").strip():
                    payload["id"] = self.new_id(items)
                record = self.model.model_validate(payload)
                items[record.id] = record
                added.append(record)

            if not added:
                return []
            if not self._commit(items):
                return None
            return [record.model_copy(deep=True) for record in added]

    def delete(self, record_id: str) -> bool:
        """Remove a record. Deleting a missing ID is a successful no-op."""
        return self.delete_many([record_id])

    def delete_many(self, record_ids: Iterable[str]) -> bool:
        with self._lock:
            items = self.snapshot()
            if items is None:
                return False
            doomed = {str(record_id) for record_id in record_ids} & set(items)
            if not doomed:
                return True
            for record_id in doomed:
                del items[record_id]
            return self._commit(items)

    def clear(self) -> bool:
        with self._lock:
            if not self.initialize():
                return False
            return self._commit({})


# ==================== CROSS-REPOSITORY UNIT ====================

@contextmanager
def write_lock(*repositories: EntityRepository):
    """Hold the write locks of several repositories (in a stable order)."""
    with ExitStack() as stack:
        for repo in sorted(repositories, key=lambda r: r.storage_key):
            stack.enter_context(repo.lock)
        yield


def commit_together(store: KeyValueStore, changes, extra: Optional[dict] = None) -> bool:
    """Persist new states of several repositories in one store write.

    `changes` is a list of (repository, items) pairs built from snapshots
    while holding write_lock(). `extra` holds plain keys (settings) written in
    the same transaction. Either every repository adopts its new state or none
    does.
    """
    payload = {repo.storage_key: repo._dump(items) for repo, items in changes}
    payload.update(extra or {})
    if not store.set_many(payload):
        logger.error("Error persisting %s together; nothing was applied", sorted(payload))
        return False

    for repo, items in changes:
        repo.adopt(items)
    return True
