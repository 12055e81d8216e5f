"""
Key-value store adapter.

Every backend stores one JSON document per string key. Apart from load(),
the public methods never raise: read failures come back as None, write
failures as False, and both are logged. Callers decide whether to retry or
give up. load() raises StorageError so a failed read is not mistaken for
an absent key.

Backends:
    SqlKeyValueStore          durable, SQLAlchemy over SQLite
    MemoryKeyValueStore       process-lifetime dict
    SessionStateKeyValueStore Streamlit session state (see session_store.py)
"""
import json
import logging
import threading
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy.exc import SQLAlchemyError

from .config import DATABASE_URL, STORAGE_BACKEND
from .database import create_db_engine, create_session_factory, create_tables, get_db_context
from .errors import StorageError

logger = logging.getLogger(__name__)


def _encode(key: str, value: Any) -> str:
    try:
        return json.dumps(value)
    except (TypeError, ValueError) as e:
        raise StorageError(f"Value for '{key}' is not JSON-serializable: {e}")


def _decode(key: str, raw: Optional[str]) -> Any:
    if raw is None or raw == "":
        return None
    try:
        return json.loads(raw)
    except ValueError as e:
        raise StorageError(f"Stored value for '{key}' is not valid JSON: {e}")


class KeyValueStore:
    """Uniform get/set/remove of JSON blobs. Subclasses implement the _raw_* hooks."""

    backend_name = "base"

    # -----------------------------
    # Backend hooks
    # -----------------------------
    def _raw_get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def _raw_set_many(self, items: Dict[str, str]):
        raise NotImplementedError

    def _raw_remove_many(self, keys: List[str]):
        raise NotImplementedError

    def _raw_keys(self) -> List[str]:
        raise NotImplementedError

    # -----------------------------
    # Public contract
    # -----------------------------
    def load(self, key: str) -> Any:
        """Read a value; None only when the key is absent.

        Raises StorageError when the backend fails or the stored JSON is
        unreadable, so callers can tell "nothing stored" from "could not read".
        """
        try:
            return _decode(key, self._raw_get(key))
        except (SQLAlchemyError, OSError) as e:
            raise StorageError(f"Error reading '{key}' from {self.backend_name} store: {e}")

    def get(self, key: str) -> Any:
        try:
            return self.load(key)
        except StorageError as e:
            logger.error("Error reading '%s' from %s store: %s", key, self.backend_name, e)
            return None

    def set(self, key: str, value: Any) -> bool:
        return self.set_many({key: value})

    def set_many(self, items: Dict[str, Any]) -> bool:
        """Write several keys as one unit: all of them are stored or none."""
        try:
            encoded = {key: _encode(key, value) for key, value in items.items()}
            self._raw_set_many(encoded)
            return True
        except (StorageError, SQLAlchemyError, OSError) as e:
            logger.error("Error saving %s to %s store: %s", sorted(items), self.backend_name, e)
            return False

    def remove(self, key: str) -> bool:
        return self.remove_many([key])

    def remove_many(self, keys: Iterable[str]) -> bool:
        keys = list(keys)
        if not keys:
            return True
        try:
            self._raw_remove_many(keys)
            return True
        except (StorageError, SQLAlchemyError, OSError) as e:
            logger.error("Error removing %s from %s store: %s", keys, self.backend_name, e)
            return False

    def list_keys(self) -> List[str]:
        try:
            return list(self._raw_keys())
        except (StorageError, SQLAlchemyError, OSError) as e:
            logger.error("Error listing keys of %s store: %s", self.backend_name, e)
            return []


class MemoryKeyValueStore(KeyValueStore):
    """Fallback store; keeps serialized JSON so reads never share references."""

    backend_name = "memory"

    def __init__(self):
        self._data: Dict[str, str] = {}
        self._lock = threading.Lock()

    def _raw_get(self, key):
        with self._lock:
            return self._data.get(key)

    def _raw_set_many(self, items):
        with self._lock:
            self._data.update(items)

    def _raw_remove_many(self, keys):
        with self._lock:
            for key in keys:
                self._data.pop(key, None)

    def _raw_keys(self):
        with self._lock:
            return list(self._data)


class SqlKeyValueStore(KeyValueStore):
    """Durable store: one row per key in the kv_store table."""

    backend_name = "sqlite"

    def __init__(self, database_url: str = DATABASE_URL, engine=None):
        # Models import core.database, so import lazily to keep core importable alone
        from clinic_records.models.kv_entry import KeyValueEntry

        self._entry_model = KeyValueEntry
        self.database_url = database_url
        self.engine = engine or create_db_engine(database_url)
        self.SessionLocal = create_session_factory(self.engine)
        create_tables(self.engine)

    def _raw_get(self, key):
        with get_db_context(self.SessionLocal) as db:
            entry = db.get(self._entry_model, key)
            return entry.value if entry else None

    def _raw_set_many(self, items):
        # Single transaction: either every key is written or none
        with get_db_context(self.SessionLocal) as db:
            for key, raw in items.items():
                entry = db.get(self._entry_model, key)
                if entry:
                    entry.value = raw
                else:
                    db.add(self._entry_model(key=key, value=raw))

    def _raw_remove_many(self, keys):
        with get_db_context(self.SessionLocal) as db:
            (
                db.query(self._entry_model)
                .filter(self._entry_model.key.in_(keys))
                .delete(synchronize_session=False)
            )

    def _raw_keys(self):
        with get_db_context(self.SessionLocal) as db:
            return [row.key for row in db.query(self._entry_model.key).order_by(self._entry_model.key).all()]

    def dispose(self):
        self.engine.dispose()


def create_store(backend: Optional[str] = None, database_url: Optional[str] = None) -> KeyValueStore:
    """Pick a store for the host: durable sqlite, streamlit session, or memory."""
    backend = (backend or STORAGE_BACKEND or "sqlite").strip().lower()

    if backend == "memory":
        return MemoryKeyValueStore()

    if backend == "session":
        # Avoid importing streamlit unless the session backend is requested
        from .session_store import SessionStateKeyValueStore
        return SessionStateKeyValueStore()

    if backend != "sqlite":
        raise ValueError(f"Unknown storage backend '{backend}'. Expected sqlite, memory or session.")

    try:
        return SqlKeyValueStore(database_url or DATABASE_URL)
    except (SQLAlchemyError, OSError) as e:
        logger.error("Durable storage unavailable (%s); falling back to in-memory store", e)
        return MemoryKeyValueStore()
