from .database import Base, create_db_engine, create_session_factory, get_db_context
from .events import EventBus
from .helpers import IdGenerator, SequentialIdGenerator, UuidIdGenerator, TimestampIdGenerator
from .logging_utils import configure_logging
from .storage import KeyValueStore, MemoryKeyValueStore, SqlKeyValueStore, create_store

# SessionStateKeyValueStore lives in core.session_store; import it directly so
# streamlit is only loaded when the session backend is used.

__all__ = [
    "Base",
    "create_db_engine",
    "create_session_factory",
    "get_db_context",
    "EventBus",
    "IdGenerator",
    "SequentialIdGenerator",
    "UuidIdGenerator",
    "TimestampIdGenerator",
    "configure_logging",
    "KeyValueStore",
    "MemoryKeyValueStore",
    "SqlKeyValueStore",
    "create_store",
]
