"""
In-process publish/subscribe channel.

The application root owns one EventBus and hands it to every repository, so
views can subscribe to "data changed" notifications and re-read through the
repository getters.
"""
import logging
import threading
from collections import defaultdict
from typing import Callable, Dict, List

logger = logging.getLogger(__name__)


PATIENTS_CHANGED = "patients_changed"
APPOINTMENTS_CHANGED = "appointments_changed"
LOGS_CHANGED = "logs_changed"
DUMMY_DATA_CHANGED = "dummy_data_changed"
DATA_CLEARED = "data_cleared"


class EventBus:
    def __init__(self):
        self._listeners: Dict[str, List[Callable]] = defaultdict(list)
        self._lock = threading.Lock()

    def add_listener(self, event: str, callback: Callable) -> Callable[[], None]:
        """Subscribe to an event. Returns an unsubscribe function."""
        with self._lock:
            self._listeners[event].append(callback)
        return lambda: self.remove_listener(event, callback)

    def remove_listener(self, event: str, callback: Callable):
        with self._lock:
            listeners = self._listeners.get(event)
            if not listeners:
                return
            self._listeners[event] = [cb for cb in listeners if cb is not callback]

    def listener_count(self, event: str) -> int:
        with self._lock:
            return len(self._listeners.get(event, []))

    def emit(self, event: str, *args):
        # Snapshot so a callback may unsubscribe itself
        with self._lock:
            listeners = list(self._listeners.get(event, []))

        for callback in listeners:
            try:
                callback(*args)
            except Exception:
                logger.exception("Listener for '%s' failed", event)
