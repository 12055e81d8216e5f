import logging
from typing import List, Optional

from clinic_records.core.config import LOGS_KEY, MAX_LOG_ENTRIES
from clinic_records.core.events import LOGS_CHANGED
from clinic_records.core.helpers import TimestampIdGenerator
from clinic_records.core.time_utils import now_iso
from clinic_records.models.log_entry import LogEntry, LogOperation, LogStatus
from .repository import EntityRepository

logger = logging.getLogger(__name__)


class OperationLogRepository(EntityRepository[LogEntry]):
    """Audit trail of import/export/clear runs, newest first, capped."""

    model = LogEntry
    storage_key = LOGS_KEY
    change_event = LOGS_CHANGED

    def __init__(self, store, bus, max_entries: int = MAX_LOG_ENTRIES, **kwargs):
        kwargs.setdefault("id_generator", TimestampIdGenerator())
        super().__init__(store, bus, **kwargs)
        self.max_entries = max_entries

    def get_logs(self) -> List[LogEntry]:
        return self.get_all()

    def add_log(self, operation, status, details: str) -> Optional[LogEntry]:
        with self.lock:
            items = self.snapshot()
            if items is None:
                return None
            entry = LogEntry(
                id=self.new_id(items),
                timestamp=now_iso(),
                operation=LogOperation(operation),
                status=LogStatus(status),
                details=details,
            )

            # Newest first; evict the oldest beyond the cap
            ordered = [entry, *items.values()][: self.max_entries]
            if not self._commit({e.id: e for e in ordered}):
                return None

        log_method = logger.error if entry.status == LogStatus.ERROR else logger.info
        log_method("%s %s: %s", entry.operation.value, entry.status.value, details)
        return entry.model_copy()

    def clear_logs(self) -> bool:
        return self.clear()
