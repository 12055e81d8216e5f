# models/log_entry.py

from enum import Enum

from .base import StoredRecord


class LogOperation(str, Enum):
    IMPORT = "import"
    EXPORT = "export"
    CLEAR = "clear"


class LogStatus(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class LogEntry(StoredRecord):
    id: str
    timestamp: str
    operation: LogOperation
    status: LogStatus
    details: str = ""
