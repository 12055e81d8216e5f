from .appointment import Appointment, AppointmentStatus
from .kv_entry import KeyValueEntry
from .log_entry import LogEntry, LogOperation, LogStatus
from .medical_record import MedicalRecord, MedicalRecordInput, Visit
from .patient import Patient

__all__ = [
    "Appointment",
    "AppointmentStatus",
    "KeyValueEntry",
    "LogEntry",
    "LogOperation",
    "LogStatus",
    "MedicalRecord",
    "MedicalRecordInput",
    "Visit",
    "Patient",
]
