from .appointment_service import AppointmentRepository, sort_appointments_by_date
from .clinic_service import ClinicData
from .log_service import OperationLogRepository
from .patient_service import PatientRepository
from .repository import EntityRepository, commit_together, write_lock
from .seed_service import DemoDataService
from .transfer_service import ImportResult, TransferService

__all__ = [
    "AppointmentRepository",
    "sort_appointments_by_date",
    "ClinicData",
    "OperationLogRepository",
    "PatientRepository",
    "EntityRepository",
    "commit_together",
    "write_lock",
    "DemoDataService",
    "ImportResult",
    "TransferService",
]
