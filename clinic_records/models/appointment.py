# models/appointment.py

from enum import Enum
from typing import Optional

from pydantic import field_validator

from .base import StoredRecord
from .medical_record import MedicalRecord


class AppointmentStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


UNKNOWN_PATIENT = "Unknown Patient"


class Appointment(StoredRecord):
    id: str

    # Weak reference; patient_name is copied at creation and not kept in sync
    patient_id: str
    patient_name: str = UNKNOWN_PATIENT

    date: str          # YYYY-MM-DD
    time: str = ""     # display time, e.g. "09:30 AM"
    reason: str = ""
    notes: Optional[str] = None

    status: AppointmentStatus = AppointmentStatus.PENDING

    # Set when the appointment is completed
    medical_record: Optional[MedicalRecord] = None

    @field_validator("id", "patient_id")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        value = (value or "").strip()
        if not value:
            raise ValueError("must not be empty")
        return value

    def __repr__(self):
        return f"<Appointment {self.id} for Patient {self.patient_id} ({self.status.value})>"
