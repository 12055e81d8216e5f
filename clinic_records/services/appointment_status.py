"""
Appointment lifecycle.

Transitions are caller-initiated only (nothing moves on its own):

    pending   -> confirmed | cancelled | completed
    confirmed -> completed | cancelled

completed and cancelled are final. Entering "completed" produces a structured
MedicalRecord for the visit.
"""
import re
from typing import Optional

from clinic_records.core.errors import InvalidStatusTransition
from clinic_records.models.appointment import Appointment, AppointmentStatus
from clinic_records.models.medical_record import (
    NO_DIAGNOSIS,
    NO_PRESCRIPTION,
    NOT_MEASURED,
    MedicalRecord,
    MedicalRecordInput,
)
from clinic_records.models.patient import Patient
from .patient_service import coerce_record_input

ALLOWED_TRANSITIONS = {
    AppointmentStatus.PENDING: {
        AppointmentStatus.CONFIRMED,
        AppointmentStatus.CANCELLED,
        AppointmentStatus.COMPLETED,
    },
    AppointmentStatus.CONFIRMED: {
        AppointmentStatus.COMPLETED,
        AppointmentStatus.CANCELLED,
    },
    AppointmentStatus.COMPLETED: set(),
    AppointmentStatus.CANCELLED: set(),
}

# "Label: value" lines accepted in completion remarks
REMARK_LABELS = {
    "complaint": "Complaint",
    "diagnosis": "Diagnosis",
    "blood_pressure": "Blood Pressure",
    "weight": "Weight",
    "prescription": "Prescription",
}


def to_status(value) -> AppointmentStatus:
    try:
        return AppointmentStatus(value)
    except ValueError:
        raise ValueError(f"Unknown appointment status: {value!r}")


def can_transition(current, requested) -> bool:
    return to_status(requested) in ALLOWED_TRANSITIONS[to_status(current)]


def ensure_transition(current, requested):
    if not can_transition(current, requested):
        raise InvalidStatusTransition(to_status(current).value, to_status(requested).value)


# -----------------------------------------------------
# Medical record capture
# -----------------------------------------------------
def parse_remarks(remarks: Optional[str]) -> MedicalRecordInput:
    """Pull 'Diagnosis: ...' style lines out of free-text remarks."""
    values = {}
    for field, label in REMARK_LABELS.items():
        match = re.search(rf"^\s*{re.escape(label)}:[ \t]*([^\n]+)", remarks or "", re.IGNORECASE | re.MULTILINE)
        if match and match.group(1).strip():
            values[field] = match.group(1).strip()
    return MedicalRecordInput(**values)


def collect_record_input(remarks: Optional[str] = None, medical_record=None) -> MedicalRecordInput:
    """Explicit structured values win over values parsed from remarks."""
    parsed = parse_remarks(remarks).model_dump()
    explicit = coerce_record_input(medical_record).model_dump()
    merged = {field: explicit[field] if explicit[field] else parsed[field] for field in parsed}
    return MedicalRecordInput(**merged)


def build_medical_record(appointment: Appointment, patient: Optional[Patient], supplied: MedicalRecordInput) -> MedicalRecord:
    """Fill unsupplied fields with defaults (reason, last known vitals...)."""
    return MedicalRecord(
        complaint=supplied.complaint or appointment.reason,
        diagnosis=supplied.diagnosis or NO_DIAGNOSIS,
        blood_pressure=supplied.blood_pressure or (patient.blood_pressure if patient else "") or NOT_MEASURED,
        weight=supplied.weight or (patient.weight if patient else "") or NOT_MEASURED,
        prescription=supplied.prescription or NO_PRESCRIPTION,
    )
