# models/medical_record.py

from typing import Optional

from .base import StoredRecord

NO_DIAGNOSIS = "No diagnosis recorded"
NO_PRESCRIPTION = "No prescription recorded"
NOT_MEASURED = "Not measured"


class MedicalRecord(StoredRecord):
    complaint: str = ""
    diagnosis: str = ""
    blood_pressure: str = ""
    weight: str = ""
    prescription: str = ""


class MedicalRecordInput(StoredRecord):
    """Values a clinician supplied when completing an appointment.

    None means "not supplied"; defaults are filled in later.
    """

    complaint: Optional[str] = None
    diagnosis: Optional[str] = None
    blood_pressure: Optional[str] = None
    weight: Optional[str] = None
    prescription: Optional[str] = None


class Visit(MedicalRecord):
    """A medical record appended to a patient's history, dated by the appointment."""

    date: str
