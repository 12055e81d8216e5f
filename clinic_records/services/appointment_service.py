import logging
from typing import List, Optional

from pydantic import BaseModel

from clinic_records.core.config import APPOINTMENTS_KEY
from clinic_records.core.events import APPOINTMENTS_CHANGED
from clinic_records.core.time_utils import display_time_to_minutes, to_iso_date
from clinic_records.models.appointment import Appointment, AppointmentStatus, UNKNOWN_PATIENT
from clinic_records.models.medical_record import MedicalRecord
from .appointment_status import build_medical_record, collect_record_input, ensure_transition, to_status
from .patient_service import PatientRepository, apply_medical_record
from .repository import EntityRepository, commit_together, write_lock

logger = logging.getLogger(__name__)


# -----------------------------
# Sorting helpers
# -----------------------------
def sort_appointments_by_date(appointments: List[Appointment], descending: bool = False) -> List[Appointment]:
    """Order by calendar date, then by display time ('09:30 AM')."""
    return sorted(
        appointments,
        key=lambda a: (a.date, display_time_to_minutes(a.time)),
        reverse=descending,
    )


class AppointmentRepository(EntityRepository[Appointment]):
    model = Appointment
    storage_key = APPOINTMENTS_KEY
    change_event = APPOINTMENTS_CHANGED

    def __init__(self, store, bus, patients: PatientRepository, **kwargs):
        super().__init__(store, bus, **kwargs)
        self.patients = patients

    # -----------------------------
    # Fetch
    # -----------------------------
    def get_appointments(self) -> List[Appointment]:
        return self.get_all()

    def get_appointment_by_id(self, appointment_id: str) -> Optional[Appointment]:
        return self.get_by_id(appointment_id)

    def get_patient_appointments(self, patient_id: str) -> List[Appointment]:
        return [a for a in self.get_all() if a.patient_id == str(patient_id)]

    # -----------------------------
    # Create a new appointment
    # -----------------------------
    def add_appointment(self, data) -> Optional[Appointment]:
        """Schedule an appointment.

        The patient's current name is copied onto the appointment; it is not
        refreshed if the patient is renamed later.
        """
        payload = self.fields_from(data)
        payload["date"] = to_iso_date(payload.get("date"))
        # Every appointment enters the lifecycle at pending
        payload["status"] = AppointmentStatus.PENDING
        payload.pop("medical_record", None)

        patient = self.patients.get_patient_by_id(str(payload.get("patient_id") or ""))
        payload["patient_name"] = patient.name if patient else UNKNOWN_PATIENT

        appointment = self.add(payload)
        if appointment:
            logger.info("Scheduled appointment %s for patient %s on %s", appointment.id, appointment.patient_id, appointment.date)
        return appointment

    def update(self, appointment_id: str, data) -> Optional[Appointment]:
        """Edit scheduling details (date, time, reason, notes).

        Status and the medical record only change through
        update_appointment_status; passing a different value for either
        raises ValueError.
        """
        payload = self.fields_from(data)
        with self.lock:
            current = self.get_by_id(appointment_id)
            if current is None:
                return None

            if "status" in payload and to_status(payload["status"]) != current.status:
                raise ValueError("Appointment status can only change through update_appointment_status.")
            if "medical_record" in payload:
                record = payload.pop("medical_record")
                if record is not None:
                    record = MedicalRecord.model_validate(record.model_dump() if isinstance(record, BaseModel) else record)
                if record != current.medical_record:
                    raise ValueError("The medical record is set only when an appointment is completed.")
            if "date" in payload:
                payload["date"] = to_iso_date(payload["date"])

            return super().update(appointment_id, payload)

    def update_appointment(self, appointment_id: str, data) -> Optional[Appointment]:
        return self.update(appointment_id, data)

    def delete_appointment(self, appointment_id: str) -> bool:
        return self.delete(appointment_id)

    # -----------------------------
    # Status changes
    # -----------------------------
    def update_appointment_status(self, appointment_id: str, new_status, remarks: Optional[str] = None, medical_record=None) -> Optional[Appointment]:
        """Move an appointment along its lifecycle.

        Returns None when the appointment does not exist or the write failed.
        Raises InvalidStatusTransition for moves outside the transition table.

        Completing an appointment also records the visit on the patient; both
        collections are written in one store transaction.
        """
        new_status = to_status(new_status)

        with write_lock(self, self.patients):
            appointments = self.snapshot()
            if appointments is None:
                return None
            appointment = appointments.get(str(appointment_id))
            if not appointment:
                return None

            ensure_transition(appointment.status, new_status)

            changes = {"status": new_status}
            if remarks and remarks.strip():
                changes["notes"] = remarks.strip()

            if new_status != AppointmentStatus.COMPLETED:
                appointments[appointment.id] = appointment.model_copy(update=changes)
                if not self._commit(appointments):
                    return None
                return appointments[appointment.id].model_copy(deep=True)

            patients = self.patients.snapshot()
            if patients is None:
                logger.error("Cannot complete appointment %s: patients are unavailable", appointment.id)
                return None
            patient = patients.get(appointment.patient_id)

            supplied = collect_record_input(remarks, medical_record)
            record = build_medical_record(appointment, patient, supplied)
            changes["medical_record"] = record
            appointments[appointment.id] = appointment.model_copy(update=changes)

            pending_writes = [(self, appointments)]
            if patient:
                patients[patient.id] = apply_medical_record(patient, record, appointment.date, supplied_vitals=supplied)
                pending_writes.append((self.patients, patients))
            else:
                logger.warning("Appointment %s completed for missing patient %s; no visit recorded", appointment.id, appointment.patient_id)

            if not commit_together(self.store, pending_writes):
                return None

            logger.info("Completed appointment %s (diagnosis: %s)", appointment.id, record.diagnosis)
            return appointments[appointment.id].model_copy(deep=True)
