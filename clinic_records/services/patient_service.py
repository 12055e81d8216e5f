import logging
from typing import List, Optional

from pydantic import BaseModel

from clinic_records.core.config import PATIENTS_KEY
from clinic_records.core.events import PATIENTS_CHANGED
from clinic_records.models.medical_record import MedicalRecordInput, Visit
from clinic_records.models.patient import Patient
from .repository import EntityRepository

logger = logging.getLogger(__name__)


def coerce_record_input(record) -> MedicalRecordInput:
    """Accept a MedicalRecordInput, any record model, a dict or None."""
    if isinstance(record, MedicalRecordInput):
        return record
    if isinstance(record, BaseModel):
        record = record.model_dump()
    return MedicalRecordInput.model_validate(record or {})


# ------------------------------------------
# Build the patient state after a visit
# ------------------------------------------
def apply_medical_record(patient: Patient, record, visit_date: str, supplied_vitals=None) -> Patient:
    """Return a new Patient with `record` appended as a visit.

    Missing vitals in the visit fall back to the patient's current snapshot.
    The snapshot itself is overwritten only with vitals that were actually
    supplied (`supplied_vitals`, or `record` itself when not given), and
    last_visit always follows the newest visit.
    """
    values = coerce_record_input(record)
    vitals = values if supplied_vitals is None else coerce_record_input(supplied_vitals)

    visit = Visit(
        date=visit_date,
        complaint=values.complaint or "",
        diagnosis=values.diagnosis or "",
        blood_pressure=values.blood_pressure or patient.blood_pressure or "",
        weight=values.weight or patient.weight or "",
        prescription=values.prescription or "",
    )

    changes = {
        "visits": [*patient.visits, visit],
        "last_visit": visit_date,
    }
    if vitals.blood_pressure:
        changes["blood_pressure"] = vitals.blood_pressure
    if vitals.weight:
        changes["weight"] = vitals.weight

    return patient.model_copy(update=changes, deep=True)


class PatientRepository(EntityRepository[Patient]):
    model = Patient
    storage_key = PATIENTS_KEY
    change_event = PATIENTS_CHANGED
    storage_shape = "mapping"

    # ------------------------------------------
    # Fetch
    # ------------------------------------------
    def get_patients(self) -> List[Patient]:
        return self.get_all()

    def get_patient_by_id(self, patient_id: str) -> Optional[Patient]:
        return self.get_by_id(patient_id)

    # ------------------------------------------
    # Create / update / delete
    # ------------------------------------------
    def add_patient(self, data) -> Optional[Patient]:
        """Register a patient. History always starts empty."""
        payload = self.fields_from(data)
        payload["visits"] = []
        payload["last_visit"] = None

        patient = self.add(payload)
        if patient:
            logger.info("Created patient %s (%s)", patient.id, patient.name)
        return patient

    def update_patient(self, patient_id: str, data) -> Optional[Patient]:
        """Edit demographics and vitals.

        Visit history is append-only and lastVisit follows it, so both are
        ignored here; use add_medical_record to add a visit.
        """
        payload = self.fields_from(data)
        for history_field in ("visits", "last_visit"):
            if payload.pop(history_field, None) is not None:
                logger.warning("Ignoring '%s' in update of patient %s", history_field, patient_id)
        return self.update(patient_id, payload)

    def delete_patient(self, patient_id: str) -> bool:
        # Appointments keep their patientId; there is no cascade
        return self.delete(patient_id)

    # ------------------------------------------
    # Medical history
    # ------------------------------------------
    def add_medical_record(self, patient_id: str, record, visit_date: str) -> Optional[Patient]:
        """Append a visit to a patient's history and persist it."""
        with self.lock:
            items = self.snapshot()
            if items is None:
                return None
            patient = items.get(str(patient_id))
            if not patient:
                return None

            updated = apply_medical_record(patient, record, visit_date)
            items[updated.id] = updated
            if not self._commit(items):
                return None
            return updated.model_copy(deep=True)
