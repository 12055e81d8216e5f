"""
Import / export of the full data set.

Export
------
A single JSON envelope:

    {
        "patients": [...],
        "appointments": [...],
        "exportDate": "2025-01-10T09:00:00.000Z",
        "showDummyData": false
    }

or, for older installs, a patients/appointments CSV pair.

Import
------
Every incoming record is classified as
    success    valid and new  -> inserted
    duplicate  ID already stored (or repeated in the file)
    invalid    fails the required-field rules or the record schema
All successes are written in one store transaction. A structurally broken
file (bad JSON, wrong shape, no collections) applies nothing at all.
"""
import json
import logging
import os
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from pydantic import BaseModel, Field, ValidationError

from clinic_records.core.config import EXPORT_DIR
from clinic_records.core.errors import ImportFormatError
from clinic_records.core.time_utils import now_iso
from clinic_records.models.appointment import Appointment
from clinic_records.models.log_entry import LogOperation, LogStatus
from clinic_records.models.patient import Patient
from .csv_codec import APPOINTMENT_COLUMNS, PATIENT_COLUMNS, read_csv, write_csv
from .repository import commit_together, write_lock
from .seed_data import SEED_APPOINTMENT_IDS, SEED_PATIENT_IDS

logger = logging.getLogger(__name__)

# Minimal rules checked before the schema: these keys must be present and non-blank
REQUIRED_PATIENT_FIELDS = ("id", "name")
REQUIRED_APPOINTMENT_FIELDS = ("id", "patientId", "status")


class CollectionCounts(BaseModel):
    success: int = 0
    duplicates: int = 0
    invalid: int = 0


class ImportResult(BaseModel):
    status: LogStatus
    message: str
    patients: CollectionCounts = Field(default_factory=CollectionCounts)
    appointments: CollectionCounts = Field(default_factory=CollectionCounts)

    @property
    def ok(self) -> bool:
        return self.status != LogStatus.ERROR

    @property
    def success(self) -> int:
        return self.patients.success + self.appointments.success

    @property
    def duplicates(self) -> int:
        return self.patients.duplicates + self.appointments.duplicates

    @property
    def invalid(self) -> int:
        return self.patients.invalid + self.appointments.invalid


# -----------------------------
# Parsing helpers
# -----------------------------
def _as_record_list(value, name: str) -> list:
    if isinstance(value, list):
        return value
    # Older stores kept patients as {id: patient}
    if isinstance(value, dict):
        return list(value.values())
    raise ImportFormatError(f"'{name}' must be a list of records.")


def parse_envelope(text: str) -> dict:
    """Decode an export document into {"patients": [...], "appointments": [...], ...}."""
    try:
        document = json.loads(text)
    except (TypeError, ValueError) as e:
        raise ImportFormatError(f"File is not valid JSON: {e}")

    # Very old exports were a bare list of patients
    if isinstance(document, list):
        return {"patients": document}

    if not isinstance(document, dict):
        raise ImportFormatError("Import file must contain a JSON object.")

    if "patients" not in document and "appointments" not in document:
        raise ImportFormatError("Import file has no 'patients' or 'appointments' collection.")

    envelope = {}
    for name in ("patients", "appointments"):
        if document.get(name) is not None:
            envelope[name] = _as_record_list(document[name], name)
    if isinstance(document.get("showDummyData"), bool):
        envelope["showDummyData"] = document["showDummyData"]
    return envelope


def _is_blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def classify_records(records: Iterable, existing_ids, model, required_fields) -> tuple:
    """Split incoming raw records into accepted models and counts."""
    accepted = {}
    counts = CollectionCounts()

    for raw in records:
        if not isinstance(raw, dict) or any(_is_blank(raw.get(field)) for field in required_fields):
            counts.invalid += 1
            continue

        record_id = str(raw["id"]).strip()
        if record_id in existing_ids or record_id in accepted:
            counts.duplicates += 1
            continue

        try:
            record = model.model_validate(raw)
        except ValidationError as e:
            logger.debug("Invalid %s record %s: %s", model.__name__, record_id, e.errors()[:1])
            counts.invalid += 1
            continue

        accepted[record.id] = record
        counts.success += 1

    return accepted, counts


def summarize(patients: CollectionCounts, appointments: CollectionCounts) -> str:
    imported = patients.success + appointments.success
    skipped_dup = patients.duplicates + appointments.duplicates
    skipped_bad = patients.invalid + appointments.invalid
    return (
        f"Imported {imported} record(s) ({patients.success} patient(s), {appointments.success} appointment(s)). "
        f"Skipped {skipped_dup} duplicate(s) and {skipped_bad} invalid record(s)."
    )


class TransferService:
    def __init__(self, patients, appointments, logs, demo, store):
        self.patients = patients
        self.appointments = appointments
        self.logs = logs
        self.demo = demo
        self.store = store

    # ==================== EXPORT ====================

    def build_export(self, include_seed: bool = False) -> dict:
        patients = self.patients.get_all()
        appointments = self.appointments.get_all()
        if not include_seed:
            patients = [p for p in patients if p.id not in SEED_PATIENT_IDS]
            appointments = [a for a in appointments if a.id not in SEED_APPOINTMENT_IDS]

        return {
            "patients": [p.to_document() for p in patients],
            "appointments": [a.to_document() for a in appointments],
            "exportDate": now_iso(),
            "showDummyData": self.demo.is_enabled(),
        }

    def _log_export(self, envelope: dict, fmt: str):
        self.logs.add_log(
            LogOperation.EXPORT,
            LogStatus.SUCCESS,
            f"Exported {len(envelope['patients'])} patient(s) and {len(envelope['appointments'])} appointment(s) as {fmt}.",
        )

    def _csv_files(self, envelope: dict) -> Dict[str, str]:
        return {
            "patients_export.csv": write_csv(envelope["patients"], PATIENT_COLUMNS),
            "appointments_export.csv": write_csv(envelope["appointments"], APPOINTMENT_COLUMNS),
        }

    def export_json(self, include_seed: bool = False) -> str:
        envelope = self.build_export(include_seed)
        self._log_export(envelope, "JSON")
        return json.dumps(envelope, indent=2)

    def write_export(self, directory: Optional[str] = None, include_seed: bool = False) -> Optional[str]:
        """Write a JSON export file and return its path (None on failure).

        The export is logged only once the file is on disk.
        """
        directory = directory or EXPORT_DIR
        path = os.path.join(directory, f"clinic_export_{datetime.now().strftime('%Y%m%d_%H%M%S')}.json")
        envelope = self.build_export(include_seed)
        try:
            os.makedirs(directory, exist_ok=True)
            with open(path, "w", encoding="utf-8") as f:
                f.write(json.dumps(envelope, indent=2))
        except OSError as e:
            self.logs.add_log(LogOperation.EXPORT, LogStatus.ERROR, f"Export failed: {e}")
            return None

        self._log_export(envelope, "JSON")
        return path

    def export_csv(self, include_seed: bool = False) -> Dict[str, str]:
        """Legacy export: {"patients_export.csv": ..., "appointments_export.csv": ...}"""
        envelope = self.build_export(include_seed)
        self._log_export(envelope, "CSV")
        return self._csv_files(envelope)

    def write_csv_export(self, directory: Optional[str] = None, include_seed: bool = False) -> List[str]:
        directory = directory or EXPORT_DIR
        stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        envelope = self.build_export(include_seed)
        paths = []
        try:
            os.makedirs(directory, exist_ok=True)
            for name, content in self._csv_files(envelope).items():
                path = os.path.join(directory, name.replace(".csv", f"_{stamp}.csv"))
                with open(path, "w", encoding="utf-8", newline="") as f:
                    f.write(content)
                paths.append(path)
        except OSError as e:
            self.logs.add_log(LogOperation.EXPORT, LogStatus.ERROR, f"CSV export failed: {e}")
            return []

        self._log_export(envelope, "CSV")
        return paths

    # ==================== IMPORT ====================

    def import_json(self, text: str) -> ImportResult:
        try:
            envelope = parse_envelope(text)
        except ImportFormatError as e:
            return self._fail(str(e))

        return self._merge(
            envelope.get("patients", []),
            envelope.get("appointments", []),
            show_dummy_data=envelope.get("showDummyData"),
        )

    def import_csv(self, files: Dict[str, str]) -> ImportResult:
        """Import the legacy pair. Files are told apart by their names."""
        patient_rows, appointment_rows = [], []
        recognized = False
        try:
            for name, text in files.items():
                lowered = os.path.basename(name).lower()
                if "patient" in lowered:
                    patient_rows.extend(read_csv(text))
                    recognized = True
                elif "appointment" in lowered:
                    appointment_rows.extend(read_csv(text))
                    recognized = True
                else:
                    logger.warning("Ignoring CSV file '%s': not a patients or appointments export", name)
        except ImportFormatError as e:
            return self._fail(str(e))

        if not recognized:
            return self._fail("No patients or appointments CSV file found (file names must contain 'patient' or 'appointment').")

        return self._merge(patient_rows, appointment_rows)

    def import_file(self, path: str) -> ImportResult:
        return self.import_files([path])

    def import_files(self, paths: List[str]) -> ImportResult:
        contents = {}
        try:
            for path in paths:
                with open(path, "r", encoding="utf-8") as f:
                    contents[path] = f.read()
        except (OSError, UnicodeDecodeError) as e:
            return self._fail(f"Could not read import file: {e}")

        extensions = {os.path.splitext(path)[1].lower() for path in contents}
        if extensions == {".json"} and len(contents) == 1:
            return self.import_json(next(iter(contents.values())))
        if extensions == {".csv"}:
            return self.import_csv(contents)
        return self._fail("Select one .json export or the patients/appointments .csv files.")

    # -----------------------------
    # Merge pipeline
    # -----------------------------
    def _merge(self, raw_patients, raw_appointments, show_dummy_data=None) -> ImportResult:
        with write_lock(self.patients, self.appointments):
            patient_items = self.patients.snapshot()
            appointment_items = self.appointments.snapshot()
            if patient_items is None or appointment_items is None:
                return self._fail("Stored records could not be read; nothing was imported.")

            new_patients, patient_counts = classify_records(
                raw_patients, patient_items, Patient, REQUIRED_PATIENT_FIELDS
            )
            new_appointments, appointment_counts = classify_records(
                raw_appointments, appointment_items, Appointment, REQUIRED_APPOINTMENT_FIELDS
            )

            changes = []
            if new_patients:
                patient_items.update(new_patients)
                changes.append((self.patients, patient_items))
            if new_appointments:
                appointment_items.update(new_appointments)
                changes.append((self.appointments, appointment_items))

            if changes and not commit_together(self.store, changes):
                return self._fail("Could not save imported records; nothing was imported.")

        if show_dummy_data is not None:
            self.demo.set_enabled(show_dummy_data)

        message = summarize(patient_counts, appointment_counts)
        skipped = patient_counts.duplicates + patient_counts.invalid + appointment_counts.duplicates + appointment_counts.invalid
        status = LogStatus.WARNING if skipped else LogStatus.SUCCESS

        self.logs.add_log(LogOperation.IMPORT, status, message)
        return ImportResult(
            status=status,
            message=message,
            patients=patient_counts,
            appointments=appointment_counts,
        )

    def _fail(self, message: str) -> ImportResult:
        self.logs.add_log(LogOperation.IMPORT, LogStatus.ERROR, message)
        return ImportResult(status=LogStatus.ERROR, message=message)
