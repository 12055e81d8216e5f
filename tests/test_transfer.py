"""
Tests for JSON / CSV import and export.
"""
import json

import pytest

from clinic_records.core.events import EventBus
from clinic_records.core.storage import MemoryKeyValueStore
from clinic_records.models.log_entry import LogOperation, LogStatus
from clinic_records.services.clinic_service import ClinicData
from clinic_records.services.csv_codec import PATIENT_COLUMNS, read_csv, write_csv


@pytest.fixture
def other_clinic():
    data = ClinicData(store=MemoryKeyValueStore(), bus=EventBus())
    data.initialize()
    return data


@pytest.fixture
def populated(clinic, jane):
    clinic.patients.add_patient({"name": "Sam Lee", "medicalHistory": 'Asthma, "mild" since 2010'})
    appt = clinic.appointments.add_appointment({"patientId": jane.id, "date": "2025-01-10", "time": "09:00 AM", "reason": "Checkup"})
    clinic.appointments.update_appointment_status(appt.id, "completed", "Diagnosis: Bronchitis\nBlood Pressure: 128/82")
    return clinic


class TestExport:

    def test_envelope_shape(self, populated):
        envelope = json.loads(populated.transfer.export_json())

        assert set(envelope) == {"patients", "appointments", "exportDate", "showDummyData"}
        assert envelope["exportDate"].endswith("Z")
        assert envelope["showDummyData"] is False
        assert {p["name"] for p in envelope["patients"]} == {"Jane Roe", "Sam Lee"}
        assert envelope["appointments"][0]["medicalRecord"]["diagnosis"] == "Bronchitis"

    def test_seed_records_excluded_by_default(self, clinic, jane):
        clinic.demo.toggle_dummy_data(True)

        default = clinic.transfer.build_export()
        everything = clinic.transfer.build_export(include_seed=True)

        assert [p["id"] for p in default["patients"]] == [jane.id]
        assert len(everything["patients"]) == 6
        assert default["showDummyData"] is True

    def test_export_is_logged(self, populated):
        populated.transfer.export_json()

        latest = populated.logs.get_logs()[0]
        assert latest.operation == LogOperation.EXPORT
        assert latest.status == LogStatus.SUCCESS

    def test_write_export_file(self, populated, tmp_path):
        path = populated.transfer.write_export(str(tmp_path / "exports"))

        assert path.endswith(".json")
        with open(path, encoding="utf-8") as f:
            assert len(json.load(f)["patients"]) == 2

    def test_failed_write_logs_only_the_error(self, populated, tmp_path):
        blocked = tmp_path / "not-a-folder"
        blocked.write_text("occupied")

        assert populated.transfer.write_export(str(blocked)) is None

        export_entries = [e for e in populated.logs.get_logs() if e.operation == LogOperation.EXPORT]
        assert [e.status for e in export_entries] == [LogStatus.ERROR]

    def test_write_export_logs_success_once(self, populated, tmp_path):
        populated.transfer.write_export(str(tmp_path))

        export_entries = [e for e in populated.logs.get_logs() if e.operation == LogOperation.EXPORT]
        assert [e.status for e in export_entries] == [LogStatus.SUCCESS]


class TestJsonImport:

    def test_round_trip_into_empty_clinic(self, populated, other_clinic):
        result = other_clinic.transfer.import_json(populated.transfer.export_json())

        assert result.status == LogStatus.SUCCESS
        assert result.patients.success == 2
        assert result.appointments.success == 1
        assert [p.to_document() for p in other_clinic.patients.get_patients()] == \
            [p.to_document() for p in populated.patients.get_patients()]
        assert other_clinic.appointments.get_appointments()[0].medical_record.diagnosis == "Bronchitis"

    def test_reimport_is_all_duplicates(self, populated):
        before = populated.patients.get_patients()

        result = populated.transfer.import_json(populated.transfer.export_json())

        assert result.success == 0
        assert result.duplicates == 3
        assert result.status == LogStatus.WARNING
        assert populated.patients.get_patients() == before

    def test_partial_overlap_imports_only_new(self, populated, other_clinic):
        exported = populated.transfer.export_json()
        other_clinic.transfer.import_json(json.dumps({"patients": json.loads(exported)["patients"][:1]}))

        result = other_clinic.transfer.import_json(exported)

        assert result.patients.success == 1
        assert result.patients.duplicates == 1
        assert other_clinic.patients.count() == 2

    def test_record_without_name_is_invalid(self, other_clinic):
        payload = {"patients": [{"id": "50"}, {"id": "51", "name": "   "}, {"id": "52", "name": "Ok"}]}

        result = other_clinic.transfer.import_json(json.dumps(payload))

        assert result.patients.invalid == 2
        assert result.patients.success == 1
        assert other_clinic.patients.ids() == ["52"]

    def test_schema_violation_is_invalid(self, other_clinic):
        payload = {"appointments": [{"id": "9", "patientId": "1", "status": "rescheduled", "date": "2025-01-01"}]}

        result = other_clinic.transfer.import_json(json.dumps(payload))

        assert result.appointments.invalid == 1
        assert other_clinic.appointments.count() == 0

    def test_repeated_id_in_file_is_duplicate(self, other_clinic):
        payload = {"patients": [{"id": "70", "name": "First"}, {"id": "70", "name": "Second"}]}

        result = other_clinic.transfer.import_json(json.dumps(payload))

        assert result.patients.success == 1
        assert result.patients.duplicates == 1
        assert other_clinic.patients.get_patient_by_id("70").name == "First"

    def test_numeric_ids_are_accepted(self, other_clinic):
        result = other_clinic.transfer.import_json(json.dumps({"patients": [{"id": 60, "name": "Numeric"}]}))

        assert result.patients.success == 1
        assert other_clinic.patients.get_patient_by_id("60").name == "Numeric"

    def test_bare_list_is_patients(self, other_clinic):
        result = other_clinic.transfer.import_json(json.dumps([{"id": "80", "name": "Legacy"}]))

        assert result.patients.success == 1

    @pytest.mark.parametrize("text", [
        "{not json",
        '"just a string"',
        '{"unrelated": []}',
        '{"patients": "nope"}',
    ])
    def test_structural_failure_applies_nothing(self, clinic, jane, text):
        result = clinic.transfer.import_json(text)

        assert result.status == LogStatus.ERROR
        assert not result.ok
        assert result.success == 0
        assert clinic.patients.ids() == [jane.id]
        assert clinic.logs.get_logs()[0].status == LogStatus.ERROR

    def test_failed_persist_applies_nothing(self, clinic, store, jane):
        store.fail_writes = True

        result = clinic.transfer.import_json(json.dumps({"patients": [{"id": "90", "name": "Lost"}]}))

        assert result.status == LogStatus.ERROR
        assert clinic.patients.ids() == [jane.id]

    def test_show_dummy_data_is_stored_not_applied(self, other_clinic):
        other_clinic.transfer.import_json(json.dumps({"patients": [], "showDummyData": True}))

        assert other_clinic.demo.is_enabled() is True
        assert other_clinic.patients.count() == 0

    def test_import_is_logged_with_counts(self, other_clinic):
        other_clinic.transfer.import_json(json.dumps({"patients": [{"id": "7", "name": "A"}, {"id": "8"}]}))

        entry = other_clinic.logs.get_logs()[0]
        assert entry.operation == LogOperation.IMPORT
        assert entry.status == LogStatus.WARNING
        assert "Imported 1 record(s)" in entry.details
        assert "1 invalid" in entry.details


class TestCsv:

    def test_embedded_commas_and_quotes_survive(self):
        docs = [{"id": "6", "name": "Roe, Jane", "medicalHistory": 'Asthma, "mild"'}]

        rows = read_csv(write_csv(docs, PATIENT_COLUMNS))

        assert rows == docs

    def test_every_cell_is_quoted(self):
        text = write_csv([{"id": "6", "name": "Jane"}], ["id", "name"])

        assert text == '"id","name"\n"6","Jane"\n'

    def test_byte_order_mark_is_ignored(self):
        rows = read_csv('\ufeff"id","name"\n"6","Jane"\n')

        assert rows == [{"id": "6", "name": "Jane"}]

    def test_csv_round_trip(self, populated, other_clinic):
        files = populated.transfer.export_csv()

        result = other_clinic.transfer.import_csv(files)

        assert set(files) == {"patients_export.csv", "appointments_export.csv"}
        assert result.patients.success == 2
        assert result.appointments.success == 1
        sam = [p for p in other_clinic.patients.get_patients() if p.name == "Sam Lee"][0]
        assert sam.medical_history == 'Asthma, "mild" since 2010'
        jane = [p for p in other_clinic.patients.get_patients() if p.name == "Jane Roe"][0]
        assert jane.visits[0].diagnosis == "Bronchitis"

    def test_missing_id_column_is_rejected(self, other_clinic):
        result = other_clinic.transfer.import_csv({"patients.csv": '"name"\n"Jane"\n'})

        assert result.status == LogStatus.ERROR
        assert other_clinic.patients.count() == 0

    def test_unrecognized_file_names(self, other_clinic):
        result = other_clinic.transfer.import_csv({"data.csv": '"id","name"\n"1","X"\n'})

        assert result.status == LogStatus.ERROR

    def test_import_files_from_disk(self, populated, other_clinic, tmp_path):
        paths = populated.transfer.write_csv_export(str(tmp_path))

        result = other_clinic.transfer.import_files(paths)

        assert len(paths) == 2
        assert result.success == 3

    def test_import_missing_file(self, other_clinic, tmp_path):
        result = other_clinic.transfer.import_file(str(tmp_path / "nope.json"))

        assert result.status == LogStatus.ERROR
