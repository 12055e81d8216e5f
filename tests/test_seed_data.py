"""
Tests for the "show dummy data" toggle.
"""
from clinic_records.core.config import APPOINTMENTS_KEY, SHOW_DUMMY_DATA_KEY
from clinic_records.core.events import DUMMY_DATA_CHANGED
from clinic_records.services.clinic_service import ClinicData
from clinic_records.services.seed_data import (
    SEED_APPOINTMENT_IDS,
    SEED_APPOINTMENTS,
    SEED_PATIENT_IDS,
    SEED_PATIENTS,
)


class TestSeedRecords:

    def test_seed_sizes(self):
        assert len(SEED_PATIENTS) == 5
        assert len(SEED_APPOINTMENTS) == 7

    def test_seed_appointments_point_at_seed_patients(self):
        for appt in SEED_APPOINTMENTS:
            assert appt["patientId"] in SEED_PATIENT_IDS


class TestDummyDataToggle:

    def test_off_by_default(self, clinic):
        assert clinic.demo.is_enabled() is False
        assert clinic.patients.count() == 0

    def test_toggle_on_injects_seed_set(self, clinic, bus):
        events = []
        bus.add_listener(DUMMY_DATA_CHANGED, lambda: events.append(1))

        assert clinic.demo.toggle_dummy_data(True) is True

        assert set(clinic.patients.ids()) == SEED_PATIENT_IDS
        assert set(clinic.appointments.ids()) == SEED_APPOINTMENT_IDS
        assert clinic.demo.is_enabled() is True
        assert events == [1]

    def test_toggle_on_twice_does_not_duplicate(self, clinic):
        clinic.demo.toggle_dummy_data(True)
        clinic.demo.toggle_dummy_data(True)

        assert clinic.patients.count() == 5
        assert clinic.appointments.count() == 7

    def test_toggle_on_restores_edited_seed_records(self, clinic):
        clinic.demo.toggle_dummy_data(True)
        clinic.patients.update_patient("1", {"name": "Edited"})

        clinic.demo.toggle_dummy_data(True)

        assert clinic.patients.get_patient_by_id("1").name == "John Doe"

    def test_toggle_off_keeps_user_records(self, clinic, jane):
        clinic.demo.toggle_dummy_data(True)
        appt = clinic.appointments.add_appointment({"patientId": jane.id, "date": "2025-01-10"})

        clinic.demo.toggle_dummy_data(False)

        assert clinic.patients.ids() == [jane.id]
        assert clinic.appointments.ids() == [appt.id]
        assert clinic.demo.is_enabled() is False

    def test_toggle_off_twice_is_harmless(self, clinic, jane):
        assert clinic.demo.toggle_dummy_data(False) is True
        assert clinic.demo.toggle_dummy_data(False) is True
        assert clinic.patients.ids() == [jane.id]

    def test_user_ids_never_collide_with_seeds(self, clinic):
        clinic.demo.toggle_dummy_data(True)

        created = clinic.patients.add_patient({"name": "New Patient"})

        assert created.id == "6"
        assert clinic.patients.count() == 6

    def test_failed_toggle_keeps_preference(self, clinic, store):
        store.fail_writes = True

        assert clinic.demo.toggle_dummy_data(True) is False
        assert clinic.demo.is_enabled() is False
        assert clinic.patients.count() == 0

    def test_preference_survives_restart(self, store, bus, clinic):
        clinic.demo.toggle_dummy_data(True)

        restarted = ClinicData(store=store, bus=bus)
        restarted.initialize()

        assert restarted.demo.is_enabled() is True
        assert restarted.patients.count() == 5

    def test_partial_failure_applies_nothing(self, clinic, store):
        store.fail_write_keys = {APPOINTMENTS_KEY}

        assert clinic.demo.toggle_dummy_data(True) is False

        assert clinic.patients.count() == 0
        assert clinic.appointments.count() == 0
        assert clinic.demo.is_enabled() is False

        store.fail_write_keys = set()
        assert clinic.demo.toggle_dummy_data(True) is True
        assert clinic.patients.count() == 5
        assert clinic.appointments.count() == 7

    def test_preference_failure_rolls_back_records(self, clinic, store):
        store.fail_write_keys = {SHOW_DUMMY_DATA_KEY}

        assert clinic.demo.toggle_dummy_data(True) is False
        assert clinic.patients.count() == 0
