import copy
import logging

from clinic_records.core.config import SHOW_DUMMY_DATA_KEY
from clinic_records.core.events import DUMMY_DATA_CHANGED
from .repository import commit_together, write_lock
from .seed_data import SEED_APPOINTMENTS, SEED_APPOINTMENT_IDS, SEED_PATIENTS, SEED_PATIENT_IDS

logger = logging.getLogger(__name__)


def seed_patients():
    return copy.deepcopy(SEED_PATIENTS)


def seed_appointments():
    return copy.deepcopy(SEED_APPOINTMENTS)


class DemoDataService:
    """The "show dummy data" preference and the seed records it controls."""

    def __init__(self, store, bus, patients, appointments):
        self.store = store
        self.bus = bus
        self.patients = patients
        self.appointments = appointments

    def is_enabled(self) -> bool:
        return self.store.get(SHOW_DUMMY_DATA_KEY) is True

    def set_enabled(self, enabled: bool) -> bool:
        """Store the preference without touching records (used for imported settings)."""
        return self.store.set(SHOW_DUMMY_DATA_KEY, bool(enabled))

    def toggle_dummy_data(self, enabled: bool) -> bool:
        """Inject or remove the seed set. Running it twice changes nothing more.

        Both collections and the preference are written in one store
        transaction, so a failure leaves all three as they were.
        """
        with write_lock(self.patients, self.appointments):
            patients = self.patients.snapshot()
            appointments = self.appointments.snapshot()
            if patients is None or appointments is None:
                logger.error("Error %s demo data: collections are unavailable", "adding" if enabled else "removing")
                return False

            # Drop any existing seed-ID records first so the set never duplicates
            for seed_id in SEED_PATIENT_IDS:
                patients.pop(seed_id, None)
            for seed_id in SEED_APPOINTMENT_IDS:
                appointments.pop(seed_id, None)
            if enabled:
                patients.update(self.patients.items_from(seed_patients()))
                appointments.update(self.appointments.items_from(seed_appointments()))

            ok = commit_together(
                self.store,
                [(self.patients, patients), (self.appointments, appointments)],
                extra={SHOW_DUMMY_DATA_KEY: bool(enabled)},
            )

        if not ok:
            logger.error("Error %s demo data", "adding" if enabled else "removing")
            return False

        logger.info("Demo data %s", "enabled" if enabled else "disabled")
        self.bus.emit(DUMMY_DATA_CHANGED)
        return True

    def initial_patients(self):
        """Initial collection for an empty store: seeds only when the toggle is on."""
        return seed_patients() if self.is_enabled() else []

    def initial_appointments(self):
        return seed_appointments() if self.is_enabled() else []
