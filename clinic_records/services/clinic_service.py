import logging

from clinic_records.core.config import FIRST_LAUNCH_KEY, is_config_key
from clinic_records.core.events import DATA_CLEARED, EventBus
from clinic_records.core.storage import KeyValueStore, create_store
from clinic_records.models.log_entry import LogOperation, LogStatus
from .appointment_service import AppointmentRepository
from .log_service import OperationLogRepository
from .patient_service import PatientRepository
from .seed_data import SEED_APPOINTMENT_IDS, SEED_PATIENT_IDS
from .seed_service import DemoDataService
from .transfer_service import TransferService

logger = logging.getLogger(__name__)


class ClinicData:
    """Application root: one store, one event bus, and the services wired to them.

    Usage:
        clinic = ClinicData()
        clinic.initialize()
        patient = clinic.patients.add_patient({"name": "Jane Roe", "phone": "555-0100"})
    """

    def __init__(self, store: KeyValueStore = None, bus: EventBus = None, **repo_options):
        self.store = store if store is not None else create_store()
        self.bus = bus if bus is not None else EventBus()
        # Empty collections get the demo set only on a first launch; after a
        # clear-all they stay empty until the toggle is used again
        self._seed_on_load = False

        self.patients = PatientRepository(
            self.store,
            self.bus,
            reserved_ids=SEED_PATIENT_IDS,
            initial_data=lambda: self.demo.initial_patients() if self._seed_on_load else [],
            **repo_options,
        )
        self.appointments = AppointmentRepository(
            self.store,
            self.bus,
            self.patients,
            reserved_ids=SEED_APPOINTMENT_IDS,
            initial_data=lambda: self.demo.initial_appointments() if self._seed_on_load else [],
            **repo_options,
        )
        self.logs = OperationLogRepository(self.store, self.bus)
        self.demo = DemoDataService(self.store, self.bus, self.patients, self.appointments)
        self.transfer = TransferService(self.patients, self.appointments, self.logs, self.demo, self.store)

    @property
    def repositories(self):
        return [self.patients, self.appointments, self.logs]

    # -----------------------------
    # Startup
    # -----------------------------
    def is_first_launch(self) -> bool:
        return self.store.get(FIRST_LAUNCH_KEY) is None

    def mark_as_launched(self) -> bool:
        return self.store.set(FIRST_LAUNCH_KEY, False)

    def initialize(self) -> bool:
        """Load every collection. False if any of them could not be read."""
        first_launch = self.is_first_launch()
        if first_launch:
            logger.info("First launch detected, initializing storage")
        else:
            logger.debug("Storage already initialized from previous launch")

        self._seed_on_load = first_launch
        try:
            loaded = [repo.initialize() for repo in self.repositories]
        finally:
            self._seed_on_load = False

        if first_launch and all(loaded):
            self.mark_as_launched()
        return all(loaded)

    # -----------------------------
    # Bulk wipe
    # -----------------------------
    def clear_all_data(self) -> bool:
        """Remove every data collection; configuration keys are kept."""
        doomed = [key for key in self.store.list_keys() if not is_config_key(key)]
        ok = self.store.remove_many(doomed)

        for repo in self.repositories:
            repo.reset()

        if ok:
            self.logs.add_log(LogOperation.CLEAR, LogStatus.SUCCESS, f"Cleared {len(doomed)} stored collection(s).")
        else:
            self.logs.add_log(LogOperation.CLEAR, LogStatus.ERROR, "Failed to clear stored data.")

        self.bus.emit(DATA_CLEARED)
        return ok
