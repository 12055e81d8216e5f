"""
Pytest configuration for the clinic_records test suite.

Tests run against the in-memory store unless they ask for the sqlite one.
"""
import pytest

from clinic_records.core.errors import StorageError
from clinic_records.core.events import EventBus
from clinic_records.core.storage import MemoryKeyValueStore, SqlKeyValueStore
from clinic_records.services.clinic_service import ClinicData


class FlakyStore(MemoryKeyValueStore):
    """Memory store whose reads and writes can be switched to fail.

    fail_write_keys makes any write touching one of those keys fail.
    """

    def __init__(self):
        super().__init__()
        self.fail_writes = False
        self.fail_reads = False
        self.fail_write_keys = set()

    def _raw_get(self, key):
        if self.fail_reads:
            raise OSError("database is locked")
        return super()._raw_get(key)

    def _raw_set_many(self, items):
        if self.fail_writes or self.fail_write_keys & set(items):
            raise StorageError("disk full")
        super()._raw_set_many(items)


@pytest.fixture
def store():
    return FlakyStore()


@pytest.fixture
def bus():
    return EventBus()


@pytest.fixture
def clinic(store, bus):
    """Initialized ClinicData over an empty in-memory store."""
    data = ClinicData(store=store, bus=bus)
    data.initialize()
    return data


@pytest.fixture
def sql_store(tmp_path):
    sql = SqlKeyValueStore(f"sqlite:///{tmp_path / 'clinic.db'}")
    yield sql
    sql.dispose()


@pytest.fixture
def jane(clinic):
    return clinic.patients.add_patient({
        "name": "Jane Roe",
        "phone": "555-0100",
        "bloodPressure": "118/76",
        "weight": "61 kg",
    })
