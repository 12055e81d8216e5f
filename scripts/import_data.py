import sys

from clinic_records.core.logging_utils import configure_logging
from clinic_records.services.clinic_service import ClinicData

# Usage: python scripts/import_data.py export.json
#        python scripts/import_data.py patients_export.csv appointments_export.csv

configure_logging()

if len(sys.argv) < 2:
    print("Usage: python scripts/import_data.py <file> [<file> ...]")
    sys.exit(2)

clinic = ClinicData()
clinic.initialize()

result = clinic.transfer.import_files(sys.argv[1:])
print(f"[{result.status.value}] {result.message}")

if not result.ok:
    sys.exit(1)
