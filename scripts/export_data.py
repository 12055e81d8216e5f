import sys

from clinic_records.core.logging_utils import configure_logging
from clinic_records.services.clinic_service import ClinicData

# Usage: python scripts/export_data.py [output_dir] [--csv] [--include-seed]

configure_logging()

args = [a for a in sys.argv[1:] if not a.startswith("--")]
flags = {a for a in sys.argv[1:] if a.startswith("--")}
directory = args[0] if args else None

clinic = ClinicData()
clinic.initialize()

if "--csv" in flags:
    paths = clinic.transfer.write_csv_export(directory, include_seed="--include-seed" in flags)
else:
    path = clinic.transfer.write_export(directory, include_seed="--include-seed" in flags)
    paths = [path] if path else []

if not paths:
    print("Export failed. See the operation log for details.")
    sys.exit(1)

for path in paths:
    print(f"Wrote {path}")
