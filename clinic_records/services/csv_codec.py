"""
Legacy two-file CSV format.

One file per collection, a header row of field names, every value quoted
with doubled-quote escaping. Nested values (a patient's visits, an
appointment's medicalRecord) are JSON inside the cell.
"""
import csv
import io
import json
from typing import Iterable, List

from clinic_records.core.errors import ImportFormatError

PATIENT_COLUMNS = [
    "id", "name", "age", "gender", "phone", "email", "height", "weight",
    "bloodPressure", "medicalHistory", "lastVisit", "visits",
]

APPOINTMENT_COLUMNS = [
    "id", "patientId", "patientName", "date", "time", "reason", "status",
    "notes", "medicalRecord",
]

NESTED_COLUMNS = {"visits", "medicalRecord"}


def _cell(value) -> str:
    if value is None:
        return ""
    if isinstance(value, (dict, list)):
        return json.dumps(value)
    return str(value)


def write_csv(documents: Iterable[dict], columns: List[str]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(columns)
    for doc in documents:
        writer.writerow([_cell(doc.get(column)) for column in columns])
    return buffer.getvalue()


def read_csv(text: str) -> List[dict]:
    """Parse a CSV export back into record dicts.

    Empty cells are dropped so model defaults apply. A nested cell that is
    not valid JSON is kept as text and fails record validation later.
    """
    try:
        reader = csv.DictReader(io.StringIO((text or "").lstrip("\ufeff")))
        fieldnames = [name.strip() for name in (reader.fieldnames or [])]
        if "id" not in fieldnames:
            raise ImportFormatError("CSV file has no header row with an 'id' column.")
        reader.fieldnames = fieldnames

        records = []
        for row in reader:
            record = {}
            for key, value in row.items():
                # Extra cells beyond the header come back under a None key
                if key is None or value is None or value == "":
                    continue
                if key in NESTED_COLUMNS:
                    try:
                        value = json.loads(value)
                    except ValueError:
                        pass
                record[key] = value
            records.append(record)
        return records
    except csv.Error as e:
        raise ImportFormatError(f"Malformed CSV: {e}")
