from clinic_records.core.config import DATABASE_URL
from clinic_records.core.storage import create_store

store = create_store()
print("Store:", store.backend_name, DATABASE_URL if store.backend_name == "sqlite" else "")

keys = store.list_keys()
print("Keys:", keys)

for key in keys:
    value = store.get(key)
    if isinstance(value, (list, dict)):
        print(f"  {key}: {len(value)} record(s)")
    else:
        print(f"  {key}: {value!r}")
