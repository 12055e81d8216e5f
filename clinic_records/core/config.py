import os
from dotenv import load_dotenv


# Load .env so CLINIC_* settings are available when running scripts or Streamlit
try:
    load_dotenv()
except Exception:
    pass

# Path: project_root/data/clinic.db
BASE_DIR = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
DATA_DIR = os.getenv("CLINIC_DATA_DIR", os.path.join(BASE_DIR, "data"))
DB_PATH = os.getenv("CLINIC_DB_PATH", os.path.join(DATA_DIR, "clinic.db"))

EXPORT_DIR = os.getenv("CLINIC_EXPORT_DIR", os.path.join(DATA_DIR, "exports"))

DATABASE_URL = os.getenv("CLINIC_DATABASE_URL", f"sqlite:///{DB_PATH}")

# sqlite | memory | session
STORAGE_BACKEND = os.getenv("CLINIC_STORAGE_BACKEND", "sqlite").strip().lower()

LOG_LEVEL = os.getenv("CLINIC_LOG_LEVEL", "INFO").strip().upper()

# Operation log ring buffer size
MAX_LOG_ENTRIES = 100

# -----------------------------
# Storage keys
# -----------------------------
CONFIG_KEY_PREFIX = "@app_config_"

PATIENTS_KEY = "patients_data"
APPOINTMENTS_KEY = "appointments_data"
LOGS_KEY = "operation_logs"

SHOW_DUMMY_DATA_KEY = CONFIG_KEY_PREFIX + "show_dummy_data"
FIRST_LAUNCH_KEY = CONFIG_KEY_PREFIX + "first_launch"


def is_config_key(key: str) -> bool:
    """Config keys survive a clear-all."""
    return key.startswith(CONFIG_KEY_PREFIX)
