# models/patient.py

from typing import List, Optional

from pydantic import Field, field_validator

from .base import StoredRecord
from .medical_record import Visit


class Patient(StoredRecord):
    id: str

    # Demographics
    name: str
    age: Optional[int] = None
    gender: str = ""
    phone: str = ""
    email: str = ""

    # Current vitals snapshot, overwritten when a visit records new values
    height: str = ""
    weight: str = ""
    blood_pressure: str = ""

    medical_history: str = ""

    # Append-only; insertion order is visit order
    visits: List[Visit] = Field(default_factory=list)
    last_visit: Optional[str] = None

    @field_validator("id", "name")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        value = (value or "").strip()
        if not value:
            raise ValueError("must not be empty")
        return value

    def __repr__(self):
        return f"<Patient {self.id} - {self.name}>"
