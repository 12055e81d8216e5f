# models/kv_entry.py

from datetime import datetime, timezone

from sqlalchemy import Column, String, Text, DateTime

from clinic_records.core.database import Base


def _utcnow():
    return datetime.now(timezone.utc)


class KeyValueEntry(Base):
    __tablename__ = "kv_store"

    # Logical storage key, e.g. "patients_data"
    key = Column(String, primary_key=True)

    # JSON document
    value = Column(Text, nullable=False)

    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow)

    def __repr__(self):
        return f"<KeyValueEntry {self.key}>"
