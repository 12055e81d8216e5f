from datetime import date, datetime, timezone


def now_utc() -> datetime:
    """Return a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def now_iso() -> str:
    """ISO-8601 UTC timestamp with millisecond precision, e.g. 2025-01-10T09:00:00.000Z"""
    return now_utc().isoformat(timespec="milliseconds").replace("+00:00", "Z")


def to_iso_date(value) -> str:
    """Normalize a date, datetime or date-ish string to YYYY-MM-DD."""
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()

    text = str(value or "").strip()
    if not text:
        raise ValueError("Appointment date is required.")
    # Accept full ISO timestamps as well as plain dates
    try:
        return date.fromisoformat(text[:10]).isoformat()
    except ValueError:
        raise ValueError(f"Invalid appointment date: {value!r}")


def display_time_to_minutes(time_str: str) -> int:
    """Convert a display time like '09:30 AM' or '14:05' to minutes after midnight.

    Unparseable values sort first (0).
    """
    parts = (time_str or "").strip().split()
    if not parts:
        return 0

    clock = parts[0]
    modifier = parts[1].upper() if len(parts) > 1 else ""
    try:
        hours_str, minutes_str = clock.split(":")[:2]
        hours = int(hours_str)
        minutes = int(minutes_str)
    except ValueError:
        return 0

    if modifier == "PM" and hours < 12:
        hours += 12
    if modifier == "AM" and hours == 12:
        hours = 0

    return hours * 60 + minutes
