from datetime import date, datetime

import pytest

from clinic_records.core.helpers import TimestampIdGenerator
from clinic_records.core.time_utils import display_time_to_minutes, now_iso, to_iso_date


class TestIsoDates:

    def test_plain_date_string(self):
        assert to_iso_date("2025-01-10") == "2025-01-10"

    def test_full_timestamp_is_truncated(self):
        assert to_iso_date("2025-01-10T15:30:00.000Z") == "2025-01-10"

    def test_date_objects(self):
        assert to_iso_date(date(2025, 1, 10)) == "2025-01-10"
        assert to_iso_date(datetime(2025, 1, 10, 23, 59)) == "2025-01-10"

    @pytest.mark.parametrize("value", [None, "", "10/01/2025"])
    def test_rejects_missing_or_unparseable(self, value):
        with pytest.raises(ValueError):
            to_iso_date(value)

    def test_now_iso_format(self):
        stamp = now_iso()

        assert stamp.endswith("Z")
        assert len(stamp) == len("2025-01-10T09:00:00.000Z")


class TestDisplayTime:

    @pytest.mark.parametrize("text, minutes", [
        ("09:30 AM", 570),
        ("12:00 AM", 0),
        ("12:30 PM", 750),
        ("02:45 PM", 885),
        ("14:05", 845),
        ("", 0),
        ("soon", 0),
    ])
    def test_minutes_after_midnight(self, text, minutes):
        assert display_time_to_minutes(text) == minutes


class TestTimestampIds:

    def test_bumps_past_existing(self):
        gen = TimestampIdGenerator()
        first = gen.next_id(set())

        second = gen.next_id({first})

        assert second != first
