import time
import uuid
from typing import Collection


# -----------------------------
# ID generation strategies
# -----------------------------
class IdGenerator:
    """Produces a fresh ID that is neither taken nor reserved."""

    def next_id(self, existing: Collection[str], reserved: Collection[str] = ()) -> str:
        raise NotImplementedError


class SequentialIdGenerator(IdGenerator):
    """Counts up from `start` and returns the first free number as a string.

    With seed IDs 1-5 reserved and an empty collection the first patient gets
    "6". Not safe for concurrent writers; repositories call it under their
    write lock.
    """

    def __init__(self, start: int = 1):
        self.start = start

    def next_id(self, existing, reserved=()):
        candidate = self.start
        while str(candidate) in existing or str(candidate) in reserved:
            candidate += 1
        return str(candidate)


class UuidIdGenerator(IdGenerator):
    def next_id(self, existing, reserved=()):
        while True:
            candidate = uuid.uuid4().hex
            if candidate not in existing and candidate not in reserved:
                return candidate


class TimestampIdGenerator(IdGenerator):
    """Millisecond timestamp IDs (used for log entries), bumped on collision."""

    def next_id(self, existing, reserved=()):
        candidate = int(time.time() * 1000)
        while str(candidate) in existing or str(candidate) in reserved:
            candidate += 1
        return str(candidate)
