from __future__ import annotations

import uuid
from datetime import date, datetime, timezone
from threading import Lock
from typing import Callable, Union

IdGenerator = Callable[[], str]
Clock = Callable[[], datetime]


# PUBLIC_INTERFACE
def uuid4_id() -> str:
    """Return a random UUID4 string; the default id generator."""
    return str(uuid.uuid4())


# PUBLIC_INTERFACE
class SequentialIdGenerator:
    """
    Callable id generator producing "1", "2", ... (optionally prefixed).

    Ids never repeat for the lifetime of the generator, which makes it usable
    wherever readable, deterministic ids are preferable to UUIDs.
    """

    def __init__(self, start: int = 1, prefix: str = "") -> None:
        self._lock = Lock()
        self._next = start
        self._prefix = prefix

    def __call__(self) -> str:
        with self._lock:
            i = self._next
            self._next += 1
        return f"{self._prefix}{i}"


# PUBLIC_INTERFACE
def utc_now() -> datetime:
    """Timezone-aware current time in UTC; the default clock."""
    return datetime.now(timezone.utc)


# PUBLIC_INTERFACE
def local_now() -> datetime:
    """Naive current local time."""
    return datetime.now()


# PUBLIC_INTERFACE
def truncate_to_day(value: Union[date, datetime]) -> date:
    """
    Discard the time of day from a timestamp.

    Aware datetimes are converted to UTC first so that two instants on the same
    UTC day always truncate to the same date. Naive datetimes are taken as-is.
    """
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date()
    return value
