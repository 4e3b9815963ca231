from datetime import datetime, timedelta, timezone

import pytest

from todo_store import InMemoryRepository, SequentialIdGenerator, TodoStatus


class FrozenClock:
    """Clock returning a fixed instant until moved explicitly."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def set(self, now: datetime) -> None:
        self.now = now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


def utc(year, month, day, hour=0, minute=0):
    return datetime(year, month, day, hour, minute, tzinfo=timezone.utc)


class ScriptedIds:
    """Id generator handing out a predefined list of ids."""

    def __init__(self, *ids: str):
        self._ids = list(ids)

    def __call__(self) -> str:
        return self._ids.pop(0)


@pytest.fixture
def clock():
    return FrozenClock(utc(2024, 11, 10))


@pytest.fixture
def repo(clock):
    return InMemoryRepository(id_generator=SequentialIdGenerator(), clock=clock)


@pytest.fixture
def seeded_repo(clock):
    """
    Two todos:
    - "1234": "Description 1234", Done, created 2024-11-11
    - "1235": "Description 1235", NotDone, created 2024-11-09
    """
    r = InMemoryRepository(id_generator=ScriptedIds("1234", "1235"), clock=clock)
    clock.set(utc(2024, 11, 11, 8, 30))
    r.insert("Description 1234", TodoStatus.DONE)
    clock.set(utc(2024, 11, 9, 17, 45))
    r.insert("Description 1235", TodoStatus.NOT_DONE)
    return r
