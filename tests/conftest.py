from datetime import datetime, timedelta, timezone

import pytest

from turnqueue.tickets import QueueEngine, TurnService


class FakeClock:
    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def engine(clock):
    return QueueEngine(clock=clock)


@pytest.fixture
def service(engine):
    return TurnService(engine)
