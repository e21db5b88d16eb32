import itertools
import random

import pytest

from blackjack_coach.db.store import MemoryStatsStore
from blackjack_coach.trainer.scheduler import TrainingScheduler


class LogicalClock:
    """Monotonic millisecond counter that advances by `step` on every read"""

    def __init__(self, start: int = 1_000, step: int = 10):
        self._counter = itertools.count(start, step)

    def __call__(self) -> int:
        return next(self._counter)


@pytest.fixture
def clock():
    return LogicalClock()


@pytest.fixture
def store():
    return MemoryStatsStore()


@pytest.fixture
def scheduler(store, clock):
    return TrainingScheduler(store=store, rng=random.Random(1234), clock=clock)
