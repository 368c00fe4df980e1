import os
from datetime import datetime, timedelta

import pytest

# Keep tests fast: no artificial store delays unless a test asks for them
os.environ.setdefault("SIMULATE_LATENCY", "false")

from freelance_api.repositories import build_stores  # noqa: E402


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def clock():
    return FakeClock(datetime(2025, 6, 15, 9, 0, 0))


@pytest.fixture
def stores(clock):
    """Empty stores sharing the fake clock."""
    return build_stores(seed=False, clock=clock)


@pytest.fixture
def seeded_stores(clock):
    return build_stores(seed=True, clock=clock)
