from datetime import datetime, timezone

import pytest

from orrery.core.timekeeping import Clock
from orrery.data.bodies import build_registry

J2000 = datetime(2000, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
J2000_MS = 946_728_000_000.0


@pytest.fixture
def fixed_clock():
    return Clock(source=lambda: J2000_MS)


@pytest.fixture
def registry(fixed_clock):
    return build_registry(fixed_clock)
