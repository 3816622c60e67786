import time

import pytest

from nbody.constants import AU, EARTH_MASS, EARTH_ORBITAL_SPEED, SOLAR_MASS
from nbody.data_models import Body
from nbody.simulation import SimulationController


def wait_until(predicate, timeout=5.0, interval=0.005):
    """Poll `predicate` until it is truthy or `timeout` seconds pass."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(interval)
    return bool(predicate())


@pytest.fixture
def sun():
    return Body(SOLAR_MASS, (0.0, 0.0, 0.0), (0.0, 0.0, 0.0), name="Sun")


@pytest.fixture
def earth():
    return Body(EARTH_MASS, (AU, 0.0, 0.0), (0.0, EARTH_ORBITAL_SPEED, 0.0), name="Earth")


@pytest.fixture
def controller():
    sim = SimulationController(throttle=0.001)
    yield sim
    sim.stop()
