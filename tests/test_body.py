import math

import pytest

from nbody.constants import G
from nbody.data_models import Body
from nbody.vector_utils import ZERO, vec_len, vec_norm, vec_sub


def test_new_body_starts_without_acceleration():
    body = Body(1000.0, (1.0, 2.0, 3.0), (10.0, 20.0, 30.0))

    assert body.mass == 1000.0
    assert body.position == (1.0, 2.0, 3.0)
    assert body.velocity == (10.0, 20.0, 30.0)
    assert body.acceleration == ZERO
    assert body.acceleration_initialized is False


def test_vectors_are_coerced_to_float_tuples():
    body = Body(1, [1, 2, 3], [0, 0, 0])
    assert body.position == (1.0, 2.0, 3.0)
    assert all(isinstance(c, float) for c in body.position)
    assert isinstance(body.mass, float)


def test_negative_mass_is_rejected():
    with pytest.raises(ValueError):
        Body(-1.0, ZERO, ZERO)


@pytest.mark.parametrize("mass", [math.nan, math.inf, -math.inf])
def test_non_finite_mass_is_rejected(mass):
    with pytest.raises(ValueError):
        Body(mass, ZERO, ZERO)


def test_reset_and_set_acceleration():
    body = Body(1.0, ZERO, ZERO)
    body.set_acceleration((1.0, 2.0, 3.0))
    assert body.acceleration_initialized is True

    body.reset_acceleration()
    assert body.acceleration == ZERO
    assert body.acceleration_initialized is False


def test_kinetic_energy_and_momentum():
    body = Body(2.0, ZERO, (3.0, 4.0, 0.0))
    assert body.kinetic_energy() == pytest.approx(0.5 * 2.0 * 25.0)
    assert body.momentum() == (6.0, 8.0, 0.0)


def test_gravitational_force_points_toward_other():
    a = Body(1000.0, ZERO, ZERO)
    b = Body(2000.0, (1.0, 0.0, 0.0), ZERO)

    force = a.gravitational_force_to(b)

    assert force[0] > 0.0
    assert force[1] == 0.0 and force[2] == 0.0
    assert vec_len(force) == pytest.approx(G * 1000.0 * 2000.0)


def test_gravitational_force_follows_inverse_square():
    a = Body(5.0e24, ZERO, ZERO)
    b = Body(7.0e22, (3.0e8, 4.0e8, 0.0), ZERO)

    force = a.gravitational_force_to(b)

    assert vec_len(force) == pytest.approx(G * 5.0e24 * 7.0e22 / 5.0e8 ** 2, rel=1e-12)
    direction = vec_norm(force)
    assert direction[0] == pytest.approx(0.6)
    assert direction[1] == pytest.approx(0.8)


def test_forces_are_equal_and_opposite():
    a = Body(3.0e20, (1.0e9, -2.0e9, 5.0e8), ZERO)
    b = Body(8.0e25, (-4.0e9, 3.0e9, 0.0), ZERO)

    fab = a.gravitational_force_to(b)
    fba = b.gravitational_force_to(a)

    for x, y in zip(fab, fba):
        assert x == pytest.approx(-y)


def test_coincident_bodies_have_exactly_zero_force():
    a = Body(1.0e30, (1.0e11, 2.0e11, 3.0e11), ZERO)
    b = Body(5.0e24, (1.0e11, 2.0e11, 3.0e11), ZERO)

    force = a.gravitational_force_to(b)

    assert force == (0.0, 0.0, 0.0)
    assert not any(math.isnan(c) or math.isinf(c) for c in force)


def test_no_force_on_itself():
    a = Body(1.0e30, (1.0, 1.0, 1.0), ZERO)
    assert a.gravitational_force_to(a) == ZERO


def test_massless_body_ignores_gravity():
    tracer = Body(0.0, ZERO, ZERO)
    tracer.acceleration = (1.0, -2.0, 3.0)
    heavy = Body(1.0e30, (1.0e9, 0.0, 0.0), ZERO)

    tracer.apply_gravitational_acceleration(heavy)

    assert tracer.acceleration == (1.0, -2.0, 3.0)


def test_apply_gravitational_acceleration_accumulates():
    earth = Body(5.972e24, (1.5e11, 0.0, 0.0), ZERO)
    sun = Body(1.989e30, ZERO, ZERO)
    moon = Body(7.342e22, (1.5e11 + 3.844e8, 0.0, 0.0), ZERO)

    earth.apply_gravitational_acceleration(sun)
    after_sun = earth.acceleration
    earth.apply_gravitational_acceleration(moon)

    expected_sun = G * 1.989e30 / 1.5e11 ** 2
    expected_moon = G * 7.342e22 / 3.844e8 ** 2
    assert after_sun[0] == pytest.approx(-expected_sun)
    assert earth.acceleration[0] == pytest.approx(-expected_sun + expected_moon)


def test_copy_is_independent():
    body = Body(1.0, (1.0, 2.0, 3.0), ZERO, name="Probe")
    clone = body.copy()
    body.position = (9.0, 9.0, 9.0)

    assert clone.position == (1.0, 2.0, 3.0)
    assert clone.name == "Probe"
    assert clone is not body


def test_double_precision_survives_interplanetary_offsets():
    # 1 m apart at 1 AU from the origin: float32 would lose this entirely
    a = Body(1.0, (1.495978707e11, 0.0, 0.0), ZERO)
    b = Body(1.0, (1.495978707e11 + 1.0, 0.0, 0.0), ZERO)
    assert vec_sub(b.position, a.position)[0] == 1.0
