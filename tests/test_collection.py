import math

import pytest

from nbody.collection import BodyCollection
from nbody.constants import G
from nbody.data_models import Body
from nbody.vector_utils import ZERO


def make(name, mass=1.0, position=ZERO, velocity=ZERO):
    return Body(mass, position, velocity, name=name)


def names(collection):
    return [b.name for b in collection]


def test_add_is_queued_until_update():
    c = BodyCollection()
    c.add_body(make("A"))
    assert len(c) == 0
    assert c.has_pending()

    c.update_collection()
    assert len(c) == 1
    assert not c.has_pending()


def test_additions_keep_fifo_order():
    c = BodyCollection()
    c.add_body(make("A"))
    c.add_body(make("B"))
    c.update_collection()

    assert len(c) == 2
    assert names(c) == ["A", "B"]


def test_removals_apply_in_descending_order():
    c = BodyCollection()
    for n in ("A", "B", "C"):
        c.add_body(make(n))
    c.update_collection()

    c.remove_body(0)
    c.remove_body(2)
    c.update_collection()

    assert names(c) == ["B"]


def test_removal_keeps_survivor_order():
    c = BodyCollection()
    for n in "ABCDE":
        c.add_body(make(n))
    c.update_collection()

    c.remove_body(3)
    c.remove_body(1)
    c.update_collection()

    assert names(c) == ["A", "C", "E"]


def test_out_of_range_removal_is_ignored():
    c = BodyCollection()
    c.add_body(make("A"))
    c.remove_body(0)  # not committed yet
    c.update_collection()
    assert names(c) == ["A"]

    c.remove_body(5)
    c.remove_body(-1)
    assert c.pending_removals == []


def test_duplicate_removal_removes_once():
    c = BodyCollection()
    for n in "ABC":
        c.add_body(make(n))
    c.update_collection()

    c.remove_body(1)
    c.remove_body(1)
    c.update_collection()

    assert names(c) == ["A", "C"]


def test_removed_body_handles_stay_usable():
    c = BodyCollection()
    c.add_body(make("A", mass=3.0))
    c.update_collection()
    handle = c[0]

    c.remove_body(0)
    c.update_collection()

    assert c.is_empty()
    assert handle.mass == 3.0


def test_snapshot_is_a_copy():
    c = BodyCollection()
    c.add_body(make("A", position=(1.0, 0.0, 0.0)))
    c.update_collection()

    snap = c.snapshot()
    c[0].position = (5.0, 5.0, 5.0)

    assert snap[0].position == (1.0, 0.0, 0.0)


def test_total_energy_of_two_bodies():
    c = BodyCollection()
    c.add_body(make("A", mass=2.0e10, velocity=(3.0, 0.0, 0.0)))
    c.add_body(make("B", mass=5.0e10, position=(100.0, 0.0, 0.0), velocity=(0.0, -1.0, 0.0)))
    c.update_collection()

    kinetic = 0.5 * 2.0e10 * 9.0 + 0.5 * 5.0e10 * 1.0
    potential = -G * 2.0e10 * 5.0e10 / 100.0
    assert c.total_energy() == pytest.approx(kinetic + potential)


def test_total_energy_skips_coincident_pairs():
    c = BodyCollection()
    c.add_body(make("A", mass=1.0e20, velocity=(1.0, 0.0, 0.0)))
    c.add_body(make("B", mass=1.0e20))
    c.update_collection()

    energy = c.total_energy()
    assert math.isfinite(energy)
    assert energy == pytest.approx(0.5 * 1.0e20)


def test_total_energy_of_empty_collection_is_zero():
    assert BodyCollection().total_energy() == 0.0


def test_center_of_mass_is_mass_weighted():
    c = BodyCollection()
    c.add_body(make("A", mass=3.0, position=(0.0, 0.0, 0.0)))
    c.add_body(make("B", mass=1.0, position=(4.0, 8.0, -4.0)))
    c.update_collection()

    assert c.center_of_mass() == pytest.approx((1.0, 2.0, -1.0))


def test_center_of_mass_degenerate_cases_return_origin():
    empty = BodyCollection()
    assert empty.center_of_mass() == ZERO

    massless = BodyCollection()
    massless.add_body(make("A", mass=0.0, position=(1.0, 2.0, 3.0)))
    massless.add_body(make("B", mass=0.0, position=(-4.0, 0.0, 9.0)))
    massless.update_collection()
    com = massless.center_of_mass()
    assert com == ZERO
    assert not any(math.isnan(x) for x in com)


def test_total_momentum_and_mass():
    c = BodyCollection()
    c.add_body(make("A", mass=2.0, velocity=(1.0, 0.0, 0.0)))
    c.add_body(make("B", mass=1.0, velocity=(-2.0, 3.0, 0.0)))
    c.update_collection()

    assert c.total_momentum() == (0.0, 3.0, 0.0)
    assert c.total_mass() == 3.0


def test_clear_drops_everything():
    c = BodyCollection()
    c.add_body(make("A"))
    c.update_collection()
    c.add_body(make("B"))
    c.remove_body(0)

    c.clear()

    assert len(c) == 0
    assert not c.has_pending()
