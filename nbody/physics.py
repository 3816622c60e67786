#!/usr/bin/env python3
"""
Core Physics Engine for the N-body simulator

Responsibilities
- Compute exact pairwise gravitational accelerations (direct summation, no softening).
- Advance body states using the Velocity-Verlet time integrator.
- Provide small helpers for common orbital computations (circular velocity, Kepler period).

Units and conventions
- World space positions are in meters [m].
- Velocities are in meters per second [m/s].
- Masses are in kilograms [kg].
- Time steps are in seconds [s].
- The gravitational constant G is expressed in SI: m^3 kg^-1 s^-2.

Numerical notes
- Everything is double precision. Conversion to anything narrower belongs to the
  viewer, never to this module.
- Coincident bodies (zero separation) contribute zero acceleration rather than
  producing NaN/Inf. There is no softening; the integrator is exact all-pairs.
- Complexity: acceleration computation is O(N^2) per evaluation, two evaluations
  per step.
- Energy: Velocity-Verlet is symplectic and second order; total energy oscillates
  around its initial value instead of drifting, and total momentum is conserved
  up to rounding because pairwise contributions are evaluated from one set of
  positions.
- The caller is responsible for keeping dt small (SimulationController clamps it);
  this module never clamps.

Threading
- This module is pure compute and stateless besides G. It is used by a controller
  that guards shared data with a lock.
"""

import math
from typing import List, Sequence

from .collection import BodyCollection
from .constants import G
from .data_models import Body
from .vector_utils import ZERO, Vec3, vec_add, vec_len_sq, vec_scale, vec_sub


def gravitational_acceleration(source_mass: float, displacement: Vec3,
                               gravitational_constant: float = G) -> Vec3:
    """
    Acceleration toward a source of mass `source_mass` located at `displacement`
    relative to the accelerated body:

        a = G * m * d / |d|^3

    Returns the zero vector when |d| == 0.
    """
    distance_squared = vec_len_sq(displacement)
    if distance_squared == 0.0:
        return ZERO
    inv_r_cubed = 1.0 / (distance_squared * math.sqrt(distance_squared))
    return vec_scale(displacement, gravitational_constant * source_mass * inv_r_cubed)


class VelocityVerlet:
    """
    Velocity-Verlet integrator for Newtonian gravity.

    One call to integration_step advances every committed body of a collection by dt:

        x(t+dt) = x(t) + v(t) dt + 1/2 a(t) dt^2
        v(t+dt) = v(t) + 1/2 (a(t) + a(t+dt)) dt

    where a(t+dt) is re-evaluated at the updated positions.
    """

    def __init__(self, gravitational_constant: float = G):
        self.gravitational_constant = float(gravitational_constant)

    def acceleration_on(self, index: int, bodies: Sequence[Body],
                        positions: Sequence[Vec3]) -> Vec3:
        """
        Sum of accelerations on bodies[index] from every other body.

        Args:
            index: Index of the accelerated body.
            bodies: Bodies providing masses.
            positions: Positions to evaluate at, same order as bodies.
        """
        xi = positions[index]
        total = ZERO
        for j, other in enumerate(bodies):
            if j == index or other.mass == 0.0:
                continue
            total = vec_add(total, gravitational_acceleration(
                other.mass, vec_sub(positions[j], xi), self.gravitational_constant))
        return total

    def compute_accelerations(self, bodies: Sequence[Body]) -> List[Vec3]:
        """Fresh accelerations for all bodies at their current positions, same order."""
        positions = [b.position for b in bodies]
        return [self.acceleration_on(i, bodies, positions) for i in range(len(bodies))]

    def integration_step(self, collection: BodyCollection, dt: float) -> None:
        """
        Advance the committed bodies of `collection` by dt seconds.

        Pending additions/removals are not touched. An empty collection is a no-op.

        Phase A: bodies whose acceleration is not initialized get a(t), computed from
                 the positions at time t, then positions move with the old acceleration.
                 Every a(t) is evaluated before any body moves. A body-by-body update
                 would let later bodies see earlier bodies already at t+dt, which breaks
                 the symmetry of the pair forces and lets total momentum drift.
        Phase B: a(t+dt) is evaluated afresh at the new positions. The resulting list
                 is indexed like the body list captured at the start of the tick.
        Phase C: velocities use the mean of a(t) and a(t+dt); a(t+dt) is stored and the
                 initialized flag is cleared for the next tick.
        """
        bodies = list(collection.bodies)
        if not bodies:
            return

        # Phase A: old accelerations from a consistent set of positions
        positions = [b.position for b in bodies]
        for i, body in enumerate(bodies):
            if not body.acceleration_initialized:
                body.reset_acceleration()
                body.set_acceleration(self.acceleration_on(i, bodies, positions))

        half_dt_squared = 0.5 * dt * dt
        for body in bodies:
            body.position = vec_add(
                vec_add(body.position, vec_scale(body.velocity, dt)),
                vec_scale(body.acceleration, half_dt_squared),
            )

        # Phase B: new accelerations at the updated positions
        new_accelerations = self.compute_accelerations(bodies)

        # Phase C: velocity update with the averaged acceleration
        half_dt = 0.5 * dt
        for body, new_acceleration in zip(bodies, new_accelerations):
            body.velocity = vec_add(
                body.velocity,
                vec_scale(vec_add(body.acceleration, new_acceleration), half_dt),
            )
            body.acceleration = new_acceleration
            body.acceleration_initialized = False


def circular_orbit_velocity(central_mass: float, orbital_radius: float) -> float:
    """
    Calculate the velocity needed for a circular orbit.

    For a circular orbit, the gravitational force provides exactly the
    centripetal force needed. This gives us:
    G * M / r = v^2 / r
    Therefore: v = sqrt(G * M / r)

    Args:
        central_mass: Mass of the central body in kg
        orbital_radius: Orbital radius in meters

    Returns:
        Orbital velocity in m/s for a circular orbit
    """
    if orbital_radius <= 0:
        return 0.0

    return math.sqrt(G * central_mass / orbital_radius)


def orbital_period(total_mass: float, semi_major_axis: float) -> float:
    """Kepler's third law: T = 2*pi*sqrt(a^3 / (G*M)). Returns 0 for degenerate input."""
    if total_mass <= 0 or semi_major_axis <= 0:
        return 0.0
    return 2.0 * math.pi * math.sqrt(semi_major_axis ** 3 / (G * total_mass))
