#!/usr/bin/env python3
"""
Data models for the N-body simulator.

This module defines the core Body dataclass shared between physics, the
simulation controller and the viewer.

Units and usage
- position is in meters [m], velocity in meters per second [m/s], acceleration in
  [m/s^2], mass in kg. All components are Python floats (double precision).
- acceleration_initialized drives the two-phase Velocity-Verlet step. It is only
  True inside the integrator's critical section, never in a snapshot.
- name, radius and color are consumed by the viewer only; physics ignores them.
- Access to live Body instances is coordinated by SimulationController using a lock.
  Consumers receive copies (see Body.copy).
"""
import dataclasses
import math
from dataclasses import dataclass
from typing import Tuple

from .constants import DEFAULT_BODY_COLOR, G
from .vector_utils import ZERO, Vec3, vec3, vec_add, vec_len_sq, vec_scale, vec_sub


@dataclass
class Body:
    """
    Represents a point mass in the simulation.

    Fields:
    - mass: Mass in kilograms (>= 0; 0 is a massless tracer)
    - position: 3D position (x, y, z) in meters
    - velocity: 3D velocity (vx, vy, vz) in meters/second
    - acceleration: 3D acceleration in meters/second^2
    - acceleration_initialized: Whether acceleration was computed this tick
    - name: Identifier for the body
    - radius: Visual radius in meters
    - color: RGB tuple used for rendering
    """
    mass: float
    position: Vec3
    velocity: Vec3
    acceleration: Vec3 = ZERO
    acceleration_initialized: bool = False
    name: str = "Body"
    radius: float = 0.0
    color: Tuple[int, int, int] = DEFAULT_BODY_COLOR

    def __post_init__(self):
        if not math.isfinite(self.mass) or self.mass < 0:
            raise ValueError(f"Body '{self.name}' has invalid mass {self.mass}")
        self.mass = float(self.mass)
        self.position = vec3(self.position)
        self.velocity = vec3(self.velocity)
        self.acceleration = vec3(self.acceleration)

    def reset_acceleration(self) -> None:
        """Zero the acceleration and clear the initialized flag."""
        self.acceleration = ZERO
        self.acceleration_initialized = False

    def set_acceleration(self, acceleration: Vec3) -> None:
        """Store the acceleration and mark it as initialized for this tick."""
        self.acceleration = acceleration
        self.acceleration_initialized = True

    def kinetic_energy(self) -> float:
        return 0.5 * self.mass * vec_len_sq(self.velocity)

    def momentum(self) -> Vec3:
        return vec_scale(self.velocity, self.mass)

    def gravitational_force_to(self, other: "Body") -> Vec3:
        """
        Newtonian force exerted on this body by `other`, pointing toward `other`.

            F = G * m1 * m2 / r^2

        Returns the zero vector for coincident bodies (and for a body paired with
        itself) instead of propagating NaN/Inf.
        """
        if other is self:
            return ZERO
        displacement = vec_sub(other.position, self.position)
        distance_squared = vec_len_sq(displacement)
        if distance_squared == 0.0:
            return ZERO

        # |d| * r^2 folds the normalization into a single division
        force_over_distance = G * self.mass * other.mass / (distance_squared * distance_squared ** 0.5)
        return vec_scale(displacement, force_over_distance)

    def apply_gravitational_acceleration(self, other: "Body") -> None:
        """Accumulate F/m from `other` into acceleration. No-op for massless bodies."""
        if self.mass == 0.0:
            return
        force = self.gravitational_force_to(other)
        self.acceleration = vec_add(self.acceleration, vec_scale(force, 1.0 / self.mass))

    def copy(self) -> "Body":
        """Value copy; vectors are immutable tuples so a shallow copy is independent."""
        return dataclasses.replace(self)
