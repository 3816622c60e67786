#!/usr/bin/env python3
"""
BodyCollection: the set of live bodies plus queued additions and removals.

Mutation requests are queued and only take effect on update_collection(), so a
caller can batch several edits and apply them in one go, outside of the physics
tick. The collection itself is not thread-safe; SimulationController guards it
with a lock.

Removal semantics
- remove_body(index) is accepted only if the index is valid for the committed list
  at call time. Out-of-range requests are ignored, not errors, since queued
  additions may change the valid range before the flush.
- On flush, removals are applied in descending index order so earlier removals do
  not shift the indices of later ones. Survivors keep their relative order.
"""
from typing import Iterator, List

from .constants import G
from .data_models import Body
from .vector_utils import ZERO, Vec3, vec_add, vec_dist, vec_scale


class BodyCollection:
    """Committed bodies plus pending additions/removals."""

    def __init__(self):
        self.bodies: List[Body] = []
        self.pending_additions: List[Body] = []
        self.pending_removals: List[int] = []

    def __len__(self) -> int:
        return len(self.bodies)

    def __iter__(self) -> Iterator[Body]:
        return iter(self.bodies)

    def __getitem__(self, index: int) -> Body:
        return self.bodies[index]

    def is_empty(self) -> bool:
        return not self.bodies

    def has_pending(self) -> bool:
        return bool(self.pending_additions or self.pending_removals)

    def add_body(self, body: Body) -> None:
        """Queue a body; it becomes live on the next update_collection()."""
        self.pending_additions.append(body)

    def remove_body(self, index: int) -> None:
        """Queue removal of the committed body at `index`; ignored if out of range."""
        if 0 <= index < len(self.bodies):
            self.pending_removals.append(index)

    def update_collection(self) -> None:
        """Apply queued additions (FIFO), then queued removals (descending index)."""
        self.bodies.extend(self.pending_additions)
        self.pending_additions.clear()

        for index in sorted(set(self.pending_removals), reverse=True):
            if index < len(self.bodies):
                del self.bodies[index]
        self.pending_removals.clear()

    def clear(self) -> None:
        """Drop committed bodies and both queues."""
        self.bodies.clear()
        self.pending_additions.clear()
        self.pending_removals.clear()

    def snapshot(self) -> List[Body]:
        """Value copies of the committed bodies."""
        return [b.copy() for b in self.bodies]

    # -----------------------
    # Aggregate quantities
    # -----------------------

    def total_mass(self) -> float:
        return sum(b.mass for b in self.bodies)

    def total_momentum(self) -> Vec3:
        p = ZERO
        for b in self.bodies:
            p = vec_add(p, b.momentum())
        return p

    def total_energy(self) -> float:
        """
        Kinetic plus gravitational potential energy of the system [J].

            E = sum(1/2 m v^2) - sum_{i<j} G m_i m_j / |r_i - r_j|

        Pairs at zero separation contribute nothing instead of -inf.
        """
        kinetic = sum(b.kinetic_energy() for b in self.bodies)

        potential = 0.0
        n = len(self.bodies)
        for i in range(n):
            bi = self.bodies[i]
            for j in range(i + 1, n):
                bj = self.bodies[j]
                distance = vec_dist(bi.position, bj.position)
                if distance > 0.0:
                    potential -= G * bi.mass * bj.mass / distance

        return kinetic + potential

    def center_of_mass(self) -> Vec3:
        """Mass-weighted mean position; the origin when the total mass is zero."""
        total_mass = 0.0
        weighted = ZERO
        for b in self.bodies:
            total_mass += b.mass
            weighted = vec_add(weighted, vec_scale(b.position, b.mass))
        if total_mass > 0.0:
            return vec_scale(weighted, 1.0 / total_mass)
        return ZERO
