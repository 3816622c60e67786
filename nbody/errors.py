#!/usr/bin/env python3
"""
Exception types raised by the simulator.

- PhysicsError: a synchronous call on the simulation controller failed (lock
  could not be acquired, simulation already running, ...).
- ScenarioError: a scenario file could not be read or has the wrong header.
  Individual malformed records are skipped by the loader instead.
"""


class NBodyError(Exception):
    """Base class for all simulator errors."""


class PhysicsError(NBodyError):
    """Raised by the simulation controller for failed synchronous operations."""


class ScenarioError(NBodyError):
    """Raised when a scenario source cannot be parsed at all."""
