#!/usr/bin/env python3
"""
Simulation controller: owns the bodies and drives the integrator on a background thread.

Threading model
- Exactly one background thread ("nbody-physics") performs all physics mutation. It
  loops until cancelled: measure the wall-clock delta since the previous iteration,
  scale it by the simulation speed, clamp it to max_tick_dt, run one Velocity-Verlet
  tick under the collection lock, then wait `throttle` seconds.
- Every other thread (viewer, UI, scenario loading) only enqueues edits, reads
  snapshots or changes the speed. Those calls take the collection lock (or the speed
  lock) for a short critical section.
- A whole tick runs under the collection lock, so a snapshot never shows a
  half-advanced system and never sees acceleration_initialized set.
- Cancellation is cooperative through a threading.Event, which doubles as the
  throttle wait; stop() sets it and joins the thread.

Failure semantics
- Synchronous calls raise PhysicsError when a lock cannot be acquired within
  lock_timeout, and start() raises it when the thread is already running.
- An exception inside the physics loop is logged, stored in last_error and ends the
  loop (fail-stop). The simulation then simply stops advancing; start() may be
  called again.
"""
import logging
import threading
import time
from contextlib import contextmanager
from typing import Callable, Iterable, List, Optional

from .collection import BodyCollection
from .constants import (
    DEFAULT_SPEED,
    LOCK_TIMEOUT,
    MAX_TICK_DT,
    THREAD_NAME,
    THROTTLE_SECONDS,
)
from .data_models import Body
from .errors import PhysicsError
from .physics import VelocityVerlet
from .presets_loader import default_scenario
from .vector_utils import Vec3, clamp

logger = logging.getLogger(__name__)


@contextmanager
def _acquire(lock, timeout: Optional[float], what: str):
    """Hold `lock` for the block or raise PhysicsError if it is not free within timeout."""
    if not lock.acquire(timeout=-1 if timeout is None else timeout):
        raise PhysicsError(f"Failed to acquire {what} lock")
    try:
        yield
    finally:
        lock.release()


class SimulationController:
    """
    Shared simulation state between the physics thread and its consumers.
    Includes thread-safe operations guarded by locks.
    """
    def __init__(self,
                 integrator: Optional[VelocityVerlet] = None,
                 speed: float = DEFAULT_SPEED,
                 max_tick_dt: float = MAX_TICK_DT,
                 throttle: float = THROTTLE_SECONDS,
                 lock_timeout: Optional[float] = LOCK_TIMEOUT,
                 clock: Callable[[], float] = time.perf_counter):
        self.lock = threading.RLock()
        self.bodies = BodyCollection()
        self.integrator = integrator or VelocityVerlet()

        self.max_tick_dt = float(max_tick_dt)
        self.throttle = max(0.0, float(throttle))
        self.lock_timeout = lock_timeout
        self._clock = clock

        self._speed_lock = threading.Lock()
        self._speed = max(0.0, float(speed))

        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._lifecycle_lock = threading.Lock()

        # Written by the physics thread under self.lock
        self.simulated_time = 0.0
        self.tick_count = 0
        self.last_error: Optional[BaseException] = None

    def _locked(self):
        return _acquire(self.lock, self.lock_timeout, "bodies")

    # -----------------------
    # Lifecycle
    # -----------------------

    @property
    def is_running(self) -> bool:
        thread = self._thread
        return thread is not None and thread.is_alive()

    def start(self) -> None:
        """Spawn the physics thread. Raises PhysicsError if it is already running."""
        with self._lifecycle_lock:
            if self.is_running:
                raise PhysicsError("Simulation already running")
            self._stop_event.clear()
            self.last_error = None
            self._thread = threading.Thread(target=self._run, name=THREAD_NAME, daemon=True)
            self._thread.start()

    def stop(self) -> None:
        """
        Cancel the physics thread and wait for it to exit.

        Idempotent. Once it returns no further mutation happens until start().
        """
        if threading.current_thread() is self._thread:
            self._stop_event.set()
            return  # the loop exits on its own at the next check
        # set and join under one lock so a concurrent start() cannot clear the event in between
        with self._lifecycle_lock:
            self._stop_event.set()
            thread = self._thread
            if thread is None:
                return
            thread.join()
            self._thread = None
            logger.debug("Physics thread joined")

    def close(self) -> None:
        self.stop()

    def __enter__(self) -> "SimulationController":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _run(self) -> None:
        logger.info("Physics simulation thread started")
        last_time = self._clock()
        while not self._stop_event.is_set():
            now = self._clock()
            delta_time = now - last_time
            last_time = now

            try:
                # Clamp so frame hitches or slow machines cannot blow up the step
                dt = min(delta_time * self.get_simulation_speed(), self.max_tick_dt)
                if dt > 0.0:
                    self._tick(dt)
            except Exception as exc:
                self.last_error = exc
                logger.exception("Physics integration error, stopping simulation: %s", exc)
                break

            self._stop_event.wait(self.throttle)
        logger.info("Physics simulation thread terminated")

    def _tick(self, dt: float) -> None:
        with self._locked():
            self.integrator.integration_step(self.bodies, dt)
            self.simulated_time += dt
            self.tick_count += 1

    def step(self, dt: float) -> None:
        """
        Advance one tick synchronously on the calling thread.

        dt is clamped to [0, max_tick_dt] like the background loop does. Meant for
        reproducible fixed-step runs while the physics thread is stopped.
        """
        dt = clamp(float(dt), 0.0, self.max_tick_dt)
        if dt > 0.0:
            self._tick(dt)

    # -----------------------
    # Bodies
    # -----------------------

    def add_body(self, body: Body) -> None:
        """Queue a body; it joins the simulation on the next flush()."""
        with self._locked():
            self.bodies.add_body(body)

    def remove_body(self, index: int) -> None:
        """Queue removal of the body at `index` (ignored if out of range)."""
        with self._locked():
            self.bodies.remove_body(index)

    def flush(self) -> None:
        """Apply queued additions and removals."""
        with self._locked():
            self.bodies.update_collection()

    def get_bodies(self) -> List[Body]:
        """Point-in-time copies of the live bodies."""
        with self._locked():
            return self.bodies.snapshot()

    def body_count(self) -> int:
        with self._locked():
            return len(self.bodies)

    def replace_bodies(self, new_bodies: Iterable[Body]) -> None:
        """Swap the whole system for `new_bodies` and reset the simulation clock."""
        with self._locked():
            self.bodies.clear()
            for body in new_bodies:
                self.bodies.add_body(body)
            self.bodies.update_collection()
            self.simulated_time = 0.0
            self.tick_count = 0

    def load_scenario(self, bodies: Iterable[Body], start: bool = True) -> None:
        """
        Replace the system with a scenario and (optionally) start the simulation.

        An empty scenario is replaced by the built-in Sun-Earth system.
        """
        bodies = list(bodies)
        if not bodies:
            logger.warning("No bodies found in scenario, creating Sun-Earth test scenario")
            bodies = [sb.to_body() for sb in default_scenario()]

        logger.info("Loading scenario with %d bodies", len(bodies))
        for body in bodies:
            logger.debug("Adding body: %s (mass: %.2e kg)", body.name, body.mass)
        self.replace_bodies(bodies)

        if start and not self.is_running:
            self.start()

    # -----------------------
    # Speed
    # -----------------------

    def set_simulation_speed(self, speed: float) -> None:
        """Set simulated seconds per wall-clock second; negative values clamp to 0."""
        with _acquire(self._speed_lock, self.lock_timeout, "speed"):
            self._speed = max(0.0, float(speed))

    def get_simulation_speed(self) -> float:
        with _acquire(self._speed_lock, self.lock_timeout, "speed"):
            return self._speed

    # -----------------------
    # Diagnostics
    # -----------------------

    def total_energy(self) -> float:
        with self._locked():
            return self.bodies.total_energy()

    def total_momentum(self) -> Vec3:
        with self._locked():
            return self.bodies.total_momentum()

    def center_of_mass(self) -> Vec3:
        with self._locked():
            return self.bodies.center_of_mass()
