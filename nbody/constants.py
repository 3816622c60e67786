#!/usr/bin/env python3
"""
Shared constants for the N-body simulator (SI units unless stated otherwise).

Keeping constants in one place helps ensure values are consistent across the
codebase and makes tuning easier.
"""

# Physical constants
G = 6.67408e-11  # m^3 kg^-1 s^-2
AU = 149_597_870_691.0  # m
SOLAR_MASS = 1.989e30  # kg
EARTH_MASS = 5.972e24  # kg
SOLAR_RADIUS = 6.96e8  # m
EARTH_RADIUS = 6.371e6  # m

# Time
SECONDS_PER_DAY = 86400.0
SECONDS_PER_YEAR = 31_557_600.0  # Julian year

# Earth's mean orbital speed, used by the fallback Sun-Earth scenario
EARTH_ORBITAL_SPEED = 29780.0  # m/s

# Physics thread controls
MAX_TICK_DT = 0.1  # simulated seconds per tick, caps hitches and slow machines
THROTTLE_SECONDS = 0.001  # pause between ticks of the physics thread
LOCK_TIMEOUT = 5.0  # seconds a synchronous call waits for a lock
DEFAULT_SPEED = 1.0  # simulated seconds per wall-clock second
THREAD_NAME = "nbody-physics"

# Logging
LOGGER_NAME = "nbody"
LOG_FORMAT = "%(asctime)s %(levelname)-7s [%(threadName)s] %(name)s: %(message)s"

# Rendering (viewport)
VIEW_WIDTH = 1100
VIEW_HEIGHT = 800
BACKGROUND_COLOR = (10, 12, 18)
GRID_COLOR = (40, 45, 60)
DEFAULT_BODY_COLOR = (200, 200, 255)
HUD_COLOR = (200, 200, 200)
TRAIL_LENGTH = 250

# Camera zoom bounds (meters-per-pixel)
DEFAULT_METERS_PER_PIXEL = 2.5e9
MIN_METERS_PER_PIXEL = 1e3
MAX_METERS_PER_PIXEL = 1e12

# Safety: avoid drawing outside reasonable integer pixel ranges
SAFE_COORD_LIMIT = 30000
