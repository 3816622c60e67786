#!/usr/bin/env python3
"""
General utilities for the N-body simulator: lenient parsing and unit conversions.
"""
from typing import Optional

from .constants import AU, SECONDS_PER_DAY


def try_float(val) -> Optional[float]:
    try:
        return float(val)
    except (TypeError, ValueError):
        return None


def meters_to_au(meters: float) -> float:
    return meters / AU


def km_to_meters(km: float) -> float:
    return km * 1000.0


def seconds_to_days(seconds: float) -> float:
    return seconds / SECONDS_PER_DAY
