#!/usr/bin/env python3
"""
Camera utilities for the top-down viewport.

World positions are 3D doubles in meters; the viewport shows the x/y plane and
drops z. Conversion to integer pixels happens here, at the render boundary, and
nowhere in the physics.
"""
from typing import Optional, Sequence, Tuple

from .constants import (
    DEFAULT_METERS_PER_PIXEL,
    MAX_METERS_PER_PIXEL,
    MIN_METERS_PER_PIXEL,
    VIEW_HEIGHT,
    VIEW_WIDTH,
)
from .vector_utils import clamp


class Camera2D:
    """
    Simple top-down camera that maps world coordinates (meters) to screen pixels.
    """

    def __init__(self, center=(0.0, 0.0), meters_per_pixel=DEFAULT_METERS_PER_PIXEL):
        self.center = [center[0], center[1]]
        self.mpp = meters_per_pixel
        self.viewport_size = (VIEW_WIDTH, VIEW_HEIGHT)

    def set_viewport_size(self, w: int, h: int) -> None:
        self.viewport_size = (w, h)

    def world_to_screen(self, pos: Sequence[float]) -> Tuple[int, int]:
        cx, cy = self.center
        mpp = self.mpp
        px = (pos[0] - cx) / mpp + self.viewport_size[0] / 2
        # screen y grows downward
        py = self.viewport_size[1] / 2 - (pos[1] - cy) / mpp
        return (int(px), int(py))

    def screen_to_world(self, screen: Tuple[int, int]) -> Tuple[float, float]:
        cx, cy = self.center
        mpp = self.mpp
        wx = (screen[0] - self.viewport_size[0] / 2) * mpp + cx
        wy = (self.viewport_size[1] / 2 - screen[1]) * mpp + cy
        return (wx, wy)

    def zoom(self, factor, pivot_screen: Optional[Tuple[int, int]] = None):
        """Zoom so the world point under pivot_screen (if given) stays put."""
        factor = clamp(factor, 0.05, 20.0)
        before = None
        if pivot_screen is not None:
            before = self.screen_to_world(pivot_screen)
        self.mpp = clamp(self.mpp * (1.0 / factor), MIN_METERS_PER_PIXEL, MAX_METERS_PER_PIXEL)
        if pivot_screen is not None and before is not None:
            after = self.screen_to_world(pivot_screen)
            self.center[0] += (before[0] - after[0])
            self.center[1] += (before[1] - after[1])

    def pan_pixels(self, dx_pixels, dy_pixels):
        self.center[0] -= dx_pixels * self.mpp
        self.center[1] += dy_pixels * self.mpp

    def fit(self, positions: Sequence[Sequence[float]], margin: float = 1.3) -> None:
        """Center on the bounding box of `positions` and zoom so it fills the view."""
        if not positions:
            self.center = [0.0, 0.0]
            self.mpp = DEFAULT_METERS_PER_PIXEL
            return
        xs = [p[0] for p in positions]
        ys = [p[1] for p in positions]
        self.center = [(min(xs) + max(xs)) / 2, (min(ys) + max(ys)) / 2]
        width_m = (max(xs) - min(xs)) * margin + 1.0
        height_m = (max(ys) - min(ys)) * margin + 1.0
        mpp_x = width_m / max(self.viewport_size[0], 1)
        mpp_y = height_m / max(self.viewport_size[1], 1)
        self.mpp = clamp(max(mpp_x, mpp_y), MIN_METERS_PER_PIXEL, MAX_METERS_PER_PIXEL)
