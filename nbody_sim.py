#!/usr/bin/env python3
"""
N-body simulator application entry point and viewer/UI coordination.

What this module does
- Loads an initial scenario (JSON template, v3 scenario file, or the built-in
  Sun-Earth system) into a SimulationController and starts its physics thread.
- Interactive mode starts two event loops: a Pygame viewport thread that renders
  snapshots, and the Dear PyGui control panel running on the main thread.
- Headless mode just runs the physics thread for a while and logs diagnostics.

Threading model
- The SimulationController physics thread is the only writer of body state.
- PygameRenderer runs in a background thread and only calls get_bodies() (copies),
  get_simulation_speed() and the diagnostics helpers; it never touches live bodies.
- The UI class runs in the main thread via Dear PyGui and calls controller methods
  (start/stop, speed, scenario loading); these are lock-protected.

Units and conventions
- SI units throughout: meters [m], kilograms [kg], seconds [s]. Camera stores meters-per-pixel.
- Colors are RGB tuples in 0..255.

Running
1) Install: `pip install -e .`
2) Run: `python nbody_sim.py --template inner_solar_system.json --speed 1e6 --max-tick-dt 3600`
   or headless: `python nbody_sim.py --headless --duration 10`
"""

import argparse
import logging
import math
import sys
import threading
import time
from collections import deque
from typing import Dict, List, Optional, Tuple

# GUI and Rendering libs
import pygame
from pygame import gfxdraw
import dearpygui.dearpygui as dpg

from nbody.camera import Camera2D
from nbody.constants import (
    BACKGROUND_COLOR,
    DEFAULT_SPEED,
    GRID_COLOR,
    HUD_COLOR,
    MAX_TICK_DT,
    SAFE_COORD_LIMIT,
    TRAIL_LENGTH,
    VIEW_HEIGHT,
    VIEW_WIDTH,
)
from nbody.data_models import Body
from nbody.errors import NBodyError
from nbody.logger_setup import setup_logging
from nbody.presets_loader import (
    default_scenario,
    list_templates,
    load_scenario_file,
    load_template,
    to_bodies,
)
from nbody.simulation import SimulationController
from nbody.utils import meters_to_au, seconds_to_days, try_float
from nbody.vector_utils import vec_len

logger = logging.getLogger("nbody.app")


# ============================================================
# Scenario selection
# ============================================================

def load_initial_bodies(template: Optional[str], scenario: Optional[str]
                        ) -> Tuple[List[Body], Optional[float]]:
    """Return (bodies, suggested time scale) for the requested source."""
    if scenario:
        return to_bodies(load_scenario_file(scenario)), None
    if template:
        records, time_scale, _ = load_template(template)
        return to_bodies(records), time_scale
    return to_bodies(default_scenario()), None


# ============================================================
# Headless run
# ============================================================

def run_headless(sim: SimulationController, duration: float, report_interval: float = 1.0) -> None:
    """Run the physics thread for `duration` wall-clock seconds, logging energy drift."""
    initial_energy = sim.total_energy()
    deadline = time.monotonic() + duration
    try:
        while time.monotonic() < deadline:
            time.sleep(min(report_interval, max(0.0, deadline - time.monotonic())))
            energy = sim.total_energy()
            drift = (energy - initial_energy) / abs(initial_energy) if initial_energy else 0.0
            logger.info("t=%.3f d  ticks=%d  bodies=%d  energy=%.6e J  drift=%+.3e",
                        seconds_to_days(sim.simulated_time), sim.tick_count,
                        sim.body_count(), energy, drift)
            if not sim.is_running:
                logger.error("Physics thread is no longer running: %r", sim.last_error)
                break
    finally:
        sim.stop()


# ============================================================
# Pygame Renderer Thread
# ============================================================

def _safe_point(pt):
    x, y = int(pt[0]), int(pt[1])
    if -SAFE_COORD_LIMIT <= x <= SAFE_COORD_LIMIT and -SAFE_COORD_LIMIT <= y <= SAFE_COORD_LIMIT:
        return (x, y)
    return None


class PygameRenderer(threading.Thread):
    """
    Pygame loop: draws snapshots of the bodies, their trails and a HUD.
    Handles camera panning and zoom, plus a few keyboard shortcuts.
    """
    def __init__(self, sim: SimulationController):
        super().__init__(daemon=True, name="nbody-viewport")
        self.sim = sim
        self.camera = Camera2D(center=(0.0, 0.0))
        self.surface = None
        self.clock = None
        self.font = None
        self.dragging_background = False
        self.drag_start_screen = (0, 0)
        self.trails: Dict[str, deque] = {}
        self.running = True

    def auto_frame_camera(self):
        """Adjust camera to fit all bodies into view with margin."""
        self.camera.fit([b.position for b in self.sim.get_bodies()])

    def run(self):
        pygame.init()
        pygame.display.set_caption("N-body Simulator - Viewport")
        self.surface = pygame.display.set_mode((VIEW_WIDTH, VIEW_HEIGHT), pygame.RESIZABLE)
        self.camera.set_viewport_size(VIEW_WIDTH, VIEW_HEIGHT)
        self.clock = pygame.time.Clock()
        self.font = pygame.font.Font(None, 20)
        self.auto_frame_camera()

        while self.running:
            self.handle_events()
            self.draw()
            self.clock.tick(60)

        pygame.quit()

    def handle_events(self):
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.running = False

            elif event.type == pygame.VIDEORESIZE:
                self.surface = pygame.display.set_mode((event.w, event.h), pygame.RESIZABLE)
                self.camera.set_viewport_size(event.w, event.h)

            elif event.type == pygame.MOUSEWHEEL:
                factor = 1.1 if event.y > 0 else 1.0 / 1.1
                self.camera.zoom(factor, pygame.mouse.get_pos())

            elif event.type == pygame.MOUSEBUTTONDOWN and event.button in (1, 2, 3):
                self.dragging_background = True
                self.drag_start_screen = pygame.mouse.get_pos()

            elif event.type == pygame.MOUSEBUTTONUP and event.button in (1, 2, 3):
                self.dragging_background = False

            elif event.type == pygame.MOUSEMOTION and self.dragging_background:
                mouse = pygame.mouse.get_pos()
                self.camera.pan_pixels(mouse[0] - self.drag_start_screen[0],
                                       mouse[1] - self.drag_start_screen[1])
                self.drag_start_screen = mouse

            elif event.type == pygame.KEYDOWN:
                self.handle_key(event.key)

    def handle_key(self, key):
        try:
            if key == pygame.K_SPACE:
                if self.sim.is_running:
                    self.sim.stop()
                else:
                    self.sim.start()
            elif key in (pygame.K_PLUS, pygame.K_EQUALS, pygame.K_KP_PLUS):
                self.sim.set_simulation_speed(self.sim.get_simulation_speed() * 2.0)
            elif key in (pygame.K_MINUS, pygame.K_KP_MINUS):
                self.sim.set_simulation_speed(self.sim.get_simulation_speed() / 2.0)
            elif key == pygame.K_f:
                self.auto_frame_camera()
        except NBodyError as exc:
            logger.warning("Viewport command failed: %s", exc)

    def draw_grid(self, surf):
        w, h = self.camera.viewport_size
        spacing_m = self.camera.mpp * 100
        pow10 = 10 ** math.floor(math.log10(spacing_m)) if spacing_m > 0 else 1
        top_left = self.camera.screen_to_world((0, 0))
        bottom_right = self.camera.screen_to_world((w, h))

        x = math.floor(top_left[0] / pow10) * pow10
        while x <= bottom_right[0]:
            sx, _ = self.camera.world_to_screen((x, 0.0))
            pygame.draw.line(surf, GRID_COLOR, (sx, 0), (sx, h), 1)
            x += pow10
        y = math.floor(bottom_right[1] / pow10) * pow10
        while y <= top_left[1]:
            _, sy = self.camera.world_to_screen((0.0, y))
            pygame.draw.line(surf, GRID_COLOR, (0, sy), (w, sy), 1)
            y += pow10

    def draw(self):
        surf = self.surface
        surf.fill(BACKGROUND_COLOR)
        self.draw_grid(surf)

        try:
            bodies = self.sim.get_bodies()
            speed = self.sim.get_simulation_speed()
        except NBodyError as exc:
            logger.warning("Skipping frame: %s", exc)
            return

        # Trails are keyed by name; drop trails of bodies that left the system
        names = {b.name for b in bodies}
        for name in list(self.trails):
            if name not in names:
                del self.trails[name]

        for b in bodies:
            trail = self.trails.setdefault(b.name, deque(maxlen=TRAIL_LENGTH))
            trail.append(b.position)
            pts = [p for p in (_safe_point(self.camera.world_to_screen(p)) for p in trail) if p]
            if len(pts) > 1:
                pygame.draw.aalines(surf, b.color, False, pts)

        for b in bodies:
            screen_pos = _safe_point(self.camera.world_to_screen(b.position))
            if screen_pos is None:
                continue
            vis_r = int(min(max(b.radius / self.camera.mpp, 3), 50))
            gfxdraw.filled_circle(surf, screen_pos[0], screen_pos[1], vis_r, b.color)
            gfxdraw.aacircle(surf, screen_pos[0], screen_pos[1], vis_r, (0, 0, 0))
            label = self.font.render(b.name, True, HUD_COLOR)
            surf.blit(label, (screen_pos[0] + vis_r + 3, screen_pos[1] - 8))

        state = "Running" if self.sim.is_running else "Stopped"
        hud = [
            "Drag: pan | Wheel: zoom | Space: start/stop | +/-: speed | F: fit",
            f"Speed: {speed:.3g}x  [{state}]  t = {seconds_to_days(self.sim.simulated_time):.3f} d",
        ]
        for i, text in enumerate(hud):
            surf.blit(self.font.render(text, True, HUD_COLOR), (10, 10 + 20 * i))

        pygame.display.flip()


# ============================================================
# Dear PyGui UI
# ============================================================

class UI:
    """
    Dear PyGui interface: scenario selection, simulation controls and readouts.
    """
    def __init__(self, sim: SimulationController, renderer: PygameRenderer):
        self.sim = sim
        self.renderer = renderer
        self.status_id = None
        self.speed_id = None
        self.readout_id = None
        self._template_map: Dict[str, str] = {}
        self._initial_energy: Optional[float] = None

        self._build_ui()
        self._schedule_sync()

    def _schedule_sync(self):
        """Reschedule the periodic readout refresh (~10Hz at 60 FPS)."""
        dpg.set_frame_callback(dpg.get_frame_count() + 6, self._sync_ui_with_sim)

    def _build_ui(self):
        dpg.create_context()
        dpg.create_viewport(title="N-body Simulator - Controls", width=460, height=420)

        for fn, display in list_templates():
            self._template_map[display] = fn
        items = list(self._template_map.keys())

        with dpg.window(label="Controls", width=440, height=400, pos=(10, 10), tag="main_window"):
            with dpg.group(horizontal=True):
                dpg.add_text("Preset:")
                dpg.add_combo(items, default_value=items[0] if items else "",
                              width=220, tag="preset_combo")
                dpg.add_button(label="Load", callback=lambda: self.load_template(dpg.get_value("preset_combo")))
                dpg.add_button(label="Fit", callback=self.renderer.auto_frame_camera)

            dpg.add_separator()

            with dpg.group(horizontal=True):
                dpg.add_button(label="Start", callback=self._on_start)
                dpg.add_button(label="Stop", callback=self._on_stop)
            with dpg.group(horizontal=True):
                self.speed_id = dpg.add_input_text(label="Speed (sim s / real s)",
                                                   default_value=f"{self.sim.get_simulation_speed():g}",
                                                   width=140)
                dpg.add_button(label="Apply", callback=self._on_apply_speed)

            dpg.add_separator()
            self.readout_id = dpg.add_text("")
            self.status_id = dpg.add_text("")

        dpg.setup_dearpygui()
        dpg.show_viewport()

    def _set_status(self, msg: str):
        dpg.set_value(self.status_id, msg)

    def load_template(self, display_name: str):
        fn = self._template_map.get(display_name)
        if not fn:
            self._set_status("No template selected.")
            return
        try:
            records, time_scale, name = load_template(fn)
            self.sim.load_scenario(to_bodies(records))
            if time_scale:
                self.sim.set_simulation_speed(time_scale)
                dpg.set_value(self.speed_id, f"{time_scale:g}")
        except NBodyError as exc:
            logger.error("Loading template %s failed: %s", fn, exc)
            self._set_status(f"Load failed: {exc}")
            return
        self._initial_energy = None
        self.renderer.trails.clear()
        self.renderer.auto_frame_camera()
        self._set_status(f"Loaded '{name}'.")

    def _on_start(self):
        try:
            self.sim.start()
            self._set_status("Simulation started.")
        except NBodyError as exc:
            self._set_status(str(exc))

    def _on_stop(self):
        self.sim.stop()
        self._set_status("Simulation stopped.")

    def _on_apply_speed(self):
        val = try_float(dpg.get_value(self.speed_id))
        if val is None:
            self._set_status("Speed must be a number.")
            return
        self.sim.set_simulation_speed(val)
        self._set_status(f"Speed set to {self.sim.get_simulation_speed():g}x.")

    def _sync_ui_with_sim(self):
        """Periodic refresh of the readouts."""
        try:
            energy = self.sim.total_energy()
            com = self.sim.center_of_mass()
            count = self.sim.body_count()
        except NBodyError as exc:
            self._set_status(str(exc))
        else:
            if self._initial_energy is None:
                self._initial_energy = energy
            drift = (energy - self._initial_energy) / abs(self._initial_energy) if self._initial_energy else 0.0
            state = "running" if self.sim.is_running else "stopped"
            if self.sim.last_error is not None:
                state = f"failed ({self.sim.last_error})"
            dpg.set_value(self.readout_id, "\n".join([
                f"State: {state}",
                f"Bodies: {count}",
                f"Simulated time: {seconds_to_days(self.sim.simulated_time):.4f} days ({self.sim.tick_count} ticks)",
                f"Total energy: {energy:.6e} J (drift {drift:+.2e})",
                f"Center of mass offset: {meters_to_au(vec_len(com)):.3e} AU",
            ]))
        if not self.renderer.running:
            dpg.stop_dearpygui()
            return
        self._schedule_sync()


# ============================================================
# Application Entry
# ============================================================

def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Velocity-Verlet N-body simulator")
    source = parser.add_mutually_exclusive_group()
    source.add_argument("--template", help="JSON template file name in templates/")
    source.add_argument("--scenario", help="path to a v3 scenario file")
    parser.add_argument("--speed", type=float, default=None,
                        help=f"simulated seconds per real second (default: template value or {DEFAULT_SPEED})")
    parser.add_argument("--max-tick-dt", type=float, default=MAX_TICK_DT,
                        help="largest simulated step per tick in seconds")
    parser.add_argument("--headless", action="store_true", help="run without viewer or UI")
    parser.add_argument("--duration", type=float, default=10.0,
                        help="wall-clock seconds to run in headless mode")
    parser.add_argument("--log-level", default="INFO")
    parser.add_argument("--log-file", default=None)
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    setup_logging(args.log_level, args.log_file)

    try:
        bodies, time_scale = load_initial_bodies(args.template, args.scenario)
    except NBodyError as exc:
        logger.error("%s", exc)
        return 1

    speed = args.speed if args.speed is not None else (time_scale or DEFAULT_SPEED)
    with SimulationController(speed=speed, max_tick_dt=args.max_tick_dt) as sim:
        sim.load_scenario(bodies)

        if args.headless:
            run_headless(sim, args.duration)
            return 0

        renderer = PygameRenderer(sim)
        renderer.start()
        UI(sim, renderer)

        try:
            dpg.start_dearpygui()
        finally:
            renderer.running = False
            renderer.join(timeout=2.0)
            dpg.destroy_context()
    return 0


if __name__ == "__main__":
    sys.exit(main())
