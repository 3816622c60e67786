#!/usr/bin/env python3
"""
Scenario loading utilities.

Two sources yield ScenarioBody records, each of which becomes exactly one Body:
- Scene templates: JSON files in templates/*.json
- v3 scenario files: the line-oriented "key: value" format of existing scenario
  collections

Template JSON (templates/*.json):
{
  "name": "Human-friendly preset name",
  "description": "Optional description",
  "time_scale": 86400.0,             # optional, default None
  "bodies": [
    {
      "name": "Sun",
      "kind": "star",                # planet | star | planet_atmo | black_hole
      "mass": 1.989e30,
      "radius": 6.96e8,
      "position": [0.0, 0.0, 0.0],
      "velocity": [0.0, 0.0, 0.0],
      "color": [255, 204, 0],        # optional
      "temperature": 5778,           # optional, stars
      "atmosphere_color": [0.5, 0.7, 1.0, 0.6],  # optional, planet_atmo
      "rotation": [7.25, 331.15, 14.18, 0.0]     # optional, degrees
    }
  ]
}

v3 scenario (one record, fields in this order; star adds "temperature", planet_atmo
adds "atmo_color" and an optional "ambientTexture", black_hole stops after position):

v3
type: planet
name: Earth
radius: 6378.1                       # km
mass: 5.9723E24                      # kg
velocity: 21105.3 20398.1 2.08E-4    # m/s
position: 1.048E11 -1.092E11 -1.68E7 # m
texture: ./Planet Textures/earth.jpg
orbit_color: 0.18 0.43 0.64 0.8
rotation: 23.44 90.0 360.98 -10      # degrees: tilt, axis RA, rotation period, offset

Malformed records are logged and skipped; they never reach the simulation.
"""
import json
import logging
import math
import os
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from .constants import (
    AU,
    DEFAULT_BODY_COLOR,
    EARTH_MASS,
    EARTH_ORBITAL_SPEED,
    EARTH_RADIUS,
    SOLAR_MASS,
    SOLAR_RADIUS,
)
from .data_models import Body
from .errors import ScenarioError
from .utils import km_to_meters
from .vector_utils import Vec3, vec3

logger = logging.getLogger(__name__)

TEMPLATES_DIR = os.path.join(os.path.dirname(os.path.dirname(__file__)), "templates")

BODY_KINDS = ("planet", "star", "planet_atmo", "black_hole")

Color4 = Tuple[float, float, float, float]
Rotation = Tuple[float, float, float, float]


@dataclass
class ScenarioBody:
    """
    One body as described by a scenario source.

    Only name, mass, position and velocity matter to physics; the rest is payload
    for the viewer. Rotation is (tilt, axis right ascension, rotation period, offset)
    in radians.
    """
    name: str
    mass: float
    position: Vec3
    velocity: Vec3
    kind: str = "planet"
    radius: float = 0.0
    temperature: Optional[float] = None
    atmosphere_color: Optional[Color4] = None
    orbit_color: Color4 = (1.0, 1.0, 1.0, 1.0)
    rotation: Rotation = (0.0, 0.0, 0.0, 0.0)
    texture: Optional[str] = None

    def display_color(self) -> Tuple[int, int, int]:
        r, g, b, _ = self.orbit_color
        return _coerce_color([round(r * 255), round(g * 255), round(b * 255)])

    def to_body(self) -> Body:
        return Body(
            self.mass,
            self.position,
            self.velocity,
            name=self.name,
            radius=self.radius,
            color=self.display_color(),
        )


def to_bodies(records: Sequence[ScenarioBody]) -> List[Body]:
    return [r.to_body() for r in records]


def default_scenario() -> List[ScenarioBody]:
    """Sun at the origin and Earth at 1 AU moving at its mean orbital speed."""
    return [
        ScenarioBody("Sun", SOLAR_MASS, (0.0, 0.0, 0.0), (0.0, 0.0, 0.0),
                     kind="star", radius=SOLAR_RADIUS, temperature=5778.0,
                     orbit_color=(1.0, 0.8, 0.0, 1.0)),
        ScenarioBody("Earth", EARTH_MASS, (AU, 0.0, 0.0), (0.0, EARTH_ORBITAL_SPEED, 0.0),
                     kind="planet", radius=EARTH_RADIUS,
                     orbit_color=(0.39, 0.58, 0.93, 1.0)),
    ]


def _coerce_color(c) -> Tuple[int, int, int]:
    try:
        r, g, b = int(c[0]), int(c[1]), int(c[2])
    except (TypeError, ValueError, IndexError):
        return DEFAULT_BODY_COLOR
    r = max(0, min(255, r)); g = max(0, min(255, g)); b = max(0, min(255, b))
    return (r, g, b)


def _color4(values) -> Color4:
    r, g, b, a = (float(v) for v in values)
    return (r, g, b, a)


def _rotation_radians(values) -> Rotation:
    tilt, right_ascension, period, offset = (math.radians(float(v)) for v in values)
    return (tilt, right_ascension, period, offset)


# ============================================================
# JSON templates
# ============================================================

def _read_json(path: str) -> Optional[dict]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except (OSError, ValueError) as exc:
        logger.warning("Could not read template %s: %s", path, exc)
        return None


def _check_physics(record: ScenarioBody) -> None:
    """Raise ValueError if the record would poison the integrator."""
    if not math.isfinite(record.mass):
        raise ValueError(f"non-finite mass {record.mass}")
    if record.mass < 0:
        raise ValueError("negative mass")
    for label, vec in (("position", record.position), ("velocity", record.velocity)):
        if not all(math.isfinite(c) for c in vec):
            raise ValueError(f"non-finite {label} {vec}")


def _body_from_dict(b: dict) -> ScenarioBody:
    kind = b.get("kind", "planet")
    if kind not in BODY_KINDS:
        raise ValueError(f"unknown body kind '{kind}'")
    color = b.get("color")
    orbit_color = (1.0, 1.0, 1.0, 1.0)
    if color is not None:
        r, g, bl = _coerce_color(color)
        orbit_color = (r / 255.0, g / 255.0, bl / 255.0, 1.0)
    atmosphere = b.get("atmosphere_color")
    temperature = b.get("temperature")
    return ScenarioBody(
        name=str(b.get("name", "Body")),
        mass=float(b["mass"]),
        position=vec3(b["position"]),
        velocity=vec3(b["velocity"]),
        kind=kind,
        radius=float(b.get("radius", 0.0)),
        temperature=float(temperature) if temperature is not None else None,
        atmosphere_color=_color4(atmosphere) if atmosphere is not None else None,
        orbit_color=orbit_color,
        rotation=_rotation_radians(b.get("rotation", (0.0, 0.0, 0.0, 0.0))),
        texture=b.get("texture"),
    )


def parse_template(data: dict) -> List[ScenarioBody]:
    """Turn a template dict into records, skipping malformed or non-physical bodies."""
    bodies: List[ScenarioBody] = []
    for i, b in enumerate(data.get("bodies", [])):
        try:
            record = _body_from_dict(b)
            _check_physics(record)
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            logger.warning("Skipping malformed body #%d in template: %s", i, exc)
            continue
        bodies.append(record)
    return bodies


def list_templates(templates_dir: str = TEMPLATES_DIR) -> List[Tuple[str, str]]:
    """Return list of (file_name, display_name) for available templates."""
    items: List[Tuple[str, str]] = []
    if not os.path.isdir(templates_dir):
        return items
    for fn in sorted(os.listdir(templates_dir)):
        if not fn.lower().endswith(".json"):
            continue
        data = _read_json(os.path.join(templates_dir, fn)) or {}
        display = data.get("name") or os.path.splitext(fn)[0]
        items.append((fn, display))
    return items


def load_template(file_name: str, templates_dir: str = TEMPLATES_DIR
                  ) -> Tuple[List[ScenarioBody], Optional[float], Optional[str]]:
    """
    Load a template JSON by file name.
    Returns (bodies, time_scale, display_name)
    """
    path = os.path.join(templates_dir, file_name)
    data = _read_json(path)
    if data is None:
        raise ScenarioError(f"Template '{file_name}' could not be read")
    display_name = data.get("name") or os.path.splitext(file_name)[0]
    time_scale = data.get("time_scale")
    bodies = parse_template(data)
    logger.info("Loaded template '%s' with %d bodies", display_name, len(bodies))
    return bodies, time_scale, display_name


# ============================================================
# v3 scenario files
# ============================================================

def _value(line: str) -> str:
    key, sep, value = line.partition(":")
    if not sep:
        raise ValueError(f"invalid line format: {line!r}")
    return value.strip()


def _floats(line: str, count: int) -> List[float]:
    parts = _value(line).split()
    if len(parts) != count:
        raise ValueError(f"expected {count} values, got {len(parts)}: {line!r}")
    return [float(p) for p in parts]


class _Lines:
    """Cursor over the stripped lines of a v3 file."""

    def __init__(self, lines: Sequence[str]):
        self.lines = [l.strip() for l in lines]
        self.pos = 0

    def done(self) -> bool:
        return self.pos >= len(self.lines)

    def peek(self) -> str:
        return self.lines[self.pos] if not self.done() else ""

    def next(self) -> str:
        if self.done():
            raise ValueError("unexpected end of scenario")
        line = self.lines[self.pos]
        self.pos += 1
        return line

    def field(self) -> str:
        """Next line of the current record. Stops in front of the next record header."""
        if self.peek().startswith("type:"):
            raise ValueError("record truncated by next 'type:' header")
        return self.next()


def _parse_record(kind: str, cur: _Lines) -> ScenarioBody:
    name = _value(cur.field())
    radius = km_to_meters(float(_value(cur.field())))
    mass = float(_value(cur.field()))
    velocity = vec3(_floats(cur.field(), 3))
    position = vec3(_floats(cur.field(), 3))
    record = ScenarioBody(name, mass, position, velocity, kind=kind, radius=radius)

    if kind == "black_hole":
        record.orbit_color = (0.0, 0.0, 0.0, 1.0)
        return record

    record.texture = _value(cur.field())
    record.orbit_color = _color4(_floats(cur.field(), 4))
    record.rotation = _rotation_radians(_floats(cur.field(), 4))

    if kind == "star":
        record.temperature = float(_value(cur.field()))
    elif kind == "planet_atmo":
        record.atmosphere_color = _color4(_floats(cur.field(), 4))
        if cur.peek().startswith("ambientTexture:"):
            cur.field()
    return record


def parse_scenario_text(content: str) -> List[ScenarioBody]:
    """
    Parse a v3 scenario. Raises ScenarioError for a missing header; records that do
    not parse are skipped with a warning, unknown types are skipped as well.
    """
    lines = content.splitlines()
    if not lines or lines[0].strip() != "v3":
        raise ScenarioError("Invalid scenario file format. Expected 'v3' header.")

    cur = _Lines(lines[1:])
    bodies: List[ScenarioBody] = []
    while not cur.done():
        line = cur.next()
        if not line.startswith("type:"):
            continue
        kind = _value(line)
        if kind not in BODY_KINDS:
            logger.warning("Unknown object type: %s", kind)
            continue
        start = cur.pos
        try:
            record = _parse_record(kind, cur)
            _check_physics(record)
        except ValueError as exc:
            logger.warning("Skipping malformed %s record at line %d: %s", kind, start + 1, exc)
            # resume at the next record header
            while not cur.done() and not cur.peek().startswith("type:"):
                cur.next()
            continue
        bodies.append(record)
    return bodies


def load_scenario_file(path: str) -> List[ScenarioBody]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            content = f.read()
    except OSError as exc:
        raise ScenarioError(f"Could not read scenario '{path}': {exc}") from exc
    bodies = parse_scenario_text(content)
    logger.info("Parsed scenario %s with %d bodies", path, len(bodies))
    return bodies
