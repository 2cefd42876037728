"""
Network shapes: database cylinder, cloud and equipment icons.

Kind parameters read from the instance data bag:
- database: topHeight (vertical radius of the end ellipses)
- router: antennas
- server: units (stacked rack units)
- switch: portCount
"""

from .. import geometry
from ..models import Point
from ..shape import Shape, ShapeBehavior
from .basic import ellipse_contains

DEFAULT_ANTENNAS = 2
DEFAULT_UNITS = 3
DEFAULT_PORT_COUNT = 4
INDICATOR_RADIUS = 4
INDICATOR_MARGIN = 10


def _line(a: Point, b: Point) -> geometry.Path:
    return geometry.polyline([a, b], closed=False)


def database_path(shape: Shape) -> geometry.Path:
    return geometry.cylinder(
        shape.x, shape.y, shape.width, shape.height,
        shape.get_param("topHeight", geometry.DEFAULT_TOP_HEIGHT),
    )


def cloud_path(shape: Shape) -> geometry.Path:
    return geometry.cloud(shape.x, shape.y, shape.width, shape.height)


# --- Router ---

def router_path(shape: Shape) -> geometry.Path:
    """
    Rounded body under an elliptical top, with antennas rising from the
    top ellipse to the upper edge of the bounds.
    """
    x, y, w, h = shape.x, shape.y, shape.width, shape.height
    ry = h * 0.15
    top = y + ry * 2
    path = geometry.rectangle(x, top, w, y + h - top, 5)
    path += geometry.ellipse(x + w / 2, top, w / 2, ry)

    antennas = shape.get_param("antennas", DEFAULT_ANTENNAS)
    spacing = w / (antennas + 1)
    for i in range(1, antennas + 1):
        path += _line(Point(x + spacing * i, top), Point(x + spacing * i, y))
    return path


# --- Server ---

def server_path(shape: Shape) -> geometry.Path:
    """Rack box split into units, each with a status light."""
    x, y, w, h = shape.x, shape.y, shape.width, shape.height
    units = max(1, shape.get_param("units", DEFAULT_UNITS))
    unit_height = h / units

    path = geometry.rectangle(x, y, w, h)
    for i in range(1, units):
        path += _line(Point(x, y + unit_height * i), Point(x + w, y + unit_height * i))
    for i in range(units):
        cy = y + unit_height * i + unit_height / 2
        path += geometry.circle(x + INDICATOR_MARGIN, cy, INDICATOR_RADIUS)
    return path


def switch_path(shape: Shape) -> geometry.Path:
    """Flat box with a row of port lights along its middle."""
    x, y, w, h = shape.x, shape.y, shape.width, shape.height
    count = shape.get_param("portCount", DEFAULT_PORT_COUNT)
    spacing = w / (count + 1)
    path = geometry.rectangle(x, y, w, h)
    for i in range(1, count + 1):
        path += geometry.circle(x + spacing * i, y + h / 2, INDICATOR_RADIUS)
    return path


def firewall_path(shape: Shape) -> geometry.Path:
    """Box with a flame chevron in the middle."""
    x, y, w, h = shape.x, shape.y, shape.width, shape.height
    cx, cy = x + w / 2, y + h / 2
    size = min(w, h) * 0.25
    flame = geometry.polyline(
        [Point(cx - size, cy + size * 0.66), Point(cx, cy - size), Point(cx + size, cy + size * 0.66)],
        closed=False,
    )
    return geometry.rectangle(x, y, w, h) + flame


# --- Workstation ---

def _workstation_parts(shape: Shape) -> list[tuple[float, float, float, float]]:
    x, y, w, h = shape.x, shape.y, shape.width, shape.height
    return [
        (x + w * 0.1, y, w * 0.8, h * 0.7),
        (x + w * 0.4, y + h * 0.7, w * 0.2, h * 0.15),
        (x + w * 0.2, y + h * 0.85, w * 0.6, h * 0.08),
    ]


def workstation_path(shape: Shape) -> geometry.Path:
    """Monitor, stand and base."""
    monitor, stand, base = _workstation_parts(shape)
    return (
        geometry.rectangle(*monitor, 5)
        + geometry.rectangle(*stand)
        + geometry.rectangle(*base, 3)
    )


def workstation_contains(shape: Shape, point: Point) -> bool:
    return any(
        px <= point.x <= px + pw and py <= point.y <= py + ph
        for px, py, pw, ph in _workstation_parts(shape)
    )


def workstation_label(shape: Shape) -> Point:
    """Centered on the screen."""
    return Point(shape.x + shape.width / 2, shape.y + shape.height * 0.35)


DATABASE = ShapeBehavior(name="database", path=database_path)
CLOUD = ShapeBehavior(name="cloud", path=cloud_path, contains_point=ellipse_contains)
ROUTER = ShapeBehavior(name="router", path=router_path)
SERVER = ShapeBehavior(name="server", path=server_path)
SWITCH = ShapeBehavior(name="switch", path=switch_path)
FIREWALL = ShapeBehavior(name="firewall", path=firewall_path)
WORKSTATION = ShapeBehavior(
    name="workstation",
    path=workstation_path,
    contains_point=workstation_contains,
    label_position=workstation_label,
)
