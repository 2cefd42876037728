"""
Port and connection engine.

Ports are declared in unit-square coordinates relative to the shape's
bounding box and resolved to absolute positions on demand. This module
also matches ports (nearest, optimal, role compatibility) and routes
connection paths between two absolute ports.
"""

import math
from typing import TYPE_CHECKING, Any, Optional

from .geometry import CubicTo, LineTo, MoveTo, Path
from .models import (
    PORT_PRESETS,
    ConnectionStyle,
    Port,
    PortPosition,
    PortRole,
    as_point,
)
from .validation import ValidationResult, check_ports

if TYPE_CHECKING:
    from .shape import Shape

DEFAULT_SNAP_DISTANCE = 20.0
DEFAULT_NEAR_THRESHOLD = 10.0
CONTROL_POINT_FACTOR = 0.3

# Degrees, clockwise from +x in screen coordinates (y grows downward)
PORT_ANGLES = {
    "top": 270,
    "top-right": 315,
    "right": 0,
    "bottom-right": 45,
    "bottom": 90,
    "bottom-left": 135,
    "left": 180,
    "top-left": 225,
    "any": 0,
}


def _role(port: Any) -> str:
    if isinstance(port, dict):
        return port.get("type") or PortRole.BOTH.value
    return getattr(port, "type", None) or PortRole.BOTH.value


# --- Placement ---

def get_port_positions(shape: "Shape") -> list[PortPosition]:
    """
    Absolute port positions: origin + extents * relative coordinate.

    Returns [] if ports are disabled or none are declared.
    """
    if not shape.ports_enabled or not shape.ports:
        return []

    bounds = shape.get_bounds()
    return [
        PortPosition(
            id=port.id,
            x=bounds.x + bounds.width * port.x,
            y=bounds.y + bounds.height * port.y,
            type=port.type or PortRole.BOTH.value,
            direction=port.direction or "any",
            relative_x=port.x,
            relative_y=port.y,
            shape_id=shape.id,
        )
        for port in shape.ports
    ]


def get_port_by_id(shape: "Shape", port_id: str) -> Optional[PortPosition]:
    for port in shape.get_port_positions():
        if port.id == port_id:
            return port
    return None


def distance_to_point(port: PortPosition, point: Any) -> float:
    p = as_point(point)
    return math.hypot(port.x - p.x, port.y - p.y)


def find_nearest_port(
    shape: "Shape", point: Any, max_distance: float = DEFAULT_SNAP_DISTANCE
) -> Optional[PortPosition]:
    """
    Nearest port strictly closer than max_distance, or None.

    Linear scan in declaration order; the first port wins ties.
    """
    nearest = None
    best = max_distance
    for port in shape.get_port_positions():
        distance = distance_to_point(port, point)
        if distance < best:
            best = distance
            nearest = port.model_copy(update={"distance": distance})
    return nearest


def is_near_port(shape: "Shape", point: Any, threshold: float = DEFAULT_NEAR_THRESHOLD) -> bool:
    return find_nearest_port(shape, point, threshold) is not None


# --- Roles ---

def is_input_port(port: Any) -> bool:
    return _role(port) in (PortRole.INPUT.value, PortRole.BOTH.value)


def is_output_port(port: Any) -> bool:
    return _role(port) in (PortRole.OUTPUT.value, PortRole.BOTH.value)


def _same_port(a: PortPosition, b: PortPosition) -> bool:
    if a.shape_id is not None and b.shape_id is not None:
        return (a.shape_id, a.id) == (b.shape_id, b.id)
    return a.id == b.id


def can_connect(source: PortPosition, target: PortPosition) -> bool:
    """
    Whether a connection may run from source to target.

    Source must accept output, target must accept input ("both" satisfies
    either), and a port can never connect to itself. Ports are identified
    by (shape id, port id) when both carry a shape id, else by port id.
    """
    if not is_output_port(source) or not is_input_port(target):
        return False
    return not _same_port(source, target)


def get_input_ports(shape: "Shape") -> list[PortPosition]:
    return [p for p in shape.get_port_positions() if is_input_port(p)]


def get_output_ports(shape: "Shape") -> list[PortPosition]:
    return [p for p in shape.get_port_positions() if is_output_port(p)]


def get_optimal_port(
    shape: "Shape", target_shape: "Shape", role: str = PortRole.OUTPUT.value
) -> Optional[PortPosition]:
    """Port of the given role closest to the target shape's center (first declared wins ties)."""
    candidates = get_output_ports(shape) if role == PortRole.OUTPUT.value else get_input_ports(shape)
    if not candidates:
        return None

    center = target_shape.get_bounds().center()
    best = candidates[0]
    best_distance = distance_to_point(best, center)
    for port in candidates[1:]:
        distance = distance_to_point(port, center)
        if distance < best_distance:
            best, best_distance = port, distance
    return best


# --- Direction ---

def get_port_angle(port: Any) -> float:
    """Exit angle in degrees for a port's compass direction ("any" and unknown are 0)."""
    direction = port.get("direction") if isinstance(port, dict) else getattr(port, "direction", None)
    return PORT_ANGLES.get(direction, 0)


def get_port_side(port: PortPosition) -> str:
    """Side of the bounding box a port sits on, judged from its relative position."""
    rx, ry = port.relative_x, port.relative_y
    if rx == 0:
        return "left"
    if rx == 1:
        return "right"
    if ry == 0:
        return "top"
    if ry == 1:
        return "bottom"

    if abs(rx - 0.5) > abs(ry - 0.5):
        return "left" if rx < 0.5 else "right"
    return "top" if ry < 0.5 else "bottom"


def create_standard_ports(preset: str = "standard-4") -> list[Port]:
    """Ports for a named preset; unknown presets fall back to "standard-4"."""
    entries = PORT_PRESETS.get(preset, PORT_PRESETS["standard-4"])
    return [Port(**entry) for entry in entries]


def validate_ports(ports: list[Any]) -> ValidationResult:
    """Report every port defect (ids, coordinates, roles) at once."""
    return ValidationResult(errors=check_ports(ports))


# --- Routing ---

def _straight_path(source: PortPosition, target: PortPosition) -> Path:
    return [MoveTo(source.x, source.y), LineTo(target.x, target.y)]


def _bezier_path(source: PortPosition, target: PortPosition) -> Path:
    offset = math.hypot(target.x - source.x, target.y - source.y) * CONTROL_POINT_FACTOR
    source_angle = math.radians(get_port_angle(source))
    target_angle = math.radians(get_port_angle(target))
    return [
        MoveTo(source.x, source.y),
        CubicTo(
            source.x + offset * math.cos(source_angle),
            source.y + offset * math.sin(source_angle),
            target.x + offset * math.cos(target_angle),
            target.y + offset * math.sin(target_angle),
            target.x,
            target.y,
        ),
    ]


def _orthogonal_path(source: PortPosition, target: PortPosition) -> Path:
    source_side = get_port_side(source)
    target_side = get_port_side(target)

    if source_side == "right" and target_side == "left":
        mid_x = (source.x + target.x) / 2
        return [
            MoveTo(source.x, source.y),
            LineTo(mid_x, source.y),
            LineTo(mid_x, target.y),
            LineTo(target.x, target.y),
        ]
    if source_side == "bottom" and target_side == "top":
        mid_y = (source.y + target.y) / 2
        return [
            MoveTo(source.x, source.y),
            LineTo(source.x, mid_y),
            LineTo(target.x, mid_y),
            LineTo(target.x, target.y),
        ]

    # Every other side pairing bends once through (source.x, target.y)
    return [
        MoveTo(source.x, source.y),
        LineTo(source.x, target.y),
        LineTo(target.x, target.y),
    ]


_ROUTERS = {
    ConnectionStyle.STRAIGHT.value: _straight_path,
    ConnectionStyle.BEZIER.value: _bezier_path,
    ConnectionStyle.ORTHOGONAL.value: _orthogonal_path,
}


def calculate_connection_path(
    source: PortPosition, target: PortPosition, style: str = ConnectionStyle.BEZIER.value
) -> Path:
    """
    Route a connection between two absolute ports.

    Args:
        source: Start port
        target: End port
        style: "straight", "bezier" or "orthogonal"; anything else routes as bezier

    Returns:
        Open path from source to target
    """
    router = _ROUTERS.get(style, _bezier_path)
    return router(source, target)
