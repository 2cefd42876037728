"""
Basic shapes: rectangle, circle, ellipse, diamond, triangle, polygon, star.

Kind parameters read from the instance data bag:
- rectangle: cornerRadius
- triangle: direction (up, down, left, right)
- polygon: sides
- star: points, innerRadius (fraction of the outer radius)

Polygon and star place one port on each vertex (or tip) and ignore any
ports declared in their configuration.
"""

import math

from .. import geometry
from ..models import Point, PortPosition, PortRole
from ..shape import Shape, ShapeBehavior

DEFAULT_SIDES = 6
DEFAULT_STAR_POINTS = 5
DEFAULT_INNER_RADIUS = 0.4
START_ANGLE = -90  # First vertex points up


# --- Rectangle ---

def rectangle_path(shape: Shape) -> geometry.Path:
    return geometry.rectangle(
        shape.x, shape.y, shape.width, shape.height, shape.get_param("cornerRadius", 0)
    )


# --- Circle ---

def _circle_radius(shape: Shape) -> float:
    return min(shape.width, shape.height) / 2


def circle_path(shape: Shape) -> geometry.Path:
    cx, cy = shape.get_bounds().center()
    return geometry.circle(cx, cy, _circle_radius(shape))


def circle_contains(shape: Shape, point: Point) -> bool:
    cx, cy = shape.get_bounds().center()
    return math.hypot(point.x - cx, point.y - cy) <= _circle_radius(shape)


# --- Ellipse ---

def ellipse_path(shape: Shape) -> geometry.Path:
    cx, cy = shape.get_bounds().center()
    return geometry.ellipse(cx, cy, shape.width / 2, shape.height / 2)


def ellipse_contains(shape: Shape, point: Point) -> bool:
    cx, cy = shape.get_bounds().center()
    rx, ry = shape.width / 2, shape.height / 2
    if rx <= 0 or ry <= 0:
        return False
    return ((point.x - cx) / rx) ** 2 + ((point.y - cy) / ry) ** 2 <= 1


# --- Diamond ---

def diamond_path(shape: Shape) -> geometry.Path:
    return geometry.diamond(shape.x, shape.y, shape.width, shape.height)


def diamond_contains(shape: Shape, point: Point) -> bool:
    """L1 distance from the center across the half extents, boundary inclusive."""
    cx, cy = shape.get_bounds().center()
    half_w, half_h = shape.width / 2, shape.height / 2
    if half_w <= 0 or half_h <= 0:
        return False
    return abs(point.x - cx) / half_w + abs(point.y - cy) / half_h <= 1


# --- Triangle ---

def _triangle_vertices(shape: Shape) -> list[Point]:
    return geometry.triangle_vertices(
        shape.x, shape.y, shape.width, shape.height, shape.get_param("direction", "up")
    )


def triangle_path(shape: Shape) -> geometry.Path:
    return geometry.polyline(_triangle_vertices(shape))


def triangle_contains(shape: Shape, point: Point) -> bool:
    a, b, c = _triangle_vertices(shape)
    return geometry.point_in_triangle(point, a, b, c)


# --- Polygon and star ---

def _polygon_vertices(shape: Shape) -> list[Point]:
    cx, cy = shape.get_bounds().center()
    return geometry.polygon_vertices(
        cx, cy, shape.width / 2, shape.get_param("sides", DEFAULT_SIDES),
        START_ANGLE, shape.height / 2,
    )


def polygon_path(shape: Shape) -> geometry.Path:
    return geometry.polyline(_polygon_vertices(shape))


def polygon_contains(shape: Shape, point: Point) -> bool:
    return geometry.point_in_polygon(point, _polygon_vertices(shape))


def _star_vertices(shape: Shape) -> list[Point]:
    cx, cy = shape.get_bounds().center()
    outer = shape.width / 2
    inner = outer * shape.get_param("innerRadius", DEFAULT_INNER_RADIUS)
    y_scale = shape.height / shape.width if shape.width else 1.0
    return geometry.star_vertices(
        cx, cy, outer, inner, shape.get_param("points", DEFAULT_STAR_POINTS), START_ANGLE, y_scale
    )


def star_path(shape: Shape) -> geometry.Path:
    return geometry.polyline(_star_vertices(shape))


def star_contains(shape: Shape, point: Point) -> bool:
    return geometry.point_in_polygon(point, _star_vertices(shape))


def _vertex_ports(shape: Shape, vertices: list[Point]) -> list[PortPosition]:
    if not shape.ports_enabled:
        return []
    b = shape.get_bounds()
    return [
        PortPosition(
            id=f"point-{i}",
            x=v.x,
            y=v.y,
            type=PortRole.BOTH.value,
            relative_x=(v.x - b.x) / b.width if b.width else 0.5,
            relative_y=(v.y - b.y) / b.height if b.height else 0.5,
            shape_id=shape.id,
        )
        for i, v in enumerate(vertices)
    ]


def polygon_ports(shape: Shape) -> list[PortPosition]:
    """One port per polygon vertex."""
    return _vertex_ports(shape, _polygon_vertices(shape))


def star_ports(shape: Shape) -> list[PortPosition]:
    """One port per star tip."""
    return _vertex_ports(shape, _star_vertices(shape)[::2])


RECTANGLE = ShapeBehavior(name="rectangle", path=rectangle_path)
CIRCLE = ShapeBehavior(name="circle", path=circle_path, contains_point=circle_contains)
ELLIPSE = ShapeBehavior(name="ellipse", path=ellipse_path, contains_point=ellipse_contains)
DIAMOND = ShapeBehavior(name="diamond", path=diamond_path, contains_point=diamond_contains)
TRIANGLE = ShapeBehavior(name="triangle", path=triangle_path, contains_point=triangle_contains)
POLYGON = ShapeBehavior(
    name="polygon", path=polygon_path, contains_point=polygon_contains, port_positions=polygon_ports
)
STAR = ShapeBehavior(
    name="star", path=star_path, contains_point=star_contains, port_positions=star_ports
)
