"""
UML shapes.

Actor and interface are drawn as open figures; their hit tests use the
bounding box.
"""

from .. import geometry
from ..models import Point
from ..shape import Shape, ShapeBehavior
from .common import outline_contains

HEAD_RADIUS = 12
LOLLIPOP_RADIUS = 15
COMPONENT_TAB_WIDTH = 30
COMPONENT_TAB_HEIGHT = 10


def _line(a: Point, b: Point) -> geometry.Path:
    return geometry.polyline([a, b], closed=False)


def actor_path(shape: Shape) -> geometry.Path:
    """Stick figure: head, body, arms and two legs."""
    x, y, w, h = shape.x, shape.y, shape.width, shape.height
    cx = x + w / 2
    head_y = y + HEAD_RADIUS + 3
    hip = y + h - 25
    foot = y + h - 5
    return (
        geometry.circle(cx, head_y, HEAD_RADIUS)
        + _line(Point(cx, head_y + HEAD_RADIUS), Point(cx, hip))
        + _line(Point(x + 10, y + 40), Point(x + w - 10, y + 40))
        + _line(Point(cx, hip), Point(x + 15, foot))
        + _line(Point(cx, hip), Point(x + w - 15, foot))
    )


def actor_label(shape: Shape) -> Point:
    return Point(shape.x + shape.width / 2, shape.y + shape.height)


def class_path(shape: Shape) -> geometry.Path:
    """Box split into name, attribute and operation compartments."""
    x, y, w, h = shape.x, shape.y, shape.width, shape.height
    return (
        geometry.rectangle(x, y, w, h)
        + _line(Point(x, y + h / 3), Point(x + w, y + h / 3))
        + _line(Point(x, y + h * 2 / 3), Point(x + w, y + h * 2 / 3))
    )


def class_label(shape: Shape) -> Point:
    return Point(shape.x + shape.width / 2, shape.y + shape.height / 6)


def component_path(shape: Shape) -> geometry.Path:
    """Box with two connector tabs straddling its left edge."""
    x, y, w, h = shape.x, shape.y, shape.width, shape.height
    body_x = x + COMPONENT_TAB_WIDTH / 2
    path = geometry.rectangle(body_x, y, w - COMPONENT_TAB_WIDTH / 2, h)
    for top in (y + h * 0.25, y + h * 0.6):
        path += geometry.rectangle(x, top, COMPONENT_TAB_WIDTH, COMPONENT_TAB_HEIGHT)
    return path


def interface_path(shape: Shape) -> geometry.Path:
    """Lollipop circle above a box."""
    x, y, w, h = shape.x, shape.y, shape.width, shape.height
    body_top = y + LOLLIPOP_RADIUS * 2 + 10
    return (
        geometry.circle(x + w / 2, y + LOLLIPOP_RADIUS, LOLLIPOP_RADIUS)
        + _line(Point(x + w / 2, y + LOLLIPOP_RADIUS * 2), Point(x + w / 2, body_top))
        + geometry.rectangle(x, body_top, w, y + h - body_top)
    )


def package_path(shape: Shape) -> geometry.Path:
    """Folder outline: a tab on the top-left of the body."""
    x, y, w, h = shape.x, shape.y, shape.width, shape.height
    tab_w, tab_h = w * 0.4, h * 0.2
    return geometry.polyline([
        Point(x, y),
        Point(x + tab_w, y),
        Point(x + tab_w, y + tab_h),
        Point(x + w, y + tab_h),
        Point(x + w, y + h),
        Point(x, y + h),
    ])


def package_label(shape: Shape) -> Point:
    return Point(shape.x + shape.width / 2, shape.y + shape.height * 0.6)


ACTOR = ShapeBehavior(name="actor", path=actor_path, label_position=actor_label)
CLASS = ShapeBehavior(name="class", path=class_path, label_position=class_label)
COMPONENT = ShapeBehavior(name="component", path=component_path)
INTERFACE = ShapeBehavior(name="interface", path=interface_path)
PACKAGE = ShapeBehavior(
    name="package", path=package_path, contains_point=outline_contains, label_position=package_label
)
