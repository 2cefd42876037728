"""
Container shapes that visually enclose other shapes.

Kind parameters read from the instance data bag:
- frame: tabWidth, tabHeight
- group: cornerRadius
- swimlane: headerHeight
"""

from .. import geometry
from ..models import Point
from ..shape import Shape, ShapeBehavior

DEFAULT_TAB_WIDTH = 60
DEFAULT_TAB_HEIGHT = 25
DEFAULT_GROUP_RADIUS = 8
DEFAULT_HEADER_HEIGHT = 30


def _tab_size(shape: Shape) -> tuple[float, float]:
    return (
        min(shape.get_param("tabWidth", DEFAULT_TAB_WIDTH), shape.width),
        min(shape.get_param("tabHeight", DEFAULT_TAB_HEIGHT), shape.height),
    )


def frame_path(shape: Shape) -> geometry.Path:
    """Outer rectangle with a title tab in the top-left corner."""
    x, y = shape.x, shape.y
    tab_w, tab_h = _tab_size(shape)
    return geometry.rectangle(x, y, shape.width, shape.height) + geometry.polyline(
        [Point(x, y + tab_h), Point(x + tab_w, y + tab_h), Point(x + tab_w, y)],
        closed=False,
    )


def frame_label(shape: Shape) -> Point:
    tab_w, tab_h = _tab_size(shape)
    return Point(shape.x + tab_w / 2, shape.y + tab_h / 2)


def group_path(shape: Shape) -> geometry.Path:
    return geometry.rectangle(
        shape.x, shape.y, shape.width, shape.height,
        shape.get_param("cornerRadius", DEFAULT_GROUP_RADIUS),
    )


def _header_height(shape: Shape) -> float:
    return min(shape.get_param("headerHeight", DEFAULT_HEADER_HEIGHT), shape.height)


def swimlane_path(shape: Shape) -> geometry.Path:
    x, y, w = shape.x, shape.y, shape.width
    header = y + _header_height(shape)
    return geometry.rectangle(x, y, w, shape.height) + geometry.polyline(
        [Point(x, header), Point(x + w, header)], closed=False
    )


def swimlane_label(shape: Shape) -> Point:
    return Point(shape.x + shape.width / 2, shape.y + _header_height(shape) / 2)


FRAME = ShapeBehavior(name="frame", path=frame_path, label_position=frame_label)
GROUP = ShapeBehavior(name="group", path=group_path)
SWIMLANE = ShapeBehavior(name="swimlane", path=swimlane_path, label_position=swimlane_label)
