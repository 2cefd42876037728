"""Hit tests shared by several shape kinds."""

from ..geometry import distance_to_path, flatten_path, point_in_polygon
from ..models import Point
from ..shape import Shape

STROKE_HIT_TOLERANCE = 5.0


def outline_contains(shape: Shape, point: Point) -> bool:
    """Ray-cast against the flattened outer contour of the shape's path."""
    subpaths = flatten_path(shape.get_path())
    if not subpaths:
        return False
    return point_in_polygon(point, subpaths[0])


def stroke_contains(shape: Shape, point: Point) -> bool:
    """Hit test for open contours: within a few units of the stroke."""
    tolerance = max(STROKE_HIT_TOLERANCE, shape.style.stroke_width)
    return distance_to_path(point, shape.get_path()) <= tolerance
