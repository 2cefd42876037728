"""
Flowchart shapes.

Kind parameters read from the instance data bag:
- data: skew
- document: waveHeight
- manual-input: slope (height of the raised left corner)
- preparation: inset (horizontal depth of the side points)
- display: curve (fraction of the width taken by each rounded end)
- predefined-process: barInset (distance of the side bars from the edges)
"""

import dataclasses
import math

from .. import geometry
from ..models import Point
from ..shape import Shape, ShapeBehavior
from .basic import DIAMOND
from .common import outline_contains

DEFAULT_SLOPE = 20
DEFAULT_INSET = 20
DEFAULT_CURVE = 0.15
DEFAULT_BAR_INSET = 8


def process_path(shape: Shape) -> geometry.Path:
    return geometry.rectangle(shape.x, shape.y, shape.width, shape.height)


# --- Terminator (stadium) ---

def _terminator_radius(shape: Shape) -> float:
    return min(shape.width, shape.height) / 2


def terminator_path(shape: Shape) -> geometry.Path:
    return geometry.rectangle(
        shape.x, shape.y, shape.width, shape.height, _terminator_radius(shape)
    )


def terminator_contains(shape: Shape, point: Point) -> bool:
    """Distance to the inner segment of the stadium is at most the end radius."""
    r = _terminator_radius(shape)
    b = shape.get_bounds()
    nearest_x = min(max(point.x, b.left + r), b.right - r)
    nearest_y = min(max(point.y, b.top + r), b.bottom - r)
    return math.hypot(point.x - nearest_x, point.y - nearest_y) <= r


# --- Data (parallelogram) ---

def data_path(shape: Shape) -> geometry.Path:
    return geometry.parallelogram(
        shape.x, shape.y, shape.width, shape.height,
        shape.get_param("skew", geometry.DEFAULT_SKEW),
    )


def document_path(shape: Shape) -> geometry.Path:
    return geometry.document(
        shape.x, shape.y, shape.width, shape.height,
        shape.get_param("waveHeight", geometry.DEFAULT_WAVE_HEIGHT),
    )


def manual_input_path(shape: Shape) -> geometry.Path:
    slope = shape.get_param("slope", DEFAULT_SLOPE)
    x, y, w, h = shape.x, shape.y, shape.width, shape.height
    return geometry.polyline([
        Point(x, y + slope), Point(x + w, y), Point(x + w, y + h), Point(x, y + h),
    ])


def preparation_path(shape: Shape) -> geometry.Path:
    inset = shape.get_param("inset", DEFAULT_INSET)
    x, y, w, h = shape.x, shape.y, shape.width, shape.height
    cy = y + h / 2
    return geometry.polyline([
        Point(x + inset, y), Point(x + w - inset, y), Point(x + w, cy),
        Point(x + w - inset, y + h), Point(x + inset, y + h), Point(x, cy),
    ])


def display_path(shape: Shape) -> geometry.Path:
    """Flat top and bottom joined by quadratic curves at both ends."""
    x, y, w, h = shape.x, shape.y, shape.width, shape.height
    curve = w * shape.get_param("curve", DEFAULT_CURVE)
    right, bottom, cy = x + w, y + h, y + h / 2
    return [
        geometry.MoveTo(x + curve, y),
        geometry.LineTo(right - curve, y),
        geometry.QuadTo(right, y, right, cy),
        geometry.QuadTo(right, bottom, right - curve, bottom),
        geometry.LineTo(x + curve, bottom),
        geometry.QuadTo(x, bottom, x, cy),
        geometry.QuadTo(x, y, x + curve, y),
        geometry.ClosePath(),
    ]


def predefined_process_path(shape: Shape) -> geometry.Path:
    """Rectangle with a vertical bar inset from each side."""
    x, y, w, h = shape.x, shape.y, shape.width, shape.height
    inset = min(shape.get_param("barInset", DEFAULT_BAR_INSET), w / 2)
    return [
        *geometry.rectangle(x, y, w, h),
        *geometry.polyline([Point(x + inset, y), Point(x + inset, y + h)], closed=False),
        *geometry.polyline([Point(x + w - inset, y), Point(x + w - inset, y + h)], closed=False),
    ]


PROCESS = ShapeBehavior(name="process", path=process_path)
DECISION = dataclasses.replace(DIAMOND, name="decision")
TERMINATOR = ShapeBehavior(name="terminator", path=terminator_path, contains_point=terminator_contains)
DATA = ShapeBehavior(name="data", path=data_path, contains_point=outline_contains)
DOCUMENT = ShapeBehavior(name="document", path=document_path, contains_point=outline_contains)
MANUAL_INPUT = ShapeBehavior(name="manual-input", path=manual_input_path, contains_point=outline_contains)
PREPARATION = ShapeBehavior(name="preparation", path=preparation_path, contains_point=outline_contains)
DISPLAY = ShapeBehavior(name="display", path=display_path, contains_point=outline_contains)
PREDEFINED_PROCESS = ShapeBehavior(name="predefined-process", path=predefined_process_path)
