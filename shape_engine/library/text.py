"""
Text shapes: a bare label, a speech-bubble callout and a sticky note.

Kind parameters read from the instance data bag:
- callout: tailHeight (height of the pointer below the body)
- note: fold (size of the folded corner)
"""

from .. import geometry
from ..models import Point
from ..shape import Shape, ShapeBehavior
from .common import outline_contains

DEFAULT_TAIL_HEIGHT = 20
DEFAULT_FOLD = 15


def label_path(shape: Shape) -> geometry.Path:
    return geometry.rectangle(shape.x, shape.y, shape.width, shape.height)


# --- Callout ---

def _callout_body_bottom(shape: Shape) -> float:
    tail = min(shape.get_param("tailHeight", DEFAULT_TAIL_HEIGHT), shape.height / 2)
    return shape.y + shape.height - tail


def callout_path(shape: Shape) -> geometry.Path:
    """Body with a pointer that ends at the bottom edge of the bounds."""
    x, y, w = shape.x, shape.y, shape.width
    bottom = _callout_body_bottom(shape)
    return geometry.polyline([
        Point(x, y),
        Point(x + w, y),
        Point(x + w, bottom),
        Point(x + w * 0.6, bottom),
        Point(x + w * 0.5, y + shape.height),
        Point(x + w * 0.4, bottom),
        Point(x, bottom),
    ])


def callout_label(shape: Shape) -> Point:
    return Point(shape.x + shape.width / 2, (shape.y + _callout_body_bottom(shape)) / 2)


# --- Note ---

def note_path(shape: Shape) -> geometry.Path:
    """Page with the top-right corner folded down."""
    x, y, w, h = shape.x, shape.y, shape.width, shape.height
    fold = min(shape.get_param("fold", DEFAULT_FOLD), w / 2, h / 2)
    page = geometry.polyline([
        Point(x, y),
        Point(x + w - fold, y),
        Point(x + w, y + fold),
        Point(x + w, y + h),
        Point(x, y + h),
    ])
    crease = geometry.polyline(
        [Point(x + w - fold, y), Point(x + w - fold, y + fold), Point(x + w, y + fold)],
        closed=False,
    )
    return page + crease


LABEL = ShapeBehavior(name="label", path=label_path)
CALLOUT = ShapeBehavior(
    name="callout", path=callout_path, contains_point=outline_contains, label_position=callout_label
)
NOTE = ShapeBehavior(name="note", path=note_path, contains_point=outline_contains)
