"""
Arrow shapes.

Line arrows are open contours hit-tested against their stroke. The block
arrow is a closed outline.

Kind parameters read from the instance data bag:
- block-arrow: direction (right, left, up, down), headWidth
- line arrows: headLength, headHalfWidth
"""

from .. import geometry
from ..shape import Shape, ShapeBehavior
from .common import outline_contains, stroke_contains


def _head(shape: Shape) -> dict:
    return {
        "head_length": shape.get_param("headLength", geometry.DEFAULT_HEAD_LENGTH),
        "head_half_width": shape.get_param("headHalfWidth", geometry.DEFAULT_HEAD_HALF_WIDTH),
    }


def straight_arrow_path(shape: Shape) -> geometry.Path:
    return geometry.straight_arrow(shape.x, shape.y, shape.width, shape.height, **_head(shape))


def double_arrow_path(shape: Shape) -> geometry.Path:
    return geometry.double_arrow(shape.x, shape.y, shape.width, shape.height, **_head(shape))


def curved_arrow_path(shape: Shape) -> geometry.Path:
    return geometry.curved_arrow(shape.x, shape.y, shape.width, shape.height, **_head(shape))


def block_arrow_path(shape: Shape) -> geometry.Path:
    return geometry.arrow(
        shape.x, shape.y, shape.width, shape.height,
        shape.get_param("headWidth", geometry.DEFAULT_HEAD_WIDTH),
        shape.get_param("direction", "right"),
    )


STRAIGHT_ARROW = ShapeBehavior(name="straight-arrow", path=straight_arrow_path, contains_point=stroke_contains)
DOUBLE_ARROW = ShapeBehavior(name="double-arrow", path=double_arrow_path, contains_point=stroke_contains)
CURVED_ARROW = ShapeBehavior(name="curved-arrow", path=curved_arrow_path, contains_point=stroke_contains)
BLOCK_ARROW = ShapeBehavior(name="block-arrow", path=block_arrow_path, contains_point=outline_contains)
