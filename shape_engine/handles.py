"""
Resize handle engine.

Pure functions that turn a handle drag into new bounds:
1. Move the dragged edge(s) by the pointer delta
2. Lock the aspect ratio if requested (larger change wins)
3. Clamp to min/max size, re-centering on the clamped axis
4. Optionally snap to the grid

An unknown handle id yields None so callers can treat it as a no-op.
"""

import math
from typing import TYPE_CHECKING, Any, NamedTuple, Optional

from .models import HANDLE_PRESETS, Bounds, Constraints, HandlePosition, ResizeOptions, as_point
from .validation import ValidationResult, check_handles

if TYPE_CHECKING:
    from .shape import Shape


class HandleSpec(NamedTuple):
    """Relative position, cursor and resize direction of a handle."""
    x: float
    y: float
    cursor: str
    x_dir: int
    y_dir: int


HANDLE_POSITIONS: dict[str, HandleSpec] = {
    "nw": HandleSpec(0, 0, "nw-resize", -1, -1),
    "n": HandleSpec(0.5, 0, "n-resize", 0, -1),
    "ne": HandleSpec(1, 0, "ne-resize", 1, -1),
    "e": HandleSpec(1, 0.5, "e-resize", 1, 0),
    "se": HandleSpec(1, 1, "se-resize", 1, 1),
    "s": HandleSpec(0.5, 1, "s-resize", 0, 1),
    "sw": HandleSpec(0, 1, "sw-resize", -1, 1),
    "w": HandleSpec(0, 0.5, "w-resize", -1, 0),
}

OPPOSITE_HANDLES = {
    "nw": "se", "n": "s", "ne": "sw", "e": "w",
    "se": "nw", "s": "n", "sw": "ne", "w": "e",
}

CORNER_HANDLES = ("nw", "ne", "se", "sw")
SIDE_HANDLES = ("n", "e", "s", "w")

# Cursor order clockwise from north, used to rotate cursors in 45 degree steps
_CURSOR_RING = ["n", "ne", "e", "se", "s", "sw", "w", "nw"]

HANDLE_SIZE = 8
DEFAULT_HIT_THRESHOLD = 6.0


# --- Lookups ---

def get_opposite_handle(handle_id: str) -> Optional[str]:
    """Get the handle on the opposite side of the bounding box."""
    return OPPOSITE_HANDLES.get(handle_id)


def is_corner_handle(handle_id: str) -> bool:
    return handle_id in CORNER_HANDLES


def is_side_handle(handle_id: str) -> bool:
    return handle_id in SIDE_HANDLES


def create_standard_handles(preset: str = "all") -> list[str]:
    """Handle ids for a named preset; unknown presets fall back to "all"."""
    return list(HANDLE_PRESETS.get(preset, HANDLE_PRESETS["all"]))


def validate_handles(handle_ids: list[str]) -> ValidationResult:
    """Report unknown and duplicate handle ids."""
    return ValidationResult(errors=check_handles(handle_ids))


def get_resize_cursor(handle_id: str, rotation: float = 0) -> str:
    """
    Cursor for a handle on a shape rotated by `rotation` degrees.

    The cursor is rotated to the nearest 45 degree step.
    """
    if handle_id not in HANDLE_POSITIONS:
        return "default"
    steps = int(math.floor((rotation % 360) / 45 + 0.5)) % 8
    index = (_CURSOR_RING.index(handle_id) + steps) % 8
    return f"{_CURSOR_RING[index]}-resize"


def get_handle_size(zoom: float = 1) -> float:
    """Handle marker size in canvas units, constant on screen across zoom levels."""
    return HANDLE_SIZE / zoom


def get_handle_offset(zoom: float = 1) -> float:
    return get_handle_size(zoom) / 2


# --- Shape handles ---

def get_handle_positions(shape: "Shape") -> list[HandlePosition]:
    """Absolute handle positions, or [] if handles are disabled or the shape is not resizable."""
    if not shape.handles_enabled or not shape.features.resizable:
        return []

    bounds = shape.get_bounds()
    positions = []
    for handle_id in shape.handles:
        position = HANDLE_POSITIONS.get(handle_id)
        if position is None:
            continue
        positions.append(HandlePosition(
            id=handle_id,
            x=bounds.x + bounds.width * position.x,
            y=bounds.y + bounds.height * position.y,
            cursor=position.cursor,
            x_dir=position.x_dir,
            y_dir=position.y_dir,
        ))
    return positions


def get_handle_by_id(shape: "Shape", handle_id: str) -> Optional[HandlePosition]:
    for handle in get_handle_positions(shape):
        if handle.id == handle_id:
            return handle
    return None


def find_handle_at_point(
    shape: "Shape", point: Any, threshold: float = DEFAULT_HIT_THRESHOLD
) -> Optional[HandlePosition]:
    """First handle within `threshold` of the point, in declaration order."""
    p = as_point(point)
    for handle in get_handle_positions(shape):
        if math.hypot(handle.x - p.x, handle.y - p.y) <= threshold:
            return handle
    return None


# --- Resize ---

def _snap(value: float, grid_size: float) -> float:
    # Round half up, not half to even
    return math.floor(value / grid_size + 0.5) * grid_size


def calculate_resize(
    bounds: Bounds,
    handle_id: str,
    dx: float,
    dy: float,
    options: Optional[ResizeOptions] = None,
    constraints: Optional[Constraints] = None,
) -> Optional[Bounds]:
    """
    Compute new bounds for dragging `handle_id` by (dx, dy).

    Args:
        bounds: Bounds before the drag
        handle_id: One of the eight canonical handle ids
        dx, dy: Pointer delta
        options: Aspect-ratio locking and grid snapping
        constraints: Size limits and optional fixed aspect ratio

    Returns:
        New bounds, or None if the handle id is unknown
    """
    handle = HANDLE_POSITIONS.get(handle_id)
    if handle is None:
        return None

    options = options or ResizeOptions()
    constraints = constraints or Constraints()

    x, y = bounds.x, bounds.y
    width, height = bounds.width, bounds.height

    if handle.x_dir < 0:
        x += dx
        width -= dx
    elif handle.x_dir > 0:
        width += dx

    if handle.y_dir < 0:
        y += dy
        height -= dy
    elif handle.y_dir > 0:
        height += dy

    if options.maintain_aspect_ratio or constraints.aspect_ratio:
        ratio = constraints.aspect_ratio
        if not ratio:
            ratio = bounds.width / bounds.height if bounds.height else 1.0

        width_change = abs(width - bounds.width)
        height_change = abs(height - bounds.height)

        # Ties go to width
        if width_change >= height_change:
            new_height = width / ratio
            if handle.y_dir < 0:
                y -= new_height - height
            height = new_height
        else:
            new_width = height * ratio
            if handle.x_dir < 0:
                x -= new_width - width
            width = new_width

    if width < constraints.min_width:
        x -= (constraints.min_width - width) / 2
        width = constraints.min_width
    elif width > constraints.max_width:
        x += (width - constraints.max_width) / 2
        width = constraints.max_width

    if height < constraints.min_height:
        y -= (constraints.min_height - height) / 2
        height = constraints.min_height
    elif height > constraints.max_height:
        y += (height - constraints.max_height) / 2
        height = constraints.max_height

    if options.snap_to_grid:
        grid = options.grid_size
        x, y = _snap(x, grid), _snap(y, grid)
        width, height = _snap(width, grid), _snap(height, grid)

    return Bounds(x=x, y=y, width=width, height=height)


def calculate_resize_preview(
    bounds: Bounds,
    handle_id: str,
    start_point: Any,
    current_point: Any,
    options: Optional[ResizeOptions] = None,
    constraints: Optional[Constraints] = None,
) -> Optional[Bounds]:
    """Resize from a drag start point to the current pointer position."""
    start = as_point(start_point)
    current = as_point(current_point)
    return calculate_resize(
        bounds, handle_id, current.x - start.x, current.y - start.y, options, constraints
    )


def resize_shape(
    shape: "Shape",
    handle_id: str,
    dx: float,
    dy: float,
    options: Optional[ResizeOptions] = None,
) -> Optional[Bounds]:
    """Resize a shape in place by dragging one of its handles."""
    new_bounds = calculate_resize(shape.get_bounds(), handle_id, dx, dy, options, shape.constraints)
    if new_bounds is not None:
        apply_resize(shape, new_bounds)
    return new_bounds


def apply_resize(shape: "Shape", bounds: Bounds) -> None:
    """Write bounds onto a shape as-is, without clamping."""
    shape.x = bounds.x
    shape.y = bounds.y
    shape.width = bounds.width
    shape.height = bounds.height


def is_valid_resize(bounds: Bounds, constraints: Constraints) -> bool:
    """Whether bounds fall within the size constraints."""
    return (
        constraints.min_width <= bounds.width <= constraints.max_width
        and constraints.min_height <= bounds.height <= constraints.max_height
    )
