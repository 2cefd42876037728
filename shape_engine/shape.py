"""
The shape contract.

A Shape is a plain data model (geometry, style, ports, handles,
constraints, feature flags, interaction state, custom data) paired with
a ShapeBehavior: a flat record of the operations that differ per kind
(outline, hit-test, rendering, port placement, serialization). Shape
kinds are added by registering a new behavior record, not by subclassing.
"""

import math
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from pydantic import ConfigDict, Field, PrivateAttr
from pydantic.alias_generators import to_camel

from .geometry import Path, rectangle, segment_to_dict, to_svg_path
from .handles import get_handle_positions
from .models import (
    Bounds,
    Constraints,
    Features,
    HandlePosition,
    Point,
    Port,
    PortPosition,
    ShapeCategory,
    ShapeStyle,
    TextStyle,
    WireModel,
    as_point,
    generate_shape_id,
    merge_model,
    wire_keys,
)
from .ports import find_nearest_port, get_port_positions
from .validation import ValidationResult, check_handles, check_ports

ASPECT_RATIO_TOLERANCE = 1e-2


@dataclass
class RenderContext:
    """What the caller wants drawn alongside the outline."""
    show_ports: bool = False
    show_handles: bool = False
    zoom: float = 1.0


@dataclass
class Drawable:
    """Backend-agnostic description of a rendered shape."""
    shape_id: str
    shape_type: str
    segments: Path
    style: dict
    transform: Optional[str] = None
    visible: bool = True
    classes: list[str] = field(default_factory=list)
    label: str = ""
    text_style: dict = field(default_factory=dict)
    text_position: Point = Point(0, 0)
    ports: list[PortPosition] = field(default_factory=list)
    handles: list[HandlePosition] = field(default_factory=list)

    @property
    def d(self) -> str:
        """The outline as SVG path data."""
        return to_svg_path(self.segments)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "shapeId": self.shape_id,
            "type": self.shape_type,
            "d": self.d,
            "segments": [segment_to_dict(s) for s in self.segments],
            "style": dict(self.style),
            "transform": self.transform,
            "visible": self.visible,
            "classes": list(self.classes),
            "label": self.label,
            "textStyle": dict(self.text_style),
            "textPosition": {"x": self.text_position.x, "y": self.text_position.y},
            "ports": [p.to_json_dict() for p in self.ports],
            "handles": [h.to_json_dict() for h in self.handles],
        }


# --- Default behavior operations ---

def bounding_box_contains(shape: "Shape", point: Point) -> bool:
    """Axis-aligned bounding-box hit test (edges inclusive)."""
    b = shape.get_bounds()
    return b.left <= point.x <= b.right and b.top <= point.y <= b.bottom


def center_label(shape: "Shape") -> Point:
    return shape.get_bounds().center()


def default_render(shape: "Shape", ctx: Optional[RenderContext] = None) -> Drawable:
    ctx = ctx or RenderContext()
    bounds = shape.get_bounds()

    transform = None
    if shape.rotation:
        transform = f"rotate({shape.rotation} {bounds.center_x} {bounds.center_y})"

    classes = ["shape", f"shape-{shape.type}"]
    classes.extend(state for state in ("selected", "hovered", "locked") if getattr(shape, state))

    return Drawable(
        shape_id=shape.id,
        shape_type=shape.type,
        segments=shape.get_path(),
        style=shape.style.to_json_dict(),
        transform=transform,
        visible=shape.visible,
        classes=classes,
        label=shape.label,
        text_style=shape.text_style.to_json_dict(),
        text_position=shape.behavior.label_position(shape),
        ports=shape.get_port_positions() if ctx.show_ports else [],
        handles=shape.get_handle_positions() if ctx.show_handles and not shape.locked else [],
    )


def default_serialize(shape: "Shape") -> dict:
    return shape.model_dump(by_alias=True)


def default_deserialize(shape: "Shape", data: dict) -> None:
    merged = {**shape.model_dump(by_alias=True), **wire_keys(type(shape), dict(data))}
    parsed = type(shape).model_validate(merged)
    for name in type(shape).model_fields:
        if name in ("selected", "hovered"):
            continue
        setattr(shape, name, getattr(parsed, name))


@dataclass(frozen=True)
class ShapeBehavior:
    """
    The per-kind operations of the shape contract.

    Only `path` is kind-specific by necessity; every other operation has a
    default suitable for box-like shapes.
    """
    name: str
    path: Callable[["Shape"], Path]
    contains_point: Callable[["Shape", Point], bool] = bounding_box_contains
    render: Callable[["Shape", Optional[RenderContext]], Drawable] = default_render
    port_positions: Callable[["Shape"], list[PortPosition]] = get_port_positions
    serialize: Callable[["Shape"], dict] = default_serialize
    deserialize: Callable[["Shape", dict], None] = default_deserialize
    label_position: Callable[["Shape"], Point] = center_label


def _box_path(shape: "Shape") -> Path:
    return rectangle(shape.x, shape.y, shape.width, shape.height, shape.get_param("cornerRadius", 0))


BOX_BEHAVIOR = ShapeBehavior(name="box", path=_box_path)


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


class Shape(WireModel):
    """
    A shape instance.

    Serializes to the camelCase wire format; interaction state
    (selected, hovered) is never serialized.
    """
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, validate_assignment=True
    )

    id: str = Field(default_factory=generate_shape_id)
    type: str = "box"
    name: str = "Shape"
    category: str = ShapeCategory.BASIC.value

    # Geometry
    x: float = 0
    y: float = 0
    width: float = 100
    height: float = 80
    rotation: float = 0

    # Appearance
    style: ShapeStyle = Field(default_factory=ShapeStyle)
    label: str = ""
    text_style: TextStyle = Field(default_factory=TextStyle)

    # Connection points and resize handles
    ports: list[Port] = Field(default_factory=list)
    ports_enabled: bool = True
    handles: list[str] = Field(default_factory=list)
    handles_enabled: bool = True

    constraints: Constraints = Field(default_factory=Constraints)
    features: Features = Field(default_factory=Features)

    # State
    locked: bool = False
    visible: bool = True
    selected: bool = Field(default=False, exclude=True)
    hovered: bool = Field(default=False, exclude=True)

    # Kind parameters and application data
    data: dict[str, Any] = Field(default_factory=dict)

    _behavior: ShapeBehavior = PrivateAttr(default=BOX_BEHAVIOR)

    @classmethod
    def from_config(cls, config: dict, behavior: Optional[ShapeBehavior] = None) -> "Shape":
        """Build an instance from a wire-format dict and attach its behavior."""
        shape = cls.model_validate(config)
        if behavior is not None:
            shape._behavior = behavior
        return shape

    @property
    def behavior(self) -> ShapeBehavior:
        return self._behavior

    def get_param(self, key: str, default: Any = None) -> Any:
        """Read a kind parameter from the data bag."""
        return self.data.get(key, default)

    # --- Contract ---

    def render(self, ctx: Optional[RenderContext] = None) -> Drawable:
        return self._behavior.render(self, ctx)

    def get_path(self) -> Path:
        return self._behavior.path(self)

    def get_svg_path(self) -> str:
        return to_svg_path(self.get_path())

    def get_bounds(self) -> Bounds:
        return Bounds(x=self.x, y=self.y, width=self.width, height=self.height)

    def contains_point(self, point: Any) -> bool:
        return self._behavior.contains_point(self, as_point(point))

    def get_port_positions(self) -> list[PortPosition]:
        return self._behavior.port_positions(self)

    def get_handle_positions(self) -> list[HandlePosition]:
        return get_handle_positions(self)

    def get_nearest_port(self, point: Any) -> Optional[PortPosition]:
        """Nearest port at any distance, or None if the shape has no ports."""
        return find_nearest_port(self, point, math.inf)

    def serialize(self) -> dict:
        return self._behavior.serialize(self)

    def deserialize(self, data: dict) -> None:
        self._behavior.deserialize(self, data)

    def clone(self) -> "Shape":
        """Copy with the same behavior and a fresh id."""
        copy = type(self).model_validate(self.serialize())
        copy._behavior = self._behavior
        copy.id = generate_shape_id()
        return copy

    def validate(self) -> ValidationResult:
        """Check size, aspect ratio, port and handle invariants."""
        result = ValidationResult()
        c = self.constraints

        if self.width < c.min_width:
            result.errors.append(f"Width {self.width} is less than minimum {c.min_width}")
        if self.width > c.max_width:
            result.errors.append(f"Width {self.width} exceeds maximum {c.max_width}")
        if self.height < c.min_height:
            result.errors.append(f"Height {self.height} is less than minimum {c.min_height}")
        if self.height > c.max_height:
            result.errors.append(f"Height {self.height} exceeds maximum {c.max_height}")

        if c.aspect_ratio and self.height:
            actual = self.width / self.height
            if abs(actual - c.aspect_ratio) > ASPECT_RATIO_TOLERANCE:
                result.errors.append(
                    f"Aspect ratio {actual:.3f} does not match constraint {c.aspect_ratio}"
                )

        result.errors.extend(check_ports(self.ports))
        result.errors.extend(check_handles(self.handles))
        return result

    # --- Setters ---

    def set_position(self, x: float, y: float) -> None:
        self.x = x
        self.y = y

    def move(self, dx: float, dy: float) -> None:
        self.x += dx
        self.y += dy

    def set_size(self, width: float, height: float) -> None:
        """
        Clamp to the size constraints, then apply the aspect ratio.

        With an aspect ratio set, height is recomputed from the clamped
        width; width is authoritative.
        """
        c = self.constraints
        self.width = _clamp(width, c.min_width, c.max_width)
        self.height = _clamp(height, c.min_height, c.max_height)
        if c.aspect_ratio:
            self.height = self.width / c.aspect_ratio

    def resize(self, dw: float, dh: float) -> None:
        self.set_size(self.width + dw, self.height + dh)

    def set_rotation(self, angle: float) -> None:
        self.rotation = angle % 360

    def rotate(self, delta: float) -> None:
        self.set_rotation(self.rotation + delta)

    def set_style(self, style: Any) -> None:
        self.style = merge_model(self.style, style)

    def set_text(self, text: str) -> None:
        self.label = text

    def set_text_style(self, text_style: Any) -> None:
        self.text_style = merge_model(self.text_style, text_style)

    def update(self, updates: dict) -> None:
        """
        Apply a partial update.

        style and textStyle are merged; other known fields are replaced;
        unknown keys are ignored.
        """
        for key, value in updates.items():
            name = _field_name(key)
            if name is None:
                continue
            if name == "style":
                self.set_style(value)
            elif name == "text_style":
                self.set_text_style(value)
            else:
                setattr(self, name, value)

    def get_info(self) -> dict:
        return {
            "id": self.id,
            "type": self.type,
            "name": self.name,
            "category": self.category,
            "bounds": self.get_bounds().to_dict(),
            "style": self.style.to_json_dict(),
            "features": self.features.to_json_dict(),
            "locked": self.locked,
            "visible": self.visible,
        }


_FIELD_BY_KEY: dict[str, str] = {}
for _name, _field in Shape.model_fields.items():
    _FIELD_BY_KEY[_name] = _name
    if _field.alias:
        _FIELD_BY_KEY[_field.alias] = _name


def _field_name(key: str) -> Optional[str]:
    return _FIELD_BY_KEY.get(key)
