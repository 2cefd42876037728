"""
Core data models for shapes.

These models define the canonical wire format for shape instances:
- Geometry values (points, bounds) shared by every engine
- Style, text style, constraints and feature flags
- Ports (shape-relative anchors) and their absolute positions
- Resize options and API request models

Field Naming Convention:
- Python attributes are snake_case
- JSON serialization uses camelCase (strokeWidth, minWidth, portsEnabled, ...)
- Both spellings are accepted on input
"""

import uuid
from enum import Enum
from typing import Any, NamedTuple, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class PortRole(str, Enum):
    """Which connection ends a port accepts."""
    INPUT = "input"
    OUTPUT = "output"
    BOTH = "both"


class PortDirection(str, Enum):
    """Compass direction a connection leaves or enters a port."""
    TOP = "top"
    TOP_RIGHT = "top-right"
    RIGHT = "right"
    BOTTOM_RIGHT = "bottom-right"
    BOTTOM = "bottom"
    BOTTOM_LEFT = "bottom-left"
    LEFT = "left"
    TOP_LEFT = "top-left"
    ANY = "any"


class HandleId(str, Enum):
    """The eight canonical resize handles."""
    NW = "nw"
    N = "n"
    NE = "ne"
    E = "e"
    SE = "se"
    S = "s"
    SW = "sw"
    W = "w"


class ShapeCategory(str, Enum):
    """Known shape library categories."""
    BASIC = "basic"
    FLOWCHART = "flowchart"
    NETWORK = "network"
    UML = "uml"
    CONTAINERS = "containers"
    ARROWS = "arrows"
    TEXT = "text"
    CUSTOM = "custom"


class ConnectionStyle(str, Enum):
    """Routing styles for connection paths."""
    STRAIGHT = "straight"
    BEZIER = "bezier"
    ORTHOGONAL = "orthogonal"


def generate_shape_id() -> str:
    """Generate a unique shape instance ID."""
    return f"s{uuid.uuid4().hex[:8]}"


class Point(NamedTuple):
    """A 2-D point."""
    x: float
    y: float


class WireModel(BaseModel):
    """Base for models that serialize with camelCase keys."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json_dict(self) -> dict:
        """Convert to JSON-serializable dict with camelCase keys."""
        return self.model_dump(by_alias=True)


class Bounds(WireModel):
    """Axis-aligned rectangle describing a shape's extent before rotation."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    x: float = 0
    y: float = 0
    width: float = 0
    height: float = 0

    @property
    def left(self) -> float:
        return self.x

    @property
    def top(self) -> float:
        return self.y

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def center_x(self) -> float:
        return self.x + self.width / 2

    @property
    def center_y(self) -> float:
        return self.y + self.height / 2

    def center(self) -> Point:
        """Get the center point."""
        return Point(self.center_x, self.center_y)

    def to_dict(self) -> dict:
        """Full bounds record including derived edges and center."""
        return {
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
            "left": self.left,
            "top": self.top,
            "right": self.right,
            "bottom": self.bottom,
            "centerX": self.center_x,
            "centerY": self.center_y,
        }


class ShapeStyle(WireModel):
    """Fill and stroke styling. Unknown keys are kept (e.g. strokeDasharray)."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    fill: str = "#ffffff"
    stroke: str = "#000000"
    stroke_width: float = 2
    opacity: float = 1


class TextStyle(WireModel):
    """Label text styling. Unknown keys are kept."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    font_size: float = 14
    font_family: str = "Arial, sans-serif"
    font_weight: str = "normal"
    text_align: str = "center"
    vertical_align: str = "middle"
    color: str = "#000000"


class Port(WireModel):
    """
    A named connection anchor relative to the shape's bounding box.

    x/y are unit-square coordinates (0 = left/top, 1 = right/bottom).
    Values are not range-checked here so that validation can report every
    problem in a library at once (see ports.validate_ports).
    """
    id: str = ""
    x: float = 0.5
    y: float = 0.5
    type: str = PortRole.BOTH.value
    direction: str = PortDirection.ANY.value


class Constraints(WireModel):
    """Size limits and optional locked aspect ratio (width / height)."""
    min_width: float = 20
    min_height: float = 20
    max_width: float = 1000
    max_height: float = 1000
    aspect_ratio: Optional[float] = None


class Features(WireModel):
    """Capability flags for a shape."""
    resizable: bool = True
    rotatable: bool = True
    connectable: bool = True
    groupable: bool = True
    lockable: bool = True
    clonable: bool = True


class PortPosition(WireModel):
    """A port resolved to absolute canvas coordinates."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: str
    x: float
    y: float
    type: str = PortRole.BOTH.value
    direction: str = PortDirection.ANY.value
    relative_x: float = 0.5
    relative_y: float = 0.5
    shape_id: Optional[str] = None
    distance: Optional[float] = None  # Set by nearest-port searches


class HandlePosition(WireModel):
    """A resize handle resolved to absolute canvas coordinates."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: str
    x: float
    y: float
    cursor: str
    x_dir: int
    y_dir: int


class ResizeOptions(WireModel):
    """Options for handle-driven resizing."""
    maintain_aspect_ratio: bool = False
    snap_to_grid: bool = False
    grid_size: float = Field(default=10, gt=0)


# --- API Request/Response Models ---

class ResizeRequest(WireModel):
    """Request to compute new bounds for a handle drag."""
    bounds: Bounds
    handle: str
    dx: float = 0
    dy: float = 0
    options: ResizeOptions = Field(default_factory=ResizeOptions)
    constraints: Optional[Constraints] = None


class ConnectionPathRequest(WireModel):
    """Request to route a connection between two absolute ports."""
    source: PortPosition
    target: PortPosition
    style: str = ConnectionStyle.BEZIER.value


class ValidateConfigRequest(WireModel):
    """Request to validate a shape configuration document."""
    config: dict[str, Any]
    type_id: Optional[str] = None


def as_point(value: Any) -> Point:
    """Coerce a Point, (x, y) pair, {"x", "y"} dict or object with x/y attributes."""
    if isinstance(value, Point):
        return value
    if isinstance(value, dict):
        return Point(float(value["x"]), float(value["y"]))
    if isinstance(value, (tuple, list)):
        return Point(float(value[0]), float(value[1]))
    return Point(float(value.x), float(value.y))


def wire_keys(model_cls: type[BaseModel], data: dict) -> dict:
    """Rename snake_case field names in `data` to their camelCase aliases."""
    aliases = {name: (field.alias or name) for name, field in model_cls.model_fields.items()}
    return {aliases.get(key, key): value for key, value in data.items()}


def merge_model(base: BaseModel, override: Any = None) -> BaseModel:
    """
    Return a new model of base's type with override's keys applied on top.

    The base is never mutated; nested values are copied so the result shares
    no mutable state with it. Override may be a dict (either key spelling)
    or a model of the same type, in which case only its explicitly set
    fields apply.
    """
    if override is None:
        return base.model_copy(deep=True)
    if isinstance(override, BaseModel):
        override = override.model_dump(by_alias=True, exclude_unset=True)
    merged = {**base.model_dump(by_alias=True), **wire_keys(type(base), override)}
    return type(base).model_validate(merged)


# --- Presets ---

HANDLE_PRESETS: dict[str, list[str]] = {
    "all": ["nw", "n", "ne", "e", "se", "s", "sw", "w"],
    "corners": ["nw", "ne", "se", "sw"],
    "sides": ["n", "e", "s", "w"],
    "horizontal": ["e", "w"],
    "vertical": ["n", "s"],
    "proportional": ["nw", "ne", "se", "sw"],
}

PORT_PRESETS: dict[str, list[dict]] = {
    "standard-4": [
        {"id": "top", "x": 0.5, "y": 0, "type": "input", "direction": "top"},
        {"id": "right", "x": 1, "y": 0.5, "type": "output", "direction": "right"},
        {"id": "bottom", "x": 0.5, "y": 1, "type": "output", "direction": "bottom"},
        {"id": "left", "x": 0, "y": 0.5, "type": "input", "direction": "left"},
    ],
    "standard-8": [
        {"id": "top", "x": 0.5, "y": 0, "type": "both", "direction": "top"},
        {"id": "top-right", "x": 0.75, "y": 0, "type": "both", "direction": "top-right"},
        {"id": "right", "x": 1, "y": 0.5, "type": "both", "direction": "right"},
        {"id": "bottom-right", "x": 0.75, "y": 1, "type": "both", "direction": "bottom-right"},
        {"id": "bottom", "x": 0.5, "y": 1, "type": "both", "direction": "bottom"},
        {"id": "bottom-left", "x": 0.25, "y": 1, "type": "both", "direction": "bottom-left"},
        {"id": "left", "x": 0, "y": 0.5, "type": "both", "direction": "left"},
        {"id": "top-left", "x": 0.25, "y": 0, "type": "both", "direction": "top-left"},
    ],
    "corners": [
        {"id": "top-left", "x": 0, "y": 0, "type": "both", "direction": "top-left"},
        {"id": "top-right", "x": 1, "y": 0, "type": "both", "direction": "top-right"},
        {"id": "bottom-right", "x": 1, "y": 1, "type": "both", "direction": "bottom-right"},
        {"id": "bottom-left", "x": 0, "y": 1, "type": "both", "direction": "bottom-left"},
    ],
    "flowchart": [
        {"id": "top", "x": 0.5, "y": 0, "type": "input", "direction": "top"},
        {"id": "bottom", "x": 0.5, "y": 1, "type": "output", "direction": "bottom"},
    ],
    "horizontal": [
        {"id": "left", "x": 0, "y": 0.5, "type": "input", "direction": "left"},
        {"id": "right", "x": 1, "y": 0.5, "type": "output", "direction": "right"},
    ],
}


class ShapeSource(WireModel):
    """
    Where the loader finds a shape type.

    behavior is an importable "module:attribute" reference; config is a
    configuration document reference resolved by the fetcher (a path or
    URL relative to the fetcher's base).
    """
    type_id: str
    behavior: str
    config: str
