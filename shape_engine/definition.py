"""
Shape definitions.

A ShapeDefinition is the immutable template for a shape type: default
size, style, text style, kind data, ports, handles, constraints, feature
flags and metadata, plus the behavior record that gives instances their
kind-specific operations.

Instances never share mutable state with their definition: every
default is copied through the explicit merge functions below.
"""

import copy
from datetime import datetime
from typing import Any, Optional

from pydantic import ConfigDict, Field, PrivateAttr, model_validator
from pydantic.alias_generators import to_camel

from .models import (
    HANDLE_PRESETS,
    PORT_PRESETS,
    Constraints,
    Features,
    Port,
    ShapeCategory,
    ShapeStyle,
    TextStyle,
    WireModel,
    merge_model,
    wire_keys,
)
from .shape import BOX_BEHAVIOR, Shape, ShapeBehavior

_FROZEN = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class DefaultSize(WireModel):
    model_config = _FROZEN

    width: float = 120
    height: float = 80


class PortsConfig(WireModel):
    """Port declarations; a preset is expanded into positions at creation."""
    model_config = _FROZEN

    enabled: bool = True
    preset: Optional[str] = None
    positions: tuple[Port, ...] = ()


class HandlesConfig(WireModel):
    """Handle declarations; defaults to all eight handles."""
    model_config = _FROZEN

    enabled: bool = True
    preset: Optional[str] = None
    positions: tuple[str, ...] = ()


# --- Explicit merges (definition defaults + per-instance overrides) ---

def merge_style(base: ShapeStyle, override: Any = None) -> ShapeStyle:
    return merge_model(base, override)


def merge_text_style(base: TextStyle, override: Any = None) -> TextStyle:
    return merge_model(base, override)


def merge_constraints(base: Constraints, override: Any = None) -> Constraints:
    return merge_model(base, override)


def merge_features(base: Features, override: Any = None) -> Features:
    return merge_model(base, override)


def merge_data(base: dict, override: Optional[dict] = None) -> dict:
    """Shallow key merge over a deep copy of the defaults."""
    merged = copy.deepcopy(base)
    merged.update(copy.deepcopy(override or {}))
    return merged


class ShapeDefinition(WireModel):
    """Immutable template for one shape type."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    id: str
    name: str
    type: str = ""
    category: str = ShapeCategory.BASIC.value
    description: str = ""
    icon: Optional[str] = None
    tags: tuple[str, ...] = ()

    default_size: DefaultSize = Field(default_factory=DefaultSize)
    default_style: ShapeStyle = Field(default_factory=ShapeStyle)
    default_text_style: TextStyle = Field(default_factory=TextStyle)
    default_data: dict[str, Any] = Field(default_factory=dict)

    ports: PortsConfig = Field(default_factory=PortsConfig)
    handles: HandlesConfig = Field(default_factory=HandlesConfig)
    constraints: Constraints = Field(default_factory=Constraints)
    features: Features = Field(default_factory=Features)

    metadata: dict[str, Any] = Field(default_factory=dict)
    properties: dict[str, Any] = Field(default_factory=dict)
    registered_at: Optional[datetime] = None

    _behavior: Optional[ShapeBehavior] = PrivateAttr(default=None)

    @model_validator(mode="before")
    @classmethod
    def _resolve_presets(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)

        if not data.get("type"):
            data["type"] = data.get("id", "")

        ports = dict(data.get("ports") or {})
        if not ports.get("positions") and ports.get("preset"):
            ports["positions"] = PORT_PRESETS.get(ports["preset"], PORT_PRESETS["standard-4"])
        data["ports"] = ports

        handles = dict(data.get("handles") or {})
        if not handles.get("positions"):
            preset = handles.get("preset") or "all"
            handles["positions"] = HANDLE_PRESETS.get(preset, HANDLE_PRESETS["all"])
        data["handles"] = handles
        return data

    @classmethod
    def from_config(
        cls,
        config: dict,
        behavior: Optional[ShapeBehavior] = None,
        registered_at: Optional[datetime] = None,
    ) -> "ShapeDefinition":
        """Build a definition from a configuration document."""
        definition = cls.model_validate(config)
        if registered_at is not None:
            definition = definition.model_copy(update={"registered_at": registered_at})
        definition._behavior = behavior
        return definition

    @property
    def behavior(self) -> Optional[ShapeBehavior]:
        return self._behavior

    # --- Instances ---

    def get_default_config(self) -> dict:
        """Instance config (wire format) built purely from the defaults."""
        return {
            "type": self.type,
            "name": self.name,
            "category": self.category,
            "width": self.default_size.width,
            "height": self.default_size.height,
            "style": self.default_style.to_json_dict(),
            "textStyle": self.default_text_style.to_json_dict(),
            "ports": [p.to_json_dict() for p in self.ports.positions],
            "portsEnabled": self.ports.enabled,
            "handles": list(self.handles.positions),
            "handlesEnabled": self.handles.enabled,
            "constraints": self.constraints.to_json_dict(),
            "features": self.features.to_json_dict(),
            "data": copy.deepcopy(self.default_data),
        }

    def build_instance_config(self, overrides: Optional[dict] = None) -> dict:
        """
        Merge caller overrides over the defaults.

        style, textStyle, constraints, features and data are merged key by
        key; every other override replaces the default outright.
        """
        overrides = wire_keys(Shape, dict(overrides or {}))
        config = {**self.get_default_config(), **overrides}
        config["style"] = merge_style(self.default_style, overrides.get("style")).to_json_dict()
        config["textStyle"] = merge_text_style(
            self.default_text_style, overrides.get("textStyle")
        ).to_json_dict()
        config["constraints"] = merge_constraints(
            self.constraints, overrides.get("constraints")
        ).to_json_dict()
        config["features"] = merge_features(self.features, overrides.get("features")).to_json_dict()
        config["data"] = merge_data(self.default_data, overrides.get("data"))
        return config

    def create_instance(self, overrides: Optional[dict] = None) -> Shape:
        """Create a shape instance of this type."""
        return Shape.from_config(
            self.build_instance_config(overrides), self.behavior or BOX_BEHAVIOR
        )

    # --- Queries ---

    def matches(self, query: str) -> bool:
        """Case-insensitive substring match on id, name, category, description and tags."""
        q = query.lower()
        return (
            q in self.id.lower()
            or q in self.name.lower()
            or q in self.category.lower()
            or q in self.description.lower()
            or any(q in tag.lower() for tag in self.tags)
        )

    def has_tag(self, tag: str) -> bool:
        return tag in self.tags

    def is_in_category(self, category: str) -> bool:
        return self.category == category

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        data = self.model_dump(by_alias=True, mode="json")
        data["behavior"] = self.behavior.name if self.behavior else None
        return data

    def get_info(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "category": self.category,
            "description": self.description,
            "icon": self.icon,
            "tags": list(self.tags),
            "features": self.features.to_json_dict(),
            "registeredAt": self.registered_at.isoformat() if self.registered_at else None,
        }
