"""
Shape validation - Check behaviors, configs and instances for defects.

Validation never raises. Every check returns a ValidationResult so that
a whole shape library can be checked in one pass and every problem
reported.

Levels:
- Structural: does a behavior expose the required operations
- Declarative: required config fields, value types and sane ranges
- Cross-check: registered type id vs. the config's own id (warning only)
"""

import re
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Optional

from .models import (
    HANDLE_PRESETS,
    PORT_PRESETS,
    HandleId,
    PortDirection,
    PortRole,
    ShapeCategory,
)

ID_PATTERN = re.compile(r"[a-z0-9-]+")

REQUIRED_CONFIG_FIELDS = ("id", "name", "category")
REQUIRED_BEHAVIOR_OPERATIONS = ("render", "path", "serialize", "deserialize")
RECOMMENDED_BEHAVIOR_OPERATIONS = ("contains_point", "port_positions")
REQUIRED_INSTANCE_METHODS = ("render", "get_path", "serialize")
FEATURE_FLAGS = ("resizable", "rotatable", "connectable", "groupable", "lockable", "clonable")
PROPERTY_TYPES = ("string", "number", "integer", "boolean", "color", "select")

_CATEGORIES = {c.value for c in ShapeCategory}
_ROLES = {r.value for r in PortRole}
_DIRECTIONS = {d.value for d in PortDirection}
_HANDLE_IDS = {h.value for h in HandleId}


@dataclass
class ValidationResult:
    """Errors block registration; warnings are informational."""
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors

    def merge(self, other: "ValidationResult") -> "ValidationResult":
        """Append another result's problems to this one."""
        self.errors.extend(other.errors)
        self.warnings.extend(other.warnings)
        return self

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "valid": self.valid,
            "errors": list(self.errors),
            "warnings": list(self.warnings),
        }


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_known(value: Any, allowed: Any) -> bool:
    # Config values may be lists or dicts, which are unhashable.
    return isinstance(value, str) and value in allowed


def _get(entry: Any, key: str, default: Any = None) -> Any:
    if isinstance(entry, Mapping):
        return entry.get(key, default)
    return getattr(entry, key, default)


# --- Port and handle checks ---

def check_ports(ports: Iterable[Any]) -> list[str]:
    """
    Check port declarations (models or dicts).

    Reports missing and duplicate ids, coordinates outside [0, 1], and
    unknown role or direction tags.
    """
    errors: list[str] = []
    seen: set[str] = set()

    for index, port in enumerate(ports):
        port_id = _get(port, "id")
        if not port_id:
            errors.append(f"Port {index} missing id")
        elif not isinstance(port_id, str):
            errors.append(f"Port {index} id must be a string")
            port_id = None
        elif port_id in seen:
            errors.append(f"Duplicate port id: {port_id}")
        else:
            seen.add(port_id)

        label = port_id or index
        for axis in ("x", "y"):
            value = _get(port, axis)
            if not _is_number(value) or not 0 <= value <= 1:
                errors.append(f"Port {label} {axis} must be between 0 and 1")

        role = _get(port, "type")
        if role and not _is_known(role, _ROLES):
            errors.append(f"Port {label} has invalid type: {role}")

        direction = _get(port, "direction")
        if direction and not _is_known(direction, _DIRECTIONS):
            errors.append(f"Port {label} has invalid direction: {direction}")

    return errors


def check_handles(handle_ids: Iterable[Any]) -> list[str]:
    """Report handle ids outside the canonical eight, and duplicates."""
    handle_ids = list(handle_ids)
    errors = [f"Invalid handle ID: {h}" for h in handle_ids if not _is_known(h, _HANDLE_IDS)]
    seen: set = set()
    duplicates = []
    for h in handle_ids:
        if not isinstance(h, str):
            continue
        if h in seen and h not in duplicates:
            duplicates.append(h)
        seen.add(h)
    errors.extend(f"Duplicate handle ID: {h}" for h in duplicates)
    return errors


class ShapeValidator:
    """
    Validates shape behaviors, configuration documents and instances.

    Stateless: each call builds and returns its own ValidationResult.
    """

    def validate_behavior(self, behavior: Any) -> ValidationResult:
        """Check that a behavior exposes the required operations."""
        result = ValidationResult()
        if behavior is None:
            result.errors.append("Behavior must be provided")
            return result

        for name in REQUIRED_BEHAVIOR_OPERATIONS:
            if not callable(getattr(behavior, name, None)):
                result.errors.append(f"Missing required operation: {name}")
        for name in RECOMMENDED_BEHAVIOR_OPERATIONS:
            if not callable(getattr(behavior, name, None)):
                result.warnings.append(f"Missing recommended operation: {name}")
        return result

    def validate_config(self, config: Any) -> ValidationResult:
        """Check a shape configuration document."""
        result = ValidationResult()
        if not isinstance(config, Mapping):
            result.errors.append("Config must be an object")
            return result

        errors, warnings = result.errors, result.warnings

        for name in REQUIRED_CONFIG_FIELDS:
            if not config.get(name):
                errors.append(f"Missing required field: {name}")

        type_id = config.get("id")
        if type_id and not (isinstance(type_id, str) and ID_PATTERN.fullmatch(type_id)):
            errors.append("ID must contain only lowercase letters, numbers, and hyphens")

        category = config.get("category")
        if category and not isinstance(category, str):
            errors.append("category must be a string")
        elif category and category not in _CATEGORIES:
            warnings.append(f"Unknown category: {category}")

        size = config.get("defaultSize")
        if size is None:
            warnings.append("Missing defaultSize")
        elif not isinstance(size, Mapping):
            errors.append("defaultSize must be an object")
        else:
            for dim in ("width", "height"):
                value = size.get(dim)
                if not _is_number(value) or value <= 0:
                    errors.append(f"defaultSize.{dim} must be a positive number")

        if "defaultStyle" not in config:
            warnings.append("Missing defaultStyle")
        for key in ("defaultStyle", "defaultTextStyle", "defaultData", "metadata"):
            if key in config and not isinstance(config[key], Mapping):
                errors.append(f"{key} must be an object")

        self._check_ports_section(config.get("ports"), result)
        self._check_handles_section(config.get("handles"), result)
        self._check_constraints(config.get("constraints"), result)

        features = config.get("features")
        if features is not None:
            if not isinstance(features, Mapping):
                errors.append("features must be an object")
            else:
                for flag in FEATURE_FLAGS:
                    if flag in features and not isinstance(features[flag], bool):
                        errors.append(f"features.{flag} must be a boolean")

        tags = config.get("tags")
        if tags is not None and not isinstance(tags, list):
            errors.append("tags must be an array")

        if "properties" in config:
            result.merge(self.validate_properties(config["properties"]))

        return result

    def _check_ports_section(self, ports: Any, result: ValidationResult) -> None:
        if ports is None:
            return
        if not isinstance(ports, Mapping):
            result.errors.append("ports must be an object")
            return
        if not isinstance(ports.get("enabled"), bool):
            result.warnings.append("ports.enabled should be a boolean")
        preset = ports.get("preset")
        if preset is not None and not _is_known(preset, PORT_PRESETS):
            result.warnings.append(f"Unknown port preset: {preset}")
        positions = ports.get("positions")
        if positions is not None:
            if not isinstance(positions, list):
                result.errors.append("ports.positions must be an array")
            else:
                result.errors.extend(check_ports(positions))

    def _check_handles_section(self, handles: Any, result: ValidationResult) -> None:
        if handles is None:
            return
        if not isinstance(handles, Mapping):
            result.errors.append("handles must be an object")
            return
        if not isinstance(handles.get("enabled"), bool):
            result.warnings.append("handles.enabled should be a boolean")
        preset = handles.get("preset")
        if preset is not None and not _is_known(preset, HANDLE_PRESETS):
            result.warnings.append(f"Unknown handle preset: {preset}")
        positions = handles.get("positions")
        if positions is not None:
            if not isinstance(positions, list):
                result.errors.append("handles.positions must be an array")
            else:
                result.errors.extend(check_handles(positions))

    def _check_constraints(self, constraints: Any, result: ValidationResult) -> None:
        if constraints is None:
            return
        if not isinstance(constraints, Mapping):
            result.errors.append("constraints must be an object")
            return

        for key in ("minWidth", "minHeight", "maxWidth", "maxHeight"):
            value = constraints.get(key)
            if value is not None and (not _is_number(value) or value < 0):
                result.errors.append(f"constraints.{key} must be a non-negative number")

        for low, high, dim in (("minWidth", "maxWidth", "Width"), ("minHeight", "maxHeight", "Height")):
            lo, hi = constraints.get(low), constraints.get(high)
            if _is_number(lo) and _is_number(hi) and lo > hi:
                result.errors.append(f"min{dim} cannot be greater than max{dim}")

        ratio = constraints.get("aspectRatio")
        if ratio is not None:
            if not _is_number(ratio):
                result.errors.append("aspectRatio must be a number or null")
            elif ratio <= 0:
                result.errors.append("aspectRatio must be positive")

    def validate_registration(self, type_id: Any, behavior: Any, config: Any) -> ValidationResult:
        """All structural and declarative checks plus the type id cross-check."""
        result = ValidationResult()
        if not isinstance(type_id, str) or not type_id:
            result.errors.append("Type must be a non-empty string")

        result.merge(self.validate_behavior(behavior))
        result.merge(self.validate_config(config))

        if isinstance(config, Mapping) and config.get("id") != type_id:
            result.warnings.append(
                f"Type '{type_id}' does not match config id '{config.get('id')}'"
            )
        return result

    def validate_instance(self, shape: Any) -> ValidationResult:
        """Check a live shape instance, including its own invariants."""
        result = ValidationResult()
        if shape is None:
            result.errors.append("Shape instance must be provided")
            return result

        if not getattr(shape, "id", None):
            result.errors.append("Shape instance must have an id")
        if not getattr(shape, "type", None):
            result.errors.append("Shape instance must have a type")
        for axis in ("x", "y"):
            if not _is_number(getattr(shape, axis, None)):
                result.errors.append(f"Shape {axis} position must be a number")
        for name in REQUIRED_INSTANCE_METHODS:
            if not callable(getattr(shape, name, None)):
                result.errors.append(f"Missing required method: {name}")

        own_check = getattr(shape, "validate", None)
        if callable(own_check):
            result.merge(own_check())
        return result

    def validate_properties(self, properties: Any) -> ValidationResult:
        """Check editable property descriptors ({name: {type, min, max, options}})."""
        result = ValidationResult()
        if not isinstance(properties, Mapping):
            return result

        for key, prop in properties.items():
            if not isinstance(prop, Mapping):
                result.errors.append(f"Property '{key}' must be an object")
                continue
            prop_type = prop.get("type")
            if not prop_type:
                result.errors.append(f"Property '{key}' missing type")
            elif prop_type not in PROPERTY_TYPES:
                result.warnings.append(f"Property '{key}' has unknown type: {prop_type}")

            if prop_type in ("number", "integer"):
                lo, hi = prop.get("min"), prop.get("max")
                if _is_number(lo) and _is_number(hi) and lo > hi:
                    result.errors.append(f"Property '{key}' min cannot be greater than max")

            if prop_type == "select" and not isinstance(prop.get("options"), list):
                result.errors.append(
                    f"Property '{key}' with type 'select' must have options array"
                )
        return result


def validate_library(
    configs: Iterable[Any], validator: Optional[ShapeValidator] = None
) -> dict[str, ValidationResult]:
    """
    Validate many configuration documents in one pass.

    Results are keyed by config id, or "#<index>" when a config has none.
    """
    validator = validator or ShapeValidator()
    results: dict[str, ValidationResult] = {}
    for index, config in enumerate(configs):
        key = config.get("id") if isinstance(config, Mapping) else None
        if not isinstance(key, str) or not key or key in results:
            key = f"#{index}"
        results[key] = validator.validate_config(config)
    return results


def validation_summary(results: Mapping[str, ValidationResult]) -> dict:
    """
    Create a summary of validation results.

    Args:
        results: Results keyed by type id

    Returns:
        Dictionary with counts and the ids that failed
    """
    invalid = [key for key, r in results.items() if not r.valid]
    return {
        "total": len(results),
        "valid": len(results) - len(invalid),
        "invalid": invalid,
        "errors": sum(len(r.errors) for r in results.values()),
        "warnings": sum(len(r.warnings) for r in results.values()),
    }
