"""
Shape Registry - type id -> definition map and instance factory.

This module implements:
- Validated registration (invalid shapes are reported, never raised)
- O(1) category and tag lookups via index dictionaries
- Scored search across names, descriptions, tags and type ids
- Palette and statistics views for outer layers
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import ValidationError as PydanticValidationError

from .definition import ShapeDefinition
from .errors import NotFoundError
from .shape import Shape, ShapeBehavior
from .validation import ShapeValidator, ValidationResult

# Search scores: first matching field wins
SCORE_NAME = 10
SCORE_DESCRIPTION = 5
SCORE_TAG = 3
SCORE_TYPE = 1


@dataclass
class RegistrationResult:
    """Outcome of a register() call."""
    type_id: str
    validation: ValidationResult = field(default_factory=ValidationResult)
    definition: Optional[ShapeDefinition] = None

    @property
    def success(self) -> bool:
        return self.definition is not None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "type": self.type_id,
            "success": self.success,
            **self.validation.to_dict(),
        }


class ShapeRegistry:
    """
    Maps shape type ids to immutable definitions.

    register() and unregister() are the only mutations; each updates the
    definition map and both indexes in one step.
    """

    def __init__(
        self,
        validator: Optional[ShapeValidator] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self._validator = validator or ShapeValidator()
        self._logger = logger or logging.getLogger(__name__)

        self._definitions: dict[str, ShapeDefinition] = {}   # type_id -> definition
        self._category_index: dict[str, set[str]] = {}      # category -> type_ids
        self._tag_index: dict[str, set[str]] = {}           # tag -> type_ids

    # --- Index Management ---

    def _index(self, type_id: str, definition: ShapeDefinition):
        if definition.category not in self._category_index:
            self._category_index[definition.category] = set()
        self._category_index[definition.category].add(type_id)
        for tag in definition.tags:
            if tag not in self._tag_index:
                self._tag_index[tag] = set()
            self._tag_index[tag].add(type_id)

    def _unindex(self, type_id: str, definition: ShapeDefinition):
        types = self._category_index.get(definition.category)
        if types is not None:
            types.discard(type_id)
            if not types:
                del self._category_index[definition.category]
        for tag in definition.tags:
            types = self._tag_index.get(tag)
            if types is not None:
                types.discard(type_id)
                if not types:
                    del self._tag_index[tag]

    # --- Registration ---

    def register(self, type_id: str, behavior: ShapeBehavior, config: dict) -> RegistrationResult:
        """
        Validate and register a shape type.

        Re-registering an existing type id replaces it (with a warning).

        Returns:
            RegistrationResult; success is False if validation failed
        """
        validation = self._validator.validate_registration(type_id, behavior, config)
        result = RegistrationResult(type_id=type_id, validation=validation)
        for warning in validation.warnings:
            self._logger.debug("Shape '%s': %s", type_id, warning)
        if not validation.valid:
            self._logger.warning(
                "Rejected shape '%s': %s", type_id, "; ".join(validation.errors)
            )
            return result

        try:
            definition = ShapeDefinition.from_config(
                {**config, "type": type_id},
                behavior=behavior,
                registered_at=datetime.now(timezone.utc),
            )
        except PydanticValidationError as e:
            validation.errors.extend(
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
            )
            self._logger.warning("Rejected shape '%s': invalid config", type_id)
            return result

        existing = self._definitions.get(type_id)
        if existing is not None:
            self._logger.warning("Shape type '%s' is already registered. Overwriting.", type_id)
            self._unindex(type_id, existing)

        self._definitions[type_id] = definition
        self._index(type_id, definition)
        result.definition = definition
        return result

    def unregister(self, type_id: str) -> bool:
        """Remove a type. Instances already created are unaffected."""
        definition = self._definitions.pop(type_id, None)
        if definition is None:
            return False
        self._unindex(type_id, definition)
        return True

    def clear(self):
        self._definitions.clear()
        self._category_index.clear()
        self._tag_index.clear()

    # --- Factory ---

    def create(self, type_id: str, overrides: Optional[dict] = None) -> Shape:
        """
        Create an instance of a registered type.

        Raises:
            NotFoundError: If the type id is not registered
        """
        definition = self._definitions.get(type_id)
        if definition is None:
            raise NotFoundError(type_id)
        return definition.create_instance(overrides)

    # --- Lookups ---

    def has(self, type_id: str) -> bool:
        return type_id in self._definitions

    def get_definition(self, type_id: str) -> Optional[ShapeDefinition]:
        return self._definitions.get(type_id)

    def get_definitions(self) -> list[ShapeDefinition]:
        return list(self._definitions.values())

    def get_types(self) -> list[str]:
        """Registered type ids in registration order."""
        return list(self._definitions)

    def get_types_by_category(self, category: str) -> list[str]:
        return sorted(self._category_index.get(category, ()))

    def get_types_by_tag(self, tag: str) -> list[str]:
        return sorted(self._tag_index.get(tag, ()))

    def get_categories(self) -> list[str]:
        return sorted(self._category_index)

    def get_tags(self) -> list[str]:
        return sorted(self._tag_index)

    def __len__(self) -> int:
        return len(self._definitions)

    def __contains__(self, type_id: object) -> bool:
        return type_id in self._definitions

    # --- Queries ---

    def search(self, query: str) -> list[dict[str, Any]]:
        """
        Find types matching a query, best first.

        Scores: name 10, description 5, tag 3, type id 1. Types with
        equal scores keep registration order.
        """
        q = query.lower()
        results = []
        for type_id, definition in self._definitions.items():
            if q in definition.name.lower():
                score = SCORE_NAME
            elif q in definition.description.lower():
                score = SCORE_DESCRIPTION
            elif any(q in tag.lower() for tag in definition.tags):
                score = SCORE_TAG
            elif q in type_id.lower():
                score = SCORE_TYPE
            else:
                continue
            results.append({"type": type_id, "score": score, "definition": definition})

        results.sort(key=lambda r: r["score"], reverse=True)
        return results

    def validate(self, type_id: str) -> ValidationResult:
        """Re-check a registered type's behavior and definition."""
        definition = self._definitions.get(type_id)
        if definition is None:
            return ValidationResult(errors=[f"Shape type '{type_id}' is not registered"])

        result = self._validator.validate_behavior(definition.behavior)
        if not definition.name:
            result.errors.append(f"Shape definition for '{type_id}' missing required field: name")
        return result

    def get_stats(self) -> dict:
        return {
            "totalShapes": len(self._definitions),
            "categories": {c: len(types) for c, types in sorted(self._category_index.items())},
            "tags": {t: len(types) for t, types in sorted(self._tag_index.items())},
        }

    def get_palette_data(self) -> dict[str, list[dict]]:
        """Types grouped by category, for shape pickers."""
        palette: dict[str, list[dict]] = {}
        for type_id, definition in self._definitions.items():
            palette.setdefault(definition.category, []).append({
                "type": type_id,
                "name": definition.name,
                "description": definition.description,
                "icon": definition.icon,
                "category": definition.category,
            })
        return palette

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "types": self.get_types(),
            "categories": {c: sorted(t) for c, t in sorted(self._category_index.items())},
            "tags": {t: sorted(ids) for t, ids in sorted(self._tag_index.items())},
            "definitions": {t: d.to_dict() for t, d in self._definitions.items()},
        }
