"""
Shape Engine - shape registry, geometry, resize handles and connection ports.

Shape kinds are behavior records registered together with a JSON
configuration document. The registry creates instances; the handle and
port engines are pure functions over bounds and port declarations.
"""

from .models import (
    # Enums
    PortRole,
    PortDirection,
    HandleId,
    ShapeCategory,
    ConnectionStyle,
    # Core models
    Point,
    Bounds,
    ShapeStyle,
    TextStyle,
    Port,
    Constraints,
    Features,
    PortPosition,
    HandlePosition,
    ResizeOptions,
    ShapeSource,
    # Request models (for API)
    ResizeRequest,
    ConnectionPathRequest,
    ValidateConfigRequest,
)

from .errors import ShapeEngineError, NotFoundError, LoadFailure
from .config import EngineSettings
from .log import setup_logging
from .validation import ShapeValidator, ValidationResult, validate_library, validation_summary
from .shape import Shape, ShapeBehavior, RenderContext, Drawable
from .definition import ShapeDefinition
from .registry import ShapeRegistry, RegistrationResult
from .loader import ShapeLoader, LoadState
from .fetchers import LocalFetcher, HttpFetcher
from .handles import calculate_resize, calculate_resize_preview, get_resize_cursor
from .ports import calculate_connection_path, can_connect, find_nearest_port

__all__ = [
    # Enums
    "PortRole",
    "PortDirection",
    "HandleId",
    "ShapeCategory",
    "ConnectionStyle",
    # Models
    "Point",
    "Bounds",
    "ShapeStyle",
    "TextStyle",
    "Port",
    "Constraints",
    "Features",
    "PortPosition",
    "HandlePosition",
    "ResizeOptions",
    "ShapeSource",
    # Request models
    "ResizeRequest",
    "ConnectionPathRequest",
    "ValidateConfigRequest",
    # Errors and settings
    "ShapeEngineError",
    "NotFoundError",
    "LoadFailure",
    "EngineSettings",
    "setup_logging",
    # Validation
    "ShapeValidator",
    "ValidationResult",
    "validate_library",
    "validation_summary",
    # Shapes and registry
    "Shape",
    "ShapeBehavior",
    "RenderContext",
    "Drawable",
    "ShapeDefinition",
    "ShapeRegistry",
    "RegistrationResult",
    # Loading
    "ShapeLoader",
    "LoadState",
    "LocalFetcher",
    "HttpFetcher",
    # Engines
    "calculate_resize",
    "calculate_resize_preview",
    "get_resize_cursor",
    "calculate_connection_path",
    "can_connect",
    "find_nearest_port",
]
