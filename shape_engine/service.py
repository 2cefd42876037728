"""
Shape Engine HTTP service - FastAPI application.

Exposes the registry to non-Python diagramming surfaces:
- Palette, search and definition lookups
- Instance creation (serialized shape + outline + ports + handles)
- Hit testing against outlines, ports and handles
- Config validation, resize calculation and connection routing
- Loader status

The built-in library (and an optional extra directory) is loaded in the
app lifespan.
"""

from contextlib import asynccontextmanager
from typing import Any, Optional

from fastapi import FastAPI, HTTPException, Query, Request
from pydantic import ValidationError as PydanticValidationError

from .config import EngineSettings
from .errors import NotFoundError
from .fetchers import LocalFetcher
from .geometry import segment_to_dict, to_svg_path
from .handles import calculate_resize, find_handle_at_point
from .loader import ShapeLoader
from .log import get_logger
from .models import ConnectionPathRequest, ResizeRequest, ValidateConfigRequest, WireModel
from .ports import calculate_connection_path, find_nearest_port
from .registry import ShapeRegistry
from .shape import RenderContext, Shape
from .validation import ShapeValidator

logger = get_logger(__name__)


class CreateInstanceRequest(WireModel):
    """Per-instance overrides (wire format) for a new shape."""
    overrides: dict[str, Any] = {}


class HitTestRequest(WireModel):
    """A pointer position tested against an instance built from overrides."""
    overrides: dict[str, Any] = {}
    x: float
    y: float


def shape_payload(shape: Shape) -> dict:
    """Everything a client needs to draw and interact with an instance."""
    drawable = shape.render(RenderContext(show_ports=True, show_handles=True))
    return {
        "shape": shape.serialize(),
        "bounds": shape.get_bounds().to_dict(),
        "render": drawable.to_dict(),
    }


def create_app(
    settings: Optional[EngineSettings] = None,
    registry: Optional[ShapeRegistry] = None,
    loader: Optional[ShapeLoader] = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Engine settings (defaults to EngineSettings())
        registry: Registry to serve (a new one if omitted)
        loader: Loader feeding the registry (a LocalFetcher loader if omitted)
    """
    settings = settings or EngineSettings()
    registry = registry or ShapeRegistry()
    loader = loader or ShapeLoader(registry, LocalFetcher(), fail_fast=settings.fail_fast)
    validator = ShapeValidator()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Load shape libraries on startup."""
        summary = await loader.load_builtin_shapes()
        logger.info(
            "Loaded %d of %d built-in shapes", summary["loaded"], summary["totalShapes"]
        )
        if settings.library_path:
            extra = await loader.load_directory(settings.library_path)
            logger.info("Loaded %d of %d shapes from %s", extra["loaded"], extra["total"], settings.library_path)
        yield

    app = FastAPI(
        title="Shape Engine API",
        description="Shape registry, geometry and connection routing for diagram editors",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.registry = registry
    app.state.loader = loader

    # --- Health Check ---

    @app.get("/api/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "ok", "shapes": len(registry)}

    # --- Shape Types ---

    @app.get("/api/shapes")
    async def list_shapes():
        """Registered types grouped by category."""
        return {"categories": registry.get_palette_data(), "stats": registry.get_stats()}

    @app.get("/api/shapes/search")
    async def search_shapes(q: str = Query(..., min_length=1)):
        """Search types by name, description, tag or id."""
        results = [
            {
                "type": r["type"],
                "score": r["score"],
                "name": r["definition"].name,
                "category": r["definition"].category,
            }
            for r in registry.search(q)
        ]
        return {"query": q, "results": results}

    @app.get("/api/shapes/{type_id}")
    async def get_shape_type(type_id: str):
        """Get a type's definition."""
        definition = registry.get_definition(type_id)
        if definition is None:
            raise HTTPException(status_code=404, detail=str(NotFoundError(type_id)))
        return definition.to_dict()

    def build_shape(type_id: str, overrides: dict) -> Shape:
        try:
            return registry.create(type_id, overrides)
        except NotFoundError as e:
            raise HTTPException(status_code=404, detail=str(e))
        except PydanticValidationError as e:
            raise HTTPException(
                status_code=422,
                detail=[f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()],
            )

    @app.post("/api/shapes/{type_id}/instances")
    async def create_instance(type_id: str, request: CreateInstanceRequest):
        """Create a shape instance from a registered type."""
        shape = build_shape(type_id, request.overrides)
        return {"success": True, **shape_payload(shape)}

    @app.post("/api/shapes/{type_id}/hit-test")
    async def hit_test(type_id: str, request: HitTestRequest):
        """Outline hit, nearest port within snap distance and handle under the pointer."""
        shape = build_shape(type_id, request.overrides)
        point = (request.x, request.y)
        port = find_nearest_port(shape, point, settings.port_snap_distance)
        handle = find_handle_at_point(shape, point, settings.handle_hit_threshold)
        return {
            "contains": shape.contains_point(point),
            "port": port.to_json_dict() if port else None,
            "handle": handle.to_json_dict() if handle else None,
        }

    # --- Engines ---

    @app.post("/api/validate")
    async def validate_config(request: ValidateConfigRequest):
        """Validate a configuration document without registering it."""
        result = validator.validate_config(request.config)
        config_id = request.config.get("id")
        if request.type_id and config_id and request.type_id != config_id:
            result.warnings.append(
                f"Type '{request.type_id}' does not match config id '{config_id}'"
            )
        return result.to_dict()

    @app.post("/api/resize")
    async def resize(request: ResizeRequest):
        """Compute new bounds for a handle drag. Unknown handles yield null bounds."""
        options = request.options
        if "grid_size" not in options.model_fields_set:
            options = options.model_copy(update={"grid_size": settings.grid_size})
        bounds = calculate_resize(
            request.bounds,
            request.handle,
            request.dx,
            request.dy,
            options,
            request.constraints,
        )
        return {"bounds": bounds.to_dict() if bounds else None}

    @app.post("/api/connections/path")
    async def connection_path(request: ConnectionPathRequest):
        """Route a connection between two absolute ports."""
        path = calculate_connection_path(request.source, request.target, request.style)
        return {"d": to_svg_path(path), "segments": [segment_to_dict(s) for s in path]}

    # --- Loader ---

    @app.get("/api/loader")
    async def loader_status(request: Request):
        """Load states and recorded failures."""
        return request.app.state.loader.to_dict()

    return app
