#!/usr/bin/env python3
"""Shape engine CLI - inspect the shape library, validate configs, render outlines, serve the API."""

import argparse
import asyncio
import json
import sys

from .config import EngineSettings
from .errors import NotFoundError
from .fetchers import LocalFetcher
from .geometry import segment_to_dict
from .loader import ShapeLoader
from .log import setup_logging
from .registry import ShapeRegistry
from .validation import ShapeValidator


def _json_out(data, code=0):
    print(json.dumps(data))
    sys.exit(code)


def _load_registry(settings):
    """Registry with the built-in library (and settings.library_path) loaded."""
    registry = ShapeRegistry()
    loader = ShapeLoader(registry, LocalFetcher(), fail_fast=settings.fail_fast)

    async def load():
        await loader.load_builtin_shapes()
        if settings.library_path:
            await loader.load_directory(settings.library_path)

    asyncio.run(load())
    return registry, loader


def _parse_json_arg(value):
    """Parse a JSON object argument, or return None."""
    if value is None:
        return None
    try:
        parsed = json.loads(value)
    except (json.JSONDecodeError, TypeError):
        _json_out({"status": "error", "error": f"Invalid JSON: {value}"}, 1)
    if not isinstance(parsed, dict):
        _json_out({"status": "error", "error": "Expected a JSON object"}, 1)
    return parsed


# ── Library ──────────────────────────────────────────────────────────────────

def cmd_list(args, settings):
    registry, _ = _load_registry(settings)
    if args.category:
        _json_out({"category": args.category, "types": registry.get_types_by_category(args.category)})
    _json_out({"categories": registry.get_palette_data(), "stats": registry.get_stats()})


def cmd_search(args, settings):
    registry, _ = _load_registry(settings)
    _json_out({
        "query": args.query,
        "results": [{"type": r["type"], "score": r["score"]} for r in registry.search(args.query)],
    })


def cmd_info(args, settings):
    registry, _ = _load_registry(settings)
    definition = registry.get_definition(args.type_id)
    if definition is None:
        _json_out({"status": "error", "error": str(NotFoundError(args.type_id))}, 1)
    _json_out(definition.to_dict())


def cmd_loader(args, settings):
    _, loader = _load_registry(settings)
    _json_out(loader.to_dict())


# ── Configs ──────────────────────────────────────────────────────────────────

def cmd_validate(args, settings):
    try:
        with open(args.config, encoding="utf-8") as f:
            config = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        _json_out({"status": "error", "error": f"Could not read {args.config}: {e}"}, 1)

    result = ShapeValidator().validate_config(config)
    _json_out(result.to_dict(), 0 if result.valid else 1)


# ── Geometry ─────────────────────────────────────────────────────────────────

def cmd_path(args, settings):
    registry, _ = _load_registry(settings)
    overrides = {"x": args.x, "y": args.y}
    if args.width is not None:
        overrides["width"] = args.width
    if args.height is not None:
        overrides["height"] = args.height
    data = _parse_json_arg(args.data)
    if data:
        overrides["data"] = data

    try:
        shape = registry.create(args.type_id, overrides)
    except NotFoundError as e:
        _json_out({"status": "error", "error": str(e)}, 1)

    path = shape.get_path()
    _json_out({
        "type": shape.type,
        "bounds": shape.get_bounds().to_dict(),
        "d": shape.get_svg_path(),
        "segments": [segment_to_dict(s) for s in path] if args.segments else None,
        "ports": [p.to_json_dict() for p in shape.get_port_positions()],
    })


# ── Service ──────────────────────────────────────────────────────────────────

def cmd_serve(args, settings):
    import uvicorn

    from .service import create_app

    uvicorn.run(
        create_app(settings),
        host=args.host or settings.host,
        port=args.port or settings.port,
        log_level=settings.log_level.lower(),
    )


def main(argv=None):
    parser = argparse.ArgumentParser(prog="shape-engine", description="Shape engine CLI")
    parser.add_argument("--library-path", default=None, help="Extra directory of shape configs")
    parser.add_argument("--log-level", default=None)
    sub = parser.add_subparsers(dest="command", required=True)

    # Library
    p = sub.add_parser("list")
    p.add_argument("--category", default=None)

    p = sub.add_parser("search")
    p.add_argument("query")

    p = sub.add_parser("info")
    p.add_argument("type_id")

    sub.add_parser("loader")

    # Configs
    p = sub.add_parser("validate")
    p.add_argument("config")

    # Geometry
    p = sub.add_parser("path")
    p.add_argument("type_id")
    p.add_argument("--x", type=float, default=0)
    p.add_argument("--y", type=float, default=0)
    p.add_argument("--width", type=float, default=None)
    p.add_argument("--height", type=float, default=None)
    p.add_argument("--data", default=None, help="Kind parameters as a JSON object")
    p.add_argument("--segments", action="store_true")

    # Service
    p = sub.add_parser("serve")
    p.add_argument("--host", default=None)
    p.add_argument("--port", type=int, default=None)

    args = parser.parse_args(argv)

    settings = EngineSettings.from_env()
    updates = {}
    if args.library_path:
        updates["library_path"] = args.library_path
    if args.log_level:
        updates["log_level"] = args.log_level
    settings = settings.model_copy(update=updates)
    setup_logging(settings.log_level, settings.log_dir)

    cmd_map = {
        "list": cmd_list,
        "search": cmd_search,
        "info": cmd_info,
        "loader": cmd_loader,
        "validate": cmd_validate,
        "path": cmd_path,
        "serve": cmd_serve,
    }
    cmd_map[args.command](args, settings)


if __name__ == "__main__":
    main()
