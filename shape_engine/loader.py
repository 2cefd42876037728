"""
Shape Loader - asynchronous registration pipeline.

Each type id moves through:

    unregistered -> loading -> loaded | failed

- A load request for a type that is already loading is rejected (warning,
  returns False); it is neither queued nor merged with the in-flight load.
- A failed type keeps its LoadFailure until reload_shape() is called; it
  is never retried automatically.
- The only suspension points are the fetcher calls. Registration and the
  transition to LOADED happen together with no await in between, so no
  caller can observe LOADED before the registry holds the definition.
"""

import asyncio
import logging
from enum import Enum
from pathlib import Path
from typing import Any, Mapping, Optional, Protocol, Sequence

from .errors import LoadFailure
from .library import BUILTIN_LIBRARY
from .models import ShapeSource
from .registry import ShapeRegistry


class LoadState(str, Enum):
    UNREGISTERED = "unregistered"
    LOADING = "loading"
    LOADED = "loaded"
    FAILED = "failed"


class ShapeFetcher(Protocol):
    """Asynchronous access to behavior records and configuration documents."""

    async def fetch_behavior(self, ref: str) -> Any:
        ...

    async def fetch_config(self, ref: str) -> Any:
        ...


class ShapeLoader:
    """
    Loads shape types through a fetcher and registers them.

    Failures are recorded per type id and reported in summaries. With
    fail_fast=True they are raised as LoadFailure instead.
    """

    def __init__(
        self,
        registry: ShapeRegistry,
        fetcher: ShapeFetcher,
        fail_fast: bool = False,
        logger: Optional[logging.Logger] = None,
    ):
        self._registry = registry
        self._fetcher = fetcher
        self._fail_fast = fail_fast
        self._logger = logger or logging.getLogger(__name__)

        self._states: dict[str, LoadState] = {}
        self._failures: dict[str, LoadFailure] = {}

    @property
    def registry(self) -> ShapeRegistry:
        return self._registry

    def _fail(
        self,
        type_id: str,
        message: str,
        cause: Optional[BaseException] = None,
        errors: Optional[list[str]] = None,
    ) -> bool:
        failure = LoadFailure(type_id, message, cause=cause, errors=errors)
        self._failures[type_id] = failure
        self._states[type_id] = LoadState.FAILED
        self._logger.error("%s", failure)
        if self._fail_fast:
            raise failure from cause
        return False

    # --- Loading ---

    async def load_shape(self, type_id: str, behavior_ref: str, config_ref: str) -> bool:
        """
        Fetch, validate and register one shape type.

        Returns:
            True if the type is loaded (now or already), False otherwise

        Raises:
            LoadFailure: On failure, only in fail-fast mode
        """
        state = self.get_state(type_id)
        if state is LoadState.LOADED:
            self._logger.warning("Shape '%s' is already loaded", type_id)
            return True
        if state is LoadState.LOADING:
            self._logger.warning("Shape '%s' is currently being loaded", type_id)
            return False
        if state is LoadState.FAILED:
            self._logger.warning("Shape '%s' failed to load; use reload_shape to retry", type_id)
            return False

        self._states[type_id] = LoadState.LOADING
        try:
            behavior = await self._fetcher.fetch_behavior(behavior_ref)
            config = await self._fetcher.fetch_config(config_ref)
        except Exception as e:
            return self._fail(type_id, f"could not fetch shape: {e}", cause=e)

        try:
            result = self._registry.register(type_id, behavior, config)
        except Exception as e:
            return self._fail(type_id, f"could not register shape: {e}", cause=e)
        if not result.success:
            return self._fail(type_id, "validation failed", errors=result.validation.errors)

        self._states[type_id] = LoadState.LOADED
        self._failures.pop(type_id, None)
        self._logger.debug("Loaded shape '%s'", type_id)
        return True

    async def load_source(self, source: ShapeSource) -> bool:
        return await self.load_shape(source.type_id, source.behavior, source.config)

    async def load_category(self, category: str, sources: Sequence[ShapeSource]) -> dict:
        """
        Load several types concurrently.

        Returns:
            Summary dict: category, total, loaded, failed, errors
        """
        outcomes = await asyncio.gather(*(self.load_source(s) for s in sources))

        summary = {"category": category, "total": len(sources), "loaded": 0, "failed": 0, "errors": []}
        for source, ok in zip(sources, outcomes):
            if ok:
                summary["loaded"] += 1
                continue
            summary["failed"] += 1
            failure = self._failures.get(source.type_id)
            summary["errors"].append({
                "type": source.type_id,
                "error": failure.message if failure else "Load failed",
                "errors": list(failure.errors) if failure else [],
            })
        return summary

    async def load_library(self, library: Mapping[str, Sequence[ShapeSource]]) -> dict:
        """Load every category of a library, one category at a time."""
        summary: dict = {
            "totalCategories": 0,
            "totalShapes": 0,
            "loaded": 0,
            "failed": 0,
            "categories": {},
        }
        for category, sources in library.items():
            result = await self.load_category(category, sources)
            summary["totalCategories"] += 1
            summary["totalShapes"] += result["total"]
            summary["loaded"] += result["loaded"]
            summary["failed"] += result["failed"]
            summary["categories"][category] = result
        return summary

    async def load_builtin_shapes(self) -> dict:
        """Load the packaged shape library."""
        return await self.load_library(BUILTIN_LIBRARY)

    async def load_directory(self, path: str | Path, category: str = "custom") -> dict:
        """
        Load every *.json config in a directory.

        Each config names its behavior as "module:attribute" in its
        "behavior" field; the type id is the config's id (or the file stem).
        """
        sources = []
        unreadable: list[str] = []
        for file in sorted(Path(path).glob("*.json")):
            type_id = file.stem
            try:
                config = await self._fetcher.fetch_config(str(file))
            except Exception as e:
                unreadable.append(type_id)
                self._fail(type_id, f"could not read config: {e}", cause=e)
                continue

            if isinstance(config, dict) and isinstance(config.get("id"), str):
                type_id = config["id"]
            behavior_ref = config.get("behavior") if isinstance(config, dict) else None
            if not behavior_ref:
                unreadable.append(type_id)
                self._fail(type_id, f"config {file.name} does not name a behavior")
                continue
            sources.append(ShapeSource(type_id=type_id, behavior=behavior_ref, config=str(file)))

        summary = await self.load_category(category, sources)
        summary["total"] += len(unreadable)
        summary["failed"] += len(unreadable)
        summary["errors"].extend(
            {"type": t, "error": self._failures[t].message, "errors": []} for t in unreadable
        )
        return summary

    async def reload_shape(self, type_id: str, behavior_ref: str, config_ref: str) -> bool:
        """Unregister a type, forget its load state, and load it again."""
        self._registry.unregister(type_id)
        self._states.pop(type_id, None)
        self._failures.pop(type_id, None)
        return await self.load_shape(type_id, behavior_ref, config_ref)

    # --- State ---

    def get_state(self, type_id: str) -> LoadState:
        return self._states.get(type_id, LoadState.UNREGISTERED)

    def is_loaded(self, type_id: str) -> bool:
        return self.get_state(type_id) is LoadState.LOADED

    def get_load_error(self, type_id: str) -> Optional[LoadFailure]:
        return self._failures.get(type_id)

    def _with_state(self, state: LoadState) -> list[str]:
        return [t for t, s in self._states.items() if s is state]

    def get_loaded(self) -> list[str]:
        return self._with_state(LoadState.LOADED)

    def get_failed(self) -> list[str]:
        return self._with_state(LoadState.FAILED)

    def get_loading(self) -> list[str]:
        return self._with_state(LoadState.LOADING)

    def get_stats(self) -> dict:
        loaded = len(self.get_loaded())
        failed = len(self.get_failed())
        return {
            "loaded": loaded,
            "failed": failed,
            "loading": len(self.get_loading()),
            "total": loaded + failed,
        }

    def clear(self):
        """Forget all load states. Registered types stay registered."""
        self._states.clear()
        self._failures.clear()

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "loaded": self.get_loaded(),
            "failed": [self._failures[t].to_dict() for t in self.get_failed()],
            "loading": self.get_loading(),
            "stats": self.get_stats(),
        }
