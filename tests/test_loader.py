"""Tests for the asynchronous shape loader."""

import asyncio
import json

import pytest

from shape_engine.errors import LoadFailure
from shape_engine.fetchers import LocalFetcher
from shape_engine.library import basic
from shape_engine.loader import LoadState, ShapeLoader
from shape_engine.models import ShapeSource
from shape_engine.registry import ShapeRegistry


class FakeFetcher:
    """In-memory fetcher. Loads for ids in `gates` wait until the gate is set."""

    def __init__(self, behaviors=None, configs=None):
        self.behaviors = behaviors or {}
        self.configs = configs or {}
        self.gates: dict[str, asyncio.Event] = {}
        self.calls: list[str] = []

    async def fetch_behavior(self, ref):
        self.calls.append(ref)
        gate = self.gates.get(ref)
        if gate is not None:
            await gate.wait()
        if ref not in self.behaviors:
            raise ImportError(f"no behavior {ref}")
        return self.behaviors[ref]

    async def fetch_config(self, ref):
        if ref not in self.configs:
            raise FileNotFoundError(ref)
        return self.configs[ref]


@pytest.fixture
def fetcher(sample_config):
    broken = dict(sample_config, id="broken-box")
    del broken["name"]
    return FakeFetcher(
        behaviors={"rect": basic.RECTANGLE},
        configs={"box.json": sample_config, "broken.json": broken},
    )


@pytest.fixture
def loader(fetcher):
    return ShapeLoader(ShapeRegistry(), fetcher)


class TestLoadShape:
    """Tests for loading one type."""

    def test_load(self, loader):
        assert asyncio.run(loader.load_shape("test-box", "rect", "box.json"))
        assert loader.get_state("test-box") is LoadState.LOADED
        assert loader.is_loaded("test-box")
        assert loader.registry.has("test-box")

    def test_unknown_type_is_unregistered(self, loader):
        assert loader.get_state("nothing") is LoadState.UNREGISTERED

    def test_fetch_failure_is_recorded(self, loader, caplog):
        assert not asyncio.run(loader.load_shape("test-box", "missing", "box.json"))
        assert loader.get_state("test-box") is LoadState.FAILED
        failure = loader.get_load_error("test-box")
        assert isinstance(failure.cause, ImportError)
        assert "could not fetch shape" in failure.message
        assert "Failed to load shape 'test-box'" in caplog.text

    def test_validation_failure_is_recorded(self, loader):
        assert not asyncio.run(loader.load_shape("broken-box", "rect", "broken.json"))
        failure = loader.get_load_error("broken-box")
        assert failure.message == "validation failed"
        assert failure.errors == ["Missing required field: name"]
        assert not loader.registry.has("broken-box")

    def test_registration_error_is_recorded(self, fetcher):
        class ExplodingRegistry(ShapeRegistry):
            def register(self, type_id, behavior, config):
                raise RuntimeError("registry unavailable")

        loader = ShapeLoader(ExplodingRegistry(), fetcher)
        assert not asyncio.run(loader.load_shape("test-box", "rect", "box.json"))
        assert loader.get_state("test-box") is LoadState.FAILED
        failure = loader.get_load_error("test-box")
        assert isinstance(failure.cause, RuntimeError)
        assert "could not register shape" in failure.message
        assert loader.get_loading() == []

    def test_already_loaded(self, loader, fetcher):
        async def run():
            await loader.load_shape("test-box", "rect", "box.json")
            return await loader.load_shape("test-box", "rect", "box.json")

        assert asyncio.run(run())
        assert fetcher.calls == ["rect"]

    def test_failed_types_are_not_retried(self, loader, fetcher):
        async def run():
            await loader.load_shape("test-box", "missing", "box.json")
            return await loader.load_shape("test-box", "rect", "box.json")

        assert not asyncio.run(run())
        assert fetcher.calls == ["missing"]
        assert loader.get_state("test-box") is LoadState.FAILED

    def test_concurrent_duplicate_load_is_rejected(self, loader, fetcher):
        async def run():
            gate = fetcher.gates["rect"] = asyncio.Event()
            first = asyncio.create_task(loader.load_shape("test-box", "rect", "box.json"))
            await asyncio.sleep(0)
            assert loader.get_state("test-box") is LoadState.LOADING
            assert loader.get_loading() == ["test-box"]
            second = await loader.load_shape("test-box", "rect", "box.json")
            gate.set()
            return second, await first

        second, first = asyncio.run(run())
        assert second is False
        assert first is True
        assert fetcher.calls == ["rect"]
        assert loader.is_loaded("test-box")

    def test_reload_retries_a_failed_type(self, loader):
        async def run():
            await loader.load_shape("test-box", "missing", "box.json")
            return await loader.reload_shape("test-box", "rect", "box.json")

        assert asyncio.run(run())
        assert loader.is_loaded("test-box")
        assert loader.get_load_error("test-box") is None

    def test_fail_fast_raises(self, fetcher):
        loader = ShapeLoader(ShapeRegistry(), fetcher, fail_fast=True)
        with pytest.raises(LoadFailure) as exc:
            asyncio.run(loader.load_shape("test-box", "missing", "box.json"))
        assert exc.value.type_id == "test-box"
        assert isinstance(exc.value.__cause__, ImportError)
        assert loader.get_state("test-box") is LoadState.FAILED


class TestLoadCategory:
    """Tests for batch loading."""

    def test_category_summary(self, loader):
        sources = [
            ShapeSource(type_id="test-box", behavior="rect", config="box.json"),
            ShapeSource(type_id="broken-box", behavior="rect", config="broken.json"),
        ]
        summary = asyncio.run(loader.load_category("custom", sources))
        assert summary["category"] == "custom"
        assert (summary["total"], summary["loaded"], summary["failed"]) == (2, 1, 1)
        assert summary["errors"] == [{
            "type": "broken-box",
            "error": "validation failed",
            "errors": ["Missing required field: name"],
        }]

    def test_malformed_config_does_not_stop_siblings(self, fetcher, loader, sample_config):
        fetcher.configs["odd.json"] = dict(sample_config, id="odd-box", category=["basic"])
        sources = [
            ShapeSource(type_id="test-box", behavior="rect", config="box.json"),
            ShapeSource(type_id="odd-box", behavior="rect", config="odd.json"),
        ]
        summary = asyncio.run(loader.load_category("custom", sources))
        assert (summary["loaded"], summary["failed"]) == (1, 1)
        assert loader.is_loaded("test-box")
        assert loader.get_state("odd-box") is LoadState.FAILED
        assert loader.get_load_error("odd-box").errors == ["category must be a string"]

    def test_library_summary(self, loader):
        library = {
            "one": [ShapeSource(type_id="test-box", behavior="rect", config="box.json")],
            "two": [ShapeSource(type_id="gone", behavior="rect", config="gone.json")],
        }
        summary = asyncio.run(loader.load_library(library))
        assert summary["totalCategories"] == 2
        assert summary["totalShapes"] == 2
        assert summary["loaded"] == 1
        assert summary["failed"] == 1
        assert summary["categories"]["two"]["errors"][0]["type"] == "gone"

    def test_stats_and_dict(self, loader):
        asyncio.run(loader.load_shape("test-box", "rect", "box.json"))
        asyncio.run(loader.load_shape("broken-box", "rect", "broken.json"))
        assert loader.get_stats() == {"loaded": 1, "failed": 1, "loading": 0, "total": 2}
        data = loader.to_dict()
        assert data["loaded"] == ["test-box"]
        assert data["failed"][0]["type"] == "broken-box"

    def test_clear_forgets_states_only(self, loader):
        asyncio.run(loader.load_shape("test-box", "rect", "box.json"))
        loader.clear()
        assert loader.get_state("test-box") is LoadState.UNREGISTERED
        assert loader.registry.has("test-box")


class TestBuiltinAndDirectory:
    """Tests for loading from the filesystem."""

    def test_builtin_shapes(self):
        loader = ShapeLoader(ShapeRegistry(), LocalFetcher())
        summary = asyncio.run(loader.load_builtin_shapes())
        assert summary["failed"] == 0
        assert summary["loaded"] == summary["totalShapes"] == 38
        assert summary["totalCategories"] == 7

    def test_load_directory(self, tmp_path, sample_config):
        good = dict(sample_config, id="custom-box", behavior="shape_engine.library.basic:DIAMOND")
        (tmp_path / "custom-box.json").write_text(json.dumps(good), encoding="utf-8")
        no_behavior = dict(sample_config, id="lonely")
        (tmp_path / "lonely.json").write_text(json.dumps(no_behavior), encoding="utf-8")
        (tmp_path / "garbage.json").write_text("{not json", encoding="utf-8")

        registry = ShapeRegistry()
        loader = ShapeLoader(registry, LocalFetcher(tmp_path))
        summary = asyncio.run(loader.load_directory(tmp_path))

        assert (summary["total"], summary["loaded"], summary["failed"]) == (3, 1, 2)
        assert sorted(e["type"] for e in summary["errors"]) == ["garbage", "lonely"]
        assert registry.get_definition("custom-box").behavior is basic.DIAMOND
        assert registry.get_types_by_category("basic") == ["custom-box"]
