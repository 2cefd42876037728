"""Tests for the local and HTTP fetchers."""

import asyncio
import json

import httpx
import pytest

from shape_engine.fetchers import HttpFetcher, LocalFetcher, import_behavior
from shape_engine.library import CONFIG_DIR, basic
from shape_engine.loader import ShapeLoader
from shape_engine.registry import ShapeRegistry


class TestImportBehavior:
    """Tests for module:attribute references."""

    def test_import(self):
        assert import_behavior("shape_engine.library.basic:STAR") is basic.STAR

    @pytest.mark.parametrize("ref", ["shape_engine.library.basic", ":STAR", "shape_engine:"])
    def test_malformed(self, ref):
        with pytest.raises(ValueError):
            import_behavior(ref)

    def test_missing_attribute(self):
        with pytest.raises(AttributeError):
            import_behavior("shape_engine.library.basic:NOPE")

    def test_missing_module(self):
        with pytest.raises(ImportError):
            import_behavior("shape_engine.nowhere:X")


class TestLocalFetcher:
    """Tests for filesystem configs."""

    def test_relative_refs_use_base_dir(self):
        assert LocalFetcher().resolve("basic-star.json") == CONFIG_DIR / "basic-star.json"

    def test_fetch_config(self, tmp_path):
        (tmp_path / "a.json").write_text(json.dumps({"id": "a"}), encoding="utf-8")
        fetcher = LocalFetcher(tmp_path)
        assert asyncio.run(fetcher.fetch_config("a.json")) == {"id": "a"}

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            asyncio.run(LocalFetcher(tmp_path).fetch_config("missing.json"))


class TestHttpFetcher:
    """Tests for HTTP configs, using a mock transport."""

    @staticmethod
    def make_client(routes):
        def handler(request: httpx.Request) -> httpx.Response:
            body = routes.get(request.url.path)
            if body is None:
                return httpx.Response(404, json={"detail": "not found"})
            return httpx.Response(200, json=body)

        return httpx.AsyncClient(transport=httpx.MockTransport(handler))

    def test_resolve(self):
        fetcher = HttpFetcher("https://shapes.example/lib/", client=self.make_client({}))
        assert fetcher.resolve("a.json") == "https://shapes.example/lib/a.json"
        assert fetcher.resolve("/a.json") == "https://shapes.example/lib/a.json"
        assert fetcher.resolve("http://other/b.json") == "http://other/b.json"

    def test_fetch_config(self, sample_config):
        client = self.make_client({"/lib/box.json": sample_config})

        async def run():
            async with HttpFetcher("https://shapes.example/lib", client=client) as fetcher:
                return await fetcher.fetch_config("box.json")

        assert asyncio.run(run()) == sample_config

    def test_http_error_raises(self):
        client = self.make_client({})

        async def run():
            await HttpFetcher("https://shapes.example", client=client).fetch_config("x.json")

        with pytest.raises(httpx.HTTPStatusError):
            asyncio.run(run())

    def test_shared_client_is_not_closed(self):
        client = self.make_client({})

        async def run():
            async with HttpFetcher("https://shapes.example", client=client):
                pass
            return client.is_closed

        assert asyncio.run(run()) is False

    def test_loader_over_http(self, sample_config):
        client = self.make_client({"/lib/box.json": sample_config})
        registry = ShapeRegistry()

        async def run():
            async with HttpFetcher("https://shapes.example/lib", client=client) as fetcher:
                loader = ShapeLoader(registry, fetcher)
                ok = await loader.load_shape("test-box", "shape_engine.library.basic:RECTANGLE", "box.json")
                missing = await loader.load_shape("gone", "shape_engine.library.basic:RECTANGLE", "gone.json")
                return ok, missing, loader

        ok, missing, loader = asyncio.run(run())
        assert ok and not missing
        assert registry.create("test-box").behavior is basic.RECTANGLE
        assert isinstance(loader.get_load_error("gone").cause, httpx.HTTPStatusError)
