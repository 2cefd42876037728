"""
Fetchers used by the shape loader.

Behaviors are always Python objects resolved by import from a
"module:attribute" reference. Configuration documents come from the local
filesystem (LocalFetcher) or over HTTP (HttpFetcher).
"""

import asyncio
import importlib
import json
from pathlib import Path
from typing import Any, Optional

import httpx

from .library import CONFIG_DIR

DEFAULT_TIMEOUT = 30.0


def import_behavior(ref: str) -> Any:
    """
    Resolve a "package.module:ATTRIBUTE" reference.

    The object is returned as-is; the validator decides whether it is a
    usable behavior.

    Raises:
        ValueError: If the reference is malformed
        ImportError: If the module cannot be imported
        AttributeError: If the module has no such attribute
    """
    module_name, sep, attribute = ref.partition(":")
    if not sep or not module_name or not attribute:
        raise ValueError(f"Behavior reference must look like 'module:attribute', got '{ref}'")

    module = importlib.import_module(module_name)
    try:
        return getattr(module, attribute)
    except AttributeError:
        raise AttributeError(f"Module '{module_name}' has no behavior '{attribute}'") from None


class LocalFetcher:
    """Reads configuration documents from disk, relative to base_dir."""

    def __init__(self, base_dir: Optional[str | Path] = None):
        self._base_dir = Path(base_dir) if base_dir is not None else CONFIG_DIR

    def resolve(self, ref: str) -> Path:
        path = Path(ref)
        return path if path.is_absolute() else self._base_dir / path

    async def fetch_behavior(self, ref: str) -> Any:
        return await asyncio.to_thread(import_behavior, ref)

    async def fetch_config(self, ref: str) -> Any:
        path = self.resolve(ref)
        text = await asyncio.to_thread(path.read_text, encoding="utf-8")
        return json.loads(text)


class HttpFetcher:
    """
    Fetches configuration documents over HTTP.

    Relative references are joined to base_url. Pass a client to share a
    connection pool (or to use a mock transport in tests); otherwise the
    fetcher owns one and closes it in aclose().
    """

    def __init__(
        self,
        base_url: str,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self._base_url = base_url.rstrip("/") + "/"
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    def resolve(self, ref: str) -> str:
        if ref.startswith(("http://", "https://")):
            return ref
        return self._base_url + ref.lstrip("/")

    async def fetch_behavior(self, ref: str) -> Any:
        return import_behavior(ref)

    async def fetch_config(self, ref: str) -> Any:
        response = await self._client.get(self.resolve(ref))
        response.raise_for_status()
        return response.json()

    async def aclose(self):
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "HttpFetcher":
        return self

    async def __aexit__(self, *exc_info):
        await self.aclose()
