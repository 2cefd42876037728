import asyncio
import copy

import pytest

from shape_engine.fetchers import LocalFetcher
from shape_engine.library import basic
from shape_engine.loader import ShapeLoader
from shape_engine.registry import ShapeRegistry
from shape_engine.shape import Shape

SAMPLE_CONFIG = {
    "id": "test-box",
    "name": "Test Box",
    "category": "basic",
    "description": "A box used in tests",
    "tags": ["box", "test"],
    "defaultSize": {"width": 120, "height": 80},
    "defaultStyle": {"fill": "#eeeeee", "stroke": "#333333", "strokeWidth": 2},
    "defaultTextStyle": {"fontSize": 12},
    "defaultData": {"cornerRadius": 4, "nested": {"level": 1}},
    "ports": {"enabled": True, "preset": "standard-4"},
    "handles": {"enabled": True, "preset": "all"},
    "constraints": {"minWidth": 20, "minHeight": 20, "maxWidth": 500, "maxHeight": 500},
    "features": {"resizable": True, "rotatable": True},
}


@pytest.fixture
def sample_config():
    return copy.deepcopy(SAMPLE_CONFIG)


@pytest.fixture
def registry(sample_config):
    """Empty registry with one valid type registered."""
    reg = ShapeRegistry()
    result = reg.register("test-box", basic.RECTANGLE, sample_config)
    assert result.success, result.validation.errors
    return reg


@pytest.fixture(scope="session")
def builtin_registry():
    """Registry with the packaged library loaded. Treat as read-only."""
    reg = ShapeRegistry()
    loader = ShapeLoader(reg, LocalFetcher())
    asyncio.run(loader.load_builtin_shapes())
    return reg


@pytest.fixture
def shape():
    return Shape(
        id="s1",
        type="box",
        x=0,
        y=0,
        width=100,
        height=100,
        ports=[
            {"id": "top", "x": 0.5, "y": 0, "type": "input", "direction": "top"},
            {"id": "right", "x": 1, "y": 0.5, "type": "output", "direction": "right"},
            {"id": "bottom", "x": 0.5, "y": 1, "type": "output", "direction": "bottom"},
            {"id": "left", "x": 0, "y": 0.5, "type": "input", "direction": "left"},
        ],
        handles=["nw", "n", "ne", "e", "se", "s", "sw", "w"],
    )
