"""Tests for wire models, helpers and settings."""

import pytest
from pydantic import ValidationError

from shape_engine.config import EngineSettings
from shape_engine.models import (
    Bounds,
    Point,
    ResizeOptions,
    ShapeStyle,
    as_point,
    merge_model,
    wire_keys,
)
from shape_engine.shape import Shape


class TestBounds:
    def test_derived_edges(self):
        data = Bounds(x=10, y=20, width=30, height=40).to_dict()
        assert data["right"] == 40
        assert data["bottom"] == 60
        assert data["centerX"] == 25
        assert data["centerY"] == 40

    def test_frozen(self):
        with pytest.raises(ValidationError):
            Bounds().x = 5


class TestHelpers:
    @pytest.mark.parametrize("value", [Point(1, 2), (1, 2), [1, 2], {"x": 1, "y": 2}, Bounds(x=1, y=2)])
    def test_as_point(self, value):
        assert as_point(value) == Point(1, 2)

    def test_wire_keys(self):
        assert wire_keys(Shape, {"text_style": {}, "x": 1, "other": 2}) == {
            "textStyle": {}, "x": 1, "other": 2,
        }

    def test_merge_model_leaves_base_untouched(self):
        base = ShapeStyle()
        merged = merge_model(base, {"stroke_width": 5})
        assert merged.stroke_width == 5
        assert base.stroke_width == 2

    def test_merge_model_with_model_uses_set_fields_only(self):
        base = ShapeStyle(fill="#111111")
        merged = merge_model(base, ShapeStyle(stroke="#222222"))
        assert merged.fill == "#111111"
        assert merged.stroke == "#222222"

    def test_camel_case_input(self):
        assert ResizeOptions.model_validate({"snapToGrid": True}).snap_to_grid is True
        with pytest.raises(ValidationError):
            ResizeOptions(grid_size=0)


class TestSettings:
    def test_from_env(self):
        settings = EngineSettings.from_env({
            "SHAPE_ENGINE_FAIL_FAST": "yes",
            "SHAPE_ENGINE_PORT": "9000",
            "SHAPE_ENGINE_LIBRARY_PATH": "/srv/shapes",
            "UNRELATED": "1",
        })
        assert settings.fail_fast is True
        assert settings.port == 9000
        assert settings.library_path == "/srv/shapes"
        assert settings.log_level == "INFO"

    def test_invalid_value(self):
        with pytest.raises(ValidationError):
            EngineSettings.from_env({"SHAPE_ENGINE_GRID_SIZE": "0"})
