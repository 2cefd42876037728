"""Tests for the shape validator."""

import pytest

from shape_engine.library import basic
from shape_engine.shape import Shape
from shape_engine.validation import (
    ShapeValidator,
    ValidationResult,
    validate_library,
    validation_summary,
)


@pytest.fixture
def validator():
    return ShapeValidator()


class TestValidateBehavior:
    """Tests for behavior checks."""

    def test_builtin_behavior_is_valid(self, validator):
        result = validator.validate_behavior(basic.RECTANGLE)
        assert result.valid
        assert result.warnings == []

    def test_missing_behavior(self, validator):
        assert validator.validate_behavior(None).errors == ["Behavior must be provided"]

    def test_missing_operations(self, validator):
        class Partial:
            def path(self, shape):
                return []

        result = validator.validate_behavior(Partial())
        assert "Missing required operation: render" in result.errors
        assert "Missing required operation: path" not in result.errors
        assert "Missing recommended operation: contains_point" in result.warnings


class TestValidateConfig:
    """Tests for configuration document checks."""

    def test_valid_config(self, validator, sample_config):
        result = validator.validate_config(sample_config)
        assert result.valid, result.errors
        assert result.warnings == []

    def test_missing_id_reports_one_error(self, validator, sample_config):
        del sample_config["id"]
        assert validator.validate_config(sample_config).errors == ["Missing required field: id"]

    def test_not_an_object(self, validator):
        assert validator.validate_config([]).errors == ["Config must be an object"]

    def test_id_pattern(self, validator, sample_config):
        sample_config["id"] = "Bad_Id"
        assert validator.validate_config(sample_config).errors == [
            "ID must contain only lowercase letters, numbers, and hyphens"
        ]

    def test_id_with_trailing_newline_is_rejected(self, validator, sample_config):
        sample_config["id"] = "test-box\n"
        assert validator.validate_config(sample_config).errors == [
            "ID must contain only lowercase letters, numbers, and hyphens"
        ]

    def test_non_string_category_is_an_error(self, validator, sample_config):
        sample_config["category"] = ["basic"]
        result = validator.validate_config(sample_config)
        assert result.errors == ["category must be a string"]

    @pytest.mark.parametrize(
        "section, value, expected",
        [
            ("handles", {"enabled": True, "positions": [["nw"], "se"]}, "Invalid handle ID: ['nw']"),
            ("handles", {"enabled": True, "preset": ["all"]}, None),
            ("ports", {"enabled": True, "positions": [{"id": ["a"], "x": 0, "y": 0}]}, "Port 0 id must be a string"),
            ("ports", {"enabled": True, "positions": [{"id": "a", "x": 0, "y": 0, "type": ["input"]}]},
             "Port a has invalid type: ['input']"),
            ("ports", {"enabled": True, "positions": [{"id": "a", "x": 0, "y": 0, "direction": {"to": "n"}}]},
             "Port a has invalid direction: {'to': 'n'}"),
        ],
    )
    def test_unhashable_values_are_reported(self, validator, sample_config, section, value, expected):
        sample_config[section] = value
        result = validator.validate_config(sample_config)
        if expected is None:
            assert result.valid
            assert any("preset" in w for w in result.warnings)
        else:
            assert expected in result.errors

    def test_unknown_category_is_a_warning(self, validator, sample_config):
        sample_config["category"] = "bespoke"
        result = validator.validate_config(sample_config)
        assert result.valid
        assert result.warnings == ["Unknown category: bespoke"]

    def test_missing_size_and_style_are_warnings(self, validator):
        result = validator.validate_config({"id": "x", "name": "X", "category": "basic"})
        assert result.valid
        assert result.warnings == ["Missing defaultSize", "Missing defaultStyle"]

    def test_default_size_must_be_positive(self, validator, sample_config):
        sample_config["defaultSize"] = {"width": 0, "height": "80"}
        assert validator.validate_config(sample_config).errors == [
            "defaultSize.width must be a positive number",
            "defaultSize.height must be a positive number",
        ]

    def test_ports_section(self, validator, sample_config):
        sample_config["ports"] = {
            "enabled": True,
            "preset": "mystery",
            "positions": [{"id": "p", "x": 0, "y": 2}],
        }
        result = validator.validate_config(sample_config)
        assert result.errors == ["Port p y must be between 0 and 1"]
        assert result.warnings == ["Unknown port preset: mystery"]

    def test_handles_section(self, validator, sample_config):
        sample_config["handles"] = {"enabled": True, "positions": ["n", "middle"]}
        assert validator.validate_config(sample_config).errors == ["Invalid handle ID: middle"]

    def test_constraints(self, validator, sample_config):
        sample_config["constraints"] = {
            "minWidth": 300, "maxWidth": 100, "minHeight": -1, "aspectRatio": 0,
        }
        assert validator.validate_config(sample_config).errors == [
            "constraints.minHeight must be a non-negative number",
            "minWidth cannot be greater than maxWidth",
            "aspectRatio must be positive",
        ]

    def test_features_and_tags(self, validator, sample_config):
        sample_config["features"] = {"resizable": "yes"}
        sample_config["tags"] = "box"
        assert validator.validate_config(sample_config).errors == [
            "features.resizable must be a boolean",
            "tags must be an array",
        ]

    def test_properties(self, validator, sample_config):
        sample_config["properties"] = {
            "size": {"type": "number", "min": 10, "max": 1},
            "mode": {"type": "select"},
            "flavor": {"type": "weird"},
            "bare": {},
        }
        result = validator.validate_config(sample_config)
        assert result.errors == [
            "Property 'size' min cannot be greater than max",
            "Property 'mode' with type 'select' must have options array",
            "Property 'bare' missing type",
        ]
        assert result.warnings == ["Property 'flavor' has unknown type: weird"]


class TestValidateRegistration:
    """Tests for combined registration checks."""

    def test_type_mismatch_is_a_warning(self, validator, sample_config):
        result = validator.validate_registration("other", basic.RECTANGLE, sample_config)
        assert result.valid
        assert result.warnings == ["Type 'other' does not match config id 'test-box'"]

    def test_empty_type(self, validator, sample_config):
        result = validator.validate_registration("", basic.RECTANGLE, sample_config)
        assert "Type must be a non-empty string" in result.errors

    def test_errors_from_every_stage(self, validator):
        result = validator.validate_registration("x", object(), {})
        assert "Missing required field: id" in result.errors


class TestValidateInstance:
    """Tests for instance checks."""

    def test_valid_instance(self, validator, shape):
        assert validator.validate_instance(shape).valid

    def test_instance_invariants_are_included(self, validator):
        shape = Shape(width=5000, handles=["n", "n"])
        result = validator.validate_instance(shape)
        assert any("exceeds maximum" in e for e in result.errors)
        assert "Duplicate handle ID: n" in result.errors

    def test_missing_instance(self, validator):
        assert not validator.validate_instance(None).valid


class TestLibraryValidation:
    """Tests for batch validation helpers."""

    def test_validate_library_and_summary(self, sample_config):
        broken = {"name": "Broken", "category": "basic"}
        results = validate_library([sample_config, broken])
        assert set(results) == {"test-box", "#1"}

        summary = validation_summary(results)
        assert summary["total"] == 2
        assert summary["valid"] == 1
        assert summary["invalid"] == ["#1"]
        assert summary["errors"] == 1

    def test_validate_library_with_non_string_id(self, sample_config):
        odd = dict(sample_config, id=["test-box"])
        results = validate_library([odd])
        assert list(results) == ["#0"]
        assert not results["#0"].valid

    def test_result_merge_and_dict(self):
        a = ValidationResult(errors=["e1"])
        a.merge(ValidationResult(warnings=["w1"]))
        assert a.to_dict() == {"valid": False, "errors": ["e1"], "warnings": ["w1"]}
