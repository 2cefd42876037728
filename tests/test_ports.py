"""Tests for the port and connection engine."""

import pytest

from shape_engine import ports
from shape_engine.geometry import CubicTo, LineTo, MoveTo
from shape_engine.models import PortPosition
from shape_engine.shape import Shape


def position(port_id="p", x=0, y=0, role="both", direction="any", shape_id=None, rx=0.5, ry=0.5):
    return PortPosition(
        id=port_id, x=x, y=y, type=role, direction=direction,
        shape_id=shape_id, relative_x=rx, relative_y=ry,
    )


class TestPortPositions:
    """Tests for port placement and lookup."""

    def test_absolute_positions(self, shape):
        shape.set_position(10, 20)
        by_id = {p.id: p for p in ports.get_port_positions(shape)}
        assert (by_id["top"].x, by_id["top"].y) == (60, 20)
        assert (by_id["right"].x, by_id["right"].y) == (110, 70)
        assert by_id["right"].shape_id == "s1"
        assert by_id["right"].relative_x == 1

    def test_disabled_ports(self, shape):
        shape.ports_enabled = False
        assert ports.get_port_positions(shape) == []

    def test_get_port_by_id(self, shape):
        assert ports.get_port_by_id(shape, "left").x == 0
        assert ports.get_port_by_id(shape, "missing") is None

    def test_find_nearest_port(self, shape):
        port = ports.find_nearest_port(shape, (95, 52))
        assert port.id == "right"
        assert port.distance == pytest.approx(5.385, abs=1e-3)

    def test_find_nearest_port_is_strict(self, shape):
        assert ports.find_nearest_port(shape, (120, 50), max_distance=20) is None
        assert ports.find_nearest_port(shape, (119, 50), max_distance=20).id == "right"

    def test_nearest_port_tie_keeps_first_declared(self):
        shape = Shape(width=100, height=100, ports=[
            {"id": "a", "x": 0, "y": 0},
            {"id": "b", "x": 0, "y": 0},
        ])
        assert ports.find_nearest_port(shape, (1, 1)).id == "a"

    def test_is_near_port(self, shape):
        assert ports.is_near_port(shape, (50, 5))
        assert not ports.is_near_port(shape, (50, 50))


class TestRoles:
    """Tests for port role matching."""

    def test_roles(self):
        assert ports.is_input_port({"type": "input"})
        assert ports.is_input_port({"type": "both"})
        assert not ports.is_input_port({"type": "output"})
        assert ports.is_output_port(position(role="output"))
        assert ports.is_output_port({})

    def test_can_connect(self):
        source = position("out", role="output", shape_id="a")
        target = position("in", role="input", shape_id="b")
        assert ports.can_connect(source, target)
        assert not ports.can_connect(target, source)

    def test_cannot_connect_to_itself(self):
        port = position("p", shape_id="a")
        assert not ports.can_connect(port, port)

    def test_same_port_id_on_different_shapes(self):
        assert ports.can_connect(position("right", shape_id="a"), position("right", shape_id="b"))

    def test_same_port_id_without_shape_ids(self):
        assert not ports.can_connect(position("right"), position("right"))

    def test_input_and_output_lists(self, shape):
        assert [p.id for p in ports.get_input_ports(shape)] == ["top", "left"]
        assert [p.id for p in ports.get_output_ports(shape)] == ["right", "bottom"]

    def test_optimal_port(self, shape):
        target = Shape(x=300, y=0, width=100, height=100)
        assert ports.get_optimal_port(shape, target).id == "right"
        assert ports.get_optimal_port(shape, target, role="input").id == "top"

    def test_optimal_port_without_candidates(self):
        assert ports.get_optimal_port(Shape(), Shape()) is None


class TestDirection:
    """Tests for port angles, sides and presets."""

    @pytest.mark.parametrize("direction, angle", [
        ("top", 270), ("right", 0), ("bottom", 90), ("left", 180), ("any", 0), ("sideways", 0),
    ])
    def test_angles(self, direction, angle):
        assert ports.get_port_angle({"direction": direction}) == angle

    @pytest.mark.parametrize("rx, ry, side", [
        (0, 0.3, "left"),
        (1, 0.3, "right"),
        (0.3, 0, "top"),
        (0.3, 1, "bottom"),
        (0.9, 0.6, "right"),
        (0.4, 0.2, "top"),
    ])
    def test_sides(self, rx, ry, side):
        assert ports.get_port_side(position(rx=rx, ry=ry)) == side

    def test_presets(self):
        flowchart = ports.create_standard_ports("flowchart")
        assert [p.id for p in flowchart] == ["top", "bottom"]
        assert len(ports.create_standard_ports("standard-8")) == 8
        assert len(ports.create_standard_ports("unknown")) == 4

    def test_validate_ports(self):
        result = ports.validate_ports([
            {"id": "a", "x": 0, "y": 0},
            {"id": "a", "x": 1.5, "y": 0, "type": "sideways"},
            {"x": 0, "y": 0},
        ])
        assert result.errors == [
            "Duplicate port id: a",
            "Port a x must be between 0 and 1",
            "Port a has invalid type: sideways",
            "Port 2 missing id",
        ]


class TestConnectionPaths:
    """Tests for connection routing."""

    def test_straight(self):
        path = ports.calculate_connection_path(position(x=0, y=0), position(x=100, y=50), "straight")
        assert path == [MoveTo(0, 0), LineTo(100, 50)]

    def test_bezier_control_points_follow_directions(self):
        source = position(x=0, y=0, direction="right")
        target = position(x=100, y=0, direction="left")
        move, curve = ports.calculate_connection_path(source, target, "bezier")
        assert move == MoveTo(0, 0)
        assert isinstance(curve, CubicTo)
        assert curve.c1x == pytest.approx(30)
        assert curve.c1y == pytest.approx(0)
        assert curve.c2x == pytest.approx(70)
        assert curve.c2y == pytest.approx(0, abs=1e-9)
        assert (curve.x, curve.y) == (100, 0)

    def test_unknown_style_routes_as_bezier(self):
        path = ports.calculate_connection_path(position(), position(x=10), "zigzag")
        assert isinstance(path[1], CubicTo)

    def test_orthogonal_right_to_left(self):
        source = position(x=0, y=0, rx=1, ry=0.5)
        target = position(x=100, y=50, rx=0, ry=0.5)
        path = ports.calculate_connection_path(source, target, "orthogonal")
        assert path == [MoveTo(0, 0), LineTo(50, 0), LineTo(50, 50), LineTo(100, 50)]

    def test_orthogonal_bottom_to_top(self):
        source = position(x=0, y=0, rx=0.5, ry=1)
        target = position(x=100, y=100, rx=0.5, ry=0)
        path = ports.calculate_connection_path(source, target, "orthogonal")
        assert path == [MoveTo(0, 0), LineTo(0, 50), LineTo(100, 50), LineTo(100, 100)]

    def test_orthogonal_other_pairings_bend_once(self):
        source = position(x=0, y=0, rx=0.5, ry=0)
        target = position(x=100, y=100, rx=1, ry=0.5)
        path = ports.calculate_connection_path(source, target, "orthogonal")
        assert path == [MoveTo(0, 0), LineTo(0, 100), LineTo(100, 100)]
