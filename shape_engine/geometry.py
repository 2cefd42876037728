"""
Geometry generators for shape outlines.

Every generator is a pure function of (origin, extents, kind parameters)
returning a Path: an ordered list of segments (move, line, quadratic,
cubic, arc, close). Outlines are closed; connector kinds (arrows, curves)
return open contours.

Also provides:
- Path flattening (curves and arcs sampled to polylines)
- Path bounds and vertex extraction
- Point-in-polygon (ray casting) and point-in-triangle tests
- Conversion to an SVG path data string
"""

import math
from dataclasses import dataclass
from typing import ClassVar, Iterable, Sequence, Union

from .models import Bounds, Point


# Default generator parameters
DEFAULT_SKEW = 20
DEFAULT_TOP_OFFSET = 20
DEFAULT_WAVE_HEIGHT = 10
DEFAULT_WAVE_COUNT = 3
DEFAULT_TOP_HEIGHT = 10
DEFAULT_HEAD_WIDTH = 20
DEFAULT_HEAD_LENGTH = 15
DEFAULT_HEAD_HALF_WIDTH = 8
DEFAULT_CURVATURE = 0.3
DEFAULT_FLATTEN_STEPS = 16

TRIANGLE_DIRECTIONS = ("up", "down", "left", "right")
ARROW_DIRECTIONS = ("right", "left", "up", "down")


def _fmt(value: float) -> str:
    text = f"{value:.4f}".rstrip("0").rstrip(".")
    return "0" if text in ("-0", "") else text


# --- Path segments ---

@dataclass(frozen=True)
class MoveTo:
    x: float
    y: float
    command: ClassVar[str] = "M"

    def to_svg(self) -> str:
        return f"M{_fmt(self.x)},{_fmt(self.y)}"


@dataclass(frozen=True)
class LineTo:
    x: float
    y: float
    command: ClassVar[str] = "L"

    def to_svg(self) -> str:
        return f"L{_fmt(self.x)},{_fmt(self.y)}"


@dataclass(frozen=True)
class QuadTo:
    cx: float
    cy: float
    x: float
    y: float
    command: ClassVar[str] = "Q"

    def to_svg(self) -> str:
        return f"Q{_fmt(self.cx)},{_fmt(self.cy)} {_fmt(self.x)},{_fmt(self.y)}"


@dataclass(frozen=True)
class CubicTo:
    c1x: float
    c1y: float
    c2x: float
    c2y: float
    x: float
    y: float
    command: ClassVar[str] = "C"

    def to_svg(self) -> str:
        return (
            f"C{_fmt(self.c1x)},{_fmt(self.c1y)} "
            f"{_fmt(self.c2x)},{_fmt(self.c2y)} {_fmt(self.x)},{_fmt(self.y)}"
        )


@dataclass(frozen=True)
class ArcTo:
    """Elliptical arc in SVG endpoint parameterization."""
    rx: float
    ry: float
    rotation: float
    large_arc: bool
    sweep: bool
    x: float
    y: float
    command: ClassVar[str] = "A"

    def to_svg(self) -> str:
        return (
            f"A{_fmt(self.rx)},{_fmt(self.ry)} {_fmt(self.rotation)} "
            f"{int(self.large_arc)},{int(self.sweep)} {_fmt(self.x)},{_fmt(self.y)}"
        )


@dataclass(frozen=True)
class ClosePath:
    command: ClassVar[str] = "Z"

    def to_svg(self) -> str:
        return "Z"


PathSegment = Union[MoveTo, LineTo, QuadTo, CubicTo, ArcTo, ClosePath]
Path = list[PathSegment]


def segment_to_dict(segment: PathSegment) -> dict:
    """Convert a segment to a JSON-friendly dict."""
    data = {"command": segment.command}
    data.update(vars(segment))
    return data


def to_svg_path(path: Sequence[PathSegment]) -> str:
    """Render a path as an SVG path data string."""
    return " ".join(segment.to_svg() for segment in path)


def polyline(points: Sequence[Point], closed: bool = True) -> Path:
    """Straight segments through the given points."""
    if not points:
        return []
    path: Path = [MoveTo(points[0][0], points[0][1])]
    path.extend(LineTo(p[0], p[1]) for p in points[1:])
    if closed:
        path.append(ClosePath())
    return path


# --- Primitive outlines ---

def rectangle(x: float, y: float, width: float, height: float, radius: float = 0) -> Path:
    """Rectangle, optionally with quadratic-rounded corners."""
    if radius <= 0:
        return polyline([
            Point(x, y), Point(x + width, y),
            Point(x + width, y + height), Point(x, y + height),
        ])

    r = min(radius, width / 2, height / 2)
    right = x + width
    bottom = y + height
    return [
        MoveTo(x + r, y),
        LineTo(right - r, y),
        QuadTo(right, y, right, y + r),
        LineTo(right, bottom - r),
        QuadTo(right, bottom, right - r, bottom),
        LineTo(x + r, bottom),
        QuadTo(x, bottom, x, bottom - r),
        LineTo(x, y + r),
        QuadTo(x, y, x + r, y),
        ClosePath(),
    ]


def ellipse(cx: float, cy: float, rx: float, ry: float) -> Path:
    """Ellipse as two half arcs."""
    return [
        MoveTo(cx - rx, cy),
        ArcTo(rx, ry, 0, True, False, cx + rx, cy),
        ArcTo(rx, ry, 0, True, False, cx - rx, cy),
        ClosePath(),
    ]


def circle(cx: float, cy: float, radius: float) -> Path:
    """Circle as two half arcs."""
    return ellipse(cx, cy, radius, radius)


def diamond(x: float, y: float, width: float, height: float) -> Path:
    """Rhombus touching the midpoint of each bounding-box edge."""
    cx = x + width / 2
    cy = y + height / 2
    return polyline([
        Point(cx, y), Point(x + width, cy), Point(cx, y + height), Point(x, cy),
    ])


def triangle_vertices(
    x: float, y: float, width: float, height: float, direction: str = "up"
) -> list[Point]:
    """The three vertices of a bounding-box triangle pointing in `direction`."""
    cx = x + width / 2
    cy = y + height / 2
    right = x + width
    bottom = y + height

    if direction == "down":
        return [Point(x, y), Point(right, y), Point(cx, bottom)]
    if direction == "left":
        return [Point(x, cy), Point(right, y), Point(right, bottom)]
    if direction == "right":
        return [Point(x, y), Point(right, cy), Point(x, bottom)]
    # "up" and anything unrecognized
    return [Point(cx, y), Point(right, bottom), Point(x, bottom)]


def triangle(x: float, y: float, width: float, height: float, direction: str = "up") -> Path:
    """Triangle in one of four orientations (up, down, left, right)."""
    return polyline(triangle_vertices(x, y, width, height, direction))


def polygon_vertices(
    cx: float,
    cy: float,
    radius: float,
    sides: int,
    rotation: float = 0,
    radius_y: float | None = None,
) -> list[Point]:
    """
    Vertices of a regular polygon.

    Args:
        cx, cy: Center
        radius: Circumradius (horizontal radius when radius_y is given)
        sides: Number of sides (at least 3)
        rotation: Angle of the first vertex in degrees (0 = pointing right)
        radius_y: Vertical radius, for polygons stretched to a bounding box
    """
    sides = max(3, int(sides))
    ry = radius if radius_y is None else radius_y
    step = 2 * math.pi / sides
    start = math.radians(rotation)
    return [
        Point(cx + radius * math.cos(start + i * step), cy + ry * math.sin(start + i * step))
        for i in range(sides)
    ]


def regular_polygon(
    cx: float,
    cy: float,
    radius: float,
    sides: int,
    rotation: float = 0,
    radius_y: float | None = None,
) -> Path:
    """Regular n-sided polygon."""
    return polyline(polygon_vertices(cx, cy, radius, sides, rotation, radius_y))


def hexagon(cx: float, cy: float, radius: float) -> Path:
    """Flat-topped hexagon."""
    return regular_polygon(cx, cy, radius, 6, 30)


def star_vertices(
    cx: float,
    cy: float,
    outer_radius: float,
    inner_radius: float,
    points: int,
    rotation: float = 0,
    y_scale: float = 1.0,
) -> list[Point]:
    """Alternating outer/inner vertices of a star."""
    points = max(2, int(points))
    step = math.pi / points
    start = math.radians(rotation)
    vertices = []
    for i in range(points * 2):
        r = outer_radius if i % 2 == 0 else inner_radius
        angle = start + i * step
        vertices.append(Point(cx + r * math.cos(angle), cy + r * y_scale * math.sin(angle)))
    return vertices


def star(
    cx: float,
    cy: float,
    outer_radius: float,
    inner_radius: float,
    points: int,
    rotation: float = 0,
    y_scale: float = 1.0,
) -> Path:
    """Star with `points` tips."""
    return polyline(star_vertices(cx, cy, outer_radius, inner_radius, points, rotation, y_scale))


def parallelogram(x: float, y: float, width: float, height: float, skew: float = DEFAULT_SKEW) -> Path:
    """Parallelogram leaning right by `skew` (flowchart data shape)."""
    return polyline([
        Point(x + skew, y), Point(x + width, y),
        Point(x + width - skew, y + height), Point(x, y + height),
    ])


def trapezoid(
    x: float, y: float, width: float, height: float, top_offset: float = DEFAULT_TOP_OFFSET
) -> Path:
    """Trapezoid with the top edge inset by `top_offset` on both sides."""
    return polyline([
        Point(x + top_offset, y), Point(x + width - top_offset, y),
        Point(x + width, y + height), Point(x, y + height),
    ])


# --- Composite outlines ---

def document(
    x: float,
    y: float,
    width: float,
    height: float,
    wave_height: float = DEFAULT_WAVE_HEIGHT,
    wave_count: int = DEFAULT_WAVE_COUNT,
) -> Path:
    """
    Rectangle with a wavy bottom edge.

    The wave runs right to left around a baseline half a wave above the
    bottom; each half-wave is one quadratic segment whose control point
    sits a full wave height off the baseline, so crests touch y + height.
    """
    wave_count = max(1, int(wave_count))
    wave_width = width / wave_count
    baseline = y + height - wave_height / 2

    path: Path = [
        MoveTo(x, y),
        LineTo(x + width, y),
        LineTo(x + width, baseline),
    ]
    for i in range(wave_count, 0, -1):
        x_start = x + i * wave_width
        x_mid = x + (i - 0.5) * wave_width
        x_end = x + (i - 1) * wave_width
        path.append(QuadTo((x_start + x_mid) / 2, baseline + wave_height, x_mid, baseline))
        path.append(QuadTo((x_mid + x_end) / 2, baseline - wave_height, x_end, baseline))
    path.append(ClosePath())
    return path


def cylinder(
    x: float, y: float, width: float, height: float, top_height: float = DEFAULT_TOP_HEIGHT
) -> Path:
    """Database cylinder: body outline plus the front arc of the top ellipse."""
    rx = width / 2
    ry = top_height
    return [
        MoveTo(x, y + ry),
        ArcTo(rx, ry, 0, False, True, x + width, y + ry),
        LineTo(x + width, y + height - ry),
        ArcTo(rx, ry, 0, False, True, x, y + height - ry),
        LineTo(x, y + ry),
        MoveTo(x, y + ry),
        ArcTo(rx, ry, 0, False, False, x + width, y + ry),
    ]


def cloud(x: float, y: float, width: float, height: float) -> Path:
    """Cloud composed of circular arcs sized from the height."""
    cx = x + width / 2
    cy = y + height / 2
    r1 = height * 0.3
    r2 = height * 0.4
    r3 = height * 0.35
    r4 = height * 0.3
    return [
        MoveTo(x + r1, cy + r1),
        ArcTo(r1, r1, 0, False, True, x + r1, cy - r1),
        ArcTo(r2, r2, 0, False, True, cx, y + r2),
        ArcTo(r2, r2, 0, False, True, x + width - r3, cy - r3),
        ArcTo(r3, r3, 0, False, True, x + width - r4, cy + r4),
        ArcTo(r4, r4, 0, False, True, x + r1, cy + r1),
        ClosePath(),
    ]


# --- Arrows and connectors ---

def arrow(
    x: float,
    y: float,
    width: float,
    height: float,
    head_width: float = DEFAULT_HEAD_WIDTH,
    direction: str = "right",
) -> Path:
    """Block arrow with a body one third of the cross extent."""
    if direction == "left":
        body = height / 3
        cy = y + height / 2
        return polyline([
            Point(x + head_width, cy - body / 2), Point(x + width, cy - body / 2),
            Point(x + width, cy + body / 2), Point(x + head_width, cy + body / 2),
            Point(x + head_width, y + height), Point(x, cy), Point(x + head_width, y),
        ])
    if direction == "up":
        body = width / 3
        cx = x + width / 2
        return polyline([
            Point(cx - body / 2, y + height), Point(cx - body / 2, y + head_width),
            Point(x, y + head_width), Point(cx, y), Point(x + width, y + head_width),
            Point(cx + body / 2, y + head_width), Point(cx + body / 2, y + height),
        ])
    if direction == "down":
        body = width / 3
        cx = x + width / 2
        return polyline([
            Point(cx - body / 2, y), Point(cx + body / 2, y),
            Point(cx + body / 2, y + height - head_width), Point(x + width, y + height - head_width),
            Point(cx, y + height), Point(x, y + height - head_width),
            Point(cx - body / 2, y + height - head_width),
        ])

    body = height / 3
    cy = y + height / 2
    return polyline([
        Point(x, cy - body / 2), Point(x + width - head_width, cy - body / 2),
        Point(x + width - head_width, y), Point(x + width, cy),
        Point(x + width - head_width, y + height),
        Point(x + width - head_width, cy + body / 2), Point(x, cy + body / 2),
    ])


def _arrowhead(tip: Point, back: float, half_width: float, pointing_right: bool) -> Path:
    base_x = tip.x - back if pointing_right else tip.x + back
    return [
        MoveTo(base_x, tip.y - half_width),
        LineTo(tip.x, tip.y),
        LineTo(base_x, tip.y + half_width),
    ]


def straight_arrow(
    x: float,
    y: float,
    width: float,
    height: float,
    head_length: float = DEFAULT_HEAD_LENGTH,
    head_half_width: float = DEFAULT_HEAD_HALF_WIDTH,
) -> Path:
    """Open line arrow pointing right along the vertical center."""
    cy = y + height / 2
    path: Path = [MoveTo(x, cy), LineTo(x + width - head_length, cy)]
    path.extend(_arrowhead(Point(x + width, cy), head_length, head_half_width, True))
    return path


def double_arrow(
    x: float,
    y: float,
    width: float,
    height: float,
    head_length: float = DEFAULT_HEAD_LENGTH,
    head_half_width: float = DEFAULT_HEAD_HALF_WIDTH,
) -> Path:
    """Open line with arrowheads at both ends."""
    cy = y + height / 2
    path: Path = [MoveTo(x + head_length, cy), LineTo(x + width - head_length, cy)]
    path.extend(_arrowhead(Point(x, cy), head_length, head_half_width, False))
    path.extend(_arrowhead(Point(x + width, cy), head_length, head_half_width, True))
    return path


def curved_arrow(
    x: float,
    y: float,
    width: float,
    height: float,
    head_length: float = DEFAULT_HEAD_LENGTH,
    head_half_width: float = DEFAULT_HEAD_HALF_WIDTH,
) -> Path:
    """Quadratic arc from bottom-left to bottom-right with a head at the end."""
    bottom = y + height
    path: Path = [
        MoveTo(x, bottom),
        QuadTo(x + width / 2, y, x + width - head_length, bottom),
    ]
    path.extend(_arrowhead(Point(x + width, bottom), head_length + 5, head_half_width, True))
    return path


def bezier_curve(
    x1: float, y1: float, x2: float, y2: float, curvature: float = DEFAULT_CURVATURE
) -> Path:
    """Horizontal-tangent cubic between two points."""
    offset = math.hypot(x2 - x1, y2 - y1) * curvature
    return [MoveTo(x1, y1), CubicTo(x1 + offset, y1, x2 - offset, y2, x2, y2)]


def smooth_path(points: Sequence[Point], closed: bool = False) -> Path:
    """
    Cubic path through every point, with control points one third of the
    way toward the neighbouring points. Fewer than two points yield [].
    """
    if len(points) < 2:
        return []

    path: Path = [MoveTo(points[0][0], points[0][1])]
    for i in range(1, len(points)):
        prev = points[i - 1]
        curr = points[i]
        nxt = points[i + 1] if i + 1 < len(points) else points[i]
        path.append(CubicTo(
            prev[0] + (curr[0] - prev[0]) / 3,
            prev[1] + (curr[1] - prev[1]) / 3,
            curr[0] - (nxt[0] - curr[0]) / 3,
            curr[1] - (nxt[1] - curr[1]) / 3,
            curr[0],
            curr[1],
        ))
    if closed:
        path.append(ClosePath())
    return path


# --- Path utilities ---

def _arc_points(start: Point, arc: ArcTo, steps: int) -> list[Point]:
    """Sample an SVG endpoint arc (conversion per SVG 1.1 appendix F.6)."""
    x1, y1 = start
    x2, y2 = arc.x, arc.y
    rx, ry = abs(arc.rx), abs(arc.ry)
    if rx == 0 or ry == 0 or (x1 == x2 and y1 == y2):
        return [Point(x2, y2)]

    phi = math.radians(arc.rotation)
    cos_phi, sin_phi = math.cos(phi), math.sin(phi)
    dx, dy = (x1 - x2) / 2, (y1 - y2) / 2
    x1p = cos_phi * dx + sin_phi * dy
    y1p = -sin_phi * dx + cos_phi * dy

    scale = (x1p ** 2) / (rx ** 2) + (y1p ** 2) / (ry ** 2)
    if scale > 1:
        rx *= math.sqrt(scale)
        ry *= math.sqrt(scale)

    num = rx ** 2 * ry ** 2 - rx ** 2 * y1p ** 2 - ry ** 2 * x1p ** 2
    den = rx ** 2 * y1p ** 2 + ry ** 2 * x1p ** 2
    coef = math.sqrt(max(0.0, num / den)) if den else 0.0
    if arc.large_arc == arc.sweep:
        coef = -coef
    cxp = coef * rx * y1p / ry
    cyp = -coef * ry * x1p / rx
    cx = cos_phi * cxp - sin_phi * cyp + (x1 + x2) / 2
    cy = sin_phi * cxp + cos_phi * cyp + (y1 + y2) / 2

    theta1 = math.atan2((y1p - cyp) / ry, (x1p - cxp) / rx)
    theta2 = math.atan2((-y1p - cyp) / ry, (-x1p - cxp) / rx)
    delta = theta2 - theta1
    if arc.sweep and delta < 0:
        delta += 2 * math.pi
    elif not arc.sweep and delta > 0:
        delta -= 2 * math.pi

    points = []
    for i in range(1, steps + 1):
        t = theta1 + delta * i / steps
        px = rx * math.cos(t)
        py = ry * math.sin(t)
        points.append(Point(cos_phi * px - sin_phi * py + cx, sin_phi * px + cos_phi * py + cy))
    points[-1] = Point(x2, y2)
    return points


def flatten_path(path: Iterable[PathSegment], steps: int = DEFAULT_FLATTEN_STEPS) -> list[list[Point]]:
    """
    Approximate a path by polylines, one list of points per subpath.

    Curves and arcs are sampled with `steps` points each.
    """
    subpaths: list[list[Point]] = []
    current: list[Point] = []
    pen = Point(0, 0)
    start = pen

    for segment in path:
        if isinstance(segment, MoveTo):
            if len(current) > 1:
                subpaths.append(current)
            pen = start = Point(segment.x, segment.y)
            current = [pen]
            continue
        if not current:
            current = [pen]
        if isinstance(segment, LineTo):
            current.append(Point(segment.x, segment.y))
        elif isinstance(segment, QuadTo):
            for i in range(1, steps + 1):
                t = i / steps
                u = 1 - t
                current.append(Point(
                    u * u * pen.x + 2 * u * t * segment.cx + t * t * segment.x,
                    u * u * pen.y + 2 * u * t * segment.cy + t * t * segment.y,
                ))
        elif isinstance(segment, CubicTo):
            for i in range(1, steps + 1):
                t = i / steps
                u = 1 - t
                current.append(Point(
                    u ** 3 * pen.x + 3 * u * u * t * segment.c1x
                    + 3 * u * t * t * segment.c2x + t ** 3 * segment.x,
                    u ** 3 * pen.y + 3 * u * u * t * segment.c1y
                    + 3 * u * t * t * segment.c2y + t ** 3 * segment.y,
                ))
        elif isinstance(segment, ArcTo):
            current.extend(_arc_points(pen, segment, steps))
        elif isinstance(segment, ClosePath):
            if current[-1] != start:
                current.append(start)
            pen = start
            continue
        pen = current[-1]

    if len(current) > 1:
        subpaths.append(current)
    return subpaths


def path_vertices(path: Iterable[PathSegment]) -> list[Point]:
    """End points of every drawing segment, in order (control points excluded)."""
    vertices: list[Point] = []
    for segment in path:
        if isinstance(segment, ClosePath):
            continue
        point = Point(segment.x, segment.y)
        if not vertices or vertices[-1] != point:
            vertices.append(point)
    return vertices


def path_bounds(path: Sequence[PathSegment]) -> Bounds:
    """Axis-aligned bounds of the flattened path."""
    points = [p for subpath in flatten_path(path) for p in subpath]
    if not points:
        return Bounds()
    xs = [p.x for p in points]
    ys = [p.y for p in points]
    return Bounds(x=min(xs), y=min(ys), width=max(xs) - min(xs), height=max(ys) - min(ys))


def point_in_polygon(point: Point, vertices: Sequence[Point]) -> bool:
    """Even-odd ray casting test."""
    if len(vertices) < 3:
        return False
    px, py = point
    inside = False
    j = len(vertices) - 1
    for i in range(len(vertices)):
        xi, yi = vertices[i]
        xj, yj = vertices[j]
        if (yi > py) != (yj > py):
            x_cross = (xj - xi) * (py - yi) / (yj - yi) + xi
            if px < x_cross:
                inside = not inside
        j = i
    return inside


def point_in_triangle(point: Point, a: Point, b: Point, c: Point) -> bool:
    """Sign test; points on an edge count as inside."""
    def sign(p1: Point, p2: Point, p3: Point) -> float:
        return (p1[0] - p3[0]) * (p2[1] - p3[1]) - (p2[0] - p3[0]) * (p1[1] - p3[1])

    d1 = sign(point, a, b)
    d2 = sign(point, b, c)
    d3 = sign(point, c, a)
    has_neg = d1 < 0 or d2 < 0 or d3 < 0
    has_pos = d1 > 0 or d2 > 0 or d3 > 0
    return not (has_neg and has_pos)


def distance_to_segment(point: Point, a: Point, b: Point) -> float:
    """Euclidean distance from a point to the segment a-b."""
    px, py = point
    ax, ay = a
    bx, by = b
    dx, dy = bx - ax, by - ay
    length_sq = dx * dx + dy * dy
    if length_sq == 0:
        return math.hypot(px - ax, py - ay)
    t = max(0.0, min(1.0, ((px - ax) * dx + (py - ay) * dy) / length_sq))
    return math.hypot(px - (ax + t * dx), py - (ay + t * dy))


def distance_to_path(point: Point, path: Sequence[PathSegment]) -> float:
    """Smallest distance from a point to any flattened subpath of `path`."""
    best = math.inf
    for subpath in flatten_path(path):
        for a, b in zip(subpath, subpath[1:]):
            best = min(best, distance_to_segment(point, a, b))
    return best
