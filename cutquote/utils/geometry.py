# geometry.py
# Bounding-box accumulator and the scalar shape measurers shared by the SVG and DXF extractors.
# Every measurer takes the primitive plus the caller's BoundingBox, updates the box and returns
# the cut length the primitive contributes, in source units.

import math
from dataclasses import dataclass, field
from typing import List, Optional


@dataclass(frozen=True)
class Point:
    x: float
    y: float


class BoundingBox:
    """Running min/max over every coordinate observed during one measurement.

    Starts empty; an empty box reports zero width and height.
    """

    def __init__(self):
        self.min_x = None
        self.min_y = None
        self.max_x = None
        self.max_y = None

    @property
    def is_empty(self):
        return self.min_x is None

    def observe(self, point):
        self.observe_bounds(point.x, point.y, point.x, point.y)

    def observe_many(self, points):
        for point in points:
            self.observe(point)

    def observe_bounds(self, min_x, min_y, max_x, max_y):
        if self.is_empty:
            self.min_x, self.min_y, self.max_x, self.max_y = min_x, min_y, max_x, max_y
            return
        self.min_x = min(self.min_x, min_x)
        self.min_y = min(self.min_y, min_y)
        self.max_x = max(self.max_x, max_x)
        self.max_y = max(self.max_y, max_y)

    def width(self):
        return 0.0 if self.is_empty else self.max_x - self.min_x

    def height(self):
        return 0.0 if self.is_empty else self.max_y - self.min_y

    def __repr__(self):
        if self.is_empty:
            return "BoundingBox(empty)"
        return f"BoundingBox(({self.min_x}, {self.min_y}) - ({self.max_x}, {self.max_y}))"


@dataclass(frozen=True)
class Line:
    p1: Point
    p2: Point


@dataclass(frozen=True)
class Circle:
    center: Point
    r: float


@dataclass(frozen=True)
class Arc:
    center: Point
    r: float
    start_angle: float  # degrees
    end_angle: float  # degrees


@dataclass(frozen=True)
class Ellipse:
    center: Point
    rx: float
    ry: float


@dataclass(frozen=True)
class Polyline:
    vertices: List[Point]
    bulges: List[Optional[float]] = field(default_factory=list)
    closed: bool = False


def distance(p1, p2):
    return math.hypot(p2.x - p1.x, p2.y - p1.y)


def bulge_arc_length(start, end, bulge):
    """Arc length of a polyline segment whose curvature is given as a bulge factor.

    The bulge is the tangent of a quarter of the included angle; its sign only
    gives the direction, so the absolute value is used throughout.
    """
    chord = distance(start, end)
    if chord == 0:
        return 0.0
    sagitta = abs(bulge) * chord / 2
    radius = (chord * chord / 4 + sagitta * sagitta) / (2 * sagitta)
    angle = 4 * math.atan(abs(bulge))
    return radius * angle


def ellipse_perimeter(rx, ry):
    """Ramanujan's second approximation of an ellipse perimeter."""
    if rx + ry == 0:
        return 0.0
    h = (rx - ry) ** 2 / (rx + ry) ** 2
    return math.pi * (rx + ry) * (1 + (3 * h) / (10 + math.sqrt(4 - 3 * h)))


def arc_sweep(start_angle, end_angle):
    """Counter-clockwise sweep in radians, normalised into [0, 2*pi)."""
    sweep = math.radians(end_angle) - math.radians(start_angle)
    if sweep < 0:
        sweep += 2 * math.pi
    return sweep


def measure_line(line, bbox):
    bbox.observe(line.p1)
    bbox.observe(line.p2)
    return distance(line.p1, line.p2)


def measure_circle(circle, bbox):
    c, r = circle.center, circle.r
    bbox.observe_bounds(c.x - r, c.y - r, c.x + r, c.y + r)
    return 2 * math.pi * r


def measure_arc(arc, bbox):
    # Box of the whole circle, not of the swept sector.
    c, r = arc.center, arc.r
    bbox.observe_bounds(c.x - r, c.y - r, c.x + r, c.y + r)
    return r * arc_sweep(arc.start_angle, arc.end_angle)


def measure_ellipse(ellipse, bbox):
    c = ellipse.center
    bbox.observe_bounds(c.x - ellipse.rx, c.y - ellipse.ry, c.x + ellipse.rx, c.y + ellipse.ry)
    return ellipse_perimeter(ellipse.rx, ellipse.ry)


def _segment_length(start, end, bulge):
    if bulge:
        return bulge_arc_length(start, end, bulge)
    return distance(start, end)


def measure_polyline(polyline, bbox):
    """Length of a vertex chain; a non-zero bulge on vertex i curves the segment i -> i+1.

    Only the vertices go into the box, so arc sag past the chord is not counted.
    """
    vertices = polyline.vertices
    bulges = polyline.bulges

    def bulge_at(i):
        return bulges[i] if i < len(bulges) else None

    bbox.observe_many(vertices)
    length = 0.0
    for i in range(len(vertices) - 1):
        length += _segment_length(vertices[i], vertices[i + 1], bulge_at(i))
    if polyline.closed and len(vertices) > 1:
        last = len(vertices) - 1
        length += _segment_length(vertices[last], vertices[0], bulge_at(last))
    return length
