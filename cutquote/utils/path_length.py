# path_length.py
# Rectified length and tight bounding box of compound curve paths (SVG path data).
# Curves are flattened by sampling each segment at a fixed resolution; the sampled
# polylines are measured with shapely so length and bounds come from the same points.

import math
import re
from dataclasses import dataclass
from typing import List

from shapely.geometry import LineString

from .geometry import Point

CURVE_SAMPLES = 64  # chords per curved segment


class PathDataError(ValueError):
    """Raised when path data cannot be tokenised or a command is missing arguments."""


@dataclass(frozen=True)
class MoveTo:
    point: Point


@dataclass(frozen=True)
class LineTo:
    end: Point


@dataclass(frozen=True)
class CubicTo:
    c1: Point
    c2: Point
    end: Point


@dataclass(frozen=True)
class QuadraticTo:
    control: Point
    end: Point


@dataclass(frozen=True)
class ArcTo:
    rx: float
    ry: float
    rotation: float  # degrees
    large_arc: bool
    sweep: bool
    end: Point


@dataclass(frozen=True)
class Close:
    pass


@dataclass(frozen=True)
class PathCurve:
    commands: List


_NUMBER_RE = re.compile(r'[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?')
_SEPARATOR_RE = re.compile(r'[\s,]*')
_COMMANDS = 'MmLlHhVvCcSsQqTtAaZz'


class _PathScanner:
    """Reads commands, numbers and arc flags from a path data string."""

    def __init__(self, data):
        self.data = data
        self.pos = 0

    def skip_separators(self):
        self.pos = _SEPARATOR_RE.match(self.data, self.pos).end()

    def at_end(self):
        self.skip_separators()
        return self.pos >= len(self.data)

    def read_command(self):
        self.skip_separators()
        if self.pos < len(self.data) and self.data[self.pos] in _COMMANDS:
            letter = self.data[self.pos]
            self.pos += 1
            return letter
        return None

    def read_number(self):
        self.skip_separators()
        match = _NUMBER_RE.match(self.data, self.pos)
        if not match:
            raise PathDataError(f"Expected a number at offset {self.pos} in path data")
        self.pos = match.end()
        value = float(match.group())
        if not math.isfinite(value):
            raise PathDataError(f"Number out of range in path data: {match.group()}")
        return value

    def read_flag(self):
        # Arc flags may be packed without separators, e.g. "a10 10 0 1150 50".
        self.skip_separators()
        if self.pos < len(self.data) and self.data[self.pos] in '01':
            flag = self.data[self.pos] == '1'
            self.pos += 1
            return flag
        raise PathDataError(f"Expected an arc flag at offset {self.pos} in path data")

    def read_point(self, relative_to=None):
        x = self.read_number()
        y = self.read_number()
        if relative_to is not None:
            return Point(relative_to.x + x, relative_to.y + y)
        return Point(x, y)


def _reflect(control, about):
    return Point(2 * about.x - control.x, 2 * about.y - control.y)


def parse_path_data(data):
    """Parse SVG path data into absolute PathCommands.

    Relative, shorthand (H/V/S/T) and implicitly repeated commands are all
    resolved here, so the estimator only ever sees absolute coordinates.
    """
    scanner = _PathScanner(data)
    commands = []
    current = Point(0.0, 0.0)
    subpath_start = current
    last_cubic_control = None
    last_quad_control = None
    repeat = None

    while not scanner.at_end():
        letter = scanner.read_command()
        if letter is None:
            if repeat is None:
                raise PathDataError(f"Unexpected number without a command in path data: {data[:40]!r}")
            letter = repeat
        cmd = letter.upper()
        base = current if letter.islower() else None
        cubic_control = None
        quad_control = None

        if cmd == 'M':
            current = scanner.read_point(base)
            subpath_start = current
            commands.append(MoveTo(current))
            repeat = 'l' if letter.islower() else 'L'
        elif cmd == 'Z':
            commands.append(Close())
            current = subpath_start
            repeat = None
        elif cmd == 'L':
            current = scanner.read_point(base)
            commands.append(LineTo(current))
            repeat = letter
        elif cmd == 'H':
            x = scanner.read_number()
            current = Point(current.x + x if base is not None else x, current.y)
            commands.append(LineTo(current))
            repeat = letter
        elif cmd == 'V':
            y = scanner.read_number()
            current = Point(current.x, current.y + y if base is not None else y)
            commands.append(LineTo(current))
            repeat = letter
        elif cmd == 'C':
            c1 = scanner.read_point(base)
            c2 = scanner.read_point(base)
            end = scanner.read_point(base)
            commands.append(CubicTo(c1, c2, end))
            cubic_control, current = c2, end
            repeat = letter
        elif cmd == 'S':
            c1 = _reflect(last_cubic_control, current) if last_cubic_control is not None else current
            c2 = scanner.read_point(base)
            end = scanner.read_point(base)
            commands.append(CubicTo(c1, c2, end))
            cubic_control, current = c2, end
            repeat = letter
        elif cmd == 'Q':
            control = scanner.read_point(base)
            end = scanner.read_point(base)
            commands.append(QuadraticTo(control, end))
            quad_control, current = control, end
            repeat = letter
        elif cmd == 'T':
            control = _reflect(last_quad_control, current) if last_quad_control is not None else current
            end = scanner.read_point(base)
            commands.append(QuadraticTo(control, end))
            quad_control, current = control, end
            repeat = letter
        elif cmd == 'A':
            rx = scanner.read_number()
            ry = scanner.read_number()
            rotation = scanner.read_number()
            large_arc = scanner.read_flag()
            sweep = scanner.read_flag()
            end = scanner.read_point(base)
            commands.append(ArcTo(rx, ry, rotation, large_arc, sweep, end))
            current = end
            repeat = letter

        last_cubic_control = cubic_control
        last_quad_control = quad_control

    return commands


def _cubic_points(start, command):
    points = []
    for i in range(1, CURVE_SAMPLES + 1):
        t = i / CURVE_SAMPLES
        t1 = 1 - t
        x = t1 ** 3 * start.x + 3 * t1 ** 2 * t * command.c1.x + 3 * t1 * t ** 2 * command.c2.x + t ** 3 * command.end.x
        y = t1 ** 3 * start.y + 3 * t1 ** 2 * t * command.c1.y + 3 * t1 * t ** 2 * command.c2.y + t ** 3 * command.end.y
        points.append(Point(x, y))
    return points


def _quadratic_points(start, command):
    points = []
    for i in range(1, CURVE_SAMPLES + 1):
        t = i / CURVE_SAMPLES
        t1 = 1 - t
        x = t1 ** 2 * start.x + 2 * t1 * t * command.control.x + t ** 2 * command.end.x
        y = t1 ** 2 * start.y + 2 * t1 * t * command.control.y + t ** 2 * command.end.y
        points.append(Point(x, y))
    return points


def _vector_angle(ux, uy, vx, vy):
    norm = math.hypot(ux, uy) * math.hypot(vx, vy)
    if norm == 0:
        return 0.0
    cos_angle = max(-1.0, min(1.0, (ux * vx + uy * vy) / norm))
    angle = math.acos(cos_angle)
    return -angle if ux * vy - uy * vx < 0 else angle


def _arc_points(start, command):
    """Sample an endpoint-parameterised elliptical arc (SVG implementation notes, F.6.5)."""
    end = command.end
    if start == end:
        return []
    rx, ry = abs(command.rx), abs(command.ry)
    if rx == 0 or ry == 0:
        return [end]

    phi = math.radians(command.rotation % 360)
    cos_phi, sin_phi = math.cos(phi), math.sin(phi)
    dx2 = (start.x - end.x) / 2
    dy2 = (start.y - end.y) / 2
    x1p = cos_phi * dx2 + sin_phi * dy2
    y1p = -sin_phi * dx2 + cos_phi * dy2

    lam = x1p ** 2 / rx ** 2 + y1p ** 2 / ry ** 2
    if lam > 1:
        scale = math.sqrt(lam)
        rx *= scale
        ry *= scale

    num = max(0.0, rx ** 2 * ry ** 2 - rx ** 2 * y1p ** 2 - ry ** 2 * x1p ** 2)
    den = rx ** 2 * y1p ** 2 + ry ** 2 * x1p ** 2
    coef = math.sqrt(num / den) if den > 0 else 0.0
    if command.large_arc == command.sweep:
        coef = -coef
    cxp = coef * rx * y1p / ry
    cyp = -coef * ry * x1p / rx
    cx = cos_phi * cxp - sin_phi * cyp + (start.x + end.x) / 2
    cy = sin_phi * cxp + cos_phi * cyp + (start.y + end.y) / 2

    theta1 = _vector_angle(1, 0, (x1p - cxp) / rx, (y1p - cyp) / ry)
    dtheta = _vector_angle((x1p - cxp) / rx, (y1p - cyp) / ry, (-x1p - cxp) / rx, (-y1p - cyp) / ry)
    if not command.sweep and dtheta > 0:
        dtheta -= 2 * math.pi
    elif command.sweep and dtheta < 0:
        dtheta += 2 * math.pi

    points = []
    for i in range(1, CURVE_SAMPLES):
        angle = theta1 + dtheta * i / CURVE_SAMPLES
        x = cx + rx * math.cos(angle) * cos_phi - ry * math.sin(angle) * sin_phi
        y = cy + rx * math.cos(angle) * sin_phi + ry * math.sin(angle) * cos_phi
        points.append(Point(x, y))
    # Land exactly on the declared endpoint.
    points.append(end)
    return points


_SAMPLERS = {
    LineTo: lambda start, command: [command.end],
    CubicTo: _cubic_points,
    QuadraticTo: _quadratic_points,
    ArcTo: _arc_points,
}


def flatten_path(commands):
    """Turn a command list into sub-paths of sampled points.

    Sub-paths with fewer than two points (a bare move-to) are dropped.
    """
    subpaths = []
    points = []
    current = None
    subpath_start = None

    def finish():
        if len(points) > 1:
            subpaths.append(points)

    for command in commands:
        if isinstance(command, MoveTo):
            finish()
            current = subpath_start = command.point
            points = [current]
        elif isinstance(command, Close):
            if current is not None and current != subpath_start:
                points.append(subpath_start)
            finish()
            current = subpath_start
            points = [current] if current is not None else []
        else:
            if current is None:
                current = subpath_start = Point(0.0, 0.0)
                points = [current]
            points.extend(_SAMPLERS[type(command)](current, command))
            current = command.end
    finish()
    return subpaths


def measure_path(curve, bbox):
    """Rectified length of a PathCurve; the box gets the extrema of every sampled point."""
    length = 0.0
    for points in flatten_path(curve.commands):
        line = LineString([(p.x, p.y) for p in points])
        length += line.length
        bbox.observe_bounds(*line.bounds)
    return length
