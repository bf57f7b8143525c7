# svg_parser.py
# Walks an SVG document and turns each cuttable element into a primitive for measurement.
# Coordinates stay in SVG user units (CSS pixels); the dispatcher converts at 96 per inch.
# Transforms, viewBox scaling and stroke widths are not applied.

import logging
import math
import re
import xml.etree.ElementTree as ET

from .errors import InvalidFormat
from .geometry import Circle, Ellipse, Line, Point, Polyline
from .measurers import accumulate
from .path_length import PathCurve, parse_path_data

SVG_DPI = 96

_LEADING_NUMBER_RE = re.compile(r'\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)')
_POINTS_SPLIT_RE = re.compile(r'[\s,]+')


def _strip_ns(tag):
    if not isinstance(tag, str):
        return None
    if '}' in tag:
        return tag.split('}', 1)[1]
    return tag


def parse_length(value):
    """Read the leading number of an attribute value, so "10px" -> 10.0."""
    match = _LEADING_NUMBER_RE.match(value)
    if not match:
        raise ValueError(f"not a number: {value!r}")
    number = float(match.group(1))
    if not math.isfinite(number):
        raise ValueError(f"number out of range: {value!r}")
    return number


def _position(elem, name):
    value = elem.get(name)
    return 0.0 if value is None else parse_length(value)


def _size(elem, name):
    value = elem.get(name)
    if value is None:
        raise ValueError(f"missing required attribute '{name}'")
    size = parse_length(value)
    if size < 0:
        raise ValueError(f"negative '{name}': {value!r}")
    return size


def parse_points(value):
    """Pair up a points attribute into Points, skipping pairs that are not numbers."""
    coords = [c for c in _POINTS_SPLIT_RE.split(value.strip()) if c]
    points = []
    for i in range(0, len(coords) - 1, 2):
        try:
            x, y = float(coords[i]), float(coords[i + 1])
        except ValueError:
            x = y = math.nan
        if math.isfinite(x) and math.isfinite(y):
            points.append(Point(x, y))
        else:
            logging.debug(f"Ignoring invalid point pair {coords[i]!r},{coords[i + 1]!r}")
    return points


def _path(elem):
    d = elem.get('d')
    if not d or not d.strip():
        return None
    return PathCurve(parse_path_data(d))


def _rect(elem):
    x, y = _position(elem, 'x'), _position(elem, 'y')
    w, h = _size(elem, 'width'), _size(elem, 'height')
    corners = [Point(x, y), Point(x + w, y), Point(x + w, y + h), Point(x, y + h)]
    return Polyline(corners, closed=True)


def _circle(elem):
    return Circle(Point(_position(elem, 'cx'), _position(elem, 'cy')), _size(elem, 'r'))


def _ellipse(elem):
    center = Point(_position(elem, 'cx'), _position(elem, 'cy'))
    return Ellipse(center, _size(elem, 'rx'), _size(elem, 'ry'))


def _line(elem):
    return Line(Point(_position(elem, 'x1'), _position(elem, 'y1')),
                Point(_position(elem, 'x2'), _position(elem, 'y2')))


def _polyline(elem):
    return Polyline(parse_points(elem.get('points', '')), closed=False)


def _polygon(elem):
    return Polyline(parse_points(elem.get('points', '')), closed=True)


SHAPE_BUILDERS = {
    'path': _path,
    'rect': _rect,
    'circle': _circle,
    'ellipse': _ellipse,
    'line': _line,
    'polyline': _polyline,
    'polygon': _polygon,
}


def iter_primitives(root):
    """Yield (label, primitive) for every supported element under root, document order."""
    for index, elem in enumerate(root.iter()):
        tag = _strip_ns(elem.tag)
        builder = SHAPE_BUILDERS.get(tag)
        if builder is None:
            continue
        label = f"<{tag}> #{index}" + (f" id={elem.get('id')}" if elem.get('id') else "")
        try:
            primitive = builder(elem)
        except ValueError as e:  # PathDataError included
            logging.warning(f"Skipping malformed {label}: {e}")
            continue
        if primitive is not None:
            yield label, primitive


def measure_svg(content):
    """Measure an SVG document given as text; returns RawTotals in pixels."""
    try:
        root = ET.fromstring(content)
    except ET.ParseError as e:
        logging.error(f"SVG parse failed: {e}")
        raise InvalidFormat('svg', str(e)) from e
    logging.info(f"Parsing SVG document with root <{_strip_ns(root.tag)}>")
    return accumulate(iter_primitives(root))
