# dxf_parser.py
# Parses DXF text with ezdxf and turns modelspace entities into primitives for cut-length measurement.
# Drawing units are taken as inches; $INSUNITS is logged but never applied.
# Block references (INSERT), hatches, text and dimensions are not cut geometry here and are ignored.

import io
import logging
import math

import ezdxf
from ezdxf.lldxf.const import DXFError
from ezdxf.lldxf.types import tag_type

from .errors import InvalidFormat
from .geometry import Arc, Circle, Ellipse, Line, Point, Polyline
from .measurers import accumulate

INSUNITS_NAMES = {0: "unitless", 1: "inches", 2: "feet", 4: "millimeters", 5: "centimeters", 6: "meters"}

# Entities that belong to the POLYLINE or INSERT written just before them.
FOLLOWER_ENTITIES = {"VERTEX", "SEQEND", "ATTRIB"}


def has_entities_section(content):
    """True when the raw DXF text declares an ENTITIES section."""
    lines = [line.strip() for line in content.splitlines()]
    for i in range(len(lines) - 3):
        if lines[i] == "0" and lines[i + 1] == "SECTION" and lines[i + 2] == "2" and lines[i + 3] == "ENTITIES":
            return True
    return False


def _readable_tag(code, value):
    """True when ezdxf can convert the tag value to the type of its group code."""
    caster = tag_type(code)
    if caster is str:
        return True
    try:
        number = float(value)
        if caster is int:
            int(number)  # ezdxf accepts ints written as floats
    except (ValueError, OverflowError):
        return False
    return True


def _split_tags(content):
    """Group DXF text into chunks of (code line, value line) pairs, one chunk per 0 tag.

    Returns None when a group code is not an integer; ezdxf reports that itself.
    """
    lines = content.splitlines()
    chunks = []
    for i in range(0, len(lines) - 1, 2):
        try:
            code = int(lines[i])
        except ValueError:
            return None
        if code == 0 or not chunks:
            chunks.append([])
        chunks[-1].append((code, lines[i], lines[i + 1]))
    return chunks


def drop_unreadable_entities(content):
    """Remove ENTITIES-section entities holding numeric values ezdxf cannot convert.

    ezdxf rejects the whole document on one such tag, so the entity is dropped
    (together with its VERTEX/SEQEND followers) and logged instead. Text with no
    such entity is returned unchanged.
    """
    chunks = _split_tags(content)
    if chunks is None:
        return content
    kept = []
    group = []
    in_entities = False
    dropped = 0

    def flush():
        nonlocal dropped
        if not group:
            return
        bad = next(((code, value) for chunk in group for code, _, value in chunk
                    if not _readable_tag(code, value)), None)
        if bad is None:
            kept.extend(group)
        else:
            head = group[0]
            handle = next((value.strip() for code, _, value in head if code == 5), "?")
            logging.warning(f"Skipping unreadable {head[0][2].strip()} (handle {handle}): "
                            f"group code {bad[0]} has value {bad[1]!r}")
            dropped += 1
        group.clear()

    for chunk in chunks:
        name = chunk[0][2].strip() if chunk[0][0] == 0 else None
        if name == "SECTION":
            in_entities = len(chunk) > 1 and chunk[1][2].strip() == "ENTITIES"
        elif name == "ENDSEC":
            flush()
            in_entities = False
        elif in_entities and name is not None:
            if not (group and name in FOLLOWER_ENTITIES):
                flush()
            group.append(chunk)
            continue
        kept.append(chunk)
    flush()

    if not dropped:
        return content
    logging.info(f"Dropped {dropped} unreadable entities before parsing")
    return "\n".join(line for chunk in kept for _, code_line, value in chunk for line in (code_line, value)) + "\n"


def _point(vec):
    x, y = float(vec[0]), float(vec[1])
    if not (math.isfinite(x) and math.isfinite(y)):
        raise ValueError(f"non-finite coordinate ({x}, {y})")
    return Point(x, y)


def _radius(value):
    radius = float(value)
    if not math.isfinite(radius) or radius <= 0:
        raise ValueError(f"invalid radius {value}")
    return radius


def _line(entity):
    return Line(_point(entity.dxf.start), _point(entity.dxf.end))


def _circle(entity):
    return Circle(_point(entity.dxf.center), _radius(entity.dxf.radius))


def _arc(entity):
    return Arc(_point(entity.dxf.center), _radius(entity.dxf.radius),
               float(entity.dxf.start_angle), float(entity.dxf.end_angle))


def _lwpolyline(entity):
    points = entity.get_points("xyb")
    if not points:
        raise ValueError("no vertices")
    vertices = [_point(p) for p in points]
    bulges = [float(p[2]) for p in points]
    return Polyline(vertices, bulges, closed=bool(entity.closed))


def _polyline(entity):
    if entity.is_poly_face_mesh or entity.is_polygon_mesh:
        logging.info(f"Skipping POLYLINE mesh (handle {entity.dxf.handle}): not a cut path")
        return None
    vertices = []
    bulges = []
    for v in entity.vertices:
        vertices.append(_point(v.dxf.location))
        bulges.append(float(v.dxf.get("bulge", 0.0)))
    if not vertices:
        raise ValueError("no vertices")
    return Polyline(vertices, bulges, closed=bool(entity.is_closed))


def _spline(entity):
    # Control polygon chord sum, not a true spline rectification.
    control_points = [_point(p) for p in entity.control_points]
    if len(control_points) < 2:
        raise ValueError(f"needs at least 2 control points, has {len(control_points)}")
    return Polyline(control_points, closed=False)


def _ellipse(entity):
    major_axis = entity.dxf.major_axis
    rx = math.hypot(float(major_axis[0]), float(major_axis[1]))
    ratio = float(entity.dxf.ratio) or 1.0
    if not math.isfinite(rx) or not math.isfinite(ratio):
        raise ValueError("non-finite axis")
    return Ellipse(_point(entity.dxf.center), rx, abs(rx * ratio))


ENTITY_BUILDERS = {
    "LINE": _line,
    "CIRCLE": _circle,
    "ARC": _arc,
    "LWPOLYLINE": _lwpolyline,
    "POLYLINE": _polyline,
    "SPLINE": _spline,
    "ELLIPSE": _ellipse,
}


def iter_primitives(msp):
    """Yield (label, primitive) for each supported modelspace entity."""
    skipped = {}
    for entity in msp:
        entity_type = entity.dxftype()
        builder = ENTITY_BUILDERS.get(entity_type)
        if builder is None:
            skipped[entity_type] = skipped.get(entity_type, 0) + 1
            continue
        label = f"{entity_type} (handle {entity.dxf.get('handle', '?')}, layer {entity.dxf.get('layer', '0')})"
        try:
            primitive = builder(entity)
        except (ValueError, TypeError, AttributeError, DXFError) as e:
            logging.warning(f"Skipping malformed {label}: {e}")
            continue
        if primitive is not None:
            yield label, primitive
    if skipped:
        logging.info(f"Ignored unsupported entities: {skipped}")


def measure_dxf(content):
    """Measure DXF text; returns RawTotals in drawing units (assumed inches)."""
    if not has_entities_section(content):
        logging.error("DXF has no ENTITIES section")
        raise InvalidFormat('dxf', "no ENTITIES section found")
    try:
        doc = ezdxf.read(io.StringIO(drop_unreadable_entities(content)))
    except (DXFError, ValueError) as e:
        logging.error(f"DXF parse failed: {e}")
        raise InvalidFormat('dxf', str(e)) from e
    units = doc.header.get('$INSUNITS', 0)
    logging.info(f"DXF version {doc.dxfversion}, $INSUNITS={units} ({INSUNITS_NAMES.get(units, 'other')}), measuring as inches")
    return accumulate(iter_primitives(doc.modelspace()))
