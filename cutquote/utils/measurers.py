# measurers.py
# Dispatch from a primitive to its shape measurer, and the per-call accumulation used by both extractors.

import logging
import math
from dataclasses import dataclass

from .geometry import (Arc, BoundingBox, Circle, Ellipse, Line, Polyline, measure_arc, measure_circle,
                       measure_ellipse, measure_line, measure_polyline)
from .path_length import PathCurve, measure_path

MEASURERS = {
    Line: measure_line,
    Circle: measure_circle,
    Arc: measure_arc,
    Ellipse: measure_ellipse,
    Polyline: measure_polyline,
    PathCurve: measure_path,
}


@dataclass(frozen=True)
class RawTotals:
    """Totals of one document in its own source units."""
    length: float
    width: float
    height: float
    shape_count: int = 0


def measure_primitive(primitive, bbox):
    return MEASURERS[type(primitive)](primitive, bbox)


def _finite(length, bbox):
    """True when a length and a box stay finite, including the area they span."""
    if not math.isfinite(length):
        return False
    if bbox.is_empty:
        return True
    values = (bbox.min_x, bbox.min_y, bbox.max_x, bbox.max_y, bbox.width(), bbox.height(), bbox.width() * bbox.height())
    return all(math.isfinite(v) for v in values)


def accumulate(primitives):
    """Measure a stream of (label, primitive) pairs into RawTotals.

    A shape whose measurement fails, or whose length or extent would overflow
    the totals, is logged and skipped; its partial box updates are discarded with it.
    """
    total_length = 0.0
    bbox = BoundingBox()
    shape_count = 0
    for label, primitive in primitives:
        shape_box = BoundingBox()
        try:
            length = measure_primitive(primitive, shape_box)
        except (ValueError, ZeroDivisionError, OverflowError) as e:
            logging.warning(f"Skipping {label}: {e}")
            continue
        merged = BoundingBox()
        for box in (bbox, shape_box):
            if not box.is_empty:
                merged.observe_bounds(box.min_x, box.min_y, box.max_x, box.max_y)
        if not (_finite(length, shape_box) and _finite(total_length + length, merged)):
            logging.warning(f"Skipping {label}: non-finite measurement (length={length}, box={shape_box})")
            continue
        bbox = merged
        total_length += length
        shape_count += 1
        logging.debug(f"{label}: length={length:.4f}")
    logging.info(f"Measured {shape_count} shapes: length={total_length:.4f}, bbox={bbox}")
    return RawTotals(length=total_length, width=bbox.width(), height=bbox.height(), shape_count=shape_count)
