# file_parser.py
# Entry point of the measurement engine: picks an extractor by file extension and
# converts its raw totals into inches.

import logging
from dataclasses import dataclass

from . import dxf_parser, svg_parser
from .errors import UnsupportedFormat


@dataclass(frozen=True)
class Extractor:
    measure: object  # callable(content) -> RawTotals
    units_per_inch: float


EXTRACTORS = {
    "svg": Extractor(svg_parser.measure_svg, svg_parser.SVG_DPI),
    "dxf": Extractor(dxf_parser.measure_dxf, 1.0),
}


@dataclass(frozen=True)
class BoundingBoxSize:
    width_inches: float
    height_inches: float


@dataclass(frozen=True)
class MeasurementResult:
    path_length_inches: float
    area_square_inches: float
    bounding_box: BoundingBoxSize

    def to_dict(self):
        return {
            "pathLengthInches": self.path_length_inches,
            "areaSquareInches": self.area_square_inches,
            "boundingBox": {
                "width": self.bounding_box.width_inches,
                "height": self.bounding_box.height_inches,
            },
        }


def file_extension(file_name):
    """Text after the last dot of the name, lowercased; empty when the name has no dot."""
    name = file_name or ""
    if "." not in name:
        return ""
    return name.rsplit(".", 1)[1].lower()


def measure(file_name, content):
    """Measure cut length and bounding-box area of a design file's text.

    Raises UnsupportedFormat for an unknown extension; InvalidFormat from the
    extractor is passed through unchanged.
    """
    extension = file_extension(file_name)
    extractor = EXTRACTORS.get(extension)
    if extractor is None:
        logging.warning(f"Rejected {file_name!r}: unsupported extension '{extension}'")
        raise UnsupportedFormat(extension, EXTRACTORS)

    totals = extractor.measure(content)
    scale = extractor.units_per_inch
    width = totals.width / scale
    height = totals.height / scale
    result = MeasurementResult(
        path_length_inches=totals.length / scale,
        area_square_inches=width * height,
        bounding_box=BoundingBoxSize(width, height),
    )
    logging.info(f"Summary for {file_name}: Total Cut Length: {result.path_length_inches:.4f} in, "
                 f"Bounding Box: {width:.4f} x {height:.4f} in, Area: {result.area_square_inches:.4f} sqin")
    return result
