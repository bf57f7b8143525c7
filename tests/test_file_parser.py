"""
test_file_parser.py
Tests dispatch by extension, unit conversion and result shape of cutquote/utils/file_parser.measure.
"""
import math

import pytest

from cutquote.utils import file_parser
from cutquote.utils.errors import InvalidFormat, MeasurementError, UnsupportedFormat
from helpers import dxf_text, svg_text


def test_svg_circle_scenario():
    result = file_parser.measure("part.svg", svg_text('<circle cx="10" cy="10" r="2"/>'))
    assert result.path_length_inches == pytest.approx(4 * math.pi / 96)
    assert result.path_length_inches == pytest.approx(0.1309, abs=1e-4)
    assert result.bounding_box.width_inches == pytest.approx(4 / 96)
    assert result.bounding_box.height_inches == pytest.approx(4 / 96)
    assert result.area_square_inches == pytest.approx((4 / 96) ** 2)
    assert result.area_square_inches == pytest.approx(0.001736, abs=1e-6)


def test_dxf_line_scenario(dxf_doc):
    dxf_doc.modelspace().add_line((0, 0), (3, 4))
    result = file_parser.measure("bracket.dxf", dxf_text(dxf_doc))
    assert result.path_length_inches == pytest.approx(5.0)
    assert result.bounding_box.width_inches == pytest.approx(3.0)
    assert result.bounding_box.height_inches == pytest.approx(4.0)
    assert result.area_square_inches == pytest.approx(12.0)


def test_svg_rect_in_inches():
    # 2in x 1in at 96 px per inch
    result = file_parser.measure("panel.svg", svg_text('<rect width="192" height="96"/>'))
    assert result.path_length_inches == pytest.approx(6.0)
    assert result.area_square_inches == pytest.approx(2.0)


@pytest.mark.parametrize("name", ["PART.SVG", "part.Svg", "my.part.svg", "/uploads/part.svg"])
def test_extension_is_case_insensitive(name):
    result = file_parser.measure(name, svg_text('<line x1="0" y1="0" x2="96" y2="0"/>'))
    assert result.path_length_inches == pytest.approx(1.0)


@pytest.mark.parametrize("name", ["part.txt", "part.ai", "part", "", "part.svg.bak", "dxf"])
def test_unsupported_extension(name):
    with pytest.raises(UnsupportedFormat) as exc:
        file_parser.measure(name, svg_text(''))
    assert isinstance(exc.value, MeasurementError)
    assert "Unsupported file type" in str(exc.value)


def test_invalid_documents_propagate_unchanged():
    with pytest.raises(InvalidFormat) as exc:
        file_parser.measure("part.svg", "<svg><g></svg>")
    assert exc.value.file_format == 'svg'
    with pytest.raises(InvalidFormat) as exc:
        file_parser.measure("part.dxf", "garbage")
    assert exc.value.file_format == 'dxf'


def test_empty_documents_measure_zero(dxf_doc):
    for result in (file_parser.measure("a.svg", svg_text('')), file_parser.measure("a.dxf", dxf_text(dxf_doc))):
        assert result.to_dict() == {
            "pathLengthInches": 0,
            "areaSquareInches": 0,
            "boundingBox": {"width": 0, "height": 0},
        }


def test_measurement_is_idempotent():
    content = svg_text(
        '<path d="M10 10 C40 80 90 -20 120 40 A30 20 15 1 0 200 60 Q220 100 250 20 Z"/>'
        '<ellipse cx="300" cy="300" rx="40" ry="15"/>'
    )
    first = file_parser.measure("art.svg", content)
    second = file_parser.measure("art.svg", content)
    assert first == second
    assert first.to_dict() == second.to_dict()


def test_result_is_immutable():
    result = file_parser.measure("a.svg", svg_text('<circle r="1"/>'))
    with pytest.raises(AttributeError):
        result.path_length_inches = 0


def test_mixed_valid_and_malformed_shapes():
    content = svg_text('<line x1="0" y1="0" x2="96" y2="0"/><circle r="nope"/><line x1="0" y1="0" x2="0" y2="96"/>')
    result = file_parser.measure("mixed.svg", content)
    assert result.path_length_inches == pytest.approx(2.0)
    assert result.area_square_inches == pytest.approx(1.0)


def test_file_extension():
    assert file_parser.file_extension("A.DXF") == "dxf"
    assert file_parser.file_extension("noext") == ""
    assert file_parser.file_extension(None) == ""
    assert file_parser.file_extension(".svg") == "svg"
    assert file_parser.file_extension("archive.tar.DXF") == "dxf"


def test_dotfile_name_is_accepted():
    result = file_parser.measure(".svg", svg_text('<line x1="0" y1="0" x2="96" y2="0"/>'))
    assert result.path_length_inches == pytest.approx(1.0)


def test_unsupported_message_names_the_extension():
    with pytest.raises(UnsupportedFormat) as exc:
        file_parser.measure("part.txt", "")
    assert str(exc.value) == "Unsupported file type: .txt. Please upload SVG or DXF files."
    with pytest.raises(UnsupportedFormat) as exc:
        file_parser.measure("part", "")
    assert ".." not in str(exc.value)
    assert "(no extension)" in str(exc.value)


@pytest.mark.parametrize("body", [
    '<polygon points="1e308,0 -1e308,0"/>',
    '<circle r="1e308"/>',
    '<rect x="-1e308" width="1e308" height="1e308"/>',
])
def test_overflowing_shapes_never_reach_the_result(body):
    content = svg_text(body + '<line x1="0" y1="0" x2="96" y2="0"/>')
    result = file_parser.measure("huge.svg", content)
    values = [result.path_length_inches, result.area_square_inches,
              result.bounding_box.width_inches, result.bounding_box.height_inches]
    assert all(math.isfinite(v) and v >= 0 for v in values)
    assert result.path_length_inches == pytest.approx(1.0)
