"""
test_costing.py
Tests the rate table loading and per-unit pricing in cutquote/utils/costing.py.
"""
import pytest

from cutquote.utils import costing
from cutquote.utils.file_parser import BoundingBoxSize, MeasurementResult


def make_result(length, width, height):
    return MeasurementResult(length, width * height, BoundingBoxSize(width, height))


def test_price_is_length_times_cut_rate_plus_area_times_material_rate():
    price = costing.calculate_price(make_result(100.0, 4.0, 5.0), rate_cut=0.05, rate_material=0.25)
    assert price["cut_cost"] == pytest.approx(5.0)
    assert price["material_cost"] == pytest.approx(5.0)
    assert price["unit_price"] == pytest.approx(10.0)
    assert price["total_price"] == pytest.approx(10.0)


def test_quantity_scales_total_only():
    price = costing.calculate_price(make_result(10.0, 1.0, 1.0), 1.0, 1.0, quantity=3)
    assert price["unit_price"] == pytest.approx(11.0)
    assert price["total_price"] == pytest.approx(33.0)
    assert price["quantity"] == 3


def test_empty_measurement_costs_nothing():
    assert costing.calculate_price(make_result(0, 0, 0), 0.05, 0.04)["total_price"] == 0


@pytest.mark.parametrize("rate_cut,rate_material,quantity", [(-1, 0, 1), (0, -0.1, 1), (1, 1, 0)])
def test_invalid_pricing_inputs(rate_cut, rate_material, quantity):
    with pytest.raises(ValueError):
        costing.calculate_price(make_result(1, 1, 1), rate_cut, rate_material, quantity)


def test_get_rates_is_case_insensitive():
    rates = {"acrylic": {"rate_cut": 0.1, "rate_material": 0.2}}
    assert costing.get_rates(" Acrylic ", rates) == (0.1, 0.2)


def test_get_rates_unknown_material():
    with pytest.raises(ValueError):
        costing.get_rates("unobtainium", costing.DEFAULT_RATES)


def test_load_rates_from_csv(tmp_path):
    path = tmp_path / "rates.csv"
    path.write_text("material,rate_cut,rate_material\nAcrylic,0.11,0.22\nbroken,x,1\n", encoding="utf-8")
    rates = costing.load_rates(str(path))
    assert rates == {"acrylic": {"rate_cut": 0.11, "rate_material": 0.22}}


def test_load_rates_bad_columns_falls_back_to_defaults(tmp_path):
    path = tmp_path / "rates.csv"
    path.write_text("name,price\nacrylic,1\n", encoding="utf-8")
    assert costing.load_rates(str(path)) == costing.DEFAULT_RATES


def test_default_rates_cover_quote_form_materials():
    assert set(costing.DEFAULT_RATES) == {"acrylic", "plastics", "wood", "composites", "veneer"}
