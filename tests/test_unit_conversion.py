import pytest

from mfgops.utils.unit_conversion import (
    base_unit,
    calculate_price_with_tax,
    calculate_unit_price,
    calculate_units,
    convert_to_display_unit,
    format_quantity,
    normalize_to_kg,
)


@pytest.mark.parametrize("quantity", [1, 250, 999.5, 12345.678])
@pytest.mark.parametrize("unit", ["gm", "ml"])
def test_small_units_scale_back_to_original(quantity, unit):
    assert normalize_to_kg(quantity, unit) * 1000 == pytest.approx(quantity)


def test_kg_and_litre_pass_through():
    assert normalize_to_kg(2.5, "kg") == pytest.approx(2.5)
    assert normalize_to_kg(2.5, "L") == pytest.approx(2.5)


def test_non_positive_quantities_collapse_to_zero():
    assert normalize_to_kg(0, "kg") == 0
    assert normalize_to_kg(-5, "gm") == 0
    assert normalize_to_kg(None, "kg") == 0


def test_unknown_unit_is_treated_as_kg():
    assert normalize_to_kg(3, "pcs") == pytest.approx(3)


def test_calculate_units_floors_partial_units():
    assert calculate_units(1000, "gm", 2500, "gm") == 2
    assert calculate_units(1000, "gm", 999, "gm") == 0


def test_calculate_units_across_units():
    assert calculate_units(500, "ml", 10, "L") == 20
    assert calculate_units(1000, "gm", 5, "kg") == 5


def test_calculate_units_tolerates_float_ratios():
    # 0.3 / 0.1 is 2.9999999999999996 in binary floating point
    assert calculate_units(0.1, "kg", 0.3, "kg") == 3


def test_calculate_units_non_convertible_or_empty():
    assert calculate_units(1, "pcs", 10, "kg") == 0
    assert calculate_units(0, "gm", 10, "kg") == 0
    assert calculate_units(100, "gm", 0, "kg") == 0


def test_base_unit():
    assert base_unit("gm") == "kg"
    assert base_unit("kg") == "kg"
    assert base_unit("ml") == "L"
    assert base_unit("L") == "L"
    assert base_unit("pcs") == "pcs"


def test_display_unit_promotion_and_demotion():
    assert convert_to_display_unit(1500, "gm") == (1.5, "kg")
    assert convert_to_display_unit(2000, "ml") == (2.0, "L")
    assert convert_to_display_unit(0.25, "kg") == (250.0, "gm")
    assert convert_to_display_unit(500, "gm") == (500.0, "gm")
    assert format_quantity(5000, "gm") == "5.00 kg"


def test_unit_price_and_tax():
    assert calculate_unit_price(200, 10) == pytest.approx(20)
    assert calculate_unit_price(200, 0) == 0
    assert calculate_price_with_tax(20, 5) == pytest.approx(21)
    assert calculate_price_with_tax(20, None) == pytest.approx(20)
