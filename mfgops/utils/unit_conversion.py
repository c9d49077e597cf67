"""
Unit conversion helpers for mass/volume quantities.
Mass and volume share one canonical basis: 1 L is treated as 1 kg.
Display helpers are for presentation only and never feed cost math.
"""

import math
from typing import Tuple

# Factor to the kg basis
KG_FACTORS = {
    "gm": 0.001,
    "kg": 1.0,
    "ml": 0.001,
    "L": 1.0,
}

MASS_VOLUME_UNITS = ("gm", "kg", "ml", "L")
BATCH_FILL_UNITS = ("kg", "L")
COUNT_UNIT = "pcs"

# Tolerance for float ratios such as 0.3 / 0.1
_FLOOR_EPSILON = 1e-9


def _unit_key(unit) -> str:
    return getattr(unit, "value", unit) or ""


def is_convertible(unit) -> bool:
    return _unit_key(unit) in KG_FACTORS


def normalize_to_kg(quantity, unit) -> float:
    """
    Convert a quantity to the kg basis. gm/ml divide by 1000, kg/L pass through.
    Zero or negative quantities give 0. pcs and unknown units are returned unchanged (treated as kg).
    """
    if not quantity or quantity <= 0:
        return 0.0
    factor = KG_FACTORS.get(_unit_key(unit), 1.0)
    return float(quantity) * factor


def to_grams(quantity, unit) -> float:
    return normalize_to_kg(quantity, unit) * 1000


def base_unit(unit) -> str:
    """kg for mass units, L for volume units, anything else unchanged."""
    key = _unit_key(unit)
    if key in ("gm", "kg"):
        return "kg"
    if key in ("ml", "L"):
        return "L"
    return key


def calculate_units(variant_fill_quantity, variant_fill_unit, batch_fill_quantity, batch_fill_unit) -> int:
    """
    Whole units of a variant that a batch quantity yields (floor, partial units cannot be produced).
    Returns 0 when either side is non-convertible or the variant size is 0.
    """
    if not is_convertible(variant_fill_unit) or not is_convertible(batch_fill_unit):
        return 0
    unit_kg = normalize_to_kg(variant_fill_quantity, variant_fill_unit)
    batch_kg = normalize_to_kg(batch_fill_quantity, batch_fill_unit)
    if unit_kg <= 0 or batch_kg <= 0:
        return 0
    return int(math.floor(batch_kg / unit_kg + _FLOOR_EPSILON))


def convert_to_display_unit(quantity, unit) -> Tuple[float, str]:
    """Promote 1500 gm to 1.5 kg, demote 0.25 kg to 250 gm; other units unchanged."""
    key = _unit_key(unit)
    quantity = float(quantity or 0)
    if key == "gm" and quantity >= 1000:
        return quantity / 1000, "kg"
    if key == "ml" and quantity >= 1000:
        return quantity / 1000, "L"
    if key == "kg" and 0 < quantity < 1:
        return quantity * 1000, "gm"
    if key == "L" and 0 < quantity < 1:
        return quantity * 1000, "ml"
    return quantity, key


def format_quantity(quantity, unit) -> str:
    display_qty, display_unit = convert_to_display_unit(quantity, unit)
    return f"{display_qty:.2f} {display_unit}"


def calculate_unit_price(bulk_price, quantity_for_bulk_price) -> float:
    """Price of one unit from a bulk quote. Non-positive quantities give 0."""
    if not quantity_for_bulk_price or quantity_for_bulk_price <= 0:
        return 0.0
    return float(bulk_price or 0) / float(quantity_for_bulk_price)


def calculate_price_with_tax(price, tax) -> float:
    return float(price or 0) * (1 + float(tax or 0) / 100)
