import pytest

from mfgops.common.exceptions import ReferenceInUseError, ValidationError
from mfgops.schemas.costing import IngredientSpec
from mfgops.schemas.recipe import ChangeType, MaterialRef
from mfgops.services.material_service import create_supplier_material
from mfgops.services.product_service import create_product
from mfgops.services.recipe_variant_service import (
    create_recipe_variant,
    delete_recipe_variant,
    diff_ingredients,
    get_recipe_variant_metrics,
    is_dirty,
    update_recipe_variant,
)

MATERIALS = {
    "SMT-A1": MaterialRef(material_id="MAT-A", material_name="Coconut Oil", supplier_name="Acme"),
    "SMT-A2": MaterialRef(material_id="MAT-A", material_name="Coconut Oil", supplier_name="Bharat"),
    "SMT-B1": MaterialRef(material_id="MAT-B", material_name="Glycerin", supplier_name="Acme"),
    "SMT-C1": MaterialRef(material_id="MAT-C", material_name="Vitamin E", supplier_name="Acme"),
}


def _line(supplier_material_id, quantity, unit="gm"):
    return IngredientSpec(supplier_material_id=supplier_material_id, quantity=quantity, unit=unit)


def test_identical_lists_are_clean():
    original = [_line("SMT-A1", 500), _line("SMT-B1", 500)]
    assert diff_ingredients(original, list(original), MATERIALS) == []
    assert not is_dirty(original, [_line("SMT-A1", 0.5, "kg"), _line("SMT-B1", 500)], MATERIALS)


def test_quantity_change():
    [change] = diff_ingredients([_line("SMT-A1", 500)], [_line("SMT-A1", 600)], MATERIALS)
    assert change.type == ChangeType.QUANTITY_CHANGE
    assert (change.ingredient_name, change.old_value, change.new_value) == ("Coconut Oil", "500 gm", "600 gm")


def test_supplier_change_for_same_material():
    changes = diff_ingredients([_line("SMT-A1", 500)], [_line("SMT-A2", 400)], MATERIALS)
    assert [c.type for c in changes] == [ChangeType.SUPPLIER_CHANGE, ChangeType.QUANTITY_CHANGE]
    assert (changes[0].old_value, changes[0].new_value) == ("Acme", "Bharat")


def test_added_and_removed_ingredients():
    changes = diff_ingredients([_line("SMT-A1", 500), _line("SMT-B1", 500)], [_line("SMT-A1", 500), _line("SMT-C1", 10)], MATERIALS)
    assert {(c.type, c.ingredient_name) for c in changes} == {
        (ChangeType.INGREDIENT_REMOVED, "Glycerin"),
        (ChangeType.INGREDIENT_ADDED, "Vitamin E"),
    }


def test_variant_snapshot_records_changes(store, recipe, catalogue, other_supplier):
    cheaper = create_supplier_material(
        store, supplier_id=other_supplier.id, material_name="Coconut Oil", category="Oils",
        bulk_price=10, quantity_for_bulk_price=1, tax=5,
    )
    variant = create_recipe_variant(store, recipe.id, "Cheaper coconut", ingredients=[
        {"supplier_material_id": cheaper.id, "quantity": 500, "unit": "gm"},
        {"supplier_material_id": catalogue["material_b"].id, "quantity": 500, "unit": "gm"},
    ], optimization_goal="cost_reduction")

    assert [c["type"] for c in variant.changes] == ["supplier_change"]
    assert len(variant.ingredients_snapshot) == 2

    metrics = get_recipe_variant_metrics(store, variant.id)
    # 0.5 * 10 + 0.5 * 30 against 25
    assert metrics.totals.cost_per_kg == pytest.approx(20)
    assert metrics.cost_difference == pytest.approx(-5)
    assert metrics.cost_difference_percentage == pytest.approx(-20)
    assert metrics.change_count == 1


def test_snapshot_is_immutable(store, recipe, catalogue):
    variant = create_recipe_variant(store, recipe.id, "Copy", ingredients=[
        {"supplier_material_id": catalogue["material_a"].id, "quantity": 1, "unit": "kg"},
    ])
    with pytest.raises(ValidationError):
        update_recipe_variant(store, variant.id, {"ingredients_snapshot": []})
    assert update_recipe_variant(store, variant.id, {"name": "Renamed"}).name == "Renamed"


def test_variant_in_use_cannot_be_deleted(store, recipe, catalogue):
    variant = create_recipe_variant(store, recipe.id, "Copy", ingredients=[
        {"supplier_material_id": catalogue["material_a"].id, "quantity": 1, "unit": "kg"},
    ])
    create_product(store, name="Variant Lotion", recipe_ref={"kind": "variant", "id": variant.id})
    with pytest.raises(ReferenceInUseError):
        delete_recipe_variant(store, variant.id)
