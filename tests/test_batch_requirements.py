import pytest

from mfgops.models.inventory import InventoryItemType
from mfgops.schemas.requirements import LabelSide, RequirementItem, RequirementItemType
from mfgops.services.batch_calculations import calculate_batch_cost_analysis
from mfgops.services.batch_requirements import (
    aggregate_requirements,
    calculate_batch_requirements,
    calculate_shortage,
)
from mfgops.services.batch_service import create_batch
from mfgops.services.inventory_service import create_inventory_item
from mfgops.services.material_service import (
    create_supplier_material,
    delete_supplier_material,
    update_supplier_material,
)
from mfgops.services.product_service import create_product, create_product_variant
from mfgops.services.recipe_service import create_recipe, lock_ingredient_pricing
from mfgops.services.recipe_variant_service import create_recipe_variant


def _requirement(quantity, **overrides):
    values = dict(
        item_type=RequirementItemType.MATERIAL,
        item_id="SMT-SALT",
        item_name="Salt",
        supplier_id="SUP-ONE",
        supplier_name="One",
        required_quantity=quantity,
        unit="kg",
        unit_price=10,
        tax=0,
        cost=quantity * 10,
        total_cost=quantity * 10,
        product_id="PRD-X",
        variant_id="PVR-X",
    )
    values.update(overrides)
    return RequirementItem(**values)


@pytest.fixture
def salt_setup(store, supplier):
    """One-ingredient recipe at 10/kg and a product with 1 kg and 500 gm variants."""
    salt = create_supplier_material(
        store, supplier_id=supplier.id, material_name="Sea Salt", category="Minerals",
        bulk_price=10, quantity_for_bulk_price=1, capacity_unit="kg", tax=0,
    )
    recipe = create_recipe(store, name="Bath Salt", ingredients=[
        {"supplier_material_id": salt.id, "quantity": 1, "unit": "kg"},
    ])
    product = create_product(store, name="Bath Salt", recipe_ref={"kind": "recipe", "id": recipe.id})
    kilo = create_product_variant(store, product.id, {"name": "1 kg", "fill_quantity": 1, "fill_unit": "kg"})
    half = create_product_variant(store, product.id, {"name": "500 gm", "fill_quantity": 500, "fill_unit": "gm"})
    batch = create_batch(store, {
        "batch_name": "Salt run",
        "items": [{
            "product_id": product.id,
            "variants": [
                {"variant_id": kilo.id, "total_fill_quantity": 50, "fill_unit": "kg"},
                {"variant_id": half.id, "total_fill_quantity": 30, "fill_unit": "kg"},
            ],
        }],
    })
    return {"salt": salt, "recipe": recipe, "product": product, "batch": batch}


def test_shortage_is_never_negative():
    assert calculate_shortage(80, 100) == 0
    assert calculate_shortage(80, 30) == pytest.approx(50)
    assert calculate_shortage(80, None) == 0


def test_same_item_from_same_supplier_merges():
    merged = aggregate_requirements([_requirement(50), _requirement(30)])
    assert len(merged) == 1
    assert merged[0].required_quantity == pytest.approx(80)
    assert merged[0].cost == pytest.approx(800)
    assert merged[0].product_id is None


def test_different_suppliers_stay_separate():
    merged = aggregate_requirements([_requirement(50), _requirement(30, supplier_id="SUP-TWO")])
    assert [m.supplier_id for m in merged] == ["SUP-ONE", "SUP-TWO"]


def test_mixed_label_sides_lose_their_side():
    merged = aggregate_requirements([
        _requirement(5, item_type=RequirementItemType.LABEL, label_type=LabelSide.FRONT),
        _requirement(5, item_type=RequirementItemType.LABEL, label_type=LabelSide.BACK),
    ])
    assert merged[0].label_type is None
    assert merged[0].required_quantity == pytest.approx(10)


def test_batch_material_requirements_merge_across_variants(store, salt_setup):
    analysis = calculate_batch_requirements(store, salt_setup["batch"])

    assert len(analysis.materials) == 1
    line = analysis.materials[0]
    assert line.item_id == salt_setup["salt"].id
    assert line.required_quantity == pytest.approx(80)
    assert line.cost == pytest.approx(800)
    assert line.unit == "kg"
    assert analysis.overview.total_items == 1
    assert analysis.overview.supplier_count == 1

    [product_group] = analysis.by_product
    assert product_group.total_units == 50 + 60
    assert [v.materials[0].required_quantity for v in product_group.variants] == pytest.approx([50, 30])


def test_untracked_items_are_not_shortages(store, salt_setup):
    analysis = calculate_batch_requirements(store, salt_setup["batch"])
    line = analysis.materials[0]
    assert line.has_inventory is False
    assert line.shortage == 0
    assert analysis.critical_shortages == []
    assert [i.item_id for i in analysis.items_without_inventory] == [salt_setup["salt"].id]


def test_tracked_stock_drives_shortage(store, salt_setup):
    create_inventory_item(store, InventoryItemType.SUPPLIER_MATERIAL, salt_setup["salt"].id, current_stock=30, min_stock_level=10)

    analysis = calculate_batch_requirements(store, salt_setup["batch"])
    line = analysis.materials[0]
    assert line.has_inventory is True
    assert line.available_stock == pytest.approx(30)
    assert line.shortage == pytest.approx(50)
    assert analysis.overview.shortage_count == 1
    assert analysis.by_supplier[0].shortage_count == 1


def test_packaging_and_labels_scale_with_units(store, product, litre_variant, catalogue):
    batch = create_batch(store, {
        "batch_name": "Lotion run",
        "items": [{
            "product_id": product.id,
            "variants": [{"variant_id": litre_variant.id, "total_fill_quantity": 10, "fill_unit": "kg"}],
        }],
    })
    analysis = calculate_batch_requirements(store, batch)

    assert [p.required_quantity for p in analysis.packaging] == [10]
    assert analysis.packaging[0].unit == "pcs"
    assert {label.label_type: label.required_quantity for label in analysis.labels} == {
        LabelSide.FRONT: 10,
        LabelSide.BACK: 10,
    }
    # 10 kg of a 50/50 recipe
    assert sorted(m.required_quantity for m in analysis.materials) == pytest.approx([5, 5])
    assert analysis.overview.material_count == 2
    assert analysis.overview.total_cost == pytest.approx(
        sum(i.total_cost for i in analysis.materials + analysis.packaging + analysis.labels)
    )


def test_zero_unit_variant_contributes_no_requirements(store, product, litre_variant):
    batch = create_batch(store, {
        "batch_name": "Too small",
        "items": [{
            "product_id": product.id,
            "variants": [{"variant_id": litre_variant.id, "total_fill_quantity": 0.4, "fill_unit": "kg"}],
        }],
    })
    analysis = calculate_batch_requirements(store, batch)
    assert analysis.materials == []
    assert analysis.packaging == []
    assert analysis.labels == []
    assert analysis.by_product == []


def test_recipe_variant_products_use_the_snapshot(store, salt_setup, catalogue):
    variant = create_recipe_variant(store, salt_setup["recipe"].id, "Glycerin salt", ingredients=[
        {"supplier_material_id": salt_setup["salt"].id, "quantity": 750, "unit": "gm"},
        {"supplier_material_id": catalogue["material_b"].id, "quantity": 250, "unit": "gm"},
    ])
    product = create_product(store, name="Glycerin Salt", recipe_ref={"kind": "variant", "id": variant.id})
    kilo = create_product_variant(store, product.id, {"name": "1 kg", "fill_quantity": 1, "fill_unit": "kg"})
    batch = create_batch(store, {
        "batch_name": "Variant run",
        "items": [{
            "product_id": product.id,
            "variants": [{"variant_id": kilo.id, "total_fill_quantity": 4, "fill_unit": "kg"}],
        }],
    })

    analysis = calculate_batch_requirements(store, batch)
    quantities = {m.item_id: m.required_quantity for m in analysis.materials}
    assert quantities == pytest.approx({salt_setup["salt"].id: 3, catalogue["material_b"].id: 1})


def _lotion_batch(store, product, litre_variant):
    return create_batch(store, {
        "batch_name": "Lotion run",
        "items": [{
            "product_id": product.id,
            "variants": [{"variant_id": litre_variant.id, "total_fill_quantity": 10, "fill_unit": "kg"}],
        }],
    })


def test_missing_supplier_material_leaves_the_full_fill_to_the_rest(store, product, litre_variant, catalogue):
    delete_supplier_material(store, catalogue["material_b"].id)
    batch = _lotion_batch(store, product, litre_variant)

    analysis = calculate_batch_requirements(store, batch)
    [line] = analysis.materials
    assert line.item_id == catalogue["material_a"].id
    assert line.required_quantity == pytest.approx(10)
    # 10 kg at 20/kg + 5%, the same figure the cost analysis charges
    assert line.total_cost == pytest.approx(210)
    assert calculate_batch_cost_analysis(store, batch).materials_cost == pytest.approx(210)


def test_locked_ingredient_prices_carry_into_requirements(store, recipe, product, litre_variant, catalogue):
    for ingredient in recipe.ingredients:
        lock_ingredient_pricing(store, ingredient.id, reason="production_batch")
    update_supplier_material(store, catalogue["material_a"].id, {"bulk_price": 400})
    batch = _lotion_batch(store, product, litre_variant)

    analysis = calculate_batch_requirements(store, batch)
    by_item = {m.item_id: m for m in analysis.materials}
    locked = by_item[catalogue["material_a"].id]
    assert locked.unit_price == pytest.approx(20)
    assert locked.is_locked is True
    assert all(m.is_locked for m in analysis.materials)
    assert analysis.packaging[0].is_locked is False
    assert analysis.overview.materials_cost == pytest.approx(
        calculate_batch_cost_analysis(store, batch).materials_cost
    )


def test_merged_lines_are_locked_only_when_all_parts_are():
    merged = aggregate_requirements([_requirement(10, is_locked=True), _requirement(5)])
    assert merged[0].is_locked is False
    assert aggregate_requirements([_requirement(1, is_locked=True), _requirement(2, is_locked=True)])[0].is_locked
