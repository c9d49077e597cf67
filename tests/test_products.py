import pytest

from mfgops.common.exceptions import NotFoundError, ValidationError
from mfgops.services.product_service import (
    analyze_variant_cost,
    create_product,
    create_product_variant,
    get_all_products,
    update_product,
    update_product_variant,
)
from mfgops.services.recipe_variant_service import create_recipe_variant


def test_recipe_ref_must_resolve(store, recipe):
    with pytest.raises(NotFoundError):
        create_product(store, name="Ghost", recipe_ref={"kind": "recipe", "id": "RCP-NOPE"})
    with pytest.raises(NotFoundError):
        create_product(store, name="Ghost", recipe_ref={"kind": "variant", "id": recipe.id})
    with pytest.raises(ValidationError):
        create_product(store, name="  ", recipe_ref={"kind": "recipe", "id": recipe.id})


def test_product_can_switch_to_a_recipe_variant(store, product, recipe, catalogue):
    variant = create_recipe_variant(store, recipe.id, "Cheaper", ingredients=[
        {"supplier_material_id": catalogue["material_b"].id, "quantity": 1, "unit": "kg"},
    ])
    updated = update_product(store, product.id, {"recipe_ref": {"kind": "variant", "id": variant.id}})
    assert updated.is_recipe_variant is True
    assert updated.recipe_ref.kind == "variant"
    assert updated.recipe_ref.id == variant.id


def test_sku_must_be_unique(store, product, litre_variant):
    with pytest.raises(ValidationError):
        create_product_variant(store, product.id, {"name": "Copy", "sku": "LOTION-1L", "fill_quantity": 1, "fill_unit": "L"})
    other = create_product_variant(store, product.id, {"name": "Travel", "sku": "LOTION-50", "fill_quantity": 50, "fill_unit": "ml"})
    with pytest.raises(ValidationError):
        update_product_variant(store, other.id, {"sku": "LOTION-1L"})
    assert update_product_variant(store, litre_variant.id, {"sku": "LOTION-1L", "name": "1 litre"}).name == "1 litre"


def test_variant_input_validation(store, product):
    with pytest.raises(ValidationError):
        create_product_variant(store, product.id, {"name": "Bad", "fill_quantity": 0, "fill_unit": "gm"})
    with pytest.raises(ValidationError):
        create_product_variant(store, product.id, {"name": "Bad", "fill_quantity": 1, "fill_unit": "pcs"})
    with pytest.raises(NotFoundError):
        create_product_variant(store, product.id, {
            "name": "Bad", "fill_quantity": 1, "fill_unit": "kg", "packaging_selection_id": "SPK-NOPE",
        })


def test_single_unit_cost(store, litre_variant):
    analysis = analyze_variant_cost(store, litre_variant.id)
    assert analysis.fill_kg == pytest.approx(1)
    assert analysis.recipe_cost == pytest.approx(25)
    assert analysis.recipe_tax == pytest.approx(0.5)
    assert analysis.packaging_cost == pytest.approx(2)
    assert analysis.front_label_cost + analysis.back_label_cost == pytest.approx(1)
    assert analysis.total_cost_with_tax == pytest.approx(28.5)
    assert analysis.gross_profit == pytest.approx(31.5)
    assert analysis.gross_margin == pytest.approx(52.5)
    assert analysis.warnings == []


def test_single_unit_cost_warnings(store, product):
    bare = create_product_variant(store, product.id, {
        "name": "Sample", "fill_quantity": 100, "fill_unit": "gm", "selling_price_per_unit": 1,
    })
    warnings = analyze_variant_cost(store, bare.id).warnings
    assert any("packaging" in w for w in warnings)
    assert any("below cost" in w for w in warnings)


def test_product_listing(store, product, recipe):
    create_product(store, name="Hand Cream", recipe_ref={"kind": "recipe", "id": recipe.id})
    products, total = get_all_products(store, search="lotion")
    assert total == 1
    assert products[0].id == product.id
    _, total = get_all_products(store, status="active")
    assert total == 1
