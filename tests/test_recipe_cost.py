from datetime import datetime, timezone

import pytest

from mfgops.common.exceptions import NotFoundError, ReferenceInUseError, ValidationError
from mfgops.schemas.costing import IngredientSpec, LockedPricing, SupplierPrice
from mfgops.schemas.recipe_ref import RecipeRef
from mfgops.services.material_service import (
    create_supplier_material,
    delete_supplier_material,
    update_supplier_material,
)
from mfgops.services.pricing import price_changed_since_lock, resolve_ingredient_price
from mfgops.services.recipe_cost import (
    calculate_recipe_totals,
    calculate_variance,
    get_recipe_cost_per_kg,
)
from mfgops.services.recipe_service import (
    analyze_recipe_cost,
    calculate_switching_savings,
    compare_recipes,
    create_recipe,
    delete_recipe,
    find_cheaper_alternatives,
    get_recipe_detail,
    get_recipe_stats,
    lock_ingredient_pricing,
    unlock_ingredient_pricing,
    update_recipe,
)
from mfgops.services.supplier_service import create_supplier


def _locked(unit_price, tax):
    return LockedPricing(unit_price=unit_price, tax=tax, locked_at=datetime.now(timezone.utc))


def test_empty_recipe_has_zero_cost_per_kg():
    totals = calculate_recipe_totals([], {})
    assert totals.cost_per_kg == 0
    assert totals.taxed_cost_per_kg == 0
    assert totals.total_weight_grams == 0


def test_lock_wins_over_live_price():
    ingredient = IngredientSpec(supplier_material_id="SMT-A", quantity=1, unit="kg", locked_pricing=_locked(10, 5))
    price = resolve_ingredient_price(ingredient, SupplierPrice(unit_price=20, tax=10))
    assert (price.unit_price, price.tax, price.is_locked) == (10, 5, True)


def test_live_price_without_lock():
    ingredient = IngredientSpec(supplier_material_id="SMT-A", quantity=1, unit="kg")
    price = resolve_ingredient_price(ingredient, SupplierPrice(unit_price=20, tax=10))
    assert (price.unit_price, price.tax, price.is_locked) == (20, 10, False)


def test_price_drift_detection():
    ingredient = IngredientSpec(supplier_material_id="SMT-A", quantity=1, unit="kg", locked_pricing=_locked(10, 5))
    assert price_changed_since_lock(ingredient, SupplierPrice(unit_price=12, tax=5))
    assert not price_changed_since_lock(ingredient, SupplierPrice(unit_price=10, tax=5))


def test_missing_supplier_material_contributes_nothing():
    ingredients = [
        IngredientSpec(supplier_material_id="SMT-A", quantity=500, unit="gm"),
        IngredientSpec(supplier_material_id="SMT-GONE", quantity=500, unit="gm"),
    ]
    totals = calculate_recipe_totals(ingredients, {"SMT-A": SupplierPrice(unit_price=20, tax=0)})
    assert totals.total_cost == pytest.approx(10)
    assert totals.total_weight_grams == pytest.approx(500)


def test_two_ingredient_recipe_totals():
    ingredients = [
        IngredientSpec(supplier_material_id="A", quantity=500, unit="gm"),
        IngredientSpec(supplier_material_id="B", quantity=500, unit="gm"),
    ]
    lookup = {"A": SupplierPrice(unit_price=20, tax=5), "B": SupplierPrice(unit_price=30, tax=0)}
    totals = calculate_recipe_totals(ingredients, lookup)
    assert totals.total_weight_grams == pytest.approx(1000)
    assert totals.total_cost == pytest.approx(25)
    assert totals.total_cost_with_tax == pytest.approx(25.5)
    assert totals.cost_per_kg == pytest.approx(25)
    assert totals.taxed_cost_per_kg == pytest.approx(25.5)
    assert totals.tax_per_kg == pytest.approx(0.5)


def test_variance_above_target():
    variance = calculate_variance(55, 50)
    assert variance.variance_from_target == pytest.approx(5)
    assert variance.variance_percentage == pytest.approx(10)
    assert variance.is_above_target is True


def test_variance_needs_positive_target():
    assert calculate_variance(55, None).variance_from_target is None
    assert calculate_variance(55, 0).is_above_target is False


def test_stored_recipe_cost_per_kg(store, recipe):
    cost = get_recipe_cost_per_kg(store, RecipeRef(kind="recipe", id=recipe.id))
    assert cost.cost_per_kg == pytest.approx(25)
    assert cost.tax_per_kg == pytest.approx(0.5)


def test_unresolvable_ref_costs_zero(store):
    cost = get_recipe_cost_per_kg(store, RecipeRef(kind="recipe", id="RCP-MISSING"))
    assert cost.cost_per_kg == 0
    assert cost.tax_per_kg == 0


def test_recipe_detail_breakdown(store, recipe):
    detail = get_recipe_detail(store, recipe.id)
    assert detail.ingredient_count == 2
    assert detail.totals.cost_per_kg == pytest.approx(25)
    assert detail.variance.is_above_target is False
    assert sum(line.percentage_of_total for line in detail.breakdown) == pytest.approx(100)


def test_create_recipe_validation(store, catalogue):
    with pytest.raises(ValidationError):
        create_recipe(store, name=" ", ingredients=[])
    with pytest.raises(ValidationError):
        create_recipe(store, name="Bad", ingredients=[
            {"supplier_material_id": catalogue["material_a"].id, "quantity": 0, "unit": "gm"},
        ])
    with pytest.raises(NotFoundError):
        create_recipe(store, name="Ghost", ingredients=[
            {"supplier_material_id": "SMT-NOPE", "quantity": 1, "unit": "kg"},
        ])
    assert store.get_all("recipes") == []


def test_update_ingredients_bumps_version(store, recipe, catalogue):
    updated = update_recipe(store, recipe.id, {"name": "Body Lotion v2"}, ingredients=[
        {"supplier_material_id": catalogue["material_b"].id, "quantity": 1, "unit": "kg"},
    ])
    assert updated.version == 2
    assert updated.name == "Body Lotion v2"
    assert len(updated.ingredients) == 1
    assert get_recipe_cost_per_kg(store, RecipeRef(kind="recipe", id=recipe.id)).cost_per_kg == pytest.approx(30)


def test_locked_price_survives_supplier_price_change(store, recipe, catalogue):
    ingredient = recipe.ingredients[0]
    lock_ingredient_pricing(store, ingredient.id, reason="quote")
    update_supplier_material(store, catalogue["material_a"].id, {"bulk_price": 400})

    analysis = analyze_recipe_cost(store, recipe.id)
    assert analysis.totals.cost_per_kg == pytest.approx(25)
    assert analysis.has_price_changes is True
    assert analysis.warnings

    unlock_ingredient_pricing(store, ingredient.id)
    # 0.5 kg at 40 plus 0.5 kg at 30
    assert analyze_recipe_cost(store, recipe.id).totals.cost_per_kg == pytest.approx(35)


def test_deleted_supplier_material_costs_zero(store, recipe, catalogue):
    delete_supplier_material(store, catalogue["material_b"].id)
    analysis = analyze_recipe_cost(store, recipe.id)
    assert analysis.totals.total_cost == pytest.approx(10)
    assert any(line.is_missing for line in analysis.breakdown)


def test_cheaper_alternatives_and_switching_savings(store, recipe, catalogue, other_supplier):
    cheaper = create_supplier_material(
        store, supplier_id=other_supplier.id, material_name="coconut oil", category="Oils",
        bulk_price=15, quantity_for_bulk_price=1, capacity_unit="kg", tax=5,
    )
    alternatives = find_cheaper_alternatives(store, catalogue["material_a"].id)
    assert [a.supplier_material_id for a in alternatives] == [cheaper.id]
    assert alternatives[0].savings_per_kg == pytest.approx(5)

    savings = calculate_switching_savings(store, recipe.ingredients[0].id, cheaper.id)
    # 0.5 kg: 20 * 1.05 vs 15 * 1.05
    assert savings.current_cost == pytest.approx(10.5)
    assert savings.alternative_cost == pytest.approx(7.875)
    assert savings.savings == pytest.approx(2.625)


def test_compare_recipes(store, recipe, catalogue):
    glycerin_only = create_recipe(store, name="Glycerin Base", ingredients=[
        {"supplier_material_id": catalogue["material_b"].id, "quantity": 1, "unit": "kg"},
    ])
    comparison = compare_recipes(store, recipe.id, glycerin_only.id)
    assert comparison.difference == pytest.approx(5)
    assert comparison.difference_percentage == pytest.approx(20)
    assert comparison.cheaper_recipe_id == recipe.id


def test_recipe_stats(store, recipe):
    stats = get_recipe_stats(store)
    assert stats.total_recipes == 1
    assert stats.active_recipes == 1
    assert stats.average_cost_per_kg == pytest.approx(25)
    assert stats.target_achievement_rate == pytest.approx(100)


def test_recipe_in_use_cannot_be_deleted(store, product, recipe):
    with pytest.raises(ReferenceInUseError):
        delete_recipe(store, recipe.id)
    assert store.get("recipes", recipe.id) is not None


def test_unused_recipe_deletes_its_ingredients(store, catalogue):
    supplier = create_supplier(store, {"name": "Solo Supplies"})
    offer = create_supplier_material(
        store, supplier_id=supplier.id, material_name="Beeswax", category="Waxes", bulk_price=500,
    )
    recipe = create_recipe(store, name="Balm", ingredients=[
        {"supplier_material_id": offer.id, "quantity": 100, "unit": "gm"},
    ])
    delete_recipe(store, recipe.id)
    assert store.query("recipe_ingredients", "recipe_id", recipe.id) == []
