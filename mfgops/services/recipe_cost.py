"""
Recipe cost calculator.
Totals are derived from ingredients plus live or locked pricing every time they are needed;
nothing here is persisted. Missing supplier materials contribute zero instead of failing.
"""

from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from mfgops.logger_config import logger
from mfgops.models.recipe import Recipe
from mfgops.schemas.costing import (
    IngredientSpec,
    RecipeCostPerKg,
    RecipeTotals,
    VarianceResult,
)
from mfgops.schemas.recipe_ref import RecipeRef
from mfgops.services.pricing import resolve_ingredient_price
from mfgops.utils.unit_conversion import normalize_to_kg, to_grams


def calculate_recipe_totals(ingredients: Iterable, supplier_materials: Mapping) -> RecipeTotals:
    """
    Total cost, taxed cost and weight of an ingredient list.
    supplier_materials maps supplier_material_id to anything with unit_price and tax.
    """
    total_cost = 0.0
    total_cost_with_tax = 0.0
    total_weight_grams = 0.0

    for ingredient in ingredients:
        supplier_material = supplier_materials.get(ingredient.supplier_material_id)
        if supplier_material is None:
            logger.debug(f"Skipping ingredient with missing supplier material {ingredient.supplier_material_id}")
            continue

        price = resolve_ingredient_price(ingredient, supplier_material)
        quantity_kg = normalize_to_kg(ingredient.quantity, ingredient.unit)
        cost = price.unit_price * quantity_kg
        total_cost += cost
        total_cost_with_tax += cost * (1 + price.tax / 100)
        total_weight_grams += to_grams(ingredient.quantity, ingredient.unit)

    weight_kg = total_weight_grams / 1000
    return RecipeTotals(
        total_cost=total_cost,
        total_cost_with_tax=total_cost_with_tax,
        total_weight_grams=total_weight_grams,
        cost_per_kg=total_cost / weight_kg if weight_kg > 0 else 0,
        taxed_cost_per_kg=total_cost_with_tax / weight_kg if weight_kg > 0 else 0,
    )


def calculate_variance(cost_per_kg: float, target_cost_per_kg: Optional[float]) -> VarianceResult:
    """Variance from target; only computed when a positive target is set."""
    if not target_cost_per_kg or target_cost_per_kg <= 0:
        return VarianceResult(is_above_target=False)
    variance = cost_per_kg - target_cost_per_kg
    return VarianceResult(
        variance_from_target=variance,
        variance_percentage=variance / target_cost_per_kg * 100,
        is_above_target=variance > 0,
    )


def to_ingredient_specs(rows: Iterable) -> List[IngredientSpec]:
    """Ingredient table rows or snapshot dicts to IngredientSpec."""
    return [IngredientSpec.model_validate(row) for row in rows]


def supplier_material_map(store, ingredients: Iterable) -> Dict[str, object]:
    """Lookup of the supplier materials an ingredient list references (missing ones are absent)."""
    lookup = {}
    for ingredient in ingredients:
        if ingredient.supplier_material_id in lookup:
            continue
        supplier_material = store.get("supplier_materials", ingredient.supplier_material_id)
        if supplier_material is not None:
            lookup[ingredient.supplier_material_id] = supplier_material
    return lookup


def resolve_recipe_source(store, ref: Optional[RecipeRef]) -> Tuple[Optional[Recipe], List[IngredientSpec]]:
    """
    Ingredient source for a recipe reference.
    For a variant, ingredients come from its own snapshot and the returned recipe is the original
    (for recipe-level fields like the target cost). Returns (None, []) when nothing resolves.
    """
    if ref is None:
        return None, []

    if ref.kind == "variant":
        variant = store.get("recipe_variants", ref.id)
        if variant is None:
            logger.warning(f"Recipe variant not found: {ref.id}")
            return None, []
        original = store.get("recipes", variant.original_recipe_id)
        return original, to_ingredient_specs(variant.ingredients_snapshot or [])

    recipe = store.get("recipes", ref.id)
    if recipe is None:
        logger.warning(f"Recipe not found: {ref.id}")
        return None, []
    return recipe, to_ingredient_specs(recipe.ingredients)


def calculate_totals_for_ref(store, ref: Optional[RecipeRef]) -> RecipeTotals:
    _, ingredients = resolve_recipe_source(store, ref)
    return calculate_recipe_totals(ingredients, supplier_material_map(store, ingredients))


def get_recipe_cost_per_kg(store, ref: Optional[RecipeRef]) -> RecipeCostPerKg:
    """Cost and tax per kg for a recipe or recipe variant; zeros when it cannot be resolved."""
    totals = calculate_totals_for_ref(store, ref)
    if totals.total_weight_grams <= 0:
        return RecipeCostPerKg()
    return RecipeCostPerKg(cost_per_kg=totals.cost_per_kg, tax_per_kg=totals.tax_per_kg)


def recipe_weight_kg(ingredients: Iterable) -> float:
    """Total weight of the given ingredient lines in kg."""
    return sum(normalize_to_kg(i.quantity, i.unit) for i in ingredients)
