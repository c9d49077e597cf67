"""
Recipe service: CRUD for recipes and their ingredients, price locking, and cost views
(detail, analysis, cheaper supplier alternatives, comparison, stats).
"""

from datetime import datetime, timezone
from typing import List, Optional, Tuple

from mfgops.common.exceptions import NotFoundError, ReferenceInUseError, ValidationError
from mfgops.logger_config import logger
from mfgops.models.recipe import Recipe, RecipeIngredient, RecipeStatus
from mfgops.schemas.costing import IngredientSpec, LockedPricing, LockReason, RecipeTotals
from mfgops.schemas.recipe import (
    IngredientCostBreakdown,
    RecipeComparison,
    RecipeCostAnalysis,
    RecipeDetailResponse,
    RecipeResponse,
    RecipeStats,
    SupplierAlternative,
    SwitchingSavings,
)
from mfgops.services.pricing import price_changed_since_lock, resolve_ingredient_price
from mfgops.services.recipe_cost import (
    calculate_recipe_totals,
    calculate_variance,
    supplier_material_map,
    to_ingredient_specs,
)
from mfgops.utils.text_utils import normalize_text
from mfgops.utils.unit_conversion import MASS_VOLUME_UNITS, calculate_price_with_tax, normalize_to_kg

PRICE_CHANGE_WARNING = "Some ingredient prices have changed since they were locked"


def validate_recipe_data(name: Optional[str], ingredients: Optional[List[dict]], target_cost_per_kg: Optional[float] = None) -> None:
    """Raise ValidationError listing every problem at once."""
    errors = []
    if not (name or "").strip():
        errors.append("Recipe name is required")
    if not ingredients:
        errors.append("At least one ingredient is required")
    for index, ingredient in enumerate(ingredients or [], start=1):
        if not ingredient.get("supplier_material_id"):
            errors.append(f"Ingredient {index}: supplier material is required")
        quantity = ingredient.get("quantity")
        if quantity is None or quantity <= 0:
            errors.append(f"Ingredient {index}: quantity must be greater than 0")
        if ingredient.get("unit") not in MASS_VOLUME_UNITS:
            errors.append(f"Ingredient {index}: unit must be one of {', '.join(MASS_VOLUME_UNITS)}")
    if target_cost_per_kg is not None and target_cost_per_kg < 0:
        errors.append("Target cost per kg cannot be negative")
    if errors:
        raise ValidationError("; ".join(errors))


def _validate_ingredient_refs(store, ingredients: List[dict]) -> None:
    for ingredient in ingredients:
        if store.get("supplier_materials", ingredient["supplier_material_id"]) is None:
            raise NotFoundError("Supplier material", ingredient["supplier_material_id"])


def _ingredient_record(recipe_id: str, position: int, ingredient: dict) -> dict:
    locked = ingredient.get("locked_pricing")
    if locked is not None:
        locked = LockedPricing.model_validate(locked).model_dump(mode="json")
    return {
        "recipe_id": recipe_id,
        "supplier_material_id": ingredient["supplier_material_id"],
        "quantity": ingredient["quantity"],
        "unit": ingredient["unit"],
        "locked_pricing": locked,
        "notes": ingredient.get("notes"),
        "position": position,
    }


# ============================================================================
# CRUD
# ============================================================================

def create_recipe(
    store,
    name: str,
    ingredients: List[dict],
    description: Optional[str] = None,
    target_cost_per_kg: Optional[float] = None,
    status: RecipeStatus = RecipeStatus.DRAFT,
    notes: Optional[str] = None,
) -> Recipe:
    """
    Create a recipe with its ingredient lines.
    ingredients: list of {"supplier_material_id", "quantity", "unit", "locked_pricing"?, "notes"?}.
    """
    validate_recipe_data(name, ingredients, target_cost_per_kg)
    _validate_ingredient_refs(store, ingredients)

    with store.transaction():
        recipe_id = store.add("recipes", {
            "name": name.strip(),
            "description": description,
            "target_cost_per_kg": target_cost_per_kg,
            "status": status,
            "notes": notes,
        })
        for position, ingredient in enumerate(ingredients):
            store.add("recipe_ingredients", _ingredient_record(recipe_id, position, ingredient))

    logger.info(f"Recipe created: {recipe_id} ({name.strip()}, {len(ingredients)} ingredients)")
    return store.get("recipes", recipe_id)


def get_recipe_by_id(store, recipe_id: str) -> Optional[Recipe]:
    return store.get("recipes", recipe_id)


def get_all_recipes(
    store,
    skip: int = 0,
    limit: int = 100,
    search: Optional[str] = None,
    status: Optional[RecipeStatus] = None,
) -> Tuple[List[Recipe], int]:
    recipes = store.get_all("recipes")
    if status is not None:
        recipes = [r for r in recipes if r.status == status]
    if search:
        term = normalize_text(search)
        recipes = [r for r in recipes if term in normalize_text(r.name)]
    total = len(recipes)
    return recipes[skip:skip + limit], total


def update_recipe(store, recipe_id: str, data: dict, ingredients: Optional[List[dict]] = None) -> Recipe:
    """Update fields; when ingredients is given it replaces the whole list and bumps the version."""
    recipe = store.require("recipes", recipe_id)
    name = data.get("name", recipe.name)
    target = data.get("target_cost_per_kg", recipe.target_cost_per_kg)
    validate_recipe_data(
        name,
        ingredients if ingredients is not None else [{
            "supplier_material_id": i.supplier_material_id, "quantity": i.quantity, "unit": i.unit,
        } for i in recipe.ingredients],
        target,
    )
    if ingredients is not None:
        _validate_ingredient_refs(store, ingredients)

    with store.transaction():
        partial = dict(data)
        if "name" in partial:
            partial["name"] = partial["name"].strip()
        if ingredients is not None:
            for old in list(recipe.ingredients):
                store.delete("recipe_ingredients", old.id)
            for position, ingredient in enumerate(ingredients):
                store.add("recipe_ingredients", _ingredient_record(recipe_id, position, ingredient))
            partial["version"] = (recipe.version or 1) + 1
        if partial:
            store.update("recipes", recipe_id, partial)

    store.db.refresh(recipe)
    logger.info(f"Recipe updated: {recipe_id}")
    return recipe


def _products_using(store, recipe: Recipe) -> list:
    variant_ids = {v.id for v in recipe.variants}
    return [
        p for p in store.get_all("products")
        if (not p.is_recipe_variant and p.recipe_id == recipe.id)
        or (p.is_recipe_variant and p.recipe_id in variant_ids)
    ]


def delete_recipe(store, recipe_id: str) -> None:
    """Deletes ingredients and variants with it; rejected while a product uses the recipe or a variant."""
    recipe = store.require("recipes", recipe_id)
    products = _products_using(store, recipe)
    if products:
        names = ", ".join(p.name for p in products)
        raise ReferenceInUseError(f'Cannot delete recipe "{recipe.name}": used by product(s) {names}')
    store.delete("recipes", recipe_id)
    logger.info(f"Recipe deleted: {recipe_id}")


# ============================================================================
# Price locking
# ============================================================================

def lock_ingredient_pricing(
    store,
    ingredient_id: str,
    reason: LockReason = LockReason.COST_ANALYSIS,
    notes: Optional[str] = None,
) -> RecipeIngredient:
    """Snapshot the live supplier price and tax onto the ingredient."""
    ingredient = store.require("recipe_ingredients", ingredient_id)
    supplier_material = store.get("supplier_materials", ingredient.supplier_material_id)
    if supplier_material is None:
        raise ValidationError("Cannot lock pricing: the supplier material no longer exists")

    locked = {
        "unit_price": supplier_material.unit_price,
        "tax": supplier_material.tax,
        "locked_at": datetime.now(timezone.utc).isoformat(),
        "reason": LockReason(reason).value,
        "notes": notes,
    }
    ingredient = store.update("recipe_ingredients", ingredient_id, {"locked_pricing": locked})
    logger.info(f"Pricing locked on ingredient {ingredient_id} at {supplier_material.unit_price} (+{supplier_material.tax}%)")
    return ingredient


def unlock_ingredient_pricing(store, ingredient_id: str) -> RecipeIngredient:
    ingredient = store.update("recipe_ingredients", ingredient_id, {"locked_pricing": None})
    logger.info(f"Pricing unlocked on ingredient {ingredient_id}")
    return ingredient


# ============================================================================
# Cost views
# ============================================================================

def build_cost_breakdown(
    store,
    ingredients: List[IngredientSpec],
    ingredient_ids: Optional[List[Optional[str]]] = None,
) -> Tuple[RecipeTotals, List[IngredientCostBreakdown]]:
    """Totals plus one breakdown line per ingredient (missing supplier materials included at 0)."""
    lookup = supplier_material_map(store, ingredients)
    totals = calculate_recipe_totals(ingredients, lookup)
    ids = ingredient_ids or [None] * len(ingredients)

    lines = []
    for ingredient_id, ingredient in zip(ids, ingredients):
        quantity_kg = normalize_to_kg(ingredient.quantity, ingredient.unit)
        supplier_material = lookup.get(ingredient.supplier_material_id)
        if supplier_material is None:
            lines.append(IngredientCostBreakdown(
                ingredient_id=ingredient_id,
                supplier_material_id=ingredient.supplier_material_id,
                material_name="Unknown material",
                supplier_name="Unknown supplier",
                quantity=ingredient.quantity,
                unit=ingredient.unit,
                quantity_kg=quantity_kg,
                is_locked=ingredient.locked_pricing is not None,
                is_missing=True,
            ))
            continue

        price = resolve_ingredient_price(ingredient, supplier_material)
        cost = price.unit_price * quantity_kg
        lines.append(IngredientCostBreakdown(
            ingredient_id=ingredient_id,
            supplier_material_id=ingredient.supplier_material_id,
            material_name=supplier_material.material.name if supplier_material.material else supplier_material.material_id,
            supplier_name=supplier_material.supplier.name if supplier_material.supplier else "Unknown supplier",
            quantity=ingredient.quantity,
            unit=ingredient.unit,
            quantity_kg=quantity_kg,
            unit_price=price.unit_price,
            tax=price.tax,
            cost=cost,
            cost_with_tax=cost * (1 + price.tax / 100),
            percentage_of_total=cost / totals.total_cost * 100 if totals.total_cost > 0 else 0,
            is_locked=price.is_locked,
            price_changed_since_lock=price_changed_since_lock(ingredient, supplier_material),
        ))
    return totals, lines


def _recipe_breakdown(store, recipe: Recipe) -> Tuple[RecipeTotals, List[IngredientCostBreakdown]]:
    return build_cost_breakdown(store, to_ingredient_specs(recipe.ingredients), [i.id for i in recipe.ingredients])


def get_recipe_detail(store, recipe_id: str) -> RecipeDetailResponse:
    recipe = store.require("recipes", recipe_id)
    totals, breakdown = _recipe_breakdown(store, recipe)
    return RecipeDetailResponse(
        recipe=RecipeResponse.model_validate(recipe),
        totals=totals,
        variance=calculate_variance(totals.cost_per_kg, recipe.target_cost_per_kg),
        ingredient_count=len(recipe.ingredients),
        variant_count=len(recipe.variants),
        breakdown=breakdown,
    )


def analyze_recipe_cost(store, recipe_id: str) -> RecipeCostAnalysis:
    """Breakdown sorted by cost, the top three cost drivers, and a warning on locked-price drift."""
    recipe = store.require("recipes", recipe_id)
    totals, breakdown = _recipe_breakdown(store, recipe)
    breakdown.sort(key=lambda line: line.cost, reverse=True)

    has_price_changes = any(line.price_changed_since_lock for line in breakdown)
    warnings = []
    if has_price_changes:
        warnings.append(PRICE_CHANGE_WARNING)
    missing = [line for line in breakdown if line.is_missing]
    if missing:
        warnings.append(f"{len(missing)} ingredient(s) reference a supplier material that no longer exists")

    return RecipeCostAnalysis(
        recipe_id=recipe.id,
        recipe_name=recipe.name,
        totals=totals,
        variance=calculate_variance(totals.cost_per_kg, recipe.target_cost_per_kg),
        breakdown=breakdown,
        top_cost_drivers=breakdown[:3],
        has_price_changes=has_price_changes,
        warnings=warnings,
    )


def find_cheaper_alternatives(store, supplier_material_id: str, max_results: int = 3) -> List[SupplierAlternative]:
    """Other supplier offers for the same material with a lower unit price, cheapest first."""
    current = store.require("supplier_materials", supplier_material_id)
    alternatives = []
    for row in store.query("supplier_materials", "material_id", current.material_id):
        if row.id == current.id or row.unit_price >= current.unit_price:
            continue
        savings = current.unit_price - row.unit_price
        alternatives.append(SupplierAlternative(
            supplier_material_id=row.id,
            supplier_id=row.supplier_id,
            supplier_name=row.supplier.name if row.supplier else "Unknown supplier",
            unit_price=row.unit_price,
            tax=row.tax,
            price_with_tax=calculate_price_with_tax(row.unit_price, row.tax),
            savings_per_kg=savings,
            savings_percentage=savings / current.unit_price * 100 if current.unit_price > 0 else 0,
        ))
    alternatives.sort(key=lambda a: a.unit_price)
    return alternatives[:max_results]


def calculate_switching_savings(store, ingredient_id: str, alternative_supplier_material_id: str) -> SwitchingSavings:
    """Tax-inclusive cost of an ingredient line now versus with another supplier's offer."""
    ingredient = store.require("recipe_ingredients", ingredient_id)
    current = store.require("supplier_materials", ingredient.supplier_material_id)
    alternative = store.require("supplier_materials", alternative_supplier_material_id)
    if alternative.material_id != current.material_id:
        raise ValidationError("Alternative must be an offer for the same material")

    spec = IngredientSpec.model_validate(ingredient)
    price = resolve_ingredient_price(spec, current)
    quantity_kg = normalize_to_kg(ingredient.quantity, ingredient.unit)
    current_cost = quantity_kg * calculate_price_with_tax(price.unit_price, price.tax)
    alternative_cost = quantity_kg * calculate_price_with_tax(alternative.unit_price, alternative.tax)
    savings = current_cost - alternative_cost
    return SwitchingSavings(
        ingredient_id=ingredient.id,
        current_supplier_material_id=current.id,
        alternative_supplier_material_id=alternative.id,
        quantity_kg=quantity_kg,
        current_cost=current_cost,
        alternative_cost=alternative_cost,
        savings=savings,
        savings_percentage=savings / current_cost * 100 if current_cost > 0 else 0,
    )


def compare_recipes(store, recipe_a_id: str, recipe_b_id: str) -> RecipeComparison:
    """difference = b - a (cost per kg); percentage relative to a."""
    totals_a, _ = _recipe_breakdown(store, store.require("recipes", recipe_a_id))
    totals_b, _ = _recipe_breakdown(store, store.require("recipes", recipe_b_id))
    difference = totals_b.cost_per_kg - totals_a.cost_per_kg
    cheaper = None
    if difference > 0:
        cheaper = recipe_a_id
    elif difference < 0:
        cheaper = recipe_b_id
    return RecipeComparison(
        recipe_a_id=recipe_a_id,
        recipe_b_id=recipe_b_id,
        cost_per_kg_a=totals_a.cost_per_kg,
        cost_per_kg_b=totals_b.cost_per_kg,
        difference=difference,
        difference_percentage=difference / totals_a.cost_per_kg * 100 if totals_a.cost_per_kg > 0 else 0,
        cheaper_recipe_id=cheaper,
    )


def get_recipe_stats(store) -> RecipeStats:
    recipes = store.get_all("recipes")
    stats = RecipeStats(total_recipes=len(recipes))
    costs = []
    on_target = 0
    for recipe in recipes:
        totals, _ = _recipe_breakdown(store, recipe)
        if recipe.status == RecipeStatus.ACTIVE:
            stats.active_recipes += 1
        stats.total_ingredients += len(recipe.ingredients)
        stats.total_variants += len(recipe.variants)
        if totals.total_weight_grams > 0:
            costs.append(totals.cost_per_kg)
        if recipe.target_cost_per_kg:
            stats.recipes_with_target += 1
            if not calculate_variance(totals.cost_per_kg, recipe.target_cost_per_kg).is_above_target:
                on_target += 1

    stats.average_cost_per_kg = sum(costs) / len(costs) if costs else 0
    stats.target_achievement_rate = on_target / stats.recipes_with_target * 100 if stats.recipes_with_target else 0
    return stats
