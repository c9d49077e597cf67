"""
Recipe variant service: immutable ingredient snapshots for cost experiments.
Change records are derived from (original, current) ingredient lists by a pure diff,
so "dirty" is a function of the two lists, not tracked state.
"""

from datetime import datetime, timezone
from typing import Iterable, List, Mapping, Optional

from mfgops.common.exceptions import ReferenceInUseError, ValidationError
from mfgops.logger_config import logger
from mfgops.models.recipe import RecipeVariant
from mfgops.schemas.recipe import (
    ChangeType,
    IngredientSnapshot,
    MaterialRef,
    RecipeVariantChange,
    RecipeVariantMetrics,
)
from mfgops.services.recipe_cost import calculate_recipe_totals, supplier_material_map, to_ingredient_specs
from mfgops.utils.unit_conversion import normalize_to_kg

_QUANTITY_EPSILON = 1e-9


def _format_quantity(ingredient) -> str:
    return f"{ingredient.quantity:g} {ingredient.unit}"


def _same_quantity(a, b) -> bool:
    return abs(normalize_to_kg(a.quantity, a.unit) - normalize_to_kg(b.quantity, b.unit)) < _QUANTITY_EPSILON


def diff_ingredients(
    original: Iterable,
    current: Iterable,
    materials: Mapping[str, MaterialRef],
    changed_at: Optional[datetime] = None,
) -> List[RecipeVariantChange]:
    """
    Change records turning `original` into `current`.
    Lines match on supplier material first; an unmatched line whose material is sold by another
    supplier in `current` is a supplier change; anything left over is an addition or removal.
    materials maps supplier_material_id to its MaterialRef.
    """
    changed_at = changed_at or datetime.now(timezone.utc)
    remaining = list(current)
    changes = []

    def name_of(ingredient) -> str:
        ref = materials.get(ingredient.supplier_material_id)
        return ref.material_name if ref else ingredient.supplier_material_id

    def material_of(ingredient) -> Optional[str]:
        ref = materials.get(ingredient.supplier_material_id)
        return ref.material_id if ref else None

    def record(change_type: ChangeType, ingredient, old_value=None, new_value=None):
        changes.append(RecipeVariantChange(
            type=change_type,
            ingredient_name=name_of(ingredient),
            old_value=old_value,
            new_value=new_value,
            changed_at=changed_at,
        ))

    unmatched = []
    for before in original:
        match = next((c for c in remaining if c.supplier_material_id == before.supplier_material_id), None)
        if match is None:
            unmatched.append(before)
            continue
        remaining.remove(match)
        if not _same_quantity(before, match):
            record(ChangeType.QUANTITY_CHANGE, before, _format_quantity(before), _format_quantity(match))

    for before in unmatched:
        material_id = material_of(before)
        match = None
        if material_id is not None:
            match = next((c for c in remaining if material_of(c) == material_id), None)
        if match is None:
            record(ChangeType.INGREDIENT_REMOVED, before, old_value=_format_quantity(before))
            continue
        remaining.remove(match)
        old_ref = materials.get(before.supplier_material_id)
        new_ref = materials.get(match.supplier_material_id)
        record(
            ChangeType.SUPPLIER_CHANGE,
            before,
            old_ref.supplier_name if old_ref else before.supplier_material_id,
            new_ref.supplier_name if new_ref else match.supplier_material_id,
        )
        if not _same_quantity(before, match):
            record(ChangeType.QUANTITY_CHANGE, before, _format_quantity(before), _format_quantity(match))

    for added in remaining:
        record(ChangeType.INGREDIENT_ADDED, added, new_value=_format_quantity(added))
    return changes


def is_dirty(original: Iterable, current: Iterable, materials: Mapping[str, MaterialRef]) -> bool:
    return bool(diff_ingredients(original, current, materials))


def material_refs(store, ingredients: Iterable) -> Mapping[str, MaterialRef]:
    refs = {}
    for supplier_material_id, row in supplier_material_map(store, ingredients).items():
        refs[supplier_material_id] = MaterialRef(
            material_id=row.material_id,
            material_name=row.material.name if row.material else row.material_id,
            supplier_name=row.supplier.name if row.supplier else "Unknown supplier",
        )
    return refs


def get_recipe_variant_by_id(store, variant_id: str) -> Optional[RecipeVariant]:
    return store.get("recipe_variants", variant_id)


def get_recipe_variants(store, recipe_id: str) -> List[RecipeVariant]:
    store.require("recipes", recipe_id)
    return store.query("recipe_variants", "original_recipe_id", recipe_id)


def create_recipe_variant(
    store,
    recipe_id: str,
    name: str,
    ingredients: List[dict],
    description: Optional[str] = None,
    optimization_goal: Optional[str] = None,
    notes: Optional[str] = None,
) -> RecipeVariant:
    """Snapshot `ingredients` as a variant of the recipe and record how they differ from it."""
    recipe = store.require("recipes", recipe_id)
    if not (name or "").strip():
        raise ValidationError("Variant name is required")
    if not ingredients:
        raise ValidationError("At least one ingredient is required")

    snapshot = [IngredientSnapshot.model_validate(i) for i in ingredients]
    original = to_ingredient_specs(recipe.ingredients)
    refs = material_refs(store, list(original) + snapshot)
    changes = diff_ingredients(original, snapshot, refs)

    variant_id = store.add("recipe_variants", {
        "original_recipe_id": recipe_id,
        "name": name.strip(),
        "description": description,
        "ingredients_snapshot": [s.model_dump(mode="json") for s in snapshot],
        "changes": [c.model_dump(mode="json") for c in changes],
        "optimization_goal": optimization_goal,
        "notes": notes,
    })
    logger.info(f"Recipe variant created: {variant_id} of {recipe_id} ({len(changes)} changes)")
    return store.get("recipe_variants", variant_id)


def update_recipe_variant(store, variant_id: str, data: dict) -> RecipeVariant:
    """Descriptive fields only; the snapshot never changes."""
    forbidden = {"ingredients_snapshot", "changes", "original_recipe_id"} & set(data)
    if forbidden:
        raise ValidationError(f"Recipe variant fields are immutable: {', '.join(sorted(forbidden))}")
    if "name" in data and not (data["name"] or "").strip():
        raise ValidationError("Variant name is required")
    variant = store.update("recipe_variants", variant_id, data)
    logger.info(f"Recipe variant updated: {variant_id}")
    return variant


def delete_recipe_variant(store, variant_id: str) -> None:
    variant = store.require("recipe_variants", variant_id)
    products = [p for p in store.query("products", "recipe_id", variant_id) if p.is_recipe_variant]
    if products:
        raise ReferenceInUseError(
            f'Cannot delete recipe variant "{variant.name}": used by product(s) {", ".join(p.name for p in products)}'
        )
    store.delete("recipe_variants", variant_id)
    logger.info(f"Recipe variant deleted: {variant_id}")


def get_recipe_variant_metrics(store, variant_id: str) -> RecipeVariantMetrics:
    """Variant totals against the original recipe's live totals."""
    variant = store.require("recipe_variants", variant_id)
    recipe = store.require("recipes", variant.original_recipe_id)

    snapshot = to_ingredient_specs(variant.ingredients_snapshot or [])
    original = to_ingredient_specs(recipe.ingredients)
    totals = calculate_recipe_totals(snapshot, supplier_material_map(store, snapshot))
    original_totals = calculate_recipe_totals(original, supplier_material_map(store, original))

    difference = totals.cost_per_kg - original_totals.cost_per_kg
    return RecipeVariantMetrics(
        variant_id=variant.id,
        original_recipe_id=recipe.id,
        totals=totals,
        original_totals=original_totals,
        cost_difference=difference,
        cost_difference_percentage=(
            difference / original_totals.cost_per_kg * 100 if original_totals.cost_per_kg > 0 else 0
        ),
        change_count=len(variant.changes or []),
    )
