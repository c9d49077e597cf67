"""
Recipe API: CRUD for recipes, cost views, price locking, supplier alternatives and recipe variants.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from mfgops.core.dependencies import get_store
from mfgops.core.store import Store
from mfgops.models.recipe import RecipeStatus
from mfgops.schemas.common import DeleteResponse
from mfgops.schemas.recipe import (
    LockPricingRequest,
    RecipeComparison,
    RecipeCostAnalysis,
    RecipeCreate,
    RecipeDetailResponse,
    RecipeIngredientResponse,
    RecipeListResponse,
    RecipeResponse,
    RecipeStats,
    RecipeUpdate,
    RecipeVariantCreate,
    RecipeVariantMetrics,
    RecipeVariantResponse,
    RecipeVariantUpdate,
    SupplierAlternative,
    SwitchingSavings,
)
from mfgops.services.recipe_service import (
    analyze_recipe_cost,
    calculate_switching_savings,
    compare_recipes,
    create_recipe,
    delete_recipe,
    find_cheaper_alternatives,
    get_all_recipes,
    get_recipe_by_id,
    get_recipe_detail,
    get_recipe_stats,
    lock_ingredient_pricing,
    unlock_ingredient_pricing,
    update_recipe,
)
from mfgops.services.recipe_variant_service import (
    create_recipe_variant,
    delete_recipe_variant,
    get_recipe_variant_by_id,
    get_recipe_variant_metrics,
    get_recipe_variants,
    update_recipe_variant,
)

router = APIRouter()


@router.post("", response_model=RecipeResponse, status_code=status.HTTP_201_CREATED)
def create_recipe_route(data: RecipeCreate, store: Store = Depends(get_store)):
    """Create a recipe with its ingredient lines."""
    return create_recipe(
        store,
        name=data.name,
        ingredients=[i.model_dump() for i in data.ingredients],
        description=data.description,
        target_cost_per_kg=data.target_cost_per_kg,
        status=data.status,
        notes=data.notes,
    )


@router.get("", response_model=RecipeListResponse)
def list_recipes(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=100),
    search: Optional[str] = Query(None),
    status_filter: Optional[RecipeStatus] = Query(None, alias="status"),
    store: Store = Depends(get_store),
):
    recipes, total = get_all_recipes(store, skip=skip, limit=limit, search=search, status=status_filter)
    return RecipeListResponse(total=total, recipes=recipes)


@router.get("/stats", response_model=RecipeStats)
def recipe_stats(store: Store = Depends(get_store)):
    return get_recipe_stats(store)


@router.get("/compare", response_model=RecipeComparison)
def compare_recipes_route(
    recipe_a: str = Query(...),
    recipe_b: str = Query(...),
    store: Store = Depends(get_store),
):
    return compare_recipes(store, recipe_a, recipe_b)


# ============================================================================
# Ingredients: price locking and supplier alternatives
# ============================================================================

@router.post("/ingredients/{ingredient_id}/lock", response_model=RecipeIngredientResponse)
def lock_pricing_route(ingredient_id: str, data: LockPricingRequest, store: Store = Depends(get_store)):
    """Freeze the ingredient's cost at the supplier's current price and tax."""
    return lock_ingredient_pricing(store, ingredient_id, reason=data.reason, notes=data.notes)


@router.post("/ingredients/{ingredient_id}/unlock", response_model=RecipeIngredientResponse)
def unlock_pricing_route(ingredient_id: str, store: Store = Depends(get_store)):
    return unlock_ingredient_pricing(store, ingredient_id)


@router.get("/ingredients/{ingredient_id}/switching-savings", response_model=SwitchingSavings)
def switching_savings_route(
    ingredient_id: str,
    alternative_id: str = Query(..., description="Supplier material to switch to"),
    store: Store = Depends(get_store),
):
    return calculate_switching_savings(store, ingredient_id, alternative_id)


@router.get("/alternatives/{supplier_material_id}", response_model=List[SupplierAlternative])
def alternatives_route(
    supplier_material_id: str,
    max_results: int = Query(3, ge=1, le=20),
    store: Store = Depends(get_store),
):
    return find_cheaper_alternatives(store, supplier_material_id, max_results=max_results)


# ============================================================================
# Recipe variants
# ============================================================================

@router.get("/variants/{variant_id}", response_model=RecipeVariantResponse)
def get_variant(variant_id: str, store: Store = Depends(get_store)):
    variant = get_recipe_variant_by_id(store, variant_id)
    if not variant:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Recipe variant not found")
    return variant


@router.get("/variants/{variant_id}/metrics", response_model=RecipeVariantMetrics)
def variant_metrics(variant_id: str, store: Store = Depends(get_store)):
    return get_recipe_variant_metrics(store, variant_id)


@router.put("/variants/{variant_id}", response_model=RecipeVariantResponse)
def update_variant_route(variant_id: str, data: RecipeVariantUpdate, store: Store = Depends(get_store)):
    return update_recipe_variant(store, variant_id, data.model_dump(exclude_unset=True))


@router.delete("/variants/{variant_id}", response_model=DeleteResponse)
def delete_variant_route(variant_id: str, store: Store = Depends(get_store)):
    delete_recipe_variant(store, variant_id)
    return DeleteResponse(message=f"Recipe variant {variant_id} deleted")


@router.get("/{recipe_id}/variants", response_model=List[RecipeVariantResponse])
def list_variants(recipe_id: str, store: Store = Depends(get_store)):
    return get_recipe_variants(store, recipe_id)


@router.post("/{recipe_id}/variants", response_model=RecipeVariantResponse, status_code=status.HTTP_201_CREATED)
def create_variant_route(recipe_id: str, data: RecipeVariantCreate, store: Store = Depends(get_store)):
    """Save an ingredient experiment; changes against the recipe are computed on the way in."""
    return create_recipe_variant(
        store,
        recipe_id,
        name=data.name,
        ingredients=[i.model_dump() for i in data.ingredients],
        description=data.description,
        optimization_goal=data.optimization_goal,
        notes=data.notes,
    )


# ============================================================================
# Single recipe
# ============================================================================

@router.get("/{recipe_id}", response_model=RecipeResponse)
def get_recipe(recipe_id: str, store: Store = Depends(get_store)):
    recipe = get_recipe_by_id(store, recipe_id)
    if not recipe:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Recipe not found")
    return recipe


@router.get("/{recipe_id}/detail", response_model=RecipeDetailResponse)
def recipe_detail(recipe_id: str, store: Store = Depends(get_store)):
    return get_recipe_detail(store, recipe_id)


@router.get("/{recipe_id}/cost-analysis", response_model=RecipeCostAnalysis)
def recipe_cost_analysis(recipe_id: str, store: Store = Depends(get_store)):
    return analyze_recipe_cost(store, recipe_id)


@router.put("/{recipe_id}", response_model=RecipeResponse)
def update_recipe_route(recipe_id: str, data: RecipeUpdate, store: Store = Depends(get_store)):
    """Ingredients, when present, replace the existing list."""
    payload = data.model_dump(exclude_unset=True)
    ingredients = payload.pop("ingredients", None)
    return update_recipe(store, recipe_id, payload, ingredients=ingredients)


@router.delete("/{recipe_id}", response_model=DeleteResponse)
def delete_recipe_route(recipe_id: str, store: Store = Depends(get_store)):
    delete_recipe(store, recipe_id)
    return DeleteResponse(message=f"Recipe {recipe_id} deleted")
