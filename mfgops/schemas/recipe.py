"""
Pydantic schemas for Recipe and Recipe Variant APIs.
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from mfgops.models.recipe import RecipeStatus
from mfgops.schemas.costing import LockedPricing, LockReason, RecipeTotals, VarianceResult
from mfgops.utils.unit_conversion import MASS_VOLUME_UNITS


def _check_unit(v: str) -> str:
    if v not in MASS_VOLUME_UNITS:
        raise ValueError(f"unit must be one of {', '.join(MASS_VOLUME_UNITS)}")
    return v


# ============================================================================
# Recipe Schemas
# ============================================================================


class RecipeIngredientCreate(BaseModel):
    """One ingredient line: quantity of a supplier material in gm/kg/ml/L."""

    supplier_material_id: str = Field(..., min_length=1, max_length=20)
    quantity: float = Field(..., gt=0)
    unit: str = Field(..., description="gm, kg, ml or L")
    locked_pricing: Optional[LockedPricing] = None
    notes: Optional[str] = None

    @field_validator("unit")
    @classmethod
    def unit_supported(cls, v: str) -> str:
        return _check_unit(v)


class RecipeCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    target_cost_per_kg: Optional[float] = Field(None, ge=0)
    status: RecipeStatus = RecipeStatus.DRAFT
    notes: Optional[str] = None
    ingredients: List[RecipeIngredientCreate] = Field(..., min_length=1)


class RecipeUpdate(BaseModel):
    """Ingredients, when given, replace the whole list."""

    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    target_cost_per_kg: Optional[float] = Field(None, ge=0)
    status: Optional[RecipeStatus] = None
    notes: Optional[str] = None
    ingredients: Optional[List[RecipeIngredientCreate]] = Field(None, min_length=1)


class RecipeIngredientResponse(BaseModel):
    id: str
    supplier_material_id: str
    quantity: float
    unit: str
    locked_pricing: Optional[LockedPricing] = None
    notes: Optional[str] = None

    class Config:
        from_attributes = True


class RecipeResponse(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    target_cost_per_kg: Optional[float] = None
    status: RecipeStatus
    version: int
    notes: Optional[str] = None
    ingredients: List[RecipeIngredientResponse]
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class RecipeListResponse(BaseModel):
    total: int
    recipes: List[RecipeResponse]


class IngredientCostBreakdown(BaseModel):
    """Cost of one ingredient line. is_missing lines have a deleted supplier material and cost 0."""

    ingredient_id: Optional[str] = None
    supplier_material_id: str
    material_name: str
    supplier_name: str
    quantity: float
    unit: str
    quantity_kg: float
    unit_price: float = 0
    tax: float = 0
    cost: float = 0
    cost_with_tax: float = 0
    percentage_of_total: float = 0
    is_locked: bool = False
    price_changed_since_lock: bool = False
    is_missing: bool = False


class RecipeDetailResponse(BaseModel):
    recipe: RecipeResponse
    totals: RecipeTotals
    variance: VarianceResult
    ingredient_count: int
    variant_count: int
    breakdown: List[IngredientCostBreakdown]


class RecipeCostAnalysis(BaseModel):
    recipe_id: str
    recipe_name: str
    totals: RecipeTotals
    variance: VarianceResult
    breakdown: List[IngredientCostBreakdown] = Field(..., description="Sorted by cost, highest first")
    top_cost_drivers: List[IngredientCostBreakdown]
    has_price_changes: bool = False
    warnings: List[str] = Field(default_factory=list)


class LockPricingRequest(BaseModel):
    reason: LockReason = LockReason.COST_ANALYSIS
    notes: Optional[str] = None


class SupplierAlternative(BaseModel):
    supplier_material_id: str
    supplier_id: str
    supplier_name: str
    unit_price: float
    tax: float
    price_with_tax: float
    savings_per_kg: float
    savings_percentage: float


class SwitchingSavings(BaseModel):
    ingredient_id: str
    current_supplier_material_id: str
    alternative_supplier_material_id: str
    quantity_kg: float
    current_cost: float
    alternative_cost: float
    savings: float
    savings_percentage: float


class RecipeComparison(BaseModel):
    recipe_a_id: str
    recipe_b_id: str
    cost_per_kg_a: float
    cost_per_kg_b: float
    difference: float
    difference_percentage: float
    cheaper_recipe_id: Optional[str] = None


class RecipeStats(BaseModel):
    total_recipes: int = 0
    active_recipes: int = 0
    average_cost_per_kg: float = 0
    total_ingredients: int = 0
    total_variants: int = 0
    recipes_with_target: int = 0
    target_achievement_rate: float = 0


# ============================================================================
# Recipe Variant Schemas
# ============================================================================


class ChangeType(str, Enum):
    QUANTITY_CHANGE = "quantity_change"
    SUPPLIER_CHANGE = "supplier_change"
    INGREDIENT_ADDED = "ingredient_added"
    INGREDIENT_REMOVED = "ingredient_removed"


class RecipeVariantChange(BaseModel):
    type: ChangeType
    ingredient_name: str
    old_value: Optional[str] = None
    new_value: Optional[str] = None
    changed_at: datetime


class MaterialRef(BaseModel):
    """What a supplier material is, for naming changes: the material and who sells it."""

    material_id: str
    material_name: str
    supplier_name: str


class IngredientSnapshot(BaseModel):
    supplier_material_id: str = Field(..., min_length=1, max_length=20)
    quantity: float = Field(..., gt=0)
    unit: str
    locked_pricing: Optional[LockedPricing] = None

    @field_validator("unit")
    @classmethod
    def unit_supported(cls, v: str) -> str:
        return _check_unit(v)


class RecipeVariantCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    optimization_goal: Optional[str] = Field(None, max_length=50)
    notes: Optional[str] = None
    ingredients: List[IngredientSnapshot] = Field(..., min_length=1)


class RecipeVariantUpdate(BaseModel):
    """The ingredient snapshot is immutable; only descriptive fields change."""

    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    optimization_goal: Optional[str] = Field(None, max_length=50)
    notes: Optional[str] = None
    is_active: Optional[bool] = None


class RecipeVariantResponse(BaseModel):
    id: str
    original_recipe_id: str
    name: str
    description: Optional[str] = None
    ingredients_snapshot: List[IngredientSnapshot]
    changes: List[RecipeVariantChange]
    optimization_goal: Optional[str] = None
    is_active: bool
    notes: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class RecipeVariantMetrics(BaseModel):
    variant_id: str
    original_recipe_id: str
    totals: RecipeTotals
    original_totals: RecipeTotals
    cost_difference: float
    cost_difference_percentage: float
    change_count: int
