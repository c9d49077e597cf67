"""
Pydantic types for the costing pipeline: ingredient pricing, recipe totals,
batch variant metrics, variant costs and batch cost analysis.
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from mfgops.schemas.recipe_ref import RecipeRef


class LockReason(str, Enum):
    COST_ANALYSIS = "cost_analysis"
    QUOTE = "quote"
    PRODUCTION_BATCH = "production_batch"
    OTHER = "other"


class LockedPricing(BaseModel):
    """Frozen price/tax snapshot on a recipe ingredient."""

    unit_price: float = Field(..., ge=0)
    tax: float = Field(0, ge=0, description="Tax percent")
    locked_at: datetime
    reason: LockReason = LockReason.OTHER
    notes: Optional[str] = None


class IngredientSpec(BaseModel):
    """One ingredient as seen by the cost calculator (table row or variant snapshot entry)."""

    supplier_material_id: str
    quantity: float
    unit: str
    locked_pricing: Optional[LockedPricing] = None

    class Config:
        from_attributes = True


class SupplierPrice(BaseModel):
    unit_price: float = 0
    tax: float = 0

    class Config:
        from_attributes = True


class ResolvedPrice(BaseModel):
    unit_price: float
    tax: float
    is_locked: bool


class RecipeTotals(BaseModel):
    total_cost: float = 0
    total_cost_with_tax: float = 0
    total_weight_grams: float = 0
    cost_per_kg: float = 0
    taxed_cost_per_kg: float = 0

    @property
    def total_weight_kg(self) -> float:
        return self.total_weight_grams / 1000

    @property
    def tax_per_kg(self) -> float:
        return self.taxed_cost_per_kg - self.cost_per_kg


class VarianceResult(BaseModel):
    variance_from_target: Optional[float] = None
    variance_percentage: Optional[float] = None
    is_above_target: bool = False


class RecipeCostPerKg(BaseModel):
    cost_per_kg: float = 0
    tax_per_kg: float = 0


class BatchVariantMetrics(BaseModel):
    fill_in_kg: float
    units: int
    display_quantity: str


class ProcessedVariant(BaseModel):
    """A batch line resolved against its product and variant. Only lines with units > 0 exist."""

    product_id: str
    product_name: str
    variant_id: str
    variant_name: str
    sku: Optional[str] = None
    recipe_ref: Optional[RecipeRef] = None
    total_fill_quantity: float
    fill_unit: str
    fill_in_kg: float
    units: int
    display_quantity: str
    unit_fill_kg: float
    selling_price_per_unit: float = 0
    packaging_selection_id: Optional[str] = None
    front_label_selection_id: Optional[str] = None
    back_label_selection_id: Optional[str] = None
    labels_per_unit: int = 1


class VariantCost(BaseModel):
    product_id: str
    product_name: str
    variant_id: str
    variant_name: str
    units: int
    fill_in_kg: float
    cost_per_kg: float
    tax_per_kg: float
    materials_cost: float
    packaging_cost: float
    labels_cost: float
    total_cost: float
    total_revenue: float
    profit: float
    margin: float
    cost_per_unit: float
    revenue_per_unit: float


class BatchCostAnalysis(BaseModel):
    batch_id: str
    batch_name: str
    total_units: int = 0
    total_fill_kg: float = 0
    materials_cost: float = 0
    packaging_cost: float = 0
    labels_cost: float = 0
    total_cost: float = 0
    total_revenue: float = 0
    total_profit: float = 0
    profit_margin: float = 0
    materials_percentage: float = 0
    packaging_percentage: float = 0
    labels_percentage: float = 0
    variant_costs: List[VariantCost] = Field(default_factory=list)
