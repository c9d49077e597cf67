"""
Pydantic schemas for Products and Product Variants.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from mfgops.models.product import ProductStatus
from mfgops.schemas.recipe_ref import RecipeRef
from mfgops.utils.unit_conversion import MASS_VOLUME_UNITS


def _check_fill_unit(v: Optional[str]) -> Optional[str]:
    if v is not None and v not in MASS_VOLUME_UNITS:
        raise ValueError(f"fill_unit must be one of {', '.join(MASS_VOLUME_UNITS)}")
    return v


# ============================================================================
# Product Schemas
# ============================================================================


class ProductCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    recipe_ref: RecipeRef
    status: ProductStatus = ProductStatus.DRAFT
    notes: Optional[str] = None


class ProductUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    recipe_ref: Optional[RecipeRef] = None
    status: Optional[ProductStatus] = None
    notes: Optional[str] = None


class ProductVariantBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    sku: Optional[str] = Field(None, max_length=100)
    fill_quantity: float = Field(..., gt=0, description="Size of one unit")
    fill_unit: str = Field(..., description="gm, kg, ml or L")
    packaging_selection_id: Optional[str] = None
    front_label_selection_id: Optional[str] = None
    back_label_selection_id: Optional[str] = None
    labels_per_unit: int = Field(1, ge=0)
    selling_price_per_unit: float = Field(0, ge=0)
    minimum_profit_margin: Optional[float] = Field(None, ge=0, le=100)
    is_active: bool = True
    notes: Optional[str] = None

    @field_validator("fill_unit")
    @classmethod
    def fill_unit_supported(cls, v: str) -> str:
        return _check_fill_unit(v)


class ProductVariantCreate(ProductVariantBase):
    pass


class ProductVariantUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    sku: Optional[str] = Field(None, max_length=100)
    fill_quantity: Optional[float] = Field(None, gt=0)
    fill_unit: Optional[str] = None
    packaging_selection_id: Optional[str] = None
    front_label_selection_id: Optional[str] = None
    back_label_selection_id: Optional[str] = None
    labels_per_unit: Optional[int] = Field(None, ge=0)
    selling_price_per_unit: Optional[float] = Field(None, ge=0)
    minimum_profit_margin: Optional[float] = Field(None, ge=0, le=100)
    is_active: Optional[bool] = None
    notes: Optional[str] = None

    @field_validator("fill_unit")
    @classmethod
    def fill_unit_supported(cls, v: Optional[str]) -> Optional[str]:
        return _check_fill_unit(v)


class ProductVariantResponse(ProductVariantBase):
    id: str
    product_id: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ProductResponse(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    recipe_ref: RecipeRef
    status: ProductStatus
    notes: Optional[str] = None
    variants: List[ProductVariantResponse] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ProductListResponse(BaseModel):
    total: int
    products: List[ProductResponse]


class VariantCostAnalysis(BaseModel):
    """Cost of producing one unit of a product variant, taxes shown separately."""

    variant_id: str
    product_id: str
    fill_quantity: float
    fill_unit: str
    fill_kg: float
    recipe_cost: float = 0
    recipe_tax: float = 0
    packaging_cost: float = 0
    packaging_tax: float = 0
    front_label_cost: float = 0
    front_label_tax: float = 0
    back_label_cost: float = 0
    back_label_tax: float = 0
    total_cost_without_tax: float = 0
    total_tax: float = 0
    total_cost_with_tax: float = 0
    cost_per_kg: float = 0
    selling_price_per_unit: float = 0
    gross_profit: float = 0
    gross_margin: float = 0
    warnings: List[str] = Field(default_factory=list)
