"""
Pydantic schemas for categories, materials and supplier materials.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from mfgops.utils.unit_conversion import MASS_VOLUME_UNITS


class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    color: Optional[str] = Field(None, max_length=20)


class CategoryUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    color: Optional[str] = Field(None, max_length=20)


class CategoryResponse(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    color: Optional[str] = None

    class Config:
        from_attributes = True


class MaterialCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    category: str = Field(..., min_length=1, max_length=100)
    notes: Optional[str] = None


class MaterialUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    category: Optional[str] = Field(None, min_length=1, max_length=100)
    notes: Optional[str] = None


class MaterialResponse(BaseModel):
    id: str
    name: str
    category: str
    notes: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class SupplierMaterialBase(BaseModel):
    bulk_price: float = Field(..., gt=0)
    quantity_for_bulk_price: float = Field(1, gt=0)
    capacity_unit: str = "kg"
    tax: float = Field(0, ge=0, le=100)
    moq: Optional[float] = Field(None, ge=0)
    lead_time: Optional[int] = Field(None, ge=0)
    transportation_cost: Optional[float] = Field(None, ge=0)
    notes: Optional[str] = None

    @field_validator("capacity_unit")
    @classmethod
    def unit_supported(cls, v: str) -> str:
        if v not in MASS_VOLUME_UNITS:
            raise ValueError(f"capacity_unit must be one of {', '.join(MASS_VOLUME_UNITS)}")
        return v


class SupplierMaterialCreate(SupplierMaterialBase):
    """Create an offer; the material is looked up (or created) by name inside the same transaction."""

    supplier_id: str = Field(..., min_length=1, max_length=20)
    material_name: str = Field(..., min_length=1, max_length=200)
    category: str = Field(..., min_length=1, max_length=100)


class SupplierMaterialUpdate(BaseModel):
    bulk_price: Optional[float] = Field(None, gt=0)
    quantity_for_bulk_price: Optional[float] = Field(None, gt=0)
    tax: Optional[float] = Field(None, ge=0, le=100)
    moq: Optional[float] = Field(None, ge=0)
    lead_time: Optional[int] = Field(None, ge=0)
    transportation_cost: Optional[float] = Field(None, ge=0)
    notes: Optional[str] = None


class SupplierMaterialResponse(BaseModel):
    id: str
    supplier_id: str
    material_id: str
    unit_price: float
    bulk_price: float
    quantity_for_bulk_price: float
    capacity_unit: str
    tax: float
    moq: Optional[float] = None
    lead_time: Optional[int] = None
    transportation_cost: Optional[float] = None
    notes: Optional[str] = None

    class Config:
        from_attributes = True


class SupplierPriceComparison(BaseModel):
    supplier_material_id: str
    supplier_id: str
    supplier_name: str
    unit_price: float
    tax: float
    price_with_tax: float
    capacity_unit: str
    moq: Optional[float] = None
    lead_time: Optional[int] = None
    is_cheapest: bool = False


class MaterialPriceComparison(BaseModel):
    material_id: str
    material_name: str
    offers: List[SupplierPriceComparison]
    price_spread: float = 0


class SimilarMaterialResponse(BaseModel):
    query: str
    matches: List[MaterialResponse]
