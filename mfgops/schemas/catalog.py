"""
Pydantic schemas for packaging and labels and their supplier offers.
"""

from typing import Optional

from pydantic import BaseModel, Field


class PackagingCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    type: Optional[str] = Field(None, max_length=50)
    capacity: Optional[float] = Field(None, gt=0)
    capacity_unit: Optional[str] = Field(None, max_length=10)
    build_material: Optional[str] = Field(None, max_length=100)
    notes: Optional[str] = None


class PackagingUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    type: Optional[str] = Field(None, max_length=50)
    capacity: Optional[float] = Field(None, gt=0)
    capacity_unit: Optional[str] = Field(None, max_length=10)
    build_material: Optional[str] = Field(None, max_length=100)
    notes: Optional[str] = None


class PackagingResponse(PackagingCreate):
    id: str

    class Config:
        from_attributes = True


class LabelCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    type: Optional[str] = Field(None, max_length=50)
    printing_type: Optional[str] = Field(None, max_length=50)
    material: Optional[str] = Field(None, max_length=100)
    shape: Optional[str] = Field(None, max_length=50)
    size: Optional[str] = Field(None, max_length=50)
    notes: Optional[str] = None


class LabelUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    type: Optional[str] = Field(None, max_length=50)
    printing_type: Optional[str] = Field(None, max_length=50)
    material: Optional[str] = Field(None, max_length=100)
    shape: Optional[str] = Field(None, max_length=50)
    size: Optional[str] = Field(None, max_length=50)
    notes: Optional[str] = None


class LabelResponse(LabelCreate):
    id: str

    class Config:
        from_attributes = True


class SupplierOfferCreate(BaseModel):
    supplier_id: str = Field(..., min_length=1, max_length=20)
    bulk_price: float = Field(..., gt=0)
    quantity_for_bulk_price: float = Field(1, gt=0)
    tax: float = Field(0, ge=0, le=100)
    moq: Optional[float] = Field(None, ge=0)
    lead_time: Optional[int] = Field(None, ge=0)
    notes: Optional[str] = None


class SupplierOfferUpdate(BaseModel):
    bulk_price: Optional[float] = Field(None, gt=0)
    quantity_for_bulk_price: Optional[float] = Field(None, gt=0)
    tax: Optional[float] = Field(None, ge=0, le=100)
    moq: Optional[float] = Field(None, ge=0)
    lead_time: Optional[int] = Field(None, ge=0)
    notes: Optional[str] = None


class SupplierPackagingCreate(SupplierOfferCreate):
    packaging_id: str = Field(..., min_length=1, max_length=20)
    capacity_unit: str = Field("pcs", max_length=10)


class SupplierPackagingResponse(BaseModel):
    id: str
    supplier_id: str
    packaging_id: str
    bulk_price: float
    quantity_for_bulk_price: float
    unit_price: float
    capacity_unit: str
    tax: float
    moq: Optional[float] = None
    lead_time: Optional[int] = None
    notes: Optional[str] = None

    class Config:
        from_attributes = True


class SupplierLabelCreate(SupplierOfferCreate):
    label_id: str = Field(..., min_length=1, max_length=20)
    unit: str = Field("pcs", max_length=10)


class SupplierLabelResponse(BaseModel):
    id: str
    supplier_id: str
    label_id: str
    unit: str
    bulk_price: float
    quantity_for_bulk_price: float
    unit_price: float
    tax: float
    moq: Optional[float] = None
    lead_time: Optional[int] = None
    notes: Optional[str] = None

    class Config:
        from_attributes = True
