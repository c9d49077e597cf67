from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class ContactPerson(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    role: Optional[str] = Field(None, max_length=100)
    phone: Optional[str] = Field(None, max_length=20)
    email: Optional[str] = Field(None, max_length=200)


class SupplierBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    contact_persons: List[ContactPerson] = Field(default_factory=list)
    address: Optional[str] = Field(None, max_length=500)
    rating: Optional[float] = Field(None, ge=0, le=5)
    is_active: bool = True
    payment_terms: Optional[str] = Field(None, max_length=200)
    lead_time: Optional[int] = Field(None, ge=0, description="Lead time in days")
    notes: Optional[str] = None


class SupplierCreate(SupplierBase):
    pass


class SupplierUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    contact_persons: Optional[List[ContactPerson]] = None
    address: Optional[str] = Field(None, max_length=500)
    rating: Optional[float] = Field(None, ge=0, le=5)
    is_active: Optional[bool] = None
    payment_terms: Optional[str] = Field(None, max_length=200)
    lead_time: Optional[int] = Field(None, ge=0)
    notes: Optional[str] = None


class SupplierResponse(SupplierBase):
    id: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class SupplierListResponse(BaseModel):
    total: int
    suppliers: List[SupplierResponse]
