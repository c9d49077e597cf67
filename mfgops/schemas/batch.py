"""
Pydantic schemas for Production Batches.
"""

from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from mfgops.models.batch import BatchStatus
from mfgops.utils.unit_conversion import BATCH_FILL_UNITS


class BatchVariantLine(BaseModel):
    variant_id: str = Field(..., min_length=1)
    total_fill_quantity: float = Field(..., gt=0, description="Total amount for this variant in the run")
    fill_unit: str = Field("kg", description="kg or L")

    @field_validator("fill_unit")
    @classmethod
    def fill_unit_supported(cls, v: str) -> str:
        if v not in BATCH_FILL_UNITS:
            raise ValueError(f"fill_unit must be one of {', '.join(BATCH_FILL_UNITS)}")
        return v


class BatchItem(BaseModel):
    product_id: str = Field(..., min_length=1)
    variants: List[BatchVariantLine] = Field(..., min_length=1)


def _check_dates(start: Optional[date], end: Optional[date]) -> None:
    if start and end and end < start:
        raise ValueError("end_date cannot be before start_date")


class BatchCreate(BaseModel):
    batch_name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    status: BatchStatus = BatchStatus.DRAFT
    items: List[BatchItem] = Field(default_factory=list)
    notes: Optional[str] = None

    @model_validator(mode="after")
    def dates_in_order(self):
        _check_dates(self.start_date, self.end_date)
        return self


class BatchUpdate(BaseModel):
    batch_name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    status: Optional[BatchStatus] = None
    items: Optional[List[BatchItem]] = None
    notes: Optional[str] = None

    @model_validator(mode="after")
    def dates_in_order(self):
        _check_dates(self.start_date, self.end_date)
        return self


class BatchStatusUpdate(BaseModel):
    status: BatchStatus


class BatchResponse(BaseModel):
    id: str
    batch_name: str
    description: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    status: BatchStatus
    items: List[BatchItem]
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class BatchListResponse(BaseModel):
    total: int
    batches: List[BatchResponse]
