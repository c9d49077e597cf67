"""
Pydantic schemas for Purchase Orders.
"""

from datetime import date, datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from mfgops.models.purchase_order import PurchaseOrderItemType, PurchaseOrderStatus


class PurchaseOrderItemCreate(BaseModel):
    item_type: PurchaseOrderItemType
    item_id: str = Field(..., min_length=1, description="Supplier material / packaging / label id")
    quantity: float = Field(..., gt=0)
    unit_price: Optional[float] = Field(None, ge=0, description="Defaults to the supplier's unit price")
    tax: Optional[float] = Field(None, ge=0, description="Tax percent; defaults to the supplier's tax")
    unit: Optional[str] = None


class PurchaseOrderItem(BaseModel):
    id: str
    item_type: PurchaseOrderItemType
    item_id: str
    item_name: str
    quantity: float
    quantity_received: float = 0
    unit: str
    unit_price: float
    tax: float
    total_cost: float


class PurchaseOrderCreate(BaseModel):
    supplier_id: str = Field(..., min_length=1)
    items: List[PurchaseOrderItemCreate] = Field(..., min_length=1)
    expected_delivery_date: Optional[date] = None
    batch_id: Optional[str] = None
    notes: Optional[str] = None


class PurchaseOrderUpdate(BaseModel):
    """Only draft orders can be edited. Items, when given, replace the whole list."""

    items: Optional[List[PurchaseOrderItemCreate]] = Field(None, min_length=1)
    expected_delivery_date: Optional[date] = None
    notes: Optional[str] = None


class PurchaseOrderStatusUpdate(BaseModel):
    status: PurchaseOrderStatus


class ReceiveItemsRequest(BaseModel):
    """Quantities received now, keyed by order line id."""

    received: Dict[str, float] = Field(..., min_length=1)

    @field_validator("received")
    @classmethod
    def quantities_positive(cls, v: Dict[str, float]) -> Dict[str, float]:
        for line_id, quantity in v.items():
            if quantity <= 0:
                raise ValueError(f"Received quantity for {line_id} must be greater than 0")
        return v


class OrdersFromRequirementsRequest(BaseModel):
    shortages_only: bool = True


class PurchaseOrderResponse(BaseModel):
    id: str
    order_id: str
    supplier_id: str
    items: List[PurchaseOrderItem]
    status: PurchaseOrderStatus
    total_cost: float
    batch_id: Optional[str] = None
    date_submitted: Optional[datetime] = None
    expected_delivery_date: Optional[date] = None
    actual_delivery_date: Optional[datetime] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class PurchaseOrderListResponse(BaseModel):
    total: int
    purchase_orders: List[PurchaseOrderResponse]


class OrderCompletion(BaseModel):
    order_id: str
    ordered_quantity: float
    received_quantity: float
    completion_percentage: float
