from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from mfgops.models.inventory import (
    AlertSeverity,
    InventoryItemType,
    InventoryStatus,
    TransactionType,
)


class SupplierItemInfo(BaseModel):
    """A supplier material / packaging / label flattened for inventory views."""

    item_type: InventoryItemType
    item_id: str
    name: str
    supplier_id: str
    supplier_name: str
    unit: str
    unit_price: float = 0
    tax: float = 0


class InventoryItemCreate(BaseModel):
    item_type: InventoryItemType
    item_id: str = Field(..., min_length=1, max_length=20)
    current_stock: float = Field(0, ge=0)
    min_stock_level: Optional[float] = Field(None, ge=0)
    max_stock_level: Optional[float] = Field(None, ge=0)
    unit: Optional[str] = Field(None, max_length=10)
    notes: Optional[str] = None

    @model_validator(mode="after")
    def max_above_min(self):
        if (
            self.max_stock_level is not None
            and self.min_stock_level is not None
            and self.max_stock_level < self.min_stock_level
        ):
            raise ValueError("max_stock_level must be greater than or equal to min_stock_level")
        return self


class InventoryItemUpdate(BaseModel):
    min_stock_level: Optional[float] = Field(None, ge=0)
    max_stock_level: Optional[float] = Field(None, ge=0)
    clear_max_stock_level: bool = False
    unit: Optional[str] = Field(None, max_length=10)
    notes: Optional[str] = None


class StockAdjustmentRequest(BaseModel):
    """Signed stock change: positive adds stock, negative removes it."""

    quantity: float
    reason: str = Field(..., min_length=1, max_length=200)
    reference: Optional[str] = Field(None, max_length=100)
    notes: Optional[str] = None

    @field_validator("quantity")
    @classmethod
    def quantity_non_zero(cls, v: float) -> float:
        if v == 0:
            raise ValueError("quantity must be non-zero")
        return v


class SetStockRequest(BaseModel):
    new_stock: float = Field(..., ge=0)
    reason: str = Field("Stock count", min_length=1, max_length=200)
    notes: Optional[str] = None


class InventoryItemResponse(BaseModel):
    id: str
    item_type: InventoryItemType
    item_id: str
    item_name: Optional[str] = None
    supplier_id: Optional[str] = None
    current_stock: float
    min_stock_level: float
    max_stock_level: Optional[float] = None
    unit: str
    status: InventoryStatus
    notes: Optional[str] = None
    last_updated: Optional[datetime] = None

    class Config:
        from_attributes = True


class InventoryTransactionResponse(BaseModel):
    id: str
    inventory_item_id: str
    type: TransactionType
    quantity: float
    reason: str
    reference: Optional[str] = None
    notes: Optional[str] = None
    stock_before: float
    stock_after: float
    created_at: datetime

    class Config:
        from_attributes = True


class InventoryAlertResponse(BaseModel):
    id: str
    inventory_item_id: str
    alert_type: InventoryStatus
    severity: AlertSeverity
    message: str
    is_read: bool
    is_resolved: bool
    created_at: datetime
    resolved_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class InventoryItemDetail(BaseModel):
    """Inventory row joined with its supplier item. Untracked items have id None and is_tracked False."""

    id: Optional[str] = None
    is_tracked: bool
    item_type: InventoryItemType
    item_id: str
    item_name: str
    supplier_id: str
    supplier_name: str
    current_stock: float = 0
    min_stock_level: float = 0
    max_stock_level: Optional[float] = None
    unit: str
    status: InventoryStatus
    unit_price: float = 0
    tax: float = 0
    stock_value: float = 0


class InventoryStats(BaseModel):
    total_items: int = 0
    tracked_items: int = 0
    untracked_items: int = 0
    in_stock: int = 0
    low_stock: int = 0
    out_of_stock: int = 0
    overstock: int = 0
    total_value: float = 0
    value_by_type: Dict[str, float] = Field(default_factory=dict)
    value_by_supplier: Dict[str, float] = Field(default_factory=dict)
    critical_alerts: int = 0
    warning_alerts: int = 0


class InventoryItemListResponse(BaseModel):
    total: int
    items: List[InventoryItemDetail]
