"""
Inventory models: InventoryItem, InventoryTransaction, InventoryAlert.
An inventory item tracks stock for one supplier item (material, packaging or label).
Every stock change appends one transaction; alerts follow the derived status.
"""

import enum
from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, Enum, Float, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from mfgops.core.database import Base
from mfgops.models.common import enum_values, generate_custom_id


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class InventoryItemType(str, enum.Enum):
    SUPPLIER_MATERIAL = "supplier_material"
    SUPPLIER_PACKAGING = "supplier_packaging"
    SUPPLIER_LABEL = "supplier_label"


class InventoryStatus(str, enum.Enum):
    IN_STOCK = "in-stock"
    LOW_STOCK = "low-stock"
    OUT_OF_STOCK = "out-of-stock"
    OVERSTOCK = "overstock"


class TransactionType(str, enum.Enum):
    IN = "in"
    OUT = "out"
    ADJUSTMENT = "adjustment"


class AlertSeverity(str, enum.Enum):
    CRITICAL = "critical"
    WARNING = "warning"
    INFO = "info"


class InventoryItem(Base):
    __tablename__ = "inventory_items"
    __table_args__ = (UniqueConstraint("item_type", "item_id", name="uq_inventory_item_ref"),)

    id = Column(String(20), primary_key=True, default=lambda: generate_custom_id("INV"))
    item_type = Column(Enum(InventoryItemType, values_callable=enum_values), nullable=False)
    item_id = Column(String(20), nullable=False, index=True)
    item_name = Column(String(200), nullable=True)
    supplier_id = Column(String(20), nullable=True, index=True)
    current_stock = Column(Float, nullable=False, default=0)
    min_stock_level = Column(Float, nullable=False, default=0)
    max_stock_level = Column(Float, nullable=True)
    unit = Column(String(10), nullable=False)
    status = Column(Enum(InventoryStatus, values_callable=enum_values), nullable=False, default=InventoryStatus.OUT_OF_STOCK)
    notes = Column(Text, nullable=True)

    last_updated = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    transactions = relationship(
        "InventoryTransaction",
        back_populates="inventory_item",
        cascade="all, delete-orphan",
        order_by="InventoryTransaction.created_at",
    )
    alerts = relationship(
        "InventoryAlert",
        back_populates="inventory_item",
        cascade="all, delete-orphan",
    )


class InventoryTransaction(Base):
    """Immutable ledger entry. quantity is always positive; direction is given by type."""

    __tablename__ = "inventory_transactions"

    id = Column(String(20), primary_key=True, default=lambda: generate_custom_id("ITX"))
    inventory_item_id = Column(String(20), ForeignKey("inventory_items.id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(Enum(TransactionType, values_callable=enum_values), nullable=False)
    quantity = Column(Float, nullable=False)
    reason = Column(String(200), nullable=False)
    reference = Column(String(100), nullable=True)
    notes = Column(Text, nullable=True)
    stock_before = Column(Float, nullable=False)
    stock_after = Column(Float, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    inventory_item = relationship("InventoryItem", back_populates="transactions")


class InventoryAlert(Base):
    __tablename__ = "inventory_alerts"

    id = Column(String(20), primary_key=True, default=lambda: generate_custom_id("ALR"))
    inventory_item_id = Column(String(20), ForeignKey("inventory_items.id", ondelete="CASCADE"), nullable=False, index=True)
    alert_type = Column(Enum(InventoryStatus, values_callable=enum_values), nullable=False)
    severity = Column(Enum(AlertSeverity, values_callable=enum_values), nullable=False)
    message = Column(String(500), nullable=False)
    is_read = Column(Boolean, nullable=False, default=False)
    is_resolved = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    resolved_at = Column(DateTime(timezone=True), nullable=True)

    inventory_item = relationship("InventoryItem", back_populates="alerts")
