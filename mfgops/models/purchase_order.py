import enum

from sqlalchemy import JSON, Column, Date, DateTime, Enum, Float, ForeignKey, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from mfgops.core.database import Base
from mfgops.models.common import enum_values, generate_custom_id


class PurchaseOrderStatus(str, enum.Enum):
    DRAFT = "draft"
    SUBMITTED = "submitted"
    CONFIRMED = "confirmed"
    IN_TRANSIT = "in-transit"
    PARTIALLY_DELIVERED = "partially-delivered"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class PurchaseOrderItemType(str, enum.Enum):
    MATERIAL = "material"
    PACKAGING = "packaging"
    LABEL = "label"


class PurchaseOrder(Base):
    """
    order_id is the display id (PO-YYYYMMDD-NNN).
    items: [{"id", "item_type", "item_id", "item_name", "quantity", "quantity_received",
             "unit", "unit_price", "tax", "total_cost"}]
    """

    __tablename__ = "purchase_orders"

    id = Column(String(20), primary_key=True, default=lambda: generate_custom_id("POR"))
    order_id = Column(String(30), unique=True, nullable=False)
    supplier_id = Column(String(20), ForeignKey("suppliers.id", ondelete="RESTRICT"), nullable=False, index=True)
    items = Column(JSON, nullable=False, default=list)
    status = Column(Enum(PurchaseOrderStatus, values_callable=enum_values), nullable=False, default=PurchaseOrderStatus.DRAFT)
    total_cost = Column(Float, nullable=False, default=0)
    batch_id = Column(String(20), nullable=True)
    date_submitted = Column(DateTime(timezone=True), nullable=True)
    expected_delivery_date = Column(Date, nullable=True)
    actual_delivery_date = Column(DateTime(timezone=True), nullable=True)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    supplier = relationship("Supplier")
