from sqlalchemy import Column, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from mfgops.core.database import Base
from mfgops.models.common import generate_custom_id


class Label(Base):
    __tablename__ = "labels"

    id = Column(String(20), primary_key=True,
                default=lambda: generate_custom_id("LBL"))
    name = Column(String(200), nullable=False)
    type = Column(String(50), nullable=True)  # sticker, label, tag, sleeve
    printing_type = Column(String(50), nullable=True)
    material = Column(String(100), nullable=True)
    shape = Column(String(50), nullable=True)
    size = Column(String(50), nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True),
                        server_default=func.now(), onupdate=func.now())


class SupplierLabel(Base):
    __tablename__ = "supplier_labels"

    id = Column(String(20), primary_key=True,
                default=lambda: generate_custom_id("SLB"))
    supplier_id = Column(String(20), ForeignKey("suppliers.id", ondelete="RESTRICT"), nullable=False, index=True)
    label_id = Column(String(20), ForeignKey("labels.id", ondelete="RESTRICT"), nullable=False, index=True)
    unit = Column(String(10), nullable=False, default="pcs")
    bulk_price = Column(Float, nullable=False, default=0)
    quantity_for_bulk_price = Column(Float, nullable=False, default=1)
    unit_price = Column(Float, nullable=False, default=0)
    tax = Column(Float, nullable=False, default=0)  # percent
    moq = Column(Float, nullable=True)
    lead_time = Column(Integer, nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True),
                        server_default=func.now(), onupdate=func.now())

    supplier = relationship("Supplier")
    label = relationship("Label")
