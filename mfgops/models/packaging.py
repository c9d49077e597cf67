from sqlalchemy import Column, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from mfgops.core.database import Base
from mfgops.models.common import generate_custom_id


class Packaging(Base):
    __tablename__ = "packaging"

    id = Column(String(20), primary_key=True,
                default=lambda: generate_custom_id("PKG"))
    name = Column(String(200), nullable=False)
    type = Column(String(50), nullable=True)  # bottle, jar, pouch, ...
    capacity = Column(Float, nullable=True)
    capacity_unit = Column(String(10), nullable=True)
    build_material = Column(String(100), nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True),
                        server_default=func.now(), onupdate=func.now())


class SupplierPackaging(Base):
    __tablename__ = "supplier_packaging"

    id = Column(String(20), primary_key=True,
                default=lambda: generate_custom_id("SPK"))
    supplier_id = Column(String(20), ForeignKey("suppliers.id", ondelete="RESTRICT"), nullable=False, index=True)
    packaging_id = Column(String(20), ForeignKey("packaging.id", ondelete="RESTRICT"), nullable=False, index=True)
    bulk_price = Column(Float, nullable=False, default=0)
    quantity_for_bulk_price = Column(Float, nullable=False, default=1)
    unit_price = Column(Float, nullable=False, default=0)
    capacity_unit = Column(String(10), nullable=False, default="pcs")
    tax = Column(Float, nullable=False, default=0)  # percent
    moq = Column(Float, nullable=True)
    lead_time = Column(Integer, nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True),
                        server_default=func.now(), onupdate=func.now())

    supplier = relationship("Supplier")
    packaging = relationship("Packaging")
