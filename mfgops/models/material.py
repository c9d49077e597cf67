from sqlalchemy import Column, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from mfgops.core.database import Base
from mfgops.models.common import generate_custom_id


class Category(Base):
    __tablename__ = "categories"

    id = Column(String(20), primary_key=True,
                default=lambda: generate_custom_id("CAT"))
    name = Column(String(100), unique=True, nullable=False)
    description = Column(Text, nullable=True)
    color = Column(String(20), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True),
                        server_default=func.now(), onupdate=func.now())


class Material(Base):
    """A raw material definition. `category` is the category name (free text, matched normalized)."""

    __tablename__ = "materials"

    id = Column(String(20), primary_key=True,
                default=lambda: generate_custom_id("MAT"))
    name = Column(String(200), nullable=False)
    category = Column(String(100), nullable=False)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True),
                        server_default=func.now(), onupdate=func.now())

    supplier_materials = relationship("SupplierMaterial", back_populates="material")


class SupplierMaterial(Base):
    """
    One supplier's offer for a material.
    unit_price = bulk_price / quantity_for_bulk_price, priced per capacity_unit basis (kg or L).
    """

    __tablename__ = "supplier_materials"

    id = Column(String(20), primary_key=True,
                default=lambda: generate_custom_id("SMT"))
    supplier_id = Column(String(20), ForeignKey("suppliers.id", ondelete="RESTRICT"), nullable=False, index=True)
    material_id = Column(String(20), ForeignKey("materials.id", ondelete="RESTRICT"), nullable=False, index=True)
    unit_price = Column(Float, nullable=False, default=0)
    bulk_price = Column(Float, nullable=False, default=0)
    quantity_for_bulk_price = Column(Float, nullable=False, default=1)
    capacity_unit = Column(String(10), nullable=False, default="kg")
    tax = Column(Float, nullable=False, default=0)  # percent
    moq = Column(Float, nullable=True)
    lead_time = Column(Integer, nullable=True)  # days
    transportation_cost = Column(Float, nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True),
                        server_default=func.now(), onupdate=func.now())

    supplier = relationship("Supplier")
    material = relationship("Material", back_populates="supplier_materials")
