import enum

from sqlalchemy import Boolean, Column, DateTime, Enum, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from mfgops.core.database import Base
from mfgops.models.common import enum_values, generate_custom_id
from mfgops.schemas.recipe_ref import RecipeRef


class ProductStatus(str, enum.Enum):
    DRAFT = "draft"
    ACTIVE = "active"
    DISCONTINUED = "discontinued"


class Product(Base):
    """
    A product family. recipe_id points at a Recipe, or at a RecipeVariant when is_recipe_variant is set.
    Consumers go through `recipe_ref` instead of branching on the flag.
    """

    __tablename__ = "products"

    id = Column(String(20), primary_key=True, default=lambda: generate_custom_id("PRD"))
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    recipe_id = Column(String(20), nullable=False, index=True)
    is_recipe_variant = Column(Boolean, nullable=False, default=False)
    status = Column(Enum(ProductStatus, values_callable=enum_values), nullable=False, default=ProductStatus.DRAFT)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    variants = relationship(
        "ProductVariant",
        back_populates="product",
        cascade="all, delete-orphan",
    )

    @property
    def recipe_ref(self):
        return RecipeRef(kind="variant" if self.is_recipe_variant else "recipe", id=self.recipe_id)


class ProductVariant(Base):
    """A packaged size / SKU. fill_quantity + fill_unit is the size of one unit (e.g. 1000 gm)."""

    __tablename__ = "product_variants"

    id = Column(String(20), primary_key=True, default=lambda: generate_custom_id("PVR"))
    product_id = Column(String(20), ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    sku = Column(String(100), nullable=True, unique=True)
    fill_quantity = Column(Float, nullable=False)
    fill_unit = Column(String(10), nullable=False)
    packaging_selection_id = Column(String(20), nullable=True)
    front_label_selection_id = Column(String(20), nullable=True)
    back_label_selection_id = Column(String(20), nullable=True)
    labels_per_unit = Column(Integer, nullable=False, default=1)
    selling_price_per_unit = Column(Float, nullable=False, default=0)
    minimum_profit_margin = Column(Float, nullable=True)  # percent
    is_active = Column(Boolean, nullable=False, default=True)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    product = relationship("Product", back_populates="variants")
