"""
Recipe models: Recipe, RecipeIngredient, RecipeVariant.
A recipe lists supplier materials with quantities; its cost per kg is always derived, never stored.
A recipe variant is an immutable snapshot of an ingredient list used for cost experiments.
"""

import enum

from sqlalchemy import JSON, Boolean, Column, DateTime, Enum, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from mfgops.core.database import Base
from mfgops.models.common import enum_values, generate_custom_id


class RecipeStatus(str, enum.Enum):
    DRAFT = "draft"
    TESTING = "testing"
    ACTIVE = "active"
    ARCHIVED = "archived"
    DISCONTINUED = "discontinued"


class Recipe(Base):
    __tablename__ = "recipes"

    id = Column(String(20), primary_key=True, default=lambda: generate_custom_id("RCP"))
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    target_cost_per_kg = Column(Float, nullable=True)
    status = Column(Enum(RecipeStatus, values_callable=enum_values), nullable=False, default=RecipeStatus.DRAFT)
    version = Column(Integer, nullable=False, default=1)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    ingredients = relationship(
        "RecipeIngredient",
        back_populates="recipe",
        cascade="all, delete-orphan",
        order_by="RecipeIngredient.position",
    )
    variants = relationship(
        "RecipeVariant",
        back_populates="original_recipe",
        cascade="all, delete-orphan",
    )


class RecipeIngredient(Base):
    """
    One ingredient line: quantity of a supplier material in gm/kg/ml/L.
    supplier_material_id is intentionally not a foreign key: a supplier material may be deleted
    while recipes still reference it, and costing then treats the line as zero.
    locked_pricing = {"unit_price", "tax", "locked_at", "reason", "notes"} or null.
    """

    __tablename__ = "recipe_ingredients"

    id = Column(String(20), primary_key=True, default=lambda: generate_custom_id("RIN"))
    recipe_id = Column(String(20), ForeignKey("recipes.id", ondelete="CASCADE"), nullable=False, index=True)
    supplier_material_id = Column(String(20), nullable=False, index=True)
    quantity = Column(Float, nullable=False)
    unit = Column(String(10), nullable=False)
    locked_pricing = Column(JSON, nullable=True)
    position = Column(Integer, nullable=False, default=0)
    notes = Column(Text, nullable=True)

    recipe = relationship("Recipe", back_populates="ingredients")


class RecipeVariant(Base):
    """
    ingredients_snapshot: [{"supplier_material_id", "quantity", "unit", "locked_pricing"}]
    changes: [{"type", "ingredient_name", "old_value", "new_value", "changed_at"}]
    """

    __tablename__ = "recipe_variants"

    id = Column(String(20), primary_key=True, default=lambda: generate_custom_id("RVR"))
    original_recipe_id = Column(String(20), ForeignKey("recipes.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    ingredients_snapshot = Column(JSON, nullable=False, default=list)
    changes = Column(JSON, nullable=False, default=list)
    optimization_goal = Column(String(50), nullable=True)  # cost_reduction, quality_improvement, ...
    is_active = Column(Boolean, nullable=False, default=True)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    original_recipe = relationship("Recipe", back_populates="variants")
