"""
Pydantic types for batch requirements: what to buy, from whom, for which product, and what is short.
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class RequirementItemType(str, Enum):
    MATERIAL = "material"
    PACKAGING = "packaging"
    LABEL = "label"


class LabelSide(str, Enum):
    FRONT = "front"
    BACK = "back"


class RequirementItem(BaseModel):
    """
    One requirement line. item_id is the supplier item id (supplier material / packaging / label).
    cost is pre-tax (quantity x unit price); total_cost includes tax.
    Material lines use a locked ingredient price when there is one (is_locked).
    """

    item_type: RequirementItemType
    item_id: str
    item_name: str
    supplier_id: str
    supplier_name: str
    required_quantity: float
    unit: str
    unit_price: float
    tax: float
    cost: float
    total_cost: float
    is_locked: bool = False
    available_stock: Optional[float] = None
    shortage: float = 0
    has_inventory: bool = False
    label_type: Optional[LabelSide] = None
    product_id: Optional[str] = None
    variant_id: Optional[str] = None

    @property
    def key(self):
        return (self.item_type, self.item_id, self.supplier_id)


class SupplierRequirement(BaseModel):
    supplier_id: str
    supplier_name: str
    materials: List[RequirementItem] = Field(default_factory=list)
    packaging: List[RequirementItem] = Field(default_factory=list)
    labels: List[RequirementItem] = Field(default_factory=list)
    total_cost: float = 0
    item_count: int = 0
    shortage_count: int = 0


class VariantRequirements(BaseModel):
    variant_id: str
    variant_name: str
    units: int
    fill_in_kg: float
    materials: List[RequirementItem] = Field(default_factory=list)
    packaging: List[RequirementItem] = Field(default_factory=list)
    labels: List[RequirementItem] = Field(default_factory=list)
    total_cost: float = 0


class ProductRequirements(BaseModel):
    product_id: str
    product_name: str
    variants: List[VariantRequirements] = Field(default_factory=list)
    total_units: int = 0
    total_cost: float = 0


class RequirementsOverview(BaseModel):
    total_items: int = 0
    total_cost: float = 0
    supplier_count: int = 0
    shortage_count: int = 0
    material_count: int = 0
    packaging_count: int = 0
    label_count: int = 0
    materials_cost: float = 0
    packaging_cost: float = 0
    labels_cost: float = 0


class BatchRequirementsAnalysis(BaseModel):
    batch_id: str
    batch_name: str
    overview: RequirementsOverview
    materials: List[RequirementItem] = Field(default_factory=list)
    packaging: List[RequirementItem] = Field(default_factory=list)
    labels: List[RequirementItem] = Field(default_factory=list)
    by_supplier: List[SupplierRequirement] = Field(default_factory=list)
    by_product: List[ProductRequirements] = Field(default_factory=list)
    critical_shortages: List[RequirementItem] = Field(default_factory=list)
    items_without_inventory: List[RequirementItem] = Field(default_factory=list)
