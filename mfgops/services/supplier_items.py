"""
Uniform view over supplier materials, packaging and labels, keyed by inventory item type.
"""

from typing import List, Optional

from mfgops.models.inventory import InventoryItemType
from mfgops.schemas.inventory import SupplierItemInfo
from mfgops.utils.unit_conversion import base_unit, is_convertible

SUPPLIER_ITEM_COLLECTIONS = {
    InventoryItemType.SUPPLIER_MATERIAL: "supplier_materials",
    InventoryItemType.SUPPLIER_PACKAGING: "supplier_packaging",
    InventoryItemType.SUPPLIER_LABEL: "supplier_labels",
}


def _describe(item_type: InventoryItemType, row) -> SupplierItemInfo:
    if item_type == InventoryItemType.SUPPLIER_MATERIAL:
        name = row.material.name if row.material else row.material_id
        unit = base_unit(row.capacity_unit) if is_convertible(row.capacity_unit) else "kg"
    elif item_type == InventoryItemType.SUPPLIER_PACKAGING:
        name = row.packaging.name if row.packaging else row.packaging_id
        unit = "pcs"
    else:
        name = row.label.name if row.label else row.label_id
        unit = row.unit or "pcs"

    return SupplierItemInfo(
        item_type=item_type,
        item_id=row.id,
        name=name,
        supplier_id=row.supplier_id,
        supplier_name=row.supplier.name if row.supplier else "Unknown supplier",
        unit=unit,
        unit_price=row.unit_price or 0,
        tax=row.tax or 0,
    )


def resolve_supplier_item(store, item_type: InventoryItemType, item_id: str) -> Optional[SupplierItemInfo]:
    row = store.get(SUPPLIER_ITEM_COLLECTIONS[InventoryItemType(item_type)], item_id)
    if row is None:
        return None
    return _describe(InventoryItemType(item_type), row)


def list_supplier_items(store) -> List[SupplierItemInfo]:
    """Every supplier item of every type, materials first."""
    items = []
    for item_type, collection in SUPPLIER_ITEM_COLLECTIONS.items():
        items.extend(_describe(item_type, row) for row in store.get_all(collection))
    return items
