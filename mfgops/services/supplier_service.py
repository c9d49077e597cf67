"""
Supplier service: CRUD for suppliers.
A supplier cannot be deleted while any of its material, packaging or label offers exist.
"""

from typing import List, Optional, Tuple

from mfgops.common.exceptions import ReferenceInUseError, ValidationError
from mfgops.logger_config import logger
from mfgops.models.supplier import Supplier
from mfgops.utils.text_utils import normalize_text


def get_supplier_by_id(store, supplier_id: str) -> Optional[Supplier]:
    return store.get("suppliers", supplier_id)


def get_all_suppliers(
    store,
    skip: int = 0,
    limit: int = 100,
    search: Optional[str] = None,
    active_only: bool = False,
) -> Tuple[List[Supplier], int]:
    suppliers = store.get_all("suppliers")
    if active_only:
        suppliers = [s for s in suppliers if s.is_active]
    if search:
        term = normalize_text(search)
        suppliers = [
            s for s in suppliers
            if term in normalize_text(s.name) or term in normalize_text(s.address)
        ]
    total = len(suppliers)
    return suppliers[skip:skip + limit], total


def _check_duplicate_name(store, name: str, exclude_id: Optional[str] = None) -> None:
    target = normalize_text(name)
    for supplier in store.get_all("suppliers"):
        if supplier.id != exclude_id and normalize_text(supplier.name) == target:
            raise ValidationError(f'Supplier "{name}" already exists')


def create_supplier(store, data: dict) -> Supplier:
    """data: SupplierCreate fields (contact_persons as plain dicts)."""
    if not (data.get("name") or "").strip():
        raise ValidationError("Supplier name is required")
    _check_duplicate_name(store, data["name"])
    data = {**data, "name": data["name"].strip()}
    supplier_id = store.add("suppliers", data)
    logger.info(f"Supplier created: {supplier_id} ({data['name']})")
    return store.get("suppliers", supplier_id)


def update_supplier(store, supplier_id: str, data: dict) -> Supplier:
    store.require("suppliers", supplier_id)
    if "name" in data:
        if not (data["name"] or "").strip():
            raise ValidationError("Supplier name is required")
        _check_duplicate_name(store, data["name"], exclude_id=supplier_id)
    supplier = store.update("suppliers", supplier_id, data)
    logger.info(f"Supplier updated: {supplier_id}")
    return supplier


def delete_supplier(store, supplier_id: str) -> None:
    supplier = store.require("suppliers", supplier_id)
    in_use = (
        store.query("supplier_materials", "supplier_id", supplier_id)
        or store.query("supplier_packaging", "supplier_id", supplier_id)
        or store.query("supplier_labels", "supplier_id", supplier_id)
    )
    if in_use:
        raise ReferenceInUseError(
            f'Cannot delete supplier "{supplier.name}": it still has materials, packaging or labels'
        )
    if store.query("purchase_orders", "supplier_id", supplier_id):
        raise ReferenceInUseError(f'Cannot delete supplier "{supplier.name}": it has purchase orders')
    store.delete("suppliers", supplier_id)
    logger.info(f"Supplier deleted: {supplier_id}")
