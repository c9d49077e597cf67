"""
Catalog service: packaging and label definitions and their supplier offers.
Definitions cannot be deleted while a supplier offers them; offers cannot be deleted while
a product variant selects them.
"""

from typing import List, Optional

from mfgops.common.exceptions import NotFoundError, ReferenceInUseError, ValidationError
from mfgops.logger_config import logger
from mfgops.models.label import Label, SupplierLabel
from mfgops.models.packaging import Packaging, SupplierPackaging
from mfgops.utils.text_utils import normalize_text
from mfgops.utils.unit_conversion import calculate_unit_price


def _check_unique_name(store, collection: str, name: str, exclude_id: Optional[str] = None) -> None:
    target = normalize_text(name)
    for row in store.get_all(collection):
        if row.id != exclude_id and normalize_text(row.name) == target:
            raise ValidationError(f'{store.entity_name(collection)} "{name.strip()}" already exists')


def _create_definition(store, collection: str, data: dict):
    if not (data.get("name") or "").strip():
        raise ValidationError(f"{store.entity_name(collection)} name is required")
    _check_unique_name(store, collection, data["name"])
    record_id = store.add(collection, {**data, "name": data["name"].strip()})
    logger.info(f"{store.entity_name(collection)} created: {record_id}")
    return store.get(collection, record_id)


def _update_definition(store, collection: str, record_id: str, data: dict):
    store.require(collection, record_id)
    if data.get("name") is not None:
        _check_unique_name(store, collection, data["name"], exclude_id=record_id)
        data = {**data, "name": data["name"].strip()}
    row = store.update(collection, record_id, data)
    logger.info(f"{store.entity_name(collection)} updated: {record_id}")
    return row


def _create_offer(store, collection: str, ref_field: str, ref_collection: str, data: dict):
    """Shared create for supplier packaging / labels: validates refs, rejects identical offers."""
    if store.get("suppliers", data.get("supplier_id")) is None:
        raise NotFoundError("Supplier", data.get("supplier_id"))
    store.require(ref_collection, data.get(ref_field))
    if data.get("bulk_price") is None or data["bulk_price"] <= 0:
        raise ValidationError("Bulk price must be greater than 0")

    quantity = data.get("quantity_for_bulk_price") or 1
    for row in store.query(collection, ref_field, data[ref_field]):
        if (
            row.supplier_id == data["supplier_id"]
            and abs(row.bulk_price - data["bulk_price"]) < 1e-9
            and abs(row.quantity_for_bulk_price - quantity) < 1e-9
        ):
            raise ValidationError("This supplier already offers this item with the same specification")

    record_id = store.add(collection, {
        **data,
        "quantity_for_bulk_price": quantity,
        "unit_price": calculate_unit_price(data["bulk_price"], quantity),
    })
    logger.info(f"{store.entity_name(collection)} created: {record_id}")
    return store.get(collection, record_id)


def _update_offer(store, collection: str, record_id: str, data: dict):
    row = store.require(collection, record_id)
    data = dict(data)
    if "bulk_price" in data or "quantity_for_bulk_price" in data:
        bulk_price = data.get("bulk_price", row.bulk_price)
        quantity = data.get("quantity_for_bulk_price", row.quantity_for_bulk_price) or 1
        data["unit_price"] = calculate_unit_price(bulk_price, quantity)
    row = store.update(collection, record_id, data)
    logger.info(f"{store.entity_name(collection)} updated: {record_id} (unit_price={row.unit_price})")
    return row


def _variants_selecting(store, field: str, selection_id: str) -> list:
    return store.query("product_variants", field, selection_id)


# ============================================================================
# Packaging
# ============================================================================

def get_all_packaging(store) -> List[Packaging]:
    return store.get_all("packaging")


def create_packaging(store, data: dict) -> Packaging:
    return _create_definition(store, "packaging", data)


def update_packaging(store, packaging_id: str, data: dict) -> Packaging:
    return _update_definition(store, "packaging", packaging_id, data)


def delete_packaging(store, packaging_id: str) -> None:
    packaging = store.require("packaging", packaging_id)
    if store.query("supplier_packaging", "packaging_id", packaging_id):
        raise ReferenceInUseError(f'Cannot delete packaging "{packaging.name}": it is used by suppliers')
    store.delete("packaging", packaging_id)
    logger.info(f"Packaging deleted: {packaging_id}")


def get_all_supplier_packaging(store, packaging_id: Optional[str] = None) -> List[SupplierPackaging]:
    if packaging_id:
        return store.query("supplier_packaging", "packaging_id", packaging_id)
    return store.get_all("supplier_packaging")


def create_supplier_packaging(store, data: dict) -> SupplierPackaging:
    return _create_offer(store, "supplier_packaging", "packaging_id", "packaging", data)


def update_supplier_packaging(store, supplier_packaging_id: str, data: dict) -> SupplierPackaging:
    return _update_offer(store, "supplier_packaging", supplier_packaging_id, data)


def delete_supplier_packaging(store, supplier_packaging_id: str) -> None:
    store.require("supplier_packaging", supplier_packaging_id)
    if _variants_selecting(store, "packaging_selection_id", supplier_packaging_id):
        raise ReferenceInUseError("Cannot delete supplier packaging that is selected by a product variant")
    store.delete("supplier_packaging", supplier_packaging_id)
    logger.info(f"Supplier packaging deleted: {supplier_packaging_id}")


# ============================================================================
# Labels
# ============================================================================

def get_all_labels(store) -> List[Label]:
    return store.get_all("labels")


def create_label(store, data: dict) -> Label:
    return _create_definition(store, "labels", data)


def update_label(store, label_id: str, data: dict) -> Label:
    return _update_definition(store, "labels", label_id, data)


def delete_label(store, label_id: str) -> None:
    label = store.require("labels", label_id)
    if store.query("supplier_labels", "label_id", label_id):
        raise ReferenceInUseError(f'Cannot delete label "{label.name}": it is used by suppliers')
    store.delete("labels", label_id)
    logger.info(f"Label deleted: {label_id}")


def get_all_supplier_labels(store, label_id: Optional[str] = None) -> List[SupplierLabel]:
    if label_id:
        return store.query("supplier_labels", "label_id", label_id)
    return store.get_all("supplier_labels")


def create_supplier_label(store, data: dict) -> SupplierLabel:
    return _create_offer(store, "supplier_labels", "label_id", "labels", data)


def update_supplier_label(store, supplier_label_id: str, data: dict) -> SupplierLabel:
    return _update_offer(store, "supplier_labels", supplier_label_id, data)


def delete_supplier_label(store, supplier_label_id: str) -> None:
    store.require("supplier_labels", supplier_label_id)
    if (
        _variants_selecting(store, "front_label_selection_id", supplier_label_id)
        or _variants_selecting(store, "back_label_selection_id", supplier_label_id)
    ):
        raise ReferenceInUseError("Cannot delete supplier label that is selected by a product variant")
    store.delete("supplier_labels", supplier_label_id)
    logger.info(f"Supplier label deleted: {supplier_label_id}")
