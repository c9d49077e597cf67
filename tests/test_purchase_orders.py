import re
from datetime import date

import pytest

from mfgops.common.exceptions import InvalidTransitionError, NotFoundError, ValidationError
from mfgops.models.inventory import InventoryItemType
from mfgops.models.purchase_order import PurchaseOrderStatus
from mfgops.services.batch_service import create_batch
from mfgops.services.inventory_service import create_inventory_item, list_transactions
from mfgops.services.purchase_order_service import (
    calculate_order_completion,
    can_transition,
    create_orders_from_requirements,
    create_purchase_order,
    delete_purchase_order,
    generate_order_id,
    receive_items,
    update_purchase_order,
    update_purchase_order_status,
)


def _order(store, supplier, catalogue, quantity=10):
    return create_purchase_order(store, supplier.id, [
        {"item_type": "material", "item_id": catalogue["material_a"].id, "quantity": quantity},
    ])


def _confirm(store, order):
    update_purchase_order_status(store, order.id, "submitted")
    return update_purchase_order_status(store, order.id, "confirmed")


def test_order_ids_are_numbered_per_day(store, supplier, catalogue):
    first = _order(store, supplier, catalogue)
    second = _order(store, supplier, catalogue)
    assert re.fullmatch(r"PO-\d{8}-001", first.order_id)
    assert second.order_id.endswith("-002")
    assert generate_order_id(store, today=date(2026, 1, 2)) == "PO-20260102-001"


def test_lines_default_to_supplier_price(store, supplier, catalogue):
    order = _order(store, supplier, catalogue)
    [line] = order.items
    assert (line["unit_price"], line["tax"], line["unit"]) == (20, 5, "kg")
    assert line["total_cost"] == pytest.approx(210)
    assert order.total_cost == pytest.approx(210)
    assert order.status == PurchaseOrderStatus.DRAFT


def test_items_must_come_from_the_order_supplier(store, other_supplier, catalogue):
    with pytest.raises(ValidationError):
        _order(store, other_supplier, catalogue)
    with pytest.raises(NotFoundError):
        create_purchase_order(store, other_supplier.id, [{"item_type": "label", "item_id": "SLB-NOPE", "quantity": 1}])


def test_status_flow(store, supplier, catalogue):
    assert can_transition(PurchaseOrderStatus.DRAFT, PurchaseOrderStatus.SUBMITTED)
    assert not can_transition(PurchaseOrderStatus.DELIVERED, PurchaseOrderStatus.CANCELLED)

    order = _order(store, supplier, catalogue)
    with pytest.raises(InvalidTransitionError):
        update_purchase_order_status(store, order.id, "confirmed")
    order = update_purchase_order_status(store, order.id, "submitted")
    assert order.date_submitted is not None
    with pytest.raises(ValidationError):
        update_purchase_order(store, order.id, {"notes": "too late"})
    with pytest.raises(ValidationError):
        delete_purchase_order(store, order.id)
    update_purchase_order_status(store, order.id, "cancelled")
    delete_purchase_order(store, order.id)
    assert store.get("purchase_orders", order.id) is None


def test_draft_edit_reprices(store, supplier, catalogue):
    order = _order(store, supplier, catalogue)
    order = update_purchase_order(store, order.id, {"items": [
        {"item_type": "packaging", "item_id": catalogue["bottle"].id, "quantity": 100, "unit_price": 1.5},
    ]})
    assert order.total_cost == pytest.approx(150)
    assert order.items[0]["unit"] == "pcs"


def test_receiving_updates_tracked_stock(store, supplier, catalogue):
    item = create_inventory_item(store, InventoryItemType.SUPPLIER_MATERIAL, catalogue["material_a"].id, current_stock=5, min_stock_level=1)
    order = _confirm(store, _order(store, supplier, catalogue))
    line_id = order.items[0]["id"]

    with pytest.raises(ValidationError):
        receive_items(store, order.id, {"POL-UNKNOWN": 1})

    order = receive_items(store, order.id, {line_id: 4})
    assert order.status == PurchaseOrderStatus.PARTIALLY_DELIVERED
    assert calculate_order_completion(order).completion_percentage == pytest.approx(40)
    assert store.get("inventory_items", item.id).current_stock == pytest.approx(9)

    order = receive_items(store, order.id, {line_id: 6})
    assert order.status == PurchaseOrderStatus.DELIVERED
    assert order.actual_delivery_date is not None
    assert calculate_order_completion(order).completion_percentage == pytest.approx(100)
    assert store.get("inventory_items", item.id).current_stock == pytest.approx(15)
    assert {t.reference for t in list_transactions(store, item.id) if t.reason == "Purchase Order"} == {order.order_id}

    with pytest.raises(InvalidTransitionError):
        receive_items(store, order.id, {line_id: 1})


def test_receiving_before_confirmation_is_rejected(store, supplier, catalogue):
    order = _order(store, supplier, catalogue)
    with pytest.raises(InvalidTransitionError):
        receive_items(store, order.id, {order.items[0]["id"]: 1})


def test_orders_from_batch_shortages(store, supplier, product, litre_variant, catalogue):
    create_inventory_item(store, InventoryItemType.SUPPLIER_MATERIAL, catalogue["material_a"].id, current_stock=2, min_stock_level=1)
    batch = create_batch(store, {
        "batch_name": "Lotion run",
        "items": [{
            "product_id": product.id,
            "variants": [{"variant_id": litre_variant.id, "total_fill_quantity": 10, "fill_unit": "kg"}],
        }],
    })

    [order] = create_orders_from_requirements(store, batch.id)
    assert order.batch_id == batch.id
    assert order.status == PurchaseOrderStatus.DRAFT
    # only the tracked material is short: 5 kg needed, 2 kg in stock
    [line] = order.items
    assert line["item_id"] == catalogue["material_a"].id
    assert line["quantity"] == pytest.approx(3)

    [full] = create_orders_from_requirements(store, batch.id, shortages_only=False)
    assert len(full.items) == 5
