"""
Purchase order service.

Status flow: draft -> submitted -> confirmed -> in-transit -> partially-delivered / delivered,
with cancelled reachable from every non-terminal status. Receiving goods moves the order to
partially-delivered or delivered on its own and posts the received quantities to tracked inventory.
"""

import copy
from datetime import date, datetime, timezone
from typing import Dict, List, Optional, Tuple

from mfgops.common.exceptions import InvalidTransitionError, NotFoundError, ValidationError
from mfgops.logger_config import logger
from mfgops.models.common import generate_custom_id
from mfgops.models.inventory import InventoryItemType
from mfgops.models.purchase_order import PurchaseOrder, PurchaseOrderItemType, PurchaseOrderStatus
from mfgops.schemas.purchase_order import OrderCompletion
from mfgops.schemas.requirements import RequirementItemType
from mfgops.services.batch_requirements import calculate_batch_requirements
from mfgops.services.inventory_service import adjust_stock, get_inventory_item_for
from mfgops.services.supplier_items import resolve_supplier_item
from mfgops.utils.unit_conversion import calculate_price_with_tax

NEXT_STATUSES = {
    PurchaseOrderStatus.DRAFT: {PurchaseOrderStatus.SUBMITTED, PurchaseOrderStatus.CANCELLED},
    PurchaseOrderStatus.SUBMITTED: {PurchaseOrderStatus.CONFIRMED, PurchaseOrderStatus.CANCELLED},
    PurchaseOrderStatus.CONFIRMED: {PurchaseOrderStatus.IN_TRANSIT, PurchaseOrderStatus.CANCELLED},
    PurchaseOrderStatus.IN_TRANSIT: {
        PurchaseOrderStatus.PARTIALLY_DELIVERED,
        PurchaseOrderStatus.DELIVERED,
        PurchaseOrderStatus.CANCELLED,
    },
    PurchaseOrderStatus.PARTIALLY_DELIVERED: {PurchaseOrderStatus.DELIVERED, PurchaseOrderStatus.CANCELLED},
    PurchaseOrderStatus.DELIVERED: set(),
    PurchaseOrderStatus.CANCELLED: set(),
}

RECEIVABLE_STATUSES = {
    PurchaseOrderStatus.CONFIRMED,
    PurchaseOrderStatus.IN_TRANSIT,
    PurchaseOrderStatus.PARTIALLY_DELIVERED,
}

ITEM_INVENTORY_TYPES = {
    PurchaseOrderItemType.MATERIAL: InventoryItemType.SUPPLIER_MATERIAL,
    PurchaseOrderItemType.PACKAGING: InventoryItemType.SUPPLIER_PACKAGING,
    PurchaseOrderItemType.LABEL: InventoryItemType.SUPPLIER_LABEL,
}

REQUIREMENT_ITEM_TYPES = {
    RequirementItemType.MATERIAL: PurchaseOrderItemType.MATERIAL,
    RequirementItemType.PACKAGING: PurchaseOrderItemType.PACKAGING,
    RequirementItemType.LABEL: PurchaseOrderItemType.LABEL,
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def generate_order_id(store, today: Optional[date] = None) -> str:
    """PO-YYYYMMDD-NNN, numbered per day."""
    prefix = f"PO-{(today or date.today()).strftime('%Y%m%d')}-"
    taken = [o.order_id for o in store.get_all("purchase_orders") if o.order_id.startswith(prefix)]
    sequence = max((int(o[len(prefix):]) for o in taken if o[len(prefix):].isdigit()), default=0) + 1
    return f"{prefix}{sequence:03d}"


def can_transition(current: PurchaseOrderStatus, target: PurchaseOrderStatus) -> bool:
    return PurchaseOrderStatus(target) in NEXT_STATUSES[PurchaseOrderStatus(current)]


def line_total(quantity: float, unit_price: float, tax: float) -> float:
    return quantity * calculate_price_with_tax(unit_price, tax)


def _build_lines(store, supplier_id: str, items: List[dict]) -> Tuple[List[dict], float]:
    """Priced order lines; every item must be sold by the order's supplier."""
    lines = []
    for raw in items:
        item_type = PurchaseOrderItemType(raw["item_type"])
        quantity = raw.get("quantity") or 0
        if quantity <= 0:
            raise ValidationError("Order quantity must be greater than 0")

        info = resolve_supplier_item(store, ITEM_INVENTORY_TYPES[item_type], raw["item_id"])
        if info is None:
            raise NotFoundError(f"Supplier {item_type.value}", raw["item_id"])
        if info.supplier_id != supplier_id:
            raise ValidationError(f'"{info.name}" is not supplied by this supplier')

        unit_price = info.unit_price if raw.get("unit_price") is None else raw["unit_price"]
        tax = info.tax if raw.get("tax") is None else raw["tax"]
        if unit_price < 0 or tax < 0:
            raise ValidationError("Unit price and tax cannot be negative")

        lines.append({
            "id": generate_custom_id("POL", 6),
            "item_type": item_type.value,
            "item_id": info.item_id,
            "item_name": info.name,
            "quantity": quantity,
            "quantity_received": 0,
            "unit": raw.get("unit") or info.unit,
            "unit_price": unit_price,
            "tax": tax,
            "total_cost": line_total(quantity, unit_price, tax),
        })
    return lines, sum(line["total_cost"] for line in lines)


def get_purchase_order_by_id(store, purchase_order_id: str) -> Optional[PurchaseOrder]:
    return store.get("purchase_orders", purchase_order_id)


def get_all_purchase_orders(
    store,
    skip: int = 0,
    limit: int = 100,
    status: Optional[str] = None,
    supplier_id: Optional[str] = None,
    batch_id: Optional[str] = None,
) -> Tuple[List[PurchaseOrder], int]:
    orders = store.get_all("purchase_orders")
    if status:
        orders = [o for o in orders if o.status == status]
    if supplier_id:
        orders = [o for o in orders if o.supplier_id == supplier_id]
    if batch_id:
        orders = [o for o in orders if o.batch_id == batch_id]
    total = len(orders)
    return orders[skip:skip + limit], total


def create_purchase_order(
    store,
    supplier_id: str,
    items: List[dict],
    expected_delivery_date: Optional[date] = None,
    batch_id: Optional[str] = None,
    notes: Optional[str] = None,
) -> PurchaseOrder:
    store.require("suppliers", supplier_id)
    if not items:
        raise ValidationError("A purchase order needs at least one item")
    if batch_id:
        store.require("production_batches", batch_id)

    lines, total_cost = _build_lines(store, supplier_id, items)
    purchase_order_id = store.add("purchase_orders", {
        "order_id": generate_order_id(store),
        "supplier_id": supplier_id,
        "items": lines,
        "status": PurchaseOrderStatus.DRAFT,
        "total_cost": total_cost,
        "batch_id": batch_id,
        "expected_delivery_date": expected_delivery_date,
        "notes": notes,
    })
    order = store.get("purchase_orders", purchase_order_id)
    logger.info(f"Purchase order created: {order.order_id} ({len(lines)} line(s), total={total_cost:.2f})")
    return order


def update_purchase_order(store, purchase_order_id: str, data: dict) -> PurchaseOrder:
    order = store.require("purchase_orders", purchase_order_id)
    if order.status != PurchaseOrderStatus.DRAFT:
        raise ValidationError(f"Only draft orders can be edited (order is {PurchaseOrderStatus(order.status).value})")

    data = dict(data)
    if data.get("items") is not None:
        data["items"], data["total_cost"] = _build_lines(store, order.supplier_id, data["items"])
    else:
        data.pop("items", None)
    order = store.update("purchase_orders", purchase_order_id, data)
    logger.info(f"Purchase order updated: {order.order_id}")
    return order


def update_purchase_order_status(store, purchase_order_id: str, status: str) -> PurchaseOrder:
    order = store.require("purchase_orders", purchase_order_id)
    current = PurchaseOrderStatus(order.status)
    target = PurchaseOrderStatus(status)
    if not can_transition(current, target):
        raise InvalidTransitionError(f"Cannot move purchase order from {current.value} to {target.value}")

    partial = {"status": target}
    if target == PurchaseOrderStatus.SUBMITTED:
        partial["date_submitted"] = _utcnow()
    if target == PurchaseOrderStatus.DELIVERED:
        partial["actual_delivery_date"] = _utcnow()
    order = store.update("purchase_orders", purchase_order_id, partial)
    logger.info(f"Purchase order {order.order_id}: {current.value} -> {target.value}")
    return order


def receive_items(store, purchase_order_id: str, received: Dict[str, float]) -> PurchaseOrder:
    """
    Record received quantities per line id, post them to tracked inventory, and move the order
    to delivered (every line complete) or partially-delivered.
    """
    order = store.require("purchase_orders", purchase_order_id)
    current = PurchaseOrderStatus(order.status)
    if current not in RECEIVABLE_STATUSES:
        raise InvalidTransitionError(f"Cannot receive items for an order that is {current.value}")

    lines = copy.deepcopy(order.items or [])
    by_id = {line["id"]: line for line in lines}
    unknown = [line_id for line_id in received if line_id not in by_id]
    if unknown:
        raise ValidationError(f"Unknown order line(s): {', '.join(unknown)}")

    with store.transaction():
        for line_id, quantity in received.items():
            if quantity <= 0:
                raise ValidationError("Received quantity must be greater than 0")
            line = by_id[line_id]
            line["quantity_received"] = (line.get("quantity_received") or 0) + quantity

            inventory_type = ITEM_INVENTORY_TYPES[PurchaseOrderItemType(line["item_type"])]
            inventory_item = get_inventory_item_for(store, inventory_type, line["item_id"])
            if inventory_item is None:
                logger.warning(f"{order.order_id}: {line['item_name']} is not tracked in inventory, stock not updated")
                continue
            adjust_stock(
                store,
                inventory_item.id,
                quantity,
                reason="Purchase Order",
                reference=order.order_id,
            )

        complete = all((line.get("quantity_received") or 0) >= line["quantity"] for line in lines)
        partial = {"items": lines}
        if complete:
            partial["status"] = PurchaseOrderStatus.DELIVERED
            partial["actual_delivery_date"] = _utcnow()
        else:
            partial["status"] = PurchaseOrderStatus.PARTIALLY_DELIVERED
        order = store.update("purchase_orders", purchase_order_id, partial)

    logger.info(f"Purchase order {order.order_id} received {len(received)} line(s) -> {partial['status'].value}")
    return order


def calculate_order_completion(order: PurchaseOrder) -> OrderCompletion:
    ordered = sum(line.get("quantity") or 0 for line in order.items or [])
    received = sum(line.get("quantity_received") or 0 for line in order.items or [])
    return OrderCompletion(
        order_id=order.order_id,
        ordered_quantity=ordered,
        received_quantity=received,
        completion_percentage=min(received / ordered * 100, 100) if ordered > 0 else 0,
    )


def delete_purchase_order(store, purchase_order_id: str) -> None:
    order = store.require("purchase_orders", purchase_order_id)
    if order.status not in (PurchaseOrderStatus.DRAFT, PurchaseOrderStatus.CANCELLED):
        raise ValidationError("Only draft or cancelled orders can be deleted")
    store.delete("purchase_orders", purchase_order_id)
    logger.info(f"Purchase order deleted: {order.order_id}")


def create_orders_from_requirements(store, batch_id: str, shortages_only: bool = True) -> List[PurchaseOrder]:
    """
    One draft order per supplier for a batch. With shortages_only the lines carry the shortage
    quantity and untracked items are left out; otherwise the full requirement is ordered.
    """
    batch = store.require("production_batches", batch_id)
    analysis = calculate_batch_requirements(store, batch)

    per_supplier: Dict[str, List[dict]] = {}
    for requirement in analysis.materials + analysis.packaging + analysis.labels:
        quantity = requirement.shortage if shortages_only else requirement.required_quantity
        if quantity <= 0:
            continue
        per_supplier.setdefault(requirement.supplier_id, []).append({
            "item_type": REQUIREMENT_ITEM_TYPES[requirement.item_type],
            "item_id": requirement.item_id,
            "quantity": quantity,
            "unit": requirement.unit,
        })

    orders = []
    with store.transaction():
        for supplier_id, items in per_supplier.items():
            orders.append(create_purchase_order(
                store,
                supplier_id,
                items,
                batch_id=batch_id,
                notes=f"Generated from batch {batch.batch_name}",
            ))
    logger.info(f"Batch {batch_id}: {len(orders)} purchase order(s) generated (shortages_only={shortages_only})")
    return orders
