"""
Inventory service: stock levels for supplier items, the transaction ledger and status alerts.

Every stock change appends exactly one transaction, then the status is derived from the
post-transaction stock, then alerts are refreshed (old unresolved alert resolved, new one added).
All three happen in one store transaction.
"""

from datetime import datetime, timezone
from typing import List, Optional

from mfgops.common.exceptions import NotFoundError, ValidationError
from mfgops.core.config import settings
from mfgops.logger_config import logger
from mfgops.models.inventory import (
    AlertSeverity,
    InventoryAlert,
    InventoryItem,
    InventoryItemType,
    InventoryStatus,
    InventoryTransaction,
    TransactionType,
)
from mfgops.schemas.inventory import InventoryItemDetail, InventoryStats, SupplierItemInfo
from mfgops.services.supplier_items import list_supplier_items, resolve_supplier_item
from mfgops.utils.unit_conversion import calculate_price_with_tax

SEVERITY_BY_STATUS = {
    InventoryStatus.OUT_OF_STOCK: AlertSeverity.CRITICAL,
    InventoryStatus.LOW_STOCK: AlertSeverity.WARNING,
    InventoryStatus.OVERSTOCK: AlertSeverity.INFO,
}


def calculate_status(current_stock: float, min_stock_level: float, max_stock_level: Optional[float] = None) -> InventoryStatus:
    """Strict comparisons: stock == min is in-stock, stock == max is in-stock."""
    if current_stock <= 0:
        return InventoryStatus.OUT_OF_STOCK
    if current_stock < (min_stock_level or 0):
        return InventoryStatus.LOW_STOCK
    if max_stock_level is not None and current_stock > max_stock_level:
        return InventoryStatus.OVERSTOCK
    return InventoryStatus.IN_STOCK


def build_alert_message(status: InventoryStatus, item: InventoryItem) -> str:
    name = item.item_name or item.item_id
    if status == InventoryStatus.OUT_OF_STOCK:
        return f"{name} is out of stock"
    if status == InventoryStatus.LOW_STOCK:
        return f"{name} is running low ({item.current_stock:g} {item.unit}, minimum {item.min_stock_level:g})"
    return f"{name} is overstocked ({item.current_stock:g} {item.unit}, maximum {item.max_stock_level:g})"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _newest_first(rows: list) -> list:
    # SQLite hands back naive datetimes while fresh rows still hold aware ones
    return sorted(
        rows,
        key=lambda r: r.created_at.replace(tzinfo=None) if r.created_at else datetime.min,
        reverse=True,
    )


# ----------------------------------------------------------------------
# Alerts
# ----------------------------------------------------------------------

def get_unresolved_alerts(store, inventory_item_id: str) -> List[InventoryAlert]:
    return [a for a in store.query("inventory_alerts", "inventory_item_id", inventory_item_id) if not a.is_resolved]


def refresh_alerts(store, item: InventoryItem) -> Optional[InventoryAlert]:
    """
    Supersede outstanding alerts for the item and add one for its current status.
    in-stock adds nothing. Returns the new alert, if any.
    """
    with store.transaction():
        for alert in get_unresolved_alerts(store, item.id):
            store.update("inventory_alerts", alert.id, {"is_resolved": True, "resolved_at": _utcnow()})

        severity = SEVERITY_BY_STATUS.get(item.status)
        if severity is None:
            return None

        alert_id = store.add("inventory_alerts", {
            "inventory_item_id": item.id,
            "alert_type": item.status,
            "severity": severity,
            "message": build_alert_message(item.status, item),
        })
    logger.info(f"Inventory alert {alert_id} ({item.status.value}) for item {item.id}")
    return store.get("inventory_alerts", alert_id)


def list_alerts(store, include_resolved: bool = False, inventory_item_id: Optional[str] = None) -> List[InventoryAlert]:
    """Newest first."""
    if inventory_item_id:
        alerts = store.query("inventory_alerts", "inventory_item_id", inventory_item_id)
    else:
        alerts = store.get_all("inventory_alerts")
    if not include_resolved:
        alerts = [a for a in alerts if not a.is_resolved]
    return _newest_first(alerts)


def mark_alert_read(store, alert_id: str) -> InventoryAlert:
    alert = store.update("inventory_alerts", alert_id, {"is_read": True})
    logger.info(f"Inventory alert marked read: {alert_id}")
    return alert


def mark_all_alerts_read(store) -> int:
    unread = [a for a in store.get_all("inventory_alerts") if not a.is_read and not a.is_resolved]
    with store.transaction():
        for alert in unread:
            store.update("inventory_alerts", alert.id, {"is_read": True})
    logger.info(f"Marked {len(unread)} inventory alerts read")
    return len(unread)


def resolve_alert(store, alert_id: str) -> InventoryAlert:
    alert = store.update("inventory_alerts", alert_id, {"is_resolved": True, "resolved_at": _utcnow()})
    logger.info(f"Inventory alert resolved: {alert_id}")
    return alert


def sweep_alerts(store) -> int:
    """
    Recompute the status of every tracked item and generate alerts for items that need one
    and have none outstanding. Returns the number of alerts created.
    """
    created = 0
    with store.transaction():
        for item in store.get_all("inventory_items"):
            status = calculate_status(item.current_stock, item.min_stock_level, item.max_stock_level)
            if status != item.status:
                store.update("inventory_items", item.id, {"status": status})
            if status not in SEVERITY_BY_STATUS:
                continue
            outstanding = get_unresolved_alerts(store, item.id)
            if any(a.alert_type == status for a in outstanding):
                continue
            if refresh_alerts(store, item) is not None:
                created += 1
    logger.info(f"Inventory alert sweep created {created} alerts")
    return created


# ----------------------------------------------------------------------
# Items
# ----------------------------------------------------------------------

def get_inventory_item(store, inventory_item_id: str) -> Optional[InventoryItem]:
    return store.get("inventory_items", inventory_item_id)


def get_inventory_item_for(store, item_type: InventoryItemType, item_id: str) -> Optional[InventoryItem]:
    """The tracked inventory row for a supplier item, or None when untracked."""
    for item in store.query("inventory_items", "item_id", item_id):
        if item.item_type == item_type:
            return item
    return None


def create_inventory_item(
    store,
    item_type: InventoryItemType,
    item_id: str,
    current_stock: float = 0,
    min_stock_level: Optional[float] = None,
    max_stock_level: Optional[float] = None,
    unit: Optional[str] = None,
    notes: Optional[str] = None,
) -> InventoryItem:
    """Start tracking a supplier item. Initial stock > 0 is recorded as an "Initial Stock" transaction."""
    item_type = InventoryItemType(item_type)
    info = resolve_supplier_item(store, item_type, item_id)
    if info is None:
        raise NotFoundError("Supplier item", item_id)
    if get_inventory_item_for(store, item_type, item_id) is not None:
        raise ValidationError(f"Inventory is already tracked for {info.name}")
    if current_stock < 0:
        raise ValidationError("Initial stock cannot be negative")

    if min_stock_level is None:
        min_stock_level = settings.DEFAULT_MIN_STOCK_LEVEL
    if max_stock_level is not None and max_stock_level < min_stock_level:
        raise ValidationError("Maximum stock level must be greater than or equal to minimum stock level")

    status = calculate_status(current_stock, min_stock_level, max_stock_level)
    with store.transaction():
        inventory_item_id = store.add("inventory_items", {
            "item_type": item_type,
            "item_id": item_id,
            "item_name": info.name,
            "supplier_id": info.supplier_id,
            "current_stock": current_stock,
            "min_stock_level": min_stock_level,
            "max_stock_level": max_stock_level,
            "unit": unit or info.unit,
            "status": status,
            "notes": notes,
        })
        if current_stock > 0:
            store.add("inventory_transactions", {
                "inventory_item_id": inventory_item_id,
                "type": TransactionType.IN,
                "quantity": current_stock,
                "reason": "Initial Stock",
                "stock_before": 0,
                "stock_after": current_stock,
            })
        item = store.get("inventory_items", inventory_item_id)
        refresh_alerts(store, item)

    logger.info(f"Inventory item created: {inventory_item_id} for {item_type.value} {item_id} (stock={current_stock})")
    return item


def update_inventory_item(
    store,
    inventory_item_id: str,
    min_stock_level: Optional[float] = None,
    max_stock_level: Optional[float] = None,
    clear_max_stock_level: bool = False,
    unit: Optional[str] = None,
    notes: Optional[str] = None,
) -> InventoryItem:
    """Update thresholds/unit/notes. Threshold changes recompute status and alerts."""
    item = store.require("inventory_items", inventory_item_id)

    new_min = item.min_stock_level if min_stock_level is None else min_stock_level
    new_max = None if clear_max_stock_level else (item.max_stock_level if max_stock_level is None else max_stock_level)
    if new_min < 0 or (new_max is not None and new_max < 0):
        raise ValidationError("Stock levels cannot be negative")
    if new_max is not None and new_max < new_min:
        raise ValidationError("Maximum stock level must be greater than or equal to minimum stock level")

    thresholds_changed = new_min != item.min_stock_level or new_max != item.max_stock_level
    partial = {"min_stock_level": new_min, "max_stock_level": new_max}
    if unit is not None:
        partial["unit"] = unit
    if notes is not None:
        partial["notes"] = notes

    with store.transaction():
        if thresholds_changed:
            partial["status"] = calculate_status(item.current_stock, new_min, new_max)
        item = store.update("inventory_items", inventory_item_id, partial)
        if thresholds_changed:
            refresh_alerts(store, item)

    logger.info(f"Inventory item updated: {inventory_item_id}")
    return item


def delete_inventory_item(store, inventory_item_id: str) -> None:
    store.delete("inventory_items", inventory_item_id)
    logger.info(f"Inventory item deleted: {inventory_item_id}")


def _apply_stock_change(
    store,
    item: InventoryItem,
    new_stock: float,
    transaction_type: TransactionType,
    reason: str,
    reference: Optional[str],
    notes: Optional[str],
) -> InventoryItem:
    stock_before = item.current_stock
    with store.transaction():
        store.add("inventory_transactions", {
            "inventory_item_id": item.id,
            "type": transaction_type,
            "quantity": abs(new_stock - stock_before),
            "reason": reason,
            "reference": reference,
            "notes": notes,
            "stock_before": stock_before,
            "stock_after": new_stock,
        })
        item = store.update("inventory_items", item.id, {
            "current_stock": new_stock,
            "status": calculate_status(new_stock, item.min_stock_level, item.max_stock_level),
        })
        refresh_alerts(store, item)
    logger.info(
        f"Stock {transaction_type.value} for {item.id}: {stock_before:g} -> {new_stock:g} {item.unit} ({reason})"
    )
    return item


def adjust_stock(
    store,
    inventory_item_id: str,
    quantity: float,
    reason: str,
    reference: Optional[str] = None,
    notes: Optional[str] = None,
) -> InventoryItem:
    """Signed stock change. Positive writes an "in" transaction, negative an "out" one."""
    if not quantity:
        raise ValidationError("Adjustment quantity must be non-zero")
    if not reason or not reason.strip():
        raise ValidationError("Reason is required")

    item = store.require("inventory_items", inventory_item_id)
    new_stock = item.current_stock + quantity
    if new_stock < 0:
        raise ValidationError(
            f"Insufficient stock for {item.item_name or item.item_id}: "
            f"available {item.current_stock:g} {item.unit}, requested {abs(quantity):g}"
        )
    transaction_type = TransactionType.IN if quantity > 0 else TransactionType.OUT
    return _apply_stock_change(store, item, new_stock, transaction_type, reason.strip(), reference, notes)


def set_stock(store, inventory_item_id: str, new_stock: float, reason: str = "Stock count", notes: Optional[str] = None) -> InventoryItem:
    """Set an absolute stock level (physical count). Writes an "adjustment" transaction."""
    if new_stock < 0:
        raise ValidationError("Stock cannot be negative")
    item = store.require("inventory_items", inventory_item_id)
    if new_stock == item.current_stock:
        raise ValidationError(f"Stock is already {new_stock:g} {item.unit}")
    return _apply_stock_change(store, item, new_stock, TransactionType.ADJUSTMENT, reason, None, notes)


def list_transactions(store, inventory_item_id: str) -> List[InventoryTransaction]:
    """Newest first."""
    store.require("inventory_items", inventory_item_id)
    transactions = store.query("inventory_transactions", "inventory_item_id", inventory_item_id)
    return _newest_first(transactions)


# ----------------------------------------------------------------------
# Views
# ----------------------------------------------------------------------

def stock_value(current_stock: float, unit_price: float, tax: float) -> float:
    return (current_stock or 0) * calculate_price_with_tax(unit_price, tax)


def create_untracked_item(info: SupplierItemInfo) -> InventoryItemDetail:
    """Zero-stock placeholder for a supplier item nobody tracks yet. Never persisted."""
    return InventoryItemDetail(
        id=None,
        is_tracked=False,
        item_type=info.item_type,
        item_id=info.item_id,
        item_name=info.name,
        supplier_id=info.supplier_id,
        supplier_name=info.supplier_name,
        current_stock=0,
        min_stock_level=0,
        max_stock_level=None,
        unit=info.unit,
        status=InventoryStatus.OUT_OF_STOCK,
        unit_price=info.unit_price,
        tax=info.tax,
        stock_value=0,
    )


def _tracked_detail(item: InventoryItem, info: SupplierItemInfo) -> InventoryItemDetail:
    return InventoryItemDetail(
        id=item.id,
        is_tracked=True,
        item_type=item.item_type,
        item_id=item.item_id,
        item_name=info.name,
        supplier_id=info.supplier_id,
        supplier_name=info.supplier_name,
        current_stock=item.current_stock,
        min_stock_level=item.min_stock_level,
        max_stock_level=item.max_stock_level,
        unit=item.unit,
        status=item.status,
        unit_price=info.unit_price,
        tax=info.tax,
        stock_value=stock_value(item.current_stock, info.unit_price, info.tax),
    )


def list_inventory_with_details(
    store,
    item_type: Optional[InventoryItemType] = None,
    status: Optional[InventoryStatus] = None,
    search: Optional[str] = None,
    include_untracked: bool = True,
) -> List[InventoryItemDetail]:
    """Every supplier item with its stock; untracked ones appear as zero-stock placeholders."""
    tracked = {(i.item_type, i.item_id): i for i in store.get_all("inventory_items")}
    details = []
    for info in list_supplier_items(store):
        item = tracked.get((info.item_type, info.item_id))
        if item is not None:
            details.append(_tracked_detail(item, info))
        elif include_untracked:
            details.append(create_untracked_item(info))

    if item_type is not None:
        details = [d for d in details if d.item_type == item_type]
    if status is not None:
        details = [d for d in details if d.status == status]
    if search:
        term = search.strip().lower()
        details = [d for d in details if term in d.item_name.lower() or term in d.supplier_name.lower()]
    return details


def get_inventory_stats(store) -> InventoryStats:
    details = list_inventory_with_details(store)
    stats = InventoryStats(total_items=len(details))
    for detail in details:
        if detail.is_tracked:
            stats.tracked_items += 1
        else:
            stats.untracked_items += 1
            continue
        if detail.status == InventoryStatus.IN_STOCK:
            stats.in_stock += 1
        elif detail.status == InventoryStatus.LOW_STOCK:
            stats.low_stock += 1
        elif detail.status == InventoryStatus.OUT_OF_STOCK:
            stats.out_of_stock += 1
        else:
            stats.overstock += 1
        stats.total_value += detail.stock_value
        type_key = detail.item_type.value
        stats.value_by_type[type_key] = stats.value_by_type.get(type_key, 0) + detail.stock_value
        stats.value_by_supplier[detail.supplier_name] = (
            stats.value_by_supplier.get(detail.supplier_name, 0) + detail.stock_value
        )

    for alert in list_alerts(store):
        if alert.severity == AlertSeverity.CRITICAL:
            stats.critical_alerts += 1
        elif alert.severity == AlertSeverity.WARNING:
            stats.warning_alerts += 1
    return stats


def generate_missing_inventory_items(store, min_stock_level: Optional[float] = None) -> List[InventoryItem]:
    """Start tracking (with zero stock) every supplier item that has no inventory row yet."""
    tracked = {(i.item_type, i.item_id) for i in store.get_all("inventory_items")}
    created = []
    with store.transaction():
        for info in list_supplier_items(store):
            if (info.item_type, info.item_id) in tracked:
                continue
            created.append(create_inventory_item(
                store, info.item_type, info.item_id, current_stock=0, min_stock_level=min_stock_level,
            ))
    logger.info(f"Generated {len(created)} missing inventory items")
    return created
