"""
Inventory API: stock of supplier items, the transaction ledger and stock alerts.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from mfgops.core.dependencies import get_store
from mfgops.core.store import Store
from mfgops.models.inventory import InventoryItemType, InventoryStatus
from mfgops.schemas.common import DeleteResponse
from mfgops.schemas.inventory import (
    InventoryAlertResponse,
    InventoryItemCreate,
    InventoryItemListResponse,
    InventoryItemResponse,
    InventoryItemUpdate,
    InventoryStats,
    InventoryTransactionResponse,
    SetStockRequest,
    StockAdjustmentRequest,
)
from mfgops.services.inventory_service import (
    adjust_stock,
    create_inventory_item,
    delete_inventory_item,
    generate_missing_inventory_items,
    get_inventory_item,
    get_inventory_stats,
    list_alerts,
    list_inventory_with_details,
    list_transactions,
    mark_alert_read,
    mark_all_alerts_read,
    resolve_alert,
    set_stock,
    sweep_alerts,
    update_inventory_item,
)

router = APIRouter()


@router.get("", response_model=InventoryItemListResponse)
def get_inventory(
    item_type: Optional[InventoryItemType] = Query(None),
    status_filter: Optional[InventoryStatus] = Query(None, alias="status"),
    search: Optional[str] = Query(None),
    include_untracked: bool = Query(True),
    store: Store = Depends(get_store),
):
    """Every supplier item with its stock. Untracked items are zero-stock placeholders with is_tracked false."""
    items = list_inventory_with_details(
        store,
        item_type=item_type,
        status=status_filter,
        search=search,
        include_untracked=include_untracked,
    )
    return InventoryItemListResponse(total=len(items), items=items)


@router.get("/stats", response_model=InventoryStats)
def inventory_stats(store: Store = Depends(get_store)):
    return get_inventory_stats(store)


@router.post("/generate", response_model=List[InventoryItemResponse], status_code=status.HTTP_201_CREATED)
def generate_items(
    min_stock_level: Optional[float] = Query(None, ge=0),
    store: Store = Depends(get_store),
):
    """Start tracking every supplier item that has no inventory row yet."""
    return generate_missing_inventory_items(store, min_stock_level=min_stock_level)


# ============================================================================
# Alerts
# ============================================================================

@router.get("/alerts", response_model=List[InventoryAlertResponse])
def get_alerts(
    include_resolved: bool = Query(False),
    inventory_item_id: Optional[str] = Query(None),
    store: Store = Depends(get_store),
):
    return list_alerts(store, include_resolved=include_resolved, inventory_item_id=inventory_item_id)


@router.post("/alerts/sweep")
def sweep_alerts_route(store: Store = Depends(get_store)):
    return {"created": sweep_alerts(store)}


@router.post("/alerts/read-all")
def mark_all_read_route(store: Store = Depends(get_store)):
    return {"updated": mark_all_alerts_read(store)}


@router.post("/alerts/{alert_id}/read", response_model=InventoryAlertResponse)
def mark_read_route(alert_id: str, store: Store = Depends(get_store)):
    return mark_alert_read(store, alert_id)


@router.post("/alerts/{alert_id}/resolve", response_model=InventoryAlertResponse)
def resolve_alert_route(alert_id: str, store: Store = Depends(get_store)):
    return resolve_alert(store, alert_id)


# ============================================================================
# Items
# ============================================================================

@router.post("/items", response_model=InventoryItemResponse, status_code=status.HTTP_201_CREATED)
def create_item_route(data: InventoryItemCreate, store: Store = Depends(get_store)):
    return create_inventory_item(store, **data.model_dump())


@router.get("/items/{inventory_item_id}", response_model=InventoryItemResponse)
def get_item(inventory_item_id: str, store: Store = Depends(get_store)):
    item = get_inventory_item(store, inventory_item_id)
    if not item:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Inventory item not found")
    return item


@router.put("/items/{inventory_item_id}", response_model=InventoryItemResponse)
def update_item_route(inventory_item_id: str, data: InventoryItemUpdate, store: Store = Depends(get_store)):
    return update_inventory_item(store, inventory_item_id, **data.model_dump())


@router.delete("/items/{inventory_item_id}", response_model=DeleteResponse)
def delete_item_route(inventory_item_id: str, store: Store = Depends(get_store)):
    delete_inventory_item(store, inventory_item_id)
    return DeleteResponse(message=f"Inventory item {inventory_item_id} deleted")


@router.post("/items/{inventory_item_id}/adjust", response_model=InventoryItemResponse)
def adjust_stock_route(inventory_item_id: str, data: StockAdjustmentRequest, store: Store = Depends(get_store)):
    """Signed change: positive quantities add stock, negative ones remove it."""
    return adjust_stock(
        store,
        inventory_item_id,
        data.quantity,
        data.reason,
        reference=data.reference,
        notes=data.notes,
    )


@router.post("/items/{inventory_item_id}/set", response_model=InventoryItemResponse)
def set_stock_route(inventory_item_id: str, data: SetStockRequest, store: Store = Depends(get_store)):
    return set_stock(store, inventory_item_id, data.new_stock, reason=data.reason, notes=data.notes)


@router.get("/items/{inventory_item_id}/transactions", response_model=List[InventoryTransactionResponse])
def get_transactions(inventory_item_id: str, store: Store = Depends(get_store)):
    return list_transactions(store, inventory_item_id)
