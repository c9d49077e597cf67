from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from mfgops.core.dependencies import get_store
from mfgops.core.store import Store
from mfgops.models.purchase_order import PurchaseOrderStatus
from mfgops.schemas.common import DeleteResponse
from mfgops.schemas.purchase_order import (
    OrderCompletion,
    PurchaseOrderCreate,
    PurchaseOrderListResponse,
    PurchaseOrderResponse,
    PurchaseOrderStatusUpdate,
    PurchaseOrderUpdate,
    ReceiveItemsRequest,
)
from mfgops.services.purchase_order_service import (
    calculate_order_completion,
    create_purchase_order,
    delete_purchase_order,
    get_all_purchase_orders,
    get_purchase_order_by_id,
    receive_items,
    update_purchase_order,
    update_purchase_order_status,
)

router = APIRouter()


def _get_order_or_404(store: Store, purchase_order_id: str):
    order = get_purchase_order_by_id(store, purchase_order_id)
    if not order:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Purchase order not found")
    return order


@router.get("", response_model=PurchaseOrderListResponse)
def get_purchase_orders(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=100),
    status_filter: Optional[PurchaseOrderStatus] = Query(None, alias="status"),
    supplier_id: Optional[str] = Query(None),
    batch_id: Optional[str] = Query(None),
    store: Store = Depends(get_store),
):
    orders, total = get_all_purchase_orders(
        store, skip=skip, limit=limit, status=status_filter, supplier_id=supplier_id, batch_id=batch_id,
    )
    return PurchaseOrderListResponse(total=total, purchase_orders=orders)


@router.post("", response_model=PurchaseOrderResponse, status_code=status.HTTP_201_CREATED)
def create_purchase_order_route(data: PurchaseOrderCreate, store: Store = Depends(get_store)):
    """Creates a draft order. Prices and tax default to the supplier's current offer."""
    return create_purchase_order(
        store,
        supplier_id=data.supplier_id,
        items=[i.model_dump() for i in data.items],
        expected_delivery_date=data.expected_delivery_date,
        batch_id=data.batch_id,
        notes=data.notes,
    )


@router.get("/{purchase_order_id}", response_model=PurchaseOrderResponse)
def get_purchase_order(purchase_order_id: str, store: Store = Depends(get_store)):
    return _get_order_or_404(store, purchase_order_id)


@router.get("/{purchase_order_id}/completion", response_model=OrderCompletion)
def get_completion(purchase_order_id: str, store: Store = Depends(get_store)):
    return calculate_order_completion(_get_order_or_404(store, purchase_order_id))


@router.put("/{purchase_order_id}", response_model=PurchaseOrderResponse)
def update_purchase_order_route(purchase_order_id: str, data: PurchaseOrderUpdate, store: Store = Depends(get_store)):
    return update_purchase_order(store, purchase_order_id, data.model_dump(exclude_unset=True))


@router.patch("/{purchase_order_id}/status", response_model=PurchaseOrderResponse)
def update_status_route(purchase_order_id: str, data: PurchaseOrderStatusUpdate, store: Store = Depends(get_store)):
    """Illegal moves (e.g. draft -> delivered) are rejected with 409."""
    return update_purchase_order_status(store, purchase_order_id, data.status)


@router.post("/{purchase_order_id}/receive", response_model=PurchaseOrderResponse)
def receive_items_route(purchase_order_id: str, data: ReceiveItemsRequest, store: Store = Depends(get_store)):
    return receive_items(store, purchase_order_id, data.received)


@router.delete("/{purchase_order_id}", response_model=DeleteResponse)
def delete_purchase_order_route(purchase_order_id: str, store: Store = Depends(get_store)):
    delete_purchase_order(store, purchase_order_id)
    return DeleteResponse(message=f"Purchase order {purchase_order_id} deleted")
