"""
Production batch API: CRUD, cost analysis, material/packaging/label requirements and
purchase orders generated from those requirements.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from mfgops.core.dependencies import get_store
from mfgops.core.store import Store
from mfgops.models.batch import BatchStatus
from mfgops.schemas.batch import (
    BatchCreate,
    BatchListResponse,
    BatchResponse,
    BatchStatusUpdate,
    BatchUpdate,
)
from mfgops.schemas.common import DeleteResponse
from mfgops.schemas.costing import BatchCostAnalysis, ProcessedVariant
from mfgops.schemas.purchase_order import OrdersFromRequirementsRequest, PurchaseOrderResponse
from mfgops.schemas.requirements import BatchRequirementsAnalysis
from mfgops.services.batch_calculations import calculate_batch_cost_analysis, process_batch_variants
from mfgops.services.batch_requirements import calculate_batch_requirements
from mfgops.services.batch_service import (
    create_batch,
    delete_batch,
    get_all_batches,
    get_batch_by_id,
    update_batch,
    update_batch_status,
)
from mfgops.services.purchase_order_service import create_orders_from_requirements

router = APIRouter()


def _get_batch_or_404(store: Store, batch_id: str):
    batch = get_batch_by_id(store, batch_id)
    if not batch:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Production batch not found")
    return batch


@router.get("", response_model=BatchListResponse)
def get_batches(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=100),
    search: Optional[str] = Query(None),
    status_filter: Optional[BatchStatus] = Query(None, alias="status"),
    store: Store = Depends(get_store),
):
    batches, total = get_all_batches(store, skip=skip, limit=limit, status=status_filter, search=search)
    return BatchListResponse(total=total, batches=batches)


@router.post("", response_model=BatchResponse, status_code=status.HTTP_201_CREATED)
def create_batch_route(data: BatchCreate, store: Store = Depends(get_store)):
    return create_batch(store, data.model_dump())


@router.get("/{batch_id}", response_model=BatchResponse)
def get_batch(batch_id: str, store: Store = Depends(get_store)):
    return _get_batch_or_404(store, batch_id)


@router.put("/{batch_id}", response_model=BatchResponse)
def update_batch_route(batch_id: str, data: BatchUpdate, store: Store = Depends(get_store)):
    return update_batch(store, batch_id, data.model_dump(exclude_unset=True))


@router.patch("/{batch_id}/status", response_model=BatchResponse)
def update_batch_status_route(batch_id: str, data: BatchStatusUpdate, store: Store = Depends(get_store)):
    return update_batch_status(store, batch_id, data.status)


@router.delete("/{batch_id}", response_model=DeleteResponse)
def delete_batch_route(batch_id: str, store: Store = Depends(get_store)):
    delete_batch(store, batch_id)
    return DeleteResponse(message=f"Production batch {batch_id} deleted")


@router.get("/{batch_id}/variants", response_model=List[ProcessedVariant])
def batch_variants(batch_id: str, store: Store = Depends(get_store)):
    """Batch lines resolved to unit counts; lines yielding no whole unit are left out."""
    return process_batch_variants(store, _get_batch_or_404(store, batch_id))


@router.get("/{batch_id}/cost-analysis", response_model=BatchCostAnalysis)
def batch_cost_analysis(batch_id: str, store: Store = Depends(get_store)):
    return calculate_batch_cost_analysis(store, _get_batch_or_404(store, batch_id))


@router.get("/{batch_id}/requirements", response_model=BatchRequirementsAnalysis)
def batch_requirements(batch_id: str, store: Store = Depends(get_store)):
    return calculate_batch_requirements(store, _get_batch_or_404(store, batch_id))


@router.post(
    "/{batch_id}/purchase-orders",
    response_model=List[PurchaseOrderResponse],
    status_code=status.HTTP_201_CREATED,
)
def batch_purchase_orders(
    batch_id: str,
    data: Optional[OrdersFromRequirementsRequest] = None,
    store: Store = Depends(get_store),
):
    """Draft one purchase order per supplier for the batch's shortages (or full requirements)."""
    shortages_only = data.shortages_only if data else True
    return create_orders_from_requirements(store, batch_id, shortages_only=shortages_only)
