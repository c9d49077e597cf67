from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from mfgops.core.dependencies import get_store
from mfgops.core.store import Store
from mfgops.schemas.common import DeleteResponse
from mfgops.schemas.supplier import (
    SupplierCreate,
    SupplierListResponse,
    SupplierResponse,
    SupplierUpdate,
)
from mfgops.services.supplier_service import (
    create_supplier,
    delete_supplier,
    get_all_suppliers,
    get_supplier_by_id,
    update_supplier,
)

router = APIRouter()


@router.get("", response_model=SupplierListResponse)
def get_suppliers(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=100),
    search: Optional[str] = Query(None),
    active_only: bool = Query(False),
    store: Store = Depends(get_store),
):
    """Get all suppliers with optional search filtering."""
    suppliers, total = get_all_suppliers(store, skip=skip, limit=limit, search=search, active_only=active_only)
    return SupplierListResponse(total=total, suppliers=suppliers)


@router.get("/{supplier_id}", response_model=SupplierResponse)
def get_supplier(supplier_id: str, store: Store = Depends(get_store)):
    supplier = get_supplier_by_id(store, supplier_id)
    if not supplier:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Supplier not found")
    return supplier


@router.post("", response_model=SupplierResponse, status_code=status.HTTP_201_CREATED)
def create_supplier_route(supplier_data: SupplierCreate, store: Store = Depends(get_store)):
    return create_supplier(store, supplier_data.model_dump())


@router.put("/{supplier_id}", response_model=SupplierResponse)
def update_supplier_route(supplier_id: str, supplier_data: SupplierUpdate, store: Store = Depends(get_store)):
    return update_supplier(store, supplier_id, supplier_data.model_dump(exclude_unset=True))


@router.delete("/{supplier_id}", response_model=DeleteResponse)
def delete_supplier_route(supplier_id: str, store: Store = Depends(get_store)):
    """Rejected with 409 while the supplier still has material, packaging or label offers."""
    delete_supplier(store, supplier_id)
    return DeleteResponse(message=f"Supplier {supplier_id} deleted")
