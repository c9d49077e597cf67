from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from mfgops.core.dependencies import get_store
from mfgops.core.store import Store
from mfgops.schemas.catalog import (
    LabelCreate,
    LabelResponse,
    LabelUpdate,
    SupplierLabelCreate,
    SupplierLabelResponse,
    SupplierOfferUpdate,
)
from mfgops.schemas.common import DeleteResponse
from mfgops.services.catalog_service import (
    create_label,
    create_supplier_label,
    delete_label,
    delete_supplier_label,
    get_all_labels,
    get_all_supplier_labels,
    update_label,
    update_supplier_label,
)

router = APIRouter()


@router.get("", response_model=List[LabelResponse])
def get_labels(store: Store = Depends(get_store)):
    return get_all_labels(store)


@router.post("", response_model=LabelResponse, status_code=status.HTTP_201_CREATED)
def create_label_route(data: LabelCreate, store: Store = Depends(get_store)):
    return create_label(store, data.model_dump())


@router.get("/suppliers", response_model=List[SupplierLabelResponse])
def get_supplier_labels(label_id: Optional[str] = Query(None), store: Store = Depends(get_store)):
    return get_all_supplier_labels(store, label_id=label_id)


@router.post("/suppliers", response_model=SupplierLabelResponse, status_code=status.HTTP_201_CREATED)
def create_supplier_label_route(data: SupplierLabelCreate, store: Store = Depends(get_store)):
    return create_supplier_label(store, data.model_dump())


@router.put("/suppliers/{supplier_label_id}", response_model=SupplierLabelResponse)
def update_supplier_label_route(supplier_label_id: str, data: SupplierOfferUpdate, store: Store = Depends(get_store)):
    return update_supplier_label(store, supplier_label_id, data.model_dump(exclude_unset=True))


@router.delete("/suppliers/{supplier_label_id}", response_model=DeleteResponse)
def delete_supplier_label_route(supplier_label_id: str, store: Store = Depends(get_store)):
    """Rejected with 409 while a product variant uses the label front or back."""
    delete_supplier_label(store, supplier_label_id)
    return DeleteResponse(message=f"Supplier label {supplier_label_id} deleted")


@router.put("/{label_id}", response_model=LabelResponse)
def update_label_route(label_id: str, data: LabelUpdate, store: Store = Depends(get_store)):
    return update_label(store, label_id, data.model_dump(exclude_unset=True))


@router.delete("/{label_id}", response_model=DeleteResponse)
def delete_label_route(label_id: str, store: Store = Depends(get_store)):
    delete_label(store, label_id)
    return DeleteResponse(message=f"Label {label_id} deleted")
