from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from mfgops.core.dependencies import get_store
from mfgops.core.store import Store
from mfgops.schemas.catalog import (
    PackagingCreate,
    PackagingResponse,
    PackagingUpdate,
    SupplierOfferUpdate,
    SupplierPackagingCreate,
    SupplierPackagingResponse,
)
from mfgops.schemas.common import DeleteResponse
from mfgops.services.catalog_service import (
    create_packaging,
    create_supplier_packaging,
    delete_packaging,
    delete_supplier_packaging,
    get_all_packaging,
    get_all_supplier_packaging,
    update_packaging,
    update_supplier_packaging,
)

router = APIRouter()


@router.get("", response_model=List[PackagingResponse])
def get_packaging(store: Store = Depends(get_store)):
    return get_all_packaging(store)


@router.post("", response_model=PackagingResponse, status_code=status.HTTP_201_CREATED)
def create_packaging_route(data: PackagingCreate, store: Store = Depends(get_store)):
    return create_packaging(store, data.model_dump())


@router.get("/suppliers", response_model=List[SupplierPackagingResponse])
def get_supplier_packaging(packaging_id: Optional[str] = Query(None), store: Store = Depends(get_store)):
    return get_all_supplier_packaging(store, packaging_id=packaging_id)


@router.post("/suppliers", response_model=SupplierPackagingResponse, status_code=status.HTTP_201_CREATED)
def create_supplier_packaging_route(data: SupplierPackagingCreate, store: Store = Depends(get_store)):
    return create_supplier_packaging(store, data.model_dump())


@router.put("/suppliers/{supplier_packaging_id}", response_model=SupplierPackagingResponse)
def update_supplier_packaging_route(
    supplier_packaging_id: str,
    data: SupplierOfferUpdate,
    store: Store = Depends(get_store),
):
    return update_supplier_packaging(store, supplier_packaging_id, data.model_dump(exclude_unset=True))


@router.delete("/suppliers/{supplier_packaging_id}", response_model=DeleteResponse)
def delete_supplier_packaging_route(supplier_packaging_id: str, store: Store = Depends(get_store)):
    delete_supplier_packaging(store, supplier_packaging_id)
    return DeleteResponse(message=f"Supplier packaging {supplier_packaging_id} deleted")


@router.put("/{packaging_id}", response_model=PackagingResponse)
def update_packaging_route(packaging_id: str, data: PackagingUpdate, store: Store = Depends(get_store)):
    return update_packaging(store, packaging_id, data.model_dump(exclude_unset=True))


@router.delete("/{packaging_id}", response_model=DeleteResponse)
def delete_packaging_route(packaging_id: str, store: Store = Depends(get_store)):
    delete_packaging(store, packaging_id)
    return DeleteResponse(message=f"Packaging {packaging_id} deleted")
