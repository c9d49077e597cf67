from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from mfgops.core.dependencies import get_store
from mfgops.core.store import Store
from mfgops.models.product import ProductStatus
from mfgops.schemas.common import DeleteResponse
from mfgops.schemas.product import (
    ProductCreate,
    ProductListResponse,
    ProductResponse,
    ProductUpdate,
    ProductVariantCreate,
    ProductVariantResponse,
    ProductVariantUpdate,
    VariantCostAnalysis,
)
from mfgops.services.product_service import (
    analyze_variant_cost,
    create_product,
    create_product_variant,
    delete_product,
    delete_product_variant,
    get_all_products,
    get_product_by_id,
    get_product_variants,
    update_product,
    update_product_variant,
)

router = APIRouter()


@router.get("", response_model=ProductListResponse)
def get_products(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=100),
    search: Optional[str] = Query(None),
    status_filter: Optional[ProductStatus] = Query(None, alias="status"),
    store: Store = Depends(get_store),
):
    products, total = get_all_products(store, skip=skip, limit=limit, search=search, status=status_filter)
    return ProductListResponse(total=total, products=products)


@router.post("", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
def create_product_route(data: ProductCreate, store: Store = Depends(get_store)):
    """recipe_ref is {"kind": "recipe" | "variant", "id": ...} and must exist."""
    return create_product(
        store,
        name=data.name,
        recipe_ref=data.recipe_ref,
        description=data.description,
        status=data.status,
        notes=data.notes,
    )


@router.put("/variants/{variant_id}", response_model=ProductVariantResponse)
def update_variant_route(variant_id: str, data: ProductVariantUpdate, store: Store = Depends(get_store)):
    return update_product_variant(store, variant_id, data.model_dump(exclude_unset=True))


@router.delete("/variants/{variant_id}", response_model=DeleteResponse)
def delete_variant_route(variant_id: str, store: Store = Depends(get_store)):
    delete_product_variant(store, variant_id)
    return DeleteResponse(message=f"Product variant {variant_id} deleted")


@router.get("/variants/{variant_id}/cost", response_model=VariantCostAnalysis)
def variant_cost(variant_id: str, store: Store = Depends(get_store)):
    """Cost of one unit of the variant with margin warnings."""
    return analyze_variant_cost(store, variant_id)


@router.get("/{product_id}", response_model=ProductResponse)
def get_product(product_id: str, store: Store = Depends(get_store)):
    product = get_product_by_id(store, product_id)
    if not product:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")
    return product


@router.put("/{product_id}", response_model=ProductResponse)
def update_product_route(product_id: str, data: ProductUpdate, store: Store = Depends(get_store)):
    return update_product(store, product_id, data.model_dump(exclude_unset=True))


@router.delete("/{product_id}", response_model=DeleteResponse)
def delete_product_route(product_id: str, store: Store = Depends(get_store)):
    delete_product(store, product_id)
    return DeleteResponse(message=f"Product {product_id} deleted")


@router.get("/{product_id}/variants", response_model=List[ProductVariantResponse])
def list_variants(product_id: str, store: Store = Depends(get_store)):
    return get_product_variants(store, product_id)


@router.post("/{product_id}/variants", response_model=ProductVariantResponse, status_code=status.HTTP_201_CREATED)
def create_variant_route(product_id: str, data: ProductVariantCreate, store: Store = Depends(get_store)):
    return create_product_variant(store, product_id, data.model_dump())
